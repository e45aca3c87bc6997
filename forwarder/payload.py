"""Payload assembler — builds the Logs API envelope, serializes and gzips it."""

import asyncio
import gzip
import json
import logging

from forwarder.models import InvocationContext, LogRecord

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
LOGS_SOURCE = "azure"


class CompressionError(Exception):
    """Raised when a batch cannot be serialized or compressed."""


def common_attributes(context: InvocationContext, tags: dict[str, str]) -> dict:
    """Attributes shared by every log line in one request."""
    return {
        "attributes": {
            "plugin": {
                "type": LOGS_SOURCE,
                "version": VERSION,
            },
            "azure": {
                "forwardername": context.function_name,
                "invocationid": context.invocation_id,
            },
            "tags": dict(tags),
        },
    }


def build_payload(
    records: list[LogRecord], context: InvocationContext, tags: dict[str, str]
) -> list[dict]:
    return [
        {
            "common": common_attributes(context, tags),
            "logs": records,
        }
    ]


def serialize_payload(payload: list[dict]) -> bytes:
    return json.dumps(payload, default=str).encode("utf-8")


async def assemble(
    records: list[LogRecord], context: InvocationContext, tags: dict[str, str]
) -> bytes:
    """Serialize and gzip-compress the envelope for *records*.

    Raises:
        CompressionError: if the payload cannot be encoded or compressed.
    """
    try:
        data = serialize_payload(build_payload(records, context, tags))
        return await asyncio.to_thread(gzip.compress, data)
    except (TypeError, ValueError, OSError, MemoryError, RecursionError) as exc:
        raise CompressionError(f"failed to compress payload: {exc}") from exc
