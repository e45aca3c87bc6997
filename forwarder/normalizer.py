"""Record normalizer — flattens every supported input shape into a list of log records."""

import json
import logging
from typing import Any, Union

from forwarder.models import LogRecord

logger = logging.getLogger(__name__)


def coerce_input(raw: Any) -> Union[str, list]:
    """Turn raw trigger input into a single line of text or a sequence.

    Text and bytes are split on newlines; a single line comes back as a
    plain string. Lists and tuples are returned as a list. Anything else
    is serialized to JSON first.
    """
    if isinstance(raw, (list, tuple)):
        return list(raw)

    if isinstance(raw, str):
        text = raw
    elif isinstance(raw, (bytes, bytearray, memoryview)):
        text = bytes(raw).decode("utf-8", errors="replace")
    else:
        text = json.dumps(raw, default=str)

    text = text.strip()
    if not text:
        return []
    lines = text.split("\n")
    if len(lines) == 1:
        return lines[0]
    return lines


def parse_logs(logs: Union[str, list]) -> Any:
    """Try to JSON-decode the coerced input.

    A single line is decoded on its own. For a sequence every element must
    decode, otherwise the original sequence is returned untouched.
    """
    if not isinstance(logs, list):
        try:
            parsed = json.loads(logs)
        except (json.JSONDecodeError, RecursionError):
            logger.debug("cannot parse logs to JSON")
            return [logs]
        if isinstance(parsed, (dict, list)):
            return parsed
        return [parsed]

    try:
        return [json.loads(log) for log in logs]
    except (json.JSONDecodeError, TypeError, RecursionError):
        # Objects that are already decoded, plain-text lines, or nesting
        # too deep to decode
        return logs


def flatten(parsed: Any) -> list[LogRecord]:
    """Classify parsed input and flatten it into log records.

    Returns an empty list when the shape is not recognized.
    """
    if isinstance(parsed, dict):
        if "records" in parsed:
            logger.info("Type of logs: records Object")
            records = parsed["records"]
            return list(records) if isinstance(records, list) else []
        logger.info("Type of logs: JSON Object")
        return [parsed]

    if not isinstance(parsed, list) or not parsed:
        return []

    first = parsed[0]
    if isinstance(first, dict) and "records" in first:
        logger.info("Type of logs: records Array")
        buffer: list[LogRecord] = []
        for message in parsed:
            records = message.get("records") if isinstance(message, dict) else None
            if isinstance(records, list):
                buffer.extend(records)
        return buffer

    if isinstance(first, (dict, list)):
        # Wrapped rather than passed through: the sequence may mix objects
        # and strings, and the Logs API re-parses JSON found in "message".
        logger.info("Type of logs: JSON Array")
        return [{"message": log} for log in parsed]

    if isinstance(first, str):
        logger.info("Type of logs: string Array")
        return [{"message": log} for log in parsed]

    return []


def normalize(raw: Any) -> list[LogRecord]:
    """Normalize raw trigger input into an ordered list of log records."""
    return flatten(parse_logs(coerce_input(raw)))
