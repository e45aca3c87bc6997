"""Batch splitter — bisects oversized batches until each compressed payload fits."""

import asyncio
import logging
from typing import Awaitable, Callable

from forwarder.models import BatchOutcome, LogRecord, OutcomeStatus
from forwarder.payload import CompressionError
from forwarder.sender import DeliveryError

logger = logging.getLogger(__name__)

# Logs API limit on the compressed request body
MAX_PAYLOAD_SIZE = 1000 * 1024

Assembler = Callable[[list[LogRecord]], Awaitable[bytes]]
Deliverer = Callable[[bytes], Awaitable[int]]


async def split_and_deliver(
    records: list[LogRecord],
    assemble: Assembler,
    deliver: Deliverer,
    max_size: int = MAX_PAYLOAD_SIZE,
    depth: int = 0,
) -> list[BatchOutcome]:
    """Compress *records* and deliver them, splitting the batch if it is too large.

    Uses a recursive binary split: if the compressed payload exceeds
    *max_size*, the records are cut in half at ``len // 2`` and both halves
    are processed concurrently. Recursion depth is bounded by
    ceil(log2(len(records))).

    Returns one BatchOutcome per leaf sub-batch, in split order. Failures
    are logged here and reported through the outcome status; nothing is
    raised.
    """
    try:
        payload = await assemble(records)
    except CompressionError as exc:
        logger.error(
            "Error during payload compression of %d log(s): %s", len(records), exc
        )
        return [
            BatchOutcome(
                records, OutcomeStatus.COMPRESSION_FAILED, depth=depth, error=str(exc)
            )
        ]

    size = len(payload)
    if size <= max_size:
        return [await _deliver_leaf(records, payload, deliver, depth)]

    if len(records) == 1:
        logger.error(
            "Cannot send the payload as the size of single line exceeds the limit "
            "(%d bytes > %d)",
            size,
            max_size,
        )
        return [
            BatchOutcome(
                records,
                OutcomeStatus.OVERSIZED,
                payload_size=size,
                depth=depth,
                error=f"{size} bytes exceeds {max_size}",
            )
        ]

    mid = len(records) // 2
    logger.debug(
        "Payload of %d bytes over limit, splitting %d logs at %d",
        size,
        len(records),
        mid,
    )
    left, right = await asyncio.gather(
        split_and_deliver(records[:mid], assemble, deliver, max_size, depth + 1),
        split_and_deliver(records[mid:], assemble, deliver, max_size, depth + 1),
    )
    return left + right


async def _deliver_leaf(
    records: list[LogRecord], payload: bytes, deliver: Deliverer, depth: int
) -> BatchOutcome:
    try:
        attempts = await deliver(payload)
    except DeliveryError as exc:
        logger.error(
            "Max retries reached: failed to send logs payload (%d logs): %s",
            len(records),
            exc,
        )
        return BatchOutcome(
            records,
            OutcomeStatus.DELIVERY_FAILED,
            payload_size=len(payload),
            depth=depth,
            attempts=exc.attempts,
            error=str(exc),
        )

    logger.info("Logs payload successfully sent (%d logs)", len(records))
    return BatchOutcome(
        records,
        OutcomeStatus.DELIVERED,
        payload_size=len(payload),
        depth=depth,
        attempts=attempts,
    )
