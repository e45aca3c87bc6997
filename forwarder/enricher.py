"""Metadata enricher — derives Azure resource fields and epoch timestamps."""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

from forwarder.models import LogRecord

RESOURCE_PREFIX = "/subscriptions/"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _child(record: LogRecord, key: str) -> dict:
    value = record.get(key)
    if not isinstance(value, dict):
        value = {}
        record[key] = value
    return value


def add_metadata(record: LogRecord) -> LogRecord:
    """Add subscription, resource group, source and resource type fields.

    Only applies when ``resourceId`` looks like an Azure resource id, e.g.
    ``/subscriptions/<sub>/resourceGroups/<rg>/providers/<ns>/<type>/<name>``.
    Segments missing from a short id are skipped.
    """
    if not isinstance(record, dict):
        return record
    resource_id = record.get("resourceId")
    if not isinstance(resource_id, str):
        return record
    lowered = resource_id.lower()
    if not lowered.startswith(RESOURCE_PREFIX):
        return record

    segments = lowered.split("/")
    if len(segments) <= 2:
        return record

    metadata = _child(record, "metadata")
    azure = _child(record, "azure")
    metadata["subscriptionId"] = segments[2]
    azure["resourceId"] = lowered

    if len(segments) > 4:
        metadata["resourceGroup"] = segments[4]
    if len(segments) > 6 and segments[6]:
        metadata["source"] = segments[6].replace("microsoft.", "azure.", 1)
    if len(segments) > 7:
        azure["resourceType"] = segments[6] + "/" + segments[7]
    if len(segments) > 8:
        record["displayName"] = segments[8]
    return record


def parse_timestamp(value: Any) -> Optional[int]:
    """Return epoch milliseconds for an ISO-8601 or RFC 2822 date string.

    Naive values are taken as UTC. Returns None when *value* is not a
    parseable string.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - EPOCH) // timedelta(milliseconds=1)


def add_timestamp(record: LogRecord) -> LogRecord:
    """Set ``timestamp`` from ``time``, falling back to ``timeStamp``."""
    if not isinstance(record, dict):
        return record
    for key in ("time", "timeStamp"):
        millis = parse_timestamp(record.get(key))
        if millis is not None:
            record["timestamp"] = millis
            break
    return record


def enrich_records(records: list[LogRecord]) -> list[LogRecord]:
    for record in records:
        add_metadata(record)
    for record in records:
        add_timestamp(record)
    return records
