"""Tests for the payload assembler."""

import gzip
import json

import pytest

from forwarder import payload as payload_module
from forwarder.models import InvocationContext
from forwarder.payload import (
    LOGS_SOURCE,
    VERSION,
    CompressionError,
    assemble,
    build_payload,
    common_attributes,
)

CONTEXT = InvocationContext(function_name="EventHubForwarder", invocation_id="inv-1")


def test_common_attributes():
    common = common_attributes(CONTEXT, {"env": "prod"})
    assert common == {
        "attributes": {
            "plugin": {"type": LOGS_SOURCE, "version": VERSION},
            "azure": {"forwardername": "EventHubForwarder", "invocationid": "inv-1"},
            "tags": {"env": "prod"},
        }
    }


def test_build_payload_single_envelope():
    records = [{"message": "a"}, {"message": "b"}]
    envelope = build_payload(records, CONTEXT, {})
    assert len(envelope) == 1
    assert envelope[0]["logs"] is records
    assert envelope[0]["common"]["attributes"]["tags"] == {}


@pytest.mark.asyncio
async def test_assemble_gzips_json_envelope():
    records = [{"message": "a"}, {"message": "b"}]
    data = await assemble(records, CONTEXT, {"env": "prod"})
    assert data[:2] == b"\x1f\x8b"
    decoded = json.loads(gzip.decompress(data))
    assert decoded[0]["logs"] == records
    assert decoded[0]["common"]["attributes"]["tags"] == {"env": "prod"}


@pytest.mark.asyncio
async def test_assemble_stringifies_unknown_values():
    class Opaque:
        def __str__(self):
            return "opaque"

    data = await assemble([{"value": Opaque()}], CONTEXT, {})
    assert json.loads(gzip.decompress(data))[0]["logs"] == [{"value": "opaque"}]


@pytest.mark.asyncio
async def test_compression_failure_raises(monkeypatch):
    def broken(data):
        raise OSError("disk on fire")

    monkeypatch.setattr(payload_module.gzip, "compress", broken)
    with pytest.raises(CompressionError):
        await assemble([{"message": "a"}], CONTEXT, {})


@pytest.mark.asyncio
async def test_too_deeply_nested_record_raises_compression_error():
    nested = []
    for _ in range(200000):
        nested = [nested]
    with pytest.raises(CompressionError):
        await assemble([{"message": nested}], CONTEXT, {})
