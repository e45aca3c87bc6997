"""Tests for the record normalizer."""

import json
import logging

from forwarder.normalizer import coerce_input, flatten, normalize, parse_logs


class TestCoerceInput:
    def test_single_line_string_stays_string(self):
        assert coerce_input('  {"a": 1}\n') == '{"a": 1}'

    def test_multi_line_string_split(self):
        assert coerce_input("one\ntwo\n") == ["one", "two"]

    def test_bytes_decoded(self):
        assert coerce_input(b"one\ntwo") == ["one", "two"]

    def test_list_passed_through(self):
        logs = ["a", "b"]
        assert coerce_input(logs) == ["a", "b"]

    def test_object_serialized(self):
        assert json.loads(coerce_input({"a": 1})) == {"a": 1}


class TestParseLogs:
    def test_single_json_object(self):
        assert parse_logs('{"a": 1}') == {"a": 1}

    def test_single_plain_line_kept(self, caplog):
        caplog.set_level(logging.DEBUG)
        assert parse_logs("plain text") == ["plain text"]
        assert "cannot parse logs to JSON" in caplog.text

    def test_single_json_scalar_wrapped(self):
        assert parse_logs('"hello"') == ["hello"]

    def test_sequence_all_parse(self):
        assert parse_logs(['{"a": 1}', '{"b": 2}']) == [{"a": 1}, {"b": 2}]

    def test_sequence_any_failure_keeps_original(self):
        logs = ['{"a": 1}', "not json"]
        assert parse_logs(logs) is logs

    def test_sequence_of_objects_kept(self):
        logs = [{"a": 1}, {"b": 2}]
        assert parse_logs(logs) is logs

    def test_deeply_nested_line_kept_raw(self):
        deep = "[" * 200000
        assert parse_logs(deep) == [deep]

    def test_deeply_nested_sequence_kept_raw(self):
        logs = ["[" * 200000, "{}"]
        assert parse_logs(logs) is logs


class TestFlatten:
    def test_unrecognized_shapes(self):
        assert flatten([]) == []
        assert flatten([1, 2]) == []
        assert flatten(None) == []

    def test_records_not_a_list(self):
        assert flatten({"records": "oops"}) == []

    def test_records_array_skips_elements_without_records(self):
        parsed = [{"records": [{"a": 1}]}, {"other": True}, {"records": [{"b": 2}]}]
        assert flatten(parsed) == [{"a": 1}, {"b": 2}]


def test_records_object_flattened():
    raw = json.dumps({"records": [{"a": 1}, {"b": 2}, {"c": 3}]})
    assert normalize(raw) == [{"a": 1}, {"b": 2}, {"c": 3}]


def test_records_object_from_dict_input():
    assert normalize({"records": [{"a": 1}, {"b": 2}]}) == [{"a": 1}, {"b": 2}]


def test_records_array_concatenated_in_order():
    raw = [
        json.dumps({"records": [{"n": 1}, {"n": 2}]}),
        json.dumps({"records": [{"n": 3}]}),
    ]
    assert normalize(raw) == [{"n": 1}, {"n": 2}, {"n": 3}]


def test_records_array_from_ndjson_bytes():
    raw = (
        json.dumps({"records": [{"n": 1}]}) + "\n" + json.dumps({"records": [{"n": 2}]})
    ).encode("utf-8")
    assert normalize(raw) == [{"n": 1}, {"n": 2}]


def test_single_json_object_is_sole_record():
    assert normalize('{"message": "hello", "level": "info"}') == [
        {"message": "hello", "level": "info"}
    ]


def test_dict_without_records_is_sole_record():
    assert normalize({"message": "hello"}) == [{"message": "hello"}]


def test_json_array_wrapped_as_messages():
    raw = [{"a": 1}, {"b": 2}]
    assert normalize(raw) == [{"message": {"a": 1}}, {"message": {"b": 2}}]


def test_ndjson_objects_wrapped_as_messages():
    raw = '{"a": 1}\n{"b": 2}'
    assert normalize(raw) == [{"message": {"a": 1}}, {"message": {"b": 2}}]


def test_string_array_wrapped_as_messages():
    raw = ["first line", "second line", "third line"]
    assert normalize(raw) == [{"message": s} for s in raw]


def test_json_string_array():
    assert normalize('["a","b"]') == [{"message": "a"}, {"message": "b"}]
    assert normalize(["a", "b"]) == [{"message": "a"}, {"message": "b"}]


def test_plain_text_lines():
    assert normalize("first\nsecond") == [{"message": "first"}, {"message": "second"}]


def test_single_plain_line():
    assert normalize("just text") == [{"message": "just text"}]


def test_mixed_sequence_falls_back_to_raw_strings():
    raw = ['{"a": 1}', "plain"]
    assert normalize(raw) == [{"message": '{"a": 1}'}, {"message": "plain"}]


def test_invalid_formats_yield_empty():
    assert normalize([]) == []
    assert normalize("") == []
    assert normalize("42") == []
    assert normalize([1, 2, 3]) == []


def test_plain_line_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG)
    normalize("just text")
    levels = [r.levelno for r in caplog.records if "cannot parse" in r.getMessage()]
    assert levels == [logging.DEBUG]


def test_records_object_keeps_non_object_entries():
    assert normalize('{"records": ["plain line", null]}') == ["plain line", None]
