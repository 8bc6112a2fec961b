"""Test request-body helpers."""
import re
from datetime import datetime, timezone

import pytest

from customerio.errors import NodeOperationError
from customerio.helpers import (
    clean_object,
    collect_named_values,
    deep_merge,
    format_timestamp,
    generate_anonymous_id,
    iso_timestamp,
    parse_json,
    parse_json_lenient,
    parse_timestamp,
    prepare_attributes,
    prepare_event_data,
    prepare_filters,
    prepare_object_attributes,
    split_list,
)

NEW_YEAR_2024 = 1704067200


def test_prepare_attributes_decodes_json_values():
    attrs = prepare_attributes({
        "attribute_values": [
            {"key": "plan", "value": "pro"},
            {"key": "seats", "value": "42"},
            {"key": "flags", "value": '{"beta": true}'},
        ]
    })
    assert attrs == {"plan": "pro", "seats": 42, "flags": {"beta": True}}


def test_prepare_attributes_reads_name_key_and_skips_blank_keys():
    attrs = prepare_attributes({"attribute": [{"name": "first_name", "value": "Ada"}, {"name": "", "value": "x"}]})
    assert attrs == {"first_name": "Ada"}


def test_prepare_attributes_empty():
    assert prepare_attributes(None) == {}
    assert prepare_attributes({}) == {}


def test_prepare_object_attributes_ignores_name_group():
    collection = {"attribute": [{"name": "a", "value": "1"}], "attribute_values": [{"key": "b", "value": "2"}]}
    assert prepare_object_attributes(collection) == {"b": 2}


def test_collect_named_values_keeps_strings():
    traits = collect_named_values({"trait": [{"name": "age", "value": "30"}]}, "trait")
    assert traits == {"age": "30"}


def test_split_list_trims_entries():
    assert split_list("a@x.io, b@x.io ,c@x.io") == ["a@x.io", "b@x.io", "c@x.io"]


def test_parse_json_strict():
    assert parse_json('{"a": 1}', "bad") == {"a": 1}
    assert parse_json({"a": 1}, "bad") == {"a": 1}
    with pytest.raises(NodeOperationError, match="Invalid JSON in identifiers"):
        parse_json("{oops", "Invalid JSON in identifiers")


def test_parse_json_rejects_wrong_shape():
    assert parse_json("[1]", "bad", expected=list) == [1]
    with pytest.raises(NodeOperationError, match="Invalid JSON in search query"):
        parse_json("[1]", "Invalid JSON in search query", expected=dict)
    with pytest.raises(NodeOperationError, match="Invalid JSON in identifiers"):
        parse_json(["not", "a", "dict"], "Invalid JSON in identifiers", expected=dict)


def test_parse_json_lenient_fallbacks():
    assert parse_json_lenient("{oops") == "{oops"
    assert parse_json_lenient("{oops", fallback={}) == {}
    assert parse_json_lenient("[1, 2]") == [1, 2]


def test_format_timestamp_variants():
    assert format_timestamp(None) is None
    assert format_timestamp("") is None
    assert format_timestamp(0) is None
    assert format_timestamp(NEW_YEAR_2024) == NEW_YEAR_2024
    assert format_timestamp(NEW_YEAR_2024 * 1000) == NEW_YEAR_2024
    assert format_timestamp(str(NEW_YEAR_2024)) == NEW_YEAR_2024
    assert format_timestamp("2024-01-01T00:00:00Z") == NEW_YEAR_2024
    assert format_timestamp("2024-01-01T01:00:00+01:00") == NEW_YEAR_2024
    assert format_timestamp(datetime(2024, 1, 1)) == NEW_YEAR_2024
    assert format_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc)) == NEW_YEAR_2024


def test_format_timestamp_rejects_garbage():
    with pytest.raises(NodeOperationError):
        format_timestamp("next tuesday")
    with pytest.raises(NodeOperationError):
        format_timestamp(True)


def test_parse_timestamp():
    assert parse_timestamp(NEW_YEAR_2024) == "2024-01-01T00:00:00.000Z"
    assert parse_timestamp(str(NEW_YEAR_2024)) == "2024-01-01T00:00:00.000Z"
    assert parse_timestamp(0) is None
    assert parse_timestamp("soon") is None


def test_iso_timestamp():
    assert iso_timestamp("") is None
    assert iso_timestamp("2024-01-01T00:00:00Z") == "2024-01-01T00:00:00Z"
    assert iso_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc)) == "2024-01-01T00:00:00.000Z"
    assert iso_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"
    assert iso_timestamp(NEW_YEAR_2024 * 1000) == "2024-01-01T00:00:00.000Z"
    with pytest.raises(NodeOperationError, match="Invalid timestamp"):
        iso_timestamp({"at": NEW_YEAR_2024})
    with pytest.raises(NodeOperationError, match="Invalid timestamp"):
        iso_timestamp(True)


def test_prepare_filters_keeps_false_and_zero():
    assert prepare_filters({"a": None, "b": "", "c": False, "d": 0, "e": "x"}) == {"c": False, "d": 0, "e": "x"}


def test_clean_object_is_recursive():
    cleaned = clean_object({
        "name": "Ada",
        "email": "",
        "missing": None,
        "nested": {"gone": None, "kept": 1},
        "empty": {"also_gone": ""},
        "tags": [],
        "flag": False,
    })
    assert cleaned == {"name": "Ada", "nested": {"kept": 1}, "tags": [], "flag": False}


def test_deep_merge():
    merged = deep_merge({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}, "e": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 1, "e": 4}


def test_generate_anonymous_id_format():
    first, second = generate_anonymous_id(), generate_anonymous_id()
    assert re.match(r"^anon_\d+_[0-9a-z]{13}$", first)
    assert first != second


def test_prepare_event_data():
    assert prepare_event_data("signup") == {"name": "signup", "data": {}}
    assert prepare_event_data("signup", {"plan": "pro"}, NEW_YEAR_2024) == {
        "name": "signup",
        "data": {"plan": "pro"},
        "timestamp": NEW_YEAR_2024,
    }
