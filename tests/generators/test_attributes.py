"""Attribute schema mapping tests."""

from __future__ import annotations

import json

import pytest

from blockgen.errors import GenerationError
from blockgen.generators.attributes import (
    build_attribute_schema,
    parse_attributes,
    sanitize_key,
)
from tests._fixtures.records import attributes_json


def _schema(*entries: dict) -> dict:
    return build_attribute_schema(parse_attributes(attributes_json(*entries)))


def test_text_attribute_maps_to_string_with_empty_default() -> None:
    assert _schema({"name": "title", "type": "text"}) == {
        "title": {"type": "string", "default": ""},
    }


@pytest.mark.parametrize(
    ("field_type", "schema_type", "default"),
    [
        ("textarea", "string", ""),
        ("date", "string", ""),
        ("radio", "string", ""),
        ("color", "string", "#000000"),
        ("number", "number", 0),
        ("range", "number", 0),
        ("toggle", "boolean", False),
        ("checkbox", "boolean", False),
        ("link", "object", {"url": "", "text": "", "target": "_self"}),
        ("image", "object", {"id": 0, "url": "", "alt": ""}),
    ],
)
def test_type_mapping_and_defaults(field_type: str, schema_type: str, default: object) -> None:
    schema = _schema({"name": "value", "type": field_type})

    assert schema["value"] == {"type": schema_type, "default": default}


def test_explicit_default_is_coerced_to_schema_type() -> None:
    schema = _schema(
        {"name": "count", "type": "number", "default": "3"},
        {"name": "open", "type": "toggle", "default": "true"},
        {"name": "cta", "type": "link", "default": {"url": "/buy"}},
    )

    assert schema["count"]["default"] == 3
    assert schema["open"]["default"] is True
    assert schema["cta"]["default"] == {"url": "/buy", "text": "", "target": "_self"}


def test_select_enum_starts_with_empty_value_and_includes_default() -> None:
    schema = _schema(
        {
            "name": "size",
            "type": "select",
            "default": "xl",
            "options": [{"label": "Small", "value": "s"}, {"label": "Large", "value": "l"}],
        }
    )

    assert schema["size"]["enum"] == ["", "s", "l", "xl"]
    assert schema["size"]["default"] == "xl"


def test_select_options_accept_newline_separated_string() -> None:
    fields = parse_attributes(attributes_json({"name": "tone", "type": "select", "options": "warm\ncool\n"}))

    assert fields[0].options == [
        {"label": "warm", "value": "warm"},
        {"label": "cool", "value": "cool"},
    ]


def test_names_are_normalised_to_key_form() -> None:
    schema = _schema({"name": "Hero Title!", "type": "text"})

    assert list(schema) == ["herotitle"]
    assert sanitize_key("My_Key-2") == "my_key-2"


def test_unsupported_and_nameless_entries_are_skipped() -> None:
    schema = _schema(
        {"name": "ok", "type": "text"},
        {"name": "weird", "type": "hologram"},
        {"type": "text"},
        "not-an-object",
    )

    assert list(schema) == ["ok"]


def test_range_bounds_are_read_from_nested_or_flat_keys() -> None:
    fields = parse_attributes(
        attributes_json(
            {"name": "a", "type": "range", "range": {"min": 1, "max": 10, "step": 0.5}},
            {"name": "b", "type": "number", "min": "2", "max": 4},
        )
    )

    assert (fields[0].min, fields[0].max, fields[0].step) == (1, 10, 0.5)
    assert (fields[1].min, fields[1].max, fields[1].step) == (2, 4, None)


def test_empty_input_means_no_attributes() -> None:
    assert parse_attributes(None) == []
    assert parse_attributes("   ") == []


@pytest.mark.parametrize("raw", ["{not json", '{"name": "x"}'])
def test_malformed_documents_raise_generation_error(raw: str) -> None:
    with pytest.raises(GenerationError):
        parse_attributes(raw)


def test_schema_derivation_is_deterministic() -> None:
    raw = attributes_json(
        {"name": "title", "type": "text"},
        {"name": "size", "type": "select", "options": ["s", "m"]},
    )

    first = json.dumps(build_attribute_schema(parse_attributes(raw)))
    second = json.dumps(build_attribute_schema(parse_attributes(raw)))

    assert first == second
