"""Attribute definitions authored for a block and their block.json schema."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import GenerationError
from ..logging import get_logger

logger = get_logger("generators.attributes")

SCHEMA_TYPES: Mapping[str, str] = {
    "text": "string",
    "textarea": "string",
    "select": "string",
    "radio": "string",
    "number": "number",
    "range": "number",
    "date": "string",
    "color": "string",
    "link": "object",
    "image": "object",
    "toggle": "boolean",
    "checkbox": "boolean",
}

_TYPE_DEFAULTS: Mapping[str, Any] = {
    "text": "",
    "textarea": "",
    "select": "",
    "radio": "",
    "number": 0,
    "range": 0,
    "date": "",
    "color": "#000000",
    "link": {"url": "", "text": "", "target": "_self"},
    "image": {"id": 0, "url": "", "alt": ""},
    "toggle": False,
    "checkbox": False,
}

_OPTION_TYPES = frozenset({"select", "radio", "checkbox"})
_RANGE_TYPES = frozenset({"number", "range"})
_KEY_STRIP = re.compile(r"[^a-z0-9_\-]")


def sanitize_key(value: str) -> str:
    return _KEY_STRIP.sub("", value.lower())


def type_default(field_type: str) -> Any:
    value = _TYPE_DEFAULTS.get(field_type, "")
    return dict(value) if isinstance(value, dict) else value


@dataclass(frozen=True)
class AttributeField:
    """One normalised attribute entry."""

    name: str
    type: str
    label: str
    id: str
    default: Any = None
    has_default: bool = False
    placeholder: Optional[str] = None
    help: Optional[str] = None
    options: List[Dict[str, str]] = field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

    @property
    def schema_type(self) -> str:
        return SCHEMA_TYPES.get(self.type, "string")

    def resolved_default(self) -> Any:
        base = type_default(self.type)
        if not self.has_default:
            return base
        return _coerce(self.default, self.schema_type, base)


def parse_attributes(raw: Any) -> List[AttributeField]:
    """Parse ``attributesJson`` into normalised fields.

    Empty input means no attributes. Malformed JSON or a document that is not
    an array raises :class:`GenerationError`.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return []
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GenerationError(f"Invalid attributes JSON: {exc.msg}", generator="block-json") from exc
    else:
        data = raw
    if not isinstance(data, list):
        raise GenerationError("Attributes JSON must be an array", generator="block-json")

    fields: List[AttributeField] = []
    seen: set[str] = set()
    for index, entry in enumerate(data):
        parsed = _parse_entry(index, entry)
        if parsed is None:
            continue
        if parsed.name in seen:
            logger.warning("Skipping duplicate attribute '%s'", parsed.name)
            continue
        seen.add(parsed.name)
        fields.append(parsed)
    return fields


def build_attribute_schema(fields: List[AttributeField]) -> Dict[str, Dict[str, Any]]:
    """Return the ``attributes`` mapping written into block.json."""
    schema: Dict[str, Dict[str, Any]] = {}
    for attr in fields:
        default = attr.resolved_default()
        entry: Dict[str, Any] = {"type": attr.schema_type, "default": default}
        if attr.type == "select" and attr.options:
            entry["enum"] = _select_enum(attr.options, default)
        schema[attr.name] = entry
    return schema


def _parse_entry(index: int, entry: Any) -> Optional[AttributeField]:
    if not isinstance(entry, dict):
        logger.warning("Skipping attribute #%d: entry is not an object", index)
        return None
    raw_name = entry.get("name")
    if not isinstance(raw_name, str) or not raw_name.strip():
        logger.warning("Skipping attribute #%d: missing name", index)
        return None
    name = sanitize_key(raw_name)
    if not name:
        logger.warning("Skipping attribute #%d: name %r has no usable characters", index, raw_name)
        return None
    field_type = str(entry.get("type") or "text")
    if field_type not in SCHEMA_TYPES:
        logger.warning("Skipping attribute '%s': unsupported type %r", name, field_type)
        return None

    raw_id = entry.get("id")
    attr_id = sanitize_key(raw_id) if isinstance(raw_id, str) and raw_id.strip() else name
    label = entry.get("label")
    options = _normalise_options(entry.get("options")) if field_type in _OPTION_TYPES else []

    range_info = entry.get("range") if isinstance(entry.get("range"), dict) else {}
    bounds: Dict[str, Optional[float]] = {"min": None, "max": None, "step": None}
    if field_type in _RANGE_TYPES:
        for key in bounds:
            value = range_info.get(key, entry.get(key))
            bounds[key] = _as_number(value)

    return AttributeField(
        name=name,
        type=field_type,
        label=label.strip() if isinstance(label, str) and label.strip() else raw_name,
        id=attr_id or name,
        default=entry.get("default"),
        has_default="default" in entry and entry.get("default") is not None,
        placeholder=_optional_text(entry.get("placeholder")),
        help=_optional_text(entry.get("help")),
        options=options,
        min=bounds["min"],
        max=bounds["max"],
        step=bounds["step"],
    )


def _normalise_options(value: Any) -> List[Dict[str, str]]:
    if isinstance(value, str):
        lines = [line.strip() for line in value.splitlines()]
        return [{"label": line, "value": line} for line in lines if line]
    if not isinstance(value, list):
        return []
    options: List[Dict[str, str]] = []
    for option in value:
        if isinstance(option, dict):
            option_value = option.get("value", "")
            label = option.get("label", option_value)
            options.append({"label": str(label), "value": str(option_value)})
        elif isinstance(option, (str, int, float)) and not isinstance(option, bool):
            options.append({"label": str(option), "value": str(option)})
    return options


def _select_enum(options: List[Dict[str, str]], default: Any) -> List[Any]:
    values: List[Any] = []
    for option in options:
        value = option.get("value", "")
        if value != "" and value not in values:
            values.append(value)
    if default != "" and default not in values:
        values.append(default)
    return [""] + values


def _coerce(value: Any, schema_type: str, fallback: Any) -> Any:
    if schema_type == "string":
        if isinstance(value, (dict, list)):
            return fallback
        return str(value).lower() if isinstance(value, bool) else str(value)
    if schema_type == "number":
        number = _as_number(value)
        return fallback if number is None else number
    if schema_type == "boolean":
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)
    if schema_type == "object":
        if not isinstance(value, dict):
            return fallback
        merged = dict(fallback) if isinstance(fallback, dict) else {}
        merged.update(value)
        return merged
    return value


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = [
    "AttributeField",
    "SCHEMA_TYPES",
    "build_attribute_schema",
    "parse_attributes",
    "sanitize_key",
    "type_default",
]
