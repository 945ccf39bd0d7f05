"""block.json manifest generation."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from ..files.paths import (
    BLOCK_JSON_FILE,
    EDITOR_CSS_FILE,
    INDEX_JS_FILE,
    RENDER_FILE,
    STYLE_CSS_FILE,
    VIEW_FILE,
    block_expected_files,
)
from ..models import ComponentRecord
from .attributes import build_attribute_schema, parse_attributes
from .base import BlockFileGenerator, GenerationContext
from .render import uses_inner_blocks

BLOCK_SCHEMA_URL = "https://schemas.wp.org/trunk/block.json"
BLOCK_API_VERSION = 3
DEFAULT_CATEGORY = "theme"
DEFAULT_ICON = "smiley"

_ASSET_PROPERTIES = (
    ("editorScript", INDEX_JS_FILE),
    ("style", STYLE_CSS_FILE),
    ("editorStyle", EDITOR_CSS_FILE),
    ("render", RENDER_FILE),
    ("viewScriptModule", VIEW_FILE),
)

# Settings consumed explicitly or by index.js; never copied verbatim.
_EXCLUDED_SETTINGS = frozenset(
    {
        "category",
        "icon",
        "description",
        "supports",
        "allowedBlocks",
        "innerBlocks",
        "supportsInnerBlocks",
        "template",
        "templateLock",
    }
)


def _setting_text(settings: Dict[str, Any], key: str, default: str) -> str:
    value = settings.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def build_block_json(record: ComponentRecord, context: GenerationContext) -> Dict[str, Any]:
    """Assemble the block manifest for ``record`` as an ordered mapping."""
    settings = record.settings
    inner_blocks = uses_inner_blocks(record)

    manifest: Dict[str, Any] = {
        "$schema": BLOCK_SCHEMA_URL,
        "apiVersion": BLOCK_API_VERSION,
        "name": f"{context.settings.namespace}/{record.slug}",
        "version": context.settings.block_version,
        "title": record.title or record.slug,
        "category": _setting_text(settings, "category", DEFAULT_CATEGORY),
        "icon": _setting_text(settings, "icon", DEFAULT_ICON),
        "description": _setting_text(settings, "description", ""),
    }

    supports: Dict[str, Any] = {"html": inner_blocks}
    if record.has_text("js"):
        supports["interactivity"] = True
    user_supports = settings.get("supports")
    if isinstance(user_supports, dict):
        supports.update(user_supports)
    if inner_blocks:
        supports["html"] = True
        supports.setdefault("innerBlocks", True)
    manifest["supports"] = supports
    manifest["textdomain"] = context.settings.textdomain

    expected: List[str] = block_expected_files(record)
    for prop, filename in _ASSET_PROPERTIES:
        if filename in expected:
            manifest[prop] = f"file:./{filename}"

    attributes = build_attribute_schema(parse_attributes(record.fields.get("attributesJson")))
    if attributes:
        manifest["attributes"] = attributes

    for key, value in settings.items():
        if key in _EXCLUDED_SETTINGS or key in manifest:
            continue
        manifest[key] = value
    return manifest


class BlockJsonGenerator(BlockFileGenerator):
    """Always generated for blocks; attribute errors keep the previous manifest."""

    name = "block-json"
    kind = "block-manifest"
    filename = BLOCK_JSON_FILE
    extension = "json"

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        manifest = build_block_json(record, context)
        return json.dumps(manifest, indent=4, ensure_ascii=False) + "\n"


__all__ = ["BLOCK_API_VERSION", "BlockJsonGenerator", "build_block_json"]
