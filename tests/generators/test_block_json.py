"""block.json manifest tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from blockgen.config import GenerationSettings
from blockgen.errors import GenerationError
from blockgen.generators import GenerationContext
from blockgen.generators.block_json import BlockJsonGenerator, build_block_json
from tests._fixtures.records import attributes_json, block


@pytest.fixture
def context(tmp_path: Path) -> GenerationContext:
    settings = GenerationSettings(base_dir=tmp_path, namespace="acme", textdomain="acme-td", block_version="2.1.0")
    return GenerationContext(settings=settings)


def test_minimal_block_gets_defaults(context: GenerationContext) -> None:
    manifest = build_block_json(block(1, "hero", title="Hero", php="<div></div>"), context)

    assert manifest["$schema"] == "https://schemas.wp.org/trunk/block.json"
    assert manifest["apiVersion"] == 3
    assert manifest["name"] == "acme/hero"
    assert manifest["version"] == "2.1.0"
    assert manifest["title"] == "Hero"
    assert manifest["category"] == "theme"
    assert manifest["icon"] == "smiley"
    assert manifest["description"] == ""
    assert manifest["supports"] == {"html": False}
    assert manifest["textdomain"] == "acme-td"
    assert "attributes" not in manifest


def test_asset_references_only_for_generated_files(context: GenerationContext) -> None:
    manifest = build_block_json(block(1, "hero", php="<div></div>", scss=".a{}"), context)

    assert manifest["editorScript"] == "file:./index.js"
    assert manifest["style"] == "file:./style.css"
    assert manifest["render"] == "file:./render.php"
    assert "editorStyle" not in manifest
    assert "viewScriptModule" not in manifest


def test_js_enables_interactivity_and_view_module(context: GenerationContext) -> None:
    manifest = build_block_json(block(1, "tabs", php="<div></div>", js="init();"), context)

    assert manifest["supports"]["interactivity"] is True
    assert manifest["viewScriptModule"] == "file:./view.js"


def test_inner_blocks_in_template_force_html_and_inner_blocks_support(context: GenerationContext) -> None:
    record = block(
        1,
        "wrapper",
        php="<section><InnerBlocks /></section>",
        settings={"supports": {"html": False, "align": True}},
    )

    supports = build_block_json(record, context)["supports"]

    assert supports == {"html": True, "align": True, "innerBlocks": True}


def test_settings_override_defaults_and_extras_are_appended(context: GenerationContext) -> None:
    record = block(
        1,
        "hero",
        php="<div></div>",
        settings={
            "category": "design",
            "icon": "star-filled",
            "description": "Big banner",
            "keywords": ["banner"],
            "title": "ignored because already present",
            "template": ["core/paragraph"],
        },
    )

    manifest = build_block_json(record, context)

    assert manifest["category"] == "design"
    assert manifest["icon"] == "star-filled"
    assert manifest["description"] == "Big banner"
    assert manifest["keywords"] == ["banner"]
    assert manifest["title"] == "Hero"
    assert "template" not in manifest
    assert list(manifest)[-1] == "keywords"


def test_attributes_are_embedded(context: GenerationContext) -> None:
    record = block(1, "hero", php="x", attributesJson=attributes_json({"name": "heading", "type": "text"}))

    manifest = build_block_json(record, context)

    assert manifest["attributes"] == {"heading": {"type": "string", "default": ""}}


def test_generator_output_is_pretty_and_deterministic(context: GenerationContext) -> None:
    record = block(1, "hero", php="x", attributesJson=attributes_json({"name": "n", "type": "number"}))
    generator = BlockJsonGenerator()

    first = generator.generate(record, context)
    second = generator.generate(record, context)

    assert first == second
    assert first.startswith('{\n    "$schema"')
    assert json.loads(first)["attributes"]["n"] == {"type": "number", "default": 0}


def test_malformed_attributes_raise(context: GenerationContext) -> None:
    record = block(1, "hero", php="x", attributesJson="[{broken")

    with pytest.raises(GenerationError):
        BlockJsonGenerator().generate(record, context)
