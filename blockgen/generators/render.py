"""render.php generation, including compile-time symbol tag resolution."""

from __future__ import annotations

import re
from typing import Dict, FrozenSet, List

from ..files.paths import RENDER_FILE
from ..models import ComponentRecord
from .base import BlockFileGenerator, GenerationContext, is_truthy

SYMBOL_TAG = re.compile(r"<([A-Z][a-zA-Z0-9]*)\s*([^>]*?)\s*\/\s*>")
_TAG_ATTRIBUTE = re.compile(r"""(\w+)\s*=\s*(["'])(.*?)\2""")
_INNER_BLOCKS = re.compile(r"<inner\s*blocks?", re.IGNORECASE)

# Editor components that share the tag syntax but are not symbols.
WORDPRESS_COMPONENTS: FrozenSet[str] = frozenset(
    {
        "InnerBlocks",
        "RichText",
        "MediaUpload",
        "BlockControls",
        "InspectorControls",
        "ColorPalette",
        "PlainText",
    }
)


def to_kebab(name: str) -> str:
    return re.sub(r"(?<!^)[A-Z]", lambda m: "-" + m.group(0), name).lower()


def to_pascal(slug: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", slug) if part)


def referenced_symbols(php: str) -> List[str]:
    """Return the kebab-case symbol names referenced by tags in ``php``, in order."""
    names: List[str] = []
    for match in SYMBOL_TAG.finditer(php):
        tag = match.group(1)
        if tag in WORDPRESS_COMPONENTS:
            continue
        name = to_kebab(tag)
        if name not in names:
            names.append(name)
    return names


def uses_inner_blocks(record: ComponentRecord) -> bool:
    if is_truthy(record.settings.get("supportsInnerBlocks")):
        return True
    return bool(_INNER_BLOCKS.search(record.text("php")))


def parse_tag_attributes(text: str) -> Dict[str, str]:
    return {m.group(1): m.group(3) for m in _TAG_ATTRIBUTE.finditer(text)}


def _php_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _symbol_include(name: str, attributes: Dict[str, str]) -> str:
    pairs = ", ".join(f"{_php_string(k)} => {_php_string(v)}" for k, v in attributes.items())
    return (
        f"<?php $symbol_attrs = array({pairs}); "
        f"include __DIR__ . '/../../symbols/{name}.php'; ?>"
    )


def compile_symbols(php: str, available: FrozenSet[str]) -> str:
    """Replace symbol tags with includes of the generated symbol files."""

    def _replace(match: "re.Match[str]") -> str:
        tag = match.group(1)
        if tag in WORDPRESS_COMPONENTS:
            return match.group(0)
        name = to_kebab(tag)
        if name not in available:
            return f"<!-- Symbol not found: {name}.php -->"
        return _symbol_include(name, parse_tag_attributes(match.group(2).strip()))

    return SYMBOL_TAG.sub(_replace, php)


class RenderGenerator(BlockFileGenerator):
    name = "render"
    kind = "render"
    filename = RENDER_FILE
    extension = "php"
    screened_fields = (("php", "php"),)

    def required_fields(self) -> List[str]:
        return ["php"]

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        return compile_symbols(record.text("php"), context.symbol_slugs())


__all__ = [
    "RenderGenerator",
    "SYMBOL_TAG",
    "WORDPRESS_COMPONENTS",
    "compile_symbols",
    "referenced_symbols",
    "to_kebab",
    "to_pascal",
    "uses_inner_blocks",
]
