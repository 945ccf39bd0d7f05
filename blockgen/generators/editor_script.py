"""Editor registration script (index.js) and its asset manifest (index.asset.php)."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader

from ..files.paths import INDEX_ASSET_FILE, INDEX_JS_FILE
from ..models import ComponentRecord
from .attributes import parse_attributes, type_default
from .base import BlockFileGenerator, GenerationContext, is_truthy
from .render import uses_inner_blocks

_TEMPLATES_DIR = Path(__file__).with_name("templates")
_INDEX_TEMPLATE = "index.js.j2"
_VERSION_LENGTH = 20

LINK_TARGETS = [
    {"label": "Same window (_self)", "value": "_self"},
    {"label": "New window (_blank)", "value": "_blank"},
    {"label": "Parent frame (_parent)", "value": "_parent"},
    {"label": "Top frame (_top)", "value": "_top"},
]


def _create_env() -> Environment:
    loader = FileSystemLoader(str(_TEMPLATES_DIR))
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _block_names(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [name for name in value if isinstance(name, str) and name]


def parser_options(record: ComponentRecord) -> Dict[str, Any]:
    """InnerBlocks options derived from the block settings."""
    settings = record.settings
    if is_truthy(settings.get("supportsInnerBlocks")):
        allowed = _block_names(settings.get("allowedBlocks"))
        options: Dict[str, Any] = {"allowedBlocks": allowed or None}
        template = [[name] for name in _block_names(settings.get("template"))]
        if template:
            options["template"] = template
        options["templateLock"] = is_truthy(settings.get("templateLock"))
        return options
    if uses_inner_blocks(record):
        return {"allowedBlocks": None}
    return {}


class EditorScriptGenerator(BlockFileGenerator):
    """Renders index.js with one inspector control per block attribute."""

    name = "index-js"
    kind = "editor-script"
    filename = INDEX_JS_FILE
    extension = "js"

    def __init__(self) -> None:
        self._env = _create_env()

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        template = self._env.get_template(_INDEX_TEMPLATE)
        content = template.render(
            block_name=f"{context.settings.namespace}/{record.slug}",
            fields=parse_attributes(record.fields.get("attributesJson")),
            parser_options=parser_options(record),
            inner_blocks=uses_inner_blocks(record),
            link_targets=LINK_TARGETS,
            image_default=type_default("image"),
        )
        return content if content.endswith("\n") else content + "\n"


class AssetManifestGenerator(BlockFileGenerator):
    """Writes index.asset.php; the version is a hash of the generated index.js."""

    name = "index-asset"
    kind = "editor-script-asset"
    filename = INDEX_ASSET_FILE
    extension = "php"

    def __init__(self, script: EditorScriptGenerator | None = None) -> None:
        self._script = script or EditorScriptGenerator()

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        script = self._script.generate(record, context)
        version = hashlib.sha1(script.encode("utf-8")).hexdigest()[:_VERSION_LENGTH]
        dependencies = ", ".join(_php_quote(dep) for dep in context.settings.script_dependencies)
        return (
            f'<?php return array( "dependencies" => array( {dependencies} ), '
            f'"version" => "{version}" );\n'
        )


def _php_quote(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


__all__ = ["AssetManifestGenerator", "EditorScriptGenerator", "LINK_TARGETS", "parser_options"]
