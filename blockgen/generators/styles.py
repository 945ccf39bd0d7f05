"""Stylesheet generators: SCSS sources and the CSS compiled from them."""

from __future__ import annotations

from typing import List

from ..errors import GenerationError, ScssCompileError
from ..files.paths import EDITOR_CSS_FILE, EDITOR_SCSS_FILE, STYLE_CSS_FILE, STYLE_SCSS_FILE
from ..models import ComponentRecord
from .base import BlockFileGenerator, GenerationContext


class ScssSourceGenerator(BlockFileGenerator):
    """Copies the authored SCSS next to the compiled stylesheet."""

    extension = "scss"
    source_field = "scss"

    def required_fields(self) -> List[str]:
        return [self.source_field]

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        return record.text(self.source_field)


class CompiledCssGenerator(BlockFileGenerator):
    """Persists CSS from the editor's cached compile, or compiles the SCSS itself.

    Partials are the global ones in ``globalOrder`` followed by those the block
    selected in ``partials_field``.
    """

    extension = "css"
    source_field = "scss"
    compiled_field = "compiledCss"
    partials_field = "selectedPartialIds"

    def validate(self, record: ComponentRecord) -> bool:
        return record.has_text(self.compiled_field) or record.has_text(self.source_field)

    def required_fields(self) -> List[str]:
        return [self.source_field]

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        cached = record.text(self.compiled_field)
        if cached.strip():
            return cached
        partials = context.partial_sources(record.id_list(self.partials_field))
        try:
            return context.compiler.compile(record.text(self.source_field), partials)
        except ScssCompileError as exc:
            raise GenerationError(str(exc), generator=self.name) from exc


class StyleScssGenerator(ScssSourceGenerator):
    name = "style-scss"
    kind = "style-source"
    filename = STYLE_SCSS_FILE


class EditorScssGenerator(ScssSourceGenerator):
    name = "editor-scss"
    kind = "editor-style-source"
    filename = EDITOR_SCSS_FILE
    source_field = "editorScss"


class StyleCssGenerator(CompiledCssGenerator):
    name = "style-css"
    kind = "style"
    filename = STYLE_CSS_FILE


class EditorCssGenerator(CompiledCssGenerator):
    name = "editor-css"
    kind = "editor-style"
    filename = EDITOR_CSS_FILE
    source_field = "editorScss"
    compiled_field = "editorCompiledCss"
    partials_field = "editorSelectedPartialIds"


__all__ = [
    "CompiledCssGenerator",
    "EditorCssGenerator",
    "EditorScssGenerator",
    "ScssSourceGenerator",
    "StyleCssGenerator",
    "StyleScssGenerator",
]
