"""Generators for the shared registries: symbol PHP files and SCSS partials."""

from __future__ import annotations

from typing import List

from ..files.paths import partial_filename, symbol_filename
from ..models import ComponentRecord, ContentType
from .base import FileGenerator, GenerationContext


class SymbolGenerator(FileGenerator):
    """Writes ``symbols/<slug>.php`` for inclusion by block render templates."""

    name = "symbol"
    kind = "symbol"
    content_types = frozenset({ContentType.SYMBOL})
    screened_fields = (("php", "php"),)
    extension = "php"

    def required_fields(self) -> List[str]:
        return ["php"]

    def generated_file_name(self, record: ComponentRecord) -> str:
        return symbol_filename(record.slug)

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        return record.text("php")


class ScssPartialGenerator(FileGenerator):
    """Writes ``scss/_<slug>.scss`` so external tooling can import the partial."""

    name = "scss-partial"
    kind = "scss-partial"
    content_types = frozenset({ContentType.SCSS_PARTIAL})
    extension = "scss"

    def required_fields(self) -> List[str]:
        return ["scss"]

    def generated_file_name(self, record: ComponentRecord) -> str:
        return partial_filename(record.slug)

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        return record.text("scss")


__all__ = ["ScssPartialGenerator", "SymbolGenerator"]
