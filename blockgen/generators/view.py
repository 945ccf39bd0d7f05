"""view.js generation for blocks with frontend behaviour."""

from __future__ import annotations

from typing import List

from ..files.paths import VIEW_FILE
from ..models import ComponentRecord
from .base import BlockFileGenerator, GenerationContext


class ViewScriptGenerator(BlockFileGenerator):
    name = "view"
    kind = "view-script"
    filename = VIEW_FILE
    extension = "js"
    screened_fields = (("js", "js"),)

    def required_fields(self) -> List[str]:
        return ["js"]

    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        return record.text("js")


__all__ = ["ViewScriptGenerator"]
