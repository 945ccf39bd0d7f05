"""Base classes for file generator plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from ..config import GenerationSettings
from ..models import ComponentRecord, ContentType
from ..scss import PassthroughCompiler, PartialSource, ScssCompiler
from ..security import SecurityValidator


@dataclass
class GenerationContext:
    """Everything a generator may consult besides the record itself.

    ``records`` is a single snapshot of the content store taken by the caller;
    generators never query the store directly.
    """

    settings: GenerationSettings
    records: Dict[int, ComponentRecord] = field(default_factory=dict)
    compiler: ScssCompiler = field(default_factory=PassthroughCompiler)
    validator: SecurityValidator = field(default_factory=SecurityValidator)

    @classmethod
    def from_records(
        cls,
        settings: GenerationSettings,
        records: Iterable[ComponentRecord],
        *,
        compiler: ScssCompiler | None = None,
        validator: SecurityValidator | None = None,
    ) -> "GenerationContext":
        return cls(
            settings=settings,
            records={r.id: r for r in records},
            compiler=compiler or PassthroughCompiler(),
            validator=validator or SecurityValidator(),
        )

    def published(self, content_type: ContentType) -> List[ComponentRecord]:
        return sorted(
            (r for r in self.records.values() if r.type is content_type and r.is_published),
            key=lambda r: r.id,
        )

    def symbol_slugs(self) -> FrozenSet[str]:
        return frozenset(r.slug for r in self.published(ContentType.SYMBOL))

    def global_partials(self) -> List[ComponentRecord]:
        partials = [r for r in self.published(ContentType.SCSS_PARTIAL) if is_global_partial(r)]
        return sorted(partials, key=lambda r: (_global_order(r), r.id))

    def partial_sources(self, selected_ids: Sequence[int]) -> List[PartialSource]:
        """Global partials first, then the selected ones, each included once."""
        ordered: List[ComponentRecord] = list(self.global_partials())
        seen = {r.id for r in ordered}
        for partial_id in selected_ids:
            partial = self.records.get(partial_id)
            if partial is None or partial.id in seen:
                continue
            if partial.type is not ContentType.SCSS_PARTIAL or not partial.is_published:
                continue
            ordered.append(partial)
            seen.add(partial.id)
        return [PartialSource(slug=r.slug, content=r.text("scss")) for r in ordered]


def is_truthy(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def is_global_partial(record: ComponentRecord) -> bool:
    return is_truthy(record.fields.get("isGlobal"))


def _global_order(record: ComponentRecord) -> int:
    try:
        return int(record.fields.get("globalOrder") or 0)
    except (TypeError, ValueError):
        return 0


class FileGenerator(ABC):
    """Contract for generators that turn one record into one output file."""

    #: Registry name, also used in reports.
    name: str = ""
    #: Artifact kind recorded on the generated artifact.
    kind: str = ""
    content_types: FrozenSet[ContentType] = frozenset()
    #: (field, screen kind) pairs passed through the security screen.
    screened_fields: Tuple[Tuple[str, str], ...] = ()
    extension: str = ""

    def can_generate(self, content_type: ContentType | str) -> bool:
        try:
            return ContentType.parse(content_type) in self.content_types
        except ValueError:
            return False

    def required_fields(self) -> Sequence[str]:
        return ()

    def validate(self, record: ComponentRecord) -> bool:
        """Return True when the record carries every field this generator needs."""
        return all(record.has_text(name) for name in self.required_fields())

    def file_extension(self) -> str:
        return self.extension

    def screen(self, record: ComponentRecord, validator: SecurityValidator) -> List[str]:
        issues: List[str] = []
        for field_name, kind in self.screened_fields:
            for issue in validator.screen(kind, record.text(field_name)):
                issues.append(f"{field_name}: {issue}")
        return issues

    @abstractmethod
    def generated_file_name(self, record: ComponentRecord) -> str:
        """Return the file name written inside the record's output directory."""

    @abstractmethod
    def generate(self, record: ComponentRecord, context: GenerationContext) -> str:
        """Return the file content or raise :class:`~blockgen.errors.GenerationError`."""


class BlockFileGenerator(FileGenerator):
    """Generator writing a fixed file name inside a block directory."""

    content_types = frozenset({ContentType.BLOCK})
    filename: str = ""

    def generated_file_name(self, record: ComponentRecord) -> str:
        return self.filename


__all__ = [
    "BlockFileGenerator",
    "FileGenerator",
    "GenerationContext",
    "is_global_partial",
    "is_truthy",
]
