"""Core data models shared across blockgen components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class ContentType(str, Enum):
    """Kinds of component records authored through the editor."""

    BLOCK = "block"
    SYMBOL = "symbol"
    SCSS_PARTIAL = "scssPartial"

    @classmethod
    def parse(cls, value: "str | ContentType") -> "ContentType":
        if isinstance(value, ContentType):
            return value
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Unknown content type: {value!r}")


SHARED_CONTENT_TYPES = frozenset({ContentType.SYMBOL, ContentType.SCSS_PARTIAL})

PUBLISHED = "publish"


@dataclass(frozen=True)
class ComponentRecord:
    """A user-authored component as delivered by the content store."""

    id: int
    type: ContentType
    title: str
    slug: str
    fields: Dict[str, Any] = field(default_factory=dict)
    status: str = PUBLISHED

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED

    @property
    def is_shared(self) -> bool:
        return self.type in SHARED_CONTENT_TYPES

    def text(self, name: str) -> str:
        """Return a text field, treating missing and null values as empty."""
        value = self.fields.get(name)
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    def has_text(self, name: str) -> bool:
        return bool(self.text(name).strip())

    def id_list(self, name: str) -> List[int]:
        """Return a list of positive integer ids, dropping anything unparsable."""
        raw = self.fields.get(name) or []
        if not isinstance(raw, (list, tuple)):
            return []
        ids: List[int] = []
        for item in raw:
            try:
                value = int(item)
            except (TypeError, ValueError):
                continue
            if value > 0 and value not in ids:
                ids.append(value)
        return ids

    @property
    def settings(self) -> Dict[str, Any]:
        value = self.fields.get("settings")
        return dict(value) if isinstance(value, dict) else {}

    def with_slug(self, slug: str) -> "ComponentRecord":
        return replace(self, slug=slug)

    def with_fields(self, **updates: Any) -> "ComponentRecord":
        merged = dict(self.fields)
        merged.update(updates)
        return replace(self, fields=merged)


@dataclass(frozen=True)
class GeneratedArtifact:
    """Content computed for one output file; only ever persisted as that file."""

    kind: str
    output_path: str
    content: str


class ArtifactStatus(str, Enum):
    WRITTEN = "written"
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ArtifactOutcome:
    """Result of running one generator for one record."""

    generator: str
    path: Optional[str]
    status: ArtifactStatus
    error_kind: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not ArtifactStatus.FAILED


@dataclass
class RecordReport:
    """Per-record summary produced by the content type processor."""

    record_id: int
    content_type: str
    slug: str
    artifacts: List[ArtifactOutcome] = field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and all(outcome.ok for outcome in self.artifacts)

    def count(self, status: ArtifactStatus) -> int:
        return sum(1 for outcome in self.artifacts if outcome.status is status)

    def paths(self, status: ArtifactStatus) -> List[str]:
        return [o.path for o in self.artifacts if o.status is status and o.path]


@dataclass
class GenerationReport:
    """Aggregated result of a coordinator entry point."""

    action: str
    records: List[RecordReport] = field(default_factory=list)
    removed_paths: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def extend(self, other: "GenerationReport") -> None:
        self.records.extend(other.records)
        self.removed_paths.extend(other.removed_paths)
        self.errors.extend(other.errors)

    @property
    def succeeded(self) -> int:
        return sum(1 for report in self.records if report.ok and not report.skipped)

    @property
    def failed(self) -> int:
        return sum(1 for report in self.records if not report.ok)

    @property
    def files_written(self) -> int:
        return sum(report.count(ArtifactStatus.WRITTEN) for report in self.records)

    @property
    def files_removed(self) -> int:
        removed = sum(report.count(ArtifactStatus.REMOVED) for report in self.records)
        return removed + len(self.removed_paths)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "files_written": self.files_written,
            "files_removed": self.files_removed,
            "errors": list(self.errors),
            "records": [
                {
                    "id": report.record_id,
                    "type": report.content_type,
                    "slug": report.slug,
                    "ok": report.ok,
                    "skipped": report.skipped,
                    "error": report.error,
                    "artifacts": [
                        {
                            "generator": outcome.generator,
                            "path": outcome.path,
                            "status": outcome.status.value,
                            "error_kind": outcome.error_kind,
                            "error": outcome.error,
                        }
                        for outcome in report.artifacts
                    ],
                }
                for report in self.records
            ],
        }


__all__ = [
    "ArtifactOutcome",
    "ArtifactStatus",
    "ComponentRecord",
    "ContentType",
    "GeneratedArtifact",
    "GenerationReport",
    "PUBLISHED",
    "RecordReport",
    "SHARED_CONTENT_TYPES",
]
