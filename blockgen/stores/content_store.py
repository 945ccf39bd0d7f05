"""Record stores that feed component records into the generation pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..logging import get_logger
from ..models import PUBLISHED, ComponentRecord, ContentType

_STORE_VERSION = 1

# Fields holding CSS compiled by the editor; dropped when a dependency changes.
DERIVED_CACHE_FIELDS = ("compiledCss", "editorCompiledCss")


class ContentStore(Protocol):
    """Read interface over component records plus derived-cache invalidation."""

    def get(self, record_id: int) -> Optional[ComponentRecord]:
        ...

    def all(self) -> List[ComponentRecord]:
        ...

    def by_type(self, content_type: ContentType) -> List[ComponentRecord]:
        ...

    def invalidate(self, record_id: int) -> None:
        ...


class InMemoryContentStore:
    """Dictionary-backed store used by tests and embedding applications."""

    def __init__(self, records: Iterable[ComponentRecord] = ()) -> None:
        self._records: Dict[int, ComponentRecord] = {}
        for record in records:
            self.put(record)

    def get(self, record_id: int) -> Optional[ComponentRecord]:
        return self._records.get(record_id)

    def all(self) -> List[ComponentRecord]:
        return sorted(self._records.values(), key=lambda record: record.id)

    def by_type(self, content_type: ContentType) -> List[ComponentRecord]:
        kind = ContentType.parse(content_type)
        return [record for record in self.all() if record.type is kind]

    def put(self, record: ComponentRecord) -> None:
        self._records[record.id] = record

    def remove(self, record_id: int) -> Optional[ComponentRecord]:
        return self._records.pop(record_id, None)

    def invalidate(self, record_id: int) -> None:
        record = self._records.get(record_id)
        if record is None:
            return
        if not any(name in record.fields for name in DERIVED_CACHE_FIELDS):
            return
        fields = {k: v for k, v in record.fields.items() if k not in DERIVED_CACHE_FIELDS}
        self._records[record_id] = ComponentRecord(
            id=record.id,
            type=record.type,
            title=record.title,
            slug=record.slug,
            fields=fields,
            status=record.status,
        )

    def __len__(self) -> int:
        return len(self._records)


class JsonContentStore(InMemoryContentStore):
    """Store persisted as a versioned JSON document on disk."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = path
        self._dirty = False
        self.logger = get_logger("stores.json")
        self._load(path)

    @property
    def path(self) -> Path:
        return self._path

    def put(self, record: ComponentRecord) -> None:
        super().put(record)
        self._dirty = True

    def remove(self, record_id: int) -> Optional[ComponentRecord]:
        removed = super().remove(record_id)
        if removed is not None:
            self._dirty = True
        return removed

    def invalidate(self, record_id: int) -> None:
        before = self.get(record_id)
        super().invalidate(record_id)
        if self.get(record_id) is not before:
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty:
            return
        payload = {
            "version": _STORE_VERSION,
            "records": [record_to_payload(record) for record in self.all()],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            self.logger.warning("Ignoring unreadable record store %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            self.logger.warning("Ignoring record store %s with unsupported version", path)
            return
        entries = data.get("records")
        if not isinstance(entries, list):
            return
        for raw in entries:
            record = record_from_payload(raw)
            if record is None:
                self.logger.debug("Skipping malformed record entry: %r", raw)
                continue
            InMemoryContentStore.put(self, record)
        self._dirty = False


def record_from_payload(raw: Any) -> Optional[ComponentRecord]:
    """Build a record from its JSON form, returning None when it is malformed."""
    if not isinstance(raw, dict):
        return None
    record_id = raw.get("id")
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
        return None
    try:
        content_type = ContentType.parse(raw.get("type"))
    except ValueError:
        return None
    slug = raw.get("slug")
    if not isinstance(slug, str):
        return None
    fields = raw.get("fields") or {}
    if not isinstance(fields, dict):
        return None
    title = raw.get("title")
    status = raw.get("status")
    return ComponentRecord(
        id=record_id,
        type=content_type,
        title=title if isinstance(title, str) else "",
        slug=slug,
        fields=dict(fields),
        status=status if isinstance(status, str) else PUBLISHED,
    )


def record_to_payload(record: ComponentRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "type": record.type.value,
        "title": record.title,
        "slug": record.slug,
        "status": record.status,
        "fields": dict(record.fields),
    }


__all__ = [
    "ContentStore",
    "DERIVED_CACHE_FIELDS",
    "InMemoryContentStore",
    "JsonContentStore",
    "record_from_payload",
    "record_to_payload",
]
