"""Builders for component records and collaborators used across tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Sequence

from blockgen.config import GenerationSettings
from blockgen.coordinator import GenerationCoordinator
from blockgen.errors import ScssCompileError
from blockgen.models import ComponentRecord, ContentType
from blockgen.scss import PartialSource, combine_sources
from blockgen.stores import InMemoryContentStore


def block(record_id: int, slug: str, *, title: str | None = None, status: str = "publish", **fields: Any) -> ComponentRecord:
    return ComponentRecord(
        id=record_id,
        type=ContentType.BLOCK,
        title=title if title is not None else slug.replace("-", " ").title(),
        slug=slug,
        fields=dict(fields),
        status=status,
    )


def symbol(record_id: int, slug: str, php: str, *, status: str = "publish") -> ComponentRecord:
    return ComponentRecord(
        id=record_id,
        type=ContentType.SYMBOL,
        title=slug,
        slug=slug,
        fields={"php": php},
        status=status,
    )


def partial(
    record_id: int,
    slug: str,
    scss: str,
    *,
    is_global: bool = False,
    global_order: int = 0,
) -> ComponentRecord:
    return ComponentRecord(
        id=record_id,
        type=ContentType.SCSS_PARTIAL,
        title=slug,
        slug=slug,
        fields={"scss": scss, "isGlobal": is_global, "globalOrder": global_order},
    )


def attributes_json(*entries: dict) -> str:
    return json.dumps(list(entries))


class RecordingCompiler:
    """Compiler double that records calls and can be told to fail."""

    name = "recording"

    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: List[tuple[str, List[str]]] = []
        self.fail_on = fail_on

    def compile(self, source: str, partials: Sequence[PartialSource] = ()) -> str:
        self.calls.append((source, [p.slug for p in partials]))
        if self.fail_on is not None and self.fail_on in source:
            raise ScssCompileError(f"Undefined variable in {self.fail_on}")
        return combine_sources(source, partials)


class Workspace:
    """A store, settings and coordinator rooted in a temporary directory."""

    def __init__(self, tmp_path: Path, compiler: RecordingCompiler | None = None) -> None:
        self.base_dir = (tmp_path / "output").resolve()
        self.settings = GenerationSettings(base_dir=self.base_dir, namespace="acme", textdomain="acme")
        self.store = InMemoryContentStore()
        self.compiler = compiler or RecordingCompiler()
        self.coordinator = GenerationCoordinator(self.settings, self.store, compiler=self.compiler)

    @property
    def processor(self):
        return self.coordinator.processor

    def add(self, *records: ComponentRecord) -> None:
        for record in records:
            self.store.put(record)

    def block_dir(self, slug: str) -> Path:
        return self.base_dir / "blocks" / slug

    def read(self, relative: str) -> str:
        return (self.base_dir / relative).read_text(encoding="utf-8")

    def files(self) -> List[str]:
        if not self.base_dir.exists():
            return []
        return sorted(
            str(path.relative_to(self.base_dir)).replace("\\", "/")
            for path in self.base_dir.rglob("*")
            if path.is_file()
        )


__all__ = [
    "RecordingCompiler",
    "Workspace",
    "attributes_json",
    "block",
    "partial",
    "symbol",
]
