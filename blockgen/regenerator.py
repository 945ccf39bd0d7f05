"""Propagates changes of shared resources to the blocks that depend on them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Dict, Iterator, List, Optional, Tuple

from .errors import DependencyResolutionError
from .generators.base import is_global_partial
from .generators.render import referenced_symbols
from .logging import get_logger
from .models import (
    SHARED_CONTENT_TYPES,
    ComponentRecord,
    ContentType,
    GenerationReport,
    RecordReport,
)
from .processor import ContentTypeProcessor
from .stores import ContentStore

Snapshot = Dict[int, ComponentRecord]


@dataclass(frozen=True)
class GlobalImpactSet:
    """Dependent record ids computed from one store snapshot."""

    source_id: Optional[int]
    record_ids: Tuple[int, ...] = ()

    def __iter__(self) -> Iterator[int]:
        return iter(self.record_ids)

    def __len__(self) -> int:
        return len(self.record_ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.record_ids


def _published_blocks(snapshot: Snapshot) -> List[ComponentRecord]:
    blocks = [r for r in snapshot.values() if r.type is ContentType.BLOCK and r.is_published]
    return sorted(blocks, key=lambda r: r.id)


def _has_styles(block: ComponentRecord) -> bool:
    return block.has_text("scss") or block.has_text("editorScss")


def _selected_partials(block: ComponentRecord) -> List[int]:
    return block.id_list("selectedPartialIds") + block.id_list("editorSelectedPartialIds")


class GlobalRegenerator:
    """Finds and regenerates dependents of SCSS partials and symbols."""

    def __init__(self, store: ContentStore, processor: ContentTypeProcessor) -> None:
        self.store = store
        self.processor = processor
        self.logger = get_logger("regenerator")

    def detect_global_impact(self, record: ComponentRecord) -> bool:
        return record.type in SHARED_CONTENT_TYPES

    # ------------------------------------------------------------------
    # Dependency discovery

    def snapshot(self, exclude_ids: Collection[int] = ()) -> Snapshot:
        try:
            records = self.store.all()
        except Exception as exc:
            raise DependencyResolutionError(f"Content store could not be read: {exc}") from exc
        return {r.id: r for r in records if r.id not in exclude_ids}

    def find_dependents(
        self,
        record: ComponentRecord,
        *,
        snapshot: Snapshot | None = None,
        previous_slug: str | None = None,
    ) -> GlobalImpactSet:
        """Blocks affected by a change to ``record``; empty for non-shared records."""
        snapshot = self.snapshot() if snapshot is None else snapshot
        if record.type is ContentType.SCSS_PARTIAL:
            predicate = self._partial_predicate(record)
        elif record.type is ContentType.SYMBOL:
            slugs = {record.slug} | ({previous_slug} if previous_slug else set())
            predicate = self._symbol_predicate(slugs)
        else:
            return GlobalImpactSet(source_id=record.id)
        return GlobalImpactSet(
            source_id=record.id,
            record_ids=self._collect(snapshot, predicate, exclude=record.id),
        )

    def find_global_partial_dependents(self, snapshot: Snapshot | None = None) -> GlobalImpactSet:
        """Every block whose stylesheet pulls in at least one partial."""
        snapshot = self.snapshot() if snapshot is None else snapshot
        has_global = any(
            r.type is ContentType.SCSS_PARTIAL and r.is_published and is_global_partial(r)
            for r in snapshot.values()
        )

        def _uses_partials(block: ComponentRecord) -> bool:
            return bool(_selected_partials(block)) or (has_global and _has_styles(block))

        return GlobalImpactSet(source_id=None, record_ids=self._collect(snapshot, _uses_partials))

    @staticmethod
    def _partial_predicate(partial: ComponentRecord) -> Callable[[ComponentRecord], bool]:
        is_global = is_global_partial(partial)

        def _depends(block: ComponentRecord) -> bool:
            if is_global and _has_styles(block):
                return True
            return partial.id in _selected_partials(block)

        return _depends

    @staticmethod
    def _symbol_predicate(slugs: Collection[str]) -> Callable[[ComponentRecord], bool]:
        def _depends(block: ComponentRecord) -> bool:
            return any(name in slugs for name in referenced_symbols(block.text("php")))

        return _depends

    def _collect(
        self,
        snapshot: Snapshot,
        predicate: Callable[[ComponentRecord], bool],
        *,
        exclude: Optional[int] = None,
    ) -> Tuple[int, ...]:
        found: List[int] = []
        failures: List[str] = []
        for block in _published_blocks(snapshot):
            if block.id == exclude:
                continue
            try:
                if predicate(block):
                    found.append(block.id)
            except (TypeError, ValueError, AttributeError) as exc:
                failures.append(f"block {block.id}: {exc}")
        if failures:
            raise DependencyResolutionError("; ".join(failures), resolved=found)
        return tuple(found)

    # ------------------------------------------------------------------
    # Regeneration

    def regenerate_global_dependencies(
        self,
        record: ComponentRecord | None = None,
        *,
        previous_slug: str | None = None,
        exclude_ids: Collection[int] = (),
    ) -> GenerationReport:
        """Invalidate and regenerate every dependent of ``record``.

        With no record, every block that uses a partial is regenerated. Records
        that disappear between the snapshot and their turn are skipped.
        """
        report = GenerationReport(action="regenerate-dependents")
        excluded = set(exclude_ids)
        try:
            snapshot = self.snapshot(excluded)
        except DependencyResolutionError as exc:
            report.errors.append(str(exc))
            self.logger.warning("Dependency resolution failed: %s", exc)
            return report
        if record is not None and record.id not in excluded:
            snapshot[record.id] = record

        try:
            if record is None:
                impact = self.find_global_partial_dependents(snapshot)
            else:
                impact = self.find_dependents(record, snapshot=snapshot, previous_slug=previous_slug)
            dependents = list(impact)
        except DependencyResolutionError as exc:
            report.errors.append(str(exc))
            self.logger.warning("Dependency resolution incomplete: %s", exc)
            dependents = list(exc.resolved)

        if dependents:
            self.logger.info(
                "Regenerating %d dependent block(s)%s",
                len(dependents),
                f" of {record.type.value} '{record.slug}'" if record else "",
            )
        for dependent_id in dependents:
            report.records.append(self._regenerate_one(dependent_id, snapshot, excluded))
        return report

    def _regenerate_one(self, record_id: int, snapshot: Snapshot, excluded: Collection[int]) -> RecordReport:
        self.store.invalidate(record_id)
        current = None if record_id in excluded else self.store.get(record_id)
        if current is None:
            stale = snapshot.get(record_id)
            self.logger.info("Dependent record %s no longer exists; skipping", record_id)
            return RecordReport(
                record_id=record_id,
                content_type=ContentType.BLOCK.value,
                slug=stale.slug if stale else "",
                skipped=True,
            )
        snapshot[record_id] = current
        try:
            return self.processor.process(current, snapshot=snapshot)
        except Exception as exc:
            self.logger.exception("Regenerating dependent %s failed", record_id)
            return RecordReport(
                record_id=record_id,
                content_type=current.type.value,
                slug=current.slug,
                error=str(exc),
            )

    # ------------------------------------------------------------------
    # Stats

    def global_impact_stats(self) -> Dict[str, int]:
        snapshot = self.snapshot()
        blocks = _published_blocks(snapshot)
        partials = [r for r in snapshot.values() if r.type is ContentType.SCSS_PARTIAL and r.is_published]
        symbols = [r for r in snapshot.values() if r.type is ContentType.SYMBOL and r.is_published]
        symbol_slugs = {s.slug for s in symbols}
        global_count = sum(1 for p in partials if is_global_partial(p))
        return {
            "blocks": len(blocks),
            "scss_partials": len(partials),
            "global_partials": global_count,
            "symbols": len(symbols),
            "blocks_using_partials": sum(
                1 for b in blocks if _selected_partials(b) or (global_count and _has_styles(b))
            ),
            "blocks_using_symbols": sum(
                1 for b in blocks if symbol_slugs.intersection(referenced_symbols(b.text("php")))
            ),
        }


__all__ = ["GlobalImpactSet", "GlobalRegenerator"]
