"""Entry points reacting to record saves, renames and deletions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .config import BlockgenConfig, GenerationSettings
from .errors import BlockgenError
from .files.paths import OutputPathResolver, partial_filename, symbol_filename
from .files.writer import FileWriter
from .generators import discover_generators
from .logging import get_logger
from .mapper import GenerationMapper
from .models import ComponentRecord, ContentType, GenerationReport, RecordReport
from .processor import ContentTypeProcessor
from .regenerator import GlobalRegenerator
from .scss import ScssCompiler, build_compiler
from .security import SecurityValidator
from .stores import ContentStore


class EventKind(str, Enum):
    SAVED = "saved"
    RENAMED = "renamed"
    DELETED = "deleted"
    REGENERATE = "regenerate"


@dataclass(frozen=True)
class RecordEvent:
    """A record mutation delivered by the host application."""

    kind: EventKind
    record: ComponentRecord
    previous_slug: Optional[str] = None
    is_update: bool = True


class GenerationCoordinator:
    """Decides what to generate, remove and regenerate for each record event."""

    def __init__(
        self,
        settings: GenerationSettings,
        store: ContentStore,
        *,
        mapper: GenerationMapper | None = None,
        writer: FileWriter | None = None,
        compiler: ScssCompiler | None = None,
        validator: SecurityValidator | None = None,
        processor: ContentTypeProcessor | None = None,
        regenerator: GlobalRegenerator | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        validator = validator or SecurityValidator()
        self.processor = processor or ContentTypeProcessor(
            settings,
            store,
            mapper=mapper,
            writer=writer or FileWriter(settings.base_dir, validator),
            resolver=OutputPathResolver(settings, validator),
            compiler=compiler,
            validator=validator,
        )
        self.regenerator = regenerator or GlobalRegenerator(store, self.processor)
        self.logger = get_logger("coordinator")

    @classmethod
    def from_config(cls, config: BlockgenConfig, store: ContentStore) -> "GenerationCoordinator":
        return cls(
            GenerationSettings.from_config(config),
            store,
            mapper=GenerationMapper(discover_generators(config.generators.enabled or None)),
            compiler=build_compiler(config.scss),
        )

    @property
    def writer(self) -> FileWriter:
        return self.processor.writer

    # ------------------------------------------------------------------
    # Event entry points

    def dispatch(self, event: RecordEvent) -> GenerationReport:
        if event.kind is EventKind.SAVED:
            return self.handle_post_save(event.record, is_update=event.is_update)
        if event.kind is EventKind.RENAMED:
            before = event.previous_slug or event.record.slug
            return self.handle_post_rename(event.record, before, event.record.slug)
        if event.kind is EventKind.DELETED:
            return self.handle_post_deletion(event.record)
        return self.generate_files_for_single_post(event.record)

    def handle_post_save(self, record: ComponentRecord, is_update: bool = True) -> GenerationReport:
        report = GenerationReport(action="save")
        self.logger.info(
            "%s %s '%s' (id %s)",
            "Updating" if is_update else "Creating",
            record.type.value,
            record.slug,
            record.id,
        )
        if not record.is_published:
            # Unpublished records own no artifacts.
            self._remove_outputs(report, record.type, record.slug)
        else:
            report.records.append(self._process(record))
        if self.regenerator.detect_global_impact(record):
            report.extend(self.regenerator.regenerate_global_dependencies(record))
        return report

    def handle_post_rename(
        self,
        record: ComponentRecord,
        before_slug: str,
        after_slug: str,
    ) -> GenerationReport:
        """Generate under ``after_slug`` first, then drop the outputs of ``before_slug``."""
        if before_slug == after_slug:
            return self.handle_post_save(record, is_update=True)

        renamed = record if record.slug == after_slug else record.with_slug(after_slug)
        report = GenerationReport(action="rename")
        self.logger.info("Renaming %s '%s' -> '%s'", record.type.value, before_slug, after_slug)

        if renamed.is_published:
            new_report = self._process(renamed)
            report.records.append(new_report)
            if not new_report.ok:
                # Any failed artifact keeps the previous slug's files in place.
                report.errors.append(
                    f"Kept outputs of '{before_slug}' because '{after_slug}' could not be fully generated"
                )
                self.logger.warning(
                    "Rename of %s '%s' incomplete; outputs of '%s' kept",
                    record.type.value,
                    after_slug,
                    before_slug,
                )
                return report
        self._remove_outputs(report, record.type, before_slug)

        if self.regenerator.detect_global_impact(renamed):
            report.extend(
                self.regenerator.regenerate_global_dependencies(renamed, previous_slug=before_slug)
            )
        return report

    def handle_post_deletion(self, record: ComponentRecord) -> GenerationReport:
        report = GenerationReport(action="delete")
        self.logger.info("Deleting outputs of %s '%s' (id %s)", record.type.value, record.slug, record.id)
        self._remove_outputs(report, record.type, record.slug)
        if self.regenerator.detect_global_impact(record):
            report.extend(
                self.regenerator.regenerate_global_dependencies(record, exclude_ids={record.id})
            )
        return report

    def generate_files_for_single_post(self, record: ComponentRecord) -> GenerationReport:
        report = GenerationReport(action="generate")
        report.records.append(self._process(record))
        return report

    def regenerate_record(self, record_id: int) -> GenerationReport:
        record = self.store.get(record_id)
        if record is None:
            raise LookupError(f"Record {record_id} not found")
        return self.generate_files_for_single_post(record)

    def regenerate_all_files(self) -> GenerationReport:
        """Regenerate every record from one snapshot, then prune orphaned outputs."""
        report = GenerationReport(action="regenerate-all")
        records = self.store.all()
        snapshot = {r.id: r for r in records}
        self.logger.info("Regenerating %d record(s)", len(records))
        for record in records:
            report.records.append(self._process(record, snapshot=snapshot))
        self._prune_orphans(report, records)
        self.logger.info(
            "Regeneration finished: %d succeeded, %d failed, %d file(s) written",
            report.succeeded,
            report.failed,
            report.files_written,
        )
        return report

    # ------------------------------------------------------------------
    # Queries

    def file_status(self, record_ids: Iterable[int]) -> List[Dict[str, object]]:
        statuses: List[Dict[str, object]] = []
        for record_id in record_ids:
            record = self.store.get(record_id)
            status = self.processor.file_status(record) if record is not None else None
            if status is None:
                statuses.append({"id": record_id, "found": record is not None, "files": []})
                continue
            status["found"] = True
            statuses.append(status)
        return statuses

    def global_impact_stats(self) -> Dict[str, int]:
        return self.regenerator.global_impact_stats()

    # ------------------------------------------------------------------
    # Internal helpers

    def _process(
        self,
        record: ComponentRecord,
        *,
        snapshot: Dict[int, ComponentRecord] | None = None,
    ) -> RecordReport:
        try:
            return self.processor.process(record, snapshot=snapshot)
        except Exception as exc:
            self.logger.exception("Generation failed for record %s", record.id)
            return RecordReport(
                record_id=record.id,
                content_type=record.type.value,
                slug=record.slug,
                error=str(exc),
            )

    def _remove_outputs(self, report: GenerationReport, content_type: ContentType, slug: str) -> None:
        try:
            report.removed_paths.extend(self.processor.remove_outputs(content_type, slug))
        except BlockgenError as exc:
            report.errors.append(f"Could not remove outputs of '{slug}': {exc}")
            self.logger.warning("Could not remove outputs of %s '%s': %s", content_type.value, slug, exc)

    def _prune_orphans(self, report: GenerationReport, records: List[ComponentRecord]) -> None:
        owned: Dict[ContentType, Set[str]] = {kind: set() for kind in ContentType}
        for record in records:
            if record.is_published:
                owned[record.type].add(record.slug)

        blocks_dir = self.settings.blocks_dir
        candidates: List[Path] = [
            entry
            for entry in self.writer.list_entries(blocks_dir)
            if entry.is_dir() and entry.name not in owned[ContentType.BLOCK]
        ]
        symbol_names = {symbol_filename(slug) for slug in owned[ContentType.SYMBOL]}
        candidates.extend(
            entry
            for entry in self.writer.list_entries(self.settings.symbols_dir)
            if entry.is_file() and entry.suffix == ".php" and entry.name not in symbol_names
        )
        partial_names = {partial_filename(slug) for slug in owned[ContentType.SCSS_PARTIAL]}
        candidates.extend(
            entry
            for entry in self.writer.list_entries(self.settings.scss_dir)
            if entry.is_file()
            and entry.name.startswith("_")
            and entry.suffix == ".scss"
            and entry.name not in partial_names
        )
        for directory in [self.settings.symbols_dir, self.settings.scss_dir, *self.writer.list_entries(blocks_dir)]:
            if directory.is_dir() and directory not in candidates:
                candidates.extend(self.writer.list_temp_files(directory))

        for path in candidates:
            try:
                removed = (
                    self.writer.remove_directory(path) if path.is_dir() else self.writer.delete_if_exists(path)
                )
            except BlockgenError as exc:
                report.errors.append(f"Could not prune {path}: {exc}")
                continue
            if removed:
                report.removed_paths.append(str(path))
                self.logger.info("Pruned orphaned output %s", path.name)


__all__ = ["EventKind", "GenerationCoordinator", "RecordEvent"]
