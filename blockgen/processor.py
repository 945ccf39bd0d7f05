"""Generates every applicable artifact for a single record."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .config import GenerationSettings
from .errors import GenerationError, PathError, WriteError
from .files.paths import OutputPathResolver, ResolvedOutput
from .files.writer import FileWriter
from .generators import FileGenerator, GenerationContext
from .logging import get_logger
from .mapper import GenerationMapper
from .models import ArtifactOutcome, ArtifactStatus, ComponentRecord, ContentType, RecordReport
from .scss import PassthroughCompiler, ScssCompiler
from .security import SecurityValidator
from .stores import ContentStore


class ContentTypeProcessor:
    """Runs the mapped generators for one record and writes what changed.

    A failure in one generator is recorded on the report and never stops the
    remaining generators for the same record.
    """

    def __init__(
        self,
        settings: GenerationSettings,
        store: ContentStore,
        *,
        mapper: GenerationMapper | None = None,
        writer: FileWriter | None = None,
        resolver: OutputPathResolver | None = None,
        compiler: ScssCompiler | None = None,
        validator: SecurityValidator | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.validator = validator or SecurityValidator()
        self.mapper = mapper or GenerationMapper()
        self.writer = writer or FileWriter(settings.base_dir, self.validator)
        self.resolver = resolver or OutputPathResolver(settings, self.validator)
        self.compiler = compiler or PassthroughCompiler()
        self.logger = get_logger("processor")

    # ------------------------------------------------------------------
    # Generation

    def process(
        self,
        record: ComponentRecord,
        content_type: ContentType | str | None = None,
        *,
        snapshot: Mapping[int, ComponentRecord] | None = None,
    ) -> RecordReport:
        """Generate all artifacts for ``record``; idempotent for unchanged input."""
        raw_type = content_type if content_type is not None else record.type
        report = RecordReport(
            record_id=record.id,
            content_type=getattr(raw_type, "value", str(raw_type)),
            slug=record.slug,
        )
        try:
            kind = ContentType.parse(raw_type)
        except ValueError as exc:
            report.error = str(exc)
            self.logger.warning("Record %s: %s", record.id, exc)
            return report

        if not record.is_published:
            report.skipped = True
            self.logger.debug("Record %s is %s; nothing to generate", record.id, record.status)
            return report

        try:
            resolved = self.resolver.resolve(kind, record)
        except PathError as exc:
            report.error = str(exc)
            report.artifacts.append(
                ArtifactOutcome(
                    generator="*",
                    path=exc.path,
                    status=ArtifactStatus.FAILED,
                    error_kind="path",
                    error=str(exc),
                )
            )
            self.logger.warning("Record %s: unsafe output path: %s", record.id, exc)
            return report

        context = self._context(record, snapshot)
        for generator in self.mapper.generators_for(kind):
            outcome = self._run_generator(generator, record, resolved, context)
            report.artifacts.append(outcome)
        return report

    def _context(
        self,
        record: ComponentRecord,
        snapshot: Mapping[int, ComponentRecord] | None,
    ) -> GenerationContext:
        records: Dict[int, ComponentRecord]
        if snapshot is None:
            records = {r.id: r for r in self.store.all()}
        else:
            records = dict(snapshot)
        records[record.id] = record
        return GenerationContext(
            settings=self.settings,
            records=records,
            compiler=self.compiler,
            validator=self.validator,
        )

    def _run_generator(
        self,
        generator: FileGenerator,
        record: ComponentRecord,
        resolved: ResolvedOutput,
        context: GenerationContext,
    ) -> ArtifactOutcome:
        path = resolved.path_for(generator.generated_file_name(record))
        outcome = ArtifactOutcome(generator=generator.name, path=str(path), status=ArtifactStatus.SKIPPED)

        try:
            if not generator.validate(record):
                if self.writer.delete_if_exists(path):
                    outcome.status = ArtifactStatus.REMOVED
                self.logger.debug("%s skipped for %s (%s)", generator.name, record.slug, outcome.status.value)
                return outcome

            issues = generator.screen(record, self.validator)
            if issues:
                raise GenerationError("; ".join(issues), generator=generator.name, issues=issues)

            content = generator.generate(record, context)
            written = self.writer.write_if_changed(path, content)
        except GenerationError as exc:
            return self._failed(outcome, record, "security" if exc.issues else "generation", exc)
        except PathError as exc:
            return self._failed(outcome, record, "path", exc)
        except WriteError as exc:
            return self._failed(outcome, record, "write", exc)

        outcome.status = ArtifactStatus.WRITTEN if written else ArtifactStatus.UNCHANGED
        self.logger.debug("%s -> %s (%s)", generator.name, path.name, outcome.status.value)
        return outcome

    def _failed(
        self,
        outcome: ArtifactOutcome,
        record: ComponentRecord,
        error_kind: str,
        exc: Exception,
    ) -> ArtifactOutcome:
        outcome.status = ArtifactStatus.FAILED
        outcome.error_kind = error_kind
        outcome.error = str(exc)
        self.logger.warning(
            "%s failed for record %s (%s): %s", outcome.generator, record.id, record.slug, exc
        )
        return outcome

    # ------------------------------------------------------------------
    # Ownership and cleanup

    def output_directory(self, content_type: ContentType | str, record: ComponentRecord) -> Path:
        return self.resolver.resolve(content_type, record).directory

    def owned_paths(self, content_type: ContentType | str, slug: str) -> List[Path]:
        """Paths owned by a record with ``slug``: its block directory or its exact file."""
        resolved = self.resolver.resolve_slug(content_type, slug)
        if resolved.owns_directory:
            return [resolved.directory]
        return resolved.paths

    def remove_outputs(self, content_type: ContentType | str, slug: str) -> List[str]:
        """Delete everything owned by ``slug``; return the removed paths."""
        removed: List[str] = []
        resolved = self.resolver.resolve_slug(content_type, slug)
        if resolved.owns_directory:
            if self.writer.remove_directory(resolved.directory):
                removed.append(str(resolved.directory))
            return removed
        for path in resolved.paths:
            if self.writer.delete_if_exists(path):
                removed.append(str(path))
        return removed

    def file_status(self, record: ComponentRecord) -> Optional[Dict[str, object]]:
        """Report existence, size and mtime for each file ``record`` is expected to own."""
        try:
            resolved = self.resolver.resolve(record.type, record)
        except PathError:
            return None
        return {
            "id": record.id,
            "type": record.type.value,
            "slug": record.slug,
            "directory": str(resolved.directory),
            "files": [self.writer.file_status(path) for path in resolved.paths],
        }


__all__ = ["ContentTypeProcessor"]
