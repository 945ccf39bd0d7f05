"""Pure mapping from a record to the directory and file names it owns."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from ..config import GenerationSettings
from ..errors import PathError
from ..models import ComponentRecord, ContentType
from ..security import SecurityValidator

RENDER_FILE = "render.php"
VIEW_FILE = "view.js"
STYLE_SCSS_FILE = "style.scss"
STYLE_CSS_FILE = "style.css"
EDITOR_SCSS_FILE = "editor.scss"
EDITOR_CSS_FILE = "editor.css"
BLOCK_JSON_FILE = "block.json"
INDEX_JS_FILE = "index.js"
INDEX_ASSET_FILE = "index.asset.php"

BLOCK_FILENAMES: Tuple[str, ...] = (
    RENDER_FILE,
    VIEW_FILE,
    STYLE_SCSS_FILE,
    STYLE_CSS_FILE,
    EDITOR_SCSS_FILE,
    EDITOR_CSS_FILE,
    BLOCK_JSON_FILE,
    INDEX_JS_FILE,
    INDEX_ASSET_FILE,
)


def symbol_filename(slug: str) -> str:
    return f"{slug}.php"


def partial_filename(slug: str) -> str:
    return f"_{slug}.scss"


def block_expected_files(record: ComponentRecord) -> List[str]:
    """Return the block files that the record's current fields produce."""
    names: List[str] = []
    if record.has_text("php"):
        names.append(RENDER_FILE)
    if record.has_text("js"):
        names.append(VIEW_FILE)
    if record.has_text("scss"):
        names.append(STYLE_SCSS_FILE)
    if record.has_text("scss") or record.has_text("compiledCss"):
        names.append(STYLE_CSS_FILE)
    if record.has_text("editorScss"):
        names.append(EDITOR_SCSS_FILE)
    if record.has_text("editorScss") or record.has_text("editorCompiledCss"):
        names.append(EDITOR_CSS_FILE)
    names.extend([BLOCK_JSON_FILE, INDEX_JS_FILE, INDEX_ASSET_FILE])
    return names


@dataclass(frozen=True)
class ResolvedOutput:
    """Directory and file names a record's artifacts live under.

    ``owns_directory`` is True only for blocks, whose directory holds nothing
    but that record's files and can therefore be removed wholesale.
    """

    content_type: ContentType
    directory: Path
    filenames: Tuple[str, ...]
    owns_directory: bool = False

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    @property
    def paths(self) -> List[Path]:
        return [self.directory / name for name in self.filenames]


class OutputPathResolver:
    """Resolve output locations under the configured base directory."""

    def __init__(
        self,
        settings: GenerationSettings,
        validator: SecurityValidator | None = None,
    ) -> None:
        self.settings = settings
        self.validator = validator or SecurityValidator()

    def resolve(self, content_type: ContentType | str, record: ComponentRecord) -> ResolvedOutput:
        return self.resolve_slug(content_type, record.slug, record)

    def resolve_slug(
        self,
        content_type: ContentType | str,
        slug: str,
        record: ComponentRecord | None = None,
    ) -> ResolvedOutput:
        """Resolve outputs for ``slug``; ``record`` narrows block files to those it produces."""
        kind = ContentType.parse(content_type)
        issues = self.validator.validate_slug(slug)
        if issues:
            raise PathError(f"Unsafe slug {slug!r}: {'; '.join(issues)}", slug)

        if kind is ContentType.BLOCK:
            directory = self.settings.blocks_dir / slug
            filenames = tuple(block_expected_files(record)) if record else BLOCK_FILENAMES
            resolved = ResolvedOutput(kind, directory, filenames, owns_directory=True)
        elif kind is ContentType.SYMBOL:
            resolved = ResolvedOutput(kind, self.settings.symbols_dir, (symbol_filename(slug),))
        else:
            resolved = ResolvedOutput(kind, self.settings.scss_dir, (partial_filename(slug),))

        self._check_inside_base(resolved)
        return resolved

    def _check_inside_base(self, resolved: ResolvedOutput) -> None:
        base = self.settings.base_dir
        targets = [resolved.directory] + resolved.paths
        for target in targets:
            issues = self.validator.validate_path(target, base)
            if issues:
                raise PathError("; ".join(issues), target)
        if resolved.owns_directory and resolved.directory.resolve() == Path(base).resolve():
            raise PathError("Block output cannot be the base directory", resolved.directory)


__all__ = [
    "BLOCK_FILENAMES",
    "BLOCK_JSON_FILE",
    "EDITOR_CSS_FILE",
    "EDITOR_SCSS_FILE",
    "INDEX_ASSET_FILE",
    "INDEX_JS_FILE",
    "OutputPathResolver",
    "RENDER_FILE",
    "ResolvedOutput",
    "STYLE_CSS_FILE",
    "STYLE_SCSS_FILE",
    "VIEW_FILE",
    "block_expected_files",
    "partial_filename",
    "symbol_filename",
]
