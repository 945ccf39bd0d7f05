"""Idempotent filesystem adapter used by every generator."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import PathError, WriteError
from ..logging import get_logger
from ..security import SecurityValidator

_DEFAULT_FILE_MODE = 0o644
TEMP_SUFFIX = ".tmp"


class FileWriter:
    """Writes files only when their content changes, always via write-then-rename.

    Every path handled here must live inside ``base_dir``; anything else raises
    :class:`PathError` before the filesystem is touched.
    """

    def __init__(self, base_dir: Path, validator: SecurityValidator | None = None) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.validator = validator or SecurityValidator()
        self.logger = get_logger("files.writer")
        self.write_count = 0
        self.delete_count = 0

    # ------------------------------------------------------------------
    # Path checks

    def validate_file_path(self, path: Path) -> bool:
        return not self.validator.validate_path(Path(path), self.base_dir)

    def ensure_within_base(self, path: Path) -> Path:
        issues = self.validator.validate_path(Path(path), self.base_dir)
        if issues:
            raise PathError("; ".join(issues), path)
        return Path(path)

    # ------------------------------------------------------------------
    # Writes

    def is_write_required(self, path: Path, content: str) -> bool:
        path = Path(path)
        if not path.is_file():
            return True
        try:
            existing = path.read_bytes()
        except OSError:
            return True
        return existing != content.encode("utf-8")

    def write_if_changed(self, path: Path, content: str) -> bool:
        """Write ``content`` when it differs from disk; return True if a write happened."""
        path = self.ensure_within_base(path)
        if not self.is_write_required(path, content):
            return False
        self.write_file(path, content)
        return True

    def write_file(self, path: Path, content: str) -> None:
        path = self.ensure_within_base(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"Cannot create directory {path.parent}: {exc}", path) from exc

        mode = self._target_mode(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=TEMP_SUFFIX, dir=path.parent)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise WriteError(f"Failed to write {path}: {exc}", path) from exc
        self.write_count += 1
        self.logger.info("Wrote %s", self._display(path))

    # ------------------------------------------------------------------
    # Deletes

    def delete_if_exists(self, path: Path) -> bool:
        """Remove a single file; return True when something was deleted."""
        path = self.ensure_within_base(path)
        if not path.exists() and not path.is_symlink():
            return False
        if path.is_dir() and not path.is_symlink():
            raise WriteError(f"Refusing to delete directory {path} as a file", path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise WriteError(f"Failed to delete {path}: {exc}", path) from exc
        self.delete_count += 1
        self.logger.info("Removed %s", self._display(path))
        return True

    def remove_directory(self, path: Path) -> bool:
        """Remove an owned output directory and everything inside it."""
        path = self.ensure_within_base(path)
        if path.resolve() == self.base_dir:
            raise PathError("Refusing to remove the output base directory", path)
        if not path.is_dir():
            return False
        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise WriteError(f"Failed to remove directory {path}: {exc}", path) from exc
        self.delete_count += 1
        self.logger.info("Removed directory %s", self._display(path))
        return True

    # ------------------------------------------------------------------
    # Queries

    def file_exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def get_file_size(self, path: Path) -> int:
        path = Path(path)
        return path.stat().st_size if path.is_file() else 0

    def get_file_content(self, path: Path) -> Optional[str]:
        path = Path(path)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def get_modification_time(self, path: Path) -> Optional[float]:
        path = Path(path)
        if not path.is_file():
            return None
        return path.stat().st_mtime

    def list_entries(self, directory: Path) -> List[Path]:
        directory = Path(directory)
        if not directory.is_dir():
            return []
        return sorted(directory.iterdir())

    def list_temp_files(self, directory: Path) -> List[Path]:
        """Return leftover ``.<name>.*.tmp`` files from interrupted writes."""
        return [
            entry
            for entry in self.list_entries(directory)
            if entry.is_file() and entry.name.startswith(".") and entry.name.endswith(TEMP_SUFFIX)
        ]

    def file_status(self, path: Path) -> Dict[str, object]:
        path = Path(path)
        exists = path.is_file()
        return {
            "path": str(path),
            "exists": exists,
            "size": self.get_file_size(path) if exists else 0,
            "modified": self.get_modification_time(path) if exists else None,
        }

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _target_mode(path: Path) -> int:
        try:
            return stat.S_IMODE(path.stat().st_mode)
        except OSError:
            return _DEFAULT_FILE_MODE

    def _display(self, path: Path) -> str:
        try:
            return str(path.resolve().relative_to(self.base_dir))
        except ValueError:
            return str(path)


__all__ = ["FileWriter", "TEMP_SUFFIX"]
