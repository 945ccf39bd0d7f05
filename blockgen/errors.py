"""Exception taxonomy for the file generation pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class BlockgenError(RuntimeError):
    """Base class for errors raised by blockgen components."""


class PathError(BlockgenError):
    """Raised when an output path is unsafe or cannot be resolved."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class GenerationError(BlockgenError):
    """Raised when a generator cannot produce valid content for an artifact."""

    def __init__(
        self,
        message: str,
        *,
        generator: str | None = None,
        issues: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.generator = generator
        self.issues = list(issues)


class ScssCompileError(GenerationError):
    """Raised by SCSS compilers when the source does not compile."""


class WriteError(BlockgenError):
    """Raised when the filesystem rejects a write or delete."""

    def __init__(self, message: str, path: str | Path) -> None:
        super().__init__(message)
        self.path = str(path)


class DependencyResolutionError(BlockgenError):
    """Raised when the dependents of a shared resource cannot be fully enumerated.

    ``resolved`` holds the dependents found before the failure.
    """

    def __init__(self, message: str, *, resolved: Sequence[int] = ()) -> None:
        super().__init__(message)
        self.resolved = list(resolved)


__all__ = [
    "BlockgenError",
    "DependencyResolutionError",
    "GenerationError",
    "PathError",
    "ScssCompileError",
    "WriteError",
]
