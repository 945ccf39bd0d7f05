"""Filesystem adapters: the idempotent writer and the output path resolver."""

from .paths import OutputPathResolver, ResolvedOutput
from .writer import FileWriter

__all__ = ["FileWriter", "OutputPathResolver", "ResolvedOutput"]
