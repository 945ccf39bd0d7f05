"""SCSS compiler collaborators used by the stylesheet generators."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence

from .config import ScssConfig
from .errors import ScssCompileError
from .logging import get_logger

DEFAULT_SASS_EXECUTABLE = "sass"
DEFAULT_SASS_TIMEOUT = 30.0


@dataclass(frozen=True)
class PartialSource:
    """A partial made available to a compile call, in inclusion order."""

    slug: str
    content: str


class ScssCompiler(Protocol):
    name: str

    def compile(self, source: str, partials: Sequence[PartialSource] = ()) -> str:
        """Return CSS for ``source`` or raise :class:`ScssCompileError`."""


def combine_sources(source: str, partials: Sequence[PartialSource] = ()) -> str:
    """Prefix ``source`` with each partial so variables and mixins are in scope."""
    chunks: List[str] = []
    for partial in partials:
        content = partial.content.strip()
        if content:
            chunks.append(f"/* partial: {partial.slug} */\n{content}")
    chunks.append(source.strip())
    return "\n\n".join(chunk for chunk in chunks if chunk) + "\n"


class PassthroughCompiler:
    """Emit the combined SCSS unchanged, for setups without a Sass toolchain."""

    name = "passthrough"

    def compile(self, source: str, partials: Sequence[PartialSource] = ()) -> str:
        return combine_sources(source, partials)


Runner = Callable[..., str]


class DartSassCompiler:
    """Compile through the Dart Sass command line executable."""

    name = "dart-sass"

    def __init__(
        self,
        executable: str = DEFAULT_SASS_EXECUTABLE,
        *,
        timeout: float = DEFAULT_SASS_TIMEOUT,
        runner: Runner | None = None,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self._runner = runner or self._default_runner
        self.logger = get_logger("scss")

    def compile(self, source: str, partials: Sequence[PartialSource] = ()) -> str:
        stdin = combine_sources(source, partials)
        args = [self.executable, "--stdin", "--no-source-map", "--style=expanded"]
        try:
            output = self._runner(args, input_text=stdin, timeout=self.timeout)
        except FileNotFoundError as exc:
            raise ScssCompileError(
                f"Sass executable '{self.executable}' was not found", generator=self.name
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ScssCompileError(
                f"Sass compilation timed out after {self.timeout:g}s", generator=self.name
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip() or f"exit status {exc.returncode}"
            raise ScssCompileError(f"Sass compilation failed: {detail}", generator=self.name) from exc
        self.logger.debug("Compiled %d bytes of SCSS", len(stdin))
        return output if output.endswith("\n") else output + "\n"

    @staticmethod
    def _default_runner(args: Sequence[str], *, input_text: str, timeout: float) -> str:
        completed = subprocess.run(
            list(args),
            input=input_text,
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        return completed.stdout


def build_compiler(config: Optional[ScssConfig] = None) -> ScssCompiler:
    """Instantiate the compiler named in configuration, defaulting to passthrough."""
    config = config or ScssConfig()
    if config.compiler == "dart-sass":
        return DartSassCompiler(
            config.executable or DEFAULT_SASS_EXECUTABLE,
            timeout=config.timeout or DEFAULT_SASS_TIMEOUT,
        )
    return PassthroughCompiler()


__all__ = [
    "DartSassCompiler",
    "PartialSource",
    "PassthroughCompiler",
    "ScssCompiler",
    "build_compiler",
    "combine_sources",
]
