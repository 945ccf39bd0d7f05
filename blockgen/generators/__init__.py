"""File generator implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import BlockFileGenerator, FileGenerator, GenerationContext
from .block_json import BlockJsonGenerator
from .editor_script import AssetManifestGenerator, EditorScriptGenerator
from .render import RenderGenerator
from .shared import ScssPartialGenerator, SymbolGenerator
from .styles import EditorCssGenerator, EditorScssGenerator, StyleCssGenerator, StyleScssGenerator
from .view import ViewScriptGenerator

_ENTRY_POINT_GROUP = "blockgen.generators"

# Registration order is the generation order within a content type.
_BUILTIN_FACTORIES: dict[str, Callable[[], FileGenerator]] = {
    "render": RenderGenerator,
    "view": ViewScriptGenerator,
    "style-scss": StyleScssGenerator,
    "style-css": StyleCssGenerator,
    "editor-scss": EditorScssGenerator,
    "editor-css": EditorCssGenerator,
    "block-json": BlockJsonGenerator,
    "index-js": EditorScriptGenerator,
    "index-asset": AssetManifestGenerator,
    "symbol": SymbolGenerator,
    "scss-partial": ScssPartialGenerator,
}


def builtin_generator_names() -> List[str]:
    return list(_BUILTIN_FACTORIES)


def discover_generators(enabled: Sequence[str] | None = None) -> List[FileGenerator]:
    """Return instantiated generators, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    generators: List[FileGenerator] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], FileGenerator]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, FileGenerator):
            raise TypeError(f"Generator factory for '{name}' did not return a FileGenerator instance")
        generators.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load generator entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> FileGenerator:
            return _coerce_generator(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown generators requested: {missing}")

    return generators


def _coerce_generator(obj: object) -> FileGenerator:
    if isinstance(obj, FileGenerator):
        return obj
    if isinstance(obj, type) and issubclass(obj, FileGenerator):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, FileGenerator):
            return instance
    raise TypeError("Generator entry point must be a FileGenerator subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "BlockFileGenerator",
    "FileGenerator",
    "GenerationContext",
    "builtin_generator_names",
    "discover_generators",
]
