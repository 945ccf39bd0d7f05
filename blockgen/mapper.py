"""Content type to generator mapping, computed once at construction."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple

from .generators import FileGenerator, discover_generators
from .logging import get_logger
from .models import ContentType

_DIRECTORY_STRATEGIES: Mapping[ContentType, Tuple[str, str]] = {
    ContentType.BLOCK: ("block-specific", "One directory per block with its render, style, script and manifest files"),
    ContentType.SYMBOL: ("symbols", "Shared PHP partials included by block render templates"),
    ContentType.SCSS_PARTIAL: ("scss", "Shared SCSS partials compiled into dependent block styles"),
}


@dataclass(frozen=True)
class ContentTypeMapping:
    """Static description of how one content type is generated."""

    content_type: ContentType
    generators: Tuple[str, ...]
    directory_strategy: str
    description: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "generators": list(self.generators),
            "directory_strategy": self.directory_strategy,
            "description": self.description,
        }


class GenerationMapper:
    """Answers which generators apply to a content type, in registration order."""

    def __init__(self, generators: Sequence[FileGenerator] | None = None) -> None:
        self.logger = get_logger("mapper")
        registered = list(generators) if generators is not None else discover_generators()
        table: Dict[ContentType, List[FileGenerator]] = {kind: [] for kind in ContentType}
        for generator in registered:
            for kind in ContentType:
                if generator.can_generate(kind):
                    table[kind].append(generator)
        self._table: Mapping[ContentType, Tuple[FileGenerator, ...]] = MappingProxyType(
            {kind: tuple(items) for kind, items in table.items()}
        )
        self._mapping: Mapping[ContentType, ContentTypeMapping] = MappingProxyType(
            {
                kind: ContentTypeMapping(
                    content_type=kind,
                    generators=tuple(g.name for g in self._table[kind]),
                    directory_strategy=_DIRECTORY_STRATEGIES[kind][0],
                    description=_DIRECTORY_STRATEGIES[kind][1],
                )
                for kind in ContentType
            }
        )
        for kind, items in self._table.items():
            self.logger.debug("%s -> %s", kind.value, ", ".join(g.name for g in items) or "(none)")

    def generators_for(self, content_type: ContentType | str) -> List[FileGenerator]:
        """Return the ordered generators for ``content_type``; unknown types map to nothing."""
        try:
            kind = ContentType.parse(content_type)
        except ValueError:
            return []
        return list(self._table[kind])

    def content_type_mapping(self) -> Mapping[ContentType, ContentTypeMapping]:
        return self._mapping

    def supported_types(self) -> List[ContentType]:
        return [kind for kind, items in self._table.items() if items]


__all__ = ["ContentTypeMapping", "GenerationMapper"]
