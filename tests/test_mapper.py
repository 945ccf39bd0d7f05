from __future__ import annotations

import pytest

from blockgen.generators import discover_generators
from blockgen.mapper import GenerationMapper
from blockgen.models import ContentType


@pytest.fixture(scope="module")
def mapper() -> GenerationMapper:
    return GenerationMapper()


def test_block_generators_follow_registration_order(mapper: GenerationMapper) -> None:
    names = [g.name for g in mapper.generators_for(ContentType.BLOCK)]

    assert names == [
        "render",
        "view",
        "style-scss",
        "style-css",
        "editor-scss",
        "editor-css",
        "block-json",
        "index-js",
        "index-asset",
    ]


def test_shared_types_have_a_single_generator(mapper: GenerationMapper) -> None:
    assert [g.name for g in mapper.generators_for("symbol")] == ["symbol"]
    assert [g.name for g in mapper.generators_for("scssPartial")] == ["scss-partial"]


def test_unknown_type_maps_to_nothing(mapper: GenerationMapper) -> None:
    assert mapper.generators_for("page") == []


def test_mapping_is_stable_across_calls(mapper: GenerationMapper) -> None:
    first = mapper.generators_for(ContentType.BLOCK)
    second = mapper.generators_for(ContentType.BLOCK)

    assert first == second
    assert all(a is b for a, b in zip(first, second))


def test_content_type_mapping_describes_directory_strategy(mapper: GenerationMapper) -> None:
    mapping = mapper.content_type_mapping()

    assert mapping[ContentType.BLOCK].directory_strategy == "block-specific"
    assert mapping[ContentType.SYMBOL].to_dict()["generators"] == ["symbol"]
    assert mapping[ContentType.SCSS_PARTIAL].directory_strategy == "scss"


def test_restricted_generator_set_limits_supported_types() -> None:
    mapper = GenerationMapper(discover_generators(["symbol"]))

    assert mapper.supported_types() == [ContentType.SYMBOL]
    assert mapper.generators_for(ContentType.BLOCK) == []
