"""Tests for blockgen.coordinator."""

from __future__ import annotations

from pathlib import Path

import pytest

from blockgen.config import load_config
from blockgen.coordinator import EventKind, GenerationCoordinator, RecordEvent
from blockgen.files.writer import FileWriter
from blockgen.stores import InMemoryContentStore
from tests._fixtures.records import RecordingCompiler, Workspace, block, partial, symbol


def _save(workspace: Workspace, record):
    workspace.add(record)
    return workspace.coordinator.handle_post_save(record)


def test_save_generates_record_files(workspace: Workspace) -> None:
    report = _save(workspace, block(1, "hero", php="<div></div>"))

    assert report.action == "save"
    assert report.ok
    assert "blocks/hero/render.php" in workspace.files()


def test_saving_partial_regenerates_dependent_blocks(workspace: Workspace) -> None:
    _save(workspace, partial(10, "colors", "$c: red;", is_global=True))
    _save(workspace, block(1, "hero", scss=".hero{color:$c}"))

    report = _save(workspace, partial(10, "colors", "$c: green;", is_global=True))

    assert [r.record_id for r in report.records] == [10, 1]
    assert "$c: green;" in workspace.read("blocks/hero/style.css")
    assert workspace.read("scss/_colors.scss") == "$c: green;"


def test_unpublishing_removes_outputs(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>"))

    report = _save(workspace, block(1, "hero", status="draft", php="<div></div>"))

    assert not workspace.block_dir("hero").exists()
    assert report.files_removed == 1


def test_rename_writes_new_slug_and_removes_old(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>", scss=".a{}"))
    renamed = block(1, "banner", php="<div></div>", scss=".a{}")
    workspace.add(renamed)

    report = workspace.coordinator.handle_post_rename(renamed, "hero", "banner")

    assert report.action == "rename"
    assert not workspace.block_dir("hero").exists()
    assert all(path.startswith("blocks/banner/") for path in workspace.files())
    assert "blocks/banner/style.css" in workspace.files()
    assert str(workspace.block_dir("hero")) in report.removed_paths


def test_rename_keeps_old_outputs_when_new_slug_is_unsafe(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>"))
    renamed = block(1, "../hero", php="<div></div>")

    report = workspace.coordinator.handle_post_rename(renamed, "hero", "../hero")

    assert workspace.block_dir("hero").is_dir()
    assert report.ok is False
    assert report.errors


def test_rename_keeps_old_outputs_when_attributes_are_malformed(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>"))
    renamed = block(1, "banner", php="<div></div>", attributesJson="[not json")
    workspace.add(renamed)

    report = workspace.coordinator.handle_post_rename(renamed, "hero", "banner")

    assert (workspace.block_dir("hero") / "block.json").is_file()
    assert (workspace.block_dir("hero") / "render.php").is_file()
    assert report.ok is False
    assert report.errors
    assert report.removed_paths == []


def test_rename_keeps_old_outputs_when_render_is_rejected(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div>safe</div>"))
    renamed = block(1, "banner", php="<?php system('id'); ?>")
    workspace.add(renamed)

    report = workspace.coordinator.handle_post_rename(renamed, "hero", "banner")

    assert workspace.read("blocks/hero/render.php") == "<div>safe</div>"
    assert not (workspace.block_dir("banner") / "render.php").exists()
    assert report.ok is False
    render = next(o for o in report.records[0].artifacts if o.generator == "render")
    assert render.error_kind == "security"


def test_rename_writes_new_slug_before_removing_old(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>"))
    new_render = workspace.block_dir("banner") / "render.php"
    observed = []

    class RecordingWriter(FileWriter):
        def remove_directory(self, path: Path) -> bool:
            observed.append((Path(path).name, new_render.is_file()))
            return super().remove_directory(path)

    coordinator = GenerationCoordinator(
        workspace.settings,
        workspace.store,
        writer=RecordingWriter(workspace.base_dir),
        compiler=workspace.compiler,
    )
    renamed = block(1, "banner", php="<div></div>")
    workspace.add(renamed)

    coordinator.handle_post_rename(renamed, "hero", "banner")

    assert observed == [("hero", True)]
    assert not workspace.block_dir("hero").exists()


def test_symbol_rename_updates_dependents(workspace: Workspace) -> None:
    _save(workspace, symbol(2, "card", "<p></p>"))
    _save(workspace, block(1, "hero", php="<Card />"))
    renamed = symbol(2, "tile", "<p></p>")
    workspace.add(renamed)

    report = workspace.coordinator.handle_post_rename(renamed, "card", "tile")

    assert workspace.files() == sorted(
        ["symbols/tile.php"] + [f"blocks/hero/{name}" for name in ("block.json", "index.asset.php", "index.js", "render.php")]
    )
    assert 1 in [r.record_id for r in report.records]
    assert "Symbol not found: card.php" in workspace.read("blocks/hero/render.php")


def test_deletion_removes_only_the_owned_directory(workspace: Workspace) -> None:
    hero = block(1, "hero", php="<div></div>")
    _save(workspace, hero)
    _save(workspace, block(2, "hero-2", php="<div></div>"))

    report = workspace.coordinator.handle_post_deletion(hero)

    assert report.action == "delete"
    assert not workspace.block_dir("hero").exists()
    assert workspace.block_dir("hero-2").is_dir()


def test_symbol_deletion_excludes_it_from_dependents(workspace: Workspace) -> None:
    card = symbol(2, "card", "<p></p>")
    _save(workspace, card)
    _save(workspace, symbol(3, "card-2", "<p></p>"))
    _save(workspace, block(1, "hero", php="<Card />"))

    workspace.coordinator.handle_post_deletion(card)

    assert "symbols/card.php" not in workspace.files()
    assert "symbols/card-2.php" in workspace.files()
    assert "Symbol not found: card.php" in workspace.read("blocks/hero/render.php")


def test_partial_deletion_drops_it_from_selecting_blocks(workspace: Workspace) -> None:
    colors = partial(10, "colors", "$c: red;")
    _save(workspace, colors)
    _save(workspace, block(1, "hero", scss=".hero{color:$c}", selectedPartialIds=[10]))
    assert "$c: red;" in workspace.read("blocks/hero/style.css")

    report = workspace.coordinator.handle_post_deletion(colors)

    assert "scss/_colors.scss" not in workspace.files()
    assert "$c: red;" not in workspace.read("blocks/hero/style.css")
    assert workspace.compiler.calls[-1][1] == []
    assert [r.record_id for r in report.records] == [1]


def test_regenerate_all_isolates_failures(tmp_path: Path) -> None:
    workspace = Workspace(tmp_path, compiler=RecordingCompiler(fail_on="$broken"))
    workspace.add(
        block(1, "broken", php="<div></div>", scss=".a{color:$broken}"),
        block(2, "fine", php="<div></div>", scss=".b{}"),
        symbol(3, "card", "<p></p>"),
    )

    report = workspace.coordinator.regenerate_all_files()

    assert report.action == "regenerate-all"
    assert report.failed == 1
    assert report.succeeded == 2
    assert "blocks/fine/style.css" in workspace.files()
    assert "blocks/broken/render.php" in workspace.files()
    assert "blocks/broken/style.css" not in workspace.files()


def test_regenerate_all_prunes_orphans(workspace: Workspace) -> None:
    workspace.add(
        block(1, "hero", php="<div></div>"),
        block(2, "draft", status="draft", php="<div></div>"),
        partial(3, "colors", "$c: red;"),
    )
    stale_block = workspace.block_dir("removed")
    stale_block.mkdir(parents=True)
    (stale_block / "render.php").write_text("old", encoding="utf-8")
    (workspace.base_dir / "symbols").mkdir(parents=True)
    (workspace.base_dir / "symbols" / "gone.php").write_text("old", encoding="utf-8")
    (workspace.base_dir / "scss").mkdir(parents=True)
    (workspace.base_dir / "scss" / "_gone.scss").write_text("old", encoding="utf-8")
    (workspace.base_dir / "scss" / "main.scss").write_text("keep", encoding="utf-8")
    draft_dir = workspace.block_dir("draft")
    draft_dir.mkdir(parents=True)
    (draft_dir / "render.php").write_text("old", encoding="utf-8")

    report = workspace.coordinator.regenerate_all_files()

    files = workspace.files()
    assert "blocks/removed/render.php" not in files
    assert "blocks/draft/render.php" not in files
    assert "symbols/gone.php" not in files
    assert "scss/_gone.scss" not in files
    assert "scss/main.scss" in files
    assert "scss/_colors.scss" in files
    assert "blocks/hero/render.php" in files
    assert len(report.removed_paths) == 4


def test_regenerate_all_prunes_interrupted_temp_files(workspace: Workspace) -> None:
    workspace.add(block(1, "hero", php="<div></div>"), symbol(2, "card", "<p></p>"))
    workspace.coordinator.regenerate_all_files()
    leftovers = [
        workspace.base_dir / "symbols" / ".card.php.abc123.tmp",
        workspace.block_dir("hero") / ".render.php.x9.tmp",
    ]
    (workspace.base_dir / "scss").mkdir(parents=True)
    leftovers.append(workspace.base_dir / "scss" / "._colors.scss.k2.tmp")
    for path in leftovers:
        path.write_text("partial", encoding="utf-8")

    report = workspace.coordinator.regenerate_all_files()

    assert not any(path.exists() for path in leftovers)
    assert sorted(report.removed_paths) == sorted(str(path) for path in leftovers)
    assert "symbols/card.php" in workspace.files()
    assert "blocks/hero/render.php" in workspace.files()


def test_regenerate_all_twice_writes_nothing_new(workspace: Workspace) -> None:
    workspace.add(block(1, "hero", php="<div></div>", js="init();"), symbol(2, "card", "<p></p>"))
    workspace.coordinator.regenerate_all_files()

    report = workspace.coordinator.regenerate_all_files()

    assert report.files_written == 0
    assert report.files_removed == 0


def test_traversal_slug_writes_nothing_anywhere(workspace: Workspace, tmp_path: Path) -> None:
    record = symbol(1, "../../outside", "<p></p>")

    report = _save(workspace, record)

    assert report.ok is False
    assert workspace.files() == []
    assert not (tmp_path.parent / "outside.php").exists()


def test_dispatch_routes_events(workspace: Workspace) -> None:
    record = block(1, "hero", php="<div></div>")
    workspace.add(record)
    coordinator = workspace.coordinator

    assert coordinator.dispatch(RecordEvent(EventKind.SAVED, record)).action == "save"
    assert coordinator.dispatch(RecordEvent(EventKind.REGENERATE, record)).action == "generate"
    renamed = record.with_slug("banner")
    assert coordinator.dispatch(RecordEvent(EventKind.RENAMED, renamed, previous_slug="hero")).action == "rename"
    assert coordinator.dispatch(RecordEvent(EventKind.DELETED, renamed)).action == "delete"
    assert workspace.files() == []


def test_rename_without_slug_change_is_a_save(workspace: Workspace) -> None:
    record = block(1, "hero", php="<div></div>")
    workspace.add(record)

    report = workspace.coordinator.handle_post_rename(record, "hero", "hero")

    assert report.action == "save"


def test_regenerate_record_requires_existing_record(workspace: Workspace) -> None:
    with pytest.raises(LookupError):
        workspace.coordinator.regenerate_record(404)


def test_file_status_marks_missing_records(workspace: Workspace) -> None:
    _save(workspace, block(1, "hero", php="<div></div>"))

    statuses = workspace.coordinator.file_status([1, 99])

    assert statuses[0]["found"] is True
    assert statuses[0]["slug"] == "hero"
    assert statuses[1] == {"id": 99, "found": False, "files": []}


def test_from_config_runs_only_enabled_generators(tmp_path: Path) -> None:
    (tmp_path / ".blockgen.yml").write_text(
        "output:\n  base_dir: out\ngenerators:\n  enabled: [render, symbol]\n",
        encoding="utf-8",
    )
    store = InMemoryContentStore()
    hero = block(1, "hero", php="<div></div>", scss=".a{}", js="init();")
    store.put(hero)
    coordinator = GenerationCoordinator.from_config(load_config(tmp_path), store)

    coordinator.handle_post_save(hero)

    output = tmp_path / "out"
    assert sorted(p.name for p in output.rglob("*") if p.is_file()) == ["render.php"]


def test_from_config_rejects_unknown_generators(tmp_path: Path) -> None:
    (tmp_path / ".blockgen.yml").write_text("generators:\n  enabled: [render, sitemap]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="sitemap"):
        GenerationCoordinator.from_config(load_config(tmp_path), InMemoryContentStore())
