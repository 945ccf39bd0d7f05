"""Tests for slug, path and content screening."""

from __future__ import annotations

from pathlib import Path

import pytest

from blockgen.security import SecurityValidator


@pytest.fixture
def validator() -> SecurityValidator:
    return SecurityValidator()


def test_plain_slugs_pass(validator: SecurityValidator) -> None:
    assert validator.validate_slug("hero-banner_2") == []


@pytest.mark.parametrize("slug", ["..", "a/../b", "a/b", "a\\b", ".env", "", "   ", "nul\x00l"])
def test_unsafe_slugs_are_reported(validator: SecurityValidator, slug: str) -> None:
    assert validator.validate_slug(slug)


def test_validate_path_requires_containment(validator: SecurityValidator, tmp_path: Path) -> None:
    base = tmp_path / "out"

    assert validator.validate_path(base / "blocks" / "hero" / "render.php", base) == []
    assert validator.validate_path(tmp_path / "other.php", base)
    assert validator.validate_path(base / ".." / "x", base)


def test_php_screen_flags_shell_calls(validator: SecurityValidator) -> None:
    issues = validator.screen("php", "<?php echo `whoami`; eval($code); ?>")

    assert any("eval" in issue for issue in issues)
    assert any("backticks" in issue for issue in issues)


def test_php_screen_allows_template_markup(validator: SecurityValidator) -> None:
    php = "<?php echo esc_html( $attributes['title'] ?? '' ); ?><InnerBlocks />"

    assert validator.screen("php", php) == []


def test_js_screen(validator: SecurityValidator) -> None:
    assert validator.screen("js", "const f = new Function('a', 'return a');")
    assert validator.screen("js", "document.querySelector('.x').addEventListener('click', go);") == []


def test_screening_can_be_disabled() -> None:
    assert SecurityValidator(screen_content=False).screen("php", "<?php system('x'); ?>") == []
