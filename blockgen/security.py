"""Path safety and content screening applied before generation writes anything.

The content screen is a blocklist heuristic over authored snippets, not a PHP
or JavaScript parser. It catches obvious shell/eval style calls so they are
never copied into generated files; it makes no stronger claim than that.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Pattern, Sequence

_DANGEROUS_PHP_FUNCTIONS: Sequence[str] = (
    "eval",
    "exec",
    "system",
    "shell_exec",
    "passthru",
    "popen",
    "proc_open",
    "curl_exec",
    "curl_multi_exec",
    "create_function",
    "file_put_contents",
    "fwrite",
    "fputs",
    "unlink",
    "rmdir",
    "chmod",
    "chown",
    "base64_decode",
    "gzinflate",
    "str_rot13",
    "convert_uuencode",
)

_PHP_PATTERNS: Dict[str, Pattern[str]] = {
    name: re.compile(rf"\b{re.escape(name)}\s*\(", re.IGNORECASE)
    for name in _DANGEROUS_PHP_FUNCTIONS
}
_PHP_BACKTICK = re.compile(r"`[^`]*`")

_JS_PATTERNS: Sequence[tuple[Pattern[str], str]] = (
    (re.compile(r"\beval\s*\("), "eval() is not allowed in JavaScript"),
    (re.compile(r"\bnew\s+Function\s*\(|(?<![\w.])Function\s*\("), "Function constructor is not allowed"),
    (re.compile(r"document\.write"), "document.write is not allowed"),
    (re.compile(r"<script", re.IGNORECASE), "script tags are not allowed in JavaScript code"),
)

_UNSAFE_SLUG_CHARS = ("/", "\\", "\x00")


class SecurityValidator:
    """Default security collaborator used by the path resolver and processor."""

    def __init__(self, *, screen_content: bool = True) -> None:
        self.screen_content = screen_content

    def validate_slug(self, slug: str) -> List[str]:
        issues: List[str] = []
        if not slug or not slug.strip():
            issues.append("slug is empty")
            return issues
        if ".." in slug:
            issues.append("path traversal sequences are not allowed")
        for char in _UNSAFE_SLUG_CHARS:
            if char in slug:
                issues.append(f"character {char!r} is not allowed in a slug")
        if slug.startswith("."):
            issues.append("slug must not start with a dot")
        if slug != slug.strip():
            issues.append("slug must not have surrounding whitespace")
        return issues

    def validate_path(self, path: Path, base: Path) -> List[str]:
        """Return issues when ``path`` does not resolve inside ``base``."""
        if ".." in Path(path).parts:
            return [f"path traversal sequences are not allowed: {path}"]
        resolved_base = Path(base).resolve()
        resolved = Path(path).resolve()
        if resolved == resolved_base:
            return []
        if resolved_base not in resolved.parents:
            return [f"{resolved} resolves outside {resolved_base}"]
        return []

    def screen(self, kind: str, content: str) -> List[str]:
        """Screen authored content of ``kind`` (``php``, ``js`` or ``scss``)."""
        if not self.screen_content or not content.strip():
            return []
        if kind == "php":
            return self._screen_php(content)
        if kind == "js":
            return [message for pattern, message in _JS_PATTERNS if pattern.search(content)]
        return []

    @staticmethod
    def _screen_php(content: str) -> List[str]:
        issues = [
            f"dangerous function '{name}' is not allowed"
            for name, pattern in _PHP_PATTERNS.items()
            if pattern.search(content)
        ]
        if _PHP_BACKTICK.search(content):
            issues.append("shell backticks are not allowed")
        return issues


__all__ = ["SecurityValidator"]
