"""Decide which generated files go through variable substitution.

Anything not explicitly whitelisted is copied byte-for-byte: substituting a
binary asset corrupts it, so unknown extensions never get rendered.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

TEMPLATE_SUFFIX = ".tmpl"

SUBSTITUTION_EXTENSIONS: frozenset[str] = frozenset(
    {".go", ".ts", ".yaml", ".yml", ".json", ".sh", ".md"}
)

SUBSTITUTION_BASENAMES: frozenset[str] = frozenset(
    {"go.mod", "README.md", "Dockerfile", "docker-compose.yml", "package.json"}
)


def _pure(path: str | Path) -> PurePosixPath:
    return PurePosixPath(str(path).replace("\\", "/"))


def needs_substitution(path: str | Path) -> bool:
    """Return ``True`` if the file at *path* must be rendered as a template.

    The decision depends only on the path (suffix and basename), never on
    file contents.
    """
    p = _pure(path)
    if p.suffix == TEMPLATE_SUFFIX:
        return True
    if p.suffix in SUBSTITUTION_EXTENSIONS:
        return True
    return p.name in SUBSTITUTION_BASENAMES


def strip_template_suffix(path: str | Path) -> str:
    """Drop a trailing ``.tmpl`` from *path*; other paths pass through.

    ``"go.mod.tmpl"`` -> ``"go.mod"``, ``"cmd/server/main.go"`` unchanged.
    """
    text = str(path)
    if text.endswith(TEMPLATE_SUFFIX):
        return text[: -len(TEMPLATE_SUFFIX)]
    return text
