"""Shared pytest fixtures for the healthgen test suite.

Provides reusable fixtures for:
- A frozen clock so rendered timestamps are reproducible
- Generation contexts for any tier
- Temporary output directories
- Small hand-built registries for engine tests
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest

from healthgen.context import GenerationContext, ProjectSpec, build_context
from healthgen.registry import TemplateDescriptor, TemplateRegistry


FIXED_TIME = datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "2024-01-15T12:30:45Z"


# ---------------------------------------------------------------------------
# Clock & context
# ---------------------------------------------------------------------------

@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock that always returns ``FIXED_TIME``."""
    return lambda: FIXED_TIME


@pytest.fixture
def fixed_timestamp() -> str:
    """``FIXED_TIME`` as it appears in rendered files."""
    return FIXED_TIMESTAMP


@pytest.fixture
def make_context(fixed_clock) -> Callable[..., GenerationContext]:
    """Factory building a context with sensible defaults and a frozen clock."""

    def _make(
        tier: str = "basic",
        project_name: str = "demo-svc",
        module_uri: str = "github.com/acme/demo-svc",
        description: str | None = None,
        version: str = "1.0.0",
    ) -> GenerationContext:
        spec = ProjectSpec(
            project_name=project_name,
            module_uri=module_uri,
            description=description,
            tier=tier,
            version=version,
        )
        return build_context(spec, clock=fixed_clock)

    return _make


@pytest.fixture
def basic_context(make_context) -> GenerationContext:
    return make_context("basic")


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Not-yet-existing directory for a generated project."""
    return tmp_path / "demo-svc"


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

@pytest.fixture
def small_registry() -> TemplateRegistry:
    """Registry with one file per classification path and one gated file."""
    return TemplateRegistry(
        [
            TemplateDescriptor("main", "cmd/main.go", "package main // {{ project_name }}\n"),
            TemplateDescriptor("mod", "go.mod.tmpl", "module {{ module_uri }}\n"),
            TemplateDescriptor("ignore", ".gitignore", "bin/\n{{ not_a_variable }}\n"),
            TemplateDescriptor("logo", "assets/logo.bin", b"\x89PNG\x00\x01"),
            TemplateDescriptor("script", "scripts/run.sh", "#!/bin/sh\necho {{ version }}\n"),
            TemplateDescriptor(
                "deps",
                "internal/handlers/dependencies.go",
                "package handlers // {{ tier }}\n",
                required_feature="dependencies",
            ),
        ]
    )


# ---------------------------------------------------------------------------
# Static template sets
# ---------------------------------------------------------------------------

LOGO_BYTES = b"\x89PNG\r\n\x1a\n{{ not a template }}\xff\xfe"


@pytest.fixture
def logo_bytes() -> bytes:
    """Binary asset that is neither UTF-8 nor safe to render."""
    return LOGO_BYTES


@pytest.fixture
def make_template_set(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a static template set (manifest plus files) to disk."""

    def _make(
        name: str = "basic",
        manifest: str | None = None,
        files: dict[str, str | bytes] | None = None,
        parent: Path | None = None,
    ) -> Path:
        root = (parent or tmp_path / "templates") / name
        root.mkdir(parents=True)
        if manifest is None:
            manifest = (
                f"name: {name}\n"
                "description: Minimal health service\n"
                f"tier: {name}\n"
                "version: 2.1.0\n"
                "features:\n"
                "  docker: true\n"
                "requires:\n"
                "  internal/security/: mtls\n"
            )
        (root / "template.yaml").write_text(manifest, encoding="utf-8")
        if files is None:
            files = {
                "go.mod.tmpl": "module {{ module_uri }}\n\ngo 1.21\n",
                "README.md.tmpl": "# {{ project_name }}\n\nVersion {{ version }}\n",
                "cmd/server/main.go": "package main // {{ project_name }}\n",
                "internal/handlers/health.go": "package handlers\n",
                "internal/security/mtls.go": "package security // {{ tier }}\n",
                "assets/logo.png": LOGO_BYTES,
                "Makefile": "build:\n\tgo build {{ raw }}\n",
            }
        for relative, body in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(body, bytes):
                path.write_bytes(body)
            else:
                path.write_text(body, encoding="utf-8")
        return root

    return _make
