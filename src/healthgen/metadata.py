"""Project metadata sidecar (``.template-metadata.yaml``).

The sidecar records which tier a project was generated at so later
``migrate`` runs know where to start.  It is optional: when it is missing,
``detect_project`` infers the tier from marker files in the tree.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .context import DEFAULT_VERSION, GenerationContext
from .errors import FileWriteError
from .tiers import Tier, features_for_tier

METADATA_FILENAME = ".template-metadata.yaml"

# Checked in order; the first marker present decides the tier.
_TIER_MARKERS: list[tuple[str, Tier]] = [
    ("internal/security", Tier.ENTERPRISE),
    ("internal/compliance", Tier.ENTERPRISE),
    ("internal/events", Tier.ADVANCED),
    ("internal/observability", Tier.ADVANCED),
    ("internal/handlers/dependencies.go", Tier.INTERMEDIATE),
]


class ProjectMetadata(BaseModel):
    """What the sidecar stores about a generated project."""

    name: str = Field(..., description="Project name")
    tier: Tier = Field(..., description="Tier the project is currently at")
    version: str = Field(default="unknown")
    module: str = Field(default="unknown", description="Go module path")
    description: str = Field(default="")
    generated_at: str = Field(default="")
    features: dict[str, bool] = Field(default_factory=dict)
    detected: bool = Field(
        default=False, description="True when inferred from the tree, not read from the sidecar"
    )


def metadata_path(project_root: str | Path) -> Path:
    return Path(project_root) / METADATA_FILENAME


def write_metadata(project_root: str | Path, context: GenerationContext) -> Path:
    """Write the sidecar for *context* into *project_root*.

    Raises:
        FileWriteError: If the file cannot be written.
    """
    target = metadata_path(project_root)
    payload = {
        "name": context.project_name,
        "tier": context.tier.value,
        "version": context.version,
        "module": context.module_uri,
        "description": context.description,
        "generated_at": context.generated_at,
        "features": context.features.as_dict(),
    }
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(target, str(exc)) from exc
    return target


def read_metadata(project_root: str | Path) -> ProjectMetadata | None:
    """Load the sidecar, or return ``None`` if the project has none."""
    path = metadata_path(project_root)
    if not path.is_file():
        return None
    raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return ProjectMetadata.model_validate(raw)


def detect_project(project_root: str | Path) -> ProjectMetadata:
    """Describe the project at *project_root*.

    Prefers the sidecar; otherwise reads the module path from ``go.mod`` and
    infers the tier from which feature directories exist.
    """
    root = Path(project_root)
    recorded = read_metadata(root)
    if recorded is not None:
        return recorded

    module = "unknown"
    go_mod = root / "go.mod"
    if go_mod.is_file():
        for line in go_mod.read_text(encoding="utf-8").splitlines():
            if line.startswith("module "):
                module = line[len("module "):].strip()
                break

    tier = Tier.BASIC
    for marker, marker_tier in _TIER_MARKERS:
        if (root / marker).exists():
            tier = marker_tier
            break

    return ProjectMetadata(
        name=root.resolve().name,
        tier=tier,
        module=module,
        features=features_for_tier(tier).as_dict(),
        detected=True,
    )


def tier_summary(tier: "str | Tier") -> dict[str, Any]:
    """Describe the template set for *tier* (used when listing tiers)."""
    resolved = Tier.parse(tier)
    features = features_for_tier(resolved)
    return {
        "name": resolved.value,
        "tier": resolved.value,
        "description": resolved.description,
        "version": DEFAULT_VERSION,
        "features": list(features.enabled),
    }
