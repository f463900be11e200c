"""Variable context builder.

Validates the caller's project inputs and assembles the immutable namespace
that every template in one run is rendered against.  Validation happens here,
before the generator touches the filesystem.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from .errors import InvalidModuleURIError, InvalidProjectNameError
from .tiers import FeatureSet, Tier, features_for_tier

DEFAULT_VERSION = "1.0.0"

_PROJECT_NAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")


class ProjectSpec(BaseModel):
    """Raw project inputs as handed over by the CLI layer."""

    project_name: str = Field(..., description="Project name (letters, digits, hyphens)")
    module_uri: str = Field(..., description="Go module path, e.g. github.com/acme/svc")
    description: str | None = Field(default=None, description="Optional project description")
    tier: str = Field(default=Tier.BASIC.value, description="Template tier")
    version: str = Field(default=DEFAULT_VERSION, description="Generated project version")


@dataclass(frozen=True)
class GenerationContext:
    """Substitution namespace shared by every file of one generation run."""

    project_name: str
    module_uri: str
    description: str
    version: str
    generated_at: str
    tier: Tier
    features: FeatureSet

    def for_tier(self, tier: "str | Tier") -> "GenerationContext":
        """Return a copy re-targeted at *tier* (same timestamp, new feature flags)."""
        resolved = Tier.parse(tier)
        if resolved == self.tier:
            return self
        return replace(self, tier=resolved, features=features_for_tier(resolved))

    def template_vars(self) -> dict[str, Any]:
        """Flatten the context into the names templates can reference."""
        return {
            "project_name": self.project_name,
            "module_uri": self.module_uri,
            "description": self.description,
            "version": self.version,
            "timestamp": self.generated_at,
            "tier": self.tier.value,
            "features": self.features.as_dict(),
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_project_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidProjectNameError("Project name is required")
    if not _PROJECT_NAME_RE.match(cleaned):
        raise InvalidProjectNameError(
            f"Invalid project name {cleaned!r}: use letters, digits and hyphens, "
            "starting and ending with a letter or digit"
        )
    return cleaned


def validate_module_uri(module_uri: str) -> str:
    cleaned = (module_uri or "").strip()
    if not cleaned:
        raise InvalidModuleURIError("Go module path is required")
    if any(ch.isspace() for ch in cleaned) or cleaned.startswith("/") or cleaned.endswith("/"):
        raise InvalidModuleURIError(f"Invalid Go module path: {cleaned!r}")
    return cleaned


def build_context(
    spec: ProjectSpec,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> GenerationContext:
    """Validate *spec* and build the ``GenerationContext`` for one run.

    The wall clock is read exactly once, so every file rendered from the
    returned context carries the same timestamp.

    Raises:
        InvalidProjectNameError: Empty or malformed project name.
        InvalidModuleURIError: Empty or malformed module path.
        InvalidTierError: Unknown tier.
    """
    name = validate_project_name(spec.project_name)
    module_uri = validate_module_uri(spec.module_uri)
    tier = Tier.parse(spec.tier)
    description = (spec.description or "").strip() or f"{name} health endpoint service"

    return GenerationContext(
        project_name=name,
        module_uri=module_uri,
        description=description,
        version=spec.version or DEFAULT_VERSION,
        generated_at=clock().astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        tier=tier,
        features=features_for_tier(tier),
    )
