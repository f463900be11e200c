"""healthgen configuration.

Typed settings for one generation run.  Pydantic v2 validates them at
construction time and handles the JSON round-trip; ``from_env`` maps
``HEALTHGEN_*`` environment variables onto the same fields.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .context import DEFAULT_VERSION, ProjectSpec
from .tiers import Tier

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


class GeneratorConfig(BaseModel):
    """Everything the CLI needs to drive one generation run."""

    project_name: str = Field(default="")
    module_uri: str = Field(default="", description="Go module path")
    description: str | None = Field(default=None)
    tier: Tier = Field(default=Tier.BASIC)
    output_dir: Path | None = Field(
        default=None, description="Target directory; defaults to ./<project_name>"
    )
    version: str = Field(default=DEFAULT_VERSION)

    parallel: bool = Field(default=True, description="Write files through a worker pool")
    max_workers: int = Field(default=4, ge=1)
    write_metadata: bool = Field(default=True, description="Write .template-metadata.yaml")
    verbose: bool = Field(default=False)

    @field_validator("tier", mode="before")
    @classmethod
    def _parse_tier(cls, value: Any) -> Tier:
        return Tier.parse(value)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def resolved_output_dir(self) -> Path:
        """Where the project is written."""
        if self.output_dir is not None and str(self.output_dir):
            return self.output_dir
        return Path(".") / self.project_name

    def to_project_spec(self) -> ProjectSpec:
        return ProjectSpec(
            project_name=self.project_name,
            module_uri=self.module_uri,
            description=self.description,
            tier=self.tier.value,
            version=self.version,
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, **overrides: Any) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            HEALTHGEN_PROJECT_NAME, HEALTHGEN_MODULE, HEALTHGEN_DESCRIPTION,
            HEALTHGEN_TIER, HEALTHGEN_OUTPUT_DIR, HEALTHGEN_VERSION,
            HEALTHGEN_PARALLEL, HEALTHGEN_MAX_WORKERS,
            HEALTHGEN_WRITE_METADATA, HEALTHGEN_VERBOSE.

        Keyword *overrides* take precedence over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("HEALTHGEN_PROJECT_NAME"):
            kwargs["project_name"] = os.environ["HEALTHGEN_PROJECT_NAME"]
        if os.environ.get("HEALTHGEN_MODULE"):
            kwargs["module_uri"] = os.environ["HEALTHGEN_MODULE"]
        if os.environ.get("HEALTHGEN_DESCRIPTION"):
            kwargs["description"] = os.environ["HEALTHGEN_DESCRIPTION"]
        if os.environ.get("HEALTHGEN_TIER"):
            kwargs["tier"] = os.environ["HEALTHGEN_TIER"]
        if os.environ.get("HEALTHGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["HEALTHGEN_OUTPUT_DIR"])
        if os.environ.get("HEALTHGEN_VERSION"):
            kwargs["version"] = os.environ["HEALTHGEN_VERSION"]
        if os.environ.get("HEALTHGEN_PARALLEL"):
            kwargs["parallel"] = _env_flag(os.environ["HEALTHGEN_PARALLEL"])
        if os.environ.get("HEALTHGEN_MAX_WORKERS"):
            kwargs["max_workers"] = int(os.environ["HEALTHGEN_MAX_WORKERS"])
        if os.environ.get("HEALTHGEN_WRITE_METADATA"):
            kwargs["write_metadata"] = _env_flag(os.environ["HEALTHGEN_WRITE_METADATA"])
        if os.environ.get("HEALTHGEN_VERBOSE"):
            kwargs["verbose"] = _env_flag(os.environ["HEALTHGEN_VERBOSE"])

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
