"""Template sets loaded from a directory tree.

A static template set is a directory of ready-made project files next to a
``template.yaml`` manifest::

    templates/basic/
        template.yaml
        go.mod.tmpl
        README.md.tmpl
        cmd/server/main.go
        assets/logo.png

Every file except the manifest becomes one registry entry whose output path
is its path inside the set.  Files are read as bytes, so the classifier alone
decides what is rendered and what is copied.  The manifest's optional
``requires`` table gates files or whole directories on a feature.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, computed_field, field_validator

from .context import DEFAULT_VERSION, GenerationContext
from .errors import InvalidTemplateSetError, InvalidTierError
from .generator import GenerationReport, ProjectGenerator
from .registry import TemplateDescriptor, TemplateRegistry
from .renderer import TemplateRenderer
from .tiers import FEATURE_CATALOG, Tier

MANIFEST_FILENAME = "template.yaml"

# A set without these cannot produce a runnable service.
REQUIRED_FILES: tuple[str, ...] = (
    "cmd/server/main.go",
    "internal/handlers/health.go",
    "go.mod.tmpl",
    "README.md.tmpl",
)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class TemplateSetManifest(BaseModel):
    """Contents of a set's ``template.yaml``."""

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    tier: Tier = Field(default=Tier.BASIC)
    version: str = Field(default=DEFAULT_VERSION)
    features: dict[str, bool] = Field(default_factory=dict)
    requires: dict[str, str] = Field(
        default_factory=dict,
        description="File path or directory prefix -> feature that gates it",
    )

    @field_validator("tier", mode="before")
    @classmethod
    def _parse_tier(cls, value: Any) -> Tier:
        return Tier.parse(value)

    @field_validator("requires")
    @classmethod
    def _known_features(cls, value: dict[str, str]) -> dict[str, str]:
        for path, feature in value.items():
            if feature not in FEATURE_CATALOG:
                raise ValueError(f"{path!r} requires unknown feature {feature!r}")
        return {key.strip("/"): feature for key, feature in value.items()}

    def feature_for(self, relative_path: str) -> str | None:
        """Return the feature gating *relative_path*; the longest matching key wins."""
        best: str | None = None
        for key in self.requires:
            if relative_path == key or relative_path.startswith(key + "/"):
                if best is None or len(key) > len(best):
                    best = key
        return self.requires[best] if best is not None else None


def read_manifest(directory: str | Path) -> TemplateSetManifest:
    """Load and validate ``template.yaml`` from *directory*.

    Raises:
        InvalidTemplateSetError: Missing, unparsable or invalid manifest.
    """
    path = Path(directory) / MANIFEST_FILENAME
    if not path.is_file():
        raise InvalidTemplateSetError(directory, f"no {MANIFEST_FILENAME}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise InvalidTemplateSetError(
            directory, f"{MANIFEST_FILENAME} is not valid YAML: {exc}"
        ) from exc
    if not isinstance(raw, dict):
        raise InvalidTemplateSetError(directory, f"{MANIFEST_FILENAME} must be a mapping")
    try:
        return TemplateSetManifest.model_validate(raw)
    except (ValidationError, InvalidTierError) as exc:
        raise InvalidTemplateSetError(directory, str(exc)) from exc


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def discover_template_sets(directory: str | Path) -> list[Path]:
    """Return the template sets under *directory*, sorted by name.

    *directory* is itself a set when it holds a manifest; otherwise each
    immediate subdirectory with a manifest is one.
    """
    root = Path(directory)
    if (root / MANIFEST_FILENAME).is_file():
        return [root]
    if not root.is_dir():
        raise InvalidTemplateSetError(root, "not a directory")
    return sorted(
        child for child in root.iterdir()
        if child.is_dir() and (child / MANIFEST_FILENAME).is_file()
    )


def registry_from_directory(directory: str | Path) -> TemplateRegistry:
    """Build a registry from the files of the set at *directory*.

    Entries are registered in sorted path order and named by their path, so
    the same tree always yields the same registry.

    Raises:
        InvalidTemplateSetError: Not a directory, or a bad manifest.
    """
    root = Path(directory)
    if not root.is_dir():
        raise InvalidTemplateSetError(root, "not a directory")
    manifest = read_manifest(root)

    files = {
        path.relative_to(root).as_posix(): path
        for path in root.rglob("*")
        if path.is_file() and path.name != MANIFEST_FILENAME
    }
    registry = TemplateRegistry()
    for relative in sorted(files):
        registry.register(
            TemplateDescriptor(
                name=relative,
                relative_output_path=relative,
                body=files[relative].read_bytes(),
                required_feature=manifest.feature_for(relative),
            )
        )
    return registry


async def generate_from_directory(
    directory: str | Path,
    context: GenerationContext,
    output_root: str | Path,
    **generator_options: Any,
) -> GenerationReport:
    """Generate a project from the set at *directory* at the manifest's tier.

    *generator_options* are passed to ``ProjectGenerator`` (``parallel``,
    ``max_workers``, ``write_metadata``, ``verbose``).
    """
    manifest = read_manifest(directory)
    generator = ProjectGenerator(registry_from_directory(directory), **generator_options)
    return await generator.generate(manifest.tier, context, output_root)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TemplateSetReport(BaseModel):
    """Outcome of validating one template set."""

    name: str
    path: str
    template_count: int = 0
    problems: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def valid(self) -> bool:
        return not self.problems


def validate_template_set(
    directory: str | Path,
    renderer: TemplateRenderer | None = None,
) -> TemplateSetReport:
    """Check the manifest, the required files and that every templated body parses."""
    root = Path(directory)
    report = TemplateSetReport(name=root.name, path=str(root))
    try:
        manifest = read_manifest(root)
        registry = registry_from_directory(root)
    except InvalidTemplateSetError as exc:
        report.problems.append(str(exc))
        return report

    report.name = manifest.name
    report.template_count = len(registry)
    for required in REQUIRED_FILES:
        if required not in registry:
            report.problems.append(f"missing required file: {required}")

    renderer = renderer if renderer is not None else TemplateRenderer()
    report.problems.extend(str(err) for err in renderer.validate(registry))
    return report
