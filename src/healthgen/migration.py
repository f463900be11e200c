"""Tier migration planning and in-place upgrades.

A migration only ever adds files: the delta between two tiers is the set of
templates gated on features the target tier enables and the source tier does
not.  Files already in the project are never touched, so hand edits survive
an upgrade.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .classifier import strip_template_suffix
from .context import DEFAULT_VERSION, GenerationContext, ProjectSpec, build_context, utc_now
from .errors import FileWriteError, InvalidMigrationError
from .generator import GenerationReport, ProjectGenerator
from .metadata import ProjectMetadata
from .registry import TemplateDescriptor, TemplateRegistry
from .tiers import Tier, features_for_tier, tiers


@dataclass(frozen=True)
class MigrationDelta:
    """What upgrading from one tier to another adds."""

    from_tier: Tier
    to_tier: Tier
    path: tuple[Tier, ...]
    added_features: frozenset[str]
    added_templates: tuple[TemplateDescriptor, ...]

    @property
    def template_names(self) -> list[str]:
        return [d.name for d in self.added_templates]

    @property
    def output_paths(self) -> list[str]:
        return [strip_template_suffix(d.relative_output_path) for d in self.added_templates]

    def describe(self) -> dict[str, str]:
        """Summary rows for console display."""
        return {
            "From": self.from_tier.value,
            "To": self.to_tier.value,
            "Path": " -> ".join(t.value for t in self.path),
            "New features": ", ".join(sorted(self.added_features)) or "(none)",
            "New files": str(len(self.added_templates)),
        }


class MigrationPlanner:
    """Plans and applies tier upgrades against an existing project."""

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        generator: ProjectGenerator | None = None,
    ) -> None:
        if generator is None:
            generator = ProjectGenerator(registry)
        self.generator = generator
        self.registry = registry if registry is not None else generator.registry

    def plan(self, from_tier: "str | Tier", to_tier: "str | Tier") -> MigrationDelta:
        """Compute the files and features an upgrade adds.

        Raises:
            InvalidTierError: Either tier is unknown.
            InvalidMigrationError: *to_tier* is not above *from_tier*.
        """
        source = Tier.parse(from_tier)
        target = Tier.parse(to_tier)
        if target == source:
            raise InvalidMigrationError(source.value, target.value, "project is already at that tier")
        if target < source:
            raise InvalidMigrationError(source.value, target.value, "downgrades are not supported")

        before = set(features_for_tier(source).enabled)
        added = frozenset(f for f in features_for_tier(target).enabled if f not in before)

        return MigrationDelta(
            from_tier=source,
            to_tier=target,
            path=tuple(t for t in tiers() if source <= t <= target),
            added_features=added,
            added_templates=tuple(self.registry.for_features(added)),
        )

    async def apply(
        self,
        delta: MigrationDelta,
        existing_project_root: str | Path,
        context: GenerationContext,
    ) -> GenerationReport:
        """Write the files in *delta* into an existing project.

        The context is re-targeted to the destination tier so the new files
        see its feature flags.  The metadata sidecar (if the generator writes
        one) is rewritten with the new tier.

        Raises:
            FileWriteError: The project root does not exist, or a write fails.
        """
        root = Path(existing_project_root)
        if not root.is_dir():
            raise FileWriteError(root, "project root does not exist")

        upgraded = context.for_tier(delta.to_tier)
        return await self.generator.emit(list(delta.added_templates), upgraded, root)


def context_from_metadata(
    metadata: ProjectMetadata,
    *,
    project_name: str | None = None,
    module_uri: str | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> GenerationContext:
    """Rebuild a ``GenerationContext`` for a project found on disk.

    Explicit *project_name* / *module_uri* win over what was recorded or
    detected.
    """
    version = metadata.version if metadata.version != "unknown" else DEFAULT_VERSION
    spec = ProjectSpec(
        project_name=project_name or metadata.name,
        module_uri=module_uri or metadata.module,
        description=metadata.description or None,
        tier=metadata.tier.value,
        version=version,
    )
    return build_context(spec, clock=clock)
