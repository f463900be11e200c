"""Template registry: the ordered set of candidate output artifacts.

A ``TemplateDescriptor`` binds a logical template name to the path it is
written to, its raw body, and the single feature (if any) that gates it.
Feature gating is evaluated here and only here; template bodies do not
re-check the flags that decide whether they are emitted.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import PurePosixPath

from .errors import DuplicateTemplateNameError
from .tiers import FEATURE_CATALOG, FeatureSet


@dataclass(frozen=True)
class TemplateDescriptor:
    """One candidate output file.

    Attributes:
        name: Unique registry key (e.g. ``"go-main"``).
        relative_output_path: POSIX path relative to the project root,
            normalised on construction (``./`` and repeated slashes dropped).
            A trailing ``.tmpl`` forces substitution and is stripped on output.
        body: Template source (``str``) or raw bytes for verbatim assets.
        required_feature: Feature that must be enabled for the file to be
            emitted; ``None`` means always emitted.
    """

    name: str
    relative_output_path: str
    body: str | bytes
    required_feature: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Template name must not be empty")
        path = PurePosixPath(self.relative_output_path)
        if (
            not self.relative_output_path
            or path.is_absolute()
            or ".." in path.parts
            or not path.parts
        ):
            raise ValueError(
                f"Template {self.name!r} has an invalid output path: "
                f"{self.relative_output_path!r} (must be relative, without '..')"
            )
        # "./a.go", "a//b.go" and "a/./b.go" all name the same file.
        object.__setattr__(self, "relative_output_path", path.as_posix())

    @property
    def is_conditional(self) -> bool:
        return self.required_feature is not None

    def applies_to(self, feature_set: FeatureSet) -> bool:
        """Return ``True`` if this descriptor is emitted for *feature_set*."""
        if self.required_feature is None:
            return True
        return feature_set.is_enabled(self.required_feature)


class TemplateRegistry:
    """Ordered ``name -> TemplateDescriptor`` mapping.

    Registration order is preserved and drives generation order, so runs
    with identical input write files and report them in the same sequence.
    """

    def __init__(self, descriptors: Iterable[TemplateDescriptor] = ()) -> None:
        self._templates: dict[str, TemplateDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: TemplateDescriptor) -> TemplateDescriptor:
        """Add *descriptor* to the registry.

        Raises:
            DuplicateTemplateNameError: If the name is already registered.
            ValueError: If the descriptor is gated on an unknown feature.
        """
        if descriptor.name in self._templates:
            raise DuplicateTemplateNameError(descriptor.name)
        if (
            descriptor.required_feature is not None
            and descriptor.required_feature not in FEATURE_CATALOG
        ):
            raise ValueError(
                f"Template {descriptor.name!r} requires unknown feature "
                f"{descriptor.required_feature!r}"
            )
        self._templates[descriptor.name] = descriptor
        return descriptor

    def get(self, name: str) -> TemplateDescriptor:
        """Return the descriptor registered as *name* (``KeyError`` if absent)."""
        return self._templates[name]

    def names(self) -> list[str]:
        return list(self._templates)

    def resolve_for_feature_set(
        self, feature_set: FeatureSet
    ) -> list[TemplateDescriptor]:
        """Return every descriptor that applies to *feature_set*, in registration order."""
        return [d for d in self._templates.values() if d.applies_to(feature_set)]

    def for_features(self, features: Iterable[str]) -> list[TemplateDescriptor]:
        """Return descriptors gated on any of *features*, in registration order."""
        wanted = set(features)
        return [
            d for d in self._templates.values()
            if d.required_feature is not None and d.required_feature in wanted
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __iter__(self) -> Iterator[TemplateDescriptor]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)
