"""healthgen: tiered health-endpoint project generator.

Generates a Go health-endpoint service (with Kubernetes manifests, a
TypeScript client and Docker files) at one of four tiers, and upgrades
existing projects to a higher tier in place.

Usage::

    from healthgen import ProjectGenerator, ProjectSpec, build_context

    context = build_context(ProjectSpec(project_name="svc", module_uri="github.com/acme/svc"))
    report = await ProjectGenerator().generate("advanced", context, "./svc")
"""

from .builtin import build_default_registry
from .classifier import needs_substitution
from .config import GeneratorConfig
from .context import GenerationContext, ProjectSpec, build_context
from .errors import (
    DuplicateTemplateNameError,
    FileWriteError,
    HealthgenError,
    InvalidMigrationError,
    InvalidModuleURIError,
    InvalidProjectNameError,
    InvalidTemplateSetError,
    InvalidTierError,
    TemplateRenderError,
    UndefinedVariableError,
)
from .generator import GeneratedFile, GenerationReport, ProjectGenerator
from .metadata import ProjectMetadata, detect_project, read_metadata, write_metadata
from .migration import MigrationDelta, MigrationPlanner
from .registry import TemplateDescriptor, TemplateRegistry
from .renderer import TemplateRenderer
from .static import registry_from_directory, validate_template_set
from .tiers import FeatureSet, Tier, features_for_tier

__all__ = [
    "DuplicateTemplateNameError",
    "FeatureSet",
    "FileWriteError",
    "GeneratedFile",
    "GenerationContext",
    "GenerationReport",
    "GeneratorConfig",
    "HealthgenError",
    "InvalidMigrationError",
    "InvalidModuleURIError",
    "InvalidProjectNameError",
    "InvalidTemplateSetError",
    "InvalidTierError",
    "MigrationDelta",
    "MigrationPlanner",
    "ProjectGenerator",
    "ProjectMetadata",
    "ProjectSpec",
    "TemplateDescriptor",
    "TemplateRegistry",
    "TemplateRenderer",
    "TemplateRenderError",
    "Tier",
    "UndefinedVariableError",
    "build_context",
    "build_default_registry",
    "detect_project",
    "features_for_tier",
    "needs_substitution",
    "read_metadata",
    "registry_from_directory",
    "validate_template_set",
    "write_metadata",
]
