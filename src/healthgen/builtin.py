"""Bundled template set for health-endpoint projects.

Template bodies live as Jinja2 sources under ``healthgen/templates/`` (one
``<name>.j2`` file per registry entry).  The table below decides where each
body is written and which feature gates it; the registry is the only place
that consults those flags.
"""

from __future__ import annotations

from pathlib import Path

from .registry import TemplateDescriptor, TemplateRegistry

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# (name, relative output path, required feature)
DEFAULT_TEMPLATES: list[tuple[str, str, str | None]] = [
    # Core project files
    ("readme", "README.md", None),
    ("go-mod", "go.mod.tmpl", None),
    ("gitignore", ".gitignore", None),
    ("makefile", "Makefile", None),
    ("api-docs", "docs/API.md", None),
    ("build-script", "scripts/build.sh", None),
    ("test-script", "scripts/test.sh", None),
    # Go sources present at every tier
    ("go-main", "cmd/server/main.go", None),
    ("go-config", "internal/config/config.go", None),
    ("go-server", "internal/server/server.go", None),
    ("go-health-models", "internal/models/health.go", None),
    ("go-health-handler", "internal/handlers/health.go", None),
    ("go-server-time-handler", "internal/handlers/server_time.go", None),
    # Intermediate
    ("go-dependencies-handler", "internal/handlers/dependencies.go", "dependencies"),
    # Advanced
    ("go-tracing", "internal/observability/tracing.go", "opentelemetry"),
    ("go-metrics", "internal/observability/metrics.go", "opentelemetry"),
    ("go-events", "internal/events/emitter.go", "cloudevents"),
    # Enterprise
    ("go-security-mtls", "internal/security/mtls.go", "mtls"),
    ("go-security-context", "internal/security/context.go", "mtls"),
    ("go-security-rbac", "internal/security/rbac.go", "rbac"),
    ("go-compliance-audit", "internal/compliance/audit.go", "audit"),
    ("config-development", "configs/development.yaml", "compliance"),
    ("config-staging", "configs/staging.yaml", "compliance"),
    ("config-production", "configs/production.yaml", "compliance"),
    # TypeScript client
    ("ts-client", "client/typescript/src/client.ts", "typescript"),
    ("ts-types", "client/typescript/src/types.ts", "typescript"),
    ("ts-package-json", "client/typescript/package.json", "typescript"),
    ("ts-config", "client/typescript/tsconfig.json", "typescript"),
    ("ts-readme", "client/typescript/README.md", "typescript"),
    # Kubernetes manifests
    ("k8s-deployment", "deployments/kubernetes/deployment.yaml", "kubernetes"),
    ("k8s-service", "deployments/kubernetes/service.yaml", "kubernetes"),
    ("k8s-configmap", "deployments/kubernetes/configmap.yaml", "kubernetes"),
    # Docker
    ("dockerfile", "Dockerfile", "docker"),
    ("docker-compose", "docker-compose.yml", "docker"),
    ("dockerignore", ".dockerignore", "docker"),
]


def load_template_body(name: str, template_dir: str | Path | None = None) -> str:
    """Read the bundled body for template *name*."""
    base = Path(template_dir) if template_dir is not None else _DEFAULT_TEMPLATE_DIR
    return (base / f"{name}.j2").read_text(encoding="utf-8")


def build_default_registry(template_dir: str | Path | None = None) -> TemplateRegistry:
    """Build a registry holding every bundled template, in table order."""
    registry = TemplateRegistry()
    for name, output_path, feature in DEFAULT_TEMPLATES:
        registry.register(
            TemplateDescriptor(
                name=name,
                relative_output_path=output_path,
                body=load_template_body(name, template_dir),
                required_feature=feature,
            )
        )
    return registry
