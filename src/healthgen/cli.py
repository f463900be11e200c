"""Command-line entry point.

Thin wrapper over the engine: parses arguments, builds the context, calls the
generator or migration planner and prints the report.  All validation lives
in the engine; any ``HealthgenError`` is printed and exits with status 1.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from .builtin import build_default_registry
from .config import GeneratorConfig
from .context import build_context
from .errors import HealthgenError
from .generator import GenerationReport, ProjectGenerator
from .metadata import detect_project, tier_summary
from .migration import MigrationPlanner, context_from_metadata
from .renderer import TemplateRenderer
from .static import (
    discover_template_sets,
    generate_from_directory,
    read_manifest,
    registry_from_directory,
    validate_template_set,
)
from .tiers import Tier, introduced_at, tiers
from .utils import (
    console,
    format_duration,
    print_error,
    print_summary_table,
    print_success,
    print_warning,
)

_TIER_CHOICES = [t.value for t in tiers()]


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="healthgen",
        description="Generate tiered health-endpoint service projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  healthgen generate my-service --module github.com/acme/my-service\n"
            "  healthgen generate my-service --module github.com/acme/my-service --tier advanced\n"
            "  healthgen migrate --target ./my-service --to enterprise\n"
            "  healthgen tiers\n"
            "  healthgen template validate --dir ./templates\n"
            "  healthgen template from-static my-service -m github.com/acme/my-service --tier basic\n"
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a new project")
    gen.add_argument("name", help="Project name (letters, digits and hyphens)")
    gen.add_argument("--module", "-m", required=True, help="Go module path")
    gen.add_argument("--description", "-d", default=None, help="Project description")
    gen.add_argument(
        "--tier", "-t",
        default=Tier.BASIC.value,
        choices=_TIER_CHOICES,
        help="Template tier (default: basic)",
    )
    gen.add_argument("--output", "-o", default=None, help="Output directory (default: ./<name>)")
    gen.add_argument("--version", default=None, help="Version stamped into the project")
    gen.add_argument("--sequential", action="store_true", help="Write files one at a time")
    gen.add_argument(
        "--workers", type=_positive_int, default=None, help="Write pool size (default: 4)"
    )
    gen.add_argument("--no-metadata", action="store_true", help="Skip .template-metadata.yaml")
    gen.add_argument("--verbose", "-v", action="store_true", help="Print every written file")

    mig = sub.add_parser("migrate", help="Upgrade an existing project to a higher tier")
    mig.add_argument("--target", default=".", help="Project directory (default: .)")
    mig.add_argument("--to", dest="to_tier", required=True, choices=_TIER_CHOICES)
    mig.add_argument(
        "--from",
        dest="from_tier",
        default=None,
        choices=_TIER_CHOICES,
        help="Current tier (detected from the project if omitted)",
    )
    mig.add_argument("--name", default=None, help="Override the detected project name")
    mig.add_argument("--module", "-m", default=None, help="Override the detected Go module path")
    mig.add_argument("--dry-run", action="store_true", help="Show the plan without writing")
    mig.add_argument("--verbose", "-v", action="store_true", help="Print every written file")

    sub.add_parser("tiers", help="List available tiers and their features")

    tpl = sub.add_parser("template", help="Inspect and use template sets")
    tpl_sub = tpl.add_subparsers(dest="template_command", required=True)

    tpl_list = tpl_sub.add_parser("list", help="List bundled templates or the sets in --dir")
    tpl_list.add_argument("--dir", default=None, help="Directory of static template sets")

    tpl_validate = tpl_sub.add_parser("validate", help="Check that every template parses")
    tpl_validate.add_argument("--dir", default=None, help="Directory of static template sets")

    tpl_static = tpl_sub.add_parser("from-static", help="Generate from a static template set")
    tpl_static.add_argument("name", help="Project name (letters, digits and hyphens)")
    tpl_static.add_argument("--module", "-m", required=True, help="Go module path")
    tpl_static.add_argument("--description", "-d", default=None, help="Project description")
    tpl_static.add_argument(
        "--tier", "-t",
        default=Tier.BASIC.value,
        choices=_TIER_CHOICES,
        help="Template set to use (default: basic)",
    )
    tpl_static.add_argument(
        "--dir", default="templates", help="Directory holding one set per tier (default: templates)"
    )
    tpl_static.add_argument("--output", "-o", default=None, help="Output directory (default: ./<name>)")
    tpl_static.add_argument("--version", default=None, help="Version (default: the set's version)")
    tpl_static.add_argument("--verbose", "-v", action="store_true", help="Print every written file")
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _print_report(report: GenerationReport, title: str) -> None:
    print_summary_table(
        {
            "Tier": report.tier.value,
            "Output": report.output_root,
            "Files": str(report.file_count),
            "Templated": str(report.templated_count),
            "Features": ", ".join(k for k, v in report.features.items() if v) or "(none)",
            "Duration": format_duration(report.duration_seconds),
        },
        title=title,
    )


def _run_generate(args: argparse.Namespace) -> int:
    config = GeneratorConfig.from_env(
        project_name=args.name,
        module_uri=args.module,
        description=args.description,
        tier=args.tier,
        output_dir=Path(args.output) if args.output else None,
        version=args.version,
        max_workers=args.workers,
    )
    if args.sequential:
        config.parallel = False
    if args.no_metadata:
        config.write_metadata = False
    if args.verbose:
        config.verbose = True

    context = build_context(config.to_project_spec())
    generator = ProjectGenerator(
        parallel=config.parallel,
        max_workers=config.max_workers,
        write_metadata=config.write_metadata,
        verbose=config.verbose,
    )
    report = asyncio.run(generator.generate(config.tier, context, config.resolved_output_dir))
    _print_report(report, title=f"Generated {context.project_name}")
    print_success(f"Project ready at {report.output_root}")
    return 0


def _run_migrate(args: argparse.Namespace) -> int:
    root = Path(args.target)
    metadata = detect_project(root)
    if args.from_tier:
        metadata = metadata.model_copy(update={"tier": Tier.parse(args.from_tier)})
    elif metadata.detected:
        print_warning(
            "No metadata sidecar found; detected tier "
            f"{metadata.tier.value} from the project layout"
        )

    planner = MigrationPlanner(generator=ProjectGenerator(verbose=args.verbose))
    delta = planner.plan(metadata.tier, args.to_tier)
    print_summary_table(delta.describe(), title="Migration plan")

    if args.dry_run:
        for path in delta.output_paths:
            console.print(f"  [cyan]+[/cyan] {path}")
        return 0

    context = context_from_metadata(metadata, project_name=args.name, module_uri=args.module)
    report = asyncio.run(planner.apply(delta, root, context))
    _print_report(report, title=f"Migrated to {delta.to_tier.value}")
    print_success(f"Upgraded {root} to {delta.to_tier.value}")
    return 0


def _run_tiers(args: argparse.Namespace) -> int:
    for tier in tiers():
        summary = tier_summary(tier)
        console.print(f"[bold cyan]{summary['name']}[/bold cyan]  {summary['description']}")
        console.print(f"  features: {', '.join(summary['features'])}")
    return 0


def _list_bundled() -> None:
    table = Table(title="Bundled templates", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Output")
    table.add_column("Feature")
    table.add_column("From tier")
    for descriptor in build_default_registry():
        feature = descriptor.required_feature
        table.add_row(
            descriptor.name,
            descriptor.relative_output_path,
            feature or "-",
            introduced_at(feature).value if feature else Tier.BASIC.value,
        )
    console.print(table)


def _run_template_list(args: argparse.Namespace) -> int:
    if args.dir is None:
        _list_bundled()
        return 0

    sets = discover_template_sets(args.dir)
    if not sets:
        print_warning(f"No template sets found in {escape(args.dir)}")
        return 0
    table = Table(title=f"Template sets in {escape(args.dir)}", show_lines=True)
    table.add_column("Set", style="cyan")
    table.add_column("Tier")
    table.add_column("Version")
    table.add_column("Files", justify="right")
    table.add_column("Description")
    for set_dir in sets:
        manifest = read_manifest(set_dir)
        table.add_row(
            escape(manifest.name),
            manifest.tier.value,
            escape(manifest.version),
            str(len(registry_from_directory(set_dir))),
            escape(manifest.description),
        )
    console.print(table)
    return 0


def _run_template_validate(args: argparse.Namespace) -> int:
    renderer = TemplateRenderer()
    if args.dir is None:
        registry = build_default_registry()
        errors = renderer.validate(registry)
        for err in errors:
            print_error(escape(str(err)))
        if errors:
            return 1
        print_success(f"All {len(registry)} bundled templates are valid")
        return 0

    sets = discover_template_sets(args.dir)
    if not sets:
        print_warning(f"No template sets found in {escape(args.dir)}")
        return 1
    valid = True
    for set_dir in sets:
        report = validate_template_set(set_dir, renderer)
        if report.valid:
            console.print(f"[green]ok[/green]   {escape(report.name)} ({report.template_count} files)")
            continue
        valid = False
        console.print(f"[red]fail[/red] {escape(report.name)}")
        for problem in report.problems:
            console.print(f"       {escape(problem)}")
    if not valid:
        print_error("Some template sets have problems")
        return 1
    print_success("All template sets are valid")
    return 0


def _run_template_from_static(args: argparse.Namespace) -> int:
    set_dir = Path(args.dir) / args.tier
    manifest = read_manifest(set_dir)
    config = GeneratorConfig.from_env(
        project_name=args.name,
        module_uri=args.module,
        description=args.description,
        tier=manifest.tier,
        output_dir=Path(args.output) if args.output else None,
        version=args.version or manifest.version,
    )
    if args.verbose:
        config.verbose = True

    context = build_context(config.to_project_spec())
    report = asyncio.run(
        generate_from_directory(
            set_dir,
            context,
            config.resolved_output_dir,
            parallel=config.parallel,
            max_workers=config.max_workers,
            write_metadata=config.write_metadata,
            verbose=config.verbose,
        )
    )
    _print_report(report, title=f"Generated {context.project_name} from {manifest.name}")
    print_success(f"Project ready at {report.output_root}")
    return 0


_TEMPLATE_COMMANDS = {
    "list": _run_template_list,
    "validate": _run_template_validate,
    "from-static": _run_template_from_static,
}


def _run_template(args: argparse.Namespace) -> int:
    return _TEMPLATE_COMMANDS[args.template_command](args)


_COMMANDS = {
    "generate": _run_generate,
    "migrate": _run_migrate,
    "tiers": _run_tiers,
    "template": _run_template,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``healthgen`` / ``python -m healthgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return _COMMANDS[args.command](args)
    except HealthgenError as exc:
        print_error(f"Error: {escape(str(exc))}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
