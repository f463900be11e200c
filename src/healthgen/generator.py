"""Generation orchestrator.

Resolves the template set for a tier, renders every file in memory, then
writes the tree under the output root and returns a ``GenerationReport``.
Migration reuses the same emit path for the subset of templates a tier
upgrade adds.
"""

from __future__ import annotations

import asyncio
import stat
import time
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field, computed_field

from .builtin import build_default_registry
from .classifier import needs_substitution, strip_template_suffix
from .context import GenerationContext
from .errors import FileWriteError
from .metadata import write_metadata as write_metadata_file
from .registry import TemplateDescriptor, TemplateRegistry
from .renderer import TemplateRenderer, template_source
from .tiers import Tier, features_for_tier
from .utils import console, format_duration


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """One file written by a generation run."""

    path: str = Field(..., description="POSIX path relative to the output root")
    was_templated: bool = Field(..., description="True if variables were substituted")


class GenerationReport(BaseModel):
    """Outcome of a ``generate`` or ``migrate`` run."""

    tier: Tier
    features: dict[str, bool] = Field(default_factory=dict)
    output_root: str = Field(..., description="Directory the files were written under")
    files: list[GeneratedFile] = Field(default_factory=list)
    metadata_path: str | None = Field(default=None, description="Sidecar path, if written")
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @computed_field  # type: ignore[misc]
    @property
    def file_count(self) -> int:
        return len(self.files)

    @computed_field  # type: ignore[misc]
    @property
    def templated_count(self) -> int:
        """Number of files that went through variable substitution."""
        return sum(1 for f in self.files if f.was_templated)

    def paths(self) -> list[str]:
        return [f.path for f in self.files]


# ---------------------------------------------------------------------------
# Rendered output
# ---------------------------------------------------------------------------


@dataclass
class OutputFile:
    """A fully rendered file waiting to be written."""

    relative_path: str
    final_path: Path
    content: bytes
    processed: bool
    descriptor: TemplateDescriptor


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Writes a project tree for a tier from a template registry.

    Args:
        registry: Template set to draw from.  Defaults to the bundled set.
        renderer: Renderer to compile bodies with.  Sharing one across runs
            keeps its compiled-template cache warm.
        parallel: Write files through a bounded worker pool instead of one
            at a time.  The resulting tree is identical either way.
        max_workers: Pool size when *parallel* is set.
        write_metadata: Write ``.template-metadata.yaml`` after the tree.
        verbose: Print each written path to the console.
    """

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        renderer: TemplateRenderer | None = None,
        *,
        parallel: bool = True,
        max_workers: int = 4,
        write_metadata: bool = True,
        verbose: bool = False,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.registry = registry if registry is not None else build_default_registry()
        self.renderer = renderer if renderer is not None else TemplateRenderer()
        self.parallel = parallel
        self.max_workers = max_workers
        self.write_metadata = write_metadata
        self.verbose = verbose

    # -- Public API --------------------------------------------------------

    async def generate(
        self,
        tier: "str | Tier",
        context: GenerationContext,
        output_root: str | Path,
    ) -> GenerationReport:
        """Generate the full project for *tier* under *output_root*.

        Every file is rendered before the first one is written, so a template
        error leaves the filesystem untouched.  Write failures part-way
        through are not rolled back.

        Raises:
            InvalidTierError: Unknown tier.
            UndefinedVariableError: A template references an unknown variable.
            TemplateRenderError: A template body is not valid Jinja2.
            FileWriteError: Path collision or filesystem failure.
        """
        started = time.monotonic()
        resolved = Tier.parse(tier)
        feature_set = features_for_tier(resolved)
        context = context.for_tier(resolved)
        descriptors = self.registry.resolve_for_feature_set(feature_set)

        if self.verbose:
            console.print(
                f"[bold cyan]Generating {context.project_name}[/bold cyan] "
                f"({resolved.value}, {len(descriptors)} files) -> {output_root}"
            )
        return await self.emit(descriptors, context, output_root, started=started)

    async def emit(
        self,
        descriptors: list[TemplateDescriptor],
        context: GenerationContext,
        output_root: str | Path,
        *,
        started: float | None = None,
    ) -> GenerationReport:
        """Render and write exactly *descriptors* under *output_root*."""
        started = time.monotonic() if started is None else started
        root = Path(output_root)

        outputs = self.render_all(descriptors, context, root)

        try:
            await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise FileWriteError(root, str(exc)) from exc

        await self._write_all(outputs)

        metadata_path: Path | None = None
        if self.write_metadata:
            metadata_path = await asyncio.to_thread(write_metadata_file, root, context)

        if self.verbose:
            for out in outputs:
                marker = "[green]+[/green]" if out.processed else "[dim]=[/dim]"
                console.print(f"  {marker} {out.relative_path}")

        duration = time.monotonic() - started
        report = GenerationReport(
            tier=context.tier,
            features=context.features.as_dict(),
            output_root=str(root),
            files=[
                GeneratedFile(path=out.relative_path, was_templated=out.processed)
                for out in outputs
            ],
            metadata_path=str(metadata_path) if metadata_path is not None else None,
            duration_seconds=duration,
        )
        if self.verbose:
            console.print(
                f"[dim]{report.file_count} files ({report.templated_count} templated) "
                f"in {format_duration(duration)}[/dim]"
            )
        return report

    # -- Rendering ---------------------------------------------------------

    def render_descriptor(
        self,
        descriptor: TemplateDescriptor,
        context: GenerationContext,
        root: Path,
    ) -> OutputFile:
        """Produce the final path and bytes for one descriptor."""
        # Classification looks at the path before the .tmpl suffix is removed.
        processed = needs_substitution(descriptor.relative_output_path)
        relative = strip_template_suffix(descriptor.relative_output_path)

        body = descriptor.body
        if processed:
            source = template_source(descriptor)
            content = self.renderer.render(descriptor.name, source, context).encode("utf-8")
        else:
            content = body if isinstance(body, bytes) else body.encode("utf-8")

        return OutputFile(
            relative_path=relative,
            final_path=root / relative,
            content=content,
            processed=processed,
            descriptor=descriptor,
        )

    def render_all(
        self,
        descriptors: list[TemplateDescriptor],
        context: GenerationContext,
        root: Path,
    ) -> list[OutputFile]:
        """Render every descriptor, rejecting two that land on one path."""
        outputs: list[OutputFile] = []
        claimed: dict[str, str] = {}
        for descriptor in descriptors:
            out = self.render_descriptor(descriptor, context, root)
            owner = claimed.get(out.relative_path)
            if owner is not None:
                raise FileWriteError(
                    out.final_path,
                    f"path collision between templates {owner!r} and {descriptor.name!r}",
                )
            claimed[out.relative_path] = descriptor.name
            outputs.append(out)
        return outputs

    # -- Writing -----------------------------------------------------------

    async def _write_all(self, outputs: list[OutputFile]) -> None:
        if not self.parallel or self.max_workers == 1:
            for out in outputs:
                await asyncio.to_thread(_write_output, out)
            return

        semaphore = asyncio.Semaphore(self.max_workers)

        async def _write_with_semaphore(out: OutputFile) -> None:
            async with semaphore:
                await asyncio.to_thread(_write_output, out)

        results = await asyncio.gather(
            *[_write_with_semaphore(out) for out in outputs],
            return_exceptions=True,
        )
        # Report the first failure in registration order.
        for res in results:
            if isinstance(res, BaseException):
                raise res


def _write_output(out: OutputFile) -> None:
    """Write one rendered file, creating parent directories as needed."""
    try:
        out.final_path.parent.mkdir(parents=True, exist_ok=True)
        out.final_path.write_bytes(out.content)
        if out.final_path.suffix == ".sh":
            _make_executable(out.final_path)
    except OSError as exc:
        raise FileWriteError(out.final_path, str(exc)) from exc


def _make_executable(path: Path) -> None:
    """Set the executable bit on a file."""
    current = path.stat().st_mode
    path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
