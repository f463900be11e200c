"""Jinja2 rendering for generated project files.

Provides the ``TemplateRenderer`` class which compiles registry template
bodies with a strict Jinja2 environment and renders them against a
``GenerationContext``.  Referencing a variable the context does not define is
an error, never an empty string.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError, UndefinedError

from .classifier import needs_substitution
from .context import GenerationContext
from .errors import TemplateRenderError, UndefinedVariableError
from .registry import TemplateDescriptor


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template bodies with a strict Jinja2 environment.

    Compiled templates are cached by template name, so a registry shared
    across several runs (e.g. generate followed by migrate) is parsed once.
    """

    def __init__(self) -> None:
        self.env = Environment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["slugify"] = _slugify_filter
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["snake_case"] = _snake_case_filter
        self.env.filters["camel_case"] = _camel_case_filter
        self._compiled: dict[str, tuple[str, Template]] = {}

    # -- Compilation -------------------------------------------------------

    def compile(self, name: str, source: str) -> Template:
        """Compile *source* under *name*, reusing the cached template if the body is unchanged.

        Raises:
            TemplateRenderError: If the body is not valid Jinja2.
        """
        cached = self._compiled.get(name)
        if cached is not None and cached[0] == source:
            return cached[1]
        try:
            template = self.env.from_string(source)
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(
                name, f"syntax error on line {exc.lineno}: {exc.message}"
            ) from exc
        self._compiled[name] = (source, template)
        return template

    def clear_cache(self) -> None:
        self._compiled.clear()

    @property
    def cached_templates(self) -> int:
        return len(self._compiled)

    # -- Rendering ---------------------------------------------------------

    def render(self, name: str, source: str, context: GenerationContext) -> str:
        """Render template *source* against *context*.

        Raises:
            UndefinedVariableError: If the body references a name the context
                does not provide.
            TemplateRenderError: On syntax errors.
        """
        return self.render_vars(name, source, context.template_vars())

    def render_vars(self, name: str, source: str, variables: dict[str, Any]) -> str:
        """Render *source* against a plain variable mapping."""
        template = self.compile(name, source)
        try:
            return template.render(**variables)
        except UndefinedError as exc:
            raise UndefinedVariableError(name, exc.message or "undefined variable") from exc

    # -- Validation --------------------------------------------------------

    def validate(self, descriptors: Iterable[TemplateDescriptor]) -> list[TemplateRenderError]:
        """Compile every templated body in *descriptors* without rendering it.

        Verbatim files are skipped.  Returns one error per body that is not
        valid Jinja2 (or not UTF-8 text), in iteration order; an empty list
        means every body parses.  Undefined variables only surface at render
        time and are not reported here.
        """
        errors: list[TemplateRenderError] = []
        for descriptor in descriptors:
            if not needs_substitution(descriptor.relative_output_path):
                continue
            try:
                self.compile(descriptor.name, template_source(descriptor))
            except TemplateRenderError as exc:
                errors.append(exc)
        return errors


def template_source(descriptor: TemplateDescriptor) -> str:
    """Return the body of *descriptor* as text for compilation."""
    body = descriptor.body
    if isinstance(body, str):
        return body
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TemplateRenderError(
            descriptor.name, f"body is not UTF-8 text ({exc.reason} at byte {exc.start})"
        ) from exc


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

# Splits "demo-svc", "demo_svc", "demo svc" and "DemoSvc" into words.
_WORD_BOUNDARY = re.compile(r"[^A-Za-z0-9]+|(?<=[a-z0-9])(?=[A-Z])")

# Kubernetes object names are DNS labels.
_DNS_LABEL_MAX = 63


def _words(value: str) -> list[str]:
    return [word for word in _WORD_BOUNDARY.split(value) if word]


def _slugify_filter(value: str) -> str:
    """Lower-case DNS label for Kubernetes, Docker and npm names."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:_DNS_LABEL_MAX].rstrip("-")


def _pascal_case_filter(value: str) -> str:
    """Exported Go / TypeScript identifier: ``demo-svc`` -> ``DemoSvc``."""
    return "".join(word[0].upper() + word[1:] for word in _words(value))


def _snake_case_filter(value: str) -> str:
    """Prometheus metric prefix: ``demo-svc`` -> ``demo_svc``."""
    return "_".join(word.lower() for word in _words(value))


def _camel_case_filter(value: str) -> str:
    pascal = _pascal_case_filter(value)
    return pascal[:1].lower() + pascal[1:]
