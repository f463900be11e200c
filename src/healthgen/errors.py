"""Exception hierarchy for the healthgen engine.

Every error the engine raises derives from :class:`HealthgenError`, so callers
(the CLI in particular) can catch one type, print the message and exit.  None
of these are retried or rolled back: a failed run leaves an output directory
that must be treated as invalid.
"""

from __future__ import annotations

from pathlib import Path


class HealthgenError(Exception):
    """Base class for all engine errors."""


class InvalidTierError(HealthgenError):
    """Raised when a tier string is not one of the known tiers."""

    def __init__(self, value: object, valid: list[str] | None = None) -> None:
        self.value = value
        self.valid = valid or []
        choices = ", ".join(self.valid)
        super().__init__(
            f"Invalid tier: {value!r}"
            + (f" (must be one of: {choices})" if choices else "")
        )


class InvalidProjectNameError(HealthgenError):
    """Raised when the project name is empty or not a conservative identifier."""


class InvalidModuleURIError(HealthgenError):
    """Raised when the Go module path is empty or malformed."""


class DuplicateTemplateNameError(HealthgenError):
    """Raised when two templates are registered under the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template already registered: {name!r}")


class TemplateRenderError(HealthgenError):
    """Raised when a template body cannot be compiled or rendered."""

    def __init__(self, template_name: str, message: str) -> None:
        self.template_name = template_name
        super().__init__(f"Template {template_name!r}: {message}")


class UndefinedVariableError(TemplateRenderError):
    """Raised when a template references a variable missing from the context."""


class FileWriteError(HealthgenError):
    """Raised on any filesystem failure while writing generated output."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write {self.path}: {message}")


class InvalidMigrationError(HealthgenError):
    """Raised when a requested tier transition is not an upgrade."""

    def __init__(self, from_tier: str, to_tier: str, reason: str = "") -> None:
        self.from_tier = from_tier
        self.to_tier = to_tier
        detail = reason or "only upgrades to a higher tier are supported"
        super().__init__(f"Cannot migrate {from_tier} -> {to_tier}: {detail}")


class InvalidTemplateSetError(HealthgenError):
    """Raised when a template directory or its ``template.yaml`` is unusable."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Invalid template set {self.path}: {message}")
