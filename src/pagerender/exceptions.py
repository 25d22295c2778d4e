"""Error types raised while resolving and rendering page templates.

The rendering engine catches these and logs them so a single failed page never
takes the server down. Strict callers (the CLI) let them propagate.
"""


class TemplateError(Exception):
    """Base class for template failures.

    Attributes:
        name: Template name the failure relates to
    """

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class TemplateNotFoundError(TemplateError):
    """Template source could not be read or listed."""


class TemplateParseError(TemplateError):
    """Template source has invalid syntax."""

    def __init__(self, name: str, message: str, lineno: int | None = None) -> None:
        super().__init__(name, message)
        self.lineno = lineno


class TemplateExecutionError(TemplateError):
    """Compiled template failed while rendering against a payload."""


class TemplateWriteError(TemplateError):
    """Rendered output could not be copied to the output sink."""


class ConfigError(ValueError):
    """Configuration value is invalid."""
