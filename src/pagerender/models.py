"""Render payload passed from handlers into page templates."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TemplateData:
    """Data available to a page template for a single render.

    Templates see each attribute under its own name, for example
    ``{{ string_map.title }}`` or ``{% if flash %}``.

    Attributes:
        string_map: String values by key
        int_map: Integer values by key
        float_map: Float values by key
        data: Arbitrary values by key
        csrf_token: CSRF token for forms
        flash: Flash message shown once to the user
        warning: Warning message
        error: Error message
    """

    string_map: dict[str, str] = field(default_factory=dict)
    int_map: dict[str, int] = field(default_factory=dict)
    float_map: dict[str, float] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    csrf_token: str = ""
    flash: str = ""
    warning: str = ""
    error: str = ""

    def to_context(self) -> dict[str, Any]:
        """Convert to a Jinja2 render context."""
        return {
            "string_map": self.string_map,
            "int_map": self.int_map,
            "float_map": self.float_map,
            "data": self.data,
            "csrf_token": self.csrf_token,
            "flash": self.flash,
            "warning": self.warning,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateData":
        """Build a payload from a mapping such as a parsed YAML data file.

        Raises:
            ValueError: If the mapping has keys that are not payload fields
        """
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown payload fields: {', '.join(sorted(unknown))}")
        return cls(**data)

    def copy(self) -> "TemplateData":
        """Return a copy whose maps can be changed without touching this one."""
        return TemplateData(
            string_map=dict(self.string_map),
            int_map=dict(self.int_map),
            float_map=dict(self.float_map),
            data=dict(self.data),
            csrf_token=self.csrf_token,
            flash=self.flash,
            warning=self.warning,
            error=self.error,
        )
