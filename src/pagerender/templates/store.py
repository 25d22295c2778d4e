"""Template store: reads page and layout fragments and compiles them.

A page fragment is compiled together with every layout fragment found in the
templates directory. Each compiled page gets its own Jinja2 environment over an
in-memory snapshot of those sources, so a page can ``{% extends %}``,
``{% include %}`` or ``{% import %}`` any layout by file name, and later edits
on disk only show up after a rebuild.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateSyntaxError,
    Undefined,
)

from pagerender.config import TemplatesConfig
from pagerender.exceptions import (
    TemplateExecutionError,
    TemplateNotFoundError,
    TemplateParseError,
)
from pagerender.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompiledTemplate:
    """A page template composed with the layouts available when it was built.

    Attributes:
        name: Template name (page fragment file name)
        template: Compiled Jinja2 entry point
        layouts: Names of the layout fragments merged into its namespace
    """

    name: str
    template: Template
    layouts: tuple[str, ...] = ()

    def render(self, context: dict[str, Any]) -> str:
        """Render the page against a context.

        Raises:
            TemplateExecutionError: If rendering fails for any reason
        """
        try:
            return self.template.render(context)
        except Exception as e:
            raise TemplateExecutionError(
                self.name, f"Error executing template {self.name}: {e}"
            ) from e


class TemplateStore:
    """Compiles named page fragments from a templates directory.

    Usage:
        store = TemplateStore(config.templates)
        compiled = store.compile_by_name("home.page.tmpl")
    """

    def __init__(self, config: TemplatesConfig | None = None) -> None:
        self.config = config or TemplatesConfig()
        self.directory = self.config.path

    def resolve_path(self, name: str) -> Path:
        """Map a template name to its page fragment path.

        Raises:
            TemplateNotFoundError: If the name points outside the templates directory
        """
        relative = Path(name)
        if relative.is_absolute() or ".." in relative.parts:
            raise TemplateNotFoundError(
                name, f"Template name {name!r} is outside {self.directory}"
            )
        return self.directory / relative

    def compile_by_name(self, name: str) -> CompiledTemplate:
        """Read, parse and compose the page fragment called ``name``.

        Raises:
            TemplateNotFoundError: If the fragment cannot be read
            TemplateParseError: If the page or a layout has invalid syntax
        """
        path = self.resolve_path(name)
        source = _read_source(name, path)
        return self.compose_with_layouts(name, source)

    def compose_with_layouts(self, name: str, source: str) -> CompiledTemplate:
        """Compile page source together with every discovered layout.

        With no layouts the page is compiled on its own.
        """
        sources: dict[str, str] = {}
        layout_names: list[str] = []
        for layout_path in self.discover_layouts():
            sources[layout_path.name] = _read_source(layout_path.name, layout_path)
            layout_names.append(layout_path.name)
        sources[name] = source

        env = self._environment(sources)

        # Layouts are parsed up front so a broken layout fails the build,
        # not some later render.
        for layout_name in layout_names:
            _parse(env, layout_name)
        template = _parse(env, name)

        return CompiledTemplate(name=name, template=template, layouts=tuple(layout_names))

    def discover_layouts(self) -> list[Path]:
        """List layout fragments. A listing error counts as no layouts."""
        try:
            return sorted(
                p for p in self.directory.glob(self.config.layout_pattern) if p.is_file()
            )
        except OSError as e:
            logger.warning(
                "Cannot list layouts in %s, rendering without layouts: %s",
                self.directory,
                e,
            )
            return []

    def discover_pages(self) -> list[str]:
        """List the names of all page fragments.

        Raises:
            TemplateNotFoundError: If the templates directory cannot be listed
        """
        if not self.directory.is_dir():
            raise TemplateNotFoundError(
                str(self.directory), f"Templates directory not found: {self.directory}"
            )
        try:
            return sorted(
                p.name for p in self.directory.glob(self.config.page_pattern) if p.is_file()
            )
        except OSError as e:
            raise TemplateNotFoundError(
                str(self.directory), f"Cannot list templates in {self.directory}: {e}"
            ) from e

    def build_all(self) -> dict[str, CompiledTemplate]:
        """Compile every page fragment.

        The first failure aborts the build; nothing partial is returned.
        """
        compiled: dict[str, CompiledTemplate] = {}
        for name in self.discover_pages():
            compiled[name] = self.compile_by_name(name)
            logger.debug("Compiled template %s", name)
        return compiled

    def _environment(self, sources: dict[str, str]) -> Environment:
        return Environment(
            loader=DictLoader(sources),
            autoescape=self.config.autoescape,
            undefined=StrictUndefined if self.config.strict_undefined else Undefined,
            auto_reload=False,
            keep_trailing_newline=True,
        )


def _read_source(name: str, path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise TemplateParseError(name, f"Template {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise TemplateNotFoundError(name, f"Cannot read template {path}: {e}") from e


def _parse(env: Environment, name: str) -> Template:
    try:
        return env.get_template(name)
    except TemplateSyntaxError as e:
        raise TemplateParseError(
            name, f"Syntax error in template {name} line {e.lineno}: {e.message}", e.lineno
        ) from e
