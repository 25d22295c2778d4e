"""Page renderer: resolves a template by name and writes it to an output sink.

Output is rendered into an in-memory buffer first and copied to the sink in a
single write, so a template that fails halfway leaves the sink untouched.
Failures are logged and reported as zero bytes written; they are never raised
to the web layer.
"""

import logging
from collections.abc import Callable
from typing import BinaryIO

from pagerender.config import AppConfig
from pagerender.exceptions import TemplateError, TemplateExecutionError, TemplateWriteError
from pagerender.models import TemplateData
from pagerender.templates.cache import TemplateCache
from pagerender.templates.store import CompiledTemplate, TemplateStore
from pagerender.utils.logging import get_logger

logger = get_logger(__name__)


class PageRenderer:
    """Renders named page templates with a per-request payload.

    The template cache is built at construction when ``config.use_cache`` is
    set. Pages missing from the cache are compiled from source on every request.

    Usage:
        renderer = PageRenderer(config)
        renderer.render_template(response_body, "home.page.tmpl", TemplateData())
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        store: TemplateStore | None = None,
        csrf_token_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            config: Application configuration
            store: Template store (defaults to one over ``config.templates``)
            csrf_token_factory: Supplies a CSRF token when a payload has none
        """
        self.config = config or AppConfig()
        self.store = store or TemplateStore(self.config.templates)
        self.cache = TemplateCache(self.store)
        self._csrf_token_factory = csrf_token_factory

        self.cache.initialize(self.config.use_cache)

    def reload(self) -> bool:
        """Rebuild the template cache from disk."""
        return self.cache.initialize(self.config.use_cache)

    def resolve(self, name: str) -> CompiledTemplate:
        """Return the compiled template for ``name``.

        Raises:
            TemplateNotFoundError: If the page fragment cannot be read
            TemplateParseError: If the page or a layout is invalid
        """
        template = self.cache.lookup(name)
        if template is None:
            logger.info("Template %s not found in cache", name)
            template = self.store.compile_by_name(name)
        return template

    def add_default_data(self, payload: TemplateData | None) -> TemplateData:
        """Return a copy of ``payload`` with process-wide defaults merged in.

        Defaults never override values already in ``payload.data``.
        """
        td = payload.copy() if payload is not None else TemplateData()
        for key, value in self.config.defaults.items():
            td.data.setdefault(key, value)
        if not td.csrf_token and self._csrf_token_factory is not None:
            td.csrf_token = self._csrf_token_factory()
        return td

    def render_to_bytes(self, name: str, payload: TemplateData | None = None) -> bytes:
        """Render a page to UTF-8 bytes.

        Raises:
            TemplateError: Any resolve or execution failure
        """
        template = self.resolve(name)
        td = self.add_default_data(payload)

        rendered = template.render(td.to_context())
        try:
            return rendered.encode("utf-8")
        except UnicodeEncodeError as e:
            raise TemplateExecutionError(
                name, f"Error executing template {name}: output is not valid UTF-8: {e}"
            ) from e

    def render_template(
        self,
        sink: BinaryIO,
        name: str,
        payload: TemplateData | None = None,
    ) -> int:
        """Render a page and write it to ``sink``.

        Args:
            sink: Writable binary stream (e.g. a response body)
            name: Template name, e.g. "home.page.tmpl"
            payload: Data for this render

        Returns:
            Number of bytes written; 0 if the render failed
        """
        try:
            content = self.render_to_bytes(name, payload)
        except TemplateError as e:
            logger.error("Cannot render template %s: %s", name, e)
            return 0

        try:
            written = _write_all(sink, name, content)
        except TemplateWriteError as e:
            logger.error("%s", e)
            return 0

        logger.structured(
            logging.DEBUG,
            "Written %d bytes while writing rendered template %s",
            written,
            name,
            template=name,
            bytes=written,
        )
        return written


def _write_all(sink: BinaryIO, name: str, content: bytes) -> int:
    try:
        result = sink.write(content)
    except (OSError, ValueError) as e:
        raise TemplateWriteError(
            name, f"Error writing rendered template {name}: {e}"
        ) from e
    # Some sinks return None from write().
    if result is None:
        return len(content)
    if result < len(content):
        raise TemplateWriteError(
            name,
            f"Error writing rendered template {name}: short write, {result} of {len(content)} bytes",
        )
    return result
