"""Page handlers.

Handlers build the payload for a page and hand it to a ``Renderer``. They
depend only on the protocol, so tests can substitute a recording double.
"""

from typing import BinaryIO, Protocol

from pagerender.models import TemplateData

HOME_TEMPLATE = "home.page.tmpl"
ABOUT_TEMPLATE = "about.page.tmpl"


class Renderer(Protocol):
    """Anything that can render a named template to a sink."""

    def render_template(
        self,
        sink: BinaryIO,
        name: str,
        payload: TemplateData | None = None,
    ) -> int: ...


class Handlers:
    """Handlers for the site's pages.

    Each handler writes the rendered page to ``sink`` and returns the number
    of bytes written (0 when rendering failed).
    """

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer

    def home(self, sink: BinaryIO, csrf_token: str = "") -> int:
        """Render the home page."""
        return self.renderer.render_template(
            sink,
            HOME_TEMPLATE,
            TemplateData(string_map={"title": "Home page"}, csrf_token=csrf_token),
        )

    def about(self, sink: BinaryIO, csrf_token: str = "") -> int:
        """Render the about page."""
        return self.renderer.render_template(
            sink,
            ABOUT_TEMPLATE,
            TemplateData(string_map={"title": "About"}, csrf_token=csrf_token),
        )
