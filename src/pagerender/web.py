"""Flask application: routes requests to page handlers.

Routes:
- GET /       home page
- GET /about  about page

Every response carries a ``csrf_token`` cookie. The token is kept across
requests while the browser sends it back, and unsafe methods (POST, PUT,
PATCH, DELETE) are rejected unless the form or ``X-CSRF-Token`` header
repeats it.
"""

import hmac
import io
import secrets
from collections.abc import Callable
from typing import BinaryIO

from flask import Flask, Response, g, request

from pagerender.config import AppConfig
from pagerender.handlers import Handlers
from pagerender.templates import PageRenderer
from pagerender.utils.logging import get_logger

logger = get_logger(__name__)

CSRF_COOKIE_NAME = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"
UNSAFE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

PageHandler = Callable[..., int]


def _render_page(handler: PageHandler) -> Response:
    body: BinaryIO = io.BytesIO()
    written = handler(body, csrf_token=g.get("csrf_token", ""))
    if written == 0:
        return Response("Internal Server Error", status=500, mimetype="text/plain")
    return Response(body.getvalue(), status=200, mimetype="text/html")


def create_app(handlers: Handlers) -> Flask:
    """Create the Flask application routing paths to ``handlers``."""
    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def home():
        return _render_page(handlers.home)

    @app.route("/about", methods=["GET"])
    def about():
        return _render_page(handlers.about)

    return app


def csrf_middleware(app: Flask, config: AppConfig) -> Flask:
    """Install CSRF token handling on ``app``.

    The token from the incoming cookie is reused when present, otherwise a new
    one is issued. Handlers read it from ``flask.g.csrf_token``.
    """

    @app.before_request
    def load_csrf_token():
        cookie_token = request.cookies.get(CSRF_COOKIE_NAME, "")
        g.csrf_token = cookie_token or secrets.token_urlsafe(32)

        if request.method not in UNSAFE_METHODS:
            return None

        sent = request.form.get(CSRF_FORM_FIELD) or request.headers.get(CSRF_HEADER, "")
        if not cookie_token or not sent or not hmac.compare_digest(sent, cookie_token):
            logger.warning("Rejected %s %s: CSRF token missing or invalid", request.method, request.path)
            return Response("Forbidden", status=403, mimetype="text/plain")
        return None

    @app.after_request
    def set_csrf_cookie(response: Response) -> Response:
        token = g.get("csrf_token")
        if token:
            response.set_cookie(
                CSRF_COOKIE_NAME,
                token,
                path="/",
                httponly=True,
                samesite="Lax",
                secure=config.in_production,
            )
        return response

    return app


def build_app(config: AppConfig) -> Flask:
    """Wire renderer, handlers and CSRF handling for ``config``."""
    renderer = PageRenderer(config)
    return csrf_middleware(create_app(Handlers(renderer)), config)


def serve(config: AppConfig, host: str = "0.0.0.0") -> None:
    """Serve the application until interrupted."""
    app = build_app(config)
    logger.info("Starting application on port %d", config.port)
    app.run(host=host, port=config.port)
