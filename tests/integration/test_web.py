"""Integration tests for the Flask application."""

import pytest

from pagerender.config import AppConfig, TemplatesConfig
from pagerender.web import CSRF_COOKIE_NAME, CSRF_HEADER, build_app
from tests.fixtures import SITE_TEMPLATES_DIR


def site_config(**kwargs) -> AppConfig:
    return AppConfig(templates=TemplatesConfig(directory=str(SITE_TEMPLATES_DIR)), **kwargs)


def cookie_token(resp) -> str:
    cookie = resp.headers.get("Set-Cookie", "")
    return cookie.split(";")[0].split("=", 1)[1]


@pytest.fixture
def client():
    """Flask test client over the sample site; cookies are sent explicitly."""
    app = build_app(site_config())
    app.config["TESTING"] = True
    with app.test_client(use_cookies=False) as c:
        yield c


class TestRoutes:
    """Tests for routing requests to pages."""

    def test_home(self, client) -> None:
        """Test that / renders the home page inside the layout."""
        resp = client.get("/")

        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == "text/html; charset=utf-8"
        assert b"<!doctype html>" in resp.data
        assert b"<title>Home page</title>" in resp.data
        assert b"<h1>Home page</h1>" in resp.data
        assert resp.headers["Content-Length"] == str(len(resp.data))

    def test_about(self, client) -> None:
        """Test that /about renders the about page."""
        resp = client.get("/about")

        assert resp.status_code == 200
        assert b"<h1>About</h1>" in resp.data

    def test_head(self, client) -> None:
        """Test that HEAD returns headers without a body."""
        resp = client.head("/")

        assert resp.status_code == 200
        assert resp.data == b""
        assert int(resp.headers["Content-Length"]) > 0

    def test_unknown_path(self, client) -> None:
        """Test that unknown paths are 404."""
        assert client.get("/missing").status_code == 404

    def test_wrong_method(self, client) -> None:
        """Test that a POST with a valid token still gets 405 on a GET route."""
        resp = client.post(
            "/",
            headers={"Cookie": f"{CSRF_COOKIE_NAME}=tok", CSRF_HEADER: "tok"},
        )

        assert resp.status_code == 405
        assert "GET" in resp.headers["Allow"]

    def test_render_failure_is_500(self, tmp_path) -> None:
        """Test that a missing page gives an error response, not a crash."""
        app = build_app(AppConfig(templates=TemplatesConfig(directory=str(tmp_path))))

        resp = app.test_client().get("/")

        assert resp.status_code == 500
        assert resp.data == b"Internal Server Error"


class TestCsrf:
    """Tests for CSRF token handling."""

    def test_token_in_cookie_and_page(self, client) -> None:
        """Test that the same token is set as a cookie and rendered."""
        resp = client.get("/")

        cookie = resp.headers["Set-Cookie"]
        token = cookie_token(resp)
        assert f'value="{token}"'.encode() in resp.data
        assert cookie.startswith(f"{CSRF_COOKIE_NAME}=")
        assert "HttpOnly" in cookie
        assert "SameSite=Lax" in cookie
        assert "Secure" not in cookie

    def test_secure_cookie_in_production(self) -> None:
        """Test that production mode marks the cookie secure."""
        app = build_app(site_config(in_production=True))

        resp = app.test_client().get("/")

        assert "Secure" in resp.headers["Set-Cookie"]

    def test_new_token_without_cookie(self, client) -> None:
        """Test that requests without a cookie each get a fresh token."""
        first = cookie_token(client.get("/"))
        second = cookie_token(client.get("/"))

        assert first != second

    def test_cookie_token_reused(self, client) -> None:
        """Test that a token sent back in the cookie is kept."""
        token = cookie_token(client.get("/"))

        resp = client.get("/about", headers={"Cookie": f"{CSRF_COOKIE_NAME}={token}"})

        assert cookie_token(resp) == token
        home = client.get("/", headers={"Cookie": f"{CSRF_COOKIE_NAME}={token}"})
        assert f'value="{token}"'.encode() in home.data

    def test_unsafe_method_without_token_rejected(self, client) -> None:
        """Test that a POST without any token is forbidden."""
        resp = client.post("/")

        assert resp.status_code == 403

    def test_unsafe_method_with_mismatched_token_rejected(self, client) -> None:
        """Test that a POST whose form token differs from the cookie is forbidden."""
        resp = client.post(
            "/",
            data={"csrf_token": "other"},
            headers={"Cookie": f"{CSRF_COOKIE_NAME}=tok"},
        )

        assert resp.status_code == 403

    @pytest.mark.parametrize("method", ["put", "patch", "delete"])
    def test_other_unsafe_methods_rejected(self, client, method: str) -> None:
        """Test that every unsafe method needs a token."""
        resp = getattr(client, method)("/about")

        assert resp.status_code == 403

    def test_matching_form_token_accepted(self, client) -> None:
        """Test that a form token matching the cookie passes the check."""
        resp = client.post(
            "/about",
            data={"csrf_token": "tok"},
            headers={"Cookie": f"{CSRF_COOKIE_NAME}=tok"},
        )

        assert resp.status_code == 405
