"""Shared pytest fixtures for pagerender tests.

Fixtures are organized by category:
- Template fixtures: temporary template directories with pages and layouts
- Configuration fixtures: configs pointing at those directories
"""

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from pagerender.config import AppConfig, TemplatesConfig
from tests.fixtures import HOME_PAGE

# =============================================================================
# Template Fixtures
# =============================================================================


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Create an empty templates directory."""
    path = tmp_path / "templates"
    path.mkdir()
    return path


@pytest.fixture
def write_template(templates_dir: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes a fragment into the templates directory."""

    def write(name: str, source: str) -> Path:
        path = templates_dir / name
        path.write_text(source, encoding="utf-8")
        return path

    return write


@pytest.fixture
def home_page(write_template: Callable[[str, str], Path]) -> Path:
    """Write a layout-free home page."""
    return write_template("home.page.tmpl", HOME_PAGE)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def make_config(templates_dir: Path) -> Callable[..., AppConfig]:
    """Return a factory for configs pointing at the temporary templates."""

    def make(use_cache: bool = True, **kwargs) -> AppConfig:
        return AppConfig(
            use_cache=use_cache,
            templates=TemplatesConfig(directory=str(templates_dir)),
            **kwargs,
        )

    return make


@pytest.fixture(autouse=True)
def propagate_logs() -> None:
    """Drop handlers left by CLI runs so caplog sees pagerender records."""
    logger = logging.getLogger("pagerender")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
