"""Test fixtures for pagerender.

Fixture template directories:
- templates: a small site with a shared layout and two pages
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

# Sample site templates (home and about pages, one layout)
SITE_TEMPLATES_DIR = FIXTURES_DIR / "templates"

# Layout-free page rendering the title
HOME_PAGE = "<h1>{{ string_map.title }}</h1>\n"

# Layout defining a wrapper macro for pages to call
WRAPPER_LAYOUT = (
    '{% macro wrapper() %}<div class="wrapper">{{ caller() }}</div>{% endmacro %}\n'
)
