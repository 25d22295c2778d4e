"""Entry point for running pagerender as a module.

Usage:
    python -m pagerender [command] [options]

Example:
    python -m pagerender render home.page.tmpl --set title="Home page"
    python -m pagerender serve --port 8080
"""

from pagerender.cli import app

if __name__ == "__main__":
    app()
