"""pagerender CLI interface.

Commands:
- render: Render one page to stdout or a file
- check: Compile every page and report problems
- init: Write a default configuration file
- serve: Run the development web server

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --json-logs: Emit log lines as JSON
- --version: Show version and exit
"""

import dataclasses
import json
from pathlib import Path
from typing import Annotated

import typer
import yaml

from pagerender import __version__
from pagerender.config import AppConfig, create_default_config, load_config
from pagerender.exceptions import ConfigError, TemplateError
from pagerender.models import TemplateData
from pagerender.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="pagerender",
    help="Render HTML pages from cached Jinja2 templates",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: AppConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pagerender {__version__}")
        raise typer.Exit()


def _current_config() -> AppConfig:
    return _config if _config is not None else AppConfig()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option(
            "--json-logs",
            help="Emit log lines as JSON",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """pagerender - render HTML pages from cached Jinja2 templates."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, json_logs=json_logs)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ConfigError, yaml.YAMLError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# render command
# =============================================================================


def _parse_assignments(values: list[str]) -> dict[str, str]:
    """Parse KEY=VALUE pairs."""
    result: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got: {item}", param_hint="--set")
        result[key] = value
    return result


@app.command()
def render(
    name: Annotated[
        str,
        typer.Argument(help="Template name, e.g. home.page.tmpl"),
    ],
    set_values: Annotated[
        list[str] | None,
        typer.Option(
            "--set",
            "-s",
            help="KEY=VALUE added to string_map (repeatable)",
        ),
    ] = None,
    data_file: Annotated[
        Path | None,
        typer.Option(
            "--data",
            "-d",
            help="YAML file with payload fields (string_map, data, flash, ...)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write to this file instead of stdout",
        ),
    ] = None,
) -> None:
    """Render one page.

    Only the requested page is compiled; the template cache is not built.

    Exit codes:
        0: Page rendered
        1: Template missing, invalid or failed to render
    """
    from pagerender.templates import PageRenderer

    payload = TemplateData()
    if data_file is not None:
        try:
            with open(data_file) as f:
                payload = TemplateData.from_dict(yaml.safe_load(f) or {})
        except (yaml.YAMLError, ValueError, TypeError) as e:
            _logger.error(f"Invalid data file {data_file}: {e}")
            raise typer.Exit(1)
    payload.string_map.update(_parse_assignments(set_values or []))

    config = dataclasses.replace(_current_config(), use_cache=False)
    renderer = PageRenderer(config)

    try:
        content = renderer.render_to_bytes(name, payload)
    except TemplateError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(content)
        _logger.info(f"Wrote {len(content)} bytes to {output}")
    else:
        typer.echo(content.decode("utf-8"), nl=False)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Compile every page with its layouts, as the startup cache build does.

    Exit codes:
        0: All pages compiled
        1: Templates directory unreadable or a page failed to compile
    """
    from pagerender.templates import TemplateStore

    store = TemplateStore(_current_config().templates)

    try:
        compiled = store.build_all()
    except TemplateError as e:
        if json_output:
            typer.echo(json.dumps({"success": False, "error": str(e), "template": e.name}, indent=2))
        else:
            typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    if json_output:
        report = {
            "success": True,
            "directory": str(store.directory),
            "templates": {
                name: {"layouts": list(t.layouts)} for name, t in compiled.items()
            },
        }
        typer.echo(json.dumps(report, indent=2))
        return

    typer.echo(f"\nTemplates in {store.directory}\n")
    for name, template in compiled.items():
        layouts = ", ".join(template.layouts) or "no layouts"
        typer.echo(f"  ✅ {name} ({layouts})")
    typer.echo(f"\n{len(compiled)} page(s) compiled")


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing configuration",
        ),
    ] = False,
) -> None:
    """Write a default pagerender.yaml in the current directory."""
    config_file = Path.cwd() / "pagerender.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Configuration already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config())
    typer.echo(f"✅ Created configuration: {config_file}")


# =============================================================================
# serve command
# =============================================================================


@app.command()
def serve(
    port: Annotated[
        int | None,
        typer.Option(
            "--port",
            "-p",
            help="Port to listen on (overrides config)",
            min=1,
            max=65535,
        ),
    ] = None,
) -> None:
    """Run the development web server."""
    from pagerender.web import serve as serve_app

    config = _current_config()
    if port is not None:
        config = dataclasses.replace(config, port=port)

    try:
        serve_app(config)
    except KeyboardInterrupt:
        _logger.info("Server stopped")
    except OSError as e:
        _logger.error(f"Unable to start server on port {config.port}: {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
