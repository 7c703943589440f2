"""osmsieve CLI: extract tag-matched relations and everything they reference."""

from __future__ import annotations

import logging
import sys

import typer

from osmsieve.cli import extract_cmd, info, rules

app = typer.Typer(
    name="osmsieve",
    help="Extract tag-matched OSM relations together with every entity they reference.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import PackageNotFoundError, version

            v = version("osmsieve")
        except PackageNotFoundError:
            v = "unknown"
        print(f"osmsieve {v}")
        raise typer.Exit()


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
    debug: bool = typer.Option(False, "--debug", help="Log debug detail to stderr"),
    json_output: bool = typer.Option(False, "--json", help="JSON output for reports"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all osmsieve commands."""
    _configure_logging(verbose, debug)
    state.json_output = json_output


app.command(name="extract")(extract_cmd.extract_cmd)
app.command(name="rules")(rules.rules_cmd)
app.command(name="info")(info.info_cmd)


def main() -> None:
    """Entry point for the osmsieve CLI."""
    app()
