"""osmsieve extract: run the extraction pipeline and print the JSON result."""

from __future__ import annotations

from typing import Optional

import typer

from osmsieve.cli import _exitcodes as ec
from osmsieve.cli._output import print_error
from osmsieve.config import SieveConfig
from osmsieve.errors import USAGE_ERRORS, OsmSieveError
from osmsieve.runner import extract


def extract_cmd(
    files: Optional[list[str]] = typer.Argument(
        None, help="Input extracts (.osm.pbf, .osm, .opl, .jsonl), read in order"
    ),
    tags: str = typer.Option(
        "tags.yaml", "--tags", "-t", envvar="OSMSIEVE_TAGS", help="YAML rule file"
    ),
    staging_dir: str = typer.Option(
        ".",
        "--staging-dir",
        envvar="OSMSIEVE_STAGING_DIR",
        help="Directory holding the staging database",
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the JSON array to this file instead of stdout"
    ),
    cleanup: bool = typer.Option(
        False, "--cleanup", help="Delete the staging database after a successful run"
    ),
) -> None:
    """Select relations matching the tag rules and everything they reference."""
    config = SieveConfig(tags_file=tags, staging_dir=staging_dir, cleanup=cleanup)
    try:
        extract(files or [], config, output=output)
    except USAGE_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except OsmSieveError as e:
        print_error(str(e))
        raise typer.Exit(ec.RUNTIME_ERROR)
    except Exception as e:
        print_error(f"{type(e).__name__}: {e}")
        raise typer.Exit(ec.RUNTIME_ERROR)
