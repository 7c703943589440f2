"""osmsieve info: show the staging area derived for a list of inputs."""

from __future__ import annotations

import os
from typing import Any, Optional

import typer

from osmsieve.cli import _exitcodes as ec
from osmsieve.cli._output import print_error, print_mapping
from osmsieve.errors import StorageBackendError
from osmsieve.staging import Namespace, StagingStore, staging_path
from osmsieve.storage import open_engine


def info_cmd(
    files: Optional[list[str]] = typer.Argument(None, help="Input extracts, in run order"),
    staging_dir: str = typer.Option(
        ".",
        "--staging-dir",
        envvar="OSMSIEVE_STAGING_DIR",
        help="Directory holding the staging database",
    ),
) -> None:
    """Show where a run over FILES stages its data and what is staged there."""
    from osmsieve.cli import state

    if not files:
        print_error("At least one input file is required")
        raise typer.Exit(ec.USAGE_ERROR)

    db_path = staging_path(files, staging_dir)
    data: dict[str, Any] = {"staging_path": db_path, "exists": os.path.exists(db_path)}

    if data["exists"]:
        try:
            with StagingStore(open_engine(db_path, read_only=True)) as staging:
                data["plain"] = staging.count(Namespace.PLAIN)
                data["collected"] = staging.count(Namespace.COLLECTED)
        except StorageBackendError as e:
            print_error(f"Cannot read staging area: {e}")
            raise typer.Exit(ec.RUNTIME_ERROR)
        data["file_size_bytes"] = os.path.getsize(db_path)

    if state.json_output:
        print_mapping(data, json_mode=True)
        return

    print(f"Staging area: {db_path}")
    if not data["exists"]:
        print("Status: not created yet")
        return
    print(f"File size: {int(data['file_size_bytes']):,} bytes")
    print(f"Plain entities: {data['plain']}")
    print(f"Collected entities: {data['collected']}")
