"""Shared fixtures for CLI tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from osmsieve.cli import app
from tests.conftest import node, relation, way, write_jsonl, write_rules

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo the logging setup each CLI invocation performs."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def extract_file(tmp_path):
    """A small extract: one boundary relation over a way and a node, plus noise."""
    return write_jsonl(
        tmp_path / "extract.jsonl",
        [
            node(20, name="Corner"),
            node(21),
            node(99, amenity="bench"),
            way(10, [20, 21], highway="primary"),
            relation(1, [("way", 10), ("node", 20)], boundary="administrative"),
            relation(2, [("node", 99)], route="bus"),
        ],
    )


@pytest.fixture
def rules_file(tmp_path):
    return write_rules(tmp_path / "tags.yaml", {"boundary": True})


def invoke(runner: CliRunner, args: list[str], staging_dir: str | None = None) -> "Result":
    """Invoke the CLI, pointing the staging area at ``staging_dir``."""
    env = {"OSMSIEVE_STAGING_DIR": staging_dir} if staging_dir else None
    return runner.invoke(app, args, env=env, catch_exceptions=False)
