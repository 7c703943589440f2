"""Tests for osmsieve info."""

import json
import os

from osmsieve.staging import staging_path
from tests.cli.conftest import invoke


def test_info_before_run(runner, extract_file, tmp_path):
    result = invoke(runner, ["info", extract_file], str(tmp_path))
    assert result.exit_code == 0
    assert staging_path([extract_file], str(tmp_path)) in result.output
    assert "not created yet" in result.output


def test_info_after_run(runner, extract_file, rules_file, tmp_path):
    invoke(runner, ["extract", "-t", rules_file, extract_file], str(tmp_path))
    result = invoke(runner, ["--json", "info", extract_file], str(tmp_path))
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["exists"] is True
    assert data["collected"] == 3
    assert data["plain"] == 3


def test_info_requires_files(runner, tmp_path):
    result = invoke(runner, ["info"], str(tmp_path))
    assert result.exit_code == 2


def test_info_does_not_write_to_staging_file(runner, extract_file, tmp_path):
    db_path = staging_path([extract_file], str(tmp_path))
    with open(db_path, "wb"):
        pass
    result = invoke(runner, ["info", extract_file], str(tmp_path))
    assert result.exit_code == 1
    assert "Cannot read staging area" in result.output
    assert os.path.getsize(db_path) == 0
