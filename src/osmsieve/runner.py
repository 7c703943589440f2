"""Run the extraction pipeline: ingest, closure, output, in that order."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TextIO

from osmsieve.closure import ClosureStats, collect_related
from osmsieve.config import SieveConfig
from osmsieve.emit import write_json
from osmsieve.ingest import IngestStats, ingest
from osmsieve.sources import EntitySource, open_source
from osmsieve.staging import StagingStore, staging_path
from osmsieve.storage import open_engine
from osmsieve.tags import TagMatcher, load_matcher

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    ingest: IngestStats
    closure: ClosureStats
    written: int


@dataclass
class Command:
    """Everything one pipeline run needs."""

    source: EntitySource
    staging: StagingStore
    matcher: TagMatcher
    stdout: TextIO
    log_every: int = 1000000


def run(command: Command) -> RunResult:
    """Execute the pipeline against an already prepared staging store.

    Each stage finishes before the next begins, so nothing is written to
    ``command.stdout`` unless ingest and closure both succeeded.
    """
    ingest_stats = ingest(
        command.source, command.matcher, command.staging, log_every=command.log_every
    )
    closure_stats = collect_related(command.staging)
    written = write_json(command.staging, command.stdout)
    return RunResult(ingest=ingest_stats, closure=closure_stats, written=written)


@contextmanager
def _atomic_output(path: str) -> Iterator[TextIO]:
    """Yield a stream that replaces ``path`` only if the block succeeds."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".osmsieve-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as stream:
            yield stream
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def remove_staging(db_path: str) -> None:
    """Delete a staging database together with its SQLite side files."""
    for suffix in ("", "-wal", "-shm"):
        candidate = db_path + suffix
        if os.path.exists(candidate):
            os.unlink(candidate)
    logger.info("Removed staging area %s", db_path)


def extract(
    input_paths: Sequence[str],
    config: SieveConfig | None = None,
    *,
    stdout: TextIO | None = None,
    output: str | None = None,
) -> RunResult:
    """Build a pipeline for ``input_paths`` from ``config`` and run it.

    The staging area lives at :func:`staging_path` and is emptied before the
    run, so a location shared with an earlier run never leaks its entities
    into this run's output. It is left on disk afterwards unless
    ``config.cleanup`` is set.

    Raises:
        ArgumentError: no inputs, or an input file is missing.
        ConfigurationError: the rule file cannot be loaded.
        DecodeError, StorageBackendError, SerializationError: the run failed.
    """
    config = config or SieveConfig()
    source = open_source(input_paths)
    matcher = load_matcher(config.tags_file)
    db_path = staging_path(input_paths, config.staging_dir)
    logger.info("Staging area: %s", db_path)

    engine = open_engine(
        db_path, commit_every=config.commit_every, batch_size=config.iter_batch_size
    )
    with StagingStore(engine) as staging:
        staging.clear()
        if output is not None:
            with _atomic_output(output) as stream:
                result = run(Command(source, staging, matcher, stream, config.log_every))
        else:
            stream = stdout if stdout is not None else sys.stdout
            result = run(Command(source, staging, matcher, stream, config.log_every))

    if config.cleanup:
        remove_staging(db_path)
    return result
