"""Configuration for an osmsieve run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SieveConfig:
    """Configuration for the extraction pipeline."""

    tags_file: str = "tags.yaml"
    staging_dir: str = "."
    commit_every: int = 10000
    iter_batch_size: int = 1000
    log_every: int = 1000000
    cleanup: bool = False
