"""Ingest stage: drain the entity source into the staging store."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from osmsieve.sources import EntitySource
from osmsieve.staging import StagingStore
from osmsieve.tags import TagMatcher

logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    by_kind: Counter[str] = field(default_factory=Counter)
    matched: int = 0

    @property
    def total(self) -> int:
        return sum(self.by_kind.values())


def ingest(
    source: EntitySource,
    matcher: TagMatcher,
    staging: StagingStore,
    *,
    log_every: int = 1000000,
) -> IngestStats:
    """Stage every entity from ``source``, in arrival order.

    Entities selected by ``matcher`` go to COLLECTED, everything else to PLAIN.
    Any decode, serialization or storage error propagates and aborts the run.
    """
    stats = IngestStats()
    for entity in source:
        collected = matcher.is_candidate(entity)
        staging.stage(entity, collected=collected)
        if collected:
            stats.matched += 1
        stats.by_kind[entity.kind] += 1
        if log_every and stats.total % log_every == 0:
            logger.debug("Ingested %d entities (%d matched)", stats.total, stats.matched)
    staging.commit()

    logger.info(
        "Ingested %d entities (%d nodes, %d ways, %d relations); %d relation(s) matched",
        stats.total,
        stats.by_kind["node"],
        stats.by_kind["way"],
        stats.by_kind["relation"],
        stats.matched,
    )
    return stats
