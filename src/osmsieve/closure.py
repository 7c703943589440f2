"""Closure collector: pull every member of a collected relation into COLLECTED.

After :meth:`ClosureCollector.run` returns, COLLECTED is closed under relation
membership: every member of every collected relation is itself collected,
unless the extract never contained it.

The walk is a single pass over COLLECTED. Each relation met there is expanded
depth-first with an explicit stack: a member found in PLAIN is promoted, and
if it is a relation its own members are handled before the remaining members
of its parent. Relations already expanded are tracked in ``visited``, which
bounds the walk on cyclic membership graphs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import assert_never

from osmsieve.entities import Member, Node, Relation, StagingKey, Way
from osmsieve.errors import DanglingReferenceError
from osmsieve.staging import Namespace, StagingStore

logger = logging.getLogger(__name__)


@dataclass
class ClosureStats:
    relations_expanded: int = 0
    promoted: int = 0
    already_collected: int = 0
    dangling: int = 0


class ClosureCollector:
    """Promotes relation members from PLAIN to COLLECTED until fixpoint."""

    def __init__(self, staging: StagingStore) -> None:
        self.staging = staging
        self.visited: set[StagingKey] = set()
        self.stats = ClosureStats()

    def run(self) -> ClosureStats:
        for key, entity in self.staging.iterate(Namespace.COLLECTED):
            match entity:
                case Relation():
                    if key not in self.visited:
                        self._expand(entity)
                case Node() | Way():
                    pass
                case _:
                    assert_never(entity)
        self.staging.commit()

        logger.info(
            "Closure complete: %d relation(s) expanded, %d promoted, %d dangling member(s)",
            self.stats.relations_expanded,
            self.stats.promoted,
            self.stats.dangling,
        )
        return self.stats

    def _expand(self, root: Relation) -> None:
        self._visit(root.key)
        stack: list[Iterator[Member]] = [iter(root.members)]
        while stack:
            member = next(stack[-1], None)
            if member is None:
                stack.pop()
                continue

            promoted = self._promote(member.key)
            match promoted:
                case None:
                    continue
                case Relation():
                    if promoted.key not in self.visited:
                        self._visit(promoted.key)
                        stack.append(iter(promoted.members))
                case Node() | Way():
                    pass
                case _:
                    assert_never(promoted)

    def _visit(self, key: StagingKey) -> None:
        self.visited.add(key)
        self.stats.relations_expanded += 1

    def _promote(self, key: StagingKey) -> Node | Way | Relation | None:
        try:
            entity = self.staging.promote(key)
        except DanglingReferenceError:
            self.stats.dangling += 1
            logger.debug("Skipping member %s: not in extract", key)
            return None
        if entity is None:
            self.stats.already_collected += 1
        else:
            self.stats.promoted += 1
        return entity


def collect_related(staging: StagingStore) -> ClosureStats:
    """Run the closure collector over ``staging``."""
    return ClosureCollector(staging).run()
