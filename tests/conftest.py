"""Shared test fixtures for osmsieve tests."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import pytest

from osmsieve import Member, Node, Relation, Way, encode_entity
from osmsieve.entities import EntityKind
from osmsieve.staging import StagingStore
from osmsieve.storage import SqliteEngine

# --- Entity builders ---


def node(id: int, **tags: str) -> Node:
    return Node(id=id, tags=tags, lat=52.5, lon=13.4)


def way(id: int, node_ids: list[int] | None = None, **tags: str) -> Way:
    return Way(id=id, tags=tags, node_ids=node_ids or [])


def relation(id: int, members: Iterable[tuple[str, int]] = (), **tags: str) -> Relation:
    """Build a relation from (kind, id) pairs, e.g. ``[("way", 10), ("node", 20)]``."""
    return Relation(
        id=id,
        tags=tags,
        members=[Member(kind=EntityKind(kind), id=ref, role="") for kind, ref in members],
    )


def write_jsonl(path: Path, entities: Iterable[Node | Way | Relation]) -> str:
    """Write entities as a JSON Lines extract and return its path."""
    path.write_text("".join(encode_entity(e) + "\n" for e in entities), encoding="utf-8")
    return str(path)


def write_rules(path: Path, rules: dict) -> str:
    """Write a rule file. JSON is valid YAML, which keeps values unambiguous."""
    path.write_text(json.dumps(rules), encoding="utf-8")
    return str(path)


def keys_of(entities: Iterable[dict]) -> set[tuple[str, int]]:
    return {(e["kind"], e["id"]) for e in entities}


# --- Fixtures ---


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database path."""
    return str(tmp_path / "staging.db")


@pytest.fixture
def engine(tmp_db):
    """Create a SqliteEngine with small batches so pagination is exercised."""
    e = SqliteEngine(tmp_db, commit_every=3, batch_size=2)
    yield e
    e.close()


@pytest.fixture
def staging(tmp_db):
    """Create a StagingStore over a temporary database."""
    store = StagingStore(SqliteEngine(tmp_db, commit_every=3, batch_size=2))
    yield store
    store.close()
