"""Entity sources: sequential readers turning extract files into entities.

A source is any iterable of entities. Iteration ends at end of input and
raises :class:`DecodeError` on malformed data. Readers may decode on their
own threads internally, but consumers only see one ordered, blocking stream.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Protocol

import osmium

from osmsieve.entities import (
    EntityKind,
    Info,
    Member,
    Node,
    Relation,
    Way,
    entity_from_dict,
)
from osmsieve.errors import ArgumentError, DecodeError, SerializationError

logger = logging.getLogger(__name__)

JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


class EntitySource(Protocol):
    def __iter__(self) -> Iterator[Node | Way | Relation]: ...


class JsonLinesSource:
    """Reads one entity JSON object per line, in the format ``osmsieve`` emits."""

    def __init__(self, path: str) -> None:
        self.path = path

    def __iter__(self) -> Iterator[Node | Way | Relation]:
        try:
            f = open(self.path, encoding="utf-8")
        except OSError as e:
            raise DecodeError(self.path, str(e)) from e
        with f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    raise DecodeError(self.path, f"line {lineno}: {e}") from e
                if not isinstance(record, dict):
                    raise DecodeError(self.path, f"line {lineno}: expected a JSON object")
                try:
                    yield entity_from_dict(record)
                except SerializationError as e:
                    raise DecodeError(self.path, f"line {lineno}: {e}") from e


def _info(obj: Any) -> Info | None:
    # Extracts written without metadata report version 0.
    if not obj.version:
        return None
    return Info(
        version=obj.version,
        timestamp=obj.timestamp,
        changeset=obj.changeset,
        uid=obj.uid,
        user=obj.user or None,
        visible=obj.visible,
    )


def _convert(obj: Any) -> Node | Way | Relation | None:
    tags = {tag.k: tag.v for tag in obj.tags}
    if isinstance(obj, osmium.osm.Node):
        location = obj.location
        if location.valid():
            return Node(id=obj.id, tags=tags, info=_info(obj), lat=location.lat, lon=location.lon)
        return Node(id=obj.id, tags=tags, info=_info(obj))
    if isinstance(obj, osmium.osm.Way):
        return Way(id=obj.id, tags=tags, info=_info(obj), node_ids=[n.ref for n in obj.nodes])
    if isinstance(obj, osmium.osm.Relation):
        members = [
            Member(kind=EntityKind.from_code(m.type), id=m.ref, role=m.role) for m in obj.members
        ]
        return Relation(id=obj.id, tags=tags, info=_info(obj), members=members)
    return None


class OsmiumSource:
    """Reads an OSM extract (PBF, XML, OPL) through pyosmium."""

    def __init__(self, path: str) -> None:
        self.path = path

    def __iter__(self) -> Iterator[Node | Way | Relation]:
        try:
            for obj in osmium.FileProcessor(self.path):
                entity = _convert(obj)
                if entity is not None:
                    yield entity
        except (RuntimeError, OSError, ValueError) as e:
            raise DecodeError(self.path, str(e)) from e


class ChainedSource:
    """Concatenates several sources into one stream, in order."""

    def __init__(self, sources: Iterable[EntitySource]) -> None:
        self.sources = list(sources)

    def __iter__(self) -> Iterator[Node | Way | Relation]:
        for source in self.sources:
            logger.info("Reading %s", getattr(source, "path", source))
            yield from source


def source_for_path(path: str) -> EntitySource:
    """Pick a reader for ``path`` based on its suffix."""
    if path.lower().endswith(JSON_LINES_SUFFIXES):
        return JsonLinesSource(path)
    return OsmiumSource(path)


def open_source(paths: Sequence[str]) -> ChainedSource:
    """Build one entity stream over ``paths``.

    Raises:
        ArgumentError: if no paths are given or one of them does not exist.
    """
    if not paths:
        raise ArgumentError("At least one input file is required")
    missing = [p for p in paths if not os.path.isfile(p)]
    if missing:
        raise ArgumentError(f"Input file not found: {', '.join(missing)}")
    return ChainedSource(source_for_path(p) for p in paths)
