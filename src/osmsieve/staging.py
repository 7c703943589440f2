"""Staging store: two key namespaces over an ordered key-value engine.

Every entity read from the extract is staged under its :class:`StagingKey` in
exactly one namespace. ``PLAIN`` holds entities not (yet) selected;
``COLLECTED`` holds the output set. Collected keys carry ``COLLECTED_PREFIX``,
which starts with a character no kind code uses, so the two key ranges never
overlap.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterator, Sequence
from enum import Enum
from itertools import chain
from typing import Final

from osmsieve.entities import Node, Relation, StagingKey, Way, decode_entity, encode_entity
from osmsieve.errors import DanglingReferenceError, SerializationError
from osmsieve.storage import KeyValueEngine, prefix_upper_bound

COLLECTED_PREFIX: Final[str] = "collected:"
_COLLECTED_UPPER: Final[str | None] = prefix_upper_bound(COLLECTED_PREFIX)


class Namespace(str, Enum):
    PLAIN = "plain"
    COLLECTED = "collected"


def staging_path(input_paths: Sequence[str], staging_dir: str = ".") -> str:
    """Return the staging database path for a list of input files.

    The name is the MD5 of the concatenated paths, so the same input list
    always maps to the same file.
    """
    digest = hashlib.md5("".join(input_paths).encode("utf-8")).hexdigest()
    return os.path.join(staging_dir, f"{digest}.db")


class StagingStore:
    """Namespace-aware adapter over a :class:`KeyValueEngine`."""

    def __init__(self, engine: KeyValueEngine) -> None:
        self.engine = engine

    def __enter__(self) -> StagingStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @staticmethod
    def _raw_key(namespace: Namespace, key: StagingKey) -> str:
        if namespace is Namespace.COLLECTED:
            return COLLECTED_PREFIX + key.encode()
        return key.encode()

    @staticmethod
    def _parse_key(raw: str) -> StagingKey:
        if raw.startswith(COLLECTED_PREFIX):
            raw = raw[len(COLLECTED_PREFIX) :]
        try:
            return StagingKey.decode(raw)
        except ValueError as e:
            raise SerializationError(str(e)) from e

    def put(self, namespace: Namespace, entity: Node | Way | Relation) -> None:
        self.engine.put(self._raw_key(namespace, entity.key), encode_entity(entity))

    def stage(self, entity: Node | Way | Relation, *, collected: bool) -> None:
        """Store ``entity`` in one namespace, dropping any copy held in the other.

        A later copy of the same key always replaces the earlier one, whichever
        namespace either copy belongs to.
        """
        if collected:
            target, other = Namespace.COLLECTED, Namespace.PLAIN
        else:
            target, other = Namespace.PLAIN, Namespace.COLLECTED
        self.delete(other, entity.key)
        self.put(target, entity)

    def get(self, namespace: Namespace, key: StagingKey) -> Node | Way | Relation | None:
        value = self.engine.get(self._raw_key(namespace, key))
        return None if value is None else decode_entity(value)

    def contains(self, namespace: Namespace, key: StagingKey) -> bool:
        return self.engine.get(self._raw_key(namespace, key)) is not None

    def delete(self, namespace: Namespace, key: StagingKey) -> None:
        self.engine.delete(self._raw_key(namespace, key))

    def iterate(self, namespace: Namespace) -> Iterator[tuple[StagingKey, Node | Way | Relation]]:
        """Lazily yield (key, entity) for every entry in ``namespace``."""
        if namespace is Namespace.COLLECTED:
            rows = self.engine.iterate(COLLECTED_PREFIX)
        else:
            rows = chain(
                self.engine.scan("", COLLECTED_PREFIX),
                self.engine.scan(_COLLECTED_UPPER) if _COLLECTED_UPPER is not None else (),
            )
        for raw, value in rows:
            yield self._parse_key(raw), decode_entity(value)

    def promote(self, key: StagingKey) -> Node | Way | Relation | None:
        """Move ``key`` from PLAIN to COLLECTED.

        Returns the promoted entity, or None if it was already collected.

        Raises:
            DanglingReferenceError: if ``key`` is in neither namespace.
        """
        plain_key = self._raw_key(Namespace.PLAIN, key)
        value = self.engine.get(plain_key)
        if value is None:
            if self.contains(Namespace.COLLECTED, key):
                return None
            raise DanglingReferenceError(key)
        self.engine.delete(plain_key)
        self.engine.put(self._raw_key(Namespace.COLLECTED, key), value)
        return decode_entity(value)

    def count(self, namespace: Namespace) -> int:
        collected = self.engine.count(COLLECTED_PREFIX, _COLLECTED_UPPER)
        if namespace is Namespace.COLLECTED:
            return collected
        return self.engine.count() - collected

    def commit(self) -> None:
        self.engine.commit()

    def clear(self) -> None:
        """Drop every staged entity from both namespaces."""
        self.engine.clear()

    def close(self) -> None:
        self.engine.close()
