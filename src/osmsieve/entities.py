"""Typed map entities: nodes, ways and relations, and their JSON codec."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from osmsieve.errors import SerializationError


class EntityKind(str, Enum):
    """Discriminator shared by entities and member references."""

    NODE = "node"
    WAY = "way"
    RELATION = "relation"

    @property
    def code(self) -> str:
        return _KIND_CODES[self]

    @classmethod
    def from_code(cls, code: str) -> EntityKind:
        try:
            return _CODE_KINDS[code]
        except KeyError:
            raise ValueError(f"Unknown entity kind code: {code!r}") from None


_KIND_CODES = {EntityKind.NODE: "n", EntityKind.WAY: "w", EntityKind.RELATION: "r"}
_CODE_KINDS = {code: kind for kind, code in _KIND_CODES.items()}


@dataclass(frozen=True, order=True)
class StagingKey:
    """Primary key of an entity in the staging store.

    Encodes as the kind code followed by the decimal id (``n20``, ``w10``,
    ``r-5``), which is the same for a given entity on every run.
    """

    kind: EntityKind
    id: int

    def encode(self) -> str:
        return f"{self.kind.code}{self.id}"

    @classmethod
    def decode(cls, text: str) -> StagingKey:
        if len(text) < 2:
            raise ValueError(f"Invalid staging key: {text!r}")
        try:
            return cls(EntityKind.from_code(text[0]), int(text[1:]))
        except ValueError as e:
            raise ValueError(f"Invalid staging key: {text!r}") from e

    def __str__(self) -> str:
        return self.encode()


class Info(BaseModel):
    """Edit metadata attached to an entity by the extract, passed through untouched."""

    model_config = ConfigDict(extra="forbid")

    version: int | None = None
    timestamp: datetime | None = None
    changeset: int | None = None
    uid: int | None = None
    user: str | None = None
    visible: bool | None = None


class Member(BaseModel):
    """A (kind, id) reference held by a relation. The role is carried but never matched."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: EntityKind
    id: int
    role: str = ""

    @property
    def key(self) -> StagingKey:
        return StagingKey(self.kind, self.id)


class _EntityBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    id: int
    tags: dict[str, str] = Field(default_factory=dict)
    info: Info | None = None

    @property
    def key(self) -> StagingKey:
        return StagingKey(EntityKind(self.kind), self.id)


class Node(_EntityBase):
    kind: Literal["node"] = "node"
    lat: float | None = None
    lon: float | None = None


class Way(_EntityBase):
    kind: Literal["way"] = "way"
    node_ids: list[int] = Field(default_factory=list)


class Relation(_EntityBase):
    kind: Literal["relation"] = "relation"
    members: list[Member] = Field(default_factory=list)


Entity = Annotated[Union[Node, Way, Relation], Field(discriminator="kind")]

_ENTITY_ADAPTER: TypeAdapter[Entity] = TypeAdapter(Entity)


def encode_entity(entity: Node | Way | Relation) -> str:
    """Serialize an entity to compact JSON, omitting unset optional fields."""
    try:
        return entity.model_dump_json(exclude_none=True)
    except (ValueError, TypeError) as e:
        raise SerializationError(f"Cannot encode {entity.kind} {entity.id}: {e}") from e


def decode_entity(data: str | bytes) -> Node | Way | Relation:
    """Parse an entity from the JSON produced by :func:`encode_entity`."""
    try:
        return _ENTITY_ADAPTER.validate_json(data)
    except ValidationError as e:
        raise SerializationError(f"Cannot decode entity: {e}") from e


def entity_from_dict(data: dict[str, Any]) -> Node | Way | Relation:
    """Build an entity from an already-parsed JSON object."""
    try:
        return _ENTITY_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise SerializationError(f"Invalid entity record: {e}") from e
