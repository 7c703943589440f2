"""osmsieve: extract tag-matched OSM relations closed under membership."""

__version__ = "0.1.0"

from osmsieve.closure import ClosureCollector, ClosureStats, collect_related
from osmsieve.config import SieveConfig
from osmsieve.emit import write_json
from osmsieve.entities import (
    EntityKind,
    Info,
    Member,
    Node,
    Relation,
    StagingKey,
    Way,
    decode_entity,
    encode_entity,
)
from osmsieve.errors import (
    ArgumentError,
    ConfigurationError,
    DanglingReferenceError,
    DecodeError,
    OsmSieveError,
    SerializationError,
    StorageBackendError,
)
from osmsieve.ingest import IngestStats, ingest
from osmsieve.runner import Command, RunResult, extract, run
from osmsieve.sources import JsonLinesSource, OsmiumSource, open_source
from osmsieve.staging import COLLECTED_PREFIX, Namespace, StagingStore, staging_path
from osmsieve.storage import SqliteEngine, open_engine
from osmsieve.tags import PresenceRule, SetRule, TagMatcher, ValueRule, load_matcher, parse_rules

__all__ = [
    "__version__",
    "EntityKind",
    "Info",
    "Member",
    "Node",
    "Way",
    "Relation",
    "StagingKey",
    "encode_entity",
    "decode_entity",
    "TagMatcher",
    "PresenceRule",
    "ValueRule",
    "SetRule",
    "parse_rules",
    "load_matcher",
    "SqliteEngine",
    "open_engine",
    "COLLECTED_PREFIX",
    "Namespace",
    "StagingStore",
    "staging_path",
    "JsonLinesSource",
    "OsmiumSource",
    "open_source",
    "IngestStats",
    "ingest",
    "ClosureCollector",
    "ClosureStats",
    "collect_related",
    "write_json",
    "Command",
    "RunResult",
    "run",
    "extract",
    "SieveConfig",
    "OsmSieveError",
    "ConfigurationError",
    "ArgumentError",
    "DecodeError",
    "StorageBackendError",
    "SerializationError",
    "DanglingReferenceError",
]
