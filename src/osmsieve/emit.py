"""Output emitter: stream the COLLECTED namespace as one JSON array."""

from __future__ import annotations

import logging
from typing import TextIO

from osmsieve.entities import encode_entity
from osmsieve.staging import Namespace, StagingStore

logger = logging.getLogger(__name__)


def write_json(staging: StagingStore, stream: TextIO) -> int:
    """Write every collected entity to ``stream`` as a JSON array.

    Entities are written one at a time as they are read from the store, one
    object per line. An empty namespace produces ``[]``. Returns the number
    of entities written.
    """
    stream.write("[")
    count = 0
    for _key, entity in staging.iterate(Namespace.COLLECTED):
        if count:
            stream.write(",")
        stream.write(encode_entity(entity))
        stream.write("\n")
        count += 1
    stream.write("]")
    stream.flush()
    logger.info("Wrote %d entities", count)
    return count
