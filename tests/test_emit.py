"""Tests for the JSON array output emitter."""

from __future__ import annotations

import io
import json

from osmsieve.emit import write_json
from osmsieve.staging import Namespace
from tests.conftest import node, relation, way


def test_empty_namespace_is_empty_array(staging):
    out = io.StringIO()
    assert write_json(staging, out) == 0
    assert out.getvalue() == "[]"


def test_only_collected_is_written(staging):
    staging.put(Namespace.COLLECTED, relation(1, [("node", 2)], boundary="administrative"))
    staging.put(Namespace.COLLECTED, node(2))
    staging.put(Namespace.PLAIN, way(3))
    out = io.StringIO()

    assert write_json(staging, out) == 2
    data = json.loads(out.getvalue())
    assert {(e["kind"], e["id"]) for e in data} == {("relation", 1), ("node", 2)}


def test_single_element_has_no_comma(staging):
    staging.put(Namespace.COLLECTED, node(2))
    out = io.StringIO()
    write_json(staging, out)
    text = out.getvalue()
    assert text.startswith("[{") and text.endswith("}\n]")
    assert not text.startswith("[,")
    assert json.loads(text) == [json.loads(text[1:-1])]


def test_entities_keep_full_payload(staging):
    rel = relation(1, [("way", 10), ("node", 20)], boundary="administrative", name="Mitte")
    staging.put(Namespace.COLLECTED, rel)
    out = io.StringIO()
    write_json(staging, out)
    (entry,) = json.loads(out.getvalue())
    assert entry == {
        "kind": "relation",
        "id": 1,
        "tags": {"boundary": "administrative", "name": "Mitte"},
        "members": [
            {"kind": "way", "id": 10, "role": ""},
            {"kind": "node", "id": 20, "role": ""},
        ],
    }


def test_many_entities_valid_json(staging):
    for i in range(25):
        staging.put(Namespace.COLLECTED, node(i))
    out = io.StringIO()
    assert write_json(staging, out) == 25
    assert len(json.loads(out.getvalue())) == 25
