"""Tests for the namespaced staging store."""

from __future__ import annotations

import os

import pytest

from osmsieve.entities import EntityKind, StagingKey
from osmsieve.errors import DanglingReferenceError
from osmsieve.staging import COLLECTED_PREFIX, Namespace, staging_path
from tests.conftest import node, relation, way

N1 = StagingKey(EntityKind.NODE, 1)
W1 = StagingKey(EntityKind.WAY, 1)


class TestNamespaces:
    def test_prefix_disjoint_from_kind_codes(self):
        assert COLLECTED_PREFIX[0] not in {kind.code for kind in EntityKind}

    def test_same_id_different_kinds_do_not_collide(self, staging):
        staging.put(Namespace.PLAIN, node(1, a="node"))
        staging.put(Namespace.PLAIN, way(1, a="way"))
        assert staging.get(Namespace.PLAIN, N1).tags == {"a": "node"}
        assert staging.get(Namespace.PLAIN, W1).tags == {"a": "way"}

    def test_namespaces_are_separate(self, staging):
        staging.put(Namespace.COLLECTED, node(1))
        assert staging.get(Namespace.PLAIN, N1) is None
        assert staging.contains(Namespace.COLLECTED, N1)

    def test_iterate_plain_excludes_collected(self, staging):
        staging.put(Namespace.PLAIN, node(1))
        staging.put(Namespace.PLAIN, way(2))
        staging.put(Namespace.COLLECTED, relation(3))
        plain = {key for key, _ in staging.iterate(Namespace.PLAIN)}
        collected = {key for key, _ in staging.iterate(Namespace.COLLECTED)}
        assert plain == {N1, StagingKey(EntityKind.WAY, 2)}
        assert collected == {StagingKey(EntityKind.RELATION, 3)}

    def test_iterate_yields_decoded_entities(self, staging):
        rel = relation(3, [("node", 1)], type="route")
        staging.put(Namespace.COLLECTED, rel)
        assert list(staging.iterate(Namespace.COLLECTED)) == [(rel.key, rel)]

    def test_count(self, staging):
        for i in range(4):
            staging.put(Namespace.PLAIN, node(i))
        staging.put(Namespace.COLLECTED, relation(9))
        assert staging.count(Namespace.PLAIN) == 4
        assert staging.count(Namespace.COLLECTED) == 1

    def test_delete(self, staging):
        staging.put(Namespace.PLAIN, node(1))
        staging.delete(Namespace.PLAIN, N1)
        assert not staging.contains(Namespace.PLAIN, N1)

    def test_stage_moves_key_between_namespaces(self, staging):
        staging.stage(node(1, a="first"), collected=True)
        staging.stage(node(1, a="second"), collected=False)
        assert not staging.contains(Namespace.COLLECTED, N1)
        assert staging.get(Namespace.PLAIN, N1).tags == {"a": "second"}

        staging.stage(node(1, a="third"), collected=True)
        assert not staging.contains(Namespace.PLAIN, N1)
        assert staging.get(Namespace.COLLECTED, N1).tags == {"a": "third"}

    def test_clear(self, staging):
        staging.put(Namespace.PLAIN, node(1))
        staging.put(Namespace.COLLECTED, node(2))
        staging.clear()
        assert staging.count(Namespace.PLAIN) == 0
        assert staging.count(Namespace.COLLECTED) == 0


class TestPromote:
    def test_moves_between_namespaces(self, staging):
        original = node(1, name="x")
        staging.put(Namespace.PLAIN, original)
        assert staging.promote(N1) == original
        assert not staging.contains(Namespace.PLAIN, N1)
        assert staging.get(Namespace.COLLECTED, N1) == original

    def test_already_collected_returns_none(self, staging):
        staging.put(Namespace.COLLECTED, node(1))
        assert staging.promote(N1) is None
        assert staging.contains(Namespace.COLLECTED, N1)

    def test_absent_raises_dangling(self, staging):
        with pytest.raises(DanglingReferenceError) as exc:
            staging.promote(N1)
        assert exc.value.key == N1


class TestStagingPath:
    def test_deterministic(self):
        assert staging_path(["a.pbf", "b.pbf"]) == staging_path(["a.pbf", "b.pbf"])

    def test_depends_on_inputs(self):
        assert staging_path(["a.pbf"]) != staging_path(["b.pbf"])

    def test_md5_of_concatenated_paths(self, tmp_path):
        path = staging_path(["a", "b"], str(tmp_path))
        # md5("ab")
        assert path == os.path.join(str(tmp_path), "187ef4436122d1cc2f40dc2b92f0eba0.db")
