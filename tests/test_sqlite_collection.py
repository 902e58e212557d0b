"""Tests for SQLiteCollection backend."""

import pytest

from link_graph.storage.sqlite import SQLiteCollection


def _make_collection():
    """Helper: returns an in-memory SQLite collection with 3 documents."""
    c = SQLiteCollection(":memory:")
    c.insert({"_id": "d1", "from": "a", "to": "b", "weight": 1})
    c.insert({"_id": "d2", "from": "b", "to": "c", "weight": 3})
    c.insert({"_id": "d3", "from": "a", "to": "c", "weight": 2})
    return c


class TestInsertAndFind:
    def test_insert_and_fetch(self):
        c = SQLiteCollection(":memory:")
        doc_id = c.insert({"from": "a", "meta": {"k": [1, 2]}})
        assert c.find_one({"_id": doc_id}) == {"_id": doc_id, "from": "a", "meta": {"k": [1, 2]}}

    def test_insertion_order(self):
        c = _make_collection()
        assert [d["_id"] for d in c.find().fetch()] == ["d1", "d2", "d3"]

    def test_duplicate_id_raises_key_error(self):
        c = _make_collection()
        with pytest.raises(KeyError):
            c.insert({"_id": "d2"})

    def test_unserializable_value_reaches_callback(self):
        c = SQLiteCollection(":memory:")
        calls = []
        c.insert({"from": object()}, callback=lambda e, r: calls.append((e, r)))
        assert isinstance(calls[0][0], TypeError)
        assert len(c) == 0

    def test_sorted_find(self):
        c = _make_collection()
        assert [d["_id"] for d in c.find({}, sort={"weight": 1}).fetch()] == ["d1", "d3", "d2"]


class TestUpdateAndRemove:
    def test_update_persists(self):
        c = _make_collection()
        c.update({"_id": "d2"}, {"$set": {"to": "z"}, "$unset": {"weight": ""}})
        assert c.find_one({"_id": "d2"}) == {"_id": "d2", "from": "b", "to": "z"}

    def test_update_keeps_order(self):
        c = _make_collection()
        c.update({"_id": "d1"}, {"$set": {"weight": 9}})
        assert [d["_id"] for d in c.find().fetch()] == ["d1", "d2", "d3"]

    def test_remove(self):
        c = _make_collection()
        assert c.remove({"to": "c"}) == 2
        assert len(c) == 1

    def test_remove_hook(self):
        c = _make_collection()
        removed = []
        c.after.remove(lambda user_id, doc: removed.append(doc["_id"]))
        c.remove({"_id": "d1"}, user_id="u1")
        assert removed == ["d1"]


class TestTables:
    def test_invalid_table_name(self):
        with pytest.raises(ValueError, match="Invalid table name"):
            SQLiteCollection(":memory:", table="links; DROP TABLE x")

    def test_tables_are_isolated(self, tmp_path):
        db = str(tmp_path / "shared.db")
        links = SQLiteCollection(db, table="links")
        other = SQLiteCollection(db, table="other")
        links.insert({"from": "a"})
        assert len(links) == 1
        assert len(other) == 0
        links.close()
        other.close()


class TestPersistence:
    def test_data_survives_reopen(self, tmp_path):
        db = str(tmp_path / "test.db")
        c1 = SQLiteCollection(db)
        doc_id = c1.insert({"from": "a", "to": "b"})
        c1.close()

        c2 = SQLiteCollection(db)
        assert c2.find_one({"_id": doc_id}) == {"_id": doc_id, "from": "a", "to": "b"}
        c2.close()


class TestIds:
    def test_integer_id_kept(self):
        c = SQLiteCollection(":memory:")
        assert c.insert({"_id": 5, "from": "a"}) == 5
        assert c.find_one({"_id": 5}) == {"_id": 5, "from": "a"}

    def test_integer_and_string_ids_coexist(self):
        c = SQLiteCollection(":memory:")
        c.insert({"_id": 5})
        c.insert({"_id": "5"})
        assert len(c) == 2
        c.update({"_id": 5}, {"$set": {"kind": "int"}})
        assert c.remove({"_id": "5"}) == 1
        assert c.find().fetch() == [{"_id": 5, "kind": "int"}]
