"""Tests for document selector matching, modifiers and sorting."""

import pytest

from link_graph.storage.matching import (
    apply_modifier,
    matches,
    slice_documents,
    sort_documents,
)

DOC = {"_id": "d1", "from": "a", "to": "b", "weight": 3}


class TestMatches:
    def test_empty_selector_matches(self):
        assert matches(DOC, {}) is True
        assert matches(DOC, None) is True

    def test_equality(self):
        assert matches(DOC, {"from": "a"}) is True
        assert matches(DOC, {"from": "z"}) is False

    def test_all_clauses_must_match(self):
        assert matches(DOC, {"from": "a", "to": "b"}) is True
        assert matches(DOC, {"from": "a", "to": "z"}) is False

    def test_equality_on_missing_field(self):
        assert matches(DOC, {"label": "x"}) is False

    def test_exists_false(self):
        assert matches(DOC, {"label": {"$exists": False}}) is True
        assert matches(DOC, {"from": {"$exists": False}}) is False

    def test_exists_true(self):
        assert matches(DOC, {"from": {"$exists": True}}) is True
        assert matches(DOC, {"label": {"$exists": True}}) is False

    def test_ne(self):
        assert matches(DOC, {"from": {"$ne": "z"}}) is True
        assert matches(DOC, {"from": {"$ne": "a"}}) is False
        assert matches(DOC, {"label": {"$ne": "x"}}) is True

    def test_in(self):
        assert matches(DOC, {"_id": {"$in": ["d1", "d2"]}}) is True
        assert matches(DOC, {"_id": {"$in": ["d2"]}}) is False

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError, match=r"\$gt"):
            matches(DOC, {"weight": {"$gt": 1}})

    def test_plain_dict_value_is_equality(self):
        doc = {"_id": "d", "meta": {"k": 1}}
        assert matches(doc, {"meta": {"k": 1}}) is True


class TestApplyModifier:
    def test_set(self):
        result = apply_modifier(DOC, {"$set": {"to": "c"}})
        assert result["to"] == "c"
        assert DOC["to"] == "b"

    def test_unset(self):
        result = apply_modifier(DOC, {"$unset": {"weight": ""}})
        assert "weight" not in result

    def test_set_and_unset(self):
        result = apply_modifier(DOC, {"$set": {"label": "x"}, "$unset": {"to": ""}})
        assert result == {"_id": "d1", "from": "a", "weight": 3, "label": "x"}

    def test_replacement_keeps_id(self):
        result = apply_modifier(DOC, {"from": "q"})
        assert result == {"_id": "d1", "from": "q"}

    def test_mixed_modifier_raises(self):
        with pytest.raises(ValueError, match="mix"):
            apply_modifier(DOC, {"$set": {"to": "c"}, "from": "q"})

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError, match=r"\$inc"):
            apply_modifier(DOC, {"$inc": {"weight": 1}})

    def test_changing_id_raises(self):
        with pytest.raises(ValueError, match="_id"):
            apply_modifier(DOC, {"$set": {"_id": "other"}})


class TestSortDocuments:
    def _docs(self):
        return [
            {"_id": "1", "k": 2, "n": "b"},
            {"_id": "2", "k": 1, "n": "a"},
            {"_id": "3", "k": 2, "n": "a"},
            {"_id": "4"},
        ]

    def test_no_sort_keeps_order(self):
        docs = self._docs()
        assert [d["_id"] for d in sort_documents(docs, None)] == ["1", "2", "3", "4"]

    def test_ascending_missing_first(self):
        result = sort_documents(self._docs(), {"k": 1})
        assert [d["_id"] for d in result] == ["4", "2", "1", "3"]

    def test_descending(self):
        result = sort_documents(self._docs(), {"k": -1})
        assert [d["_id"] for d in result] == ["1", "3", "2", "4"]

    def test_compound_sort(self):
        result = sort_documents(self._docs(), {"k": 1, "n": 1})
        assert [d["_id"] for d in result] == ["4", "2", "3", "1"]

    def test_int_and_float_sort_together(self):
        docs = [{"_id": "a", "w": 2}, {"_id": "b", "w": 1.5}, {"_id": "c", "w": 1}]
        assert [d["w"] for d in sort_documents(docs, {"w": 1})] == [1, 1.5, 2]
        assert [d["w"] for d in sort_documents(docs, {"w": -1})] == [2, 1.5, 1]

    def test_bool_not_grouped_with_numbers(self):
        docs = [{"_id": "a", "w": 2}, {"_id": "b", "w": True}]
        assert [d["_id"] for d in sort_documents(docs, {"w": 1})] == ["a", "b"]


class TestSliceDocuments:
    def test_skip_and_limit(self):
        docs = [{"_id": str(i)} for i in range(5)]
        assert [d["_id"] for d in slice_documents(docs, 1, 2)] == ["1", "2"]

    def test_zero_limit_means_all(self):
        docs = [{"_id": str(i)} for i in range(3)]
        assert len(slice_documents(docs, None, 0)) == 3
