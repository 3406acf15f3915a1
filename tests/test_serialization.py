"""Tests for identifier-list encoding."""

import pytest

from querycache.cache.serialization import deserialize_ids, serialize_ids


class TestIdentifierLists:
    def test_preserves_order_and_types(self):
        raw = serialize_ids([5, 2, "post-9"])
        assert deserialize_ids(raw) == [5, 2, "post-9"]

    def test_empty_list_is_a_value(self):
        assert deserialize_ids(serialize_ids([])) == []

    def test_missing_is_none(self):
        assert deserialize_ids(None) is None

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            '{"ids": [1, 2]}',
            "[1, [2]]",
            "[1, null]",
            "[true, 2]",
            "42",
            b"\xff\xfe",
        ],
    )
    def test_malformed_values_are_misses(self, raw):
        assert deserialize_ids(raw) is None

    def test_accepts_already_decoded_list(self):
        assert deserialize_ids([3, 1]) == [3, 1]

