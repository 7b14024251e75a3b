"""Unit tests for the pymongo/motor adapters and shared query helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo import ASCENDING, DESCENDING

from reverse_populate.adapters.base import (
    attach_references,
    collect_reference_ids,
    parse_projection,
    parse_sort,
)
from reverse_populate.adapters.memory import MemoryCollection
from reverse_populate.adapters.mongo import AsyncMongoCollection, MongoCollection
from reverse_populate.core.engine import reverse_populate_sync
from reverse_populate.core.exceptions import InvalidOptionError


def _pymongo_collection(documents: list[dict]) -> MagicMock:
    collection = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.__iter__.return_value = iter(documents)
    collection.find.return_value = cursor
    return collection


def _motor_collection(documents: list[dict]) -> MagicMock:
    collection = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=documents)
    collection.find.return_value = cursor
    return collection


class TestParseProjection:
    def test_inclusion(self) -> None:
        assert parse_projection("title author") == {"title": 1, "author": 1}

    def test_exclusion(self) -> None:
        assert parse_projection("-content") == {"content": 0}

    def test_empty(self) -> None:
        assert parse_projection("") is None
        assert parse_projection(None) is None


class TestParseSort:
    def test_string(self) -> None:
        assert parse_sort("title -date") == [("title", ASCENDING), ("date", DESCENDING)]

    def test_mapping(self) -> None:
        assert parse_sort({"title": "asc", "date": -1}) == [
            ("title", ASCENDING),
            ("date", DESCENDING),
        ]

    def test_pairs(self) -> None:
        assert parse_sort([("title", "descending")]) == [("title", DESCENDING)]

    def test_invalid_direction(self) -> None:
        with pytest.raises(InvalidOptionError, match="sideways"):
            parse_sort({"title": "sideways"})

    def test_bare_field_names_rejected(self) -> None:
        with pytest.raises(InvalidOptionError, match="pairs"):
            parse_sort(["title"])

    def test_bare_field_names_rejected_by_reverse_populate(self) -> None:
        source = MemoryCollection([{"a": 1, "t": "x"}])
        with pytest.raises(InvalidOptionError, match="pairs"):
            reverse_populate_sync(
                model_array=[{"_id": 1}],
                store_where="items",
                array_pop=True,
                collection=source,
                id_field="a",
                sort=["t"],
            )


class TestReferenceHelpers:
    def test_collect_distinct_ids(self) -> None:
        documents = [{"tags": [1, 2]}, {"tags": [2, 3]}, {"tags": None}, {}]
        assert collect_reference_ids(documents, "tags") == [1, 2, 3]

    def test_attach_keeps_reference_order(self) -> None:
        documents = [{"tags": [3, 1]}]
        attach_references(documents, "tags", [{"_id": 1}, {"_id": 3}])
        assert documents == [{"tags": [{"_id": 3}, {"_id": 1}]}]


class TestMongoCollection:
    def test_exec_passes_conditions_projection_and_sort(self) -> None:
        collection = _pymongo_collection([{"_id": 1, "author": "a"}])
        source = MongoCollection(collection)

        documents = source.find({"author": {"$in": ["a"]}}).select("title author").sort("-title").exec()

        collection.find.assert_called_once_with(
            {"author": {"$in": ["a"]}}, {"title": 1, "author": 1}
        )
        collection.find.return_value.sort.assert_called_once_with([("title", DESCENDING)])
        assert documents == [{"_id": 1, "author": "a"}]

    def test_exec_without_sort(self) -> None:
        collection = _pymongo_collection([])
        MongoCollection(collection).find({}).exec()
        collection.find.assert_called_once_with({}, None)
        collection.find.return_value.sort.assert_not_called()

    def test_populate_queries_reference_collection(self) -> None:
        categories = _pymongo_collection([{"_id": "c1", "name": "python"}])
        posts = _pymongo_collection([{"_id": "p1", "categories": ["c1"]}])
        source = MongoCollection(posts, references={"categories": MongoCollection(categories)})

        [post] = source.find({}).populate("categories").exec()

        categories.find.assert_called_once_with({"_id": {"$in": ["c1"]}}, None)
        assert post["categories"] == [{"_id": "c1", "name": "python"}]


class TestAsyncMongoCollection:
    async def test_exec(self) -> None:
        collection = _motor_collection([{"_id": 1}])
        source = AsyncMongoCollection(collection)

        documents = await source.find({"author": 1}).sort({"title": 1}).exec()

        collection.find.assert_called_once_with({"author": 1}, None)
        collection.find.return_value.sort.assert_called_once_with([("title", ASCENDING)])
        collection.find.return_value.to_list.assert_awaited_once_with(length=None)
        assert documents == [{"_id": 1}]

    async def test_populate(self) -> None:
        users = _motor_collection([{"_id": "u1", "name": "Ada"}])
        passports = _motor_collection([{"_id": "x", "owner": "u1"}])
        source = AsyncMongoCollection(passports, references={"owner": AsyncMongoCollection(users)})

        [passport] = await source.find({}).populate([{"path": "owner", "select": "name"}]).exec()

        users.find.assert_called_once_with({"_id": {"$in": ["u1"]}}, {"name": 1})
        assert passport["owner"] == {"_id": "u1", "name": "Ada"}
