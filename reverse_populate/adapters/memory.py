"""In-memory adapter - sync and async sources over a list of dicts.

Evaluates the subset of MongoDB query operators the query builder and
typical filters use, with MongoDB's array semantics: a condition on an
array field matches when any element matches.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from bson import Decimal128, ObjectId

from reverse_populate.adapters.base import BaseQuery, DocumentSource
from reverse_populate.core.exceptions import UnsupportedQueryError


def _candidates(value: Any) -> list[Any]:
    """Values a condition is tested against: the field and its elements."""
    if isinstance(value, list):
        return [value, *value]
    return [value]


def _equals(value: Any, expected: Any) -> bool:
    return any(candidate == expected for candidate in _candidates(value))


def _compare(value: Any, op: str, arg: Any) -> bool:
    for candidate in _candidates(value):
        if candidate is None or isinstance(candidate, list):
            continue
        try:
            if op == "$gt" and candidate > arg:
                return True
            if op == "$gte" and candidate >= arg:
                return True
            if op == "$lt" and candidate < arg:
                return True
            if op == "$lte" and candidate <= arg:
                return True
        except TypeError:
            continue
    return False


def _eval_op(value: Any, op: str, arg: Any) -> bool:
    if op == "$eq":
        return _equals(value, arg)
    if op == "$ne":
        return not _equals(value, arg)
    if op == "$in":
        return any(_equals(value, item) for item in arg)
    if op == "$nin":
        return not any(_equals(value, item) for item in arg)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(value, op, arg)
    raise UnsupportedQueryError(op)


def match_query(document: Mapping[str, Any], conditions: Mapping[str, Any]) -> bool:
    """Return True if ``document`` satisfies every condition."""
    for key, cond in conditions.items():
        if key == "$and":
            if not all(match_query(document, clause) for clause in cond):
                return False
        elif key == "$or":
            if not any(match_query(document, clause) for clause in cond):
                return False
        elif key.startswith("$"):
            raise UnsupportedQueryError(key)
        elif isinstance(cond, Mapping) and cond and all(op.startswith("$") for op in cond):
            for op, arg in cond.items():
                if op == "$exists":
                    if (key in document) != bool(arg):
                        return False
                elif not _eval_op(document.get(key), op, arg):
                    return False
        elif not _equals(document.get(key), cond):
            return False
    return True


def project(document: Mapping[str, Any], projection: Mapping[str, int] | None) -> dict[str, Any]:
    """Apply a pymongo-style projection, returning a new dict."""
    if not projection:
        return dict(document)
    include = [key for key, flag in projection.items() if flag and key != "_id"]
    # {"_id": 1} alone is an inclusion projection too
    if include or all(projection.values()):
        out = {key: document[key] for key in include if key in document}
        if projection.get("_id", 1) and "_id" in document:
            out = {"_id": document["_id"], **out}
        return out
    return {key: value for key, value in document.items() if projection.get(key, 1)}


def _sort_key(value: Any) -> tuple[int, Any]:
    """Order values by BSON type first, then by value within the type."""
    if value is None:
        return (1, 0)
    if isinstance(value, bool):
        return (8, value)
    if isinstance(value, Decimal128):
        return (2, value.to_decimal())
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, Mapping):
        return (4, tuple((key, _sort_key(item)) for key, item in value.items()))
    if isinstance(value, (list, tuple)):
        return (5, tuple(_sort_key(item) for item in value))
    if isinstance(value, bytes):
        return (6, value)
    if isinstance(value, ObjectId):
        return (7, value)
    if isinstance(value, datetime):
        return (9, value)
    return (10, str(value))


def sort_documents(documents: list[dict[str, Any]], keys: list[tuple[str, int]]) -> None:
    """Stable multi-key sort in place.

    Missing values sort with nulls, first. Mixed types follow BSON type order.
    """
    for key, direction in reversed(keys):
        documents.sort(
            key=lambda doc: _sort_key(doc.get(key)),
            reverse=direction < 0,
        )


class MemoryQuery(BaseQuery):
    """Query over a MemoryCollection."""

    def _run(self) -> list[dict[str, Any]]:
        matched = [doc for doc in self._source.documents if match_query(doc, self._conditions)]
        if self._sort:
            sort_documents(matched, self._sort)
        return [project(doc, self._projection) for doc in matched]

    def exec(self) -> list[dict[str, Any]]:
        documents = self._run()
        self._populate_sync(documents)
        return documents


class AsyncMemoryQuery(MemoryQuery):
    """Awaitable variant of MemoryQuery."""

    async def exec(self) -> list[dict[str, Any]]:  # type: ignore[override]
        documents = self._run()
        await self._populate_async(documents)
        return documents


class MemoryCollection(DocumentSource):
    """Synchronous source over documents held in memory.

    Stored documents are never handed out: queries return copies.
    """

    def __init__(
        self,
        documents: Iterable[dict[str, Any]] | None = None,
        references: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(references)
        self.documents: list[dict[str, Any]] = []
        for document in documents or ():
            self.insert(document)

    def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """Store a document, assigning an ObjectId ``_id`` when it has none."""
        document.setdefault("_id", ObjectId())
        self.documents.append(document)
        return document

    def find(self, conditions: dict[str, Any]) -> MemoryQuery:
        return MemoryQuery(self, conditions)


class AsyncMemoryCollection(MemoryCollection):
    """Asynchronous source over documents held in memory."""

    def find(self, conditions: dict[str, Any]) -> AsyncMemoryQuery:
        return AsyncMemoryQuery(self, conditions)
