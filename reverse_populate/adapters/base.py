"""Shared query state and helpers for the bundled document sources.

BaseQuery records select/populate/sort in the store-neutral form the
query builder hands over, converted to pymongo's projection and sort
shapes. Population resolves each path with one ``$in`` query through
the source declared for that path.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pymongo import ASCENDING, DESCENDING

from reverse_populate.core.exceptions import InvalidOptionError, PopulateError
from reverse_populate.core.options import PopulatePath, coerce_populate
from reverse_populate.mapping.index import read_field

logger = logging.getLogger(__name__)

_DIRECTIONS: dict[Any, int] = {
    1: ASCENDING,
    -1: DESCENDING,
    "1": ASCENDING,
    "-1": DESCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


def parse_projection(select: str | None) -> dict[str, int] | None:
    """Convert ``"title -body"`` style projections into a pymongo projection."""
    if not select:
        return None
    projection: dict[str, int] = {}
    for token in select.split():
        if token.startswith("-"):
            projection[token[1:]] = 0
        else:
            projection[token.lstrip("+")] = 1
    return projection or None


def _direction(value: Any) -> int:
    key = value.lower() if isinstance(value, str) else value
    try:
        return _DIRECTIONS[key]
    except (KeyError, TypeError):
        raise InvalidOptionError(f"invalid sort direction {value!r}") from None


def parse_sort(spec: Any) -> list[tuple[str, int]]:
    """Convert a sort spec into pymongo's list of (key, direction) pairs.

    Accepts ``"title -date"``, ``{"title": 1, "date": "desc"}`` or a list
    of pairs.
    """
    if isinstance(spec, str):
        keys: list[tuple[str, int]] = []
        for token in spec.split():
            if token.startswith("-"):
                keys.append((token[1:], DESCENDING))
            else:
                keys.append((token.lstrip("+"), ASCENDING))
        return keys
    if isinstance(spec, Mapping):
        return [(key, _direction(value)) for key, value in spec.items()]
    pairs = list(spec)
    for pair in pairs:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise InvalidOptionError(f"sort entries must be (key, direction) pairs, got {pair!r}")
    return [(key, _direction(value)) for key, value in pairs]


def collect_reference_ids(documents: list[Any], path: str) -> list[Any]:
    """Return the distinct ids stored under ``path``, in first-seen order."""
    ids: dict[str, Any] = {}
    for document in documents:
        value = read_field(document, path)
        if value is None:
            continue
        for item in value if isinstance(value, list) else (value,):
            ids.setdefault(str(item), item)
    return list(ids.values())


def attach_references(documents: list[Any], path: str, resolved: list[Any]) -> None:
    """Replace the ids under ``path`` with the resolved documents.

    Dangling ids are dropped from lists and become None for scalars.
    """
    by_id = {str(read_field(doc, "_id")): doc for doc in resolved}
    for document in documents:
        value = read_field(document, path)
        if value is None:
            continue
        if isinstance(value, list):
            document[path] = [by_id[str(item)] for item in value if str(item) in by_id]
        else:
            document[path] = by_id.get(str(value))


class DocumentSource:
    """Base for sources that can resolve populate paths."""

    def __init__(self, references: Mapping[str, Any] | None = None) -> None:
        self.references: dict[str, Any] = dict(references or {})

    def reference(self, path: str) -> Any:
        """Return the source that holds the documents referenced by ``path``."""
        try:
            return self.references[path]
        except KeyError:
            raise PopulateError(path, "no reference source declared for this path") from None


class BaseQuery:
    """Chainable query state shared by the sync and async adapters."""

    def __init__(self, source: DocumentSource, conditions: dict[str, Any]) -> None:
        self._source = source
        self._conditions = conditions
        self._projection: dict[str, int] | None = None
        self._populate: list[PopulatePath] = []
        self._sort: list[tuple[str, int]] | None = None

    @property
    def conditions(self) -> dict[str, Any]:
        return self._conditions

    @property
    def projection(self) -> dict[str, int] | None:
        return self._projection

    @property
    def sort_keys(self) -> list[tuple[str, int]] | None:
        return self._sort

    def select(self, projection: str) -> Any:
        self._projection = parse_projection(projection)
        return self

    def populate(self, spec: Any) -> Any:
        self._populate.extend(coerce_populate(spec))
        return self

    def sort(self, spec: Any) -> Any:
        self._sort = parse_sort(spec) or None
        return self

    def _reference_query(self, documents: list[Any], entry: PopulatePath) -> Any:
        """Build the query resolving ``entry`` for ``documents``, or None."""
        ids = collect_reference_ids(documents, entry.path)
        if not ids:
            return None
        logger.debug("Populating %r with %d referenced ids", entry.path, len(ids))
        query = self._source.reference(entry.path).find({"_id": {"$in": ids}})
        if entry.select:
            query = query.select(entry.select)
        if entry.populate is not None:
            query = query.populate(entry.populate.model_dump())
        return query

    def _populate_sync(self, documents: list[Any]) -> None:
        for entry in self._populate:
            query = self._reference_query(documents, entry)
            if query is not None:
                attach_references(documents, entry.path, query.exec())

    async def _populate_async(self, documents: list[Any]) -> None:
        for entry in self._populate:
            query = self._reference_query(documents, entry)
            if query is not None:
                attach_references(documents, entry.path, await query.exec())
