"""Grouping and assignment of related documents.

Single-pass O(m) walk over the fetched documents. Each join key value
(scalar or list of ids) is resolved through the parent index and the
related document is stored on every parent it references.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from functools import partial
from typing import Any

from reverse_populate.mapping.index import read_field

logger = logging.getLogger(__name__)

Assigner = Callable[[Any, Any], None]


def _get_stored(match: Any, store_where: str) -> Any:
    if isinstance(match, Mapping):
        return match.get(store_where)
    return getattr(match, store_where, None)


def _set_stored(match: Any, store_where: str, value: Any) -> None:
    if isinstance(match, MutableMapping):
        match[store_where] = value
        return
    try:
        setattr(match, store_where, value)
    except AttributeError:
        # Frozen dataclasses
        object.__setattr__(match, store_where, value)


def _reference_id(value: Any) -> Any:
    # The join key path may itself have been populated
    if isinstance(value, Mapping):
        return value.get("_id")
    return value


def populate_result(store_where: str, array_pop: bool, match: Any, result: Any) -> None:
    """Store ``result`` on ``match`` under ``store_where``.

    In array mode the field is created as an empty list on first use and
    results are appended. Otherwise the field is overwritten.
    """
    if array_pop:
        stored = _get_stored(match, store_where)
        if stored is None:
            stored = []
            _set_stored(match, store_where, stored)
        stored.append(result)
    else:
        _set_stored(match, store_where, result)


def create_populate_result(store_where: str, array_pop: bool) -> Assigner:
    """Bind the field name and mode, leaving (match, result)."""
    return partial(populate_result, store_where, array_pop)


def group_results(
    documents: list[Any],
    model_index: dict[str, Any],
    id_field: str,
    assign: Assigner,
) -> int:
    """Attach every document to the parents its join key references.

    Documents whose key matches no parent are dropped.

    Returns:
        The number of assignments made.
    """
    assigned = 0
    dropped = 0

    for document in documents:
        key = read_field(document, id_field)
        if key is None:
            dropped += 1
            continue

        # Many-to-many: the join key holds a list of parent ids
        candidates = key if isinstance(key, (list, tuple)) else (key,)

        hit = False
        for individual_id in candidates:
            match = model_index.get(str(_reference_id(individual_id)))
            if match is not None:
                assign(match, document)
                assigned += 1
                hit = True
        if not hit:
            dropped += 1

    logger.debug(
        "Grouped %d related documents: %d assignments, %d unmatched",
        len(documents),
        assigned,
        dropped,
    )
    return assigned
