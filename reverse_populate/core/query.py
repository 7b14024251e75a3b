"""Bulk query construction.

Builds the single "join key is one of these parent ids" query, with the
caller's filters, projection, nested populate and sort applied. The
query is returned unexecuted.
"""

from __future__ import annotations

import logging
from typing import Any

from reverse_populate.core.options import PopulateOptions
from reverse_populate.mapping.index import get_identifier

logger = logging.getLogger(__name__)


def collect_ids(model_array: Any, parent_key: str) -> list[Any]:
    """Return the identifier of every parent, in input order."""
    return [get_identifier(model, parent_key) for model in model_array]


def build_conditions(options: PopulateOptions, ids: list[Any]) -> dict[str, Any]:
    """Merge caller filters with the ``$in`` condition on the join key.

    The join key condition replaces a filter on the same field.
    """
    return {
        **(options.filters or {}),
        options.id_field: {"$in": ids},
    }


def get_select_string(select: str, required_id: str) -> str:
    """Ensure a projection string keeps the join key.

    Inclusion projections get the key appended when absent. Exclusion
    projections (every token prefixed with ``-``) lose a ``-key`` token.
    """
    selected = select.split()
    if selected and all(token.startswith("-") for token in selected):
        if "-" + required_id in selected:
            return " ".join(token for token in selected if token != "-" + required_id)
        return select
    if required_id not in selected:
        return select + " " + required_id
    return select


def build_query(options: PopulateOptions) -> Any:
    """Build the bulk query against ``options.collection``."""
    ids = collect_ids(options.model_array, options.parent_key)
    conditions = build_conditions(options, ids)
    logger.debug(
        "Reverse populating %r from %d parent ids on field %r",
        options.store_where,
        len(ids),
        options.id_field,
    )

    query = options.collection.find(conditions)

    if options.select:
        query = query.select(get_select_string(options.select, options.id_field))

    if options.populate:
        query = query.populate(options.populate)

    if options.sort:
        query = query.sort(options.sort)

    return query
