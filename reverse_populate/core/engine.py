"""Reverse populate entry points.

Validates the options, builds the parent index and the bulk query,
awaits the one fetch and groups the fetched documents onto their
parents. The parents are mutated in place and the caller's list is
returned as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from reverse_populate.core.options import PopulateOptions, parse_options
from reverse_populate.core.query import build_query
from reverse_populate.mapping.assign import create_populate_result, group_results
from reverse_populate.mapping.index import build_parent_index

logger = logging.getLogger(__name__)


def _prepare(options: PopulateOptions) -> tuple[dict[str, Any], Any]:
    model_index = build_parent_index(options.model_array, options.parent_key)
    query = build_query(options)
    return model_index, query


def _finish(options: PopulateOptions, model_index: dict[str, Any], documents: list[Any]) -> Any:
    logger.debug("Fetched %d related documents for %r", len(documents), options.store_where)
    populate_result = create_populate_result(options.store_where, options.array_pop)
    group_results(documents, model_index, options.id_field, populate_result)
    return options.model_array


async def reverse_populate(options: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Any:
    """Attach related documents that reference the given parents.

    Args:
        options: Option mapping; keyword arguments are merged over it.
            Required: model_array, store_where, array_pop, collection,
            id_field. Optional: filters, sort, populate, select, parent_key.

    Returns:
        The ``model_array`` passed in, each parent carrying ``store_where``.

    Raises:
        MissingFieldError: a mandatory option is missing or None.
        InvalidOptionError: an option is unknown or malformed.
    """
    opts = parse_options(options, **kwargs)

    if not opts.model_array:
        logger.debug("Empty model_array, skipping query")
        return []

    model_index, query = _prepare(opts)
    documents = await query.exec()
    return _finish(opts, model_index, documents)


def reverse_populate_sync(options: Mapping[str, Any] | None = None, /, **kwargs: Any) -> Any:
    """Blocking variant of reverse_populate for synchronous sources."""
    opts = parse_options(options, **kwargs)

    if not opts.model_array:
        logger.debug("Empty model_array, skipping query")
        return []

    model_index, query = _prepare(opts)
    documents = query.exec()
    return _finish(opts, model_index, documents)
