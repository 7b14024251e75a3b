"""Mapping layer - index parents and group related documents onto them."""

from __future__ import annotations

from reverse_populate.mapping.assign import (
    create_populate_result,
    group_results,
    populate_result,
)
from reverse_populate.mapping.index import build_parent_index, get_identifier, read_field

__all__ = [
    "build_parent_index",
    "get_identifier",
    "read_field",
    "populate_result",
    "create_populate_result",
    "group_results",
]
