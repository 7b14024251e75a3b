"""Parent identity index.

Maps stringified parent identifiers to the parent documents so that the
grouping pass can resolve a join key in O(1).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from reverse_populate.core.exceptions import MissingFieldError

_MISSING = object()


def read_field(document: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an object."""
    if isinstance(document, Mapping):
        return document.get(name, default)
    return getattr(document, name, default)


def get_identifier(model: Any, parent_key: str) -> Any:
    """Return a parent's identifier, raising if it has none."""
    identifier = read_field(model, parent_key, _MISSING)
    if identifier is _MISSING or identifier is None:
        raise MissingFieldError(parent_key)
    return identifier


def build_parent_index(model_array: Any, parent_key: str = "_id") -> dict[str, Any]:
    """Build the str(identifier) -> parent lookup table.

    Duplicate identifiers keep the last parent seen.
    """
    index: dict[str, Any] = {}
    for model in model_array:
        index[str(get_identifier(model, parent_key))] = model
    return index
