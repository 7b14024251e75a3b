"""Reverse populate options.

The mandatory options are checked for presence before anything else
happens; the survivors are then parsed into a PopulateOptions model.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from reverse_populate.core.exceptions import InvalidOptionError, MissingFieldError

REQUIRED_FIELDS: tuple[str, ...] = (
    "model_array",
    "store_where",
    "array_pop",
    "collection",
    "id_field",
)


def check_required(required: tuple[str, ...], options: Mapping[str, Any]) -> None:
    """Raise MissingFieldError for the first required option that is absent.

    Absent means missing or None. ``array_pop=False`` is present.
    """
    for field_name in required:
        if options.get(field_name) is None:
            raise MissingFieldError(field_name)


class NestedPopulatePath(BaseModel):
    """Second-level populate entry. Cannot nest any further."""

    model_config = ConfigDict(extra="forbid")

    path: str
    select: str | None = None


class PopulatePath(BaseModel):
    """A populate entry resolved against the related documents."""

    model_config = ConfigDict(extra="forbid")

    path: str
    select: str | None = None
    populate: NestedPopulatePath | None = None


def _normalize_populate(value: Any) -> Any:
    """Turn the accepted populate shorthands into a list of entry mappings."""
    if value is None:
        return None
    if isinstance(value, str):
        return [{"path": path} for path in value.split()]
    if isinstance(value, (Mapping, PopulatePath)):
        value = [value]
    if isinstance(value, (list, tuple)):
        entries: list[Any] = []
        for item in value:
            if isinstance(item, str):
                entries.extend({"path": path} for path in item.split())
            else:
                entries.append(item)
        return entries
    return value


def coerce_populate(value: Any) -> list[PopulatePath]:
    """Parse any accepted populate shorthand into PopulatePath entries."""
    entries = _normalize_populate(value) or []
    try:
        return [
            entry if isinstance(entry, PopulatePath) else PopulatePath.model_validate(entry)
            for entry in entries
        ]
    except ValidationError as e:
        raise InvalidOptionError(str(e)) from e


class PopulateOptions(BaseModel):
    """Validated options for a single reverse populate call."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        protected_namespaces=(),
    )

    # Kept as the caller's own list object: the call returns it.
    model_array: Any
    store_where: str = Field(min_length=1)
    array_pop: StrictBool
    collection: Any
    id_field: str = Field(min_length=1)
    filters: dict[str, Any] | None = None
    sort: str | dict[str, Any] | list[Any] | None = None
    populate: list[PopulatePath] | None = None
    select: str | None = None
    parent_key: str = "_id"

    @field_validator("model_array")
    @classmethod
    def _check_model_array(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            raise ValueError("model_array must be a list of parent documents")
        return value

    @field_validator("collection")
    @classmethod
    def _check_collection(cls, value: Any) -> Any:
        if not callable(getattr(value, "find", None)):
            raise ValueError("collection must expose a find() method")
        return value

    @field_validator("populate", mode="before")
    @classmethod
    def _coerce_populate(cls, value: Any) -> Any:
        return _normalize_populate(value)


def parse_options(options: Mapping[str, Any] | None = None, /, **kwargs: Any) -> PopulateOptions:
    """Validate raw options and build a PopulateOptions.

    Options may be given as a mapping, as keyword arguments, or both
    (keywords win).

    Raises:
        MissingFieldError: a mandatory option is missing or None.
        InvalidOptionError: an option is unknown or has the wrong type.
    """
    merged: dict[str, Any] = {**(options or {}), **kwargs}
    check_required(REQUIRED_FIELDS, merged)

    unknown = sorted(set(merged) - set(PopulateOptions.model_fields))
    if unknown:
        raise InvalidOptionError(f"unknown options {unknown}")

    try:
        return PopulateOptions(**merged)
    except ValidationError as e:
        raise InvalidOptionError(str(e)) from e
