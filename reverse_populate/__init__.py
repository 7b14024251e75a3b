"""reverse-populate - attach documents that reference their parents."""

from __future__ import annotations

from reverse_populate.adapters.memory import AsyncMemoryCollection, MemoryCollection
from reverse_populate.adapters.mongo import AsyncMongoCollection, MongoCollection
from reverse_populate.core.engine import reverse_populate, reverse_populate_sync
from reverse_populate.core.exceptions import (
    AdapterError,
    InvalidOptionError,
    MissingFieldError,
    OptionError,
    PopulateError,
    ReversePopulateError,
    UnsupportedQueryError,
)
from reverse_populate.core.options import REQUIRED_FIELDS, PopulateOptions, PopulatePath

__all__ = [
    # Entry points
    "reverse_populate",
    "reverse_populate_sync",
    # Options
    "PopulateOptions",
    "PopulatePath",
    "REQUIRED_FIELDS",
    # Sources
    "MongoCollection",
    "AsyncMongoCollection",
    "MemoryCollection",
    "AsyncMemoryCollection",
    # Exceptions
    "ReversePopulateError",
    "OptionError",
    "MissingFieldError",
    "InvalidOptionError",
    "AdapterError",
    "PopulateError",
    "UnsupportedQueryError",
]
