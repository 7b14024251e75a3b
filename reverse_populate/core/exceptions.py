"""reverse-populate exception hierarchy.

Errors raised by the document store while executing the bulk query are
not part of this hierarchy: they reach the caller unchanged.
"""

from __future__ import annotations


class ReversePopulateError(Exception):
    """Base exception for all reverse-populate errors."""


# --- Options ---


class OptionError(ReversePopulateError):
    """Base for option validation errors."""


class MissingFieldError(OptionError):
    """Raised when a mandatory option (or a parent identifier) is absent."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Missing mandatory field {field_name}")


class InvalidOptionError(OptionError):
    """Raised when an option is present but cannot be used."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid reverse populate options: {detail}")


# --- Adapter ---


class AdapterError(ReversePopulateError):
    """Base for document source adapter errors."""


class PopulateError(AdapterError):
    """Raised when a nested populate path cannot be resolved."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"Cannot populate '{path}': {detail}")


class UnsupportedQueryError(AdapterError):
    """Raised by the in-memory source for query operators it cannot evaluate."""

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Unsupported query operator: {operator}")
