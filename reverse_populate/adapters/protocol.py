"""Document source protocols.

Every adapter module MUST implement these protocols. The query builder
only ever talks to a source through find() and the chainable query it
returns.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SyncQuery(Protocol):
    """Unexecuted query over a blocking document source."""

    def select(self, projection: str) -> SyncQuery:
        """Restrict returned fields using a projection string."""
        ...

    def populate(self, spec: Any) -> SyncQuery:
        """Resolve references stored on the returned documents."""
        ...

    def sort(self, spec: Any) -> SyncQuery:
        """Order the returned documents."""
        ...

    def exec(self) -> list[Any]:
        """Run the query and return the documents."""
        ...


@runtime_checkable
class AsyncQuery(Protocol):
    """Unexecuted query over an asynchronous document source."""

    def select(self, projection: str) -> AsyncQuery:
        """Restrict returned fields using a projection string."""
        ...

    def populate(self, spec: Any) -> AsyncQuery:
        """Resolve references stored on the returned documents."""
        ...

    def sort(self, spec: Any) -> AsyncQuery:
        """Order the returned documents."""
        ...

    async def exec(self) -> list[Any]:
        """Run the query and return the documents."""
        ...


@runtime_checkable
class SyncSource(Protocol):
    """Blocking document source."""

    def find(self, conditions: dict[str, Any]) -> SyncQuery:
        """Start a query matching ``conditions``."""
        ...


@runtime_checkable
class AsyncSource(Protocol):
    """Asynchronous document source."""

    def find(self, conditions: dict[str, Any]) -> AsyncQuery:
        """Start a query matching ``conditions``."""
        ...
