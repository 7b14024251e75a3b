"""MongoDB adapter - sync (pymongo) and async (motor / pymongo async)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from reverse_populate.adapters.base import BaseQuery, DocumentSource

if TYPE_CHECKING:
    from pymongo.collection import Collection


class MongoQuery(BaseQuery):
    """Query over a pymongo Collection."""

    def exec(self) -> list[dict[str, Any]]:
        """Run find() and resolve populate paths."""
        cursor = self._source.collection.find(self._conditions, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        documents = list(cursor)
        self._populate_sync(documents)
        return documents


class MongoCollection(DocumentSource):
    """Synchronous source backed by a pymongo Collection.

    Args:
        collection: The pymongo collection holding the related documents.
        references: populate path -> source holding the referenced documents.
    """

    def __init__(
        self,
        collection: Collection,
        references: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(references)
        self.collection = collection

    def find(self, conditions: dict[str, Any]) -> MongoQuery:
        return MongoQuery(self, conditions)


class AsyncMongoQuery(BaseQuery):
    """Query over a motor AsyncIOMotorCollection or pymongo AsyncCollection."""

    async def exec(self) -> list[dict[str, Any]]:
        """Run find() asynchronously and resolve populate paths."""
        cursor = self._source.collection.find(self._conditions, self._projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        documents = await cursor.to_list(length=None)
        await self._populate_async(documents)
        return documents


class AsyncMongoCollection(DocumentSource):
    """Asynchronous source backed by a motor or pymongo async collection."""

    def __init__(
        self,
        collection: Any,
        references: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(references)
        self.collection = collection

    def find(self, conditions: dict[str, Any]) -> AsyncMongoQuery:
        return AsyncMongoQuery(self, conditions)
