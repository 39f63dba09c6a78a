"""MongoRecordStore — IRecordStore over a Motor collection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    PyMongoError,
    ServerSelectionTimeoutError,
)

from ..core.exceptions import StoreUnavailableError
from .exceptions import MongoQueryError
from .query_builder import MongoQueryBuilder

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ..specifications.base import ISpecification
    from .connection import MongoConnectionManager

logger = logging.getLogger("flightsafe_query.mongo")

_UNAVAILABLE = (ConnectionFailure, ServerSelectionTimeoutError, ExecutionTimeout)


class MongoRecordStore:
    """Raw-record access to one collection.

    Listing runs as a ``$match``/``$sort``/``$skip``/``$limit`` pipeline;
    counting uses ``count_documents`` on the same ``$match`` document.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str,
        *,
        database: str | None = None,
        object_id_fields: Iterable[str] = ("_id",),
        query_builder: MongoQueryBuilder | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._database = database
        self._query_builder = query_builder or MongoQueryBuilder(object_id_fields)

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def _collection(self) -> Any:
        return self._connection.collection(self._collection_name, self._database)

    def _match(self, spec: ISpecification[Any]) -> dict[str, Any]:
        match = self._query_builder.build_match(spec)
        logger.debug("%s match: %s", self._collection_name, match)
        return match

    def _build_pipeline(
        self,
        *,
        match: dict[str, Any],
        sort_list: list[tuple[str, int]],
        offset: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        pipeline: list[dict[str, Any]] = [{"$match": match}]
        if sort_list:
            pipeline.append({"$sort": dict(sort_list)})
        if offset:
            pipeline.append({"$skip": offset})
        pipeline.append({"$limit": limit})
        return pipeline

    async def count(self, spec: ISpecification[Any]) -> int:
        match = self._match(spec)
        try:
            return int(await self._collection().count_documents(match))
        except PyMongoError as e:
            raise self._translate(e) from e

    async def find(
        self,
        spec: ISpecification[Any],
        sort: Sequence[tuple[str, str]],
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        pipeline = self._build_pipeline(
            match=self._match(spec),
            sort_list=self._query_builder.build_sort(sort),
            offset=skip,
            limit=limit,
        )
        try:
            cursor = self._collection().aggregate(pipeline)
            return [doc async for doc in cursor]
        except PyMongoError as e:
            raise self._translate(e) from e

    async def find_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None:
        match = self._match(spec)
        try:
            doc: dict[str, Any] | None = await self._collection().find_one(match)
            return doc
        except PyMongoError as e:
            raise self._translate(e) from e

    async def update_one(
        self, spec: ISpecification[Any], fields: Mapping[str, Any]
    ) -> int:
        match = self._match(spec)
        convert = self._query_builder.convert_value
        update = {"$set": {k: convert(k, v) for k, v in fields.items()}}
        try:
            result = await self._collection().update_one(match, update)
            return int(result.matched_count)
        except PyMongoError as e:
            raise self._translate(e) from e

    async def delete_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None:
        match = self._match(spec)
        try:
            doc: dict[str, Any] | None = await self._collection().find_one_and_delete(
                match
            )
            return doc
        except PyMongoError as e:
            raise self._translate(e) from e

    def _translate(self, exc: PyMongoError) -> Exception:
        if isinstance(exc, _UNAVAILABLE):
            return StoreUnavailableError(
                f"MongoDB unavailable for {self._collection_name}: {exc}"
            )
        return MongoQueryError(f"{self._collection_name}: {exc}")
