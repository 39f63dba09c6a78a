"""MongoConnectionManager — the Motor client shared by every record store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import ConfigurationError, PyMongoError

from .exceptions import MongoConnectionError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

logger = logging.getLogger("flightsafe_query.mongo")


class MongoConnectionManager:
    """Own one lazily created Motor client.

    Motor connects in the background, so an unreachable server surfaces on
    the first query (as :class:`StoreUnavailableError` from the store), not
    when the client is built.

    Args:
        url: MongoDB connection string.
        database: Database used by stores that do not name their own.
        timeout_ms: Server selection and connect timeout.
        app_name: Reported to the server on every connection.
        client_options: Passed through to ``AsyncIOMotorClient``.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        timeout_ms: int = 5000,
        app_name: str = "flightsafe-query",
        **client_options: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._client_options = {
            "serverSelectionTimeoutMS": timeout_ms,
            "connectTimeoutMS": timeout_ms,
            "appname": app_name,
            **client_options,
        }
        self._client: AsyncIOMotorClient[Any] | None = None

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        if self._client is None:
            try:
                self._client = AsyncIOMotorClient(self._url, **self._client_options)
            except (ConfigurationError, TypeError, ValueError) as e:
                raise MongoConnectionError(f"Invalid MongoDB settings: {e}") from e
            logger.info("Created MongoDB client (default database %r)", self._database)
        return self._client

    def collection(
        self, name: str, database: str | None = None
    ) -> AsyncIOMotorCollection[Any]:
        """Return *name* in *database*, or in the configured default."""
        database_name = database or self._database
        if not database_name:
            raise MongoConnectionError(f"No database configured for {name!r}")
        return self.client.get_database(database_name).get_collection(name)

    async def health_check(self) -> bool:
        """Ping the server; never creates a client."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB health check failed: %s", e)
            return False
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
