"""Document store connection management

One DocumentStore is created per process and handed to request handlers
through FastAPI dependencies. The wrapped MongoClient is thread-safe and
keeps its own connection pool.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo.errors import PyMongoError

from coop_gateway.config import settings
from coop_gateway.domain.exceptions import UnavailableError

logger = logging.getLogger(__name__)


class DocumentStore:
    """Lazily connected MongoDB handle with a default database"""

    def __init__(
        self,
        uri: str | None = None,
        database_name: str | None = None,
        client: MongoClient | None = None,
    ):
        self.uri = uri if uri is not None else settings.mongodb_uri
        self.database_name = database_name or settings.mongodb_db
        self._client = client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            raise UnavailableError("MongoDB is not connected")
        return self._client

    def connect(self) -> None:
        """
        Open and verify the connection. No-op when already connected.

        Raises:
            UnavailableError: If no URI is configured or the server does not answer ping
        """
        if self._client is not None:
            return
        if not self.uri:
            raise UnavailableError("MONGODB_URI not set")

        options: Dict[str, Any] = {
            "serverSelectionTimeoutMS": settings.mongodb_server_selection_timeout_ms,
        }
        if settings.mongodb_tls_allow_invalid_certificates:
            options["tlsAllowInvalidCertificates"] = True

        client = MongoClient(self.uri, **options)
        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise UnavailableError("Failed to connect to MongoDB", error=str(e)) from e

        self._client = client
        logger.info("Connected to MongoDB", extra={"database": self.database_name})

    def database(self, name: Optional[str] = None) -> Database:
        """Requested database on the shared client, or the default one"""
        return self.client[name or self.database_name]

    @contextmanager
    def transaction(self) -> Iterator[ClientSession]:
        """
        Multi-document transaction scope.

        Commits when the block exits cleanly and aborts when it raises, so
        none of the writes made with the yielded session become visible.
        """
        with self.client.start_session() as session:
            with session.start_transaction():
                yield session

    def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info("Disconnected from MongoDB")
