"""Generic CRUD dispatcher over the whitelisted collections"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import pymongo
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from coop_gateway.config import settings
from coop_gateway.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    GatewayTimeoutError,
    StoreOperationError,
    UnavailableError,
    ValidationError,
)
from coop_gateway.domain.models import CreateResult, FindResult, UpdateResult
from coop_gateway.domain.policy import is_allowed, validate_size
from coop_gateway.infrastructure.database.repositories import (
    AccountRepository,
    DocumentRepository,
    MemberRepository,
)
from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.infrastructure.observability.metrics import store_failure_counter
from coop_gateway.services.rules import BusinessRuleInjector

logger = logging.getLogger(__name__)


class CollectionGateway:
    """
    create/get/update/delete against any whitelisted collection.

    Every verb checks, in order: store availability, collection name and
    whitelist, then its own payload. Only create and update run business
    rules and the size limit. Filters are passed to the store verbatim.
    """

    def __init__(
        self,
        store: DocumentStore,
        timeout: float | None = None,
        max_document_bytes: int | None = None,
    ):
        self.store = store
        self.timeout = timeout or settings.crud_timeout_seconds
        self.max_document_bytes = max_document_bytes or settings.max_document_bytes

    def create(
        self,
        collection: str,
        document: Optional[Dict[str, Any]],
        database: str | None = None,
        upsert: bool = False,
    ) -> CreateResult:
        """
        Insert one document after running the create-path business rules.

        With `upsert`, the document is merged into the one sharing its
        applicationid instead, whatever the collection.
        """
        db = self._open(collection, database)
        if not document:
            raise ValidationError("Data field is required")
        validate_size(document, self.max_document_bytes)

        document = dict(document)
        result = CreateResult()
        with self._deadline("Failed to create loan data"):
            rules = BusinessRuleInjector(MemberRepository(db), AccountRepository(db))
            quote = rules.prepare_create(collection, document)

            repo = DocumentRepository(db, collection)
            try:
                if upsert:
                    result.upserted_id = repo.upsert_by_application_id(document).upserted_id
                else:
                    result.inserted_id = repo.insert(document)
            except DuplicateKeyError as e:
                raise ConflictError(_conflict_message(collection), error=str(e)) from e

        if collection == "loan_applications":
            result.application_id = document["applicationid"]
            if quote is not None:
                result.installment_amount = quote.installment_amount
                result.total_payment = quote.total_payment
        return result

    def get(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]],
        database: str | None = None,
        limit: int = 0,
        skip: int = 0,
    ) -> FindResult:
        """Documents matching `filter` (an empty filter matches all), newest first"""
        db = self._open(collection, database)
        if filter is None:
            raise ValidationError("Filter is required")

        with self._deadline("Failed to query documents"):
            documents = DocumentRepository(db, collection).find(filter, limit=limit, skip=skip)
        return FindResult(documents=documents)

    def update(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]],
        document: Optional[Dict[str, Any]],
        database: str | None = None,
        upsert: bool = False,
    ) -> UpdateResult:
        """Merge the given fields into the first document matching `filter`"""
        db = self._open(collection, database)
        if filter is None:
            raise ValidationError("Filter is required")
        if not document:
            raise ValidationError("Data field is required")
        validate_size(document, self.max_document_bytes)

        document = dict(document)
        with self._deadline("Failed to update document"):
            BusinessRuleInjector(MemberRepository(db), AccountRepository(db)).prepare_update(document)
            try:
                result = DocumentRepository(db, collection).update(filter, document, upsert=upsert)
            except DuplicateKeyError as e:
                raise ConflictError(_conflict_message(collection), error=str(e)) from e

        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=result.upserted_id,
        )

    def delete(
        self,
        collection: str,
        filter: Optional[Dict[str, Any]],
        database: str | None = None,
    ) -> int:
        """Remove every document matching `filter`; returns the deleted count"""
        db = self._open(collection, database)
        if filter is None:
            raise ValidationError("Filter is required")

        with self._deadline("Failed to delete document"):
            return DocumentRepository(db, collection).delete(filter)

    def _open(self, collection: str, database: str | None) -> Database:
        if not self.store.is_connected:
            raise UnavailableError("MongoDB is not connected")
        if not collection:
            raise ValidationError("Collection name is required")
        if not is_allowed(collection):
            raise AuthorizationError("Collection not allowed")
        return self.store.database(database)

    @contextmanager
    def _deadline(self, failure_message: str) -> Iterator[None]:
        """Bound the enclosed store calls by the CRUD deadline and translate driver errors"""
        try:
            with pymongo.timeout(self.timeout):
                yield
        except PyMongoError as e:
            if e.timeout:
                store_failure_counter.labels(kind="timeout").inc()
                raise GatewayTimeoutError("Store operation timed out", error=str(e)) from e
            store_failure_counter.labels(kind="error").inc()
            logger.error(f"{failure_message}: {e}")
            raise StoreOperationError(failure_message, error=str(e)) from e


def _conflict_message(collection: str) -> str:
    if collection == "members":
        return "Member with this citizen ID or application ID already exists"
    return "Document with this identifier already exists"
