"""Pytest fixtures for testing"""

import pytest
from contextlib import contextmanager
from typing import Any, Dict, Iterator

import mongomock
from fastapi.testclient import TestClient
from pymongo.database import Database

from coop_gateway.api.main import create_app
from coop_gateway.infrastructure.database.indexes import ensure_indexes
from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.services.gateway import CollectionGateway
from coop_gateway.services.transfer import LedgerTransferEngine

TEST_DATABASE = "coop_test"


class InMemoryStore(DocumentStore):
    """
    DocumentStore over mongomock.

    mongomock has no sessions, so a transaction snapshots the deposit
    collections and restores them if the block raises.
    """

    TRANSACTIONAL_COLLECTIONS = ("deposit_accounts", "deposit_transactions")

    def __init__(self):
        super().__init__(uri="", database_name=TEST_DATABASE, client=mongomock.MongoClient())
        self.transactions_started = 0
        self.transactions_aborted = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.transactions_started += 1
        db = self.database()
        snapshot = {name: list(db[name].find()) for name in self.TRANSACTIONAL_COLLECTIONS}
        try:
            yield None
        except Exception:
            self.transactions_aborted += 1
            for name, documents in snapshot.items():
                db[name].delete_many({})
                if documents:
                    db[name].insert_many(documents)
            raise


@pytest.fixture
def store() -> InMemoryStore:
    """In-memory store with production indexes"""
    store = InMemoryStore()
    ensure_indexes(store.database())
    return store


@pytest.fixture
def db(store: InMemoryStore) -> Database:
    return store.database()


@pytest.fixture
def gateway(store: InMemoryStore) -> CollectionGateway:
    return CollectionGateway(store)


@pytest.fixture
def engine(store: InMemoryStore) -> LedgerTransferEngine:
    return LedgerTransferEngine(store, qr_verify_base_url="https://verify.test")


@pytest.fixture
def client(store: InMemoryStore) -> TestClient:
    """Create FastAPI test client bound to the in-memory store"""
    app = create_app(store=store)
    return TestClient(app)


def make_member(member_id: str, kyc_status: str | None = "verified", **fields: Any) -> Dict[str, Any]:
    member = {"memberid": member_id, "applicationid": f"APP-{member_id}", "role": "member", **fields}
    if kyc_status is not None:
        member["kyc_status"] = kyc_status
    return member


def make_account(account_id: str, member_id: str, balance: float, **fields: Any) -> Dict[str, Any]:
    return {
        "accountid": account_id,
        "accountnumber": f"10{account_id[-1]}4567890{account_id[-1]}",
        "accountname": f"Account {account_id}",
        "memberid": member_id,
        "balance": balance,
        **fields,
    }


@pytest.fixture
def seeded_accounts(db: Database) -> Database:
    """
    Two members with one account each:
    - M001 verified, account ACC1 balance 5000
    - M002 pending KYC, account ACC2 balance 1000
    """
    db["members"].insert_many(
        [
            make_member("M001", kyc_status="verified"),
            make_member("M002", kyc_status="pending"),
        ]
    )
    db["deposit_accounts"].insert_many(
        [
            make_account("ACC1", "M001", 5000.0),
            make_account("ACC2", "M002", 1000.0),
        ]
    )
    return db
