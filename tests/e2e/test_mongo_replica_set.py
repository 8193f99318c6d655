"""
End-to-end tests against a real MongoDB replica set.

Run with: MONGODB_URI=mongodb://localhost:27017/?replicaSet=rs0 pytest -m integration
"""

import os
import uuid

import pytest
from unittest.mock import patch

from pymongo.errors import OperationFailure

from coop_gateway.domain.exceptions import ConflictError, TransferFailedError
from coop_gateway.domain.models import TransferRequest
from coop_gateway.infrastructure.database.indexes import ensure_indexes
from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.services.gateway import CollectionGateway
from coop_gateway.services.transfer import LedgerTransferEngine

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.environ.get("MONGODB_URI"), reason="MONGODB_URI not set"),
]


@pytest.fixture
def live_store():
    database_name = f"coop_e2e_{uuid.uuid4().hex[:8]}"
    store = DocumentStore(uri=os.environ.get("MONGODB_URI"), database_name=database_name)
    store.connect()
    ensure_indexes(store.database())
    yield store
    store.client.drop_database(database_name)
    store.close()


@pytest.fixture
def live_accounts(live_store):
    db = live_store.database()
    db["members"].insert_one({"memberid": "M001", "applicationid": "APP-M001", "kyc_status": "verified"})
    db["deposit_accounts"].insert_many(
        [
            {"accountid": "ACC1", "accountnumber": "1014567890", "accountname": "Alice", "memberid": "M001", "balance": 1000.0},
            {"accountid": "ACC2", "accountnumber": "1024567890", "accountname": "Bob", "memberid": "M001", "balance": 0.0},
        ]
    )
    return db


def balances(db):
    return {a["accountid"]: a["balance"] for a in db["deposit_accounts"].find()}


def test_transfer_commits_both_legs(live_store, live_accounts):
    engine = LedgerTransferEngine(live_store)

    result = engine.transfer(TransferRequest("ACC1", "ACC2", 250.0, "e2e"))

    assert balances(live_accounts) == {"ACC1": 750.0, "ACC2": 250.0}
    assert live_accounts["deposit_transactions"].count_documents({}) == 2
    assert live_accounts["deposit_transactions"].find_one({"transactionid": result.transaction_id})


def test_transaction_abort_discards_balance_changes(live_store, live_accounts):
    engine = LedgerTransferEngine(live_store)

    with patch(
        "coop_gateway.services.transfer.TransactionRepository.insert_many",
        side_effect=OperationFailure("forced failure"),
    ):
        with pytest.raises(TransferFailedError):
            engine.transfer(TransferRequest("ACC1", "ACC2", 250.0))

    assert balances(live_accounts) == {"ACC1": 1000.0, "ACC2": 0.0}
    assert live_accounts["deposit_transactions"].count_documents({}) == 0


def test_unique_index_rejects_duplicate_member(live_store):
    gateway = CollectionGateway(live_store)
    gateway.create("members", {"memberid": "M900"})

    with patch("coop_gateway.services.rules.MemberRepository.find_duplicate", return_value=None):
        with pytest.raises(ConflictError):
            gateway.create("members", {"memberid": "M900"})
