"""Data access layer for gateway collections"""

from typing import Any, Dict, List, Optional

import pymongo
from pymongo.client_session import ClientSession
from pymongo.database import Database
from pymongo.results import UpdateResult

MEMBERS = "members"
DEPOSIT_ACCOUNTS = "deposit_accounts"
DEPOSIT_TRANSACTIONS = "deposit_transactions"


class DocumentRepository:
    """Repository for any whitelisted collection, documents kept as plain mappings"""

    def __init__(self, db: Database, collection: str):
        self.collection = db[collection]

    def insert(self, document: Dict[str, Any]) -> Any:
        """Insert a document and return its _id"""
        return self.collection.insert_one(document).inserted_id

    def upsert_by_application_id(self, document: Dict[str, Any]) -> UpdateResult:
        """Merge the document into the one sharing its applicationid, creating it if absent"""
        return self.collection.update_one(
            {"applicationid": document["applicationid"]},
            {"$set": document},
            upsert=True,
        )

    def find(self, filter: Dict[str, Any], limit: int = 0, skip: int = 0) -> List[Dict[str, Any]]:
        """Matching documents, newest createdat first"""
        cursor = self.collection.find(filter).sort("createdat", pymongo.DESCENDING)
        if skip > 0:
            cursor = cursor.skip(skip)
        if limit > 0:
            cursor = cursor.limit(limit)
        return list(cursor)

    def update(self, filter: Dict[str, Any], fields: Dict[str, Any], upsert: bool = False) -> UpdateResult:
        """Set the given fields on the first matching document"""
        return self.collection.update_one(filter, {"$set": fields}, upsert=upsert)

    def delete(self, filter: Dict[str, Any]) -> int:
        """Remove every matching document and return how many were removed"""
        return self.collection.delete_many(filter).deleted_count


class MemberRepository:
    """Read access to member profiles"""

    def __init__(self, db: Database):
        self.collection = db[MEMBERS]

    def get_by_member_id(self, member_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"memberid": member_id})

    def find_duplicate(self, member_id: str | None, application_id: str | None) -> Optional[Dict[str, Any]]:
        """First member sharing either business key; empty keys are not matched"""
        clauses = []
        if member_id:
            clauses.append({"memberid": member_id})
        if application_id:
            clauses.append({"applicationid": application_id})
        if not clauses:
            return None
        return self.collection.find_one({"$or": clauses})


class AccountRepository:
    """Repository for deposit accounts"""

    def __init__(self, db: Database):
        self.collection = db[DEPOSIT_ACCOUNTS]

    def get_by_account_id(self, account_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"accountid": account_id})

    def adjust_balance(self, account_id: str, delta: float, session: ClientSession | None = None) -> int:
        """
        Atomically add `delta` to the account balance.

        Returns:
            Number of accounts matched (0 or 1)
        """
        result = self.collection.update_one(
            {"accountid": account_id},
            {"$inc": {"balance": delta}},
            session=session,
        )
        return result.matched_count


class TransactionRepository:
    """Append-only access to deposit transactions"""

    def __init__(self, db: Database):
        self.collection = db[DEPOSIT_TRANSACTIONS]

    def insert_many(self, transactions: List[Dict[str, Any]], session: ClientSession | None = None) -> List[Any]:
        return self.collection.insert_many(transactions, session=session).inserted_ids
