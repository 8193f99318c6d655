"""Index definitions for the loan/deposit collections

The unique indexes here are the authoritative guard for business keys; the
gateway's duplicate-member lookup is only an early rejection in front of them.
"""

import logging
from typing import List, NamedTuple, Sequence, Tuple

import pymongo
from pymongo.database import Database

from coop_gateway.config import settings

logger = logging.getLogger(__name__)


class IndexSpec(NamedTuple):
    collection: str
    keys: Sequence[Tuple[str, int]]
    unique: bool = False


ASC = pymongo.ASCENDING
DESC = pymongo.DESCENDING

INDEXES: List[IndexSpec] = [
    # loan_applications
    IndexSpec("loan_applications", [("memberid", ASC), ("email", ASC)]),
    IndexSpec("loan_applications", [("status", ASC)]),
    IndexSpec("loan_applications", [("requestdate", DESC)]),
    IndexSpec("loan_applications", [("applicationid", ASC)], unique=True),
    IndexSpec("loan_applications", [("productid", ASC)]),
    IndexSpec("loan_applications", [("applicantinfo.mobile", ASC)]),
    # loan_products
    IndexSpec("loan_products", [("productid", ASC)], unique=True),
    IndexSpec("loan_products", [("maxamount", ASC)]),
    IndexSpec("loan_products", [("interestrate", ASC)]),
    # members
    IndexSpec("members", [("memberid", ASC)], unique=True),
    IndexSpec("members", [("applicationid", ASC)], unique=True),
    IndexSpec("members", [("mobile", ASC)]),
    IndexSpec("members", [("createdat", DESC)]),
    # deposit_accounts
    IndexSpec("deposit_accounts", [("accountid", ASC)], unique=True),
    IndexSpec("deposit_accounts", [("accountnumber", ASC)], unique=True),
    IndexSpec("deposit_accounts", [("memberid", ASC)]),
    # deposit_transactions
    IndexSpec("deposit_transactions", [("transactionid", ASC)], unique=True),
    IndexSpec("deposit_transactions", [("accountid", ASC)]),
    IndexSpec("deposit_transactions", [("status", ASC)]),
    IndexSpec("deposit_transactions", [("datetime", DESC)]),
]


def ensure_indexes(db: Database, timeout: float | None = None) -> None:
    """
    Create every index in INDEXES (existing identical indexes are left alone).

    Raises:
        PyMongoError: If the store rejects an index or the deadline expires
    """
    with pymongo.timeout(timeout or settings.index_timeout_seconds):
        for spec in INDEXES:
            db[spec.collection].create_index(list(spec.keys), unique=spec.unique)

    logger.info("Indexes ensured", extra={"database": db.name, "index_count": len(INDEXES)})
