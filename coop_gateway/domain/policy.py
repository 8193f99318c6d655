"""Collection policy: which collections the gateway may touch and how large a document may be"""

import json
from typing import Any, Dict

from coop_gateway.config import settings
from coop_gateway.domain.exceptions import PayloadTooLargeError

# Loan, member, deposit and share collections only
ALLOWED_COLLECTIONS = frozenset(
    {
        "loan_applications",
        "loan_products",
        "loan_tracking",
        "loan_documents",
        "loan_payments",
        "deposit_accounts",
        "deposit_transactions",
        "members",
        "share_accounts",
        "share_transactions",
        "dividend_rates",
        "dividend_payments",
    }
)


def is_allowed(collection: str) -> bool:
    """Check collection name against the allow-set"""
    return collection in ALLOWED_COLLECTIONS


def validate_size(document: Dict[str, Any], limit: int | None = None) -> None:
    """
    Reject a document whose compact UTF-8 JSON exceeds `limit` bytes
    (default: settings.max_document_bytes).

    Raises:
        PayloadTooLargeError: When the serialized document is too large
    """
    encoded = json.dumps(document, default=str, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    if len(encoded) > (limit or settings.max_document_bytes):
        raise PayloadTooLargeError("data size exceeds limit")
