"""Business rules applied to documents before the gateway persists them"""

import logging
from typing import Any, Dict, Optional

from coop_gateway.domain.exceptions import AuthorizationError, ConflictError
from coop_gateway.domain.loan_math import apply_loan_quote
from coop_gateway.domain.models import LoanQuote
from coop_gateway.infrastructure.database.repositories import AccountRepository, MemberRepository
from coop_gateway.infrastructure.observability.metrics import rule_rejection_counter
from coop_gateway.utils.date_utils import utc_now
from coop_gateway.utils.identifiers import new_application_id, new_transaction_id

logger = logging.getLogger(__name__)

# Member-initiated money movements
KYC_GATED_TYPES = frozenset({"withdrawal", "transfer_out", "payment", "pay"})


def requires_kyc(transaction: Dict[str, Any]) -> bool:
    """
    Whether a deposit transaction needs a verified owner.

    Pending deposits are member-initiated and gated; completed deposits
    posted by an officer are not.
    """
    tx_type = transaction.get("type")
    if tx_type in KYC_GATED_TYPES:
        return True
    return tx_type == "deposit" and transaction.get("status") == "pending"


def apply_create_defaults(document: Dict[str, Any]) -> None:
    """Fill applicationid, createdat and updatedat when absent or null"""
    if document.get("applicationid") is None:
        document["applicationid"] = new_application_id()
    now = utc_now()
    if document.get("createdat") is None:
        document["createdat"] = now
    if document.get("updatedat") is None:
        document["updatedat"] = now


class BusinessRuleInjector:
    """
    Validates and enriches incoming documents for the create and update paths.

    Lookups run outside any transaction, so the KYC gate and duplicate check
    are advisory: concurrent creates can both pass the duplicate check, and
    the unique indexes on members decide the winner.
    """

    def __init__(self, members: MemberRepository, accounts: AccountRepository):
        self.members = members
        self.accounts = accounts

    def prepare_create(self, collection: str, document: Dict[str, Any]) -> Optional[LoanQuote]:
        """
        Run the create-path rules for `collection`, mutating `document` in place.

        Returns:
            The computed LoanQuote for loan applications with complete terms, else None

        Raises:
            AuthorizationError: KYC gate rejected a deposit transaction
            ConflictError: A member with the same memberid or applicationid exists
        """
        if collection == "deposit_transactions":
            self.check_transaction_kyc(document)
        if collection == "members":
            self.check_duplicate_member(document)

        apply_create_defaults(document)

        if collection == "deposit_transactions" and document.get("transactionid") is None:
            document["transactionid"] = new_transaction_id()
        if collection == "loan_applications":
            return apply_loan_quote(document)
        return None

    def prepare_update(self, document: Dict[str, Any]) -> None:
        document["updatedat"] = utc_now()

    def check_transaction_kyc(self, transaction: Dict[str, Any]) -> None:
        account_id = transaction.get("accountid")
        if not account_id or not requires_kyc(transaction):
            return

        account = self.accounts.get_by_account_id(account_id)
        if account is None:
            self._reject_kyc("account not found", account_id)

        member_id = account.get("memberid")
        if not member_id:
            self._reject_kyc("member not found for this account", account_id)

        member = self.members.get_by_member_id(member_id)
        if member is None:
            self._reject_kyc("member profile not found", account_id)

        if member.get("kyc_status") != "verified":
            self._reject_kyc("KYC verification required for this transaction", account_id)

    def check_duplicate_member(self, member: Dict[str, Any]) -> None:
        existing = self.members.find_duplicate(member.get("memberid"), member.get("applicationid"))
        if existing is not None:
            rule_rejection_counter.labels(rule="duplicate_member").inc()
            raise ConflictError("Member with this citizen ID or application ID already exists")

    def _reject_kyc(self, reason: str, account_id: str) -> None:
        rule_rejection_counter.labels(rule="kyc").inc()
        logger.info("KYC gate rejected transaction", extra={"account_id": account_id, "reason": reason})
        raise AuthorizationError(reason)
