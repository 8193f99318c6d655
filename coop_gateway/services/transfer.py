"""Ledger transfer engine - atomic balance movement between two deposit accounts"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List

import pymongo
from pymongo.errors import PyMongoError

from coop_gateway.config import settings
from coop_gateway.domain.exceptions import (
    GatewayTimeoutError,
    InsufficientFundsError,
    NotFoundError,
    StoreOperationError,
    TransferFailedError,
    UnavailableError,
    ValidationError,
)
from coop_gateway.domain.models import AccountInfo, SlipInfo, TransferRequest, TransferResult
from coop_gateway.infrastructure.database.repositories import AccountRepository, TransactionRepository
from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.infrastructure.observability.metrics import store_failure_counter
from coop_gateway.utils.date_utils import utc_now
from coop_gateway.utils.identifiers import mask_account_number, new_transfer_ids

logger = logging.getLogger(__name__)


def _balance(account: Dict[str, Any]) -> float:
    value = account.get("balance")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


class LedgerTransferEngine:
    """
    Moves money between two deposit accounts with a paired ledger entry.

    Flow:
    1. Validate input
    2. Load source account
    3. Check funds against the balance read in step 2
    4. Load destination account
    5. In one store transaction: $inc source by -amount, $inc destination by
       +amount, insert the transfer_out and transfer_in records
    6. Return the settlement summary

    The funds check runs outside the transaction and the debit is a relative
    increment, so concurrent transfers draining the same source can still
    push its balance below zero.
    """

    def __init__(
        self,
        store: DocumentStore,
        timeout: float | None = None,
        qr_verify_base_url: str | None = None,
    ):
        self.store = store
        self.timeout = timeout or settings.transfer_timeout_seconds
        self.qr_verify_base_url = qr_verify_base_url or settings.qr_verify_base_url

    def transfer(self, request: TransferRequest) -> TransferResult:
        """
        Execute one internal transfer.

        Raises:
            ValidationError: Missing account ids, non-positive amount, or same account twice
            UnavailableError: Store handle not initialized
            NotFoundError: Source or destination account does not exist
            InsufficientFundsError: Source balance lower than amount
            TransferFailedError: Unit of work aborted; nothing was applied
            GatewayTimeoutError: Deadline expired before the unit of work started
        """
        self._validate(request)
        if not self.store.is_connected:
            raise UnavailableError("Database not connected")

        db = self.store.database()
        accounts = AccountRepository(db)
        transactions = TransactionRepository(db)

        try:
            with pymongo.timeout(self.timeout):
                source = accounts.get_by_account_id(request.source_account_id)
                if source is None:
                    raise NotFoundError("Source account not found")

                source_balance = _balance(source)
                if source_balance < request.amount:
                    raise InsufficientFundsError("Insufficient balance")

                dest = accounts.get_by_account_id(request.dest_account_id)
                if dest is None:
                    raise NotFoundError("Destination account not found")

                now = utc_now()
                out_id, in_id = new_transfer_ids()
                legs = [
                    {
                        "transactionid": out_id,
                        "accountid": request.source_account_id,
                        "type": "transfer_out",
                        "amount": request.amount,
                        "balanceafter": source_balance - request.amount,
                        "datetime": now,
                        "description": f"{request.description} (transfer to {dest.get('accountname', '')})",
                        "referenceno": request.dest_account_id,
                        "status": "completed",
                    },
                    {
                        "transactionid": in_id,
                        "accountid": request.dest_account_id,
                        "type": "transfer_in",
                        "amount": request.amount,
                        "balanceafter": _balance(dest) + request.amount,
                        "datetime": now,
                        "description": f"{request.description} (received from {source.get('accountname', '')})",
                        "referenceno": request.source_account_id,
                        "status": "completed",
                    },
                ]
                self._commit(accounts, transactions, request, legs)
        except PyMongoError as e:
            if e.timeout:
                store_failure_counter.labels(kind="timeout").inc()
                raise GatewayTimeoutError("Transfer timed out", error=str(e)) from e
            store_failure_counter.labels(kind="error").inc()
            raise StoreOperationError("Failed to load accounts", error=str(e)) from e

        logger.info(
            "Transfer committed",
            extra={"transaction_id": out_id, "amount": request.amount},
        )
        return TransferResult(
            transaction_id=out_id,
            slip_info=self._build_slip(out_id, now, source, dest, request.amount),
        )

    def _validate(self, request: TransferRequest) -> None:
        if (
            not request.source_account_id
            or not request.dest_account_id
            or not math.isfinite(request.amount)
            or request.amount <= 0
        ):
            raise ValidationError("source_account_id, dest_account_id and valid amount are required")
        if request.source_account_id == request.dest_account_id:
            raise ValidationError("source and destination accounts must be different")

    def _commit(
        self,
        accounts: AccountRepository,
        transactions: TransactionRepository,
        request: TransferRequest,
        legs: List[Dict[str, Any]],
    ) -> None:
        """Apply debit, credit and both ledger records atomically, or none of them"""
        try:
            with self.store.transaction() as session:
                if accounts.adjust_balance(request.source_account_id, -request.amount, session=session) != 1:
                    raise TransferFailedError("Transfer failed", error="source account disappeared")
                if accounts.adjust_balance(request.dest_account_id, request.amount, session=session) != 1:
                    raise TransferFailedError("Transfer failed", error="destination account disappeared")
                transactions.insert_many(legs, session=session)
        except PyMongoError as e:
            logger.error(f"Transfer aborted: {e}")
            raise TransferFailedError("Transfer failed", error=str(e)) from e

    def _build_slip(
        self,
        transaction_ref: str,
        transaction_date: datetime,
        source: Dict[str, Any],
        dest: Dict[str, Any],
        amount: float,
    ) -> SlipInfo:
        return SlipInfo(
            transaction_ref=transaction_ref,
            transaction_date=transaction_date,
            sender=AccountInfo(
                name=str(source.get("accountname", "")),
                account_no_masked=mask_account_number(source.get("accountnumber")),
                bank_name=settings.bank_name,
            ),
            receiver=AccountInfo(
                name=str(dest.get("accountname", "")),
                account_no_masked=mask_account_number(dest.get("accountnumber")),
                bank_name=settings.bank_name,
                bank_code=settings.bank_code,
            ),
            amount=amount,
            qr_payload=f"{self.qr_verify_base_url}/verify?ref={transaction_ref}",
        )
