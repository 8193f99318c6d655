"""POST /api/v1/payment/transfer - internal transfer between deposit accounts"""

import time
import logging
from fastapi import APIRouter, Depends, Request

from coop_gateway.api.dependencies import get_request_id, get_transfer_engine
from coop_gateway.api.v1.schemas import SlipInfoSchema, TransferRequestBody, TransferResponse
from coop_gateway.domain.exceptions import DomainException
from coop_gateway.domain.models import TransferRequest
from coop_gateway.infrastructure.observability.logging import log_transfer
from coop_gateway.infrastructure.observability.metrics import outcome_for, record_transfer
from coop_gateway.services.transfer import LedgerTransferEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/transfer", response_model=TransferResponse, response_model_exclude_none=True)
def internal_transfer(
    request_body: TransferRequestBody,
    request: Request,
    engine: LedgerTransferEngine = Depends(get_transfer_engine),
):
    """
    Move money from one deposit account to another.

    Flow:
    1. Validate ids and amount
    2. Load source account and check funds
    3. Load destination account
    4. Debit, credit and write both ledger records in one store transaction
    5. Return transaction id and slip data for receipt rendering
    """
    start_time = time.time()
    request_id = get_request_id(request)
    transfer_request = TransferRequest(
        source_account_id=request_body.source_account_id,
        dest_account_id=request_body.dest_account_id,
        amount=request_body.amount,
        description=request_body.description,
    )

    try:
        result = engine.transfer(transfer_request)
    except Exception as e:
        outcome = outcome_for(e)
        record_transfer(outcome, transfer_request.amount)
        if isinstance(e, DomainException):
            logger.warning(f"Transfer rejected: {e.message}", extra={"request_id": request_id})
        log_transfer(
            request_id,
            transfer_request.source_account_id,
            transfer_request.dest_account_id,
            transfer_request.amount,
            outcome,
            (time.time() - start_time) * 1000,
        )
        raise

    record_transfer("success", transfer_request.amount)
    log_transfer(
        request_id,
        transfer_request.source_account_id,
        transfer_request.dest_account_id,
        transfer_request.amount,
        "success",
        (time.time() - start_time) * 1000,
        transaction_id=result.transaction_id,
    )

    return TransferResponse(
        transaction_id=result.transaction_id,
        slip_info=SlipInfoSchema.model_validate(result.slip_info),
    )
