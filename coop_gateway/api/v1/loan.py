"""POST /api/v1/loan/{create,get,update,delete} - generic collection gateway endpoints"""

import time
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from bson import ObjectId
from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder

from coop_gateway.api.dependencies import get_gateway, get_request_id
from coop_gateway.api.v1.schemas import (
    CreateResponse,
    DeleteResponse,
    GatewayCreateRequest,
    GatewayDeleteRequest,
    GatewayGetRequest,
    GatewayUpdateRequest,
    GetResponse,
    UpdateResponse,
)
from coop_gateway.domain.exceptions import DomainException
from coop_gateway.infrastructure.observability.logging import log_gateway_operation
from coop_gateway.infrastructure.observability.metrics import outcome_for, record_gateway_operation
from coop_gateway.services.gateway import CollectionGateway

logger = logging.getLogger(__name__)
router = APIRouter()


def to_jsonable(value: Any) -> Any:
    """Render store values (ObjectId, datetime) as JSON-safe data"""
    return jsonable_encoder(value, custom_encoder={ObjectId: str})


@contextmanager
def observed(operation: str, collection: str, request_id: str) -> Iterator[None]:
    """Record metrics and one structured log line for a gateway call"""
    start_time = time.time()
    error = None
    try:
        yield
    except Exception as e:
        error = e
        if isinstance(e, DomainException):
            logger.warning(f"Gateway {operation} rejected: {e.message}", extra={"request_id": request_id})
        raise
    finally:
        outcome = outcome_for(error)
        duration_ms = (time.time() - start_time) * 1000
        record_gateway_operation(operation, collection, outcome)
        log_gateway_operation(request_id, operation, collection, outcome, duration_ms)


@router.post(
    "/create",
    status_code=201,
    response_model=CreateResponse,
    response_model_exclude_none=True,
)
def create_document(
    request_body: GatewayCreateRequest,
    request: Request,
    gateway: CollectionGateway = Depends(get_gateway),
):
    """
    Insert (or upsert by applicationid) one document.

    Loan applications come back with their computed installment and total payment.
    """
    with observed("create", request_body.collection, get_request_id(request)):
        result = gateway.create(
            request_body.collection,
            request_body.data,
            database=request_body.database,
            upsert=request_body.upsert,
        )

    return CreateResponse(
        inserted_id=to_jsonable(result.inserted_id),
        upserted_id=to_jsonable(result.upserted_id),
        application_id=to_jsonable(result.application_id),
        installment_amount=result.installment_amount,
        total_payment=result.total_payment,
    )


@router.post("/get", response_model=GetResponse)
def get_documents(
    request_body: GatewayGetRequest,
    request: Request,
    gateway: CollectionGateway = Depends(get_gateway),
):
    """Query documents, newest createdat first"""
    with observed("get", request_body.collection, get_request_id(request)):
        result = gateway.get(
            request_body.collection,
            request_body.filter,
            database=request_body.database,
            limit=request_body.limit,
            skip=request_body.skip,
        )

    return GetResponse(count=result.count, data=to_jsonable(result.documents))


@router.post("/update", response_model=UpdateResponse)
def update_document(
    request_body: GatewayUpdateRequest,
    request: Request,
    gateway: CollectionGateway = Depends(get_gateway),
):
    """Merge fields into the first document matching the filter"""
    with observed("update", request_body.collection, get_request_id(request)):
        result = gateway.update(
            request_body.collection,
            request_body.filter,
            request_body.data,
            database=request_body.database,
            upsert=request_body.upsert,
        )

    return UpdateResponse(
        matched_count=result.matched_count,
        modified_count=result.modified_count,
        upserted_id=to_jsonable(result.upserted_id),
    )


@router.post("/delete", response_model=DeleteResponse)
def delete_documents(
    request_body: GatewayDeleteRequest,
    request: Request,
    gateway: CollectionGateway = Depends(get_gateway),
):
    """Delete every document matching the filter"""
    with observed("delete", request_body.collection, get_request_id(request)):
        deleted_count = gateway.delete(
            request_body.collection,
            request_body.filter,
            database=request_body.database,
        )

    return DeleteResponse(deleted_count=deleted_count)
