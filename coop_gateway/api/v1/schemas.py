"""Pydantic schemas for API request/response validation

Gateway payloads are open mappings; field presence rules (collection, data,
filter) are enforced by the gateway itself so they share its error codes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GatewayCreateRequest(BaseModel):
    """Request body for POST /api/v1/loan/create"""

    database: str = ""
    collection: str = ""
    data: Optional[Dict[str, Any]] = None
    upsert: bool = False


class GatewayGetRequest(BaseModel):
    """Request body for POST /api/v1/loan/get"""

    database: str = ""
    collection: str = ""
    filter: Optional[Dict[str, Any]] = None
    limit: int = 0
    skip: int = 0


class GatewayUpdateRequest(BaseModel):
    """Request body for POST /api/v1/loan/update"""

    database: str = ""
    collection: str = ""
    filter: Optional[Dict[str, Any]] = None
    data: Optional[Dict[str, Any]] = None
    upsert: bool = False


class GatewayDeleteRequest(BaseModel):
    """Request body for POST /api/v1/loan/delete"""

    database: str = ""
    collection: str = ""
    filter: Optional[Dict[str, Any]] = None


class CreateResponse(BaseModel):
    """Response for POST /api/v1/loan/create"""

    status: str = "success"
    code: int = 201
    message: str = "Loan data created successfully"
    inserted_id: Optional[Any] = None
    upserted_id: Optional[Any] = None
    application_id: Optional[Any] = None
    installment_amount: Optional[float] = None
    total_payment: Optional[float] = None


class GetResponse(BaseModel):
    """Response for POST /api/v1/loan/get"""

    status: str = "success"
    code: int = 200
    count: int
    data: List[Dict[str, Any]]


class UpdateResponse(BaseModel):
    """Response for POST /api/v1/loan/update"""

    status: str = "success"
    code: int = 200
    matched_count: int
    modified_count: int
    upserted_id: Optional[Any] = None


class DeleteResponse(BaseModel):
    """Response for POST /api/v1/loan/delete"""

    status: str = "success"
    code: int = 200
    deleted_count: int


class TransferRequestBody(BaseModel):
    """Request body for POST /api/v1/payment/transfer"""

    source_account_id: str = ""
    dest_account_id: str = ""
    amount: float = 0
    description: str = ""


class AccountInfoSchema(BaseModel):
    """One party on the settlement slip"""

    model_config = ConfigDict(from_attributes=True)

    name: str
    account_no_masked: str
    bank_name: str
    bank_code: Optional[str] = None


class SlipInfoSchema(BaseModel):
    """Data for slip and QR rendering"""

    model_config = ConfigDict(from_attributes=True)

    transaction_ref: str
    transaction_date: datetime
    sender: AccountInfoSchema
    receiver: AccountInfoSchema
    amount: float
    qr_payload: str


class TransferResponse(BaseModel):
    """Response for POST /api/v1/payment/transfer"""

    status: str = "success"
    message: str = "Transfer completed successfully"
    transaction_id: str
    slip_info: SlipInfoSchema


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint"""

    status: str = "error"
    code: int
    message: str
    error: Optional[str] = Field(default=None, description="Underlying error detail, when available")
