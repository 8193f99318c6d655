"""Domain models - pure Python dataclasses for the fields the rules read and write

Stored documents stay open mappings; these types only describe the values
that business rules and the transfer engine compute or return.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class LoanQuote:
    """Flat-rate repayment figures for a loan application"""

    installment_amount: float
    total_payment: float
    total_interest: float


@dataclass
class CreateResult:
    """Outcome of a gateway create"""

    inserted_id: Optional[Any] = None
    upserted_id: Optional[Any] = None
    application_id: Optional[Any] = None
    installment_amount: Optional[float] = None
    total_payment: Optional[float] = None


@dataclass
class FindResult:
    """Documents matched by a gateway get"""

    documents: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.documents)


@dataclass
class UpdateResult:
    """Outcome of a gateway update"""

    matched_count: int
    modified_count: int
    upserted_id: Optional[Any] = None


@dataclass
class TransferRequest:
    """Internal transfer between two deposit accounts"""

    source_account_id: str
    dest_account_id: str
    amount: float
    description: str = ""


@dataclass
class AccountInfo:
    """One party of a settlement slip"""

    name: str
    account_no_masked: str
    bank_name: str
    bank_code: Optional[str] = None


@dataclass
class SlipInfo:
    """Receipt data consumed by the slip/QR renderer"""

    transaction_ref: str
    transaction_date: datetime
    sender: AccountInfo
    receiver: AccountInfo
    amount: float
    qr_payload: str


@dataclass
class TransferResult:
    """Committed transfer summary returned to the client"""

    transaction_id: str
    slip_info: SlipInfo
