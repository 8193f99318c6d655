"""Flat-rate installment calculation for loan applications"""

import math
from typing import Any, Dict, Optional

from coop_gateway.domain.models import LoanQuote


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def calculate_installment(amount: float, interest_rate: float, term: int) -> float:
    """
    Monthly installment under flat-rate interest.

    Interest is charged once on the full principal for the whole term:
        total_interest = amount * (rate / 100) * (term / 12)
        installment    = (amount + total_interest) / term

    Example:
        12000 at 12% over 12 months -> 1440 interest, 1120.00 per month
    """
    total_interest = amount * (interest_rate / 100) * (term / 12)
    total_payment = amount + total_interest
    return total_payment / term


def calculate_loan_quote(amount: float, interest_rate: float, term: int) -> LoanQuote:
    """Derive installment, total payment and total interest from loan terms"""
    installment = calculate_installment(amount, interest_rate, term)
    total_payment = installment * term
    return LoanQuote(
        installment_amount=installment,
        total_payment=total_payment,
        total_interest=total_payment - amount,
    )


def apply_loan_quote(document: Dict[str, Any]) -> Optional[LoanQuote]:
    """
    Inject installmentamount, totalpayment and totalinterest into a loan application.

    Leaves the document untouched and returns None when requestamount,
    interestrate or requestterm is missing, not numeric or not finite, or when the term
    is shorter than one month.
    """
    amount = _as_number(document.get("requestamount"))
    rate = _as_number(document.get("interestrate"))
    raw_term = _as_number(document.get("requestterm"))
    if amount is None or rate is None or raw_term is None:
        return None

    term = int(raw_term)
    if term <= 0:
        return None

    quote = calculate_loan_quote(amount, rate, term)
    document["installmentamount"] = quote.installment_amount
    document["totalpayment"] = quote.total_payment
    document["totalinterest"] = quote.total_interest
    return quote
