"""Unit tests for flat-rate loan calculation"""

import pytest
from coop_gateway.domain.loan_math import apply_loan_quote, calculate_installment, calculate_loan_quote


def test_calculate_loan_quote_reference_example():
    """12000 at 12% over 12 months"""
    quote = calculate_loan_quote(12000, 12, 12)

    assert quote.total_interest == pytest.approx(1440.00)
    assert quote.total_payment == pytest.approx(13440.00)
    assert quote.installment_amount == pytest.approx(1120.00)


@pytest.mark.parametrize(
    "amount, rate, term",
    [
        (12000, 12, 12),
        (50000, 6.5, 36),
        (1000, 0, 7),
        (99999.99, 18.25, 1),
        (250000, 4.75, 120),
    ],
)
def test_calculate_loan_quote_invariants(amount, rate, term):
    """installment x term equals total payment, total payment minus principal equals interest"""
    quote = calculate_loan_quote(amount, rate, term)

    assert quote.installment_amount * term == pytest.approx(quote.total_payment)
    assert quote.total_payment - amount == pytest.approx(quote.total_interest)
    assert quote.total_interest == pytest.approx(amount * (rate / 100) * (term / 12))


def test_calculate_installment_zero_rate_splits_principal():
    assert calculate_installment(1200, 0, 12) == pytest.approx(100)


def test_apply_loan_quote_injects_fields():
    document = {"requestamount": 12000.0, "interestrate": 12.0, "requestterm": 12.0}

    quote = apply_loan_quote(document)

    assert quote is not None
    assert document["installmentamount"] == pytest.approx(1120.0)
    assert document["totalpayment"] == pytest.approx(13440.0)
    assert document["totalinterest"] == pytest.approx(1440.0)


def test_apply_loan_quote_accepts_integers():
    document = {"requestamount": 12000, "interestrate": 12, "requestterm": 12}
    assert apply_loan_quote(document) is not None
    assert document["installmentamount"] == pytest.approx(1120.0)


def test_apply_loan_quote_truncates_fractional_term():
    document = {"requestamount": 12000, "interestrate": 12, "requestterm": 12.9}
    quote = apply_loan_quote(document)
    assert quote.installment_amount == pytest.approx(1120.0)


@pytest.mark.parametrize(
    "document",
    [
        {"interestrate": 12, "requestterm": 12},
        {"requestamount": 12000, "requestterm": 12},
        {"requestamount": 12000, "interestrate": 12},
        {"requestamount": "12000", "interestrate": 12, "requestterm": 12},
        {"requestamount": 12000, "interestrate": None, "requestterm": 12},
        {"requestamount": 12000, "interestrate": 12, "requestterm": True},
        {"requestamount": 12000, "interestrate": 12, "requestterm": 0},
        {"requestamount": 12000, "interestrate": 12, "requestterm": 0.5},
        {"requestamount": 12000, "interestrate": 12, "requestterm": float("inf")},
        {"requestamount": 12000, "interestrate": 12, "requestterm": float("nan")},
        {"requestamount": float("inf"), "interestrate": 12, "requestterm": 12},
        {"requestamount": 12000, "interestrate": float("-inf"), "requestterm": 12},
        {"requestamount": 12000, "interestrate": 12, "requestterm": 10**400},
    ],
)
def test_apply_loan_quote_skips_incomplete_terms(document):
    """Missing, non-numeric or non-finite inputs leave the document untouched"""
    original_keys = set(document)

    assert apply_loan_quote(document) is None
    assert set(document) == original_keys
