"""Prometheus metrics for gateway traffic, rule rejections and transfers"""

from prometheus_client import Counter, Histogram

from coop_gateway.domain.exceptions import DomainException
from coop_gateway.domain.policy import is_allowed

# Gateway metrics
gateway_operation_counter = Counter(
    "coop_gateway_operations_total",
    "Generic CRUD operations handled by the gateway",
    ["operation", "collection", "outcome"],  # outcome: success | rejected | failed
)

rule_rejection_counter = Counter(
    "coop_rule_rejections_total",
    "Documents rejected by business rules",
    ["rule"],  # kyc | duplicate_member
)

# Store metrics
store_failure_counter = Counter(
    "coop_store_failures_total",
    "Document store operations that failed or timed out",
    ["kind"],  # timeout | error
)

# Transfer metrics
transfer_counter = Counter(
    "coop_transfer_total",
    "Internal transfers attempted",
    ["outcome"],
)

transfer_amount_histogram = Histogram(
    "coop_transfer_amount",
    "Amount moved by committed transfers",
    buckets=[100, 500, 1_000, 5_000, 10_000, 50_000, 100_000, 500_000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def outcome_for(error: Exception | None) -> str:
    """Classify a request result: client errors are rejections, everything else a failure"""
    if error is None:
        return "success"
    if isinstance(error, DomainException) and error.status_code < 500:
        return "rejected"
    return "failed"


def record_gateway_operation(operation: str, collection: str, outcome: str) -> None:
    """Count a gateway call; unknown collection names share one label to bound cardinality"""
    label = collection if is_allowed(collection) else "other"
    gateway_operation_counter.labels(operation=operation, collection=label, outcome=outcome).inc()


def record_transfer(outcome: str, amount: float) -> None:
    """Record transfer outcome and, for committed transfers, the amount moved"""
    transfer_counter.labels(outcome=outcome).inc()
    if outcome == "success":
        transfer_amount_histogram.observe(amount)
