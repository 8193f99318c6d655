"""Structured JSON logging for production observability"""

import logging
import sys
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from coop_gateway.config import settings
from coop_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utc_now().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)


def log_gateway_operation(
    request_id: str,
    operation: str,
    collection: str,
    outcome: str,
    duration_ms: float,
) -> None:
    """Log one structured record per gateway call"""
    logger.info(
        "Gateway operation completed",
        extra={
            "request_id": request_id,
            "step": f"gateway_{operation}",
            "collection": collection,
            "outcome": outcome,
            "duration_ms": duration_ms,
        },
    )


def log_transfer(
    request_id: str,
    source_account_id: str,
    dest_account_id: str,
    amount: float,
    outcome: str,
    duration_ms: float,
    transaction_id: str | None = None,
) -> None:
    """Log structured transfer outcome for audit"""
    logger.info(
        "Transfer completed",
        extra={
            "request_id": request_id,
            "step": "transfer_complete",
            "source_account_id": source_account_id,
            "dest_account_id": dest_account_id,
            "amount": amount,
            "outcome": outcome,
            "transaction_id": transaction_id,
            "duration_ms": duration_ms,
        },
    )
