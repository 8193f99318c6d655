"""Identifier generation and account-number masking"""

import threading
import time
import uuid
from typing import Any, Tuple

_stamp_lock = threading.Lock()
_last_stamp = 0


def new_application_id() -> str:
    """Random application identifier"""
    return str(uuid.uuid4())


def next_stamp() -> int:
    """
    Nanosecond wall-clock reading that strictly increases within the process.

    Two calls landing on the same clock tick get consecutive values, so ids
    derived from the stamp never collide inside one process.
    """
    global _last_stamp
    with _stamp_lock:
        stamp = max(time.time_ns(), _last_stamp + 1)
        _last_stamp = stamp
    return stamp


def new_transaction_id() -> str:
    """Identifier for a standalone deposit transaction"""
    return f"TXN-{next_stamp()}"


def new_transfer_ids() -> Tuple[str, str]:
    """Paired (outgoing, incoming) identifiers for the two legs of a transfer"""
    stamp = next_stamp()
    return f"TXN-OUT-{stamp}", f"TXN-IN-{stamp}"


def mask_account_number(account_number: Any) -> str:
    """
    Render an account number as first3-xxx-last4.

    Numbers shorter than 7 characters are returned unmasked.
    """
    if account_number is None:
        return ""
    value = str(account_number)
    if len(value) < 7:
        return value
    return f"{value[:3]}-xxx-{value[-4:]}"
