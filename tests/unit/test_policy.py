"""Unit tests for collection whitelist and size limit"""

import pytest
from coop_gateway.config import settings
from coop_gateway.domain.exceptions import PayloadTooLargeError
from coop_gateway.domain.policy import ALLOWED_COLLECTIONS, is_allowed, validate_size


@pytest.mark.parametrize("collection", sorted(ALLOWED_COLLECTIONS))
def test_is_allowed_accepts_domain_collections(collection):
    assert is_allowed(collection)


@pytest.mark.parametrize("collection", ["users", "system.users", "notifications", "", "Members", "members "])
def test_is_allowed_rejects_everything_else(collection):
    assert not is_allowed(collection)


def test_validate_size_accepts_small_document():
    validate_size({"memberid": "M001", "note": "x" * 1000})


def test_validate_size_rejects_oversized_document():
    with pytest.raises(PayloadTooLargeError, match="data size exceeds limit"):
        validate_size({"blob": "x" * 200}, limit=100)


def test_validate_size_boundary_is_inclusive():
    document = {"a": "b"}  # serializes to {"a":"b"} -> 9 bytes
    validate_size(document, limit=9)
    with pytest.raises(PayloadTooLargeError):
        validate_size(document, limit=8)


def test_validate_size_counts_utf8_bytes():
    document = {"name": "ก" * 10}  # {"name":"..."} -> 11 + 10 * 3 bytes
    validate_size(document, limit=41)
    with pytest.raises(PayloadTooLargeError):
        validate_size(document, limit=40)


def test_validate_size_accepts_large_thai_document_under_default_limit():
    # 9 MiB of UTF-8 text
    validate_size({"name": "ก" * (3 * 1024 * 1024)})


def test_validate_size_default_limit_is_15_mib():
    with pytest.raises(PayloadTooLargeError):
        validate_size({"blob": "x" * (15 * 1024 * 1024)})


def test_validate_size_default_limit_follows_settings(monkeypatch):
    monkeypatch.setattr(settings, "max_document_bytes", 20)

    with pytest.raises(PayloadTooLargeError):
        validate_size({"blob": "x" * 50})
