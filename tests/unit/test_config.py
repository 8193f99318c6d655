"""Unit tests for environment-driven settings"""

import pytest
from coop_gateway.config import Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://app.coop.test", ["https://app.coop.test"]),
        ("https://app.coop.test, https://admin.coop.test", ["https://app.coop.test", "https://admin.coop.test"]),
        ("", ["*"]),
    ],
)
def test_cors_origins_read_as_plain_string(monkeypatch, raw, expected):
    monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings(_env_file=None).cors_origins == expected


def test_cors_origins_default_allows_any(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert Settings(_env_file=None).cors_origins == ["*"]
