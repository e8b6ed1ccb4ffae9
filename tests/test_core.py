"""Database URL handling and the rate-limit key."""
import pytest
from sqlalchemy.pool import StaticPool
from starlette.requests import Request

from storefront.core.config import settings
from storefront.core.database import DEFAULT_DATABASE_URL, database_url, engine_options
from storefront.core.rate_limit import client_address


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", DEFAULT_DATABASE_URL),
        (None, DEFAULT_DATABASE_URL),
        ("postgres://u:p@db/shop", "postgresql+psycopg://u:p@db/shop"),
        ("postgresql://u:p@db/shop", "postgresql+psycopg://u:p@db/shop"),
        ("postgresql+psycopg2://u:p@db/shop", "postgresql+psycopg2://u:p@db/shop"),
        (" sqlite:///./x.db ", "sqlite:///./x.db"),
    ],
)
def test_database_url(raw, expected):
    assert database_url(raw) == expected


def test_engine_options():
    assert engine_options("sqlite:///:memory:")["poolclass"] is StaticPool
    assert "poolclass" not in engine_options("sqlite:///./x.db")
    assert engine_options("postgresql+psycopg://db/shop") == {}


def _request(forwarded: str | None = None, peer: str = "10.0.0.9") -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded is not None else []
    return Request({"type": "http", "method": "POST", "path": "/", "headers": headers, "client": (peer, 4321)})


def test_client_address_uses_first_forwarded_hop():
    assert client_address(_request("203.0.113.7, 10.0.0.1")) == "203.0.113.7"
    assert client_address(_request(" ")) == "10.0.0.9"
    assert client_address(_request()) == "10.0.0.9"


def test_client_address_ignores_forwarded_header_when_untrusted(monkeypatch):
    monkeypatch.setattr(settings, "trust_forwarded_for", False)
    assert client_address(_request("203.0.113.7")) == "10.0.0.9"
