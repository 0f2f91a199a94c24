"""Unit tests for client construction, lifecycle and settings."""

from __future__ import annotations

import httpx
import pytest
import structlog
from pydantic import ValidationError

from moov.client import DEFAULT_DOMAIN, MoovClient
from moov.config import MoovSettings, configure_logging, get_settings
from moov.exceptions import ClientRequestError, ConfigurationError


async def test_ping_succeeds_on_completed_response(moov_factory) -> None:
    """Ping only needs a completed status."""
    client, stub = moov_factory(lambda request: httpx.Response(204))

    await client.ping()

    assert stub.api_requests[0].url.path == "/ping"


async def test_ping_raises_on_client_error(moov_factory) -> None:
    """A rejected bearer token surfaces as a client request error."""
    client, _ = moov_factory(lambda request: httpx.Response(401, json={"error": "unauthorized"}))

    with pytest.raises(ClientRequestError) as exc_info:
        await client.ping()

    assert exc_info.value.status_code == 401


async def test_revoke_token_forgets_cached_token(moov_factory) -> None:
    """After revocation the next call acquires a new token."""
    client, stub = moov_factory(lambda request: httpx.Response(200))

    await client.ping()
    await client.revoke_token()
    await client.ping()

    assert len(stub.token_requests) == 2
    assert [request.url.path for request in stub.api_requests] == [
        "/ping",
        "/oauth2/revoke",
        "/ping",
    ]


async def test_injected_http_client_is_not_closed() -> None:
    """The client only closes transports it created."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    async with httpx.AsyncClient(transport=transport) as http_client:
        async with MoovClient("pub", "sec", http_client=http_client):
            pass
        assert http_client.is_closed is False


async def test_owned_http_client_is_closed() -> None:
    """Exiting the context closes the internally created transport."""
    client = MoovClient("pub", "sec")
    async with client:
        pass

    assert client._client.is_closed is True


def test_default_domain_is_production() -> None:
    """Without a domain the production API is used."""
    client = MoovClient("pub", "sec")

    assert client.credentials.domain == DEFAULT_DOMAIN
    assert client.credentials.base_url == "https://api.moov.io"


def test_blank_domain_is_a_configuration_error() -> None:
    """A blank domain cannot be turned into a URL."""
    with pytest.raises(ConfigurationError):
        MoovClient("pub", "sec", domain=" ")


def test_settings_load_from_environment(monkeypatch) -> None:
    """MOOV_* variables populate settings and the client built from them."""
    monkeypatch.setenv("MOOV_PUBLIC_KEY", "env-pub")
    monkeypatch.setenv("MOOV_SECRET_KEY", "env-sec")
    monkeypatch.setenv("MOOV_DOMAIN", "sandbox.moov.test")
    monkeypatch.setenv("MOOV_TIMEOUT_SECONDS", "15")

    settings = MoovSettings(_env_file=None)  # type: ignore[call-arg]
    client = MoovClient.from_settings(settings)

    assert settings.secret_key.get_secret_value() == "env-sec"
    assert "env-sec" not in repr(settings)
    assert settings.scope == "/accounts.write"
    assert client.credentials.public_key == "env-pub"
    assert client.credentials.base_url == "https://sandbox.moov.test"


def test_settings_reject_blank_secret(monkeypatch) -> None:
    """A whitespace secret is rejected at load time."""
    monkeypatch.setenv("MOOV_PUBLIC_KEY", "env-pub")
    monkeypatch.setenv("MOOV_SECRET_KEY", "   ")

    with pytest.raises(ValidationError):
        MoovSettings(_env_file=None)  # type: ignore[call-arg]


def test_configure_logging_accepts_levels() -> None:
    """Logging configuration is idempotent across levels."""
    try:
        configure_logging("DEBUG")
        configure_logging("INFO")
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()


def test_from_settings_loads_environment_and_configures_logging(monkeypatch) -> None:
    """Without explicit settings the cached environment settings are used."""
    monkeypatch.setenv("MOOV_PUBLIC_KEY", "cached-pub")
    monkeypatch.setenv("MOOV_SECRET_KEY", "cached-sec")
    monkeypatch.setenv("MOOV_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    try:
        client = MoovClient.from_settings(configure_logs=True)

        assert client.credentials.public_key == "cached-pub"
        assert get_settings().log_level == "WARNING"
        assert structlog.is_configured()
    finally:
        get_settings.cache_clear()
        structlog.reset_defaults()
