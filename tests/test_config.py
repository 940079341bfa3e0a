from __future__ import annotations

import pytest
from pydantic import ValidationError

from reqkit.config import ClientSettings


def test_defaults() -> None:
    settings = ClientSettings()
    assert settings.timeout == 120.0
    assert settings.http2 is True
    assert settings.idle_conn_timeout == 90.0
    assert settings.tls_handshake_timeout == 10.0
    assert settings.trust_env is True


def test_zero_timeout_disables_timeout() -> None:
    settings = ClientSettings(timeout=0)
    assert settings.timeout is None
    timeout = settings.httpx_timeout()
    assert timeout.read is None
    assert timeout.connect == 10.0


def test_connect_timeout_bounded_by_overall() -> None:
    timeout = ClientSettings(timeout=3).httpx_timeout()
    assert timeout.read == 3
    assert timeout.connect == 3


def test_negative_timeout_rejected() -> None:
    with pytest.raises(ValidationError):
        ClientSettings(timeout=-1)


def test_limits() -> None:
    limits = ClientSettings(max_idle_conns=5, idle_conn_timeout=30).httpx_limits()
    assert limits.max_keepalive_connections == 5
    assert limits.keepalive_expiry == 30


def test_from_env() -> None:
    settings = ClientSettings.from_env(
        {
            "REQKIT_TIMEOUT": "15",
            "REQKIT_HTTP2": "false",
            "REQKIT_PROXY": " http://proxy.internal:3128 ",
            "UNRELATED": "x",
        }
    )
    assert settings.timeout == 15.0
    assert settings.http2 is False
    assert settings.proxy == "http://proxy.internal:3128"


def test_from_env_reads_os_environ(monkeypatch) -> None:
    monkeypatch.setenv("REQKIT_TRUST_ENV", "0")
    assert ClientSettings.from_env().trust_env is False


def test_settings_are_frozen() -> None:
    settings = ClientSettings()
    with pytest.raises(ValidationError):
        settings.timeout = 1
