from __future__ import annotations

import gc
import io
import json

import httpx

from reqkit.client import AsyncClient, Client
from reqkit.cookies import PublicSuffixCookiePolicy
from reqkit.logger import new_logger


def test_clone_header_changes_do_not_leak_back(make_client) -> None:
    original = make_client().set_common_header("X-Env", "prod")
    cloned = original.clone().set_common_header("X-Env", "staging")

    assert original.common_headers == {"X-Env": "prod"}
    assert cloned.common_headers == {"X-Env": "staging"}

    original.set_common_header("X-Team", "core")
    assert "X-Team" not in cloned.common_headers


def test_clone_of_fresh_client_has_no_dump_options(make_client) -> None:
    cloned = make_client().clone()
    assert cloned.dump_options is None
    assert cloned.transport.dump_enabled is False


def test_clone_copies_dump_options_by_value(make_client) -> None:
    sink = io.BytesIO()
    original = make_client().dump_to(sink).dump_only_head()
    cloned = original.clone()

    assert cloned.dump_options == original.dump_options
    assert cloned.dump_options is not original.dump_options
    assert cloned.dump_options.output is sink

    cloned.dump_only_body()
    assert original.dump_options.response_head is True
    assert original.dump_options.response_body is False


def test_clone_is_armed_with_its_own_options(make_client) -> None:
    original = make_client().dump_all()
    cloned = original.clone()

    assert cloned.transport is not original.transport
    assert cloned.transport.dump_enabled is True
    assert cloned.transport.dump_options is cloned.dump_options

    cloned.disable_dump()
    assert original.transport.dump_enabled is True


def test_clone_of_disabled_dump_stays_disabled(make_client) -> None:
    original = make_client().dump_all().disable_dump()
    cloned = original.clone()

    assert cloned.dump_options is not None
    assert cloned.transport.dump_enabled is False


def test_clone_shares_logger_and_json_config(make_client) -> None:
    log = new_logger(io.StringIO())

    def marshal(payload: object) -> str:
        return json.dumps(payload, sort_keys=True)

    original = make_client().set_logger(log).set_json_marshal(marshal)
    cloned = original.clone()

    assert cloned.logger is log
    assert cloned._json_marshal is marshal
    assert cloned._json_unmarshal is original._json_unmarshal


def test_clone_keeps_response_options_and_settings(make_client) -> None:
    original = make_client().enable_auto_decode_text_content().set_timeout(7)
    cloned = original.clone()

    assert cloned.transport.response_options == original.transport.response_options
    assert cloned.settings == original.settings
    assert cloned._http.timeout.read == 7

    cloned.enable_auto_discard_response_body()
    assert original.transport.response_options.discard_response_body is False


def test_clone_builds_its_own_connection_pool(mock_transport) -> None:
    calls: list = []
    original = Client(transport=mock_transport(calls=calls))
    original.r().get("https://api.example.com/")
    cloned = original.clone()
    cloned.r().get("https://api.example.com/")

    assert len(calls) == 2
    assert cloned.transport._pool
    assert all(inner not in original.transport._pool.values() for inner in cloned.transport._pool.values())

    cloned.close()
    assert original.transport._pool


def test_clone_copies_cookies(make_client) -> None:
    original = make_client()
    original.cookies.set("session", "abc", domain="api.example.com")
    cloned = original.clone()
    cloned.cookies.set("session", "xyz", domain="api.example.com")

    assert original.cookies.get("session", domain="api.example.com") == "abc"
    assert cloned.cookies.get("session", domain="api.example.com") == "xyz"


def test_async_client_clone_keeps_type(make_async_client) -> None:
    cloned = make_async_client().set_common_header("X-A", "1").clone()
    assert isinstance(cloned, AsyncClient)
    assert isinstance(cloned._http, httpx.AsyncClient)
    assert cloned.common_headers == {"X-A": "1"}


def test_clone_keeps_dumping_after_source_closes(make_client, tmp_path) -> None:
    path = tmp_path / "dump.txt"
    original = make_client().dump_to_file(str(path)).dump_only_head()
    cloned = original.clone()
    assert cloned.dump_options.output is not original.dump_options.output

    original.r().get("https://api.example.com/first")
    original.close()
    cloned.r().get("https://api.example.com/second")
    cloned.close()

    dumped = path.read_bytes()
    assert b"GET /first HTTP/1.1" in dumped
    assert b"GET /second HTTP/1.1" in dumped
    assert cloned.dump_options.output.closed


def test_clone_keeps_dumping_after_source_is_collected(make_client, tmp_path) -> None:
    path = tmp_path / "dump.txt"
    original = make_client().dump_to_file(str(path)).dump_only_head()
    cloned = original.clone()
    del original
    gc.collect()

    cloned.r().get("https://api.example.com/after")
    cloned.close()

    assert b"GET /after HTTP/1.1" in path.read_bytes()


def test_clone_shares_caller_supplied_output(make_client) -> None:
    sink = io.BytesIO()
    original = make_client().dump_to(sink)
    cloned = original.clone()

    original.close()
    assert cloned.dump_options.output is sink
    assert not sink.closed


def test_clone_cookie_jar_keeps_public_suffix_policy(make_client) -> None:
    original = make_client()
    original.cookies.set("session", "abc", domain="api.example.com")
    cloned = original.clone()

    assert isinstance(cloned.cookies.jar._policy, PublicSuffixCookiePolicy)
    assert cloned.cookies.get("session", domain="api.example.com") == "abc"
