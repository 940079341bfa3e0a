from __future__ import annotations

import httpx
import pytest

import reqkit.cli as cli


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/fail":
        raise httpx.ConnectError("refused", request=request)
    return httpx.Response(200, content=b"pong", headers={"Content-Type": "text/plain"})


@pytest.fixture
def patched_client(monkeypatch, make_client):
    created: list = []

    def factory(settings=None):
        client = make_client(_handler)
        created.append(client)
        return client

    monkeypatch.setattr(cli, "new_client", factory)
    return created


def test_cli_prints_body_without_dump(patched_client, capsys) -> None:
    assert cli._main(["https://api.example.com/ping"]) == 0
    assert capsys.readouterr().out.strip() == "pong"


def test_cli_head_dump_with_headers(patched_client, capsys) -> None:
    assert cli._main(["https://api.example.com/ping", "--dump", "head", "-H", "X-Trace: abc"]) == 0

    output = capsys.readouterr().out
    assert "GET /ping HTTP/1.1" in output
    assert "X-Trace: abc" in output
    assert "HTTP/1.1 200 OK" in output
    assert output.rstrip().endswith("pong")


def test_cli_data_defaults_to_post(patched_client, tmp_path) -> None:
    path = tmp_path / "dump.txt"
    assert cli._main(["https://api.example.com/items", "-d", "payload", "--dump-file", str(path)]) == 0

    dumped = path.read_bytes()
    assert dumped.startswith(b"POST /items HTTP/1.1")
    assert b"payload" in dumped
    assert patched_client[0].dump_options.output.closed


def test_cli_test_mode_discards_body(patched_client, capsys) -> None:
    assert cli._main(["https://api.example.com/ping", "--test-mode"]) == 0
    output = capsys.readouterr().out
    assert "HTTP/1.1 200 OK" in output
    assert patched_client[0].transport.response_options.discard_response_body is True


def test_cli_reports_network_errors(patched_client, capsys) -> None:
    assert cli._main(["https://api.example.com/fail"]) == 1
    assert "request failed" in capsys.readouterr().err


def test_cli_rejects_malformed_header(patched_client) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli._main(["https://api.example.com/ping", "-H", "no-colon"])
    assert excinfo.value.code == 2


def test_cli_prints_body_when_dump_goes_to_file(patched_client, capsys, tmp_path) -> None:
    path = tmp_path / "dump.txt"
    assert cli._main(["https://api.example.com/ping", "--dump-file", str(path)]) == 0

    assert capsys.readouterr().out.strip() == "pong"
    assert b"pong" in path.read_bytes()
