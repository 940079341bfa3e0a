"""Command line entry point for sending one request with dumping enabled."""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from reqkit.client import Client, new_client
from reqkit.config import ClientSettings
from reqkit.exceptions import ReqKitError


DUMP_PRESETS = ("all", "head", "body", "request", "response")


def _parse_header(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition(":")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"invalid header {raw!r}, expected 'Name: value'")
    return key.strip(), value.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reqkit")
    parser.add_argument("url")
    parser.add_argument("-X", "--method", default=None)
    parser.add_argument("-H", "--header", action="append", default=[], type=_parse_header)
    parser.add_argument("-d", "--data", default=None)
    parser.add_argument("--dump", choices=DUMP_PRESETS, default=None)
    parser.add_argument("--dump-file", default=None)
    parser.add_argument("--dump-async", action="store_true")
    parser.add_argument("--timeout", type=float, default=None)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--debug", action="store_true")
    mode.add_argument("--test-mode", action="store_true")
    return parser


def _configure(client: Client, args: argparse.Namespace) -> Client:
    if args.test_mode:
        client.test_mode()
    elif args.debug:
        client.debug_mode()
    if args.timeout is not None:
        client.set_timeout(args.timeout)
    for key, value in args.header:
        client.set_common_header(key, value)
    if args.dump_file:
        client.dump_to_file(args.dump_file)
    if args.dump_async:
        client.dump_async()
    if args.dump:
        preset = {
            "all": client.dump_all,
            "head": client.dump_only_head,
            "body": client.dump_only_body,
            "request": client.dump_only_request,
            "response": client.dump_only_response,
        }[args.dump]
        preset()
    return client


def _main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    method = args.method or ("POST" if args.data is not None else "GET")

    with _configure(new_client(ClientSettings.from_env()), args) as client:
        request = client.r()
        if args.data is not None:
            request.set_body(args.data)
        try:
            response = request.send(method, args.url)
        except ReqKitError as exc:
            print(f"request failed: {exc}", file=sys.stderr)
            return 1
        dumped = client.transport.dump_options
        body_on_stdout = dumped is not None and dumped.response_body and dumped.output is sys.stdout
        if response.content and not body_on_stdout:
            print(response.text)
    return 0


def main() -> None:
    raise SystemExit(_main())
