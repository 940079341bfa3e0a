#!/usr/bin/env python3
"""Integration check: exercise every dump mode of reqkit.Client against a live server."""

from __future__ import annotations

import io
import os
import sys
import tempfile

from reqkit import Client, ReqKitError

BASE_URL = os.getenv("REQKIT_SMOKE_URL", "https://httpbin.org")

passed: list[str] = []
failed: list[tuple[str, str]] = []


def ok(name: str, detail: str = "") -> None:
    print(f"  PASS  {name}  {detail}".rstrip())
    passed.append(name)


def fail(name: str, reason: str) -> None:
    msg = reason[:200]
    print(f"  FAIL  {name}  -> {msg}")
    failed.append((name, msg))


def check_dump(name: str, configure, *, expect: list[bytes], reject: list[bytes] = ()) -> None:
    """Send one request with a configured client and inspect what was dumped."""
    sink = io.BytesIO()
    try:
        with configure(Client().dump_to(sink)) as client:
            client.r().set_json_body({"probe": name}).post(f"{BASE_URL}/anything")
    except ReqKitError as exc:
        fail(name, str(exc))
        return

    dumped = sink.getvalue()
    missing = [marker for marker in expect if marker not in dumped]
    present = [marker for marker in reject if marker in dumped]
    if missing or present:
        fail(name, f"missing={missing} unexpected={present}")
    else:
        ok(name, f"{len(dumped)} bytes")


def main() -> None:
    print(f"\n=== Dump presets against {BASE_URL} ===")

    check_dump("dump_all", lambda c: c.dump_all(), expect=[b"POST /anything", b'"probe"', b" 200 "])
    check_dump("dump_only_request", lambda c: c.dump_only_request(), expect=[b"POST /anything"], reject=[b" 200 "])
    check_dump("dump_only_response", lambda c: c.dump_only_response(), expect=[b" 200 "], reject=[b"POST /anything"])
    check_dump("dump_only_head", lambda c: c.dump_only_head(), expect=[b"POST /anything", b" 200 "])
    check_dump("dump_only_body", lambda c: c.dump_only_body(), expect=[b'"probe"'], reject=[b"POST /anything"])

    print("\n=== Sinks ===")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "dump.txt")
        with Client().dump_to_file(path) as client:
            client.r().get(f"{BASE_URL}/get")
        with open(path, "rb") as fh:
            content = fh.read()
        if b"GET /get" in content:
            ok("dump_to_file", f"{len(content)} bytes")
        else:
            fail("dump_to_file", "request line not written")

    sink = io.BytesIO()
    with Client().dump_to(sink).dump_async() as client:
        client.r().get(f"{BASE_URL}/get")
    if b"GET /get" in sink.getvalue():
        ok("dump_async")
    else:
        fail("dump_async", "nothing written by the background worker")

    print("\n=== Modes ===")

    sink = io.BytesIO()
    with Client().test_mode().dump_to(sink) as client:
        response = client.r().get(f"{BASE_URL}/html")
    if response.content == b"" and b"<html" in sink.getvalue():
        ok("test_mode", "body dumped and discarded")
    else:
        fail("test_mode", f"content={len(response.content)} bytes")

    print("\n" + "=" * 60)
    print(f"PASSED: {len(passed)}   FAILED: {len(failed)}")
    if failed:
        print("\nFailed checks:")
        for name, err in failed:
            print(f"  - {name}: {err}")
    print("=" * 60)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
