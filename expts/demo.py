#!/usr/bin/env python3
"""
expts/demo.py

End-to-end demo (verbose), OS-agnostic (Linux / macOS / Windows):

  - starts the narthex service on a throwaway key root
  - waits for the health endpoint
  - registers a handful of keys and shows every verdict (201 / 400 / 409)
  - fires a burst of concurrent registrations for one identifier
  - lists the resulting key records
  - stops the service unless KEEP_SERVICE=1

Usage:
  python expts/demo.py

Environment:
  KEEP_SERVICE=1  -> leave the service running after the demo
  DEMO_PORT       -> port to run on (default 8193)
"""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


# -----------------------------------------------------------------------------
# Colours (no emojis) – fall back to plain text on non-TTY
# -----------------------------------------------------------------------------
def _colour_codes():
    if sys.stdout.isatty():
        return {
            "BOLD": "\033[1m",
            "DIM": "\033[2m",
            "GREEN": "\033[32m",
            "YELLOW": "\033[33m",
            "BLUE": "\033[34m",
            "RED": "\033[31m",
            "RESET": "\033[0m",
        }
    else:
        return {k: "" for k in ["BOLD", "DIM", "GREEN", "YELLOW", "BLUE", "RED", "RESET"]}


C = _colour_codes()


def log_kv(label: str, *values: str) -> None:
    print(f"  {C['DIM']}{label}:{C['RESET']} {' '.join(str(v) for v in values)}")


def log_section(*msg: str) -> None:
    title = " ".join(str(m) for m in msg)
    print()
    print("###############################################################################")
    print(f"# {title}")
    print("###############################################################################")
    print()


def note(msg: str) -> None:
    print(f"  {C['BLUE']}{msg}{C['RESET']}")


def warn(msg: str) -> None:
    print(f"{C['YELLOW']}WARN{C['RESET']}: {msg}")


def err(msg: str) -> None:
    print(f"{C['RED']}ERROR{C['RESET']}: {msg}", file=sys.stderr)


# -----------------------------------------------------------------------------
# HTTP helpers
# -----------------------------------------------------------------------------
def wait_for_http(url: str, max_tries: int = 30, delay: float = 0.5) -> None:
    print(f"Waiting for {url} ...")
    for _ in range(max_tries):
        try:
            with urlopen(Request(url, method="GET"), timeout=5) as resp:
                if 200 <= resp.status < 300:
                    print(f"  {C['GREEN']}OK{C['RESET']} ({url})")
                    return
        except (URLError, HTTPError, ConnectionError):
            pass
        time.sleep(delay)

    err(f"timeout waiting for {url}")
    raise SystemExit(1)


def http_put(url: str, body: bytes) -> int:
    """PUT raw bytes and return the status code (never raises on 4xx/5xx)."""
    req = Request(url, data=body, method="PUT")
    req.add_header("Content-Type", "application/octet-stream")
    try:
        with urlopen(req, timeout=10) as resp:
            return resp.status
    except HTTPError as e:
        return e.code


def register(base_url: str, key_path: str, body: bytes) -> int:
    status = http_put(f"{base_url}/register/{key_path}", body)
    colour = C["GREEN"] if status == 201 else C["YELLOW"]
    print(f"  PUT /register/{key_path:<14} body={body!r:<20} -> {colour}HTTP {status}{C['RESET']}")
    return status


# -----------------------------------------------------------------------------
# Main flow
# -----------------------------------------------------------------------------
def main() -> None:
    root_dir = Path(__file__).resolve().parent.parent
    port = int(os.environ.get("DEMO_PORT", "8193"))
    keep_service = os.environ.get("KEEP_SERVICE", "0") == "1"
    base_url = f"http://127.0.0.1:{port}"

    key_root = Path(tempfile.mkdtemp(prefix="narthex-demo-"))

    # -------------------------------------------------------------------------
    # 1. Start the service
    # -------------------------------------------------------------------------
    log_section("Starting narthex")
    cmd = [
        sys.executable, "-m", "narthex.main",
        "--ip", "127.0.0.1",
        "--port", str(port),
        "--root", str(key_root),
        "--log-level", "info",
    ]
    note(f"Running: {' '.join(cmd)}")
    proc = subprocess.Popen(cmd, cwd=str(root_dir))
    log_kv("key root", str(key_root))

    try:
        wait_for_http(f"{base_url}/health")

        # ---------------------------------------------------------------------
        # 2. One of each verdict
        # ---------------------------------------------------------------------
        log_section("Registering keys")
        register(base_url, "0x2a", b"abc")
        register(base_url, "0x2a", b"other")  # 409, first one wins
        register(base_url, "0x02a", b"padded")  # same identifier as 0x2a
        register(base_url, "0xdeadbeef", os.urandom(16))
        register(base_url, "0xggg", b"abc")  # 400
        register(base_url, "0x2A", b"abc")  # 400, route is lower-case only
        register(base_url, "", b"abc")  # 400

        # ---------------------------------------------------------------------
        # 3. Concurrent registrations for one identifier
        # ---------------------------------------------------------------------
        log_section("Racing 20 registrations for 0xc0ffee")
        bodies = [f"racer-{i:02d}".encode() for i in range(20)]
        with ThreadPoolExecutor(max_workers=len(bodies)) as pool:
            statuses = Counter(
                pool.map(lambda b: http_put(f"{base_url}/register/0xc0ffee", b), bodies)
            )
        log_kv("verdicts", ", ".join(f"{code}x{n}" for code, n in sorted(statuses.items())))

        # ---------------------------------------------------------------------
        # 4. What ended up on disk
        # ---------------------------------------------------------------------
        log_section("Key records")
        for path in sorted(key_root.iterdir()):
            mode = oct(path.stat().st_mode & 0o777)
            log_kv(path.name, f"{path.stat().st_size} bytes", mode)

        log_section("Demo complete")
        print(f"  - service is listening on {base_url}")
        print(f"  - key records are under {key_root}")
        print()
        print("To keep the service running after the script, use:")
        print("  KEEP_SERVICE=1 python expts/demo.py")

        if keep_service:
            log_section("KEEP_SERVICE=1 so narthex is left running (Ctrl-C to stop)")
            proc.wait()

    finally:
        if proc.poll() is None:
            log_section("Stopping narthex")
            proc.terminate()
            try:
                proc.wait(timeout=10)
            except subprocess.TimeoutExpired:
                warn("narthex did not stop, killing it")
                proc.kill()


if __name__ == "__main__":
    main()
