"""
Configuration for the key-registration service.

Everything is read once from the environment at import time. The key store
itself never looks at these values; it is handed `KEY_ROOT` when the app
is built (see `main.py`), so tests can point it somewhere else.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Directory holding the Key Records, one `0x<hex>.key` file per identifier.
KEY_ROOT: Path = Path(os.environ.get("NARTHEX_KEY_ROOT", "keys")).resolve()

HOST: str = os.environ.get("NARTHEX_HOST", "0.0.0.0")
PORT: int = int(os.environ.get("NARTHEX_PORT", "8192"))

# Key material is small; anything larger is refused before the store is touched.
BODY_MAX: int = int(os.environ.get("NARTHEX_BODY_MAX", "32"))

# Only serve requests addressed to this host name, if set.
DOMAIN: Optional[str] = os.environ.get("NARTHEX_DOMAIN") or None

CERTFILE: Optional[str] = os.environ.get("NARTHEX_CERTFILE") or None
KEYFILE: Optional[str] = os.environ.get("NARTHEX_KEYFILE") or None

LOG_LEVEL: str = os.environ.get("NARTHEX_LOG_LEVEL", "info").lower()

SERVER_NAME = "narthex"
