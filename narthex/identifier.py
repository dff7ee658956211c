"""
Key identifier extraction.

A key identifier is a 32-bit unsigned integer carried in the request path as
`/register/0x<hex>` with 2 to 8 hex digits. The route only admits lower-case
digits; `parse_key_id` itself accepts either case, the Key Record name is
always derived from the numeric value.
"""

from __future__ import annotations

import re

from .errors import ClientError

KEY_ID_MAX = 0xFFFFFFFF

REGISTER_PATH_RE = re.compile(r"/register/0x[a-f0-9]{2,8}")

_HEX_SEGMENT_RE = re.compile(r"0x([0-9a-fA-F]{2,8})")


def check_request_shape(method: str, path: str) -> None:
    """Re-check what the router should already have enforced."""
    if method.upper() != "PUT":
        raise ClientError(f"method {method!r} not allowed")
    if not REGISTER_PATH_RE.fullmatch(path):
        raise ClientError(f"path {path!r} does not name a key")


def parse_key_id(path: str) -> int:
    """
    Return the key identifier named by the last segment of `path`.

    Raises `ClientError` when there is no segment, the segment is not
    `0x` followed by 2-8 hex digits, or the value is outside 32 bits.
    """
    _, sep, segment = path.rpartition("/")
    if not sep or not segment:
        raise ClientError(f"no key identifier in {path!r}")

    m = _HEX_SEGMENT_RE.fullmatch(segment)
    if m is None:
        raise ClientError(f"invalid key identifier {segment!r}")

    key_id = int(m.group(1), 16)
    if not 0 <= key_id <= KEY_ID_MAX:
        raise ClientError(f"key identifier {segment!r} out of range")
    return key_id


def format_key_id(key_id: int) -> str:
    return f"0x{key_id:x}"
