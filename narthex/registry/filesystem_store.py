"""
Filesystem-backed key store.

Each registered key lives at:

    <KEY_ROOT>/0x<hex>.key

where `<hex>` is the lower-case, unpadded hex form of the 32-bit key
identifier. A record is created once with an exclusive create and never
rewritten. The exclusive create is the only synchronisation between
concurrent registrations, so several workers or processes can share a root.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from ..errors import ConflictError, RegistrationError, StoreFailure
from ..identifier import format_key_id
from ..schemas import Outcome

logger = logging.getLogger(__name__)

# Longest filename a single path component may have on common filesystems.
NAME_MAX = 255

RECORD_SUFFIX = ".key"
RECORD_MODE = 0o600

_CREATE_FLAGS = os.O_CREAT | os.O_EXCL | os.O_WRONLY | getattr(os, "O_CLOEXEC", 0)


class FilesystemKeyStore:
    """Persists key blobs under their identifier, at most once per identifier."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def record_path(self, key_id: int) -> Path:
        """
        Map a key identifier to its Key Record path.

        Raises `StoreFailure` if the filename would not fit in a single
        path component. Nothing on disk is touched.
        """
        name = f"{format_key_id(key_id)}{RECORD_SUFFIX}"
        if len(os.fsencode(name)) > NAME_MAX:
            logger.warning("key record name for %d exceeds %d bytes", key_id, NAME_MAX)
            raise StoreFailure("key record name too long")
        return self._root / name

    def create(self, key_id: int, body: bytes, body_length: Optional[int] = None) -> Path:
        """
        Create the Key Record for `key_id` holding the first `body_length`
        bytes of `body`.

        Raises `ConflictError` if the record already exists and
        `StoreFailure` for anything else. On failure no partial record is
        left behind.
        """
        if body_length is None:
            body_length = len(body)
        path = self.record_path(key_id)

        try:
            fd = os.open(path, _CREATE_FLAGS, RECORD_MODE)
        except FileExistsError as exc:
            logger.info("key %s already registered", path.name)
            raise ConflictError(f"{path.name} exists") from exc
        except OSError as exc:
            logger.warning("failed to open %s (%s)", path, exc.strerror)
            raise StoreFailure(f"open {path.name} failed") from exc

        try:
            written = os.write(fd, bytes(body[:body_length]))
            if written != body_length:
                raise OSError(f"short write: {written} of {body_length} bytes")
            os.fsync(fd)
        except OSError as exc:
            logger.warning("failed to write keyfile %s (%s)", path, exc)
            self._discard(fd, path)
            raise StoreFailure(f"write {path.name} failed") from exc
        except BaseException:
            # Interrupted mid-write: no short record may survive.
            self._discard(fd, path)
            raise

        try:
            os.close(fd)
        except OSError as exc:
            # Data is already on disk at this point.
            logger.warning("%s failed to close (%s)", path, exc.strerror)

        logger.info("registered key %s (%d bytes)", path.name, body_length)
        return path

    def register(self, key_id: int, body: bytes, body_length: Optional[int] = None) -> Outcome:
        """Like `create`, but reports the result as an `Outcome`."""
        try:
            self.create(key_id, body, body_length)
        except RegistrationError as exc:
            return exc.outcome
        return Outcome.CREATED

    @staticmethod
    def _discard(fd: int, path: Path) -> None:
        try:
            os.close(fd)
        except OSError as exc:
            logger.warning("%s failed to close (%s)", path, exc.strerror)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("could not remove partial keyfile %s (%s)", path, exc.strerror)
