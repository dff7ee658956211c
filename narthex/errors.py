"""
Exceptions raised while handling a registration.

Each one carries the `Outcome` it maps to. The message is for the server
log only; callers only ever see the status code.
"""

from __future__ import annotations

from .schemas import Outcome


class RegistrationError(Exception):
    outcome: Outcome = Outcome.INTERNAL_ERROR


class ClientError(RegistrationError):
    """Malformed request or missing / unparsable key identifier."""

    outcome = Outcome.BAD_REQUEST


class ConflictError(RegistrationError):
    """The identifier already has a Key Record."""

    outcome = Outcome.CONFLICT


class StoreFailure(RegistrationError):
    """I/O failure, resource exhaustion or filename overflow in the store."""

    outcome = Outcome.INTERNAL_ERROR
