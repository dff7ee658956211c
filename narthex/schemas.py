"""
Pydantic schemas and enums shared by the core and the FastAPI app.
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus

from pydantic import BaseModel, ConfigDict, Field


class Outcome(str, Enum):
    """Verdict of a single registration attempt. Derived, never stored."""

    CREATED = "created"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    INTERNAL_ERROR = "internal_error"


class RegistrationRequest(BaseModel):
    """
    One inbound "register key" call as handed over by the HTTP front end.

    - method: HTTP method, only PUT is accepted by the core
    - path: request path, expected to look like `/register/0x<hex>`
    - body: raw key bytes, stored as-is
    - body_length: number of bytes of `body` to persist
    """

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    body: bytes = b""
    body_length: int = Field(default=0, ge=0)

    @classmethod
    def from_body(cls, method: str, path: str, body: bytes) -> "RegistrationRequest":
        return cls(method=method, path=path, body=body, body_length=len(body))


class HealthResponse(BaseModel):
    """Simple health check response."""

    status: str


STATUS_BY_OUTCOME = {
    Outcome.CREATED: HTTPStatus.CREATED,
    Outcome.CONFLICT: HTTPStatus.CONFLICT,
    Outcome.BAD_REQUEST: HTTPStatus.BAD_REQUEST,
    Outcome.INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}
