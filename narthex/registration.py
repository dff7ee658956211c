"""
Glue between the HTTP front end and the key store.

A registration goes: shape check -> identifier extraction -> exclusive
create in the store. Whatever happens is reported as an `Outcome`, which
`status_for` turns into the HTTP status the front end sends back.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from .errors import ClientError
from .identifier import check_request_shape, parse_key_id
from .registry.filesystem_store import FilesystemKeyStore
from .schemas import STATUS_BY_OUTCOME, Outcome, RegistrationRequest

logger = logging.getLogger(__name__)


def register_key(req: RegistrationRequest, store: FilesystemKeyStore) -> Outcome:
    try:
        check_request_shape(req.method, req.path)
        key_id = parse_key_id(req.path)
    except ClientError as exc:
        logger.info("rejected registration: %s", exc)
        return exc.outcome

    return store.register(key_id, req.body, req.body_length)


def status_for(outcome: Outcome) -> HTTPStatus:
    return STATUS_BY_OUTCOME[outcome]
