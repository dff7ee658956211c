from http import HTTPStatus
from pathlib import Path

import pytest

from narthex.registration import register_key, status_for
from narthex.registry.filesystem_store import FilesystemKeyStore
from narthex.schemas import Outcome, RegistrationRequest


def _put(path: str, body: bytes = b"abc") -> RegistrationRequest:
    return RegistrationRequest.from_body("PUT", path, body)


def test_register_key_created_then_conflict(tmp_path: Path):
    store = FilesystemKeyStore(tmp_path)

    assert register_key(_put("/register/0x2a"), store) is Outcome.CREATED
    assert register_key(_put("/register/0x2a", b"zzz"), store) is Outcome.CONFLICT
    assert (tmp_path / "0x2a.key").read_bytes() == b"abc"


@pytest.mark.parametrize("path", ["/register/0xggg", "/register/", "/register/0x2A"])
def test_register_key_bad_request_skips_store(tmp_path: Path, path):
    store = FilesystemKeyStore(tmp_path / "never-created")

    assert register_key(_put(path), store) is Outcome.BAD_REQUEST
    assert not store.root.exists()


def test_register_key_rejects_non_put(tmp_path: Path):
    store = FilesystemKeyStore(tmp_path)
    req = RegistrationRequest.from_body("POST", "/register/0x2a", b"abc")

    assert register_key(req, store) is Outcome.BAD_REQUEST
    assert list(tmp_path.iterdir()) == []


def test_padded_identifier_collides_with_unpadded(tmp_path: Path):
    store = FilesystemKeyStore(tmp_path)

    assert register_key(_put("/register/0x02a"), store) is Outcome.CREATED
    assert register_key(_put("/register/0x2a"), store) is Outcome.CONFLICT
    assert register_key(_put("/register/0x0000002a"), store) is Outcome.CONFLICT


def test_register_key_honours_body_length(tmp_path: Path):
    store = FilesystemKeyStore(tmp_path)
    req = RegistrationRequest(method="PUT", path="/register/0x2a", body=b"abcdef", body_length=2)

    assert register_key(req, store) is Outcome.CREATED
    assert (tmp_path / "0x2a.key").read_bytes() == b"ab"


@pytest.mark.parametrize(
    "outcome, status",
    [
        (Outcome.CREATED, 201),
        (Outcome.CONFLICT, 409),
        (Outcome.BAD_REQUEST, 400),
        (Outcome.INTERNAL_ERROR, 500),
    ],
)
def test_status_for(outcome, status):
    assert status_for(outcome) == status
    assert isinstance(status_for(outcome), HTTPStatus)
