import pytest

from narthex.errors import ClientError
from narthex.identifier import (
    KEY_ID_MAX,
    check_request_shape,
    format_key_id,
    parse_key_id,
)
from narthex.schemas import Outcome


@pytest.mark.parametrize(
    "segment, expected",
    [
        ("0x00", 0),
        ("0x2a", 42),
        ("0xff", 255),
        ("0x1234", 0x1234),
        ("0xabcdef", 0xABCDEF),
        ("0xffffffff", KEY_ID_MAX),
        ("0x002a", 42),
    ],
)
def test_parse_key_id_valid(segment, expected):
    assert parse_key_id(f"/register/{segment}") == expected


def test_parse_key_id_accepts_upper_case_digits():
    assert parse_key_id("/register/0x2A") == parse_key_id("/register/0x2a")


@pytest.mark.parametrize(
    "path",
    [
        "/register/",
        "/register/0x",
        "/register/0x1",
        "/register/0xggg",
        "/register/0x123456789",
        "/register/2a",
        "/register/0x2a ",
        "/register/0x+2a",
        "/register/0x2_a",
        "0x2a",
        "",
    ],
)
def test_parse_key_id_rejects(path):
    with pytest.raises(ClientError) as exc_info:
        parse_key_id(path)
    assert exc_info.value.outcome is Outcome.BAD_REQUEST


def test_parse_key_id_uses_last_segment():
    assert parse_key_id("/some/prefix/0x10") == 16


def test_check_request_shape_accepts_register_put():
    check_request_shape("PUT", "/register/0x2a")
    check_request_shape("put", "/register/0xdeadbeef")


@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/register/0x2a"),
        ("POST", "/register/0x2a"),
        ("PUT", "/register/0x2A"),
        ("PUT", "/register/0x2a\n"),
        ("PUT", "/other/0x2a"),
        ("PUT", "/register/0x2a/"),
    ],
)
def test_check_request_shape_rejects(method, path):
    with pytest.raises(ClientError):
        check_request_shape(method, path)


def test_format_key_id_is_unpadded_lower_case():
    assert format_key_id(0x2A) == "0x2a"
    assert format_key_id(0) == "0x0"
    assert format_key_id(KEY_ID_MAX) == "0xffffffff"
