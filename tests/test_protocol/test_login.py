# tests/test_protocol/test_login.py
import pytest

from aprs_core.protocols.login import (
    LoginResult,
    build_login_line,
    control_text,
    is_control_line,
    parse_login_response,
)


def test_build_login_line():
    assert build_login_line("N0CALL", "13023") == "user N0CALL pass 13023"


def test_build_login_line_with_filter():
    line = build_login_line("N0CALL", "-1", "m/50")
    assert line == "user N0CALL pass -1 filter m/50"


def test_control_line_helpers():
    assert is_control_line("# aprsc 2.1.10-gd72a17c")
    assert not is_control_line("#no space")
    assert not is_control_line("N0CALL>APRS:hi")
    assert control_text("# aprsc 2.1.10-gd72a17c") == "aprsc 2.1.10-gd72a17c"


@pytest.mark.parametrize(
    "line, expected",
    [
        ("# logresp N0CALL verified", LoginResult.VERIFIED),
        ("# logresp N0CALL verified, server T2TEST", LoginResult.VERIFIED),
        ("# logresp N0CALL unverified", LoginResult.UNVERIFIED),
        ("# logresp N0CALL unverified, server T2TEST", LoginResult.UNVERIFIED),
    ],
)
def test_parse_login_response(line, expected):
    assert parse_login_response(line, "N0CALL") is expected


@pytest.mark.parametrize(
    "line",
    [
        "# aprsc 2.1.10-gd72a17c",
        "# logresp OTHER verified",
        "# logresp N0CALL-1 verified",
        "# logresp N0CALL",
        "# logresp N0CALL maybe",
        "logresp N0CALL verified",
    ],
)
def test_parse_login_response_ignores_other_lines(line):
    assert parse_login_response(line, "N0CALL") is None
