# tests/test_protocol/test_message.py
import pytest

from aprs_core.exceptions import ExtractError
from aprs_core.protocols.message import (
    AprsMessage,
    build_ack_body,
    build_reject_body,
    parse_message,
)
from aprs_core.protocols.packet import pad_callsign, parse_packet


def test_parse_message_fields():
    packet = parse_packet("VK2BSD-5>APFII0,qAC,APRSFI::N0CALL   :test message{21E3C")
    message = parse_message(packet)

    assert message == AprsMessage(to_call="N0CALL   ", text="test message", msg_id="21E3C")
    # to_call 保留补齐空格，addressee 去掉
    assert message.addressee == "N0CALL"


@pytest.mark.parametrize(
    "to_call, text, msg_id",
    [
        ("N0CALL", "hello", "1"),
        ("VK2BSD-15", "", "ABCDE"),
        ("W1AW", "text with } and spaces", ""),
    ],
)
def test_message_from_raw_line(to_call, text, msg_id):
    line = "F>X:" + ":" + pad_callsign(to_call) + ":" + text + "{" + msg_id
    message = parse_message(parse_packet(line))

    assert message.to_call == pad_callsign(to_call)
    assert message.text == text
    assert message.msg_id == msg_id


def test_id_is_everything_after_first_brace():
    message = parse_message(parse_packet("F>X::N0CALL   :hi{12}34"))
    assert message.text == "hi"
    assert message.msg_id == "12}34"


def test_missing_text_separator():
    with pytest.raises(ExtractError, match="missing text"):
        parse_message(parse_packet("F>X::N0CALL   no separator"))


def test_missing_id():
    with pytest.raises(ExtractError, match="missing id"):
        parse_message(parse_packet("F>X::N0CALL   :no id here"))


def test_brace_before_separator_does_not_count_as_id():
    with pytest.raises(ExtractError, match="missing id"):
        parse_message(parse_packet("F>X::N0{CALL  :no id"))


def test_non_message_body_is_rejected():
    with pytest.raises(ExtractError):
        parse_message(parse_packet("F>X:!position"))


def test_ack_and_reject_bodies():
    assert build_ack_body("VK2BSD-5", "21E3C") == ":VK2BSD-5 :ack21E3C"
    assert build_reject_body("VK2BSD-5", "21E3C") == ":VK2BSD-5 :rej21E3C"
    assert build_ack_body("N0CALL", "7") == ":N0CALL   :ack7"
