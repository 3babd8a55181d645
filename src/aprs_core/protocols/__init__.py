# src/aprs_core/protocols/__init__.py
"""
APRS-IS 协议层 (Protocol Layer)

本包负责协议行的纯粹构建 (Build) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何状态管理 (State)。
- 不依赖于 core 或 network 层。
"""

from . import constants
from .login import (
    LoginResult,
    build_login_line,
    control_text,
    is_control_line,
    parse_login_response,
)
from .message import AprsMessage, build_ack_body, build_reject_body, parse_message
from .packet import (
    AprsHeader,
    AprsPacket,
    PacketKind,
    build_packet,
    classify_packet,
    pad_callsign,
    parse_packet,
)

# 公共 API
__all__ = [
    "constants",
    "AprsHeader",
    "AprsPacket",
    "AprsMessage",
    "PacketKind",
    "LoginResult",
    "parse_packet",
    "classify_packet",
    "build_packet",
    "pad_callsign",
    "parse_message",
    "build_ack_body",
    "build_reject_body",
    "build_login_line",
    "is_control_line",
    "control_text",
    "parse_login_response",
]
