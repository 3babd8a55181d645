# src/aprs_core/protocols/login.py
import logging
from enum import Enum, auto

from .constants import ControlConst, LoginConst

logger = logging.getLogger(__name__)


class LoginResult(Enum):
    """logresp 控制行的认证结果"""

    VERIFIED = auto()
    UNVERIFIED = auto()


def build_login_line(callsign: str, passcode: str, filter_expr: str | None = None) -> str:
    """构建登录行: "user <callsign> pass <passcode>" (可选附加 filter)。"""
    line = f"{LoginConst.USER} {callsign} {LoginConst.PASS} {passcode}"
    if filter_expr:
        line += f" {LoginConst.FILTER} {filter_expr}"
    return line


def is_control_line(line: str) -> bool:
    """以 "# " 开头的行是服务器控制行。"""
    return line.startswith(ControlConst.PREFIX)


def control_text(line: str) -> str:
    """返回控制行 "# " 之后的部分。"""
    return line[len(ControlConst.PREFIX) :]


def parse_login_response(line: str, callsign: str) -> LoginResult | None:
    """解析 logresp 控制行。

    兼容服务器在结果后追加的内容，例如
    "# logresp N0CALL verified, server T2TEST"。

    Args:
        line: 原始行。
        callsign: 正在认证的呼号。

    Returns:
        LoginResult | None: 针对该呼号的认证结果；不是该呼号的 logresp 时返回 None。
    """
    if not is_control_line(line):
        return None

    parts = control_text(line).split()
    if len(parts) < 3 or parts[0] != ControlConst.LOGRESP or parts[1] != callsign:
        return None

    status = parts[2].rstrip(",")
    if status == ControlConst.VERIFIED:
        return LoginResult.VERIFIED
    if status == ControlConst.UNVERIFIED:
        return LoginResult.UNVERIFIED

    logger.debug("未知的 logresp 结果: %s", status)
    return None
