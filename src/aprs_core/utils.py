# File: src/aprs_core/utils.py
"""
APRS-IS 客户端核心库 - 通用算法工具箱
"""

from .protocols.constants import LoginConst


def compute_passcode(callsign: str) -> int:
    """计算 APRS-IS 登录使用的 Passcode。

    算法逻辑:
    1. 去掉 SSID ("-" 之后的部分) 并转为大写。
    2. 初始值 hash = 0x73E2。
    3. 每两个字符一组：高位字符左移 8 位后异或，低位字符直接异或。
    4. 结果保留低 15 位。

    Args:
        callsign: 呼号 (可带 SSID，例如 "N0CALL-5")。

    Returns:
        int: 0 ~ 32767 之间的 Passcode。
    """
    base = callsign.split("-", 1)[0].upper()
    ret = LoginConst.PASSCODE_SEED

    for i in range(0, len(base), 2):
        ret ^= ord(base[i]) << 8
        if i + 1 < len(base):
            ret ^= ord(base[i + 1])

    return ret & LoginConst.PASSCODE_MASK
