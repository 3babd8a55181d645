# src/aprs_core/protocols/constants.py
"""
APRS-IS 协议层 - 常量定义

本模块定义了所有协议相关的前缀、分隔符和固定值。
采用命名空间 (Class Namespace) 组织。
"""

# =========================================================================
# 1. 控制行 (Control Lines)
# =========================================================================


class ControlConst:
    """以 "# " 开头的服务器控制行"""

    PREFIX = "# "
    LOGRESP = "logresp"

    VERIFIED = "verified"
    UNVERIFIED = "unverified"


# =========================================================================
# 2. 登录行 (Login Line)
# =========================================================================


class LoginConst:
    USER = "user"
    PASS = "pass"
    FILTER = "filter"

    # 只接收数据、不发送位置的客户端使用的 Passcode
    RECEIVE_ONLY_PASSCODE = "-1"

    # Passcode 哈希算法参数
    PASSCODE_SEED = 0x73E2
    PASSCODE_MASK = 0x7FFF


# =========================================================================
# 3. 数据包 (Data Packets)
# =========================================================================


class PacketConst:
    # 头部与消息体分隔符
    BODY_SEP = ":"
    # 发送方与路径分隔符
    PATH_ARROW = ">"
    PATH_SEP = ","

    # 出站数据包使用的目的地址
    DESTINATION = "APRS"

    # 呼号字段宽度 (右侧补空格)
    CALLSIGN_WIDTH = 9


class DataType:
    """消息体首字符 (Data Type Identifier)"""

    MESSAGE = ":"


# =========================================================================
# 4. 消息 (Addressed Messages)
# =========================================================================


class MessageConst:
    ID_OPEN = "{"

    ACK = "ack"
    REJ = "rej"


# =========================================================================
# 5. 线路编码
# =========================================================================


class WireConst:
    ENCODING = "ascii"
    ERRORS = "replace"
    LINE_END = "\r\n"
