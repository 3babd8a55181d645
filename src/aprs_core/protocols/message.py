# File: src/aprs_core/protocols/message.py
"""
APRS 定向消息 (Addressed Message) 提取与应答构建

消息体格式: ":<收件人 补齐 9 位>:<文本>{<消息 ID>"
应答格式:   ":<发送方 补齐 9 位>:ack<消息 ID>" / ":...:rej<消息 ID>"
"""

import logging
from dataclasses import dataclass

from ..exceptions import ExtractError
from .constants import DataType, MessageConst, PacketConst
from .packet import AprsPacket, pad_callsign

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AprsMessage:
    """一条定向消息。

    Attributes:
        to_call: 收件人字段原文 (包含补齐用的尾部空格)。
        text: 消息文本。
        msg_id: 消息 ID，用于关联 ack/rej。
    """

    to_call: str
    text: str
    msg_id: str

    @property
    def addressee(self) -> str:
        """去掉补齐空格后的收件人呼号。"""
        return self.to_call.strip()


def parse_message(packet: AprsPacket) -> AprsMessage:
    """从 ':' 类型数据包的消息体中提取定向消息。

    Args:
        packet: 消息体以 ':' 开头的数据包。

    Returns:
        AprsMessage: 提取出的消息。

    Raises:
        ExtractError: 消息体不是 ':' 类型、缺少文本分隔符或缺少消息 ID。
    """
    body = packet.body_text
    if not body.startswith(DataType.MESSAGE):
        raise ExtractError(f"不是定向消息: {body!r}")

    text_sep = body.find(PacketConst.BODY_SEP, 1)
    if text_sep < 0:
        raise ExtractError(f"无效的 APRS 消息 (missing text): {body!r}")

    id_open = body.find(MessageConst.ID_OPEN, text_sep + 1)
    if id_open < 0:
        raise ExtractError(f"无效的 APRS 消息 (missing id): {body!r}")

    return AprsMessage(
        to_call=body[1:text_sep],
        text=body[text_sep + 1 : id_open],
        msg_id=body[id_open + 1 :],
    )


def _build_reply_body(to_call: str, verb: str, msg_id: str) -> str:
    return f"{DataType.MESSAGE}{pad_callsign(to_call)}{PacketConst.BODY_SEP}{verb}{msg_id}"


def build_ack_body(to_call: str, msg_id: str) -> str:
    """构建确认 (ack) 消息体。

    Args:
        to_call: 原消息的发送方呼号 (应答的收件人)。
        msg_id: 原消息 ID。
    """
    return _build_reply_body(to_call, MessageConst.ACK, msg_id)


def build_reject_body(to_call: str, msg_id: str) -> str:
    """构建拒绝 (rej) 消息体。"""
    return _build_reply_body(to_call, MessageConst.REJ, msg_id)
