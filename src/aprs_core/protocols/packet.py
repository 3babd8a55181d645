# File: src/aprs_core/protocols/packet.py
"""
APRS 数据包解析与封装 (Packet Parser / Builder)

负责 "FROM>PATH1,PATH2:BODY" 形式的单行数据包与 Python 数据结构之间的转换。
本模块是无状态的 (Stateless)，不持有任何配置或会话信息。
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto

from ..exceptions import ParseError
from .constants import DataType, PacketConst

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AprsHeader:
    """数据包头部。

    Attributes:
        from_call: 发送方呼号。
        path: 中继路径 (保持原始顺序，允许空段)。
    """

    from_call: str
    path: tuple[str, ...] = ()


@dataclass(frozen=True)
class AprsPacket:
    """一个已解析的数据包。

    Attributes:
        header: 数据包头部。
        body_text: 第一个 ':' 之后的全部内容 (可能包含更多 ':')。
    """

    header: AprsHeader
    body_text: str

    @property
    def data_type(self) -> str:
        """消息体首字符，空消息体返回空字符串。"""
        return self.body_text[:1]


class PacketKind(Enum):
    """按消息体首字符划分的数据包类型。

    目前只实现了 USER_MESSAGE，其余类型 (位置、状态等) 统一归为 UNSUPPORTED。
    """

    USER_MESSAGE = auto()
    UNSUPPORTED = auto()


_KIND_BY_DATA_TYPE = {
    DataType.MESSAGE: PacketKind.USER_MESSAGE,
}


def parse_packet(line: str) -> AprsPacket:
    """解析一行原始数据包。

    例: "VK2BSD-5>APFII0,qAC,APRSFI::VK2BSD-XX:test message{21E3C"

    Args:
        line: 不含行尾换行符的原始行。

    Returns:
        AprsPacket: 解析后的数据包。

    Raises:
        ParseError: 缺少头部/消息体分隔符 ':'，或头部缺少 '>'。
    """
    header_text, sep, body_text = line.partition(PacketConst.BODY_SEP)
    if not sep:
        raise ParseError(f"缺少消息体分隔符 ':': {line!r}")

    from_call, arrow, path_text = header_text.partition(PacketConst.PATH_ARROW)
    if not arrow:
        raise ParseError(f"头部缺少 '>': {line!r}")

    path = tuple(path_text.split(PacketConst.PATH_SEP)) if path_text else ()

    return AprsPacket(AprsHeader(from_call, path), body_text)


def classify_packet(packet: AprsPacket) -> PacketKind:
    """根据消息体首字符判断数据包类型。"""
    return _KIND_BY_DATA_TYPE.get(packet.data_type, PacketKind.UNSUPPORTED)


def pad_callsign(callsign: str) -> str:
    """将呼号左对齐并补空格到 9 个字符。"""
    return callsign.ljust(PacketConst.CALLSIGN_WIDTH)


def build_packet(
    from_call: str, body_text: str, destination: str = PacketConst.DESTINATION
) -> str:
    """构建出站数据包行 (不含行尾)。

    结构: <from_call 补齐 9 位>>APRS:<body_text>

    Args:
        from_call: 本地呼号。
        body_text: 消息体。
        destination: 目的地址，默认为 "APRS"。

    Returns:
        str: 可直接写入连接的数据包行。
    """
    return (
        f"{pad_callsign(from_call)}{PacketConst.PATH_ARROW}{destination}"
        f"{PacketConst.BODY_SEP}{body_text}"
    )
