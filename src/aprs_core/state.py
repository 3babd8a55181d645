# File: src/aprs_core/state.py
"""
APRS-IS 客户端核心库 - 状态模块

负责定义和存储连接会话的易变状态。
本模块不包含业务逻辑，仅作为数据容器供 Core 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class ConnectionStatus(Enum):
    """连接的生命周期状态枚举。

    状态流转示意:
    DISCONNECTED -> CONNECTING -> AWAITING_IDENTIFICATION -> CONNECTED
        -> AUTHENTICATING -> AUTHENTICATED -> DISCONNECTING -> CLOSED
    任何阶段发生错误或取消都会经 DISCONNECTING 进入 CLOSED。
    """

    DISCONNECTED = auto()
    """初始状态，客户端已实例化但未建立连接。"""

    CONNECTING = auto()
    """正在建立 TCP 连接。"""

    AWAITING_IDENTIFICATION = auto()
    """TCP 已连接，正在等待服务器的标识行 ("# ...")。"""

    CONNECTED = auto()
    """已收到服务器标识，调度循环已启动，尚未发送登录行。"""

    AUTHENTICATING = auto()
    """登录行已发送，等待 logresp。"""

    AUTHENTICATED = auto()
    """登录成功，正在处理数据包。"""

    DISCONNECTING = auto()
    """正在释放连接资源。"""

    CLOSED = auto()
    """终止状态。连接已释放，该客户端实例不能再次使用。"""


@dataclass
class ClientState:
    """存储一个 APRS-IS 会话的易变状态数据。

    Attributes:
        status: 当前连接状态。
        server_identification: 服务器标识行中 "# " 之后的文本，用于识别心跳。
        callsign: 当前会话使用（或正在认证）的呼号。
        last_error: 最近一次发生的错误信息描述。
        pings: 已收到的服务器心跳次数。
        messages_acked: 已确认 (ack) 的消息数。
        messages_rejected: 已拒绝 (rej) 的消息数。
        packets_dropped: 因解析失败或类型不支持而丢弃的行数。
    """

    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    server_identification: str = ""
    callsign: str = ""
    last_error: str = ""

    pings: int = 0
    messages_acked: int = 0
    messages_rejected: int = 0
    packets_dropped: int = 0

    @property
    def is_online(self) -> bool:
        """连接是否仍然可用 (已识别服务器且尚未开始断开)。"""
        return self.status in (
            ConnectionStatus.CONNECTED,
            ConnectionStatus.AUTHENTICATING,
            ConnectionStatus.AUTHENTICATED,
        )
