# src/aprs_core/network.py
"""
APRS-IS 客户端核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 流的建立、按行读写与释放逻辑。
该模块屏蔽了底层 Stream 的复杂性，向 Core 提供纯粹的文本行收发接口。
读取操作不抛出异常，而是返回带标签的 ReadResult，由调用方区分取消、断开与错误。
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto

from .exceptions import NetworkError
from .protocols.constants import WireConst

logger = logging.getLogger(__name__)


class ReadStatus(Enum):
    DATA = auto()
    """读到一行完整数据。"""

    EOF = auto()
    """对端关闭了连接 (或本地已释放连接)。"""

    CANCELED = auto()
    """读取期间收到了取消信号。"""

    ERROR = auto()
    """发生了 I/O 错误。"""


@dataclass(frozen=True)
class ReadResult:
    """一次 read_line 的结果。

    Attributes:
        status: 结果类型。
        line: 去掉行尾换行符后的文本，仅 DATA 时有效。
        error: 底层异常，仅 ERROR 时有效。
    """

    status: ReadStatus
    line: str = ""
    error: Exception | None = None


class LineConnection:
    """
    封装 asyncio TCP Stream 的按行收发连接。
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        self.reader = reader
        self.writer = writer
        self._closed = False

    @classmethod
    async def open(cls, host: str, port: int, timeout: float) -> "LineConnection":
        """建立 TCP 连接。

        Raises:
            NetworkError: 连接失败或超时。
        """
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=timeout
            )
        except asyncio.TimeoutError:
            raise NetworkError(f"连接超时 {host}:{port} ({timeout}s)") from None
        except OSError as e:
            raise NetworkError(f"连接失败 {host}:{port}: {e}") from e

        logger.debug(f"TCP 连接已建立: {host}:{port}")
        return cls(reader, writer)

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def read_line(self, cancel_event: asyncio.Event | None = None) -> ReadResult:
        """
        读取一行 (Async)。

        同时等待数据与取消信号，先到者胜出。取消信号优先于同时到达的数据。
        """
        if cancel_event is not None and cancel_event.is_set():
            return ReadResult(ReadStatus.CANCELED)
        if self._closed:
            return ReadResult(ReadStatus.EOF)

        read_task = asyncio.ensure_future(self.reader.readline())
        waiters: set[asyncio.Future] = {read_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if cancel_event is not None and cancel_event.is_set():
            return ReadResult(ReadStatus.CANCELED)

        try:
            data = read_task.result()
        except (OSError, asyncio.IncompleteReadError, ValueError) as e:
            # ValueError: 单行超过 StreamReader 缓冲上限
            if self._closed:
                return ReadResult(ReadStatus.EOF)
            return ReadResult(ReadStatus.ERROR, error=e)

        if not data:
            return ReadResult(ReadStatus.EOF)

        line = data.decode(WireConst.ENCODING, WireConst.ERRORS).rstrip("\r\n")
        return ReadResult(ReadStatus.DATA, line=line)

    async def write_line(self, line: str) -> None:
        """
        发送一行 (自动追加 CRLF)。

        Raises:
            NetworkError: 连接已关闭或写入失败。
        """
        if self._closed or self.writer.is_closing():
            raise NetworkError("连接已关闭")

        payload = (line + WireConst.LINE_END).encode(WireConst.ENCODING, WireConst.ERRORS)
        try:
            self.writer.write(payload)
            await self.writer.drain()
        except (OSError, RuntimeError) as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def close(self) -> None:
        """依次释放 writer、reader 与底层 transport。可重复调用。"""
        if self._closed:
            return
        self._closed = True

        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (OSError, RuntimeError) as e:
            logger.debug(f"关闭 writer 时出错: {e}")
        finally:
            try:
                self.reader.feed_eof()
            finally:
                transport = self.writer.transport
                if not transport.is_closing():
                    transport.abort()
                logger.debug("TCP 连接已关闭")
