# File: src/aprs_core/core.py
"""
APRS-IS 客户端核心引擎 (Core Engine)

职责：
1. 资源组装：State + Connection + Config。
2. 生命周期：Connect -> Authenticate -> Dispatch -> Disconnect。
3. 消息处理：提取定向消息，调用通知接收端并回复 ack/rej。
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from .config import AprsConfig
from .exceptions import (
    AlreadyAuthenticatingError,
    AprsError,
    AuthError,
    ExtractError,
    NetworkError,
    ParseError,
    ProtocolError,
    StateError,
)
from .network import LineConnection, ReadResult, ReadStatus
from .notify import LogNotifier, MessageHandler
from .protocols import (
    AprsMessage,
    AprsPacket,
    LoginResult,
    PacketKind,
    build_ack_body,
    build_login_line,
    build_packet,
    build_reject_body,
    classify_packet,
    control_text,
    is_control_line,
    parse_login_response,
    parse_message,
    parse_packet,
)
from .state import ClientState, ConnectionStatus

logger = logging.getLogger(__name__)

# 定义回调函数类型别名：支持同步或异步函数
StatusCallback = Callable[[ConnectionStatus, str], Any | Awaitable[Any]]


class AprsIsClient:
    """APRS-IS 客户端引擎 (Async)。

    一个实例对应一条连接。连接关闭 (CLOSED) 后需要重新实例化。
    """

    def __init__(
        self,
        config: AprsConfig,
        message_handler: MessageHandler | None = None,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """初始化客户端。

        Args:
            config: 全局配置对象。
            message_handler: 通知接收端，以 (from_call, text) 调用。默认仅记录日志。
            status_callback: 初始状态回调。也可使用 add_listener 注册。
        """
        self.config = config
        self.message_handler: MessageHandler = message_handler or LogNotifier()

        self._listeners: list[StatusCallback] = []
        self._callback_tasks: set[asyncio.Task] = set()
        if status_callback:
            self.add_listener(status_callback)

        self._state = ClientState(callsign=config.callsign)
        self._conn: LineConnection | None = None
        self._cancel_event: asyncio.Event | None = None
        self._loop_task: asyncio.Task | None = None

        # 唯一的跨任务可变状态：由 authenticate 写入，由调度循环完成
        self._pending_auth: asyncio.Future | None = None
        self._authenticated = False
        self._teardown_started = False

    @property
    def state(self) -> ClientState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def server_identification(self) -> str:
        return self._state.server_identification

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    # =========================================================================
    # 连接管理
    # =========================================================================

    async def connect(
        self,
        host: str | None = None,
        port: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """建立连接并读取服务器标识行，随后在后台启动调度循环。

        Args:
            host: 服务器地址，默认使用配置。
            port: 服务器端口，默认使用配置。
            cancel_event: 连接生命周期的取消信号。置位后连接会被关闭，
                调度循环正常退出。默认新建一个。

        Raises:
            StateError: 客户端已连接或已关闭。
            ProtocolError: 第一行不是 "# " 开头的服务器标识。
            NetworkError: 连接失败、超时或在标识前断开。
            asyncio.CancelledError: 连接过程中收到取消信号。
        """
        if self._state.status != ConnectionStatus.DISCONNECTED:
            raise StateError(f"无法连接：当前状态为 {self._state.status.name}")

        host = host or self.config.server_address
        port = port or self.config.server_port
        self._cancel_event = cancel_event or asyncio.Event()

        self._update_status(ConnectionStatus.CONNECTING, f"正在连接 {host}:{port}...")

        try:
            if self._cancel_event.is_set():
                raise asyncio.CancelledError()
            self._conn = await self._until_cancelled(
                LineConnection.open(host, port, self.config.connect_timeout)
            )
            self._update_status(
                ConnectionStatus.AWAITING_IDENTIFICATION, "等待服务器标识..."
            )
            try:
                result = await asyncio.wait_for(
                    self._conn.read_line(self._cancel_event),
                    timeout=self.config.connect_timeout,
                )
            except asyncio.TimeoutError:
                raise NetworkError(
                    f"等待服务器标识超时 ({self.config.connect_timeout}s)"
                ) from None
            identification = self._read_identification(result)

        except (AprsError, asyncio.CancelledError) as e:
            if isinstance(e, AprsError):
                self._state.last_error = str(e)
                logger.error(f"连接失败: {e}")
            await self._teardown()
            raise

        self._state.server_identification = identification
        self._update_status(ConnectionStatus.CONNECTED, f"服务器: {identification}")

        self._loop_task = asyncio.create_task(
            self._dispatch_loop(), name="AprsIsDispatchLoop"
        )

    async def disconnect(self, wait_for_loop: bool = True) -> None:
        """断开连接 (外部入口)。

        Args:
            wait_for_loop: 是否等待调度循环完全退出。
                在调度循环内部调用时必须传 False，否则任务会等待自身。
        """
        await self._teardown()

        task = self._loop_task
        if not wait_for_loop or task is None:
            return
        if task is asyncio.current_task():
            logger.warning("在调度循环内部请求等待自身退出，已忽略")
            return

        await asyncio.wait({task})

    async def wait_closed(self) -> None:
        """阻塞直到调度循环退出 (取消、断开或错误)。"""
        if self._loop_task is not None:
            await asyncio.wait({self._loop_task})

    async def __aenter__(self) -> "AprsIsClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect(wait_for_loop=True)

    async def _until_cancelled(self, aw: Awaitable[Any]) -> Any:
        """[Internal] 等待 aw 完成，取消信号先到时放弃并抛出 CancelledError。"""
        assert self._cancel_event is not None
        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._cancel_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()

        if not task.done() or task.cancelled():
            raise asyncio.CancelledError()
        return task.result()

    def _cancelled_by_event(self) -> bool:
        """[Internal] 取消信号已置位，且当前任务没有被外部 cancel()。"""
        if self._cancel_event is None or not self._cancel_event.is_set():
            return False
        task = asyncio.current_task()
        return task is None or not task.cancelling()

    def _read_identification(self, result: ReadResult) -> str:
        if result.status is ReadStatus.CANCELED:
            raise asyncio.CancelledError()
        if result.status is ReadStatus.EOF:
            raise NetworkError("服务器在发送标识前关闭了连接")
        if result.status is ReadStatus.ERROR:
            raise NetworkError(f"读取服务器标识失败: {result.error}")

        if not is_control_line(result.line):
            raise ProtocolError(f"第一行应为服务器标识: {result.line!r}")
        return control_text(result.line)

    async def _teardown(self) -> None:
        """[Internal] 释放连接资源。最多执行一次，调度循环与外部调用方共用。"""
        if self._teardown_started:
            return
        self._teardown_started = True

        self._update_status(ConnectionStatus.DISCONNECTING, "正在断开连接...")
        try:
            if self._conn is not None:
                await self._conn.close()
        finally:
            self._update_status(ConnectionStatus.CLOSED, "连接已关闭")

    # =========================================================================
    # 认证
    # =========================================================================

    async def authenticate(
        self,
        callsign: str | None = None,
        passcode: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """发送登录行并等待调度循环给出认证结果。

        Args:
            callsign: 登录呼号，默认使用配置。
            passcode: 登录 Passcode，默认使用配置。
            cancel_event: 取消信号，默认使用连接的取消信号。

        Raises:
            AuthError: 服务器回复 unverified。
            AlreadyAuthenticatingError: 上一次认证尚未完成。
            StateError: 未连接或已认证。
            NetworkError: 发送失败、等待超时或连接在认证前关闭。
            asyncio.CancelledError: 等待期间收到取消信号。
        """
        if self._conn is None or not self._state.is_online:
            raise StateError("无法认证：尚未连接服务器")
        if self._state.status == ConnectionStatus.AUTHENTICATED:
            raise StateError("已认证，无需重复登录")

        future = asyncio.get_running_loop().create_future()
        if not self._install_pending_auth(future):
            raise AlreadyAuthenticatingError("authenticate 已被调用且尚未完成")

        callsign = callsign or self.config.callsign
        passcode = self.config.passcode if passcode is None else passcode
        cancel = cancel_event or self._cancel_event
        assert cancel is not None

        try:
            self._state.callsign = callsign
            self._update_status(ConnectionStatus.AUTHENTICATING, f"正在以 {callsign} 登录...")
            await self._conn.write_line(
                build_login_line(callsign, passcode, self.config.filter)
            )

            waiter = asyncio.ensure_future(cancel.wait())
            try:
                await asyncio.wait(
                    {future, waiter},
                    timeout=self.config.login_timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                waiter.cancel()

            if not future.done():
                if cancel.is_set():
                    future.cancel()
                else:
                    raise NetworkError(f"等待登录响应超时 ({self.config.login_timeout}s)")

            await future

        finally:
            if not future.done():
                future.cancel()
            if self._pending_auth is future:
                self._pending_auth = None

    def _install_pending_auth(self, future: asyncio.Future) -> bool:
        """[Internal] 仅当槽位为空时写入 future (检查与写入之间没有 await)。"""
        if self._pending_auth is not None:
            return False
        self._pending_auth = future
        return True

    def _handle_pre_auth_line(self, line: str) -> None:
        """[Internal] 认证完成前收到的行只用于判定 logresp。"""
        future = self._pending_auth
        callsign = self._state.callsign

        result = None
        if future is not None and not future.done():
            result = parse_login_response(line, callsign)

        if result is LoginResult.VERIFIED:
            self._authenticated = True
            self._update_status(ConnectionStatus.AUTHENTICATED, f"已认证为 {callsign}")
            future.set_result(None)
        elif result is LoginResult.UNVERIFIED:
            error = AuthError(f"认证被拒绝: 呼号 {callsign} 与 Passcode 不匹配", callsign)
            self._state.last_error = str(error)
            self._update_status(ConnectionStatus.CONNECTED, str(error))
            future.set_exception(error)
        else:
            logger.warning(f"意外的认证前消息: {line}")

    def _abandon_pending_auth(self) -> None:
        """[Internal] 调度循环退出时结束仍在等待的认证。"""
        future = self._pending_auth
        if future is None or future.done():
            return
        if self._cancel_event is not None and self._cancel_event.is_set():
            future.cancel()
        else:
            future.set_exception(NetworkError("连接在认证完成前关闭"))

    # =========================================================================
    # 调度循环
    # =========================================================================

    async def _dispatch_loop(self) -> None:
        """[Internal] 后台调度循环：逐行读取并按认证状态分发。"""
        assert self._conn is not None

        try:
            while True:
                result = await self._conn.read_line(self._cancel_event)

                if result.status is ReadStatus.DATA:
                    if not self._authenticated:
                        self._handle_pre_auth_line(result.line)
                    else:
                        await self._handle_post_auth_line(result.line)
                    continue

                if result.status is ReadStatus.CANCELED:
                    logger.debug("调度循环收到取消信号")
                elif result.status is ReadStatus.EOF:
                    if self._teardown_started:
                        logger.debug("连接已由本地关闭")
                    else:
                        logger.info("服务器关闭了连接")
                else:
                    self._state.last_error = f"读取失败: {result.error}"
                    logger.error(self._state.last_error)
                break

        except asyncio.CancelledError:
            if not self._cancelled_by_event():
                raise
            logger.debug("处理消息期间收到取消信号")

        except NetworkError as e:
            if self._teardown_started or self._cancelled_by_event():
                logger.debug(f"本地关闭后写入失败: {e}")
            else:
                self._state.last_error = str(e)
                logger.error(f"调度循环中断: {e}")

        finally:
            self._abandon_pending_auth()
            # 在循环内部，不能等待自身
            await self.disconnect(wait_for_loop=False)

    async def _handle_post_auth_line(self, line: str) -> None:
        """[Internal] 认证完成后的行：心跳、控制消息或数据包。"""
        if is_control_line(line):
            if control_text(line) == self._state.server_identification:
                self._state.pings += 1
                logger.debug("收到服务器心跳")
            else:
                logger.warning(f"未处理的控制消息: '{line}'")
            return

        try:
            packet = parse_packet(line)
        except ParseError as e:
            self._state.packets_dropped += 1
            logger.warning(f"未处理的数据包: {e}")
            return

        if not packet.body_text:
            self._state.packets_dropped += 1
            logger.warning(f"消息体为空: '{line}'")
            return

        kind = classify_packet(packet)
        if kind is PacketKind.USER_MESSAGE:
            await self._handle_message(packet)
        else:
            self._state.packets_dropped += 1
            logger.debug(f"不支持的数据包类型: '{packet.data_type}'")

    async def _handle_message(self, packet: AprsPacket) -> None:
        """[Internal] 处理定向消息：调用通知接收端，再回复 ack 或 rej。"""
        try:
            message = parse_message(packet)
        except ExtractError as e:
            self._state.packets_dropped += 1
            logger.warning(str(e))
            return

        if message.addressee != self._state.callsign:
            logger.info(f"收到发给其他呼号 '{message.addressee}' 的消息，忽略")
            return

        from_call = packet.header.from_call
        logger.info(f"来自 {from_call} 的消息: {message.text}")

        try:
            outcome = self.message_handler(from_call, message.text)
            if inspect.isawaitable(outcome):
                outcome = await self._until_cancelled(outcome)
            accepted = outcome is not False
            if not accepted:
                logger.error(f"通知接收端处理失败 (来自 {from_call}, ID {message.msg_id})")
        except Exception:
            logger.exception("处理 APRS 消息时发生未处理的异常")
            accepted = False

        if self._teardown_started:
            logger.info(f"连接已关闭，不再回复消息 (ID {message.msg_id})")
            return

        if accepted:
            await self._acknowledge(packet, message)
        else:
            await self._reject(packet, message)

    # 注意: APRS 中所有呼号字段都需要用尾部空格补齐到 9 位

    async def _acknowledge(self, packet: AprsPacket, message: AprsMessage) -> None:
        await self._send_packet(build_ack_body(packet.header.from_call, message.msg_id))
        self._state.messages_acked += 1

    async def _reject(self, packet: AprsPacket, message: AprsMessage) -> None:
        await self._send_packet(build_reject_body(packet.header.from_call, message.msg_id))
        self._state.messages_rejected += 1

    async def _send_packet(self, body_text: str) -> None:
        if self._conn is None:
            raise NetworkError("连接未建立")
        await self._until_cancelled(
            self._conn.write_line(build_packet(self._state.callsign, body_text))
        )

    # =========================================================================
    # 状态通知
    # =========================================================================

    def _update_status(self, status: ConnectionStatus, msg: str) -> None:
        """更新内部状态并异步触发所有回调。"""
        self._state.status = status
        logger.info(f"[{status.name}] {msg}")

        for callback in self._listeners:
            try:
                if inspect.iscoroutinefunction(callback):
                    task = asyncio.create_task(callback(status, msg))
                    self._callback_tasks.add(task)
                    task.add_done_callback(self._callback_tasks.discard)
                else:
                    loop = asyncio.get_running_loop()
                    loop.call_soon(callback, status, msg)
            except RuntimeError:
                # 应对 loop 尚未运行或已关闭的边缘情况
                pass
