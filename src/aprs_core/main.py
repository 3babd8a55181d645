# src/aprs_core/main.py
"""
命令行入口：python -m aprs_core.main

配置加载顺序:
1. 当前目录的 .env (写入环境变量)。
2. 当前目录的 config.toml (存在时优先)。
3. APRS_ 前缀的环境变量。

收到的消息仅记录日志 (LogNotifier)。显示设备推送 (DisplayNotifier)
需要注入发布函数，见 aprs_core.notify。
"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .config import AprsConfig, load_config_from_env, load_config_from_toml
from .core import AprsIsClient
from .exceptions import AuthError, ConfigError, NetworkError, ProtocolError
from .state import ConnectionStatus

logger = logging.getLogger("AprsCLI")


def load_cli_config() -> AprsConfig:
    """
    为 CLI 工具加载配置。
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)
        logger.debug(f"已加载配置文件: {env_path}")

    toml_path = Path.cwd() / "config.toml"
    if toml_path.exists():
        logger.info(f"发现配置文件: {toml_path}")
        return load_config_from_toml(toml_path)

    return load_config_from_env()


def on_status_change(status: ConnectionStatus, msg: str) -> None:
    if status is ConnectionStatus.CLOSED:
        logger.info("连接已结束。")


async def run(config: AprsConfig) -> int:
    """连接、认证并持续运行，直到收到 SIGINT/SIGTERM 或连接断开。"""
    cancel_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except NotImplementedError:
            # Windows 不支持 add_signal_handler，依赖 KeyboardInterrupt
            pass

    client = AprsIsClient(config, status_callback=on_status_change)

    try:
        await client.connect(cancel_event=cancel_event)
        await client.authenticate()
        logger.info("认证完成，正在接收消息。按 Ctrl+C 退出。")
        await client.wait_closed()
        return 0

    except AuthError as ae:
        # 凭据错误不会自行恢复，直接退出
        logger.error(f"认证被拒绝: {ae}")
        return 2
    except (NetworkError, ProtocolError) as e:
        logger.error(f"连接异常: {e}")
        return 1
    except asyncio.CancelledError:
        if not cancel_event.is_set():
            raise
        logger.info("收到中断信号，正在退出...")
        return 0
    finally:
        await client.disconnect(wait_for_loop=True)


def main() -> None:
    """
    程序主入口点。
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        datefmt="%H:%M:%S",
    )
    logger.info(f"aprs-core v{__version__}")

    try:
        config = load_cli_config()
    except ConfigError as ce:
        logger.critical(f"配置错误: {ce}")
        sys.exit(1)

    logger.debug(f"配置加载完成: {config!r}")

    try:
        code = asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("收到用户中断信号 (Ctrl+C)，已退出。")
        code = 0

    sys.exit(code)


# 程序入口
if __name__ == "__main__":
    main()
