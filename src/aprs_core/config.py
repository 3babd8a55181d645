"""
APRS-IS 客户端核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError
from .protocols.constants import LoginConst, PacketConst

logger = logging.getLogger(__name__)

DEFAULT_SERVER = "rotate.aprs2.net"
DEFAULT_PORT = 14580


@dataclass(frozen=True)
class AprsConfig:
    """AprsIsClient 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        callsign: 登录呼号 (大写，最长 9 个字符，可带 SSID)。
        passcode: 登录 Passcode，"-1" 表示只读登录。
        server_address: APRS-IS 服务器地址。
            (noam / soam / euro / asia / aunz).aprs2.net 为区域服务器。
        server_port: 服务器端口 (过滤端口通常为 14580)。
        filter: 可选的服务器端过滤表达式，例如 "m/50"。
        connect_timeout: TCP 连接与标识行等待超时 (秒)。
        login_timeout: logresp 等待超时 (秒)。
    """

    callsign: str
    passcode: str
    server_address: str = DEFAULT_SERVER
    server_port: int = DEFAULT_PORT
    filter: str | None = None
    connect_timeout: float = 10.0
    login_timeout: float = 30.0

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏 Passcode，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.server_address}:{self.server_port}, "
            f"callsign='{self.callsign}', "
            f"passcode='******', "
            f"filter={self.filter!r}>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> AprsConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        AprsConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:
        # --- 内部辅助函数 ---
        def _req(key: str) -> Any:
            """获取必要字段，缺失则报错"""
            if key not in raw_data or raw_data[key] in (None, ""):
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return raw_data[key]

        def _get(key: str, default: Any) -> Any:
            """获取可选字段，缺失则使用默认值"""
            val = raw_data.get(key)
            return default if val in (None, "") else val

        def _to_callsign(key: str) -> str:
            val = str(_req(key)).strip().upper()
            if len(val) > PacketConst.CALLSIGN_WIDTH or " " in val:
                raise ConfigError(f"呼号格式无效 '{key}': {val}")
            return val

        def _to_passcode(key: str) -> str:
            val = str(_get(key, LoginConst.RECEIVE_ONLY_PASSCODE)).strip()
            try:
                int(val)
            except ValueError:
                raise ConfigError(f"Passcode 必须为整数 '{key}': ******")
            return val

        def _to_port(key: str) -> int:
            val = _get(key, DEFAULT_PORT)
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 < port < 65536:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_timeout(key: str, default: float) -> float:
            val = _get(key, default)
            try:
                timeout = float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"超时格式无效 '{key}': {val}")
            if timeout <= 0:
                raise ConfigError(f"超时必须为正数 '{key}': {timeout}")
            return timeout

        def _to_optional_str(key: str) -> str | None:
            val = _get(key, None)
            return None if val is None else str(val)

        # --- 构建对象 ---
        return AprsConfig(
            callsign=_to_callsign("callsign"),
            passcode=_to_passcode("passcode"),
            server_address=str(_get("server", DEFAULT_SERVER)),
            server_port=_to_port("port"),
            filter=_to_optional_str("filter"),
            connect_timeout=_to_timeout("connect_timeout", 10.0),
            login_timeout=_to_timeout("login_timeout", 30.0),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> AprsConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [aprs]: 单一配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        AprsConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]

    elif "aprs" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [aprs] 节，忽略 profile='{profile}'。")
        raw_config = data["aprs"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env() -> AprsConfig:
    """从环境变量加载配置。

    自动读取所有以 `APRS_` 开头的相关环境变量，并映射到配置字段。
    例如: `APRS_CALLSIGN` -> `callsign`。

    Returns:
        AprsConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    # 字段映射表 (Config Field -> Env Suffix)
    env_map = {
        "callsign": "CALLSIGN",
        "passcode": "PASSCODE",
        "server": "SERVER",
        "port": "PORT",
        "filter": "FILTER",
        "connect_timeout": "CONNECT_TIMEOUT",
        "login_timeout": "LOGIN_TIMEOUT",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"APRS_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 APRS_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
