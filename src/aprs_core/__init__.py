# src/aprs_core/__init__.py
"""
aprs-core v0.1.0
基于 asyncio 的 APRS-IS 客户端核心库：登录、接收定向消息并自动应答。
"""

# 暴露核心配置
from .config import (
    AprsConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露引擎与状态
from .core import AprsIsClient

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AlreadyAuthenticatingError,
    AprsError,
    AuthError,
    ConfigError,
    ExtractError,
    NetworkError,
    ParseError,
    ProtocolError,
    StateError,
)
from .notify import DisplayNotifier, LogNotifier
from .state import ClientState, ConnectionStatus
from .utils import compute_passcode

__version__ = "0.1.0"

__all__ = [
    "AprsIsClient",
    "AprsConfig",
    "ClientState",
    "ConnectionStatus",
    "LogNotifier",
    "DisplayNotifier",
    "compute_passcode",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "AprsError",
    "ConfigError",
    "NetworkError",
    "ProtocolError",
    "ParseError",
    "ExtractError",
    "AuthError",
    "StateError",
    "AlreadyAuthenticatingError",
]
