# File: src/aprs_core/exceptions.py
"""
APRS-IS 客户端核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/守护进程）能进行精细的错误处理。
"""


class AprsError(Exception):
    """aprs-core 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 aprs-core 抛出的已知错误。
    """

    pass


class ConfigError(AprsError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 callsign)。
    2. 字段格式错误 (如端口不是整数、呼号过长)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(AprsError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. TCP 连接失败或超时。
    2. 读写过程中连接被重置。
    3. 登录响应等待超时。

    注意: 本库不会自动重试，重试/退避策略属于上层调用者。
    """

    pass


class ProtocolError(AprsError):
    """协议交互错误 (逻辑级别)。

    最典型的场景是连接建立后服务器发出的第一行不是 "# " 开头的标识行，
    此时连接尝试失败。
    """

    pass


class ParseError(ProtocolError):
    """单行数据包解析失败 (缺少 ':' 或 '>')。

    非致命：调度循环记录日志后丢弃该行。
    """

    pass


class ExtractError(ProtocolError):
    """消息体提取失败 (缺少文本分隔符或消息 ID)。

    非致命：调度循环记录日志后丢弃该包。
    """

    pass


class AuthError(AprsError):
    """认证被拒绝 (服务器回复 unverified)。

    这通常意味着呼号与 Passcode 不匹配，需要用户干预，
    上层调用者应将其视为终止条件而不是重试。
    """

    def __init__(self, message: str, callsign: str | None = None) -> None:
        """初始化认证错误。

        Args:
            message: 错误描述信息。
            callsign: 被拒绝的呼号。
        """
        super().__init__(message)
        self.callsign = callsign


class StateError(AprsError):
    """状态机错误 (FSM Violation)。

    触发场景:
    1. 未连接时尝试认证。
    2. 已连接时重复调用 connect。
    """

    pass


class AlreadyAuthenticatingError(StateError):
    """上一次 authenticate 尚未完成时再次调用。"""

    pass
