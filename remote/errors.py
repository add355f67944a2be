"""加载端错误（远程 API 与记录标准化）。"""
from typing import Any, Optional


class RemoteError(Exception):
    """加载错误基类。"""


class RemoteApiError(RemoteError):
    """远程 API 请求失败、不可达或返回了非预期的结构。

    Attributes:
        status_code: 收到响应时的 HTTP 状态码。
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(RemoteApiError):
    """登录被拒绝，或响应中没有 token。"""


class NormalizationError(RemoteError):
    """原始记录无法映射为记录模型。

    Attributes:
        kind: 记录类型（``appointment``、``staff``、``service``、``client``）。
        raw_id: API 返回的记录 ID（如果有）。
    """

    def __init__(self, kind: str, raw_id: Any, reason: str) -> None:
        super().__init__(f"Malformed {kind} record {raw_id!r}: {reason}")
        self.kind = kind
        self.raw_id = raw_id
        self.reason = reason
