"""远程 CRUD API 的认证 HTTP 会话。

会话是显式传给加载器的对象，token 只保存在这里。不同 API 版本的登录
响应结构不同，因此 token 与用户信息的提取集中在一处。
"""
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from config.settings import settings

from .errors import AuthenticationError, RemoteApiError


def extract_token(payload: Any) -> Optional[str]:
    """从登录响应中取出 bearer token。

    支持的结构::

        {"token": "..."}
        {"access_token": "..."}
        {"data": {"token": "..."}}   # 或 data.access_token
    """
    if not isinstance(payload, dict):
        return None
    for key in ("token", "access_token"):
        if isinstance(payload.get(key), str) and payload[key]:
            return payload[key]
    data = payload.get("data")
    if isinstance(data, dict):
        return extract_token(data)
    return None


def extract_user(payload: Any) -> Optional[Dict[str, Any]]:
    """从登录或 ``/auth/me`` 响应中取出用户记录。"""
    if not isinstance(payload, dict):
        return None
    for key in ("usuario", "user"):
        if isinstance(payload.get(key), dict):
            return payload[key]
    data = payload.get("data")
    if isinstance(data, dict):
        return extract_user(data)
    if "email" in payload:
        return payload
    return None


class ApiSession:
    """远程 API 的 HTTP 会话。

    Attributes:
        base_url: API 根地址，例如 ``http://localhost:5000/api``。
        token: Bearer token，由 ``login`` 设置或直接传入。
        user: 最近一次登录返回的用户记录。

    Example::

        with ApiSession() as session:
            session.login("owner@example.com", "secret")
            staff = session.get_collection("barberos")
    """

    def __init__(self, base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 token: Optional[str] = None,
                 transport: Optional[httpx.BaseTransport] = None) -> None:
        self.base_url: str = base_url or settings.api_base_url
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
            transport=transport,
        )
        if token:
            self.set_token(token)

    def __enter__(self) -> "ApiSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def set_token(self, token: str) -> None:
        self.token = token
        self._client.headers["Authorization"] = f"Bearer {token}"

    def clear(self) -> None:
        """清除 token（登出）。"""
        self.token = None
        self.user = None
        self._client.headers.pop("Authorization", None)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteApiError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"{method} {path} rejected ({response.status_code})",
                status_code=response.status_code,
            )
        if response.is_error:
            raise RemoteApiError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RemoteApiError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

    def login(self, email: Optional[str] = None,
              password: Optional[str] = None) -> Dict[str, Any]:
        """登录并把 token 保存在会话上。

        Args:
            email: 账号邮箱，省略时使用 ``settings.api_email``。
            password: 账号密码，省略时使用 ``settings.api_password``。

        Returns:
            用户记录（API 未返回时为空字典）。

        Raises:
            AuthenticationError: 账号被拒绝或响应中没有 token。
        """
        payload = self._request("POST", "/auth/login", json={
            "email": email or settings.api_email,
            "password": password or settings.api_password,
        })
        token = extract_token(payload)
        if not token:
            raise AuthenticationError("Login response carried no token")
        self.set_token(token)
        self.user = extract_user(payload) or {}
        logger.info(f"Logged in to {self.base_url} as {self.user.get('email', email)}")
        return self.user

    def me(self) -> Dict[str, Any]:
        """校验当前 token 并返回用户记录。"""
        payload = self._request("GET", "/auth/me")
        user = extract_user(payload)
        if user is None:
            raise RemoteApiError("/auth/me returned no user record")
        self.user = user
        return user

    def get_collection(self, path: str) -> List[Dict[str, Any]]:
        """GET 一个集合接口。

        同时支持裸 JSON 数组和 ``{"data": [...]}``。

        Raises:
            RemoteApiError: HTTP 或传输失败，或返回的不是列表。
        """
        payload = self._request("GET", path)
        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload = payload["data"]
        if not isinstance(payload, list):
            raise RemoteApiError(f"GET {path} did not return a list")
        return payload

    def close(self) -> None:
        self._client.close()
