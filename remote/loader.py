"""从远程 API 加载快照。

四个集合在一次加载中全部获取，保证得到的 ``Snapshot`` 内部一致。
格式错误的记录会被丢弃并告警，保存在 ``Snapshot.rejected`` 中；
API 失败则中止加载。
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger

from reports.models import RejectedRecord, Snapshot

from .errors import NormalizationError
from .normalize import (
    normalize_appointment, normalize_client, normalize_service,
    normalize_staff_member,
)
from .session import ApiSession

DEFAULT_PATHS: Dict[str, str] = {
    "appointments": "/citas",
    "staff_members": "/barberos",
    "services": "/servicios",
    "clients": "/clientes",
}

_NORMALIZERS: Dict[str, Callable[[Any], Any]] = {
    "appointments": normalize_appointment,
    "staff_members": normalize_staff_member,
    "services": normalize_service,
    "clients": normalize_client,
}


class SnapshotLoader:
    """通过已认证的 ``ApiSession`` 构建 ``Snapshot``。

    Args:
        session: 所有请求使用的会话。除非 API 无需认证，否则必须已登录。
        paths: 覆盖集合接口路径，键与 ``DEFAULT_PATHS`` 相同。
    """

    def __init__(self, session: ApiSession, paths: Optional[Dict[str, str]] = None) -> None:
        unknown = set(paths or {}) - set(DEFAULT_PATHS)
        if unknown:
            raise ValueError(f"Unknown collections: {', '.join(sorted(unknown))}")
        self.session = session
        self.paths = {**DEFAULT_PATHS, **(paths or {})}

    def _load_collection(self, name: str,
                         rejected: List[RejectedRecord]) -> Tuple[Any, ...]:
        normalize = _NORMALIZERS[name]
        records = []
        for raw in self.session.get_collection(self.paths[name]):
            try:
                records.append(normalize(raw))
            except NormalizationError as e:
                logger.warning(str(e))
                rejected.append(RejectedRecord(e.kind, e.raw_id, e.reason))
        return tuple(records)

    def load(self) -> Snapshot:
        """获取并标准化所有集合。

        Raises:
            RemoteApiError: 任一集合请求失败。
        """
        rejected: List[RejectedRecord] = []
        collections = {name: self._load_collection(name, rejected) for name in DEFAULT_PATHS}
        snapshot = Snapshot(
            loaded_at=datetime.now(),
            rejected=tuple(rejected),
            **collections,
        )
        logger.info(f"Loaded remote snapshot: {snapshot.counts()}")
        return snapshot
