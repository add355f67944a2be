"""数据库连接与基础设施管理。

本模块负责本地快照库的底层基础设施，包括：
- 数据库引擎创建（SQLite 需要关闭线程检查）
- 会话（Session）管理
- 数据库表创建

本模块不包含任何业务逻辑，仅提供数据库基础操作。
"""
import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from .models import Base
from config.settings import settings


class DatabaseConnection:
    """数据库连接管理器。

    负责同步引擎的创建和会话管理。报表核心是同步的，本地库只作为
    远程 API 的离线快照，因此不提供异步引擎。

    Attributes:
        database_url: 数据库连接URL。
        engine: SQLAlchemy 引擎对象。
        SessionLocal: 会话工厂。

    Example:
        ```python
        conn = DatabaseConnection("sqlite:///data/snapshot.db")

        # 使用默认配置
        conn = DatabaseConnection()
        ```
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库连接。

        Args:
            database_url: 数据库连接URL，如果为None则使用settings中的配置。
        """
        self.database_url: str = database_url or settings.database_url

        connect_args = {}
        if self.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            # SQLite 不会自动创建数据库文件所在目录
            db_path = make_url(self.database_url).database
            if db_path and db_path != ":memory:":
                os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.engine = create_engine(
            self.database_url, echo=False, connect_args=connect_args
        )
        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False,
            expire_on_commit=False
        )

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.SessionLocal()

    def close(self) -> None:
        """关闭数据库连接，释放连接池中的所有连接。"""
        if self.engine is not None:
            self.engine.dispose()
