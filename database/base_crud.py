"""通用 CRUD 基类。

所有仓库继承 BaseCRUD，获得按模型的通用增删改查能力。每个方法都接受
可选的外部会话：传入时在该会话中执行且不提交（由调用方控制事务），
否则自行开启会话并提交。
"""
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from .connection import DatabaseConnection


class BaseCRUD:
    """通用 CRUD 操作。

    Attributes:
        conn: 数据库连接管理器。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    def _run(self, work, session: Optional[Session] = None,
             commit: bool = False) -> Any:
        if session is not None:
            result = work(session)
            session.flush()
            return result
        with self._get_session() as sess:
            result = work(sess)
            if commit:
                sess.commit()
            return result

    def create(self, model: Type, session: Optional[Session] = None,
               **fields) -> Any:
        """新建一条记录并返回 ORM 对象。"""
        def _do(sess):
            obj = model(**fields)
            sess.add(obj)
            sess.flush()
            sess.refresh(obj)
            return obj
        return self._run(_do, session, commit=True)

    def get_by_id(self, model: Type, obj_id: int,
                  session: Optional[Session] = None) -> Optional[Any]:
        """按主键查询，不存在返回 None。"""
        return self._run(lambda sess: sess.get(model, obj_id), session)

    def get_all(self, model: Type, filters: Optional[Dict[str, Any]] = None,
                session: Optional[Session] = None) -> List[Any]:
        """查询全部记录（按主键排序），可按字段等值过滤。

        Args:
            model: ORM 模型类。
            filters: 字段名到值的等值过滤条件。
        """
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            return query.order_by(model.id).all()
        return self._run(_query, session)

    def update_by_id(self, model: Type, obj_id: int,
                     session: Optional[Session] = None,
                     **fields) -> Optional[Any]:
        """按主键更新字段，不存在返回 None。"""
        def _do(sess):
            obj = sess.get(model, obj_id)
            if obj is None:
                return None
            for key, value in fields.items():
                setattr(obj, key, value)
            sess.flush()
            sess.refresh(obj)
            return obj
        return self._run(_do, session, commit=True)

    def delete_by_id(self, model: Type, obj_id: int,
                     session: Optional[Session] = None) -> bool:
        """按主键删除，返回是否删除了记录。"""
        def _do(sess):
            obj = sess.get(model, obj_id)
            if obj is None:
                return False
            sess.delete(obj)
            return True
        return self._run(_do, session, commit=True)

    def count(self, model: Type, filters: Optional[Dict[str, Any]] = None,
              session: Optional[Session] = None) -> int:
        def _query(sess):
            query = sess.query(model)
            if filters:
                query = query.filter_by(**filters)
            return query.count()
        return self._run(_query, session)
