# -*- coding: utf-8 -*-
"""
DAO 基类

公开接口：
- `BaseDAO`

文件功能：
- 持有数据库会话，并把底层 SQLAlchemy 异常统一转换为领域存储错误。
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.server.rsshub.exceptions import StorageError


class BaseDAO:
    def __init__(self, db_session: Session) -> None:
        self.db_session = db_session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """执行数据库操作，失败时回滚并抛出 `StorageError`。"""
        try:
            yield
        except SQLAlchemyError as exc:
            self.db_session.rollback()
            logger.error("数据库操作失败：action={}, error={}", action, exc)
            raise StorageError(f"数据库错误：{action}") from exc
