# -*- coding: utf-8 -*-
"""
数据库连接

公开接口：
- `Base`
- `Database`

内部方法：
- 无

文件功能：
- 定义 ORM 基类，并提供由调用方持有的数据库句柄，负责建表、会话创建与连接释放。
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


class Database:
    """数据库句柄，生命周期由构造方管理。"""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, **_engine_options(url))
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def init_db(self) -> None:
        """创建全部数据表。"""
        # 注册模型，确保元数据完整
        from src.server.rsshub import models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("数据库初始化完成：url={}", self.url)

    def new_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """提供一次性会话，退出时自动关闭。"""
        db = self.new_session()
        try:
            yield db
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("数据库连接已释放：url={}", self.url)


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    options: dict = {"connect_args": {"check_same_thread": False}}
    # 内存数据库需要共享同一连接
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options
