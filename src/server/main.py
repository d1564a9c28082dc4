# -*- coding: utf-8 -*-
"""
应用入口

公开接口：
- `create_app`

文件功能：
- 构建 FastAPI 应用，在生命周期内创建并释放数据库句柄与订阅抓取客户端。
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from loguru import logger

from src.server.database import Database
from src.server.rsshub.config import rsshub_config
from src.server.rsshub.router import router as rsshub_router
from src.server.rsshub.service import RSSHubClient


def create_app(
    database: Database | None = None, client: RSSHubClient | None = None
) -> FastAPI:
    """创建应用，未传入的依赖按配置构建。"""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db_handle = database or Database(rsshub_config.rsshub_database_url)
        rsshub_client = client or RSSHubClient()
        db_handle.init_db()
        app.state.database = db_handle
        app.state.rsshub_client = rsshub_client
        logger.info("应用启动完成，镜像：{}", rsshub_client.mirrors)
        try:
            yield
        finally:
            rsshub_client.close()
            db_handle.close()

    app = FastAPI(title="RSSHub Subscriber", lifespan=lifespan)
    app.include_router(rsshub_router)
    return app
