# -*- coding: utf-8 -*-
"""
RSSHub 领域入口

公开接口：
- `RSSHubDomain`

文件功能：
- 组合注入的数据库句柄与抓取客户端，为宿主层提供订阅、退订、查询与同步四个操作，
  每次调用使用独立的数据库会话。
"""

from __future__ import annotations

from typing import List

from src.server.database import Database
from .schemas import RSSChannelView, SubscribeResult, SyncResult
from .service import (
    RSSHubClient,
    get_subscribed_channels_by_group_id,
    subscribe,
    sync_job_trigger,
    unsubscribe,
)


class RSSHubDomain:
    """订阅领域服务，数据库与客户端的生命周期由构造方负责。"""

    def __init__(self, database: Database, client: RSSHubClient) -> None:
        self.database = database
        self.client = client

    def subscribe(
        self, group_id: int, feed_path: str, *, timeout: float | None = None
    ) -> SubscribeResult:
        with self.database.session() as db:
            return subscribe(db, self.client, group_id, feed_path, timeout=timeout)

    def unsubscribe(self, group_id: int, feed_path: str) -> None:
        with self.database.session() as db:
            unsubscribe(db, group_id, feed_path)

    def get_subscribed_channels_by_group_id(
        self, group_id: int
    ) -> List[RSSChannelView]:
        with self.database.session() as db:
            return get_subscribed_channels_by_group_id(db, group_id)

    def sync_job_trigger(self, *, timeout: float | None = None) -> SyncResult:
        with self.database.session() as db:
            return sync_job_trigger(db, self.client, timeout=timeout)
