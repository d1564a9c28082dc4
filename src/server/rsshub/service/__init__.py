# -*- coding: utf-8 -*-
"""
RSSHub 服务模块

此模块提供订阅、退订、订阅查询与同步的全部业务逻辑。
"""

from .fetch_service import RSSHubClient
from .subscribe_service import (
    get_subscribed_channels_by_group_id,
    subscribe,
    unsubscribe,
)
from .sync_service import sync_job_trigger

__all__ = [
    "RSSHubClient",
    "subscribe",
    "unsubscribe",
    "get_subscribed_channels_by_group_id",
    "sync_job_trigger",
]
