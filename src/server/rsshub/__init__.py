# -*- coding: utf-8 -*-
"""
RSSHub 订阅模块入口

公开接口：
- `rsshub_config`
- `router`
- `RSSHubDomain`
- `RSSHubClient`
- `subscribe`
- `unsubscribe`
- `get_subscribed_channels_by_group_id`
- `sync_job_trigger`

内部方法：
- 无

文件功能：
- 暴露订阅模块的主要能力，供宿主应用加载并在其他模块复用服务层接口。
"""

from typing import Any

from .config import rsshub_config

__all__ = [
    "rsshub_config",
    "router",
    "RSSHubDomain",
    "RSSHubClient",
    "subscribe",
    "unsubscribe",
    "get_subscribed_channels_by_group_id",
    "sync_job_trigger",
]


def __getattr__(name: str) -> Any:
    """按需加载子模块，避免导入时出现循环依赖。"""
    if name == "router":
        from .router import router as value
    elif name == "RSSHubDomain":
        from .domain import RSSHubDomain as value
    elif name in {
        "RSSHubClient",
        "subscribe",
        "unsubscribe",
        "get_subscribed_channels_by_group_id",
        "sync_job_trigger",
    }:
        from . import service as service_module

        value = getattr(service_module, name)
    else:
        raise AttributeError(f"module 'src.server.rsshub' has no attribute '{name}'")
    return value


def __dir__() -> list[str]:
    return sorted(__all__)
