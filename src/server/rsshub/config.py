# -*- coding: utf-8 -*-
"""
RSSHub 模块配置

公开接口：
- `rsshub_config`
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class RSSHubConfig(BaseSettings):
    """RSSHub 模块配置"""

    # 镜像配置
    rsshub_mirrors: List[str] = Field(
        default=[
            "https://rsshub.rssforever.com",
            "https://rss.injahow.cn",
        ],
        title="RSSHub 镜像列表",
        description="按优先级排列的 RSSHub 镜像地址，抓取失败时依次切换",
    )

    # HTTP 请求配置
    rsshub_http_timeout: float = Field(
        default=20.0,
        title="HTTP 请求超时时间",
        description="单次订阅源抓取请求的超时时间（秒）",
    )

    rsshub_user_agent: str = Field(
        default="RSSHubSubscriber/0.1",
        title="请求 User-Agent",
        description="抓取订阅源时携带的 User-Agent",
    )

    # 存储配置
    rsshub_database_url: str = Field(
        default="sqlite:///./rsshub.db",
        title="数据库地址",
        description="SQLAlchemy 数据库连接串",
    )

    # 同步配置
    rsshub_max_concurrent_fetches: int = Field(
        default=5,
        title="最大并发拉取数",
        description="同步时同时执行的最大抓取任务数",
    )

    rsshub_summary_max_length: int = Field(
        default=200,
        title="摘要长度上限",
        description="从正文提取纯文本摘要时保留的最大字符数",
    )


rsshub_config = RSSHubConfig()
