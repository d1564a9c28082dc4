# -*- coding: utf-8 -*-
"""
RSSHub Pydantic 模型

- 公开接口：
    - `RSSContentSchema`
    - `RSSFeed`
    - `RSSChannelSchema`
    - `RSSChannelView`
    - `SubscribeResult`
    - `SyncResult`
    - `SubscribePayload`

内部方法：
- 无

文件功能：
- 提供抓取结果、频道视图以及订阅/同步结果的数据模型，供服务层返回给宿主层。
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RSSContentSchema(BaseModel):
    """订阅源中的单条内容"""

    guid: str
    hash_value: str
    title: str
    link: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RSSFeed(BaseModel):
    """抓取并解析后的订阅源"""

    title: str
    channel_url: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    contents: List[RSSContentSchema] = Field(default_factory=list)


class RSSChannelSchema(BaseModel):
    """频道信息，`id` 在持久化之前为空"""

    id: Optional[int] = None
    feed_path: str
    title: str
    channel_url: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    last_synced_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RSSChannelView(BaseModel):
    """频道与其本次携带的内容"""

    channel: RSSChannelSchema
    contents: List[RSSContentSchema] = Field(default_factory=list)


class SubscribeResult(BaseModel):
    """订阅结果"""

    channel_view: RSSChannelView
    channel_existed: bool = False
    subscription_existed: bool = False


class SyncResult(BaseModel):
    """同步结果

    `group_views` 仅包含存在新内容的群组；`failed_channels` 记录抓取失败的
    订阅路由及原因。
    """

    group_views: Dict[int, List[RSSChannelView]] = Field(default_factory=dict)
    failed_channels: Dict[str, str] = Field(default_factory=dict)


class SubscribePayload(BaseModel):
    """订阅请求体"""

    feed_path: str = Field(
        ..., min_length=1, max_length=512, description="RSSHub 订阅路由"
    )
