# -*- coding: utf-8 -*-
"""
RSSHub 订阅服务

功能：
- 群组订阅、退订频道，查询群组已订阅的频道

公开接口：
- `subscribe`
- `unsubscribe`
- `get_subscribed_channels_by_group_id`

内部方法：
- `_normalize_feed_path`
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from loguru import logger
from sqlalchemy.orm import Session

from ..dao import RSSChannelDAO, RSSContentDAO, RSSSubscribeDAO
from ..exceptions import FetchError, NotFoundError, StorageError
from ..schemas import RSSChannelSchema, RSSChannelView, SubscribeResult
from .fetch_service import RSSHubClient
from .utils import _to_channel_view, _to_stored_channel_view


def subscribe(
    db: Session,
    client: RSSHubClient,
    group_id: int,
    feed_path: str,
    *,
    timeout: float | None = None,
) -> SubscribeResult:
    """群组订阅频道。

    先抓取验证订阅源，抓取失败时不写入任何数据。新频道写入频道信息与内容快照，
    已有频道只刷新标题等信息；订阅关系已存在时直接返回，不重复写入。
    """
    feed_path = _normalize_feed_path(feed_path)
    feed = client.fetch_feed_with_fallback(feed_path, timeout=timeout)
    logger.info(
        "[rsshub subscribe] 抓取成功：group_id={}, feed_path={}, 条目={}",
        group_id,
        feed_path,
        len(feed.contents),
    )
    channel_view = _to_channel_view(feed_path, feed)

    channel_dao = RSSChannelDAO(db)
    content_dao = RSSContentDAO(db)
    subscribe_dao = RSSSubscribeDAO(db)
    try:
        channel_existed = channel_dao.get_by_feed_path(feed_path) is not None
        if channel_existed:
            # 已有频道只刷新频道信息，快照由同步负责更新
            channel = channel_dao.upsert_channel(channel_view.channel)
        else:
            channel = channel_dao.upsert_channel(
                channel_view.channel, synced_at=datetime.now(timezone.utc)
            )
            content_dao.bulk_insert(channel.id, channel_view.contents)
        channel_view.channel = RSSChannelSchema.model_validate(channel)
        logger.info(
            "[rsshub subscribe] 频道已保存：channel_id={}, existed={}",
            channel.id,
            channel_existed,
        )

        if subscribe_dao.get_by_group_and_channel(group_id, channel.id) is not None:
            logger.info(
                "[rsshub subscribe] 订阅已存在：group_id={}, channel_id={}",
                group_id,
                channel.id,
            )
            return SubscribeResult(
                channel_view=channel_view,
                channel_existed=channel_existed,
                subscription_existed=True,
            )
        subscribe_dao.create_subscribe(group_id, channel.id)
    except StorageError as exc:
        exc.feed_path, exc.group_id = feed_path, group_id
        logger.error(
            "[rsshub subscribe] 存储失败：group_id={}, feed_path={}, error={}",
            group_id,
            feed_path,
            exc,
        )
        raise

    logger.info(
        "[rsshub subscribe] 订阅成功：group_id={}, channel_id={}",
        group_id,
        channel.id,
    )
    return SubscribeResult(
        channel_view=channel_view,
        channel_existed=channel_existed,
        subscription_existed=False,
    )


def unsubscribe(db: Session, group_id: int, feed_path: str) -> None:
    """群组退订频道，不存在订阅关系时抛出 `NotFoundError`。"""
    feed_path = _normalize_feed_path(feed_path)
    subscribe_dao = RSSSubscribeDAO(db)
    try:
        channel, subscribed = subscribe_dao.get_channel_if_subscribed(
            group_id, feed_path
        )
        if channel is None or not subscribed:
            logger.info(
                "[rsshub unsubscribe] 订阅不存在：group_id={}, feed_path={}",
                group_id,
                feed_path,
            )
            raise NotFoundError(
                "频道不存在或未订阅", feed_path=feed_path, group_id=group_id
            )
        subscribe_dao.delete_subscribe(group_id, channel.id)
    except StorageError as exc:
        exc.feed_path, exc.group_id = feed_path, group_id
        logger.error(
            "[rsshub unsubscribe] 存储失败：group_id={}, feed_path={}, error={}",
            group_id,
            feed_path,
            exc,
        )
        raise
    logger.info(
        "[rsshub unsubscribe] 退订成功：group_id={}, channel_id={}",
        group_id,
        channel.id,
    )


def get_subscribed_channels_by_group_id(
    db: Session, group_id: int
) -> List[RSSChannelView]:
    """获取群组已订阅的频道，只读取存储状态，不重新抓取。"""
    try:
        channels = RSSChannelDAO(db).list_subscribed_by_group(group_id)
    except StorageError as exc:
        exc.group_id = group_id
        logger.error(
            "[rsshub channels] 查询订阅失败：group_id={}, error={}", group_id, exc
        )
        raise
    logger.debug(
        "[rsshub channels] 查询订阅成功：group_id={}, 频道数={}",
        group_id,
        len(channels),
    )
    return [_to_stored_channel_view(channel) for channel in channels]


def _normalize_feed_path(feed_path: str) -> str:
    """去除首尾空白并统一以 `/` 开头。"""
    normalized = (feed_path or "").strip()
    if not normalized:
        raise FetchError("订阅路由不能为空", feed_path=feed_path)
    return "/" + normalized.lstrip("/")
