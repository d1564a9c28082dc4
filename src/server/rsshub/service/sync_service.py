# -*- coding: utf-8 -*-
"""
RSSHub 同步服务

功能：
- 重新抓取全部频道，与内容快照比对，按群组汇总新增内容

公开接口：
- `sync_job_trigger`

内部方法：
- `_fetch_all`
- `_diff_new_contents`
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence, Set, Union

from loguru import logger
from sqlalchemy.orm import Session

from ..config import rsshub_config
from ..dao import RSSChannelDAO, RSSContentDAO, RSSSubscribeDAO
from ..exceptions import FetchError, StorageError
from ..models import RSSChannel
from ..schemas import (
    RSSChannelSchema,
    RSSChannelView,
    RSSContentSchema,
    RSSFeed,
    SyncResult,
)
from .fetch_service import RSSHubClient
from .utils import _sort_oldest_first, _to_channel_view

MAX_CONCURRENT_FETCHES = rsshub_config.rsshub_max_concurrent_fetches


def sync_job_trigger(
    db: Session,
    client: RSSHubClient,
    *,
    timeout: float | None = None,
    max_workers: int = MAX_CONCURRENT_FETCHES,
) -> SyncResult:
    """同步全部频道，返回每个群组的新增内容。

    抓取在线程池中并发进行，比对与快照写入在当前会话中逐个频道顺序执行。
    单个频道抓取失败或存储失败只记录在 `failed_channels` 中，不影响其他频道。
    快照一旦写入，对应的新增内容一定出现在本次结果中。
    从未同步过的频道只建立快照基线，不产生新增内容。
    """
    channel_dao = RSSChannelDAO(db)
    content_dao = RSSContentDAO(db)
    subscribe_dao = RSSSubscribeDAO(db)

    result = SyncResult()
    channels = channel_dao.list_all()
    if not channels:
        logger.debug("[rsshub sync] 当前没有需要同步的频道")
        return result

    fetched = _fetch_all(client, channels, timeout, max_workers)

    for channel in channels:
        feed_path = channel.feed_path
        outcome = fetched[feed_path]
        if isinstance(outcome, Exception):
            result.failed_channels[feed_path] = str(outcome)
            continue

        channel_schema = RSSChannelSchema.model_validate(channel)
        is_baseline = channel_schema.last_synced_at is None
        try:
            known_hashes = content_dao.list_hashes(channel_schema.id)
            new_contents = _diff_new_contents(known_hashes, outcome.contents)
            group_ids: List[int] = []
            if new_contents and not is_baseline:
                group_ids = subscribe_dao.list_group_ids_by_channel(channel_schema.id)
            content_dao.bulk_insert(channel_schema.id, outcome.contents)
        except StorageError as exc:
            logger.error(
                "[rsshub sync] 快照写入失败：feed_path={}, error={}", feed_path, exc
            )
            result.failed_channels[feed_path] = str(exc)
            continue

        # 快照已写入，频道信息刷新失败不影响本次推送
        view = _to_channel_view(feed_path, outcome)
        try:
            channel = channel_dao.upsert_channel(
                view.channel, synced_at=datetime.now(timezone.utc)
            )
            channel_schema = RSSChannelSchema.model_validate(channel)
        except StorageError as exc:
            logger.error(
                "[rsshub sync] 频道刷新失败：feed_path={}, error={}", feed_path, exc
            )
            result.failed_channels[feed_path] = str(exc)

        if is_baseline:
            logger.info(
                "[rsshub sync] 建立快照基线：feed_path={}, 条目={}",
                feed_path,
                len(outcome.contents),
            )
            continue
        if not new_contents:
            continue

        for group_id in group_ids:
            result.group_views.setdefault(group_id, []).append(
                RSSChannelView(channel=channel_schema, contents=list(new_contents))
            )
        logger.info(
            "[rsshub sync] 发现新内容：feed_path={}, 新增={}, 群组数={}",
            feed_path,
            len(new_contents),
            len(group_ids),
        )

    logger.info(
        "[rsshub sync] 同步完成：频道数={}, 有更新的群组={}, 失败频道={}",
        len(channels),
        len(result.group_views),
        len(result.failed_channels),
    )
    return result


def _fetch_all(
    client: RSSHubClient,
    channels: Sequence[RSSChannel],
    timeout: float | None,
    max_workers: int,
) -> Dict[str, Union[RSSFeed, Exception]]:
    """并发抓取全部频道，失败的频道以异常对象作为结果。"""
    feed_paths = [channel.feed_path for channel in channels]
    outcomes: Dict[str, Union[RSSFeed, Exception]] = {}
    workers = max(1, min(max_workers, len(feed_paths)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            feed_path: executor.submit(
                client.fetch_feed_with_fallback, feed_path, timeout=timeout
            )
            for feed_path in feed_paths
        }
        for feed_path, future in futures.items():
            try:
                outcomes[feed_path] = future.result()
            except FetchError as exc:
                logger.warning(
                    "[rsshub sync] 抓取失败：feed_path={}, error={}", feed_path, exc
                )
                outcomes[feed_path] = exc
            except Exception as exc:
                logger.exception(
                    "[rsshub sync] 抓取出现未预期的异常：feed_path={}", feed_path
                )
                outcomes[feed_path] = exc
    return outcomes


def _diff_new_contents(
    known_hashes: Set[str], contents: Iterable[RSSContentSchema]
) -> List[RSSContentSchema]:
    """找出快照中不存在的条目，按发布时间从旧到新返回。"""
    seen = set(known_hashes)
    fresh: List[RSSContentSchema] = []
    for item in contents:
        if item.hash_value in seen:
            continue
        seen.add(item.hash_value)
        fresh.append(item)
    return _sort_oldest_first(fresh)
