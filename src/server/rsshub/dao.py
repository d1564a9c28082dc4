# -*- coding: utf-8 -*-
"""
RSSHub DAO

- 公开接口：
    - `RSSChannelDAO`
    - `RSSContentDAO`
    - `RSSSubscribeDAO`

内部方法：
- `_apply_channel_fields`

文件功能：
- 为订阅模块提供面向数据库的访问层，封装频道、内容快照与订阅关系的 CRUD 操作。
- 只执行调用方要求的读写，不包含业务判断；失败时统一抛出 `StorageError`。
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Set, Tuple

from loguru import logger
from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError

from src.server.dao.dao_base import BaseDAO
from .models import RSSChannel, RSSContent, RSSSubscribe
from .schemas import RSSChannelSchema, RSSContentSchema


def _apply_channel_fields(
    channel: RSSChannel, data: RSSChannelSchema, synced_at: datetime | None
) -> None:
    channel.title = data.title
    channel.channel_url = data.channel_url
    channel.description = data.description
    channel.image_url = data.image_url
    if synced_at is not None:
        channel.last_synced_at = synced_at


class RSSChannelDAO(BaseDAO):
    """频道 DAO"""

    def list_all(self) -> List[RSSChannel]:
        with self._guard("list channels"):
            stmt = select(RSSChannel).order_by(RSSChannel.id.asc())
            return list(self.db_session.scalars(stmt))

    def get_by_feed_path(self, feed_path: str) -> RSSChannel | None:
        with self._guard("get channel by feed path"):
            stmt = select(RSSChannel).where(RSSChannel.feed_path == feed_path)
            return self.db_session.scalars(stmt).first()

    def upsert_channel(
        self, data: RSSChannelSchema, *, synced_at: datetime | None = None
    ) -> RSSChannel:
        """按 `feed_path` 新增或更新频道。

        并发插入同一路由时唯一约束会拒绝后到者，此时回滚并按更新重试一次。
        """
        with self._guard("upsert channel"):
            existing = self.get_by_feed_path(data.feed_path)
            if existing is None:
                channel = RSSChannel(feed_path=data.feed_path)
                _apply_channel_fields(channel, data, synced_at)
                self.db_session.add(channel)
                try:
                    self.db_session.commit()
                except IntegrityError:
                    self.db_session.rollback()
                    logger.info("频道并发插入冲突，改为更新：feed_path={}", data.feed_path)
                    existing = self.get_by_feed_path(data.feed_path)
                    if existing is None:
                        raise
                else:
                    self.db_session.refresh(channel)
                    return channel

            _apply_channel_fields(existing, data, synced_at)
            self.db_session.add(existing)
            self.db_session.commit()
            self.db_session.refresh(existing)
            return existing

    def list_subscribed_by_group(self, group_id: int) -> List[RSSChannel]:
        with self._guard("list subscribed channels"):
            stmt = (
                select(RSSChannel)
                .join(RSSSubscribe, RSSSubscribe.channel_id == RSSChannel.id)
                .where(RSSSubscribe.group_id == group_id)
                .order_by(RSSSubscribe.id.asc())
            )
            return list(self.db_session.scalars(stmt))


class RSSContentDAO(BaseDAO):
    """内容快照 DAO"""

    def list_hashes(self, channel_id: int) -> Set[str]:
        with self._guard("list content hashes"):
            stmt = select(RSSContent.hash_value).where(
                RSSContent.channel_id == channel_id
            )
            return set(self.db_session.scalars(stmt))

    def bulk_insert(
        self, channel_id: int, contents: Iterable[RSSContentSchema]
    ) -> int:
        """写入尚未存在的内容，返回新增条数。"""
        with self._guard("insert contents"):
            known = self.list_hashes(channel_id)
            count = 0
            for item in contents:
                if item.hash_value in known:
                    continue
                known.add(item.hash_value)
                self.db_session.add(
                    RSSContent(
                        channel_id=channel_id,
                        hash_value=item.hash_value,
                        guid=item.guid,
                        title=item.title,
                        link=item.link,
                        summary=item.summary,
                        content=item.content,
                        author=item.author,
                        published_at=item.published_at,
                    )
                )
                count += 1
            if count:
                self.db_session.commit()
            return count


class RSSSubscribeDAO(BaseDAO):
    """订阅关系 DAO"""

    def get_by_group_and_channel(
        self, group_id: int, channel_id: int
    ) -> RSSSubscribe | None:
        with self._guard("get subscribe"):
            stmt = select(RSSSubscribe).where(
                RSSSubscribe.group_id == group_id,
                RSSSubscribe.channel_id == channel_id,
            )
            return self.db_session.scalars(stmt).first()

    def get_channel_if_subscribed(
        self, group_id: int, feed_path: str
    ) -> Tuple[RSSChannel | None, bool]:
        """一次查询同时返回频道以及该群是否订阅了它。"""
        with self._guard("get subscribe by feed path"):
            stmt = (
                select(RSSChannel, RSSSubscribe.id)
                .outerjoin(
                    RSSSubscribe,
                    and_(
                        RSSSubscribe.channel_id == RSSChannel.id,
                        RSSSubscribe.group_id == group_id,
                    ),
                )
                .where(RSSChannel.feed_path == feed_path)
            )
            row = self.db_session.execute(stmt).first()
            if row is None:
                return None, False
            channel, subscribe_id = row
            return channel, subscribe_id is not None

    def create_subscribe(self, group_id: int, channel_id: int) -> RSSSubscribe:
        with self._guard("create subscribe"):
            subscribe = RSSSubscribe(group_id=group_id, channel_id=channel_id)
            self.db_session.add(subscribe)
            try:
                self.db_session.commit()
            except IntegrityError:
                self.db_session.rollback()
                existing = self.get_by_group_and_channel(group_id, channel_id)
                if existing is None:
                    raise
                return existing
            self.db_session.refresh(subscribe)
            return subscribe

    def delete_subscribe(self, group_id: int, channel_id: int) -> int:
        with self._guard("delete subscribe"):
            stmt = delete(RSSSubscribe).where(
                RSSSubscribe.group_id == group_id,
                RSSSubscribe.channel_id == channel_id,
            )
            result = self.db_session.execute(stmt)
            self.db_session.commit()
            return result.rowcount or 0

    def list_group_ids_by_channel(self, channel_id: int) -> List[int]:
        with self._guard("list subscribed groups"):
            stmt = (
                select(RSSSubscribe.group_id)
                .where(RSSSubscribe.channel_id == channel_id)
                .order_by(RSSSubscribe.group_id.asc())
            )
            return list(self.db_session.scalars(stmt))
