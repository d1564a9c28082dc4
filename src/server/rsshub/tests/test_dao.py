# -*- coding: utf-8 -*-
"""
RSSHub DAO 测试
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.server.rsshub.dao import RSSChannelDAO, RSSContentDAO, RSSSubscribeDAO
from src.server.rsshub.exceptions import StorageError
from src.server.rsshub.models import RSSChannel, RSSSubscribe
from src.server.rsshub.schemas import RSSChannelSchema


def _channel(feed_path: str = "/a", title: str = "频道") -> RSSChannelSchema:
    return RSSChannelSchema(feed_path=feed_path, title=title)


def test_upsert_channel_keeps_single_row(test_db_session: Session) -> None:
    """按路由重复写入只更新同一行。"""
    dao = RSSChannelDAO(test_db_session)
    first = dao.upsert_channel(_channel(title="旧标题"))
    second = dao.upsert_channel(_channel(title="新标题"))

    assert first.id == second.id
    assert test_db_session.query(RSSChannel).count() == 1
    assert dao.get_by_feed_path("/a").title == "新标题"


def test_get_channel_if_subscribed(test_db_session: Session) -> None:
    """联合查询同时反映频道与订阅关系是否存在。"""
    channel = RSSChannelDAO(test_db_session).upsert_channel(_channel())
    subscribe_dao = RSSSubscribeDAO(test_db_session)

    assert subscribe_dao.get_channel_if_subscribed(1, "/missing") == (None, False)
    found, subscribed = subscribe_dao.get_channel_if_subscribed(1, "/a")
    assert found.id == channel.id
    assert subscribed is False

    subscribe_dao.create_subscribe(1, channel.id)
    subscribe_dao.create_subscribe(2, channel.id)
    _, subscribed = subscribe_dao.get_channel_if_subscribed(1, "/a")
    assert subscribed is True
    assert subscribe_dao.list_group_ids_by_channel(channel.id) == [1, 2]

    assert subscribe_dao.delete_subscribe(1, channel.id) == 1
    assert subscribe_dao.list_group_ids_by_channel(channel.id) == [2]


def test_bulk_insert_skips_known_hashes(test_db_session: Session, make_feed) -> None:
    """内容快照只写入新的条目。"""
    channel = RSSChannelDAO(test_db_session).upsert_channel(_channel())
    content_dao = RSSContentDAO(test_db_session)
    feed = make_feed(
        "频道",
        [("A", "https://x.test/a", None), ("A", "https://x.test/a", None)],
    )

    assert content_dao.bulk_insert(channel.id, feed.contents) == 1
    assert content_dao.bulk_insert(channel.id, feed.contents) == 0
    assert len(content_dao.list_hashes(channel.id)) == 1


def test_database_errors_become_storage_error(
    monkeypatch: pytest.MonkeyPatch, test_db_session: Session
) -> None:
    """底层数据库异常统一转换为 `StorageError`。"""

    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    monkeypatch.setattr(test_db_session, "scalars", broken)

    with pytest.raises(StorageError):
        RSSChannelDAO(test_db_session).list_all()


def test_upsert_channel_insert_conflict_retries_as_update(
    monkeypatch: pytest.MonkeyPatch, test_db_session: Session
) -> None:
    """并发插入同一路由时，唯一约束冲突按更新处理。"""
    dao = RSSChannelDAO(test_db_session)
    original = dao.upsert_channel(_channel(title="t1"))

    real_lookup = dao.get_by_feed_path
    lookups: list[str] = []

    def miss_first_lookup(feed_path: str):
        lookups.append(feed_path)
        if len(lookups) == 1:
            return None
        return real_lookup(feed_path)

    monkeypatch.setattr(dao, "get_by_feed_path", miss_first_lookup)

    updated = dao.upsert_channel(_channel(title="t2"))

    assert len(lookups) == 2
    assert updated.id == original.id
    assert updated.title == "t2"
    assert test_db_session.query(RSSChannel).count() == 1


def test_create_subscribe_duplicate_returns_existing(
    test_db_session: Session,
) -> None:
    """重复创建同一订阅关系返回已有记录，不新增行。"""
    channel = RSSChannelDAO(test_db_session).upsert_channel(_channel())
    subscribe_dao = RSSSubscribeDAO(test_db_session)

    first = subscribe_dao.create_subscribe(1, channel.id)
    second = subscribe_dao.create_subscribe(1, channel.id)

    assert first.id == second.id
    assert test_db_session.query(RSSSubscribe).count() == 1
