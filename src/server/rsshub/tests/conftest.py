# -*- coding: utf-8 -*-
"""
RSSHub 测试夹具
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import pytest
from sqlalchemy.orm import Session

from src.server.database import Database
from src.server.rsshub.exceptions import FetchError
from src.server.rsshub.schemas import RSSContentSchema, RSSFeed
from src.server.rsshub.service.utils import _build_hash_value

ItemRow = Tuple[str, str, Optional[datetime]]


class FakeRSSHubClient:
    """按订阅路由返回预设结果的抓取客户端。"""

    def __init__(self) -> None:
        self.feeds: Dict[str, Union[RSSFeed, Exception]] = {}
        self.calls: List[str] = []
        self.mirrors = ["https://mirror.test"]

    def set_feed(self, feed_path: str, outcome: Union[RSSFeed, Exception]) -> None:
        self.feeds[feed_path] = outcome

    def fetch_feed_with_fallback(
        self, feed_path: str, *, timeout: float | None = None
    ) -> RSSFeed:
        self.calls.append(feed_path)
        outcome = self.feeds.get(feed_path)
        if outcome is None:
            raise FetchError("订阅源不存在", feed_path=feed_path)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome.model_copy(deep=True)

    def close(self) -> None:
        pass


def build_feed(title: str, items: Sequence[ItemRow]) -> RSSFeed:
    contents = [
        RSSContentSchema(
            guid=link,
            hash_value=_build_hash_value(f"{item_title}||{link}"),
            title=item_title,
            link=link,
            summary=f"{item_title} 摘要",
            published_at=published_at,
        )
        for item_title, link, published_at in items
    ]
    return RSSFeed(title=title, channel_url="https://example.com", contents=contents)


@pytest.fixture
def database() -> Iterator[Database]:
    db_handle = Database("sqlite://")
    db_handle.init_db()
    yield db_handle
    db_handle.close()


@pytest.fixture
def test_db_session(database: Database) -> Iterator[Session]:
    db = database.new_session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def fake_client() -> FakeRSSHubClient:
    return FakeRSSHubClient()


@pytest.fixture
def make_feed() -> Callable[[str, Sequence[ItemRow]], RSSFeed]:
    return build_feed
