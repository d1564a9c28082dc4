# -*- coding: utf-8 -*-
"""
RSSHub 服务工具模块

功能：
- 提供订阅服务中共享的底层工具函数

公开接口：
- 无（仅内部使用）

内部方法：
- `_resolve_identifier`
- `_build_hash_value`
- `_resolve_datetime`
- `_resolve_content`
- `_extract_plain_summary`
- `_normalize_datetime_utc`
- `_to_content_schema`
- `_to_channel_view`
- `_to_stored_channel_view`
- `_sort_oldest_first`
"""

from __future__ import annotations

import calendar
import hashlib
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, List

import feedparser  # type: ignore
from bs4 import BeautifulSoup  # type: ignore

from ..config import rsshub_config
from ..models import RSSChannel
from ..schemas import RSSChannelSchema, RSSChannelView, RSSContentSchema, RSSFeed

SUMMARY_MAX_LENGTH = rsshub_config.rsshub_summary_max_length
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _resolve_identifier(entry: feedparser.FeedParserDict) -> str:
    """提取条目唯一标识：优先标题加链接，其次链接、id/guid。"""
    title = entry.get("title") or ""
    link = entry.get("link") or ""
    if title and link:
        return f"{title}||{link}"
    if link:
        return str(link)
    for key in ("id", "guid"):
        candidate = entry.get(key)
        if candidate:
            return str(candidate)
    fallback = title or entry.get("summary") or "unknown"
    return f"gen-{hashlib.sha1(fallback.encode('utf-8')).hexdigest()}"


def _build_hash_value(identifier: str) -> str:
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()


def _resolve_datetime(entry: feedparser.FeedParserDict) -> datetime | None:
    """解析条目的发布时间，统一转换为 UTC。"""
    struct_time = (
        entry.get("published_parsed")
        or entry.get("updated_parsed")
        or entry.get("created_parsed")
    )
    if struct_time:
        # feedparser 给出的 struct_time 已是 UTC
        return datetime.fromtimestamp(calendar.timegm(struct_time), tz=timezone.utc)

    text_value = entry.get("published") or entry.get("updated") or entry.get("created")
    if not text_value:
        return None
    try:
        parsed = parsedate_to_datetime(text_value)
    except (TypeError, ValueError, IndexError):
        return None
    return _normalize_datetime_utc(parsed)


def _resolve_content(entry: feedparser.FeedParserDict) -> str | None:
    """解析条目正文内容。"""
    contents = entry.get("content")
    if isinstance(contents, list):
        for item in contents:
            value = item.get("value")
            if value:
                return value
    return entry.get("summary") or entry.get("description")


def _extract_plain_summary(
    html: str | None, limit: int = SUMMARY_MAX_LENGTH
) -> str | None:
    """从 HTML 正文中提取纯文本摘要。"""
    if not html:
        return None
    text = BeautifulSoup(html, "html.parser").get_text(" ", strip=True)
    text = " ".join(text.split())
    if not text:
        return None
    if len(text) > limit:
        return text[:limit].rstrip() + "…"
    return text


def _normalize_datetime_utc(value: datetime | None) -> datetime | None:
    """统一将时间转换为 UTC 时区。"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_content_schema(entry: feedparser.FeedParserDict) -> RSSContentSchema:
    identifier = _resolve_identifier(entry)
    content = _resolve_content(entry)
    return RSSContentSchema(
        guid=str(entry.get("id") or entry.get("guid") or identifier),
        hash_value=_build_hash_value(identifier),
        title=entry.get("title") or "未命名条目",
        link=entry.get("link"),
        summary=_extract_plain_summary(entry.get("summary") or content),
        content=content,
        author=entry.get("author"),
        published_at=_resolve_datetime(entry),
    )


def _to_channel_view(feed_path: str, feed: RSSFeed) -> RSSChannelView:
    """由抓取结果构建尚未持久化的频道视图。"""
    channel = RSSChannelSchema(
        feed_path=feed_path,
        title=feed.title,
        channel_url=feed.channel_url,
        description=feed.description,
        image_url=feed.image_url,
    )
    return RSSChannelView(channel=channel, contents=list(feed.contents))


def _to_stored_channel_view(channel: RSSChannel) -> RSSChannelView:
    """仅包含存储状态、不附带内容的频道视图。"""
    return RSSChannelView(channel=RSSChannelSchema.model_validate(channel))


def _sort_oldest_first(contents: Iterable[RSSContentSchema]) -> List[RSSContentSchema]:
    """按发布时间从旧到新排序，无时间的条目保持原顺序排在最后。"""
    indexed = list(enumerate(contents))
    indexed.sort(
        key=lambda pair: (
            pair[1].published_at is None,
            _normalize_datetime_utc(pair[1].published_at) or _EPOCH,
            pair[0],
        )
    )
    return [item for _, item in indexed]
