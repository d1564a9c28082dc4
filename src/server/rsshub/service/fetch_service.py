# -*- coding: utf-8 -*-
"""
RSSHub 抓取服务

功能：
- 通过 RSSHub 镜像抓取订阅源并解析为结构化结果
- 按配置顺序在多个镜像之间切换

公开接口：
- `RSSHubClient`

内部方法：
- `_build_feed_url`
- `_parse_feed`
"""

from __future__ import annotations

from typing import Sequence

import feedparser  # type: ignore
import httpx
from loguru import logger

from ..config import rsshub_config
from ..exceptions import FetchError
from ..schemas import RSSFeed
from .utils import _to_content_schema

HTTP_TIMEOUT = rsshub_config.rsshub_http_timeout
USER_AGENT = rsshub_config.rsshub_user_agent


class RSSHubClient:
    """订阅源抓取客户端，持有一个可复用的 httpx 连接池。"""

    def __init__(
        self,
        mirrors: Sequence[str] | None = None,
        *,
        timeout: float = HTTP_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        if mirrors is None:
            mirrors = rsshub_config.rsshub_mirrors
        self.mirrors = list(mirrors)
        self.timeout = timeout
        self._client = http_client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def close(self) -> None:
        self._client.close()

    def fetch_feed(
        self, mirror: str, feed_path: str, *, timeout: float | None = None
    ) -> RSSFeed:
        """从指定镜像抓取订阅源。"""
        url = _build_feed_url(mirror, feed_path)
        try:
            response = self._client.get(
                url, timeout=timeout if timeout is not None else self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(f"抓取订阅源失败：{exc}", feed_path=feed_path) from exc
        return _parse_feed(response.content, feed_path)

    def fetch_feed_with_fallback(
        self, feed_path: str, *, timeout: float | None = None
    ) -> RSSFeed:
        """按镜像顺序抓取，返回第一个成功的结果。"""
        if not self.mirrors:
            raise FetchError("未配置 RSSHub 镜像", feed_path=feed_path)
        last_error: FetchError | None = None
        for mirror in self.mirrors:
            try:
                return self.fetch_feed(mirror, feed_path, timeout=timeout)
            except FetchError as exc:
                logger.warning(
                    "镜像抓取失败：mirror={}, feed_path={}, error={}",
                    mirror,
                    feed_path,
                    exc,
                )
                last_error = exc
        raise last_error  # type: ignore[misc]


def _build_feed_url(mirror: str, feed_path: str) -> str:
    return mirror.rstrip("/") + "/" + feed_path.lstrip("/")


def _parse_feed(raw: bytes | str, feed_path: str) -> RSSFeed:
    """解析订阅源文本。"""
    parsed = feedparser.parse(raw)
    feed_info = parsed.get("feed", {})
    if parsed.bozo and not parsed.entries and not feed_info.get("title"):
        raise FetchError(
            f"订阅源解析失败：{parsed.get('bozo_exception')}", feed_path=feed_path
        )
    image = feed_info.get("image") or {}
    return RSSFeed(
        title=feed_info.get("title") or feed_path,
        channel_url=feed_info.get("link"),
        description=feed_info.get("subtitle") or feed_info.get("description"),
        image_url=image.get("href") or image.get("url"),
        contents=[_to_content_schema(entry) for entry in parsed.entries],
    )
