# -*- coding: utf-8 -*-
"""
RSSHub 异常定义

公开接口：
- `RSSHubError`
- `FetchError`
- `StorageError`
- `NotFoundError`

文件功能：
- 定义订阅模块对外暴露的错误类型，携带简短的可读原因以及订阅路由、群号等上下文。
"""

from __future__ import annotations


class RSSHubError(RuntimeError):
    """RSSHub 模块错误基类"""

    def __init__(
        self,
        message: str,
        *,
        feed_path: str | None = None,
        group_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.feed_path = feed_path
        self.group_id = group_id


class FetchError(RSSHubError):
    """订阅源无法访问或内容无法解析"""


class StorageError(RSSHubError):
    """持久层读写失败"""


class NotFoundError(RSSHubError):
    """频道或订阅关系不存在"""
