# -*- coding: utf-8 -*-
"""
RSSHub 路由

公开接口：
- GET /api/rsshub/groups/{group_id}/channels
- POST /api/rsshub/groups/{group_id}/subscriptions
- DELETE /api/rsshub/groups/{group_id}/subscriptions
- POST /api/rsshub/sync

内部方法：
- `get_db`
- `get_client`
- `_raise_http_error`

文件功能：
- 为消息投递宿主暴露订阅、退订、订阅查询与同步接口，并将领域错误映射为 HTTP 状态码。
"""

from __future__ import annotations

from typing import Iterator, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .exceptions import FetchError, NotFoundError, RSSHubError
from .schemas import RSSChannelView, SubscribePayload, SubscribeResult, SyncResult
from .service import (
    RSSHubClient,
    get_subscribed_channels_by_group_id,
    subscribe,
    sync_job_trigger,
    unsubscribe,
)

router = APIRouter(prefix="/api/rsshub", tags=["RSSHub"])


def get_db(request: Request) -> Iterator[Session]:
    """从应用持有的数据库句柄中获取会话。"""
    with request.app.state.database.session() as db:
        yield db


def get_client(request: Request) -> RSSHubClient:
    return request.app.state.rsshub_client


def _raise_http_error(exc: RSSHubError) -> NoReturn:
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, FetchError):
        status_code = status.HTTP_502_BAD_GATEWAY
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=status_code, detail=exc.message) from exc


@router.get(
    "/groups/{group_id}/channels",
    response_model=list[RSSChannelView],
    summary="列出群组订阅的频道",
    response_description="返回群组已订阅的频道，不包含内容",
)
def list_group_channels_api(
    group_id: int, db: Session = Depends(get_db)
) -> list[RSSChannelView]:
    """列出群组订阅的频道。"""
    try:
        return get_subscribed_channels_by_group_id(db, group_id)
    except RSSHubError as exc:
        _raise_http_error(exc)


@router.post(
    "/groups/{group_id}/subscriptions",
    response_model=SubscribeResult,
    summary="订阅频道",
    response_description="返回频道当前内容以及频道、订阅是否已存在",
)
def subscribe_api(
    group_id: int,
    payload: SubscribePayload,
    db: Session = Depends(get_db),
    client: RSSHubClient = Depends(get_client),
) -> SubscribeResult:
    """群组订阅指定路由的频道。"""
    try:
        return subscribe(db, client, group_id, payload.feed_path)
    except RSSHubError as exc:
        _raise_http_error(exc)


@router.delete(
    "/groups/{group_id}/subscriptions",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="退订频道",
    response_description="成功退订后不返回内容",
)
def unsubscribe_api(
    group_id: int,
    feed_path: str = Query(..., min_length=1, description="RSSHub 订阅路由"),
    db: Session = Depends(get_db),
) -> Response:
    """群组退订指定路由的频道。"""
    try:
        unsubscribe(db, group_id, feed_path)
    except RSSHubError as exc:
        _raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/sync",
    response_model=SyncResult,
    summary="同步全部频道",
    response_description="返回各群组的新增内容以及抓取失败的频道",
)
def sync_api(
    db: Session = Depends(get_db),
    client: RSSHubClient = Depends(get_client),
) -> SyncResult:
    """手动触发一次同步。"""
    try:
        return sync_job_trigger(db, client)
    except RSSHubError as exc:
        _raise_http_error(exc)
