# -*- coding: utf-8 -*-
"""
RSSHub 路由测试
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from src.server.database import Database
from src.server.main import create_app
from src.server.rsshub.exceptions import FetchError

FEED_PATH = "/tech/blog"


@pytest.fixture
def api(fake_client, make_feed) -> Iterator[TestClient]:
    fake_client.set_feed(
        FEED_PATH, make_feed("技术博客", [("A", "https://blog.test/a", None)])
    )
    app = create_app(database=Database("sqlite://"), client=fake_client)
    with TestClient(app) as client:
        yield client


def test_subscribe_and_list_channels(api: TestClient) -> None:
    response = api.post(
        "/api/rsshub/groups/1001/subscriptions", json={"feed_path": FEED_PATH}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["channel_existed"] is False
    assert body["subscription_existed"] is False
    assert body["channel_view"]["channel"]["title"] == "技术博客"
    assert len(body["channel_view"]["contents"]) == 1

    again = api.post(
        "/api/rsshub/groups/1001/subscriptions", json={"feed_path": FEED_PATH}
    ).json()
    assert again["channel_existed"] is True
    assert again["subscription_existed"] is True

    channels = api.get("/api/rsshub/groups/1001/channels").json()
    assert [item["channel"]["feed_path"] for item in channels] == [FEED_PATH]


def test_unsubscribe_and_not_found(api: TestClient) -> None:
    api.post("/api/rsshub/groups/1001/subscriptions", json={"feed_path": FEED_PATH})

    deleted = api.delete(
        "/api/rsshub/groups/1001/subscriptions", params={"feed_path": FEED_PATH}
    )
    assert deleted.status_code == 204

    missing = api.delete(
        "/api/rsshub/groups/1001/subscriptions", params={"feed_path": FEED_PATH}
    )
    assert missing.status_code == 404
    assert api.get("/api/rsshub/groups/1001/channels").json() == []


def test_subscribe_fetch_error_returns_bad_gateway(
    api: TestClient, fake_client
) -> None:
    fake_client.set_feed("/broken", FetchError("镜像不可用", feed_path="/broken"))

    response = api.post(
        "/api/rsshub/groups/1001/subscriptions", json={"feed_path": "/broken"}
    )
    assert response.status_code == 502
    assert response.json()["detail"] == "镜像不可用"


def test_subscribe_rejects_empty_payload(api: TestClient) -> None:
    response = api.post("/api/rsshub/groups/1001/subscriptions", json={"feed_path": ""})
    assert response.status_code == 422


def test_sync_endpoint_returns_new_items(
    api: TestClient, fake_client, make_feed
) -> None:
    api.post("/api/rsshub/groups/1001/subscriptions", json={"feed_path": FEED_PATH})
    fake_client.set_feed(
        FEED_PATH,
        make_feed(
            "技术博客",
            [("B", "https://blog.test/b", None), ("A", "https://blog.test/a", None)],
        ),
    )

    body = api.post("/api/rsshub/sync").json()

    assert list(body["group_views"]) == ["1001"]
    contents = body["group_views"]["1001"][0]["contents"]
    assert [item["title"] for item in contents] == ["B"]
    assert body["failed_channels"] == {}
