# -*- coding: utf-8 -*-
"""
RSSHub 数据模型

公开接口：
- `RSSChannel`
- `RSSContent`
- `RSSSubscribe`

内部方法：
- `_utcnow`

文件功能：
- 定义频道、频道内容快照以及群组订阅关系的 SQLAlchemy ORM 模型。

说明：
- 所有时间字段统一使用 UTC。
- 频道以 `feed_path` 唯一；订阅以 `(group_id, channel_id)` 唯一；
  内容快照以 `(channel_id, hash_value)` 唯一，用于同步去重。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy import (
    BigInteger,
    String,
    Integer,
    DateTime,
    Text,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.server.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RSSChannel(Base):
    __tablename__ = "rsshub_channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    feed_path: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    channel_url: Mapped[Optional[str]] = mapped_column(String(512), default=None)
    description: Mapped[Optional[str]] = mapped_column(Text, default=None)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), default=None)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    contents: Mapped[List["RSSContent"]] = relationship(
        "RSSContent",
        back_populates="channel",
        cascade="all, delete-orphan",
    )
    subscribes: Mapped[List["RSSSubscribe"]] = relationship(
        "RSSSubscribe",
        back_populates="channel",
        cascade="all, delete-orphan",
    )


class RSSContent(Base):
    __tablename__ = "rsshub_contents"
    __table_args__ = (
        UniqueConstraint("channel_id", "hash_value", name="uq_rsshub_contents_hash"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rsshub_channels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hash_value: Mapped[str] = mapped_column(String(64), nullable=False)
    guid: Mapped[str] = mapped_column(String(512), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    link: Mapped[Optional[str]] = mapped_column(String(512), default=None)
    summary: Mapped[Optional[str]] = mapped_column(Text, default=None)
    content: Mapped[Optional[str]] = mapped_column(Text, default=None)
    author: Mapped[Optional[str]] = mapped_column(String(128), default=None)
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=None
    )
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    channel: Mapped["RSSChannel"] = relationship("RSSChannel", back_populates="contents")


class RSSSubscribe(Base):
    __tablename__ = "rsshub_subscribes"
    __table_args__ = (
        UniqueConstraint("group_id", "channel_id", name="uq_rsshub_subscribes_group"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    channel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rsshub_channels.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    channel: Mapped["RSSChannel"] = relationship(
        "RSSChannel", back_populates="subscribes"
    )
