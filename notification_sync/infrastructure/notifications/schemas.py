"""Pydantic models normalizing the store's notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from notification_sync.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationPage,
    UnreadSnapshot,
)
from notification_sync.utils import parse_timestamp


class NotificationPayload(BaseModel):
    """Representation of a notification as sent by the REST surface or push."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    title: str | None = None
    body: str | None = Field(
        default=None, validation_alias=AliasChoices("body", "content", "message")
    )
    category: str | None = Field(
        default=None, validation_alias=AliasChoices("category", "type", "event_type")
    )
    is_read: bool | None = Field(
        default=None, validation_alias=AliasChoices("isRead", "is_read", "read")
    )
    read_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("readAt", "read_at")
    )
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("createdAt", "created_at")
    )
    link: str | None = Field(
        default=None, validation_alias=AliasChoices("link", "linkPath", "link_path")
    )

    @field_validator("read_at", "created_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    def to_entity(self) -> Notification:
        return Notification(
            id=self.id,
            title=self.title or "",
            body=self.body or "",
            category=NotificationCategory.from_raw(self.category),
            is_read=bool(self.is_read) or self.read_at is not None,
            created_at=self.created_at,
            link=self.link,
        )


class NotificationListPayload(BaseModel):
    """Envelope some deployments wrap around the notification list."""

    model_config = ConfigDict(extra="ignore")

    notifications: list[NotificationPayload] = Field(
        validation_alias=AliasChoices("notifications", "items", "data")
    )


class UnreadPayload(BaseModel):
    """Object form of ``GET /notifications/unread``."""

    model_config = ConfigDict(extra="ignore")

    count: int | None = Field(
        default=None,
        validation_alias=AliasChoices("count", "unread", "unreadCount", "unread_count"),
    )
    notifications: list[NotificationPayload] | None = Field(
        default=None, validation_alias=AliasChoices("notifications", "items", "data")
    )


def parse_notification(data: Any) -> Notification:
    """Validate a single notification payload into the domain entity."""

    return NotificationPayload.model_validate(data).to_entity()


def parse_notification_list(data: Any) -> list[Notification]:
    """Accept either a bare list or an enveloped list of notifications."""

    if isinstance(data, list):
        return [parse_notification(item) for item in data]
    if isinstance(data, dict):
        envelope = NotificationListPayload.model_validate(data)
        return [payload.to_entity() for payload in envelope.notifications]
    raise ValueError(f"Expected a list of notifications, got {type(data).__name__}")


def parse_notification_page(data: Any, *, limit: int | None) -> NotificationPage:
    return NotificationPage(items=tuple(parse_notification_list(data)), limit=limit)


def parse_unread_snapshot(data: Any) -> UnreadSnapshot:
    """Normalize every shape the unread endpoint is known to return.

    A list carries the unread notifications themselves, an object carries a
    ``count`` and optionally the items, and a bare integer is the count.
    """

    if isinstance(data, bool):
        raise ValueError("Unread payload must not be a boolean")
    if isinstance(data, int):
        return UnreadSnapshot(count=max(0, data))
    if isinstance(data, list):
        unread = tuple(item for item in parse_notification_list(data) if not item.is_read)
        return UnreadSnapshot(count=len(unread), items=unread)
    if isinstance(data, dict):
        payload = UnreadPayload.model_validate(data)
        items = None
        if payload.notifications is not None:
            items = tuple(
                entity
                for entity in (item.to_entity() for item in payload.notifications)
                if not entity.is_read
            )
        if payload.count is not None:
            return UnreadSnapshot(count=max(0, payload.count), items=items)
        if items is not None:
            return UnreadSnapshot(count=len(items), items=items)
    raise ValueError(f"Unrecognised unread payload: {data!r}")


__all__ = [
    "NotificationListPayload",
    "NotificationPayload",
    "UnreadPayload",
    "parse_notification",
    "parse_notification_list",
    "parse_notification_page",
    "parse_unread_snapshot",
]
