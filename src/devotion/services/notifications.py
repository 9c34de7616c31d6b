"""Inbox rows written inside the same transaction as the event they describe."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ..cache import Mutation, ProjectionCache, invalidate
from ..errors import NotAuthorized, NotFound
from ..infra.database import SessionFactory, unit_of_work
from ..models.notification import Notification


def push(
    session: Session,
    *,
    user_id: int,
    title: str,
    message: str = "",
    type: Optional[str] = None,
) -> Notification:
    """Stage a notification on the caller's session; committed with the workflow."""

    note = Notification(user_id=user_id, title=title, message=message[:255], type=type)
    session.add(note)
    return note


def list_unread(user_id: int, *, session_factory: SessionFactory) -> list[Notification]:
    with session_factory() as session:
        rows = list(
            session.exec(
                select(Notification)
                .where(Notification.user_id == user_id)
                .where(Notification.is_read == False)  # noqa: E712
                .order_by(Notification.created_at.desc())  # type: ignore
            ).all()
        )
        session.expunge_all()
        return rows


def mark_read(
    notification_id: int,
    *,
    user_id: int,
    session_factory: SessionFactory,
    cache: ProjectionCache | None = None,
) -> Notification:
    with unit_of_work(session_factory) as session:
        note = session.get(Notification, notification_id)
        if note is None:
            raise NotFound("Notification", notification_id)
        if note.user_id != user_id:
            raise NotAuthorized("Only the recipient can mark a notification as read")
        note.is_read = True
        session.add(note)
    invalidate(cache, Mutation.READ_NOTIFICATION, user_id)
    return note


__all__ = ["list_unread", "mark_read", "push"]
