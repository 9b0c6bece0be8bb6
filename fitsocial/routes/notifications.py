from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from fitsocial.db import NotificationRow, UserRow, utcnow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.schemas import MessageResponse, NotificationStatusRequest
from fitsocial.services import get_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notification", tags=["notifications"])


def _require_self(user: UserRow, user_id: int) -> None:
    if user.user_id != user_id:
        raise HTTPException(
            status_code=403, detail="You can only access your own notifications."
        )


def _own_notification(db: Session, user: UserRow, notification_id: int) -> NotificationRow:
    notification = get_or_404(
        db, NotificationRow, notification_id, "Notification not found."
    )
    if notification.receiver_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You can only access your own notifications."
        )
    return notification


def _list(db: Session, user_id: int, *criteria) -> list[dict]:
    rows = db.execute(
        select(NotificationRow)
        .where(NotificationRow.receiver_id == user_id, *criteria)
        .order_by(
            NotificationRow.created_at.desc(), NotificationRow.notification_id.desc()
        )
    ).scalars()
    return [row.as_dict() for row in rows]


@router.get("/{user_id}")
def get_notifications(
    user_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _require_self(user, user_id)
    return {"notifications": _list(db, user_id)}


@router.get("/{user_id}/unread")
def get_unread_notifications(
    user_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _require_self(user, user_id)
    return {"notifications": _list(db, user_id, NotificationRow.is_read.is_(False))}


@router.get("/{user_id}/filter")
def get_notifications_by_type(
    user_id: int,
    type: Optional[str] = Query(default=None),
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _require_self(user, user_id)
    if not type:
        raise HTTPException(status_code=400, detail="Notification type is required.")
    return {"notifications": _list(db, user_id, NotificationRow.type == type)}


@router.put("/{notification_id}/status")
def toggle_notification_status(
    notification_id: int,
    payload: NotificationStatusRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """``is_read`` is the status the client currently shows; it is flipped."""
    notification = _own_notification(db, user, notification_id)
    notification.is_read = not payload.is_read
    db.commit()
    return {
        "message": (
            f"Notification read status updated from {str(payload.is_read).lower()} "
            f"to {str(not payload.is_read).lower()}"
        ),
        "notification": notification.as_dict(),
    }


@router.put("/{user_id}/read-all")
def mark_all_read(
    user_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _require_self(user, user_id)
    db.execute(
        update(NotificationRow)
        .where(NotificationRow.receiver_id == user_id, NotificationRow.is_read.is_(False))
        .values(is_read=True, updated_at=utcnow())
    )
    db.commit()
    db.expire_all()
    return {
        "message": "All notifications marked as read.",
        "notifications": _list(db, user_id),
    }


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    notification = _own_notification(db, user, notification_id)
    deleted = notification.as_dict()
    db.delete(notification)
    db.commit()
    return {"message": "Notification deleted.", "notification": deleted}


@router.delete("/{user_id}/clear", response_model=MessageResponse)
def clear_notifications(
    user_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _require_self(user, user_id)
    result = db.execute(
        delete(NotificationRow).where(NotificationRow.receiver_id == user_id)
    )
    db.commit()
    db.expire_all()
    logger.info("Cleared %s notifications for user_id=%s", result.rowcount, user_id)
    return MessageResponse(message="All notifications cleared successfully.")
