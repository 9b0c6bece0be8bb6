"""
Shared data-access helpers used by the route modules: lookups, likes,
comments, notifications and the exercise catalog.
"""

from __future__ import annotations

import logging
from typing import Literal, Optional, Type, TypeVar

from fastapi import HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitsocial.db import (
    CommentRow,
    ExerciseRow,
    FriendRequestRow,
    LikeRow,
    NotificationRow,
    UserRow,
)

logger = logging.getLogger(__name__)

LikeTarget = Literal["post", "workout", "session", "comment"]
CommentTarget = Literal["post", "workout", "session"]

FRIEND_PENDING = "Pending"
FRIEND_ACCEPTED = "Accepted"
FRIEND_DENIED = "Denied"

RowT = TypeVar("RowT")


def require_valid(message: Optional[str]) -> None:
    """Turn a validator result into a 400."""
    if message:
        raise HTTPException(status_code=400, detail=message)


def get_or_404(db: Session, model: Type[RowT], row_id: int, detail: str) -> RowT:
    row = db.get(model, row_id)
    if row is None:
        raise HTTPException(status_code=404, detail=detail)
    return row


def get_user_by_username(db: Session, username: str) -> UserRow:
    user = db.execute(
        select(UserRow).where(func.lower(UserRow.username) == username.strip().lower())
    ).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail=f"User {username} not found.")
    return user


def username_taken(db: Session, username: str, exclude_user_id: Optional[int] = None) -> bool:
    stmt = select(UserRow.user_id).where(
        func.lower(UserRow.username) == username.strip().lower()
    )
    if exclude_user_id is not None:
        stmt = stmt.where(UserRow.user_id != exclude_user_id)
    return db.execute(stmt).first() is not None


def email_taken(db: Session, email: str, exclude_user_id: Optional[int] = None) -> bool:
    stmt = select(UserRow.user_id).where(
        func.lower(UserRow.email) == email.strip().lower()
    )
    if exclude_user_id is not None:
        stmt = stmt.where(UserRow.user_id != exclude_user_id)
    return db.execute(stmt).first() is not None


def create_notification(
    db: Session,
    *,
    sender: UserRow,
    receiver_id: int,
    type: str,
    message: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
) -> Optional[NotificationRow]:
    """Queue a notification in the current transaction. Self-notifications are skipped."""
    if sender.user_id == receiver_id:
        return None
    notification = NotificationRow(
        sender_id=sender.user_id,
        receiver_id=receiver_id,
        type=type,
        message=message,
        reference_type=reference_type,
        reference_id=reference_id,
        is_read=False,
    )
    db.add(notification)
    return notification


def _target_id(kind: str, target) -> int:
    return getattr(target, f"{kind}_id")


def find_like(db: Session, user: UserRow, kind: LikeTarget, target) -> Optional[LikeRow]:
    column = getattr(LikeRow, f"{kind}_id")
    return db.execute(
        select(LikeRow).where(
            LikeRow.user_id == user.user_id, column == _target_id(kind, target)
        )
    ).scalar_one_or_none()


def add_like(db: Session, user: UserRow, kind: LikeTarget, target) -> LikeRow:
    """
    Like ``target`` on behalf of ``user`` and notify its owner. Commits.
    """
    if find_like(db, user, kind, target):
        raise HTTPException(
            status_code=409, detail=f"You have already liked this {kind}."
        )
    like = LikeRow(user_id=user.user_id, **{f"{kind}_id": _target_id(kind, target)})
    db.add(like)
    create_notification(
        db,
        sender=user,
        receiver_id=target.user_id,
        type="like",
        message=f"{user.username} liked your {kind}.",
        reference_type=kind,
        reference_id=_target_id(kind, target),
    )
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent like from the same user.
        db.rollback()
        raise HTTPException(
            status_code=409, detail=f"You have already liked this {kind}."
        )
    db.refresh(like)
    return like


def remove_like(db: Session, user: UserRow, kind: LikeTarget, target) -> dict:
    like = find_like(db, user, kind, target)
    if not like:
        raise HTTPException(
            status_code=404, detail=f"You haven't liked this {kind} yet."
        )
    removed = like.as_dict()
    db.delete(like)
    db.commit()
    return removed


def likers(target) -> list[dict]:
    return [like.liker() for like in target.likes]


def add_comment(
    db: Session, user: UserRow, kind: CommentTarget, target, content: str
) -> CommentRow:
    """Comment on ``target`` and notify its owner. Commits."""
    comment = CommentRow(
        user_id=user.user_id,
        content=content.strip(),
        **{f"{kind}_id": _target_id(kind, target)},
    )
    db.add(comment)
    create_notification(
        db,
        sender=user,
        receiver_id=target.user_id,
        type="comment",
        message=f"{user.username} commented on your {kind}.",
        reference_type=kind,
        reference_id=_target_id(kind, target),
    )
    db.commit()
    db.refresh(comment)
    return comment


def get_comment_on(
    db: Session, kind: CommentTarget, target_id: int, comment_id: int
) -> CommentRow:
    comment = db.get(CommentRow, comment_id)
    if comment is None or getattr(comment, f"{kind}_id") != target_id:
        raise HTTPException(
            status_code=404,
            detail=f"Comment #{comment_id} not found for {kind} #{target_id}.",
        )
    return comment


def edit_comment(db: Session, user: UserRow, comment: CommentRow, content: str) -> CommentRow:
    if comment.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You don't have permission to edit this comment."
        )
    comment.content = content.strip()
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, user: UserRow, comment: CommentRow, owner_id: int) -> dict:
    """The comment author or the owner of the commented item may delete it."""
    if user.user_id not in (comment.user_id, owner_id):
        raise HTTPException(
            status_code=403, detail="You are not authorized to delete this comment."
        )
    removed = comment.as_dict()
    db.delete(comment)
    db.commit()
    return removed


def friend_ids(db: Session, user_id: int) -> list[int]:
    rows = db.execute(
        select(FriendRequestRow.sender_id, FriendRequestRow.receiver_id).where(
            or_(
                FriendRequestRow.sender_id == user_id,
                FriendRequestRow.receiver_id == user_id,
            ),
            FriendRequestRow.status == FRIEND_ACCEPTED,
        )
    ).all()
    return [receiver if sender == user_id else sender for sender, receiver in rows]


def list_friends(db: Session, user_id: int) -> list[dict]:
    ids = friend_ids(db, user_id)
    if not ids:
        return []
    users = db.execute(
        select(UserRow).where(UserRow.user_id.in_(ids)).order_by(UserRow.username)
    ).scalars()
    return [
        {"user_id": u.user_id, "username": u.username, "profile_pic": u.profile_pic}
        for u in users
    ]


def resolve_exercise(
    db: Session, title: str, description: Optional[str] = None
) -> ExerciseRow:
    """Find a catalog exercise by title (case-insensitive), creating it if new."""
    title = title.strip()
    key = title.lower()
    exercise = db.execute(
        select(ExerciseRow).where(ExerciseRow.title_key == key)
    ).scalar_one_or_none()
    if exercise is None:
        exercise = ExerciseRow(title=title, title_key=key, description=description)
        db.add(exercise)
        db.flush()
        logger.info("Added exercise %r to the catalog", title)
    return exercise


def comments_of(target) -> list[dict]:
    return [comment.as_dict() for comment in target.comments]


def post_detail(post) -> dict:
    return {
        "message": "Got post!",
        "post": post.as_dict(),
        "post_user_id": post.user_id,
        "likes": likers(post),
        "comments": comments_of(post),
        "workout": post.workout.as_dict() if post.workout else None,
    }


def workout_detail(workout) -> dict:
    return {
        "message": "Got workout!",
        "workout": workout.as_dict(),
        "workout_user_id": workout.user_id,
        "likes": likers(workout),
        "comments": comments_of(workout),
    }


def session_detail(session) -> dict:
    return {
        "message": "Got session!",
        "session": session.as_dict(),
        "session_user_id": session.user_id,
        "workout": session.workout.as_dict() if session.workout else None,
        "likes": likers(session),
        "comments": comments_of(session),
    }
