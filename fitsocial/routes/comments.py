from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fitsocial.db import CommentRow, UserRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.services import add_like, get_or_404, remove_like

router = APIRouter(prefix="/comment", tags=["comments"])


def _get_comment(db: Session, comment_id: int) -> CommentRow:
    return get_or_404(db, CommentRow, comment_id, f"Comment #{comment_id} not found.")


@router.post("/{comment_id}/like", status_code=201)
def like_comment(
    comment_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    like = add_like(db, user, "comment", _get_comment(db, comment_id))
    return {"message": "Comment liked successfully!", "like": like.as_dict()}


@router.post("/{comment_id}/unlike")
def unlike_comment(
    comment_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    removed = remove_like(db, user, "comment", _get_comment(db, comment_id))
    return {"message": "Comment unliked successfully!", "removedLike": removed}
