from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.db import PostRow, UserRow, WorkoutRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.schemas import CommentRequest, PostRequest
from fitsocial.services import (
    add_comment,
    add_like,
    delete_comment,
    edit_comment,
    get_comment_on,
    get_or_404,
    post_detail,
    remove_like,
    require_valid,
)
from fitsocial.validators import validate_comment_content, validate_post_content

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/post", tags=["posts"])


def _get_post(db: Session, post_id: int) -> PostRow:
    return get_or_404(db, PostRow, post_id, "Post not found.")


def _attachable_workout(
    db: Session, user: UserRow, workout_id: Optional[int]
) -> Optional[int]:
    if workout_id is None:
        return None
    workout = get_or_404(db, WorkoutRow, workout_id, "Workout not found.")
    if workout.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You can only attach your own workouts to a post."
        )
    return workout.workout_id


@router.get("/user/{user_id}")
def get_user_posts(
    user_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    posts = db.execute(
        select(PostRow)
        .where(PostRow.user_id == user_id)
        .order_by(PostRow.created_at.desc(), PostRow.post_id.desc())
    ).scalars()
    return {
        "message": f"Retrieved all posts from user #{user_id}",
        "posts": [post.as_dict() for post in posts],
        "user_id": user_id,
    }


@router.get("/{post_id}")
def get_post(
    post_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    return post_detail(_get_post(db, post_id))


@router.post("", status_code=201)
def create_post(
    payload: PostRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_post_content(payload.content))
    post = PostRow(
        user_id=user.user_id,
        content=payload.content.strip(),
        image_url=payload.image_url or None,
        workout_id=_attachable_workout(db, user, payload.workout_id),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return {"message": "Post created.", "post": post.as_dict()}


@router.patch("/{post_id}")
def update_post(
    post_id: int,
    payload: PostRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    post = _get_post(db, post_id)
    if post.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You don't have permission to edit this post."
        )
    require_valid(validate_post_content(payload.content))
    post.content = payload.content.strip()
    post.image_url = payload.image_url or None
    post.workout_id = _attachable_workout(db, user, payload.workout_id)
    db.commit()
    db.refresh(post)
    return {"message": "Post updated successfully.", "post": post.as_dict()}


@router.delete("/{post_id}")
def delete_post(
    post_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    post = _get_post(db, post_id)
    if post.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You are not authorized to delete this post."
        )
    deleted = post.as_dict()
    db.delete(post)
    db.commit()
    logger.info("Deleted post_id=%s by user_id=%s", post_id, user.user_id)
    return {"message": "Post deleted successfully.", "deletedPost": deleted}


@router.post("/{post_id}/comment", status_code=201)
def comment_on_post(
    post_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    post = _get_post(db, post_id)
    comment = add_comment(db, user, "post", post, payload.content)
    return {
        "message": "Comment added successfully!",
        "post_id": post_id,
        "comment": comment.as_dict(),
    }


@router.patch("/{post_id}/comment/{comment_id}")
def update_post_comment(
    post_id: int,
    comment_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    comment = get_comment_on(db, "post", post_id, comment_id)
    comment = edit_comment(db, user, comment, payload.content)
    return {"message": "Comment updated successfully.", "comment": comment.as_dict()}


@router.delete("/{post_id}/comment/{comment_id}")
def delete_post_comment(
    post_id: int,
    comment_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    post = _get_post(db, post_id)
    comment = get_comment_on(db, "post", post_id, comment_id)
    deleted = delete_comment(db, user, comment, post.user_id)
    return {
        "message": f"Comment #{comment_id} deleted successfully.",
        "deletedComment": deleted,
    }


@router.post("/{post_id}/like", status_code=201)
def like_post(
    post_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    like = add_like(db, user, "post", _get_post(db, post_id))
    return {"message": "Post liked successfully!", "like": like.as_dict()}


@router.delete("/{post_id}/unlike")
def unlike_post(
    post_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    removed = remove_like(db, user, "post", _get_post(db, post_id))
    return {"message": "Post unliked successfully!", "removedLike": removed}
