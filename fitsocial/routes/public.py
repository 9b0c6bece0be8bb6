"""
Read-only routes that need no token: availability checks for sign-up and the
public profile pages.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.db import PostRow, UserRow, WorkoutRow, WorkoutSessionRow
from fitsocial.dependencies import get_db_session
from fitsocial.services import (
    email_taken,
    get_or_404,
    get_user_by_username,
    list_friends,
    post_detail,
    session_detail,
    username_taken,
    workout_detail,
)

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/checkUsername")
def check_username(
    username: str = Query(default=""), db: Session = Depends(get_db_session)
):
    if not username.strip():
        raise HTTPException(status_code=400, detail="Username is required.")
    return {"available": not username_taken(db, username)}


@router.get("/checkEmail")
def check_email(email: str = Query(default=""), db: Session = Depends(get_db_session)):
    if not email.strip():
        raise HTTPException(status_code=400, detail="Email is required.")
    return {"available": not email_taken(db, email)}


@router.get("/user")
def get_all_users(db: Session = Depends(get_db_session)):
    users = db.execute(select(UserRow).order_by(UserRow.user_id)).scalars()
    return {"message": "Got all users.", "users": [u.as_public_dict() for u in users]}


@router.get("/user/{username}")
def get_user(username: str, db: Session = Depends(get_db_session)):
    user = get_user_by_username(db, username)
    return {"message": "Got user.", "user": user.as_public_dict()}


@router.get("/user/{username}/friends")
def get_user_friends(username: str, db: Session = Depends(get_db_session)):
    user = get_user_by_username(db, username)
    return list_friends(db, user.user_id)


@router.get("/post/user/{username}")
def get_user_posts(username: str, db: Session = Depends(get_db_session)):
    user = get_user_by_username(db, username)
    posts = db.execute(
        select(PostRow)
        .where(PostRow.user_id == user.user_id)
        .order_by(PostRow.created_at.desc(), PostRow.post_id.desc())
    ).scalars()
    return {
        "message": f"Retrieved all posts from user #{user.user_id}",
        "posts": [post.as_dict() for post in posts],
        "user_id": user.user_id,
    }


@router.get("/post/{post_id}")
def get_post(post_id: int, db: Session = Depends(get_db_session)):
    return post_detail(get_or_404(db, PostRow, post_id, "Post not found."))


@router.get("/workout/user/{username}")
def get_user_workouts(username: str, db: Session = Depends(get_db_session)):
    user = get_user_by_username(db, username)
    workouts = db.execute(
        select(WorkoutRow)
        .where(WorkoutRow.user_id == user.user_id)
        .order_by(WorkoutRow.created_at.desc(), WorkoutRow.workout_id.desc())
    ).scalars()
    return {
        "message": f"Got all workouts created by user #{user.user_id}",
        "workouts": [w.as_dict() for w in workouts],
        "user_id": user.user_id,
    }


@router.get("/workout/{workout_id}")
def get_workout(workout_id: int, db: Session = Depends(get_db_session)):
    return workout_detail(get_or_404(db, WorkoutRow, workout_id, "Workout not found."))


@router.get("/session/user/{username}")
def get_user_sessions(username: str, db: Session = Depends(get_db_session)):
    user = get_user_by_username(db, username)
    sessions = db.execute(
        select(WorkoutSessionRow)
        .where(WorkoutSessionRow.user_id == user.user_id)
        .order_by(
            WorkoutSessionRow.created_at.desc(), WorkoutSessionRow.session_id.desc()
        )
    ).scalars()
    return {
        "message": f"Got all sessions logged by user #{user.user_id}",
        "sessions": [s.as_dict() for s in sessions],
        "user_id": user.user_id,
    }


@router.get("/session/{session_id}")
def get_session(session_id: int, db: Session = Depends(get_db_session)):
    return session_detail(
        get_or_404(db, WorkoutSessionRow, session_id, "Session not found.")
    )
