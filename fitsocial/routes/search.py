from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from fitsocial.db import UserRow, WorkoutRow
from fitsocial.dependencies import get_db_session

router = APIRouter(prefix="/search", tags=["search"])

DEFAULT_LIMIT = 5
TYPED_LIMIT = 10


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("")
def search(
    query: Optional[str] = Query(default=None),
    type: Optional[Literal["users", "workouts"]] = Query(default=None),
    db: Session = Depends(get_db_session),
):
    """Case-insensitive substring search over usernames and workout titles."""
    if not query or not query.strip():
        raise HTTPException(
            status_code=400,
            detail='The "query" parameter is required. Please provide a search term.',
        )
    pattern = f"%{_escape_like(query.strip().lower())}%"
    limit = TYPED_LIMIT if type else DEFAULT_LIMIT
    results: dict[str, list] = {"users": [], "workouts": []}

    if type in (None, "users"):
        users = db.execute(
            select(UserRow)
            .where(func.lower(UserRow.username).like(pattern, escape="\\"))
            .order_by(UserRow.username)
            .limit(limit)
        ).scalars()
        results["users"] = [
            {"user_id": u.user_id, "username": u.username, "profile_pic": u.profile_pic}
            for u in users
        ]

    if type in (None, "workouts"):
        workouts = db.execute(
            select(WorkoutRow)
            .where(func.lower(WorkoutRow.title).like(pattern, escape="\\"))
            .order_by(WorkoutRow.title)
            .limit(limit)
        ).scalars()
        results["workouts"] = [
            {
                "workout_id": w.workout_id,
                "title": w.title,
                "description": w.description,
            }
            for w in workouts
        ]

    return {"results": results}
