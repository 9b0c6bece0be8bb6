from __future__ import annotations

import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.db import SessionExerciseRow, UserRow, WorkoutRow, WorkoutSessionRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.schemas import (
    CommentRequest,
    SessionRequest,
    SessionSavedResponse,
    SessionUpdateRequest,
)
from fitsocial.services import (
    add_comment,
    add_like,
    delete_comment,
    edit_comment,
    get_comment_on,
    get_or_404,
    remove_like,
    require_valid,
    session_detail,
)
from fitsocial.validators import (
    validate_comment_content,
    validate_distance,
    validate_duration,
    validate_notes,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["sessions"])

PERFORMANCE_FIELDS = (
    "weight_used",
    "sets_completed",
    "reps_completed",
    "duration_seconds",
    "distance_miles",
    "pace_minutes_per_mile",
)


def _get_session(db: Session, session_id: int) -> WorkoutSessionRow:
    return get_or_404(db, WorkoutSessionRow, session_id, "Session not found.")


def _validate_session(payload: Union[SessionRequest, SessionUpdateRequest]) -> None:
    if payload.difficulty is not None and not 1 <= payload.difficulty <= 5:
        raise HTTPException(
            status_code=400, detail="Difficulty must be an integer between 1 and 5."
        )
    if payload.duration_minutes is not None:
        require_valid(validate_duration(payload.duration_minutes))
    if payload.total_distance_miles is not None:
        require_valid(validate_distance(payload.total_distance_miles))
    require_valid(validate_notes(payload.notes))
    if not payload.exercises:
        raise HTTPException(
            status_code=400,
            detail="Session must include at least one exercise performance.",
        )


def _performances(payload, workout: WorkoutRow) -> list[SessionExerciseRow]:
    """
    Build performance rows, snapshotting each exercise's target from the workout.
    """
    targets = {row.exercise_id: row.target() for row in workout.exercises}
    rows = []
    for exercise in payload.exercises:
        if exercise.exercise_id not in targets:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Exercise {exercise.exercise_id} is not part of workout "
                    f"{workout.workout_id}."
                ),
            )
        row = SessionExerciseRow(
            exercise_id=exercise.exercise_id,
            exercise_target=targets[exercise.exercise_id],
        )
        for field in PERFORMANCE_FIELDS:
            setattr(row, field, getattr(exercise, field))
        rows.append(row)
    return rows


@router.get("/user/{user_id}")
def get_user_sessions(
    user_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    sessions = db.execute(
        select(WorkoutSessionRow)
        .where(WorkoutSessionRow.user_id == user_id)
        .order_by(
            WorkoutSessionRow.created_at.desc(), WorkoutSessionRow.session_id.desc()
        )
    ).scalars()
    return {
        "message": f"Got all sessions logged by user #{user_id}",
        "sessions": [s.as_dict() for s in sessions],
        "user_id": user_id,
    }


@router.get("/{session_id}")
def get_session(
    session_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    return session_detail(_get_session(db, session_id))


@router.post("", response_model=SessionSavedResponse, status_code=201)
def create_session(
    payload: SessionRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    _validate_session(payload)
    workout = get_or_404(db, WorkoutRow, payload.workout_id, "Workout not found.")
    session = WorkoutSessionRow(
        workout_id=workout.workout_id,
        user_id=user.user_id,
        duration_minutes=payload.duration_minutes,
        total_distance_miles=payload.total_distance_miles,
        notes=(payload.notes or "").strip() or None,
        difficulty=payload.difficulty,
    )
    session.exercises = _performances(payload, workout)
    db.add(session)
    db.commit()
    logger.info(
        "Logged session_id=%s for workout_id=%s", session.session_id, workout.workout_id
    )
    return SessionSavedResponse(
        message="Session logged successfully.", session_id=session.session_id
    )


@router.patch("/{session_id}", response_model=SessionSavedResponse)
def update_session(
    session_id: int,
    payload: SessionUpdateRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    session = _get_session(db, session_id)
    if session.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You do not have permission to edit this session."
        )
    _validate_session(payload)
    if payload.workout_id is not None and payload.workout_id != session.workout_id:
        workout = get_or_404(db, WorkoutRow, payload.workout_id, "Workout not found.")
    else:
        workout = session.workout

    rows = _performances(payload, workout)
    session.workout = workout
    session.duration_minutes = payload.duration_minutes
    session.total_distance_miles = payload.total_distance_miles
    session.notes = (payload.notes or "").strip() or None
    session.difficulty = payload.difficulty
    session.exercises = rows
    db.commit()
    return SessionSavedResponse(
        message="Session updated successfully.", session_id=session.session_id
    )


@router.delete("/{session_id}")
def delete_session(
    session_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    session = _get_session(db, session_id)
    if session.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You are not authorized to delete this session."
        )
    deleted = session.as_dict(include_exercises=False)
    db.delete(session)
    db.commit()
    logger.info("Deleted session_id=%s by user_id=%s", session_id, user.user_id)
    return {"message": "Session deleted successfully.", "deletedSession": deleted}


@router.post("/{session_id}/comment", status_code=201)
def comment_on_session(
    session_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    session = _get_session(db, session_id)
    comment = add_comment(db, user, "session", session, payload.content)
    return {
        "message": "Comment added successfully!",
        "session_id": session_id,
        "comment": comment.as_dict(),
    }


@router.patch("/{session_id}/comment/{comment_id}")
def update_session_comment(
    session_id: int,
    comment_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    comment = get_comment_on(db, "session", session_id, comment_id)
    comment = edit_comment(db, user, comment, payload.content)
    return {"message": "Comment updated successfully.", "comment": comment.as_dict()}


@router.delete("/{session_id}/comment/{comment_id}")
def delete_session_comment(
    session_id: int,
    comment_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    session = _get_session(db, session_id)
    comment = get_comment_on(db, "session", session_id, comment_id)
    deleted = delete_comment(db, user, comment, session.user_id)
    return {
        "message": f"Comment #{comment_id} deleted successfully.",
        "deletedComment": deleted,
    }


@router.post("/{session_id}/like", status_code=201)
def like_session(
    session_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    like = add_like(db, user, "session", _get_session(db, session_id))
    return {"message": "Session liked successfully!", "like": like.as_dict()}


@router.delete("/{session_id}/unlike")
def unlike_session(
    session_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    removed = remove_like(db, user, "session", _get_session(db, session_id))
    return {"message": "Session unliked successfully!", "removedLike": removed}
