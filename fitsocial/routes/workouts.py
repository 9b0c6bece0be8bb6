from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.db import UserRow, WorkoutExerciseRow, WorkoutRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.schemas import (
    CommentRequest,
    ExerciseInput,
    MessageResponse,
    WorkoutCreatedResponse,
    WorkoutRequest,
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
    resolve_exercise,
    workout_detail,
)
from fitsocial.validators import (
    MAX_WORKOUT_EXERCISES,
    validate_comment_content,
    validate_exercise_title,
    validate_reps,
    validate_sets,
    validate_workout_description,
    validate_workout_name,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workout", tags=["workouts"])

TARGET_FIELDS = ("sets", "reps", "weight_used", "duration_seconds", "distance_miles")


def _get_workout(db: Session, workout_id: int) -> WorkoutRow:
    return get_or_404(db, WorkoutRow, workout_id, "Workout not found.")


def _validate_workout(payload: WorkoutRequest) -> None:
    require_valid(validate_workout_name(payload.title))
    require_valid(validate_workout_description(payload.description))
    if not 1 <= len(payload.exercises) <= MAX_WORKOUT_EXERCISES:
        raise HTTPException(
            status_code=400,
            detail=(
                "Invalid workout data. Must include a title and between 1 and "
                f"{MAX_WORKOUT_EXERCISES} exercises."
            ),
        )
    seen = set()
    for exercise in payload.exercises:
        require_valid(validate_exercise_title(exercise.title))
        if exercise.sets is not None:
            require_valid(validate_sets(exercise.sets))
        if exercise.reps is not None:
            require_valid(validate_reps(exercise.reps))
        for field in ("weight_used", "duration_seconds", "distance_miles"):
            value = getattr(exercise, field)
            if value is not None and value < 0:
                raise HTTPException(
                    status_code=400,
                    detail=f"{field} cannot be negative for {exercise.title.strip()}.",
                )
        key = exercise.title.strip().lower()
        if key in seen:
            raise HTTPException(
                status_code=400,
                detail=f"Exercise {exercise.title.strip()} is listed more than once.",
            )
        seen.add(key)


def _apply_targets(row: WorkoutExerciseRow, exercise: ExerciseInput, position: int) -> None:
    row.position = position
    for field in TARGET_FIELDS:
        setattr(row, field, getattr(exercise, field))


@router.get("/user/{user_id}")
def get_user_workouts(
    user_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    workouts = db.execute(
        select(WorkoutRow)
        .where(WorkoutRow.user_id == user_id)
        .order_by(WorkoutRow.created_at.desc(), WorkoutRow.workout_id.desc())
    ).scalars()
    return {
        "message": f"Got all workouts created by user #{user_id}",
        "workouts": [w.as_dict() for w in workouts],
        "user_id": user_id,
    }


@router.get("/{workout_id}")
def get_workout(
    workout_id: int,
    _: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    return workout_detail(_get_workout(db, workout_id))


@router.post("", response_model=WorkoutCreatedResponse, status_code=201)
def create_workout(
    payload: WorkoutRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """
    Create a workout. Exercises are matched against the shared catalog by
    title, case-insensitively; unknown titles are added to it.
    """
    _validate_workout(payload)
    workout = WorkoutRow(
        user_id=user.user_id,
        title=payload.title.strip(),
        description=(payload.description or "").strip() or None,
    )
    db.add(workout)
    for position, exercise in enumerate(payload.exercises):
        catalog = resolve_exercise(db, exercise.title, exercise.description)
        row = WorkoutExerciseRow(exercise_id=catalog.exercise_id)
        _apply_targets(row, exercise, position)
        workout.exercises.append(row)
    db.commit()
    logger.info("Created workout_id=%s for user_id=%s", workout.workout_id, user.user_id)
    return WorkoutCreatedResponse(
        message="Workout created successfully.", workout_id=workout.workout_id
    )


@router.patch("/{workout_id}", response_model=MessageResponse)
def update_workout(
    workout_id: int,
    payload: WorkoutRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    workout = _get_workout(db, workout_id)
    if workout.user_id != user.user_id:
        raise HTTPException(
            status_code=403,
            detail="Unauthorized: You do not have permission to edit this workout.",
        )
    _validate_workout(payload)
    workout.title = payload.title.strip()
    workout.description = (payload.description or "").strip() or None

    existing = {row.exercise_id: row for row in workout.exercises}
    kept = []
    for position, exercise in enumerate(payload.exercises):
        catalog = resolve_exercise(db, exercise.title, exercise.description)
        row = existing.pop(catalog.exercise_id, None)
        if row is None:
            row = WorkoutExerciseRow(exercise_id=catalog.exercise_id)
        _apply_targets(row, exercise, position)
        kept.append(row)
    # Rows left in ``existing`` were dropped and are orphaned by the assignment.
    workout.exercises = kept
    db.commit()
    return MessageResponse(message="Workout updated successfully.")


@router.delete("/{workout_id}", response_model=MessageResponse)
def delete_workout(
    workout_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    workout = _get_workout(db, workout_id)
    if workout.user_id != user.user_id:
        raise HTTPException(
            status_code=403, detail="You are not authorized to delete this workout."
        )
    db.delete(workout)
    db.commit()
    logger.info("Deleted workout_id=%s by user_id=%s", workout_id, user.user_id)
    return MessageResponse(message=f"Workout #{workout_id} deleted successfully.")


@router.post("/{workout_id}/comment", status_code=201)
def comment_on_workout(
    workout_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    workout = _get_workout(db, workout_id)
    comment = add_comment(db, user, "workout", workout, payload.content)
    return {
        "message": "Comment added successfully!",
        "workout_id": workout_id,
        "comment": comment.as_dict(),
    }


@router.patch("/{workout_id}/comment/{comment_id}")
def update_workout_comment(
    workout_id: int,
    comment_id: int,
    payload: CommentRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    require_valid(validate_comment_content(payload.content))
    comment = get_comment_on(db, "workout", workout_id, comment_id)
    comment = edit_comment(db, user, comment, payload.content)
    return {"message": "Comment updated successfully.", "comment": comment.as_dict()}


@router.delete("/{workout_id}/comment/{comment_id}")
def delete_workout_comment(
    workout_id: int,
    comment_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    workout = _get_workout(db, workout_id)
    comment = get_comment_on(db, "workout", workout_id, comment_id)
    deleted = delete_comment(db, user, comment, workout.user_id)
    return {
        "message": f"Comment #{comment_id} deleted successfully.",
        "deletedComment": deleted,
    }


@router.post("/{workout_id}/like", status_code=201)
def like_workout(
    workout_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    like = add_like(db, user, "workout", _get_workout(db, workout_id))
    return {"message": "Workout liked successfully!", "like": like.as_dict()}


@router.delete("/{workout_id}/unlike")
def unlike_workout(
    workout_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    removed = remove_like(db, user, "workout", _get_workout(db, workout_id))
    return {"message": "Workout unliked successfully!", "removedLike": removed}
