from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from fitsocial.db import UserRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.schemas import AvailabilityResponse, UpdateBioRequest, UsernameCheckRequest
from fitsocial.services import get_or_404, list_friends, require_valid, username_taken
from fitsocial.validators import validate_bio, validate_username

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user", tags=["users"], dependencies=[Depends(get_current_user)]
)


@router.get("")
def get_all_users(db: Session = Depends(get_db_session)):
    users = db.execute(select(UserRow).order_by(UserRow.user_id)).scalars()
    return {"message": "Got all users.", "users": [u.as_public_dict() for u in users]}


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db_session)):
    user = get_or_404(db, UserRow, user_id, "User not found.")
    return {"message": "Got user.", "user": user.as_public_dict()}


@router.get("/{user_id}/friends")
def get_user_friends(user_id: int, db: Session = Depends(get_db_session)):
    get_or_404(db, UserRow, user_id, "User not found.")
    return list_friends(db, user_id)


@router.post("/checkUsername", response_model=AvailabilityResponse)
def check_username(payload: UsernameCheckRequest, db: Session = Depends(get_db_session)):
    require_valid(validate_username(payload.username))
    if username_taken(db, payload.username):
        raise HTTPException(status_code=400, detail="Username is already taken.")
    return AvailabilityResponse(available=True, message="Username is available.")


@router.patch("/{user_id}/updateBio")
def update_bio(
    user_id: int,
    payload: UpdateBioRequest,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    if user.user_id != user_id:
        raise HTTPException(
            status_code=403, detail="You can only update your own bio."
        )
    require_valid(validate_bio(payload.bio))
    user.bio = payload.bio.strip() if payload.bio else None
    db.commit()
    return {"message": f"Bio updated for user #{user_id}.", "user": user.as_public_dict()}
