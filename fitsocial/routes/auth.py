"""
Session sync: mirror the identity provider's account in the users table.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitsocial.auth import AuthClaims
from fitsocial.db import UserRow
from fitsocial.dependencies import get_current_claims, get_current_user, get_db_session
from fitsocial.schemas import MessageResponse, SyncUserRequest, SyncUserResponse, UserOut
from fitsocial.services import email_taken, require_valid, username_taken
from fitsocial.validators import validate_email, validate_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sync", response_model=SyncUserResponse)
def sync_user(
    payload: SyncUserRequest,
    response: Response,
    claims: AuthClaims = Depends(get_current_claims),
    db: Session = Depends(get_db_session),
):
    """
    Create the user for the token's uid on first sign-in, otherwise update the
    username/profile picture that were sent.
    """
    email = (claims.email or payload.email or "").strip()
    username = (payload.username or "").strip() or None
    user = db.execute(
        select(UserRow).where(UserRow.firebase_uid == claims.uid)
    ).scalar_one_or_none()

    if username is not None:
        require_valid(validate_username(username))
        if username_taken(db, username, exclude_user_id=user.user_id if user else None):
            raise HTTPException(status_code=409, detail="Username is already taken.")

    if user:
        if username is not None:
            user.username = username
        if payload.profile_pic is not None:
            user.profile_pic = payload.profile_pic
        if claims.email and claims.email != user.email:
            if email_taken(db, claims.email, exclude_user_id=user.user_id):
                raise HTTPException(status_code=409, detail="Email is already in use.")
            user.email = claims.email
        message = "User synced."
        response.status_code = 200
    else:
        require_valid(validate_username(username or ""))
        require_valid(validate_email(email))
        if email_taken(db, email):
            raise HTTPException(status_code=409, detail="Email is already in use.")
        user = UserRow(
            firebase_uid=claims.uid,
            email=email,
            username=username,
            profile_pic=payload.profile_pic,
        )
        db.add(user)
        message = "User synced (new)."
        response.status_code = 201

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=409, detail="Username or email is already in use."
        )
    db.refresh(user)
    logger.info("%s uid=%s user_id=%s", message, claims.uid, user.user_id)
    return SyncUserResponse(message=message, user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def get_me(user: UserRow = Depends(get_current_user)):
    return user


@router.delete("", response_model=MessageResponse)
def delete_account(
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Delete the caller's record and everything they own."""
    user_id = user.user_id
    db.delete(user)
    db.commit()
    logger.info("Deleted user_id=%s", user_id)
    return MessageResponse(message="User deleted from database.")
