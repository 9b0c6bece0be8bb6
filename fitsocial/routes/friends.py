from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from fitsocial.db import FriendRequestRow, UserRow
from fitsocial.dependencies import get_current_user, get_db_session
from fitsocial.services import (
    FRIEND_ACCEPTED,
    FRIEND_DENIED,
    FRIEND_PENDING,
    create_notification,
    get_or_404,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/friend", tags=["friends"])


def _get_request(db: Session, friend_request_id: int) -> FriendRequestRow:
    return get_or_404(
        db, FriendRequestRow, friend_request_id, "Friend request not found."
    )


def _pending_for_receiver(
    db: Session, friend_request_id: int, user: UserRow
) -> FriendRequestRow:
    request = _get_request(db, friend_request_id)
    if request.receiver_id != user.user_id:
        raise HTTPException(
            status_code=403,
            detail="Only the recipient can respond to this friend request.",
        )
    if request.status != FRIEND_PENDING:
        raise HTTPException(
            status_code=409, detail="Friend request is no longer pending."
        )
    return request


@router.get("")
def get_friend_requests(
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    requests = db.execute(
        select(FriendRequestRow)
        .where(
            or_(
                FriendRequestRow.sender_id == user.user_id,
                FriendRequestRow.receiver_id == user.user_id,
            )
        )
        .order_by(FriendRequestRow.friend_request_id)
    ).scalars()
    return [r.as_dict() for r in requests]


@router.get("/sent")
def get_sent_requests(
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    requests = db.execute(
        select(FriendRequestRow)
        .where(
            FriendRequestRow.sender_id == user.user_id,
            FriendRequestRow.status == FRIEND_PENDING,
        )
        .order_by(FriendRequestRow.friend_request_id)
    ).scalars()
    return [r.as_dict() for r in requests]


@router.get("/received")
def get_received_requests(
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    requests = db.execute(
        select(FriendRequestRow)
        .where(
            FriendRequestRow.receiver_id == user.user_id,
            FriendRequestRow.status == FRIEND_PENDING,
        )
        .order_by(FriendRequestRow.friend_request_id)
    ).scalars()
    return [r.as_dict() for r in requests]


@router.post("/{receiver_id}", status_code=201)
def send_friend_request(
    receiver_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    if receiver_id == user.user_id:
        raise HTTPException(
            status_code=400, detail="You cannot send a friend request to yourself."
        )
    get_or_404(db, UserRow, receiver_id, f"User with user ID {receiver_id} not found.")

    existing = db.execute(
        select(FriendRequestRow.friend_request_id).where(
            or_(
                and_(
                    FriendRequestRow.sender_id == user.user_id,
                    FriendRequestRow.receiver_id == receiver_id,
                ),
                and_(
                    FriendRequestRow.sender_id == receiver_id,
                    FriendRequestRow.receiver_id == user.user_id,
                ),
            )
        )
    ).first()
    if existing:
        raise HTTPException(
            status_code=409,
            detail="Friend request already exists between these users.",
        )

    request = FriendRequestRow(
        sender_id=user.user_id, receiver_id=receiver_id, status=FRIEND_PENDING
    )
    db.add(request)
    db.flush()
    create_notification(
        db,
        sender=user,
        receiver_id=receiver_id,
        type="friend_request",
        message=f"{user.username} has sent you a friend request.",
        reference_type="friend_request",
        reference_id=request.friend_request_id,
    )
    db.commit()
    db.refresh(request)
    return {"message": "Friend request sent successfully.", "request": request.as_dict()}


@router.put("/accept/{friend_request_id}")
def accept_friend_request(
    friend_request_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    request = _pending_for_receiver(db, friend_request_id, user)
    request.status = FRIEND_ACCEPTED
    create_notification(
        db,
        sender=user,
        receiver_id=request.sender_id,
        type="friend_request_accepted",
        message=f"{user.username} has accepted your friend request.",
        reference_type="friend_request",
        reference_id=request.friend_request_id,
    )
    db.commit()
    return {"message": "Friend request accepted.", "request": request.as_dict()}


@router.put("/deny/{friend_request_id}")
def deny_friend_request(
    friend_request_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    request = _pending_for_receiver(db, friend_request_id, user)
    request.status = FRIEND_DENIED
    db.commit()
    return {"message": "Friend request denied.", "request": request.as_dict()}


@router.delete("/cancel/{friend_request_id}")
def cancel_friend_request(
    friend_request_id: int,
    user: UserRow = Depends(get_current_user),
    db: Session = Depends(get_db_session),
):
    """Either side may withdraw a request; this also ends an accepted friendship."""
    request = _get_request(db, friend_request_id)
    if user.user_id not in (request.sender_id, request.receiver_id):
        raise HTTPException(
            status_code=403, detail="You cannot cancel this friend request."
        )
    canceled = request.as_dict()
    db.delete(request)
    db.commit()
    logger.info("Canceled friend_request_id=%s", friend_request_id)
    return {"message": "Friend request canceled.", "canceledRequest": canceled}
