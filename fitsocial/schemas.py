"""
Pydantic schemas for the fitsocial API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool


class MessageResponse(BaseModel):
    message: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    firebase_uid: str
    email: str
    username: str
    profile_pic: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SyncUserRequest(BaseModel):
    username: Optional[str] = None
    profile_pic: Optional[str] = None
    # Sent by the web client; the verified token's email is authoritative.
    email: Optional[str] = None


class SyncUserResponse(BaseModel):
    message: str
    user: UserOut


class UsernameCheckRequest(BaseModel):
    username: str = Field(..., max_length=64)


class AvailabilityResponse(BaseModel):
    available: bool
    message: str


class UpdateBioRequest(BaseModel):
    bio: Optional[str] = None


class PostRequest(BaseModel):
    content: str
    image_url: Optional[str] = None
    workout_id: Optional[int] = None


class CommentRequest(BaseModel):
    content: str


class ExerciseInput(BaseModel):
    title: str
    description: Optional[str] = None
    sets: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("sets", "set_count")
    )
    reps: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("reps", "rep_count")
    )
    weight_used: Optional[float] = None
    duration_seconds: Optional[int] = None
    distance_miles: Optional[float] = None


class WorkoutRequest(BaseModel):
    title: str
    description: Optional[str] = None
    exercises: list[ExerciseInput] = Field(default_factory=list)


class WorkoutCreatedResponse(BaseModel):
    message: str
    workout_id: int


class SessionExerciseInput(BaseModel):
    exercise_id: int
    weight_used: Optional[float] = None
    sets_completed: Optional[int] = None
    reps_completed: Optional[int] = None
    duration_seconds: Optional[int] = None
    distance_miles: Optional[float] = None
    pace_minutes_per_mile: Optional[float] = None


class SessionRequest(BaseModel):
    workout_id: int
    duration_minutes: Optional[int] = None
    total_distance_miles: Optional[float] = None
    notes: Optional[str] = None
    difficulty: Optional[int] = None
    exercises: list[SessionExerciseInput] = Field(default_factory=list)


class SessionUpdateRequest(BaseModel):
    workout_id: Optional[int] = None
    duration_minutes: Optional[int] = None
    total_distance_miles: Optional[float] = None
    notes: Optional[str] = None
    difficulty: Optional[int] = None
    exercises: list[SessionExerciseInput] = Field(default_factory=list)


class SessionSavedResponse(BaseModel):
    message: str
    session_id: int


class NotificationStatusRequest(BaseModel):
    # Current read status as seen by the client; the server flips it.
    is_read: StrictBool


class SignUploadResponse(BaseModel):
    upload_url: str
    read_url: str
    path: str
    content_type: str


UploadKind = Literal["profile_pic", "post_image"]
