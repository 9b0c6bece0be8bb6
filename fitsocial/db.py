"""
Relational model and engine wiring.

Accepts any SQLAlchemy URL (Postgres in production, SQLite for tests and
local runs).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend. SQLite drops the offset on
    storage, so values read back are tagged as UTC again.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Database:
    """
    Owns the engine and session factory. One instance per process.
    """

    def __init__(self, database_url: Optional[str] = None):
        database_url = database_url or DEFAULT_DATABASE_URL
        if database_url.startswith("sqlite"):
            # A single shared connection keeps in-memory data visible across
            # the threads FastAPI runs sync handlers on.
            self.engine = create_engine(
                database_url,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                database_url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)
        logger.info("Database ready (%s)", self.engine.url.get_backend_name())

    def session(self) -> Session:
        return self.Session()

    def reset(self) -> None:
        """Drop and recreate every table (useful in tests)."""
        Base.metadata.drop_all(self.engine)
        Base.metadata.create_all(self.engine)


def _public_user(user: Optional["UserRow"]) -> dict:
    if user is None:
        return {"user_id": None, "username": None, "profile_pic": None}
    return {
        "user_id": user.user_id,
        "username": user.username,
        "profile_pic": user.profile_pic,
    }


class UserRow(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    firebase_uid = Column(String(128), unique=True, nullable=False, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    username = Column(String(15), unique=True, nullable=False, index=True)
    profile_pic = Column(String, nullable=True)
    bio = Column(String(100), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    posts = relationship(
        "PostRow", back_populates="user", cascade="all, delete-orphan"
    )
    workouts = relationship(
        "WorkoutRow", back_populates="user", cascade="all, delete-orphan"
    )
    sessions = relationship(
        "WorkoutSessionRow", back_populates="user", cascade="all, delete-orphan"
    )
    comments = relationship(
        "CommentRow", back_populates="user", cascade="all, delete-orphan"
    )
    likes = relationship(
        "LikeRow", back_populates="user", cascade="all, delete-orphan"
    )
    sent_requests = relationship(
        "FriendRequestRow",
        foreign_keys="FriendRequestRow.sender_id",
        back_populates="sender",
        cascade="all, delete-orphan",
    )
    received_requests = relationship(
        "FriendRequestRow",
        foreign_keys="FriendRequestRow.receiver_id",
        back_populates="receiver",
        cascade="all, delete-orphan",
    )
    sent_notifications = relationship(
        "NotificationRow",
        foreign_keys="NotificationRow.sender_id",
        back_populates="sender",
        cascade="all, delete-orphan",
    )
    received_notifications = relationship(
        "NotificationRow",
        foreign_keys="NotificationRow.receiver_id",
        back_populates="receiver",
        cascade="all, delete-orphan",
    )

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "firebase_uid": self.firebase_uid,
            "email": self.email,
            "username": self.username,
            "profile_pic": self.profile_pic,
            "bio": self.bio,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def as_public_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "profile_pic": self.profile_pic,
            "bio": self.bio,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class PostRow(Base):
    __tablename__ = "posts"

    post_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    workout_id = Column(Integer, ForeignKey("workouts.workout_id"), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("UserRow", back_populates="posts")
    workout = relationship("WorkoutRow", back_populates="posts")
    comments = relationship(
        "CommentRow",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="CommentRow.created_at",
    )
    likes = relationship(
        "LikeRow", back_populates="post", cascade="all, delete-orphan"
    )

    def as_dict(self) -> dict:
        return {
            "post_id": self.post_id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "profile_pic": self.user.profile_pic if self.user else None,
            "content": self.content,
            "image_url": self.image_url,
            "workout_id": self.workout_id,
            "like_count": len(self.likes),
            "comment_count": len(self.comments),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ExerciseRow(Base):
    __tablename__ = "exercises"

    exercise_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(50), nullable=False)
    # Lower-cased title; the catalog is matched case-insensitively.
    title_key = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )


class WorkoutRow(Base):
    __tablename__ = "workouts"

    workout_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    title = Column(String(50), nullable=False)
    description = Column(String(75), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("UserRow", back_populates="workouts")
    # Posts keep existing when their workout goes away; the FK is nulled.
    posts = relationship("PostRow", back_populates="workout")
    exercises = relationship(
        "WorkoutExerciseRow",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="WorkoutExerciseRow.position",
    )
    sessions = relationship(
        "WorkoutSessionRow", back_populates="workout", cascade="all, delete-orphan"
    )
    comments = relationship(
        "CommentRow",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="CommentRow.created_at",
    )
    likes = relationship(
        "LikeRow", back_populates="workout", cascade="all, delete-orphan"
    )

    def as_dict(self, include_exercises: bool = True) -> dict:
        payload = {
            "workout_id": self.workout_id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "title": self.title,
            "description": self.description,
            "like_count": len(self.likes),
            "comment_count": len(self.comments),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_exercises:
            payload["exercises"] = [ex.as_dict() for ex in self.exercises]
        return payload


class WorkoutExerciseRow(Base):
    __tablename__ = "workout_exercises"
    __table_args__ = (UniqueConstraint("workout_id", "exercise_id"),)

    workout_exercise_id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(
        Integer, ForeignKey("workouts.workout_id"), nullable=False, index=True
    )
    exercise_id = Column(Integer, ForeignKey("exercises.exercise_id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    sets = Column(Integer, nullable=True)
    reps = Column(Integer, nullable=True)
    weight_used = Column(Float, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    distance_miles = Column(Float, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    workout = relationship("WorkoutRow", back_populates="exercises")
    exercise = relationship("ExerciseRow")

    def target(self) -> dict:
        """Target values for this exercise, omitting the unset ones."""
        target = {}
        for key in ("sets", "reps", "duration_seconds", "distance_miles"):
            value = getattr(self, key)
            if value is not None:
                target[key] = value
        return target

    def as_dict(self) -> dict:
        return {
            "exercise_id": self.exercise_id,
            "title": self.exercise.title if self.exercise else None,
            "description": self.exercise.description if self.exercise else None,
            "sets": self.sets,
            "reps": self.reps,
            "weight_used": self.weight_used,
            "duration_seconds": self.duration_seconds,
            "distance_miles": self.distance_miles,
        }


class WorkoutSessionRow(Base):
    __tablename__ = "workout_sessions"

    session_id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(
        Integer, ForeignKey("workouts.workout_id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=True)
    total_distance_miles = Column(Float, nullable=True)
    notes = Column(String(250), nullable=True)
    difficulty = Column(Integer, nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("UserRow", back_populates="sessions")
    workout = relationship("WorkoutRow", back_populates="sessions")
    exercises = relationship(
        "SessionExerciseRow",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionExerciseRow.session_exercise_id",
    )
    comments = relationship(
        "CommentRow",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="CommentRow.created_at",
    )
    likes = relationship(
        "LikeRow", back_populates="session", cascade="all, delete-orphan"
    )

    def as_dict(self, include_exercises: bool = True) -> dict:
        payload = {
            "session_id": self.session_id,
            "workout_id": self.workout_id,
            "workout_title": self.workout.title if self.workout else None,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "duration_minutes": self.duration_minutes,
            "total_distance_miles": self.total_distance_miles,
            "notes": self.notes,
            "difficulty": self.difficulty,
            "like_count": len(self.likes),
            "comment_count": len(self.comments),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if include_exercises:
            payload["exercises"] = [ex.as_dict() for ex in self.exercises]
        return payload


class SessionExerciseRow(Base):
    __tablename__ = "session_exercises"

    session_exercise_id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        Integer, ForeignKey("workout_sessions.session_id"), nullable=False, index=True
    )
    exercise_id = Column(Integer, ForeignKey("exercises.exercise_id"), nullable=False)
    weight_used = Column(Float, nullable=True)
    sets_completed = Column(Integer, nullable=True)
    reps_completed = Column(Integer, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    distance_miles = Column(Float, nullable=True)
    pace_minutes_per_mile = Column(Float, nullable=True)
    exercise_target = Column(JSON, nullable=False, default=dict)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    session = relationship("WorkoutSessionRow", back_populates="exercises")
    exercise = relationship("ExerciseRow")

    def as_dict(self) -> dict:
        return {
            "exercise_id": self.exercise_id,
            "title": self.exercise.title if self.exercise else None,
            "weight_used": self.weight_used,
            "sets_completed": self.sets_completed,
            "reps_completed": self.reps_completed,
            "duration_seconds": self.duration_seconds,
            "distance_miles": self.distance_miles,
            "pace_minutes_per_mile": self.pace_minutes_per_mile,
            "exercise_target": self.exercise_target,
        }


class CommentRow(Base):
    __tablename__ = "comments"

    comment_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.post_id"), nullable=True, index=True)
    workout_id = Column(
        Integer, ForeignKey("workouts.workout_id"), nullable=True, index=True
    )
    session_id = Column(
        Integer, ForeignKey("workout_sessions.session_id"), nullable=True, index=True
    )
    content = Column(String(250), nullable=False)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    user = relationship("UserRow", back_populates="comments")
    post = relationship("PostRow", back_populates="comments")
    workout = relationship("WorkoutRow", back_populates="comments")
    session = relationship("WorkoutSessionRow", back_populates="comments")
    likes = relationship(
        "LikeRow", back_populates="comment", cascade="all, delete-orphan"
    )

    def as_dict(self) -> dict:
        payload = {
            "comment_id": self.comment_id,
            "post_id": self.post_id,
            "workout_id": self.workout_id,
            "session_id": self.session_id,
            "content": self.content,
            "like_count": len(self.likes),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        payload.update(_public_user(self.user))
        return payload


class LikeRow(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id"),
        UniqueConstraint("user_id", "workout_id"),
        UniqueConstraint("user_id", "session_id"),
        UniqueConstraint("user_id", "comment_id"),
    )

    like_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    post_id = Column(Integer, ForeignKey("posts.post_id"), nullable=True)
    workout_id = Column(Integer, ForeignKey("workouts.workout_id"), nullable=True)
    session_id = Column(
        Integer, ForeignKey("workout_sessions.session_id"), nullable=True
    )
    comment_id = Column(Integer, ForeignKey("comments.comment_id"), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    user = relationship("UserRow", back_populates="likes")
    post = relationship("PostRow", back_populates="likes")
    workout = relationship("WorkoutRow", back_populates="likes")
    session = relationship("WorkoutSessionRow", back_populates="likes")
    comment = relationship("CommentRow", back_populates="likes")

    def as_dict(self) -> dict:
        return {
            "like_id": self.like_id,
            "user_id": self.user_id,
            "post_id": self.post_id,
            "workout_id": self.workout_id,
            "session_id": self.session_id,
            "comment_id": self.comment_id,
            "created_at": self.created_at,
        }

    def liker(self) -> dict:
        return _public_user(self.user)


class FriendRequestRow(Base):
    __tablename__ = "friend_requests"

    friend_request_id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(
        Integer, ForeignKey("users.user_id"), nullable=False, index=True
    )
    receiver_id = Column(
        Integer, ForeignKey("users.user_id"), nullable=False, index=True
    )
    status = Column(String(16), nullable=False, default="Pending", index=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    sender = relationship(
        "UserRow", foreign_keys=[sender_id], back_populates="sent_requests"
    )
    receiver = relationship(
        "UserRow", foreign_keys=[receiver_id], back_populates="received_requests"
    )

    def as_dict(self) -> dict:
        return {
            "friend_request_id": self.friend_request_id,
            "sender_id": self.sender_id,
            "sender_username": self.sender.username if self.sender else None,
            "receiver_id": self.receiver_id,
            "receiver_username": self.receiver.username if self.receiver else None,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class NotificationRow(Base):
    __tablename__ = "notifications"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    sender_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    receiver_id = Column(
        Integer, ForeignKey("users.user_id"), nullable=False, index=True
    )
    type = Column(String(32), nullable=False, index=True)
    message = Column(String, nullable=False)
    reference_type = Column(String(32), nullable=True)
    reference_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow
    )

    sender = relationship(
        "UserRow", foreign_keys=[sender_id], back_populates="sent_notifications"
    )
    receiver = relationship(
        "UserRow",
        foreign_keys=[receiver_id],
        back_populates="received_notifications",
    )

    def as_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "sender_id": self.sender_id,
            "sender_username": self.sender.username if self.sender else None,
            "sender_profile_pic": self.sender.profile_pic if self.sender else None,
            "receiver_id": self.receiver_id,
            "type": self.type,
            "message": self.message,
            "reference_type": self.reference_type,
            "reference_id": self.reference_id,
            "is_read": self.is_read,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
