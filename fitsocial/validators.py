"""
Input validators shared by the API and the client.

Each validator returns ``None`` when the value is acceptable, otherwise the
message to show the user.
"""

from __future__ import annotations

import re
from typing import Any, Optional

USERNAME_MIN_LENGTH = 6
USERNAME_MAX_LENGTH = 15
PASSWORD_MIN_LENGTH = 8
BIO_MAX_LENGTH = 100
POST_MAX_LENGTH = 1000
COMMENT_MAX_LENGTH = 250
NOTES_MAX_LENGTH = 250
WORKOUT_NAME_MIN_LENGTH = 3
WORKOUT_NAME_MAX_LENGTH = 50
WORKOUT_DESCRIPTION_MAX_LENGTH = 75
EXERCISE_TITLE_MIN_LENGTH = 3
EXERCISE_TITLE_MAX_LENGTH = 50
MAX_WORKOUT_EXERCISES = 10
MAX_SETS = 25
MAX_REPS = 50
MAX_DURATION_MINUTES = 300
MAX_DISTANCE_MILES = 100

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHAR_PATTERN = re.compile(r"[!@#$%^&*()_\-+={}\[\]|:;\"'<>,.?/]")


def validate_username(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return "Username is required."
    if len(value) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} characters."
    if len(value) > USERNAME_MAX_LENGTH:
        return f"Username cannot exceed {USERNAME_MAX_LENGTH} characters."
    if not USERNAME_PATTERN.match(value):
        return "Username can only contain letters, numbers, underscores, and hyphens."
    return None


def validate_email(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return "Email is required."
    if not EMAIL_PATTERN.match(value):
        return "Enter a valid email address."
    return None


def validate_password(value: Optional[str]) -> Optional[str]:
    if not value:
        return "Password is required."
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters."
    if not re.search(r"\d", value):
        return "Password must contain at least one number."
    if not SPECIAL_CHAR_PATTERN.search(value):
        return "Password must include at least one special character."
    return None


def validate_confirm_password(password: Optional[str], confirm: Optional[str]) -> Optional[str]:
    if not confirm:
        return "Please confirm your password."
    if password != confirm:
        return "Passwords do not match."
    return None


def validate_bio(value: Optional[str]) -> Optional[str]:
    if value and len(value) > BIO_MAX_LENGTH:
        return f"Bio cannot exceed {BIO_MAX_LENGTH} characters."
    return None


def validate_post_content(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Content cannot be empty."
    if len(value) > POST_MAX_LENGTH:
        return f"Post cannot exceed {POST_MAX_LENGTH} characters."
    return None


def validate_comment_content(value: Optional[str]) -> Optional[str]:
    if not value or not value.strip():
        return "Comment cannot be empty."
    if len(value) > COMMENT_MAX_LENGTH:
        return f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters."
    return None


def validate_notes(value: Optional[str]) -> Optional[str]:
    if value and len(value) > NOTES_MAX_LENGTH:
        return f"Notes cannot exceed {NOTES_MAX_LENGTH} characters."
    return None


def validate_workout_name(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return "Workout name is required."
    if len(value) < WORKOUT_NAME_MIN_LENGTH:
        return f"Workout name must be at least {WORKOUT_NAME_MIN_LENGTH} characters."
    if len(value) > WORKOUT_NAME_MAX_LENGTH:
        return f"Workout name cannot exceed {WORKOUT_NAME_MAX_LENGTH} characters."
    return None


def validate_workout_description(value: Optional[str]) -> Optional[str]:
    if value and len(value.strip()) > WORKOUT_DESCRIPTION_MAX_LENGTH:
        return f"Description cannot exceed {WORKOUT_DESCRIPTION_MAX_LENGTH} characters."
    return None


def validate_exercise_title(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return "Exercise title is required."
    if len(value) < EXERCISE_TITLE_MIN_LENGTH:
        return f"Exercise title must be at least {EXERCISE_TITLE_MIN_LENGTH} characters."
    if len(value) > EXERCISE_TITLE_MAX_LENGTH:
        return f"Exercise title cannot exceed {EXERCISE_TITLE_MAX_LENGTH} characters."
    return None


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _validate_bounded_int(
    value: Any, label: str, maximum: int, required: str, unit: str = ""
) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return required
    number = _as_number(value)
    if number is None or not number.is_integer() or number < 1:
        return f"{label} must be a positive integer."
    if number > maximum:
        return f"{label} cannot exceed {maximum}{unit}."
    return None


def validate_sets(value: Any) -> Optional[str]:
    return _validate_bounded_int(value, "Sets", MAX_SETS, "Set count is required.")


def validate_reps(value: Any) -> Optional[str]:
    return _validate_bounded_int(value, "Reps", MAX_REPS, "Rep count is required.")


def validate_duration(value: Any) -> Optional[str]:
    return _validate_bounded_int(
        value, "Duration", MAX_DURATION_MINUTES, "Duration is required.", " minutes"
    )


def validate_distance(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "Distance is required."
    number = _as_number(value)
    if number is None or number <= 0:
        return "Distance must be a positive number."
    if number > MAX_DISTANCE_MILES:
        return f"Distance cannot exceed {MAX_DISTANCE_MILES} miles."
    return None


def validate_signup(
    username: Optional[str],
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
) -> dict[str, str]:
    """Validate a sign-up form. Returns field -> message for the failing fields."""
    checks = {
        "username": validate_username(username),
        "email": validate_email(email),
        "password": validate_password(password),
        "confirm_password": validate_confirm_password(password, confirm_password),
    }
    return {field: message for field, message in checks.items() if message}
