"""
Python client for the fitsocial API.

``Fetcher`` tracks loading and error state around each request the way the web
client's fetch hook does; ``ApiClient`` wraps every REST call in a method that
builds the URL, attaches the bearer token and forwards the JSON body.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote, urlencode

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds
FALLBACK_ERROR = "Something went wrong. Please try again!"


class RequestError(Exception):
    """A request failed; ``str(err)`` is the message to show the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class Fetcher:
    """
    Sends JSON requests and records ``is_loading``/``has_error``.

    Any object with a ``requests``-style ``request(method, url, headers=,
    json=)`` method can stand in for the session. ``timeout`` is only passed
    when set; pass ``None`` for sessions that do not take one.
    """

    def __init__(self, session=None, timeout: Optional[float] = REQUEST_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.is_loading = False
        self.has_error: Optional[str] = None

    def send_request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[dict] = None,
        body: Any = None,
    ) -> Any:
        """
        Send the request and return the decoded JSON body.

        Raises:
            RequestError: on a non-2xx response (carrying the server's
                ``message``) or when the server could not be reached.
        """
        self.is_loading = True
        try:
            try:
                options = {"timeout": self.timeout} if self.timeout is not None else {}
                response = self.session.request(
                    method, url, headers=headers or {}, json=body, **options
                )
            except requests.RequestException as exc:
                raise RequestError(FALLBACK_ERROR) from exc

            try:
                data = response.json()
            except ValueError:
                data = None

            if response.status_code >= 400:
                message = data.get("message") if isinstance(data, dict) else None
                raise RequestError(
                    message or "Request failed", status_code=response.status_code
                )
            return data
        except RequestError as err:
            logger.warning("%s %s failed: %s", method, url, err)
            self.has_error = str(err) or FALLBACK_ERROR
            raise
        finally:
            self.is_loading = False

    def clear_error(self) -> None:
        self.has_error = None


class ApiClient:
    """One method per REST call. Protected calls need ``token`` to be set."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.fetcher = fetcher or Fetcher()

    @property
    def is_loading(self) -> bool:
        return self.fetcher.is_loading

    @property
    def has_error(self) -> Optional[str]:
        return self.fetcher.has_error

    def clear_error(self) -> None:
        self.fetcher.clear_error()

    def _url(self, path: str, **params) -> str:
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in params.items() if v is not None}
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def _headers(self, auth: bool) -> dict:
        headers = {"Content-Type": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _call(self, method: str, path: str, body: Any = None, auth: bool = True, **params):
        return self.fetcher.send_request(
            self._url(path, **params),
            method=method,
            headers=self._headers(auth),
            body=body,
        )

    # auth

    def sync_user(
        self,
        username: Optional[str] = None,
        profile_pic: Optional[str] = None,
        email: Optional[str] = None,
    ):
        return self._call(
            "POST",
            "/auth/sync",
            {"username": username, "profile_pic": profile_pic, "email": email},
        )

    def get_me(self):
        return self._call("GET", "/auth/me")

    def delete_account(self):
        return self._call("DELETE", "/auth")

    # public

    def check_username_availability(self, username: str) -> bool:
        data = self._call("GET", "/public/checkUsername", auth=False, username=username)
        return bool(data["available"])

    def check_email_availability(self, email: str) -> bool:
        data = self._call("GET", "/public/checkEmail", auth=False, email=email)
        return bool(data["available"])

    def get_public_users(self):
        return self._call("GET", "/public/user", auth=False)

    def get_public_user(self, username: str):
        return self._call("GET", f"/public/user/{quote(username)}", auth=False)

    def get_public_user_friends(self, username: str):
        return self._call("GET", f"/public/user/{quote(username)}/friends", auth=False)

    def get_public_user_posts(self, username: str):
        return self._call("GET", f"/public/post/user/{quote(username)}", auth=False)

    def get_public_post(self, post_id: int):
        return self._call("GET", f"/public/post/{post_id}", auth=False)

    def get_public_user_workouts(self, username: str):
        return self._call("GET", f"/public/workout/user/{quote(username)}", auth=False)

    def get_public_workout(self, workout_id: int):
        return self._call("GET", f"/public/workout/{workout_id}", auth=False)

    def get_public_user_sessions(self, username: str):
        return self._call("GET", f"/public/session/user/{quote(username)}", auth=False)

    def get_public_session(self, session_id: int):
        return self._call("GET", f"/public/session/{session_id}", auth=False)

    # users

    def get_all_users(self):
        return self._call("GET", "/user")

    def get_user(self, user_id: int):
        return self._call("GET", f"/user/{user_id}")

    def get_user_friends(self, user_id: int):
        return self._call("GET", f"/user/{user_id}/friends")

    def check_username(self, username: str):
        return self._call("POST", "/user/checkUsername", {"username": username})

    def update_bio(self, user_id: int, bio: Optional[str]):
        return self._call("PATCH", f"/user/{user_id}/updateBio", {"bio": bio})

    # posts

    def get_user_posts(self, user_id: int):
        return self._call("GET", f"/post/user/{user_id}")

    def get_post(self, post_id: int):
        return self._call("GET", f"/post/{post_id}")

    def create_post(
        self,
        content: str,
        image_url: Optional[str] = None,
        workout_id: Optional[int] = None,
    ):
        return self._call(
            "POST",
            "/post",
            {"content": content, "image_url": image_url, "workout_id": workout_id},
        )

    def edit_post(
        self,
        post_id: int,
        content: str,
        image_url: Optional[str] = None,
        workout_id: Optional[int] = None,
    ):
        return self._call(
            "PATCH",
            f"/post/{post_id}",
            {"content": content, "image_url": image_url, "workout_id": workout_id},
        )

    def delete_post(self, post_id: int):
        return self._call("DELETE", f"/post/{post_id}")

    def add_post_comment(self, post_id: int, content: str):
        return self._call("POST", f"/post/{post_id}/comment", {"content": content})

    def edit_post_comment(self, post_id: int, comment_id: int, content: str):
        return self._call(
            "PATCH", f"/post/{post_id}/comment/{comment_id}", {"content": content}
        )

    def delete_post_comment(self, post_id: int, comment_id: int):
        return self._call("DELETE", f"/post/{post_id}/comment/{comment_id}")

    def like_post(self, post_id: int):
        return self._call("POST", f"/post/{post_id}/like")

    def unlike_post(self, post_id: int):
        return self._call("DELETE", f"/post/{post_id}/unlike")

    # workouts

    def get_user_workouts(self, user_id: int):
        return self._call("GET", f"/workout/user/{user_id}")

    def get_workout(self, workout_id: int):
        return self._call("GET", f"/workout/{workout_id}")

    def create_workout(
        self, title: str, exercises: list[dict], description: Optional[str] = None
    ):
        return self._call(
            "POST",
            "/workout",
            {"title": title, "description": description, "exercises": exercises},
        )

    def edit_workout(
        self,
        workout_id: int,
        title: str,
        exercises: list[dict],
        description: Optional[str] = None,
    ):
        return self._call(
            "PATCH",
            f"/workout/{workout_id}",
            {"title": title, "description": description, "exercises": exercises},
        )

    def delete_workout(self, workout_id: int):
        return self._call("DELETE", f"/workout/{workout_id}")

    def add_workout_comment(self, workout_id: int, content: str):
        return self._call("POST", f"/workout/{workout_id}/comment", {"content": content})

    def edit_workout_comment(self, workout_id: int, comment_id: int, content: str):
        return self._call(
            "PATCH", f"/workout/{workout_id}/comment/{comment_id}", {"content": content}
        )

    def delete_workout_comment(self, workout_id: int, comment_id: int):
        return self._call("DELETE", f"/workout/{workout_id}/comment/{comment_id}")

    def like_workout(self, workout_id: int):
        return self._call("POST", f"/workout/{workout_id}/like")

    def unlike_workout(self, workout_id: int):
        return self._call("DELETE", f"/workout/{workout_id}/unlike")

    # sessions

    def get_user_sessions(self, user_id: int):
        return self._call("GET", f"/session/user/{user_id}")

    def get_session(self, session_id: int):
        return self._call("GET", f"/session/{session_id}")

    def create_session(self, session: dict):
        """``session`` carries workout_id, exercises and the optional metrics."""
        return self._call("POST", "/session", session)

    def edit_session(self, session_id: int, session: dict):
        return self._call("PATCH", f"/session/{session_id}", session)

    def delete_session(self, session_id: int):
        return self._call("DELETE", f"/session/{session_id}")

    def add_session_comment(self, session_id: int, content: str):
        return self._call("POST", f"/session/{session_id}/comment", {"content": content})

    def edit_session_comment(self, session_id: int, comment_id: int, content: str):
        return self._call(
            "PATCH", f"/session/{session_id}/comment/{comment_id}", {"content": content}
        )

    def delete_session_comment(self, session_id: int, comment_id: int):
        return self._call("DELETE", f"/session/{session_id}/comment/{comment_id}")

    def like_session(self, session_id: int):
        return self._call("POST", f"/session/{session_id}/like")

    def unlike_session(self, session_id: int):
        return self._call("DELETE", f"/session/{session_id}/unlike")

    # comments

    def like_comment(self, comment_id: int):
        return self._call("POST", f"/comment/{comment_id}/like")

    def unlike_comment(self, comment_id: int):
        return self._call("POST", f"/comment/{comment_id}/unlike")

    # friends

    def get_friend_requests(self):
        return self._call("GET", "/friend")

    def get_sent_requests(self):
        return self._call("GET", "/friend/sent")

    def get_received_requests(self):
        return self._call("GET", "/friend/received")

    def send_friend_request(self, receiver_id: int):
        return self._call("POST", f"/friend/{receiver_id}")

    def accept_friend_request(self, friend_request_id: int):
        return self._call("PUT", f"/friend/accept/{friend_request_id}")

    def deny_friend_request(self, friend_request_id: int):
        return self._call("PUT", f"/friend/deny/{friend_request_id}")

    def cancel_friend_request(self, friend_request_id: int):
        return self._call("DELETE", f"/friend/cancel/{friend_request_id}")

    # notifications

    def get_notifications(self, user_id: int):
        return self._call("GET", f"/notification/{user_id}")

    def get_unread_notifications(self, user_id: int):
        return self._call("GET", f"/notification/{user_id}/unread")

    def get_notifications_by_type(self, user_id: int, type: str):
        return self._call("GET", f"/notification/{user_id}/filter", type=type)

    def toggle_notification_status(self, notification_id: int, is_read: bool):
        return self._call(
            "PUT", f"/notification/{notification_id}/status", {"is_read": is_read}
        )

    def mark_all_notifications_read(self, user_id: int):
        return self._call("PUT", f"/notification/{user_id}/read-all")

    def delete_notification(self, notification_id: int):
        return self._call("DELETE", f"/notification/{notification_id}")

    def clear_notifications(self, user_id: int):
        return self._call("DELETE", f"/notification/{user_id}/clear")

    # search and uploads

    def search(self, query: str, type: Optional[str] = None):
        return self._call("GET", "/search", auth=False, query=query, type=type)

    def sign_upload_url(self, kind: str, filename: str):
        return self._call("GET", "/upload/sign-url", kind=kind, filename=filename)
