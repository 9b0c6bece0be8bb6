import unittest
from unittest.mock import MagicMock

import requests

from fitsocial.client import FALLBACK_ERROR, ApiClient, Fetcher, RequestError
from fitsocial.tests.support import ApiTestCase


class ApiClientTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.verifier.register("client-token", uid="uid-client", email="c@example.com")
        self.api = ApiClient(
            "http://testserver/",
            token="client-token",
            fetcher=Fetcher(session=self.client, timeout=None),
        )

    def test_sync_then_use_protected_routes(self):
        synced = self.api.sync_user(username="client_01")
        self.assertEqual(synced["message"], "User synced (new).")
        user_id = synced["user"]["user_id"]

        self.assertFalse(self.api.check_username_availability("client_01"))
        self.assertTrue(self.api.check_email_availability("free@example.com"))

        post = self.api.create_post("Hello from Python")["post"]
        self.assertEqual(self.api.get_post(post["post_id"])["post"]["content"], "Hello from Python")
        self.assertEqual(
            [p["post_id"] for p in self.api.get_user_posts(user_id)["posts"]],
            [post["post_id"]],
        )

        workout_id = self.api.create_workout(
            "Full Body", [{"title": "Burpees", "sets": 3, "reps": 15}]
        )["workout_id"]
        exercise_id = self.api.get_workout(workout_id)["workout"]["exercises"][0]["exercise_id"]
        session = self.api.create_session(
            {"workout_id": workout_id, "exercises": [{"exercise_id": exercise_id}]}
        )
        self.assertEqual(session["message"], "Session logged successfully.")

        results = self.api.search("full", type="workouts")["results"]
        self.assertEqual([w["workout_id"] for w in results["workouts"]], [workout_id])
        self.assertFalse(self.api.is_loading)
        self.assertIsNone(self.api.has_error)

    def test_error_message_is_recorded_until_cleared(self):
        self.api.sync_user(username="client_01")
        with self.assertRaises(RequestError) as ctx:
            self.api.create_post("   ")
        self.assertEqual(str(ctx.exception), "Content cannot be empty.")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.api.has_error, "Content cannot be empty.")
        self.assertFalse(self.api.is_loading)

        self.api.clear_error()
        self.assertIsNone(self.api.has_error)

    def test_missing_token_is_rejected_by_server(self):
        self.api.token = None
        with self.assertRaises(RequestError) as ctx:
            self.api.get_me()
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(self.api.has_error, "No token provided.")


class FetcherTests(unittest.TestCase):
    def test_transport_failure_uses_fallback_message(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("refused")
        fetcher = Fetcher(session=session)

        with self.assertRaises(RequestError):
            fetcher.send_request("http://api.invalid/post", method="POST", body={"x": 1})
        self.assertEqual(fetcher.has_error, FALLBACK_ERROR)
        self.assertFalse(fetcher.is_loading)

    def test_error_without_message_falls_back(self):
        response = MagicMock(status_code=502)
        response.json.side_effect = ValueError("not json")
        session = MagicMock()
        session.request.return_value = response
        fetcher = Fetcher(session=session)

        with self.assertRaises(RequestError) as ctx:
            fetcher.send_request("http://api.invalid/user")
        self.assertEqual(str(ctx.exception), "Request failed")
        self.assertEqual(ctx.exception.status_code, 502)

    def test_request_is_forwarded_as_json(self):
        response = MagicMock(status_code=200)
        response.json.return_value = {"ok": True}
        session = MagicMock()
        session.request.return_value = response

        data = Fetcher(session=session, timeout=5).send_request(
            "http://api.invalid/post", "PATCH", {"Authorization": "Bearer t"}, {"a": 1}
        )
        self.assertEqual(data, {"ok": True})
        session.request.assert_called_once_with(
            "PATCH",
            "http://api.invalid/post",
            headers={"Authorization": "Bearer t"},
            json={"a": 1},
            timeout=5,
        )

    def test_timeout_is_omitted_when_unset(self):
        response = MagicMock(status_code=200)
        response.json.return_value = []
        session = MagicMock()
        session.request.return_value = response

        Fetcher(session=session, timeout=None).send_request("http://api.invalid/user")
        session.request.assert_called_once_with(
            "GET", "http://api.invalid/user", headers={}, json=None
        )


if __name__ == "__main__":
    unittest.main()
