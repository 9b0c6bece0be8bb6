import unittest

from fastapi.testclient import TestClient

from fitsocial.app import create_app
from fitsocial.auth import InMemoryTokenVerifier
from fitsocial.dependencies import get_database, get_storage_client, get_token_verifier
from fitsocial.storage import InMemoryStorageClient


class ApiTestCase(unittest.TestCase):
    """Fresh database and token table per test."""

    def setUp(self):
        self.client = TestClient(create_app())
        get_database().reset()
        self.verifier = get_token_verifier()
        assert isinstance(self.verifier, InMemoryTokenVerifier)
        self.verifier.reset()
        self.storage = get_storage_client()
        if isinstance(self.storage, InMemoryStorageClient):
            self.storage.signed.clear()

    @staticmethod
    def auth(token):
        return {"Authorization": f"Bearer {token}"}

    def sign_up(self, username, token=None, email=None):
        """Register a token for a new account and sync it. Returns the user."""
        token = token or f"token-{username}"
        self.verifier.register(
            token, uid=f"uid-{username}", email=email or f"{username}@example.com"
        )
        response = self.client.post(
            "/auth/sync", json={"username": username}, headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["user"]

    def create_workout(self, token, title="Leg Day", exercises=None):
        exercises = exercises or [
            {"title": "Back Squat", "sets": 5, "reps": 5, "weight_used": 225},
            {"title": "Walking Lunge", "sets": 3, "reps": 12},
        ]
        response = self.client.post(
            "/workout",
            json={"title": title, "exercises": exercises},
            headers=self.auth(token),
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["workout_id"]

    def create_post(self, token, content="First lift of the week", **extra):
        response = self.client.post(
            "/post", json={"content": content, **extra}, headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["post"]

    def notifications(self, token, user_id):
        response = self.client.get(
            f"/notification/{user_id}", headers=self.auth(token)
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["notifications"]
