import unittest

from fitsocial.tests.support import ApiTestCase

ALICE = "token-alice_1"
BOB = "token-bobby_2"


class PublicRouteTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.alice = self.sign_up("alice_1")
        self.bob = self.sign_up("bobby_2")

    def test_availability_checks(self):
        taken = self.client.get("/public/checkUsername", params={"username": "ALICE_1"})
        self.assertEqual(taken.status_code, 200)
        self.assertEqual(taken.json(), {"available": False})
        free = self.client.get("/public/checkUsername", params={"username": "newbie_9"})
        self.assertEqual(free.json(), {"available": True})

        self.assertEqual(
            self.client.get(
                "/public/checkEmail", params={"email": "alice_1@example.com"}
            ).json(),
            {"available": False},
        )
        self.assertEqual(
            self.client.get("/public/checkEmail", params={"email": "x@example.com"}).json(),
            {"available": True},
        )

    def test_profile_pages_need_no_token(self):
        workout_id = self.create_workout(ALICE)
        post = self.create_post(ALICE, "Public post", workout_id=workout_id)

        users = self.client.get("/public/user").json()["users"]
        self.assertEqual({u["username"] for u in users}, {"alice_1", "bobby_2"})
        self.assertNotIn("email", users[0])

        user = self.client.get("/public/user/alice_1")
        self.assertEqual(user.status_code, 200)
        self.assertEqual(user.json()["user"]["user_id"], self.alice["user_id"])
        self.assertEqual(self.client.get("/public/user/nobody_0").status_code, 404)

        posts = self.client.get("/public/post/user/alice_1").json()["posts"]
        self.assertEqual([p["post_id"] for p in posts], [post["post_id"]])
        detail = self.client.get(f"/public/post/{post['post_id']}").json()
        self.assertEqual(detail["workout"]["workout_id"], workout_id)

        workouts = self.client.get("/public/workout/user/alice_1").json()["workouts"]
        self.assertEqual([w["workout_id"] for w in workouts], [workout_id])
        workout = self.client.get(f"/public/workout/{workout_id}").json()
        self.assertEqual(workout["workout_user_id"], self.alice["user_id"])

        self.assertEqual(self.client.get("/public/user/alice_1/friends").json(), [])

    def test_public_sessions(self):
        workout_id = self.create_workout(ALICE)
        exercise_id = self.client.get(f"/public/workout/{workout_id}").json()["workout"][
            "exercises"
        ][0]["exercise_id"]
        session_id = self.client.post(
            "/session",
            json={"workout_id": workout_id, "exercises": [{"exercise_id": exercise_id}]},
            headers=self.auth(ALICE),
        ).json()["session_id"]

        sessions = self.client.get("/public/session/user/alice_1").json()["sessions"]
        self.assertEqual([s["session_id"] for s in sessions], [session_id])
        detail = self.client.get(f"/public/session/{session_id}").json()
        self.assertEqual(detail["session_user_id"], self.alice["user_id"])
        self.assertEqual(self.client.get("/public/session/999").status_code, 404)


class SearchTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        for name in ("runner_01", "runner_02", "runner_03", "runner_04",
                     "runner_05", "runner_06", "lifter_01"):
            self.sign_up(name)
        self.create_workout("token-lifter_01", title="Runner Intervals")

    def test_query_is_required(self):
        response = self.client.get("/search")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            'The "query" parameter is required. Please provide a search term.',
        )

    def test_untyped_search_caps_each_category(self):
        results = self.client.get("/search", params={"query": "RUNNER"}).json()["results"]
        self.assertEqual(len(results["users"]), 5)
        self.assertEqual([w["title"] for w in results["workouts"]], ["Runner Intervals"])

    def test_typed_search_only_returns_that_category(self):
        results = self.client.get(
            "/search", params={"query": "runner", "type": "users"}
        ).json()["results"]
        self.assertEqual(len(results["users"]), 6)
        self.assertEqual(results["workouts"], [])

    def test_wildcards_are_literal(self):
        results = self.client.get("/search", params={"query": "%"}).json()["results"]
        self.assertEqual(results, {"users": [], "workouts": []})


if __name__ == "__main__":
    unittest.main()
