import unittest

from fitsocial.tests.support import ApiTestCase

ALICE = "token-alice_1"
BOB = "token-bobby_2"


class WorkoutTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.alice = self.sign_up("alice_1")
        self.bob = self.sign_up("bobby_2")

    def _workout(self, workout_id, token=ALICE):
        response = self.client.get(f"/workout/{workout_id}", headers=self.auth(token))
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["workout"]

    def test_create_returns_id_and_stores_targets(self):
        response = self.client.post(
            "/workout",
            json={
                "title": "Push Day",
                "description": "Chest and triceps",
                "exercises": [
                    {"title": "Bench Press", "sets": 4, "reps": 8, "weight_used": 185},
                    {"title": "Dips", "set_count": 3, "rep_count": 12},
                ],
            },
            headers=self.auth(ALICE),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"], "Workout created successfully.")

        workout = self._workout(response.json()["workout_id"])
        self.assertEqual(workout["title"], "Push Day")
        self.assertEqual(
            [(e["title"], e["sets"], e["reps"]) for e in workout["exercises"]],
            [("Bench Press", 4, 8), ("Dips", 3, 12)],
        )
        self.assertEqual(workout["exercises"][0]["weight_used"], 185)

    def test_catalog_is_shared_case_insensitively(self):
        first = self.create_workout(
            ALICE, exercises=[{"title": "Deadlift", "sets": 1, "reps": 5}]
        )
        second = self.create_workout(
            BOB, exercises=[{"title": "  deadLIFT ", "sets": 3, "reps": 3}]
        )
        a = self._workout(first)["exercises"][0]
        b = self._workout(second)["exercises"][0]
        self.assertEqual(a["exercise_id"], b["exercise_id"])
        self.assertEqual(b["title"], "Deadlift")

    def test_exercise_count_is_bounded(self):
        response = self.client.post(
            "/workout", json={"title": "Empty", "exercises": []}, headers=self.auth(ALICE)
        )
        self.assertEqual(response.status_code, 400)

        too_many = [{"title": f"Move {i:02d}"} for i in range(11)]
        response = self.client.post(
            "/workout", json={"title": "Huge", "exercises": too_many}, headers=self.auth(ALICE)
        )
        self.assertEqual(response.status_code, 400)

    def test_fields_are_validated(self):
        cases = [
            {"title": "ab", "exercises": [{"title": "Squat"}]},
            {"title": "Fine", "description": "x" * 76, "exercises": [{"title": "Squat"}]},
            {"title": "Fine", "exercises": [{"title": "Sq"}]},
            {"title": "Fine", "exercises": [{"title": "Squat", "sets": 26}]},
            {"title": "Fine", "exercises": [{"title": "Squat", "reps": 0}]},
            {"title": "Fine", "exercises": [{"title": "Squat"}, {"title": "squat"}]},
        ]
        for body in cases:
            with self.subTest(body=body):
                response = self.client.post("/workout", json=body, headers=self.auth(ALICE))
                self.assertEqual(response.status_code, 400)

    def test_edit_keeps_adds_and_drops_exercises(self):
        workout_id = self.create_workout(
            ALICE,
            exercises=[
                {"title": "Back Squat", "sets": 5, "reps": 5},
                {"title": "Leg Press", "sets": 3, "reps": 10},
            ],
        )
        before = {e["title"]: e["exercise_id"] for e in self._workout(workout_id)["exercises"]}

        response = self.client.patch(
            f"/workout/{workout_id}",
            json={
                "title": "Leg Day v2",
                "exercises": [
                    {"title": "Romanian Deadlift", "sets": 3, "reps": 8},
                    {"title": "back squat", "sets": 4, "reps": 6},
                ],
            },
            headers=self.auth(ALICE),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Workout updated successfully.")

        workout = self._workout(workout_id)
        self.assertEqual(workout["title"], "Leg Day v2")
        titles = [e["title"] for e in workout["exercises"]]
        self.assertEqual(titles, ["Romanian Deadlift", "Back Squat"])
        squat = workout["exercises"][1]
        self.assertEqual(squat["exercise_id"], before["Back Squat"])
        self.assertEqual((squat["sets"], squat["reps"]), (4, 6))

    def test_only_owner_can_edit_or_delete(self):
        workout_id = self.create_workout(ALICE)
        response = self.client.patch(
            f"/workout/{workout_id}",
            json={"title": "Mine now", "exercises": [{"title": "Squat"}]},
            headers=self.auth(BOB),
        )
        self.assertEqual(response.status_code, 403)
        response = self.client.delete(f"/workout/{workout_id}", headers=self.auth(BOB))
        self.assertEqual(response.status_code, 403)

    def test_delete_detaches_posts_and_removes_sessions(self):
        workout_id = self.create_workout(ALICE)
        post = self.create_post(ALICE, "Today's plan", workout_id=workout_id)
        exercise_id = self._workout(workout_id)["exercises"][0]["exercise_id"]
        session = self.client.post(
            "/session",
            json={"workout_id": workout_id, "exercises": [{"exercise_id": exercise_id}]},
            headers=self.auth(ALICE),
        ).json()

        response = self.client.delete(f"/workout/{workout_id}", headers=self.auth(ALICE))
        self.assertEqual(response.status_code, 200)

        detail = self.client.get(f"/post/{post['post_id']}", headers=self.auth(ALICE)).json()
        self.assertIsNone(detail["post"]["workout_id"])
        self.assertIsNone(detail["workout"])
        self.assertEqual(
            self.client.get(
                f"/session/{session['session_id']}", headers=self.auth(ALICE)
            ).status_code,
            404,
        )

    def test_likes_and_comments(self):
        workout_id = self.create_workout(ALICE)
        like = self.client.post(f"/workout/{workout_id}/like", headers=self.auth(BOB))
        self.assertEqual(like.status_code, 201)
        again = self.client.post(f"/workout/{workout_id}/like", headers=self.auth(BOB))
        self.assertEqual(again.status_code, 409)

        comment = self.client.post(
            f"/workout/{workout_id}/comment",
            json={"content": "Stealing this"},
            headers=self.auth(BOB),
        )
        self.assertEqual(comment.status_code, 201)

        detail = self.client.get(f"/workout/{workout_id}", headers=self.auth(ALICE)).json()
        self.assertEqual(detail["workout_user_id"], self.alice["user_id"])
        self.assertEqual(len(detail["likes"]), 1)
        self.assertEqual(detail["comments"][0]["content"], "Stealing this")

        types = {
            (n["type"], n["reference_type"])
            for n in self.notifications(ALICE, self.alice["user_id"])
        }
        self.assertEqual(types, {("like", "workout"), ("comment", "workout")})

        unlike = self.client.delete(f"/workout/{workout_id}/unlike", headers=self.auth(BOB))
        self.assertEqual(unlike.status_code, 200)

    def test_list_user_workouts(self):
        self.create_workout(ALICE, title="First")
        self.create_workout(ALICE, title="Second")
        response = self.client.get(
            f"/workout/user/{self.alice['user_id']}", headers=self.auth(BOB)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [w["title"] for w in response.json()["workouts"]], ["Second", "First"]
        )


if __name__ == "__main__":
    unittest.main()
