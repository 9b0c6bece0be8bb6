import unittest

from fitsocial.tests.support import ApiTestCase

ALICE = "token-alice_1"
BOB = "token-bobby_2"
CAROL = "token-carol_3"


class PostTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.alice = self.sign_up("alice_1")
        self.bob = self.sign_up("bobby_2")
        self.carol = self.sign_up("carol_3")

    def test_create_and_list_newest_first(self):
        first = self.create_post(ALICE, "Morning run")
        second = self.create_post(ALICE, "  Evening swim  ")
        self.assertEqual(second["content"], "Evening swim")
        self.assertEqual(second["user_id"], self.alice["user_id"])

        response = self.client.get(
            f"/post/user/{self.alice['user_id']}", headers=self.auth(BOB)
        )
        self.assertEqual(response.status_code, 200)
        ids = [p["post_id"] for p in response.json()["posts"]]
        self.assertEqual(ids, [second["post_id"], first["post_id"]])

    def test_content_is_validated(self):
        response = self.client.post(
            "/post", json={"content": "   "}, headers=self.auth(ALICE)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Content cannot be empty.")

        response = self.client.post(
            "/post", json={"content": "x" * 1001}, headers=self.auth(ALICE)
        )
        self.assertEqual(response.status_code, 400)

    def test_post_detail_includes_likes_comments_and_workout(self):
        workout_id = self.create_workout(ALICE)
        post = self.create_post(ALICE, "New plan", workout_id=workout_id)
        self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(BOB))
        self.client.post(
            f"/post/{post['post_id']}/comment",
            json={"content": "Looks brutal"},
            headers=self.auth(CAROL),
        )

        response = self.client.get(f"/post/{post['post_id']}", headers=self.auth(BOB))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Got post!")
        self.assertEqual(body["post_user_id"], self.alice["user_id"])
        self.assertEqual(body["post"]["like_count"], 1)
        self.assertEqual(body["post"]["comment_count"], 1)
        self.assertEqual([l["username"] for l in body["likes"]], ["bobby_2"])
        self.assertEqual(body["comments"][0]["content"], "Looks brutal")
        self.assertEqual(body["comments"][0]["username"], "carol_3")
        self.assertEqual(body["workout"]["workout_id"], workout_id)

    def test_missing_post_is_404(self):
        response = self.client.get("/post/999", headers=self.auth(ALICE))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Post not found.")

    def test_cannot_attach_someone_elses_workout(self):
        workout_id = self.create_workout(BOB)
        response = self.client.post(
            "/post",
            json={"content": "Borrowed plan", "workout_id": workout_id},
            headers=self.auth(ALICE),
        )
        self.assertEqual(response.status_code, 403)

    def test_only_owner_can_edit_or_delete(self):
        post = self.create_post(ALICE)
        edit = self.client.patch(
            f"/post/{post['post_id']}", json={"content": "hijack"}, headers=self.auth(BOB)
        )
        self.assertEqual(edit.status_code, 403)
        delete = self.client.delete(f"/post/{post['post_id']}", headers=self.auth(BOB))
        self.assertEqual(delete.status_code, 403)

        edit = self.client.patch(
            f"/post/{post['post_id']}",
            json={"content": "Edited"},
            headers=self.auth(ALICE),
        )
        self.assertEqual(edit.status_code, 200)
        self.assertEqual(edit.json()["post"]["content"], "Edited")

    def test_delete_removes_likes_and_comments(self):
        post = self.create_post(ALICE)
        self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(BOB))
        comment = self.client.post(
            f"/post/{post['post_id']}/comment",
            json={"content": "Nice"},
            headers=self.auth(BOB),
        ).json()["comment"]

        response = self.client.delete(f"/post/{post['post_id']}", headers=self.auth(ALICE))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["deletedPost"]["post_id"], post["post_id"])

        self.assertEqual(
            self.client.get(f"/post/{post['post_id']}", headers=self.auth(ALICE)).status_code,
            404,
        )
        like_comment = self.client.post(
            f"/comment/{comment['comment_id']}/like", headers=self.auth(ALICE)
        )
        self.assertEqual(like_comment.status_code, 404)

    def test_like_twice_conflicts_and_unlike_requires_like(self):
        post = self.create_post(ALICE)
        first = self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(BOB))
        self.assertEqual(first.status_code, 201)
        again = self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(BOB))
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["message"], "You have already liked this post.")

        unlike = self.client.delete(
            f"/post/{post['post_id']}/unlike", headers=self.auth(BOB)
        )
        self.assertEqual(unlike.status_code, 200)
        unlike = self.client.delete(
            f"/post/{post['post_id']}/unlike", headers=self.auth(BOB)
        )
        self.assertEqual(unlike.status_code, 404)
        self.assertEqual(unlike.json()["message"], "You haven't liked this post yet.")

    def test_like_and_comment_notify_owner_but_not_self(self):
        post = self.create_post(ALICE)
        self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(ALICE))
        self.assertEqual(self.notifications(ALICE, self.alice["user_id"]), [])

        self.client.post(f"/post/{post['post_id']}/like", headers=self.auth(BOB))
        self.client.post(
            f"/post/{post['post_id']}/comment",
            json={"content": "Strong"},
            headers=self.auth(CAROL),
        )
        notes = self.notifications(ALICE, self.alice["user_id"])
        self.assertEqual({n["type"] for n in notes}, {"like", "comment"})
        messages = {n["message"] for n in notes}
        self.assertIn("bobby_2 liked your post.", messages)
        self.assertIn("carol_3 commented on your post.", messages)
        self.assertTrue(all(n["reference_id"] == post["post_id"] for n in notes))

    def test_comment_permissions(self):
        post = self.create_post(ALICE)
        comment = self.client.post(
            f"/post/{post['post_id']}/comment",
            json={"content": "First!"},
            headers=self.auth(BOB),
        ).json()["comment"]
        url = f"/post/{post['post_id']}/comment/{comment['comment_id']}"

        # Only the author edits.
        self.assertEqual(
            self.client.patch(url, json={"content": "x"}, headers=self.auth(ALICE)).status_code,
            403,
        )
        edited = self.client.patch(url, json={"content": "Second!"}, headers=self.auth(BOB))
        self.assertEqual(edited.status_code, 200)
        self.assertEqual(edited.json()["comment"]["content"], "Second!")

        # A bystander cannot delete; the post owner can.
        self.assertEqual(self.client.delete(url, headers=self.auth(CAROL)).status_code, 403)
        deleted = self.client.delete(url, headers=self.auth(ALICE))
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(deleted.json()["deletedComment"]["comment_id"], comment["comment_id"])

    def test_comment_must_belong_to_post(self):
        first = self.create_post(ALICE)
        second = self.create_post(ALICE, "Another")
        comment = self.client.post(
            f"/post/{first['post_id']}/comment",
            json={"content": "Hi"},
            headers=self.auth(BOB),
        ).json()["comment"]
        response = self.client.delete(
            f"/post/{second['post_id']}/comment/{comment['comment_id']}",
            headers=self.auth(ALICE),
        )
        self.assertEqual(response.status_code, 404)

    def test_empty_comment_is_rejected(self):
        post = self.create_post(ALICE)
        response = self.client.post(
            f"/post/{post['post_id']}/comment",
            json={"content": " "},
            headers=self.auth(BOB),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Comment cannot be empty.")


if __name__ == "__main__":
    unittest.main()
