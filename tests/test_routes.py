"""Tests for the form actions: auth, posts, comments and admin."""

import unittest
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

from sqlalchemy.exc import OperationalError
from support import TEST_PASSWORD, AppTestCase

from inkwell.models import Comment, Post, Role, User, UserSession
from inkwell.services import posts as posts_service


def _message(response, key: str) -> str | None:
    """Pull ?error= or ?success= out of a redirect Location."""
    values = parse_qs(urlsplit(response.headers["location"]).query).get(key)
    return values[0] if values else None


def _path(response) -> str:
    return urlsplit(response.headers["location"]).path


class TestRegisterRoute(AppTestCase):
    def _register(self, **overrides: str):
        data = {
            "name": "A",
            "email": "a@x.com",
            "password": TEST_PASSWORD,
            "confirmPassword": TEST_PASSWORD,
        }
        data.update(overrides)
        return self.client.post("/api/auth/register", data=data)

    def test_register_sets_cookie_and_lands_on_dashboard(self) -> None:
        response = self._register()
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/dashboard")
        set_cookie = response.headers["set-cookie"]
        self.assertTrue(set_cookie.startswith("session="))
        self.assertIn("HttpOnly", set_cookie)
        self.assertIn("Max-Age=604800", set_cookie)
        self.assertIn("SameSite=lax", set_cookie)
        self.assertNotIn("Secure", set_cookie)
        self.assertEqual(self.client.get("/dashboard").status_code, 200)

    def test_duplicate_email(self) -> None:
        self._register()
        self.client.cookies.clear()
        response = self._register()
        self.assertEqual(_path(response), "/register")
        self.assertEqual(_message(response, "error"), "Email already registered")

    def test_missing_fields(self) -> None:
        response = self._register(name="")
        self.assertEqual(_message(response, "error"), "All fields are required")

    def test_password_mismatch(self) -> None:
        response = self._register(confirmPassword="something-else")
        self.assertEqual(_message(response, "error"), "Passwords do not match")

    def test_short_password(self) -> None:
        response = self._register(password="short", confirmPassword="short")
        self.assertEqual(_message(response, "error"), "Password must be at least 8 characters")
        self.assertEqual(self.db.query(User).count(), 0)


class TestLoginRoute(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.make_user()

    def test_login_defaults_to_dashboard(self) -> None:
        response = self.log_in()
        self.assertEqual(response.headers["location"], "/dashboard")

    def test_login_honours_local_redirect(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            data={"email": "alice@example.com", "password": TEST_PASSWORD, "redirect": "/admin"},
        )
        self.assertEqual(response.headers["location"], "/admin")

    def test_login_ignores_external_redirect(self) -> None:
        response = self.client.post(
            "/api/auth/login",
            data={
                "email": "alice@example.com",
                "password": TEST_PASSWORD,
                "redirect": "//evil.example.com/",
            },
        )
        self.assertEqual(response.headers["location"], "/dashboard")

    def test_bad_credentials_share_one_message(self) -> None:
        wrong = self.client.post(
            "/api/auth/login", data={"email": "alice@example.com", "password": "nope-nope"}
        )
        unknown = self.client.post(
            "/api/auth/login", data={"email": "who@example.com", "password": TEST_PASSWORD}
        )
        self.assertEqual(_message(wrong, "error"), "Invalid email or password")
        self.assertEqual(_message(unknown, "error"), "Invalid email or password")
        self.assertNotIn("set-cookie", wrong.headers)

    def test_missing_fields(self) -> None:
        response = self.client.post("/api/auth/login", data={"email": "alice@example.com"})
        self.assertEqual(_message(response, "error"), "Email and password are required")

    def test_logout_revokes_session(self) -> None:
        self.log_in()
        self.assertEqual(self.db.query(UserSession).count(), 1)
        response = self.client.post("/api/auth/logout")
        self.assertEqual(response.headers["location"], "/")
        self.assertIn("Max-Age=0", response.headers["set-cookie"])
        self.assertEqual(self.db.query(UserSession).count(), 0)


class TestPostRoutes(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice_id = self.make_user().id
        self.bob_id = self.make_user(name="Bob", email="bob@example.com").id

    def _bobs_post(self) -> str:
        return posts_service.create_post(self.db, "Bob's", "<p>Body</p>", self.bob_id).id

    def test_create_requires_login(self) -> None:
        response = self.client.post("/api/posts/create", data={"title": "T", "content": "C"})
        self.assertEqual(_path(response), "/login")
        self.assertEqual(_message(response, "error"), "Please log in to create a post")

    def test_create_post(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/posts/create", data={"title": " Hello ", "content": "<p>Hi  there</p>"}
        )
        self.assertEqual(_message(response, "success"), "Post created successfully!")
        post = self.db.query(Post).one()
        self.assertEqual(post.title, "Hello")
        self.assertEqual(post.excerpt, "Hi there")
        self.assertEqual(post.author_id, self.alice_id)

    def test_create_requires_title_and_content(self) -> None:
        self.log_in()
        response = self.client.post("/api/posts/create", data={"title": "T", "content": "  "})
        self.assertEqual(_path(response), "/dashboard/new")
        self.assertEqual(_message(response, "error"), "Title and content are required")

    def test_store_failure_is_reported_generically(self) -> None:
        self.log_in()
        failure = OperationalError("INSERT INTO posts", {}, Exception("database is locked"))
        with patch("inkwell.services.posts.create_post", side_effect=failure), self.assertLogs(
            "inkwell.api.posts", level="ERROR"
        ) as logs:
            response = self.client.post(
                "/api/posts/create", data={"title": "T", "content": "C"}
            )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(_path(response), "/dashboard/new")
        self.assertEqual(_message(response, "error"), "Failed to create post")
        self.assertIn("Create post error", logs.output[0])
        self.assertEqual(self.db.query(Post).count(), 0)

    def test_cannot_edit_someone_elses_post(self) -> None:
        post_id = self._bobs_post()
        self.log_in()
        response = self.client.post(
            "/api/posts/update", data={"postId": post_id, "title": "Mine", "content": "Now"}
        )
        self.assertEqual(_message(response, "error"), "You can only edit your own posts")
        self.db.expire_all()
        self.assertEqual(self.db.query(Post).one().title, "Bob's")

    def test_owner_can_edit(self) -> None:
        post_id = self._bobs_post()
        self.log_in("bob@example.com")
        response = self.client.post(
            "/api/posts/update", data={"postId": post_id, "title": "Edited", "content": "New"}
        )
        self.assertEqual(_message(response, "success"), "Post updated successfully!")
        self.db.expire_all()
        post = self.db.query(Post).one()
        self.assertEqual(post.title, "Edited")
        self.assertEqual(post.excerpt, "New")

    def test_update_missing_post(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/posts/update", data={"postId": "missing", "title": "T", "content": "C"}
        )
        self.assertEqual(_message(response, "error"), "Post not found")

    def test_admin_can_delete_any_post(self) -> None:
        post_id = self._bobs_post()
        self.make_user(name="Root", email="root@example.com", role=Role.ADMIN)
        self.log_in("root@example.com")
        response = self.client.post("/api/posts/delete", data={"postId": post_id})
        self.assertEqual(_message(response, "success"), "Post deleted successfully!")
        self.assertEqual(self.db.query(Post).count(), 0)

    def test_cannot_delete_someone_elses_post(self) -> None:
        post_id = self._bobs_post()
        self.log_in()
        response = self.client.post("/api/posts/delete", data={"postId": post_id})
        self.assertEqual(_message(response, "error"), "You can only delete your own posts")
        self.assertEqual(self.db.query(Post).count(), 1)

    def test_read_post_with_comments(self) -> None:
        post_id = self._bobs_post()
        posts_service.create_comment(self.db, "Great", post_id, self.alice_id)
        response = self.client.get(f"/post/{post_id}")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["post"]["author"]["name"], "Bob")
        self.assertEqual(body["comments"][0]["user_name"], "Alice")
        self.assertEqual(self.client.get("/post/missing").status_code, 404)

    def test_home_lists_latest_posts(self) -> None:
        self._bobs_post()
        response = self.client.get("/")
        self.assertEqual([p["title"] for p in response.json()["posts"]], ["Bob's"])


class TestCommentRoutes(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice_id = self.make_user().id
        self.bob_id = self.make_user(name="Bob", email="bob@example.com").id
        self.post_id = posts_service.create_post(self.db, "Title", "Body", self.bob_id).id

    def test_comment_requires_login(self) -> None:
        response = self.client.post(
            "/api/comments/create", data={"postId": self.post_id, "content": "Hi"}
        )
        self.assertEqual(_message(response, "error"), "Please log in to comment")

    def test_create_comment(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/comments/create", data={"postId": self.post_id, "content": "  Hi  "}
        )
        location = response.headers["location"]
        self.assertTrue(location.endswith("#comments"))
        self.assertEqual(_path(response), f"/post/{self.post_id}")
        self.assertEqual(self.db.query(Comment).one().content, "Hi")

    def test_comment_on_missing_post(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/comments/create", data={"postId": "missing", "content": "Hi"}
        )
        self.assertEqual(_path(response), "/")
        self.assertEqual(_message(response, "error"), "Post not found")

    def test_empty_comment(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/comments/create", data={"postId": self.post_id, "content": " "}
        )
        self.assertEqual(_message(response, "error"), "Comment content is required")

    def test_only_owner_or_admin_deletes_comment(self) -> None:
        comment_id = posts_service.create_comment(self.db, "Bob says", self.post_id, self.bob_id).id
        self.log_in()
        response = self.client.post(
            "/api/comments/delete", data={"commentId": comment_id, "postId": self.post_id}
        )
        self.assertEqual(_message(response, "error"), "You can only delete your own comments")
        self.assertEqual(self.db.query(Comment).count(), 1)

        self.log_in("bob@example.com")
        response = self.client.post(
            "/api/comments/delete", data={"commentId": comment_id, "postId": self.post_id}
        )
        self.assertEqual(_message(response, "success"), "Comment deleted")
        self.assertEqual(self.db.query(Comment).count(), 0)

    def test_delete_missing_comment(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/comments/delete", data={"commentId": "missing", "postId": self.post_id}
        )
        self.assertEqual(_message(response, "error"), "Comment not found")


class TestAdminRoutes(AppTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id = self.make_user(name="Root", email="root@example.com", role=Role.ADMIN).id
        self.alice_id = self.make_user().id

    def test_non_admin_is_rejected(self) -> None:
        self.log_in()
        response = self.client.post(
            "/api/admin/update-role", data={"userId": self.alice_id, "role": "admin"}
        )
        self.assertEqual(_path(response), "/")
        self.assertEqual(_message(response, "error"), "Unauthorized access")

    def test_promote_user(self) -> None:
        self.log_in("root@example.com")
        response = self.client.post(
            "/api/admin/update-role", data={"userId": self.alice_id, "role": "admin"}
        )
        self.assertEqual(_message(response, "success"), "User role updated to admin")
        self.db.expire_all()
        alice = self.db.query(User).filter(User.id == self.alice_id).one()
        self.assertEqual(alice.role, Role.ADMIN)

    def test_invalid_role(self) -> None:
        self.log_in("root@example.com")
        response = self.client.post(
            "/api/admin/update-role", data={"userId": self.alice_id, "role": "owner"}
        )
        self.assertEqual(_message(response, "error"), "Invalid role")

    def test_cannot_change_own_role(self) -> None:
        self.log_in("root@example.com")
        response = self.client.post(
            "/api/admin/update-role", data={"userId": self.admin_id, "role": "user"}
        )
        self.assertEqual(_message(response, "error"), "You cannot change your own role")

    def test_delete_user_cascades(self) -> None:
        post_id = posts_service.create_post(self.db, "P", "Body", self.alice_id).id
        posts_service.create_comment(self.db, "C", post_id, self.alice_id)
        self.log_in("root@example.com")
        response = self.client.post("/api/admin/delete-user", data={"userId": self.alice_id})
        self.assertEqual(
            _message(response, "success"), "User and all their data deleted successfully"
        )
        self.assertEqual(self.db.query(User).filter(User.id == self.alice_id).count(), 0)
        self.assertEqual(self.db.query(Post).count(), 0)
        self.assertEqual(self.db.query(Comment).count(), 0)

    def test_delete_missing_user_still_succeeds(self) -> None:
        self.log_in("root@example.com")
        response = self.client.post("/api/admin/delete-user", data={"userId": "missing"})
        self.assertIsNotNone(_message(response, "success"))

    def test_cannot_delete_self(self) -> None:
        self.log_in("root@example.com")
        response = self.client.post("/api/admin/delete-user", data={"userId": self.admin_id})
        self.assertEqual(_message(response, "error"), "You cannot delete yourself")


if __name__ == "__main__":
    unittest.main()
