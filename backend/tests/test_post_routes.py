"""
Blog Backend — Post Route Tests
=================================

What:  The post request lifecycle end to end over HTTP: gates, redirects,
       notices, form re-rendering and what actually lands in the database.

What we test:
    ✅ Anonymous create/edit/update/destroy → redirect, nothing written
    ✅ Non-owner edit/update/destroy → redirect to /posts, post unchanged
    ✅ Invalid create/update → form re-rendered with the typed values
    ✅ Owner create/update/destroy → persisted, with the right notices
    ✅ Missing or malformed ids → redirect to /posts with a notice
"""

import pytest

from blog.models import Post


class TestListing:

    @pytest.mark.asyncio
    async def test_root_and_posts_render_the_listing(self, test_client):
        for path in ("/", "/posts"):
            response = await test_client.get(path)

            assert response.status_code == 200
            body = response.json()
            assert body["view"] == "posts/index"
            assert body["locals"]["posts"] == []

    @pytest.mark.asyncio
    async def test_listing_is_public(self, test_client, register_user, submit_post):
        await register_user()
        await submit_post(title="Hello", content="World")
        test_client.cookies.clear()

        response = await test_client.get("/posts")

        posts = response.json()["locals"]["posts"]
        assert len(posts) == 1
        assert posts[0]["title"] == "Hello"
        assert posts[0]["author_email"] == "author@example.com"

    @pytest.mark.asyncio
    async def test_anonymous_page_has_no_current_user(self, test_client):
        response = await test_client.get("/posts")

        assert response.json()["current_user"] is None

    @pytest.mark.asyncio
    async def test_logged_in_page_names_current_user(
        self, test_client, register_user, fetch_user
    ):
        await register_user()
        user = await fetch_user("author@example.com")

        for path in ("/posts", "/posts/new", "/login"):
            response = await test_client.get(path)

            assert response.json()["current_user"] == {
                "id": user.id,
                "email": "author@example.com",
            }


class TestCreate:

    @pytest.mark.asyncio
    async def test_new_form_requires_login(self, test_client, notices):
        response = await test_client.get("/posts/new")

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert await notices("/login") == ["You must be logged in to view that page"]

    @pytest.mark.asyncio
    async def test_new_form_renders_blank_post(self, test_client, register_user):
        await register_user()

        response = await test_client.get("/posts/new")

        assert response.status_code == 200
        body = response.json()
        assert body["view"] == "posts/new"
        assert body["locals"]["post"] == {"id": None, "title": "", "content": ""}
        assert body["locals"]["errors"] == {}

    @pytest.mark.asyncio
    async def test_anonymous_create_writes_nothing(self, test_client, submit_post, count_rows):
        response = await submit_post()

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert await count_rows(Post) == 0

    @pytest.mark.asyncio
    async def test_anonymous_redirect_goes_back_to_referer(self, test_client):
        response = await test_client.post(
            "/posts",
            data={"title": "Hello", "content": "World"},
            headers={"Referer": "http://test/posts"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://test/posts"

    @pytest.mark.asyncio
    async def test_off_site_referer_is_not_followed(self, test_client, notices):
        response = await test_client.get(
            "/posts/new", headers={"Referer": "https://evil.example/x"}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
        assert await notices("/login") == ["You must be logged in to view that page"]

    @pytest.mark.asyncio
    async def test_create_persists_post_owned_by_current_user(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post, fetch_user
    ):
        await register_user()

        response = await submit_post(title="Hello", content="World")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"

        post_id = await latest_post_id()
        author = await fetch_user("author@example.com")
        stored = await fetch_post(post_id)
        assert stored.author_id == author.id

        show = await test_client.get(f"/posts/{post_id}")
        assert show.status_code == 200
        assert show.json()["view"] == "posts/show"
        post = show.json()["locals"]["post"]
        assert (post["title"], post["content"]) == ("Hello", "World")

    @pytest.mark.asyncio
    async def test_create_with_blank_title_rerenders_form(
        self, test_client, register_user, submit_post, count_rows
    ):
        await register_user()

        response = await submit_post(title="", content="World")

        assert response.status_code == 422
        body = response.json()
        assert body["view"] == "posts/new"
        assert body["locals"]["post"]["content"] == "World"
        assert body["locals"]["errors"] == {"title": ["Title can't be blank"]}
        assert await count_rows(Post) == 0

    @pytest.mark.asyncio
    async def test_create_with_blank_content_keeps_title(
        self, test_client, register_user, submit_post, count_rows
    ):
        await register_user()

        response = await submit_post(title="Hello", content="   ")

        assert response.status_code == 422
        body = response.json()
        assert body["locals"]["post"]["title"] == "Hello"
        assert body["locals"]["errors"] == {"content": ["Content can't be blank"]}
        assert await count_rows(Post) == 0

    @pytest.mark.asyncio
    async def test_author_cannot_be_mass_assigned(
        self, test_client, register_user, latest_post_id, fetch_post, fetch_user
    ):
        await register_user()

        await test_client.post(
            "/posts", data={"title": "Hello", "content": "World", "author_id": "999"}
        )

        author = await fetch_user("author@example.com")
        stored = await fetch_post(await latest_post_id())
        assert stored.author_id == author.id


class TestShow:

    @pytest.mark.asyncio
    async def test_missing_post_redirects_with_notice(self, test_client, notices):
        response = await test_client.get("/posts/999")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert await notices() == ["Couldn't find post with id 999"]

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_not_found(self, test_client):
        response = await test_client.get("/posts/abc")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"

    @pytest.mark.asyncio
    async def test_notice_is_shown_once(self, test_client, notices):
        await test_client.get("/posts/999")

        assert await notices() == ["Couldn't find post with id 999"]
        assert await notices() == []


class TestOwnerActions:
    """Edit, update and destroy by the post's author."""

    @pytest.mark.asyncio
    async def test_edit_form_is_prefilled(
        self, test_client, register_user, submit_post, latest_post_id
    ):
        await register_user()
        await submit_post(title="Hello", content="World")
        post_id = await latest_post_id()

        response = await test_client.get(f"/posts/{post_id}/edit")

        assert response.status_code == 200
        body = response.json()
        assert body["view"] == "posts/edit"
        assert body["locals"]["post"] == {"id": post_id, "title": "Hello", "content": "World"}

    @pytest.mark.asyncio
    async def test_update_changes_title_and_content_only(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post, notices
    ):
        await register_user()
        await submit_post(title="Hello", content="World")
        post_id = await latest_post_id()
        before = await fetch_post(post_id)

        response = await test_client.patch(
            f"/posts/{post_id}",
            data={"title": "Hello again", "content": "New body", "author_id": "999", "id": "42"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"/posts/{post_id}"
        after = await fetch_post(post_id)
        assert (after.title, after.content) == ("Hello again", "New body")
        assert after.id == before.id
        assert after.author_id == before.author_id
        assert after.created_at == before.created_at
        assert after.updated_at >= before.updated_at
        assert await notices(f"/posts/{post_id}") == ["Post successfully updated"]

    @pytest.mark.asyncio
    async def test_invalid_update_rerenders_edit_form(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post
    ):
        await register_user()
        await submit_post(title="Hello", content="World")
        post_id = await latest_post_id()

        response = await test_client.patch(
            f"/posts/{post_id}", data={"title": "", "content": "Edited body"}
        )

        assert response.status_code == 422
        body = response.json()
        assert body["view"] == "posts/edit"
        assert body["locals"]["post"] == {"id": post_id, "title": "", "content": "Edited body"}
        assert body["locals"]["errors"] == {"title": ["Title can't be blank"]}

        stored = await fetch_post(post_id)
        assert (stored.title, stored.content) == ("Hello", "World")

    @pytest.mark.asyncio
    async def test_destroy_removes_post(
        self, test_client, register_user, submit_post, latest_post_id, count_rows, notices
    ):
        await register_user()
        await submit_post()
        post_id = await latest_post_id()

        response = await test_client.delete(f"/posts/{post_id}")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert await count_rows(Post) == 0

        show = await test_client.get(f"/posts/{post_id}")
        assert show.status_code == 303
        assert show.headers["location"] == "/posts"
        assert await notices() == [f"Couldn't find post with id {post_id}"]

    @pytest.mark.asyncio
    async def test_destroy_via_form_method_override(
        self, test_client, register_user, submit_post, latest_post_id, count_rows
    ):
        await register_user()
        await submit_post()
        post_id = await latest_post_id()

        response = await test_client.post(f"/posts/{post_id}?_method=DELETE")

        assert response.status_code == 303
        assert await count_rows(Post) == 0

    @pytest.mark.asyncio
    async def test_update_via_method_override_header(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post
    ):
        await register_user()
        await submit_post()
        post_id = await latest_post_id()

        response = await test_client.post(
            f"/posts/{post_id}",
            data={"title": "Via header", "content": "Body"},
            headers={"X-HTTP-Method-Override": "PATCH"},
        )

        assert response.status_code == 303
        assert (await fetch_post(post_id)).title == "Via header"

    @pytest.mark.asyncio
    async def test_update_missing_post_is_not_found(self, test_client, register_user, notices):
        await register_user()

        response = await test_client.patch("/posts/999", data={"title": "x", "content": "y"})

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert await notices() == ["Couldn't find post with id 999"]


class TestNonOwnerActions:
    """Another logged-in user, or nobody, acting on someone else's post."""

    async def _post_by_someone_else(self, test_client, register_user, submit_post, latest_post_id):
        await register_user(email="owner@example.com")
        await submit_post(title="Hello", content="World")
        post_id = await latest_post_id()
        test_client.cookies.clear()
        return post_id

    @pytest.mark.asyncio
    async def test_other_user_cannot_edit(
        self, test_client, register_user, submit_post, latest_post_id, notices
    ):
        post_id = await self._post_by_someone_else(
            test_client, register_user, submit_post, latest_post_id
        )
        await register_user(email="intruder@example.com")

        response = await test_client.get(f"/posts/{post_id}/edit")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert await notices() == [f"You are not authorized to modify post {post_id}"]

    @pytest.mark.asyncio
    async def test_other_user_cannot_update(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post
    ):
        post_id = await self._post_by_someone_else(
            test_client, register_user, submit_post, latest_post_id
        )
        await register_user(email="intruder@example.com")

        response = await test_client.patch(
            f"/posts/{post_id}", data={"title": "Defaced", "content": "Defaced"}
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        stored = await fetch_post(post_id)
        assert (stored.title, stored.content) == ("Hello", "World")

    @pytest.mark.asyncio
    async def test_other_user_cannot_destroy(
        self, test_client, register_user, submit_post, latest_post_id, count_rows
    ):
        post_id = await self._post_by_someone_else(
            test_client, register_user, submit_post, latest_post_id
        )
        await register_user(email="intruder@example.com")

        response = await test_client.delete(f"/posts/{post_id}")

        assert response.status_code == 303
        assert response.headers["location"] == "/posts"
        assert await count_rows(Post) == 1

    @pytest.mark.asyncio
    async def test_anonymous_cannot_update_or_destroy(
        self, test_client, register_user, submit_post, latest_post_id, fetch_post, count_rows
    ):
        post_id = await self._post_by_someone_else(
            test_client, register_user, submit_post, latest_post_id
        )

        edit = await test_client.get(f"/posts/{post_id}/edit")
        update = await test_client.patch(
            f"/posts/{post_id}", data={"title": "Defaced", "content": "Defaced"}
        )
        destroy = await test_client.delete(f"/posts/{post_id}")

        for response in (edit, update, destroy):
            assert response.status_code == 303
            assert response.headers["location"] == "/login"
        assert (await fetch_post(post_id)).title == "Hello"
        assert await count_rows(Post) == 1
