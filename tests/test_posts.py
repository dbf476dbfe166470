from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.anyio


async def create_post(client, **payload) -> dict:
    r = await client.post("/posts", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


async def test_create_and_read_post(client, authed_user, set_auth_cookie):
    author = await authed_user(client)
    post = await create_post(client, content="first post")
    assert post["author_id"] == author["id"]
    assert post["is_public"] is True

    reader = await authed_user(client)
    r = await client.get(f"/posts/{post['id']}")
    assert r.status_code == 200
    assert r.json()["content"] == "first post"

    r = await client.get(f"/users/{author['id']}/posts")
    assert [p["id"] for p in r.json()] == [post["id"]]

    r = await client.get("/posts")
    assert post["id"] in {p["id"] for p in r.json()}

    set_auth_cookie(client, reader["token"])
    r = await client.get(f"/users/{reader['id']}/posts")
    assert r.json() == []


async def test_empty_post_is_rejected(client, authed_user):
    await authed_user(client)
    r = await client.post("/posts", json={"content": "   "})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "empty_post"

    r = await client.post("/posts", json={})
    assert r.status_code == 422


async def test_private_post_hidden_from_others(client, authed_user, set_auth_cookie):
    author = await authed_user(client)
    post = await create_post(client, content="note to self", is_public=False)

    r = await client.get(f"/posts/{post['id']}")
    assert r.status_code == 200

    reader = await authed_user(client)
    r = await client.get(f"/posts/{post['id']}")
    assert r.status_code == 404
    r = await client.get(f"/users/{author['id']}/posts")
    assert r.json() == []
    r = await client.get("/posts")
    assert post["id"] not in {p["id"] for p in r.json()}

    set_auth_cookie(client, reader["token"])
    r = await client.get(f"/posts/{uuid.uuid4()}")
    assert r.status_code == 404


async def test_only_author_deletes_post(client, authed_user, set_auth_cookie):
    author = await authed_user(client)
    post = await create_post(client, picture="pics/sunset.jpg")
    assert post["content"] is None

    await authed_user(client)
    r = await client.delete(f"/posts/{post['id']}")
    assert r.status_code == 403

    set_auth_cookie(client, author["token"])
    r = await client.delete(f"/posts/{post['id']}")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

    r = await client.get(f"/posts/{post['id']}")
    assert r.status_code == 404
    r = await client.delete(f"/posts/{post['id']}")
    assert r.status_code == 404


async def test_block_hides_posts_over_http(client, authed_user, set_auth_cookie):
    b = await authed_user(client)
    post = await create_post(client, content="hello from b")
    a = await authed_user(client)

    r = await client.post(f"/users/{b['id']}/block")
    assert r.status_code == 201
    assert r.json() == {"ok": True, "blocked": True}

    r = await client.post(f"/users/{b['id']}/block")
    assert r.status_code == 409
    r = await client.post(f"/users/{a['id']}/block")
    assert r.status_code == 409
    r = await client.post(f"/users/{uuid.uuid4()}/block")
    assert r.status_code == 404

    r = await client.get("/users/blocked")
    assert [u["id"] for u in r.json()] == [b["id"]]

    assert (await client.get(f"/users/{b['id']}/posts")).json() == []
    assert (await client.get(f"/posts/{post['id']}")).status_code == 404
    assert post["id"] not in {p["id"] for p in (await client.get("/posts")).json()}

    # A third user is unaffected.
    await authed_user(client)
    assert (await client.get(f"/posts/{post['id']}")).status_code == 200

    set_auth_cookie(client, a["token"])
    r = await client.delete(f"/users/{b['id']}/block")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "blocked": False}
    assert (await client.get(f"/posts/{post['id']}")).status_code == 200

    r = await client.delete(f"/users/{b['id']}/block")
    assert r.status_code == 404


async def test_user_lookup(client, authed_user):
    user = await authed_user(client)
    r = await client.get(f"/users/{user['id']}")
    assert r.status_code == 200
    assert r.json()["username"] == user["username"]

    r = await client.get(f"/users/{uuid.uuid4()}")
    assert r.status_code == 404

    r = await client.get("/users")
    assert user["id"] in {u["id"] for u in r.json()}


async def test_post_reads_carry_author_profile(client, authed_user, set_auth_cookie):
    author = await authed_user(client, display_name="Ada L.")
    post = await create_post(client, content="profile attached")

    def assert_author(item):
        assert item["author_id"] == author["id"]
        assert item["author_username"] == author["username"]
        assert item["author_display_name"] == "Ada L."
        assert item["author_avatar_url"] is None

    assert_author(post)

    await authed_user(client)
    assert_author((await client.get(f"/posts/{post['id']}")).json())
    [by_author] = (await client.get(f"/users/{author['id']}/posts")).json()
    assert_author(by_author)
    [in_feed] = [p for p in (await client.get("/posts")).json() if p["id"] == post["id"]]
    assert_author(in_feed)

    set_auth_cookie(client, author["token"])
    r = await client.post("/groups", json={"name": "Readers"})
    group_id = r.json()["id"]
    r = await client.post(f"/groups/{group_id}/posts", json={"content": "group hello"})
    assert r.status_code == 201, r.text
    assert_author(r.json())
    [group_post] = (await client.get(f"/groups/{group_id}/posts")).json()
    assert_author(group_post)
