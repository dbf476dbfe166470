from __future__ import annotations

import uuid

import pytest

pytestmark = pytest.mark.anyio


async def create_group(client, *, name: str = "Climbers") -> str:
    r = await client.post("/groups", json={"name": name, "description": "weekend crew"})
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["state"] == "owner"
    return data["id"]


async def join_group(client, set_auth_cookie, *, group_id: str, owner: dict, user: dict) -> None:
    set_auth_cookie(client, user["token"])
    r = await client.post(f"/groups/{group_id}/requests")
    assert r.status_code == 201, r.text

    set_auth_cookie(client, owner["token"])
    r = await client.post(f"/groups/{group_id}/requests/{user['id']}/accept")
    assert r.status_code == 200, r.text


async def test_join_request_flow(client, authed_user, set_auth_cookie):
    x = await authed_user(client)
    owner = await authed_user(client)
    group_id = await create_group(client)

    set_auth_cookie(client, x["token"])
    r = await client.get(f"/groups/{group_id}")
    assert r.status_code == 200
    assert r.json()["state"] == "none"

    r = await client.post(f"/groups/{group_id}/requests")
    assert r.status_code == 201
    assert r.json()["state"] == "requested"

    r = await client.post(f"/groups/{group_id}/requests")
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "already_requested"

    # Members list is closed to non-members.
    r = await client.get(f"/groups/{group_id}/members")
    assert r.status_code == 403

    set_auth_cookie(client, owner["token"])
    r = await client.get(f"/groups/{group_id}/requests")
    assert r.status_code == 200
    assert [item["user_id"] for item in r.json()] == [x["id"]]

    r = await client.post(f"/groups/{group_id}/requests/{x['id']}/accept")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "group_id": group_id, "user_id": x["id"], "state": "member"}

    r = await client.get(f"/groups/{group_id}/requests")
    assert r.json() == []

    set_auth_cookie(client, x["token"])
    r = await client.get(f"/groups/{group_id}/members")
    assert r.status_code == 200
    roles = {m["id"]: m["role"] for m in r.json()["members"]}
    assert roles == {owner["id"]: "owner", x["id"]: "member"}

    r = await client.get("/groups/mine")
    assert [(g["id"], g["state"]) for g in r.json()] == [(group_id, "member")]


async def test_cancel_and_reject(client, authed_user, set_auth_cookie):
    x = await authed_user(client)
    owner = await authed_user(client)
    group_id = await create_group(client)

    set_auth_cookie(client, x["token"])
    r = await client.delete(f"/groups/{group_id}/requests")
    assert r.status_code == 404

    await client.post(f"/groups/{group_id}/requests")
    r = await client.delete(f"/groups/{group_id}/requests")
    assert r.status_code == 200
    assert r.json()["state"] == "none"

    await client.post(f"/groups/{group_id}/requests")
    set_auth_cookie(client, owner["token"])
    r = await client.post(f"/groups/{group_id}/requests/{x['id']}/reject")
    assert r.status_code == 200
    assert r.json()["state"] == "none"

    r = await client.post(f"/groups/{group_id}/requests/{x['id']}/accept")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "request_not_found"


async def test_plain_member_is_forbidden_from_admin_actions(client, authed_user, set_auth_cookie):
    owner = await authed_user(client)
    group_id = await create_group(client)
    m = await authed_user(client)
    other = await authed_user(client)
    x = await authed_user(client)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=m)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=other)

    set_auth_cookie(client, x["token"])
    await client.post(f"/groups/{group_id}/requests")

    set_auth_cookie(client, m["token"])
    attempts = [
        ("DELETE", f"/groups/{group_id}"),
        ("POST", f"/groups/{group_id}/members/{other['id']}/promote"),
        ("DELETE", f"/groups/{group_id}/members/{other['id']}"),
        ("POST", f"/groups/{group_id}/requests/{x['id']}/accept"),
        ("GET", f"/groups/{group_id}/requests"),
    ]
    for method, url in attempts:
        r = await client.request(method, url)
        assert r.status_code == 403, r.text

    set_auth_cookie(client, owner["token"])
    r = await client.get(f"/groups/{group_id}/members")
    assert len(r.json()["members"]) == 3
    r = await client.get(f"/groups/{group_id}/requests")
    assert [item["user_id"] for item in r.json()] == [x["id"]]


async def test_promoted_admin_moderates_but_cannot_delete(client, authed_user, set_auth_cookie):
    owner = await authed_user(client)
    group_id = await create_group(client)
    m = await authed_user(client)
    y = await authed_user(client)
    z = await authed_user(client)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=m)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=z)

    set_auth_cookie(client, owner["token"])
    r = await client.post(f"/groups/{group_id}/members/{m['id']}/promote")
    assert r.status_code == 200
    assert r.json()["state"] == "admin"

    r = await client.post(f"/groups/{group_id}/members/{m['id']}/promote")
    assert r.status_code == 409
    assert r.json()["detail"] == {"code": "already_admin", "message": "User is already an admin"}

    set_auth_cookie(client, y["token"])
    await client.post(f"/groups/{group_id}/requests")

    set_auth_cookie(client, m["token"])
    r = await client.post(f"/groups/{group_id}/requests/{y['id']}/accept")
    assert r.status_code == 200
    r = await client.delete(f"/groups/{group_id}/members/{z['id']}")
    assert r.status_code == 200
    r = await client.delete(f"/groups/{group_id}/members/{owner['id']}")
    assert r.status_code == 403
    r = await client.delete(f"/groups/{group_id}")
    assert r.status_code == 403

    set_auth_cookie(client, owner["token"])
    r = await client.post(f"/groups/{group_id}/members/{m['id']}/demote")
    assert r.status_code == 200
    assert r.json()["state"] == "member"


async def test_owner_cannot_leave_and_deletes_group(client, authed_user, set_auth_cookie):
    owner = await authed_user(client)
    group_id = await create_group(client)
    m = await authed_user(client)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=m)

    set_auth_cookie(client, owner["token"])
    r = await client.post(f"/groups/{group_id}/leave")
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "owner_cannot_leave"

    set_auth_cookie(client, m["token"])
    r = await client.post(f"/groups/{group_id}/posts", json={"content": "see you"})
    assert r.status_code == 201

    set_auth_cookie(client, owner["token"])
    r = await client.delete(f"/groups/{group_id}")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

    r = await client.get(f"/groups/{group_id}")
    assert r.status_code == 404
    r = await client.get(f"/groups/{group_id}/posts")
    assert r.status_code == 404

    set_auth_cookie(client, m["token"])
    r = await client.get("/groups/mine")
    assert r.json() == []
    r = await client.post(f"/groups/{group_id}/leave")
    assert r.status_code == 404


async def test_member_leaves(client, authed_user, set_auth_cookie):
    owner = await authed_user(client)
    group_id = await create_group(client)
    m = await authed_user(client)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=m)

    set_auth_cookie(client, m["token"])
    r = await client.post(f"/groups/{group_id}/leave")
    assert r.status_code == 200
    assert r.json()["state"] == "none"

    r = await client.post(f"/groups/{group_id}/leave")
    assert r.status_code == 404


async def test_group_posts(client, authed_user, set_auth_cookie):
    owner = await authed_user(client)
    group_id = await create_group(client)
    m = await authed_user(client)
    outsider = await authed_user(client)
    await join_group(client, set_auth_cookie, group_id=group_id, owner=owner, user=m)

    set_auth_cookie(client, m["token"])
    r = await client.post(f"/groups/{group_id}/posts", json={"content": "  trail run sunday  "})
    assert r.status_code == 201, r.text
    post = r.json()
    assert post["content"] == "trail run sunday"
    assert post["group_id"] == group_id

    r = await client.post(f"/groups/{group_id}/posts", json={"content": " "})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "empty_post"

    set_auth_cookie(client, outsider["token"])
    r = await client.post(f"/groups/{group_id}/posts", json={"content": "hi"})
    assert r.status_code == 403
    r = await client.get(f"/groups/{group_id}/posts")
    assert r.status_code == 200
    assert r.json() == []
    r = await client.delete(f"/groups/{group_id}/posts/{post['id']}")
    assert r.status_code == 403

    set_auth_cookie(client, owner["token"])
    r = await client.get(f"/groups/{group_id}/posts")
    assert [p["id"] for p in r.json()] == [post["id"]]
    r = await client.delete(f"/groups/{group_id}/posts/{post['id']}")
    assert r.status_code == 200
    r = await client.delete(f"/groups/{group_id}/posts/{post['id']}")
    assert r.status_code == 404


async def test_unknown_group_is_not_found(client, authed_user):
    await authed_user(client)
    missing = uuid.uuid4()

    assert (await client.get(f"/groups/{missing}")).status_code == 404
    assert (await client.post(f"/groups/{missing}/requests")).status_code == 404
    assert (await client.delete(f"/groups/{missing}")).status_code == 404


async def test_group_name_is_required(client, authed_user):
    await authed_user(client)
    r = await client.post("/groups", json={"name": "   "})
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "group_name_required"


async def test_groups_require_auth(client):
    client.cookies.clear()
    r = await client.get("/groups")
    assert r.status_code == 401
