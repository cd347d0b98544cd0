import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

import rcmatch.main as m
from rcmatch import config
from rcmatch.services.rate_limit import limiter


@pytest.fixture
def client(core, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    limiter.reset()
    m.app.state.core = core
    yield TestClient(m.app)
    m.app.state.core = None


def _register(client, username, type_="INDIVIDUAL", **extra):
    payload = {"username": username, "password": "pw-" + username, "type": type_, "name": username.title(), **extra}
    res = client.post("/auth/register", json=payload, headers={"X-Auth-Mode": "bearer"})
    assert res.status_code == 201, res.text
    body = res.json()
    # Keep identities apart: each caller authenticates with its own bearer token.
    client.cookies.clear()
    return body["user"], {"Authorization": f"Bearer {body['access_token']}"}


def test_register_login_me_and_logout(client):
    user, _ = _register(client, "ind1")
    assert user["blocked"] is False
    assert "password_hash" not in user

    res = client.post("/auth/login", json={"username": "ind1", "password": "pw-ind1"})
    assert res.status_code == 200
    assert "rc_session" in res.cookies
    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["id"] == user["id"]

    assert client.post("/auth/logout").status_code == 200
    client.cookies.clear()
    assert client.get("/auth/me").status_code == 401


def test_register_validation(client):
    _register(client, "taken")
    dup = client.post("/auth/register", json={"username": "taken", "type": "INDIVIDUAL", "name": "X"})
    assert dup.status_code == 409
    admin = client.post("/auth/register", json={"username": "sneaky", "type": "ADMIN", "name": "X"})
    assert admin.status_code == 400
    bad_login = client.post("/auth/login", json={"username": "taken", "password": "nope"})
    assert bad_login.status_code == 401


def test_mutual_like_match_and_conversation(client):
    org, org_h = _register(client, "org1", "ORGANIZATION", topics=["Climate"])
    ind, ind_h = _register(client, "ind1", topics=["Climate"])

    pool = client.get("/potentials", headers=ind_h, params={"topic": "Climate"}).json()["potentials"]
    assert [p["id"] for p in pool] == [org["id"]]

    first = client.post("/swipes", json={"target_id": ind["id"], "action": "like"}, headers=org_h)
    assert first.status_code == 200
    assert first.json()["match"] is None
    second = client.post("/swipes", json={"target_id": org["id"], "action": "like"}, headers=ind_h).json()["match"]
    assert set(second["users"]) == {org["id"], ind["id"]}
    repeat = client.post("/swipes", json={"target_id": org["id"], "action": "like"}, headers=ind_h).json()["match"]
    assert repeat["id"] == second["id"]

    matches = client.get("/matches", headers=org_h).json()["matches"]
    assert [row["other_user"]["id"] for row in matches] == [ind["id"]]

    sent = client.post(f"/conversations/{ind['id']}/messages", json={"content": "hello"}, headers=org_h)
    assert sent.status_code == 201
    client.post(f"/conversations/{org['id']}/messages", json={"content": "hi!"}, headers=ind_h)

    convo = client.get(f"/conversations/{org['id']}", headers=ind_h).json()
    assert [msg["content"] for msg in convo["messages"]] == ["hello", "hi!"]
    assert convo["poll_interval_seconds"] == config.CONVERSATION_POLL_SECONDS

    newer = client.get(f"/conversations/{org['id']}", headers=ind_h, params={"after_seq": sent.json()["message"]["seq"]}).json()
    assert [msg["content"] for msg in newer["messages"]] == ["hi!"]


def test_message_and_swipe_errors(client):
    a, a_h = _register(client, "alpha")
    b, _ = _register(client, "beta")

    empty = client.post(f"/conversations/{b['id']}/messages", json={"content": "   "}, headers=a_h)
    assert empty.status_code == 400
    missing = client.post("/conversations/nobody/messages", json={"content": "hi"}, headers=a_h)
    assert missing.status_code == 404
    self_swipe = client.post("/swipes", json={"target_id": a["id"], "action": "like"}, headers=a_h)
    assert self_swipe.status_code == 400
    bad_action = client.post("/swipes", json={"target_id": b["id"], "action": "maybe"}, headers=a_h)
    assert bad_action.status_code == 400
    assert client.get("/potentials", headers=a_h, params={"type": "ADMIN"}).status_code == 400


def test_requires_authentication(client):
    assert client.get("/potentials").status_code == 401
    assert client.get("/matches", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_login_limit_ignores_unverified_session_cookies(client):
    statuses = set()
    for i in range(config.RL_AUTH_LOGIN_LIMIT):
        res = client.post(
            "/auth/login",
            json={"username": "ghost", "password": "nope"},
            headers={"Cookie": f"rc_session=junk-{i}"},
        )
        statuses.add(res.status_code)
    assert statuses == {401}

    blocked = client.post("/auth/login", json={"username": "ghost", "password": "nope"}, headers={"Cookie": "rc_session=fresh"})
    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers


def test_admin_moderation_flow(client, core):
    core.ensure_admin("admin", "admin-pass")
    login = client.post("/auth/login", json={"username": "admin", "password": "admin-pass"}, headers={"X-Auth-Mode": "bearer"})
    client.cookies.clear()
    admin_h = {"Authorization": f"Bearer {login.json()['access_token']}"}
    user, user_h = _register(client, "member")
    partner, partner_h = _register(client, "partner", "ORGANIZATION")

    assert client.get("/admin/users", headers=user_h).status_code == 403

    listed = client.get("/admin/users", headers=admin_h).json()
    assert {u["username"] for u in listed["users"]} == {"member", "partner"}

    blocked = client.post(f"/admin/users/{user['id']}/toggle-block", headers=admin_h)
    assert blocked.json()["user"]["blocked"] is True
    assert client.get("/matches", headers=user_h).status_code == 403
    assert client.post("/auth/login", json={"username": "member", "password": "pw-member"}).status_code == 403
    assert user["id"] not in {p["id"] for p in client.get("/potentials", headers=partner_h).json()["potentials"]}

    client.post(f"/admin/users/{user['id']}/toggle-block", headers=admin_h)
    client.post("/swipes", json={"target_id": partner["id"], "action": "like"}, headers=user_h)
    client.post("/swipes", json={"target_id": user["id"], "action": "like"}, headers=partner_h)
    assert len(client.get("/matches", headers=partner_h).json()["matches"]) == 1

    deleted = client.post(f"/admin/users/{user['id']}/delete", headers=admin_h)
    assert deleted.status_code == 200
    assert deleted.json()["removed"]["matches"] == 1
    assert client.get("/matches", headers=partner_h).json()["matches"] == []
    assert client.get("/auth/me", headers=user_h).status_code == 401
    assert client.post(f"/admin/users/{user['id']}/delete", headers=admin_h).status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
