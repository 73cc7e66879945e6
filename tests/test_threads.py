"""Tests for onboarding, thread creation and comments."""
from app.forum.db import session_scope
from app.forum.models import AuditEvent, User
from app.forum.modules.communities.models import Community
from app.forum.modules.threads.models import Thread

from conftest import CSRF, add_user, auth_headers


def _onboarding_form(**overrides):
    form = {
        "csrf_token": CSRF,
        "profile_photo": "https://img.example.com/ada.png",
        "name": "Ada Lovelace",
        "username": "Ada",
        "bio": "First programmer.",
    }
    form.update(overrides)
    return form


# ---------- Onboarding ----------

def test_onboarding_requires_sign_in(client):
    r = client.get("/onboarding")
    assert r.status_code == 302
    assert "/sign-in" in r.headers["Location"]


def test_onboarding_prefills_from_token_claims(client):
    r = client.get("/onboarding", headers=auth_headers("user_new", name="Ada Lovelace", image_url="https://img.example.com/a.png"))
    assert r.status_code == 200
    assert b"Ada Lovelace" in r.data
    assert b"https://img.example.com/a.png" in r.data


def test_onboarding_creates_onboarded_user(app, client):
    r = client.post("/onboarding", data=_onboarding_form(), headers=auth_headers("user_new"))
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/")

    with session_scope(app) as s:
        u = s.query(User).filter(User.auth_id == "user_new").one()
        assert u.onboarded is True
        assert u.username == "ada"
        assert s.query(AuditEvent).filter(AuditEvent.action == "user.onboard").count() == 1

    r = client.get("/activity", headers=auth_headers("user_new"))
    assert r.status_code == 200


def test_onboarding_updates_existing_not_onboarded_user(app, client):
    add_user(app, "user_new", onboarded=False, username="placeholder")
    r = client.post("/onboarding", data=_onboarding_form(username="ada2"), headers=auth_headers("user_new"))
    assert r.status_code == 302
    with session_scope(app) as s:
        users = s.query(User).filter(User.auth_id == "user_new").all()
        assert len(users) == 1
        assert users[0].onboarded is True
        assert users[0].username == "ada2"


def test_onboarding_validation_errors_are_flashed(app, client):
    r = client.post("/onboarding", data=_onboarding_form(name="A"), headers=auth_headers("user_new"), follow_redirects=True)
    assert r.status_code == 200
    assert b"Minimum 3 Characters" in r.data
    with session_scope(app) as s:
        assert s.query(User).count() == 0


def test_onboarding_rejects_taken_username(app, client):
    add_user(app, "user_other", username="ada")
    r = client.post("/onboarding", data=_onboarding_form(), headers=auth_headers("user_new"), follow_redirects=True)
    assert b"Username is already taken" in r.data


# ---------- Create thread ----------

def test_create_thread_requires_onboarding(app, client):
    add_user(app, "user_new", onboarded=False)
    r = client.get("/create-thread", headers=auth_headers("user_new"))
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/onboarding")


def test_create_thread_posts_and_shows_on_home(app, client):
    add_user(app, "user_me", name="Me Myself")
    r = client.post(
        "/create-thread",
        data={"csrf_token": CSRF, "thread": "Hello forum"},
        headers=auth_headers("user_me"),
    )
    assert r.status_code == 302

    r = client.get("/")
    assert b"Hello forum" in r.data
    assert b"Me Myself" in r.data


def test_create_thread_too_short_is_rejected(app, client):
    add_user(app, "user_me")
    r = client.post(
        "/create-thread",
        data={"csrf_token": CSRF, "thread": "hi"},
        headers=auth_headers("user_me"),
        follow_redirects=True,
    )
    assert b"Minimum 3 Characters" in r.data
    with session_scope(app) as s:
        assert s.query(Thread).count() == 0


def test_create_thread_in_community(app, client):
    user_id = add_user(app, "user_me")
    with session_scope(app) as s:
        s.add(Community(auth_id="org_1", username="pythonistas", name="Pythonistas", created_by_id=user_id))

    r = client.post(
        "/create-thread",
        data={"csrf_token": CSRF, "thread": "Community post", "community_id": "org_1"},
        headers=auth_headers("user_me"),
    )
    assert r.status_code == 302
    with session_scope(app) as s:
        t = s.query(Thread).one()
        assert t.community is not None and t.community.auth_id == "org_1"

    r = client.get("/communities/org_1")
    assert r.status_code == 200
    assert b"Community post" in r.data


# ---------- Comments ----------

def test_comment_on_thread_creates_activity_for_author(app, client):
    author = add_user(app, "user_author", name="Author")
    add_user(app, "user_reader", name="Reader Person")
    with session_scope(app) as s:
        t = Thread(text="Original post", author_id=author)
        s.add(t)
        s.flush()
        thread_id = t.id

    r = client.post(
        f"/thread/{thread_id}/comment",
        data={"csrf_token": CSRF, "thread": "Great post"},
        headers=auth_headers("user_reader"),
    )
    assert r.status_code == 302
    assert r.headers["Location"].endswith(f"/thread/{thread_id}")

    r = client.get(f"/thread/{thread_id}")
    assert b"Original post" in r.data
    assert b"Great post" in r.data

    r = client.get("/activity", headers=auth_headers("user_author"))
    assert b"Reader Person" in r.data
    assert b"replied to your activity" in r.data


def test_comment_on_missing_thread_is_404(app, client):
    add_user(app, "user_me")
    r = client.post(
        "/thread/12345/comment",
        data={"csrf_token": CSRF, "thread": "Hello?"},
        headers=auth_headers("user_me"),
    )
    assert r.status_code == 404


def test_comment_too_short_is_rejected(app, client):
    author = add_user(app, "user_me")
    with session_scope(app) as s:
        t = Thread(text="Original post", author_id=author)
        s.add(t)
        s.flush()
        thread_id = t.id
    r = client.post(
        f"/thread/{thread_id}/comment",
        data={"csrf_token": CSRF, "thread": "ok"},
        headers=auth_headers("user_me"),
        follow_redirects=True,
    )
    assert b"Minimum 3 Characters" in r.data
    with session_scope(app) as s:
        assert s.query(Thread).count() == 1


def test_profile_lists_top_level_threads(app, client):
    me = add_user(app, "user_me", username="me", name="Me Myself")
    with session_scope(app) as s:
        root = Thread(text="Top level thought", author_id=me)
        s.add(root)
        s.flush()
        s.add(Thread(text="a reply of mine", author_id=me, parent_id=root.id))

    r = client.get("/profile/me")
    assert r.status_code == 200
    assert b"Top level thought" in r.data
    assert b"a reply of mine" not in r.data
