from conftest import add_user, auth_headers


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_home_renders_without_session(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"No threads found" in r.data
    assert b"Sign in" in r.data


def test_home_shows_nav_for_signed_in_user(app, client):
    add_user(app, "user_me", username="me")
    r = client.get("/", headers=auth_headers("user_me"))
    assert r.status_code == 200
    assert b"Activity" in r.data
    assert b"/profile/me" in r.data


def test_unknown_thread_is_404(client):
    r = client.get("/thread/999")
    assert r.status_code == 404
    assert b"Not found" in r.data


def test_post_without_csrf_is_rejected(app):
    add_user(app, "user_me")
    c = app.test_client()
    r = c.post("/create-thread", data={"thread": "hello there"}, headers=auth_headers("user_me"))
    assert r.status_code == 400
    assert b"CSRF" in r.data


def test_bad_request_renders_error_page(app):
    from flask import abort

    @app.get("/bad-request")
    def _bad_request():
        abort(400, description="Page number must be an integer.")

    r = app.test_client().get("/bad-request")
    assert r.status_code == 400
    assert b"Bad request" in r.data
    assert b"Page number must be an integer." in r.data
