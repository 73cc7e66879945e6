import base64
import json
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from svix.webhooks import Webhook

from app.forum import create_app
from app.forum.db import session_scope
from app.forum.models import Base, User

TEST_JWT_KEY = "forum-test-jwt-signing-key-0123456789abcdef"
WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"forum-webhook-test-secret-0123456").decode()
CSRF = "test-csrf-token"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("CLERK_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("CLERK_JWT_KEY", TEST_JWT_KEY)
    monkeypatch.setenv("CLERK_JWT_ALGORITHM", "HS256")
    for k in ("CLERK_SIGN_IN_URL", "POSTS_PAGE_SIZE"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def client(app):
    c = app.test_client()
    with c.session_transaction() as sess:
        sess["csrf_token"] = CSRF
    return c


def make_token(auth_id: str, *, expires_in: int = 60, key: str = TEST_JWT_KEY, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": auth_id, "iat": now, "exp": now + timedelta(seconds=expires_in), **claims}
    return jwt.encode(payload, key, algorithm="HS256")


def auth_headers(auth_id: str, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(auth_id, **claims)}"}


def add_user(app, auth_id: str, *, name: str = "Ada Lovelace", username: str | None = None, onboarded: bool = True, image: str | None = None) -> int:
    with session_scope(app) as s:
        u = User(
            auth_id=auth_id,
            name=name,
            username=username or auth_id.lower(),
            image=image or f"https://img.example.com/{auth_id}.png",
            bio="hello there",
            onboarded=onboarded,
        )
        s.add(u)
        s.flush()
        return u.id


def signed_request(event: dict, *, secret: str = WEBHOOK_SECRET) -> tuple[str, dict[str, str]]:
    body = json.dumps(event)
    msg_id = f"msg_{uuid.uuid4().hex}"
    ts = datetime.now(timezone.utc)
    signature = Webhook(secret).sign(msg_id, ts, body)
    headers = {
        "svix-id": msg_id,
        "svix-timestamp": str(int(ts.timestamp())),
        "svix-signature": signature,
    }
    return body, headers
