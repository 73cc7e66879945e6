from app.forum.config import load_config, load_settings
from scripts.start import gunicorn_argv


def test_defaults(monkeypatch):
    for name in ("POSTS_PAGE_SIZE", "GUNICORN_WORKERS", "GUNICORN_TIMEOUT", "CLERK_JWT_ALGORITHM"):
        monkeypatch.delenv(name, raising=False)
    s = load_settings()
    assert s.posts_page_size == 20
    assert s.gunicorn_workers == 2
    assert s.gunicorn_timeout == 60
    assert s.clerk_jwt_algorithm == "RS256"


def test_gunicorn_settings_from_env(monkeypatch):
    monkeypatch.setenv("GUNICORN_WORKERS", "4")
    monkeypatch.setenv("GUNICORN_TIMEOUT", "not-a-number")
    s = load_settings()
    assert s.gunicorn_workers == 4
    assert s.gunicorn_timeout == 60


def test_gunicorn_argv_uses_settings():
    argv = gunicorn_argv(8000, 4, 30)
    assert argv[:2] == ["gunicorn", "app.wsgi:app"]
    assert argv[argv.index("--bind") + 1] == "0.0.0.0:8000"
    assert argv[argv.index("--workers") + 1] == "4"
    assert argv[argv.index("--timeout") + 1] == "30"


def test_production_cookies_are_secure(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    assert load_config()["SESSION_COOKIE_SECURE"] is True
