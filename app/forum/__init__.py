import logging
from datetime import datetime, timedelta

from flask import Flask, g, render_template, request, session
from dotenv import load_dotenv

from app.forum.config import load_config
from app.forum.db import init_db
from app.forum.routes import bp as routes_bp
from app.forum.auth import bp as auth_bp, load_current_user
from app.forum.modules.users.views import bp as users_bp
from app.forum.modules.threads.views import bp as threads_bp
from app.forum.modules.communities.views import bp as communities_bp
from app.forum.modules.webhooks.clerk import bp as webhooks_bp


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)

    from app.forum.security import ensure_csrf_token, is_csrf_exempt, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_user() -> dict:
        return {
            "current_user": getattr(g, "current_user", None),
            "signed_in": bool(getattr(g, "auth_user_id", None)),
        }

    @app.template_filter("timeago")
    def _timeago_filter(value) -> str:
        if value is None:
            return "—"
        if not isinstance(value, datetime):
            return str(value)
        delta = datetime.utcnow() - value
        seconds = int(delta.total_seconds())
        if seconds < 60:
            return "just now"
        if seconds < 3600:
            return f"{seconds // 60}m"
        if seconds < 86400:
            return f"{seconds // 3600}h"
        return value.strftime("%b %d, %Y")

    @app.before_request
    def _csrf_guard():
        if is_csrf_exempt(request.path):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if not validate_csrf(request):
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if not app.config.get("CLERK_WEBHOOK_SECRET"):
            app.logger.error("CLERK_WEBHOOK_SECRET is not set; every webhook delivery will be rejected.")
        if not app.config.get("CLERK_JWT_KEY"):
            app.logger.error("CLERK_JWT_KEY is not set; every request will be treated as anonymous.")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(threads_bp)
    app.register_blueprint(communities_bp)
    app.register_blueprint(webhooks_bp, url_prefix="/api/webhook")

    app.before_request(load_current_user)

    @app.errorhandler(400)
    def _err_400(e):  # type: ignore[no-redef]
        return render_template("errors/400.html", message=getattr(e, "description", None)), 400

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
