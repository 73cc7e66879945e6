#!/usr/bin/env python3
"""
Production entrypoint: migrate, then exec gunicorn serving app.wsgi:app.

Worker count and timeout come from GUNICORN_WORKERS / GUNICORN_TIMEOUT
(see app.forum.config.Settings).

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _port() -> int:
    raw = (os.environ.get("PORT") or "8080").strip()
    try:
        port = int(raw)
    except ValueError:
        port = 0
    if not 1 <= port <= 65535:
        print(f"ERROR: Invalid PORT value '{raw}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)
    return port


def gunicorn_argv(port: int, workers: int, timeout: int) -> list[str]:
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", str(max(workers, 1)),
        "--timeout", str(max(timeout, 1)),
        # engines are disposed after fork in create_app()
        "--preload",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    from app.forum.config import load_settings
    from scripts.release import run_release

    port = _port()
    try:
        run_release()
    except Exception as e:
        print(f"Release failed: {e}", flush=True)
        sys.exit(1)

    settings = load_settings()
    argv = gunicorn_argv(port, settings.gunicorn_workers, settings.gunicorn_timeout)
    print(f"=== Starting forum on :{port} ({settings.gunicorn_workers} workers) ===", flush=True)
    os.execvp(argv[0], argv)


if __name__ == "__main__":
    main()
