"""Small CLI helpers exposed as project scripts for developer convenience.

Usage (from project root, after `pip install -e .`):
  runserver --host=0.0.0.0 --port=8000 --no-reload
  run-tests
  migrate        # defaults to `alembic upgrade head`
  init-env       # copies .env.example -> .env if missing
  seed           # creates roles and the bootstrap admin user
"""
from __future__ import annotations

import sys
import shutil
import subprocess
from pathlib import Path
from typing import List


def _args() -> List[str]:
    return sys.argv[1:]


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    import uvicorn

    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            try:
                port = int(a.split("=", 1)[1])
            except ValueError:
                print(f"Ignoring invalid port: {a}")
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("playlist_api.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    args = _args()
    cmd = ["pytest"] + args
    subprocess.run(cmd, check=True)


def run_migrations() -> None:
    """Run alembic. If no args provided, runs `alembic upgrade head`."""
    args = _args()
    if args:
        cmd = ["alembic"] + args
    else:
        cmd = ["alembic", "upgrade", "head"]
    subprocess.run(cmd, check=True)


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


def seed() -> None:
    """Create the role catalogue and, if ADMIN_PASSWORD is set, the admin user."""
    from playlist_api.core.database import SessionLocal
    from playlist_api.core.logger import setup_logging
    from playlist_api.services.seeder import AuthSeeder

    setup_logging()
    db = SessionLocal()
    try:
        AuthSeeder(db).seed()
    finally:
        db.close()
    print("Seeding complete")


COMMANDS = {
    "runserver": runserver,
    "run-tests": run_tests,
    "migrate": run_migrations,
    "init-env": init_env,
    "seed": seed,
}


if __name__ == "__main__":
    if len(sys.argv) <= 1 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        sys.exit(1)
    COMMANDS[sys.argv.pop(1)]()
