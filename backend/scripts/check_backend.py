#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from backend/:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Copy from backend/.env.example and set GEMINI_API_KEY.")
    else:
        print("OK  .env exists")

    # 2) Credential
    from companion.config import settings
    if settings.gemini_ready:
        print("OK  GEMINI_API_KEY set")
    else:
        errors.append("GEMINI_API_KEY is empty: every /api route except /api/health answers 503.")
        print("FAIL GEMINI_API_KEY missing")

    # 3) Store opens (creates tables when DB_CREATE_ALL is on)
    try:
        from companion.services.chat_store import ChatStore
        with ChatStore(settings.database_url, create_all=settings.db_create_all) as store:
            store.list_sessions()
        print("OK  Database (DATABASE_URL)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from companion.main import app  # noqa: F401
        print("OK  App import (companion.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    # 5) Port
    try:
        import socket
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", settings.port))
        print(f"OK  Port {settings.port} is free")
    except OSError:
        errors.append(f"Port {settings.port} is in use. Stop the other process or set PORT in .env.")
        print(f"FAIL Port {settings.port} is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn companion.main:app --port", settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
