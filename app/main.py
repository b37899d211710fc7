"""Uvicorn entrypoint for running from the repo root.

    uvicorn app.main:app --reload

Re-exports the app built by `backend.app.main.create_app()` from environment settings.
"""

from backend.app.main import app  # noqa: F401
