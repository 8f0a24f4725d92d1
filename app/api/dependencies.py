"""Shared FastAPI dependencies"""
from fastapi import Response

NO_STORE = "no-store, no-cache, must-revalidate, private"


def no_store(response: Response) -> None:
    """Mark a response as uncacheable; match and session data must always be live."""
    response.headers["Cache-Control"] = NO_STORE
