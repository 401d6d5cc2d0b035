"""
asgi.py -- ASGI entry point for the Alexandria auth service.

Run with:  uvicorn asgi:app --reload

The book catalog and static frontend are served by other processes behind the
same reverse proxy; only the auth API is assembled here.
"""

from api.main import app

__all__ = ["app"]
