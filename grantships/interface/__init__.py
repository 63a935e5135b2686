"""Mini README: HTTP interface package initialiser.

Exposes the FastAPI application factory used by the CLI and uvicorn.
"""

from .web_app import create_application

__all__ = ["create_application"]
