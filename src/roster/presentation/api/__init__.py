"""FastAPI presentation layer."""

from roster.presentation.api.app import create_app

__all__ = ["create_app"]
