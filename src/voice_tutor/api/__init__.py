"""HTTP API for the Voice Tutor service."""

from .app import create_app

__all__ = ["create_app"]
