"""Maintenance CLI for sensei_history."""

from .app import app

__all__ = ["app"]
