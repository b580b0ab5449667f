"""Conversation lifecycle policies for sensei_history."""

from .archival import RETENTION_WINDOW, ArchivalPolicy

__all__ = ["ArchivalPolicy", "RETENTION_WINDOW"]
