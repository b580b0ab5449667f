"""Folder registry module for sensei_history."""

from ..config import NO_FOLDER
from .models import Folder
from .registry import FolderRegistry

__all__ = [
    "Folder",
    "FolderRegistry",
    "NO_FOLDER",
]
