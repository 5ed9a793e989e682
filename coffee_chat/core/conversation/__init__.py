"""Conversation state: pending interactions and reply classification."""

from .classifier import ResponseClassifier
from .session_manager import SessionStore

__all__ = [
    "ResponseClassifier",
    "SessionStore",
]
