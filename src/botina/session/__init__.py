"""Per-user record access and locking."""

from .manager import SessionManager

__all__ = ["SessionManager"]
