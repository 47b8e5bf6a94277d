"""Async session client for the Quotewise API."""

from quotewise.client.errors import AuthenticationError, SessionError, SessionTimeoutError
from quotewise.client.navigation import MemoryNavigator, Navigator
from quotewise.client.retry import Backoff, RetryPolicy
from quotewise.client.session import AuthState, SessionConfig, SessionManager, SessionState
from quotewise.client.storage import FileSessionStorage, MemorySessionStorage, SessionStorage


__all__ = [
    # Session
    "AuthState",
    "SessionConfig",
    "SessionManager",
    "SessionState",
    # Storage
    "FileSessionStorage",
    "MemorySessionStorage",
    "SessionStorage",
    # Retry
    "Backoff",
    "RetryPolicy",
    # Navigation
    "MemoryNavigator",
    "Navigator",
    # Errors
    "AuthenticationError",
    "SessionError",
    "SessionTimeoutError",
]
