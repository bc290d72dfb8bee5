"""Query sessions and their lifetime management."""

from .callbacks import SessionCallbackHandler, SessionCallbackManager
from .manager import SessionManager
from .session import QuerySession, SessionState

__all__ = [
    "QuerySession",
    "SessionCallbackHandler",
    "SessionCallbackManager",
    "SessionManager",
    "SessionState",
]
