"""Session state, event reduction and the session controller."""

from .controller import SessionController, SessionError, StreamClosedError
from .decisions import DecisionCoordinator, validate_resolution
from .reducer import EventReducer
from .state import SessionContext
from .store import MessageStore

__all__ = [
    "DecisionCoordinator",
    "EventReducer",
    "MessageStore",
    "SessionContext",
    "SessionController",
    "SessionError",
    "StreamClosedError",
    "validate_resolution",
]
