"""
Game Code Agent

Logs in to the game site with a driven browser, persists the authenticated
session and replays it to submit game codes.
"""

from .classifier import classify
from .controller import AutomationController, ControllerState
from .errors import (
    ActionFallbackExhausted,
    AutomationError,
    CleanupError,
    ElementTimeout,
    StoreIOError,
    SurfaceInitError,
)
from .models import (
    FeedbackMessage,
    MessageKind,
    SessionInvalid,
    SessionRecord,
    SubmissionOutcome,
)
from .service import ApiResponse, GameCodeService, create_service
from .store import SessionStore

__version__ = "0.1.0"

__all__ = [
    "classify",
    "AutomationController",
    "ControllerState",
    "ActionFallbackExhausted",
    "AutomationError",
    "CleanupError",
    "ElementTimeout",
    "StoreIOError",
    "SurfaceInitError",
    "FeedbackMessage",
    "MessageKind",
    "SessionInvalid",
    "SessionRecord",
    "SubmissionOutcome",
    "ApiResponse",
    "GameCodeService",
    "create_service",
    "SessionStore",
]
