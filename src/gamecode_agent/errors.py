"""
Automation error taxonomy.

Only SurfaceInitError is allowed to escape an operation; the rest are
turned into structured outcomes at the controller boundary or logged.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import FallbackChain


class AutomationError(Exception):
    """Base class for all game code agent errors."""


class SurfaceInitError(AutomationError):
    """The browser process, context or page could not be created."""


class ElementTimeout(AutomationError):
    """An expected element did not appear within its timeout."""

    def __init__(self, selector: str, timeout_ms: int):
        super().__init__(f"Timeout waiting for '{selector}' after {timeout_ms}ms")
        self.selector = selector
        self.timeout_ms = timeout_ms


class ActionFallbackExhausted(AutomationError):
    """Every candidate action for a UI step failed."""

    def __init__(self, chain: "FallbackChain"):
        tried = ", ".join(chain.candidates)
        super().__init__(f"All {len(chain.candidates)} candidates failed for '{chain.label}': {tried}")
        self.chain = chain


class CleanupError(AutomationError):
    """Releasing one stage of the automation surface failed."""

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"Failed to close {stage}: {cause!s}")
        self.stage = stage
        self.cause = cause


class StoreIOError(AutomationError):
    """The session store file could not be read or written."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None):
        message = f"Session store I/O failed for {path}"
        if cause is not None:
            message = f"{message}: {cause!s}"
        super().__init__(message)
        self.path = path
        self.cause = cause
