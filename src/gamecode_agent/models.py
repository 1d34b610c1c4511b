"""
Data models for session persistence and submission results.

This module defines Pydantic models shared by the store, the classifier
and the controller:
- SessionRecord: persisted authentication snapshot
- FeedbackMessage / SubmissionOutcome: classified page feedback
- SessionInvalid: outcome for a missing or expired session
- FallbackChain: ordered candidate actions for a fragile UI step
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageKind(str, Enum):
    """Kind of a feedback message, derived from its CSS classes."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class SessionRecord(BaseModel):
    """Authentication snapshot captured after a successful login.

    Serialized with the field names of the session file:
    ``{"cookies": [...], "localStorage": {...}, "timestamp": <epoch-ms>}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    cookies: list[dict[str, Any]] = Field(default_factory=list)
    """Cookies exactly as returned by the browsing context."""

    local_state: dict[str, str] = Field(default_factory=dict, alias="localStorage")
    """Page-local storage snapshot."""

    created_at: int = Field(ge=0, alias="timestamp")
    """Creation time in milliseconds since the epoch. Never refreshed on read."""

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.created_at

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        """A record is valid only while its age is strictly below the TTL."""
        return self.age_ms(now_ms) >= ttl_ms

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class FeedbackMessage(BaseModel):
    """One piece of feedback text rendered by the site."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    kind: MessageKind = Field(default=MessageKind.INFO, alias="type")

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("feedback text must not be blank")
        return value

    def to_json_dict(self) -> dict[str, str]:
        return {"text": self.text, "type": self.kind.value}


class SubmissionOutcome(BaseModel):
    """Verdict for one code submission.

    ``overall_success`` is True iff at least one message is a success message,
    whatever else was reported alongside it.
    """

    overall_success: bool
    messages: list[FeedbackMessage] = Field(default_factory=list)
    error: Optional[str] = None
    """Fault that stopped the submission before feedback could be read."""

    @classmethod
    def failed(cls, error: str) -> "SubmissionOutcome":
        return cls(overall_success=False, messages=[], error=error)


class SessionInvalid(BaseModel):
    """The requested session is missing or expired; the user must log in again."""

    session_id: str


class RawFeedback(BaseModel):
    """Feedback element as read from the page, before classification."""

    text: str = ""
    classes: list[str] = Field(default_factory=list)


class ActionAttempt(BaseModel):
    """Record of a single candidate action attempt."""

    candidate: str
    success: bool
    duration_ms: int = Field(ge=0)
    error: Optional[str] = None


class FallbackChain(BaseModel):
    """Ordered candidate actions for one UI step.

    Candidates are tried in order until one succeeds or the list is exhausted.
    """

    label: str
    candidates: list[str]
    current_index: int = 0
    attempts: list[ActionAttempt] = Field(default_factory=list)

    @property
    def current_candidate(self) -> Optional[str]:
        if self.current_index >= len(self.candidates):
            return None
        return self.candidates[self.current_index]

    @property
    def is_exhausted(self) -> bool:
        return self.current_index >= len(self.candidates)

    @property
    def has_succeeded(self) -> bool:
        return any(attempt.success for attempt in self.attempts)

    def advance(self) -> None:
        self.current_index += 1

    def add_attempt(
        self,
        candidate: str,
        success: bool,
        duration_ms: int,
        error: Optional[str] = None,
    ) -> None:
        self.attempts.append(
            ActionAttempt(
                candidate=candidate,
                success=success,
                duration_ms=duration_ms,
                error=error,
            )
        )

    def to_error_dict(self) -> dict:
        return {
            "label": self.label,
            "candidates": self.candidates,
            "attempts": [attempt.model_dump() for attempt in self.attempts],
            "final_index": self.current_index,
            "exhausted": self.is_exhausted,
            "succeeded": self.has_succeeded,
        }
