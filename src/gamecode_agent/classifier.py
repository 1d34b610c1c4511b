"""
Result Classifier

Turns feedback elements extracted from the page into typed messages and an
overall verdict.

A multi-player submission page emits one error per player who already
redeemed the code alongside one status message for the player it was
credited to. Any success message therefore makes the whole submission
successful.
"""

from typing import Iterable

from .models import FeedbackMessage, MessageKind, RawFeedback, SubmissionOutcome

ERROR_CLASS = "messages--error"
WARNING_CLASS = "messages--warning"
SUCCESS_CLASS = "messages--status"

# Checked in order; the first class present wins
KIND_PRECEDENCE: tuple[tuple[str, MessageKind], ...] = (
    (ERROR_CLASS, MessageKind.ERROR),
    (WARNING_CLASS, MessageKind.WARNING),
    (SUCCESS_CLASS, MessageKind.SUCCESS),
)


def kind_for_classes(classes: Iterable[str]) -> MessageKind:
    """Derive a message kind from an element's CSS classes."""
    class_set = set(classes)
    for css_class, kind in KIND_PRECEDENCE:
        if css_class in class_set:
            return kind
    return MessageKind.INFO


def extract_messages(elements: Iterable[RawFeedback]) -> list[FeedbackMessage]:
    """Trim, drop blanks and type each element, keeping page order."""
    messages = []
    for element in elements:
        text = element.text.strip()
        if not text:
            continue
        messages.append(FeedbackMessage(text=text, kind=kind_for_classes(element.classes)))
    return messages


def is_overall_success(messages: Iterable[FeedbackMessage]) -> bool:
    return any(message.kind == MessageKind.SUCCESS for message in messages)


def classify(elements: Iterable[RawFeedback]) -> SubmissionOutcome:
    """
    Classify raw feedback elements.

    Args:
        elements: Elements matched by the feedback region selector, in page order

    Returns:
        SubmissionOutcome with every non-blank message, undeduplicated
    """
    messages = extract_messages(elements)
    return SubmissionOutcome(
        overall_success=is_overall_success(messages),
        messages=messages,
    )
