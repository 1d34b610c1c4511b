"""
Unit tests for feedback classification.

Covers:
- Kind precedence (error > warning > status > info)
- Trimming and blank removal without deduplication
- The "any success wins" verdict
"""

import pytest

from gamecode_agent.classifier import classify, kind_for_classes
from gamecode_agent.models import FeedbackMessage, MessageKind, RawFeedback


def raw(text: str, *classes: str) -> RawFeedback:
    return RawFeedback(text=text, classes=["messages", *classes])


class TestKindForClasses:
    """CSS class to kind mapping."""

    @pytest.mark.parametrize(
        "classes, expected",
        [
            (["messages", "messages--error"], MessageKind.ERROR),
            (["messages", "messages--warning"], MessageKind.WARNING),
            (["messages", "messages--status"], MessageKind.SUCCESS),
            (["messages"], MessageKind.INFO),
            ([], MessageKind.INFO),
        ],
    )
    def test_single_class(self, classes, expected):
        assert kind_for_classes(classes) == expected

    def test_error_beats_status(self):
        assert kind_for_classes(["messages--status", "messages--error"]) == MessageKind.ERROR

    def test_warning_beats_status(self):
        assert kind_for_classes(["messages--status", "messages--warning"]) == MessageKind.WARNING

    def test_class_prefix_is_not_a_match(self):
        assert kind_for_classes(["messages--errors-list"]) == MessageKind.INFO


class TestClassify:
    """Overall verdict and message list."""

    def test_error_and_success_is_success(self):
        outcome = classify([
            raw("Player Bob already redeemed this code", "messages--error"),
            raw("Player Alice earned 100 points", "messages--status"),
        ])

        assert outcome.overall_success is True
        assert [m.kind for m in outcome.messages] == [MessageKind.ERROR, MessageKind.SUCCESS]

    def test_error_and_warning_is_failure(self):
        outcome = classify([
            raw("Invalid code", "messages--error"),
            raw("Check the spelling", "messages--warning"),
        ])

        assert outcome.overall_success is False
        assert len(outcome.messages) == 2

    def test_no_messages_is_failure(self):
        outcome = classify([])

        assert outcome.overall_success is False
        assert outcome.messages == []

    def test_text_is_trimmed_and_blanks_dropped(self):
        outcome = classify([
            raw("  \n  ", "messages--status"),
            raw("\n   Code accepted   \n", "messages--status"),
        ])

        assert outcome.messages == [FeedbackMessage(text="Code accepted", kind=MessageKind.SUCCESS)]

    def test_blank_success_does_not_count(self):
        outcome = classify([raw("   ", "messages--status"), raw("Nope", "messages--error")])

        assert outcome.overall_success is False

    def test_duplicates_kept_in_page_order(self):
        outcome = classify([
            raw("Already redeemed", "messages--error"),
            raw("Info line"),
            raw("Already redeemed", "messages--error"),
        ])

        assert [m.text for m in outcome.messages] == ["Already redeemed", "Info line", "Already redeemed"]
        assert [m.kind for m in outcome.messages] == [
            MessageKind.ERROR,
            MessageKind.INFO,
            MessageKind.ERROR,
        ]

    def test_messages_serialize_with_type_key(self):
        outcome = classify([raw("Code accepted", "messages--status")])

        assert outcome.messages[0].to_json_dict() == {"text": "Code accepted", "type": "success"}
