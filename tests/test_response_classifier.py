"""Tests for ResponseClassifier."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from coffee_chat.core.conversation import ResponseClassifier
from coffee_chat.core.models import DirectiveKind

# Wednesday.
NOW = datetime(2026, 10, 14, 10, 30, tzinfo=timezone.utc)


class TestResponseClassifier:
    """Classification of scheduling replies."""

    @pytest.fixture
    def classifier(self):
        return ResponseClassifier(clock=lambda: NOW)

    @pytest.mark.parametrize("text", ["now", "Send it", "IMMEDIATELY please", "  now  "])
    def test_now_keywords(self, classifier, text):
        assert classifier.classify(text).kind is DirectiveKind.NOW

    @pytest.mark.parametrize("text", ["tomorrow", "Tomorrow morning", "in the morning"])
    def test_tomorrow_keywords(self, classifier, text):
        assert classifier.classify(text).kind is DirectiveKind.TOMORROW

    @pytest.mark.parametrize("text", ["no", "never", "No thanks"])
    def test_no_reminder_keywords(self, classifier, text):
        assert classifier.classify(text).kind is DirectiveKind.NO_REMINDER

    def test_precedence_now_beats_tomorrow(self, classifier):
        """Rule order decides overlapping replies."""
        assert classifier.classify("now or tomorrow").kind is DirectiveKind.NOW

    def test_precedence_tomorrow_beats_relative(self, classifier):
        assert classifier.classify("tomorrow, in 2 hours").kind is DirectiveKind.TOMORROW

    def test_substring_matching_is_literal(self, classifier):
        """'know' contains 'no' and 'now'; the first rule wins."""
        assert classifier.classify("I know").kind is DirectiveKind.NOW

    @pytest.mark.parametrize(
        "text,delta",
        [
            ("in 5 minutes", timedelta(minutes=5)),
            ("in 1 minute", timedelta(minutes=1)),
            ("in 2 hours", timedelta(hours=2)),
            ("in 3 days", timedelta(days=3)),
            ("in 10 min", timedelta(minutes=10)),
        ],
    )
    def test_relative_times(self, classifier, text, delta):
        directive = classifier.classify(text)

        assert directive.kind is DirectiveKind.CUSTOM_AT
        assert directive.at == NOW + delta

    def test_weekday_later_this_week(self, classifier):
        directive = classifier.classify("Friday")

        assert directive.kind is DirectiveKind.CUSTOM_AT
        assert directive.at == datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)

    def test_weekday_earlier_in_week_rolls_forward(self, classifier):
        directive = classifier.classify("monday")

        assert directive.at == datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    def test_same_weekday_is_next_week(self, classifier):
        """Naming today's weekday never schedules for today."""
        directive = classifier.classify("wednesday")

        assert directive.at == datetime(2026, 10, 21, 9, 0, tzinfo=timezone.utc)

    def test_explicit_reference_time_overrides_clock(self, classifier):
        reference = NOW + timedelta(days=1)

        directive = classifier.classify("in 1 hour", now=reference)

        assert directive.at == reference + timedelta(hours=1)

    @pytest.mark.parametrize("text", ["blah", "", "maybe later", "in a while"])
    def test_unrecognized_is_invalid(self, classifier, text):
        assert classifier.classify(text).kind is DirectiveKind.INVALID
        assert classifier.is_recognized(text) is False

    def test_is_recognized_for_valid_reply(self, classifier):
        assert classifier.is_recognized("in 5 minutes") is True

    def test_classify_is_deterministic(self, classifier):
        assert classifier.classify("Friday") == classifier.classify("Friday")
