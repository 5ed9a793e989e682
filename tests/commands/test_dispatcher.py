"""Tests for CommandDispatcher."""

from __future__ import annotations

import pytest

from coffee_chat.core.commands import CommandDispatcher, get_command_spec, iter_command_specs


class TestCommandDispatcher:
    """Command matching rules."""

    @pytest.fixture
    def dispatcher(self):
        return CommandDispatcher()

    @pytest.mark.parametrize("text", ["summary", "Summary", "  SUMMARY  ", "show me my summary", "recent contacts"])
    def test_summary_matches_anywhere(self, dispatcher, text):
        assert dispatcher.match(text).name == "summary"

    @pytest.mark.parametrize("text", ["cancel", "Cancel"])
    def test_cancel_matches_exact_word(self, dispatcher, text):
        assert dispatcher.match(text).handler_id == "session.cancel"

    def test_cancel_inside_sentence_is_not_a_command(self, dispatcher):
        assert dispatcher.match("please cancel that") is None

    def test_help_alias(self, dispatcher):
        assert dispatcher.match("commands").name == "help"

    @pytest.mark.parametrize("text", ["", "   ", "met Sarah at conference", "tomorrow"])
    def test_no_match(self, dispatcher, text):
        assert dispatcher.match(text) is None

    def test_registry_lookup(self):
        assert get_command_spec("Recent Contacts").name == "summary"
        assert [spec.name for spec in iter_command_specs()] == ["summary", "cancel", "help"]
