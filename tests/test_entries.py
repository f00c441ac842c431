"""
Unit tests for conversation entries.

Tests role cycling, variant preservation and message classification.
"""

import pytest

from prompt_bench.core.entries import (
    CallEntry,
    FunctionCall,
    Role,
    TextEntry,
    cycle_role,
    entry_from_message,
    entry_to_message,
    with_content,
    with_role
)
from prompt_bench.core.errors import MalformedResponse


class TestCycleRole:
    """Test the role editing cycle."""

    def test_cycle_order(self):
        """Verify system -> user -> assistant -> system."""
        assert cycle_role(Role.SYSTEM) == Role.USER
        assert cycle_role(Role.USER) == Role.ASSISTANT
        assert cycle_role(Role.ASSISTANT) == Role.SYSTEM

    def test_three_steps_return_to_system(self):
        """Verify the cycle has length three."""
        role = Role.SYSTEM
        for _ in range(3):
            role = cycle_role(role)
        assert role == Role.SYSTEM

    def test_function_maps_to_user(self):
        """Verify function re-enters the cycle at user."""
        assert cycle_role(Role.FUNCTION) == Role.USER


class TestVariants:
    """Test role and content updates keep the variant."""

    def test_with_role_on_text(self):
        entry = TextEntry(role=Role.USER, content="hola")
        updated = with_role(entry, Role.SYSTEM)
        assert updated == TextEntry(role=Role.SYSTEM, content="hola")

    def test_with_role_on_call_keeps_call(self):
        """Verify switching role never changes the variant."""
        entry = CallEntry(role=Role.ASSISTANT, function_call=FunctionCall("list_errors", "{}"))
        updated = with_role(entry, Role.SYSTEM)

        assert isinstance(updated, CallEntry)
        assert updated.function_call == entry.function_call
        assert updated.role == Role.SYSTEM

    def test_with_content(self):
        entry = TextEntry(role=Role.USER, content="")
        assert with_content(entry, "hi") == TextEntry(role=Role.USER, content="hi")

    def test_with_content_on_call_rejected(self):
        """Verify call entries have no content to edit."""
        entry = CallEntry(role=Role.ASSISTANT, function_call=FunctionCall("f", "{}"))
        with pytest.raises(TypeError, match="Only text entries"):
            with_content(entry, "text")

    def test_call_entry_has_no_content(self):
        entry = CallEntry(role=Role.ASSISTANT, function_call=FunctionCall("f", "{}"))
        assert not hasattr(entry, "content")

    def test_entries_are_immutable(self):
        entry = TextEntry(role=Role.USER, content="hi")
        with pytest.raises(AttributeError):
            entry.content = "changed"


class TestMessageConversion:
    """Test conversion to and from chat messages."""

    def test_text_entry_to_message(self):
        entry = TextEntry(role=Role.USER, content="")
        assert entry_to_message(entry) == {"role": "user", "content": ""}

    def test_call_entry_to_message(self):
        entry = CallEntry(role=Role.ASSISTANT, function_call=FunctionCall("list_errors", "{}"))
        assert entry_to_message(entry) == {
            "role": "assistant",
            "content": None,
            "function_call": {"name": "list_errors", "arguments": "{}"},
        }

    def test_textual_message_gives_text_entry(self):
        entry = entry_from_message({"role": "assistant", "content": "Hi!"})
        assert entry == TextEntry(role=Role.ASSISTANT, content="Hi!")

    def test_function_call_with_empty_content_gives_call_entry(self):
        """Verify an empty content string does not make a text entry."""
        entry = entry_from_message({
            "role": "assistant",
            "content": "",
            "function_call": {"name": "list_errors", "arguments": "{}"},
        })
        assert entry == CallEntry(
            role=Role.ASSISTANT,
            function_call=FunctionCall(name="list_errors", arguments="{}")
        )

    def test_function_call_with_null_content(self):
        entry = entry_from_message({
            "role": "assistant",
            "content": None,
            "function_call": {"name": "lookup", "arguments": "{\"q\": 1}"},
        })
        assert isinstance(entry, CallEntry)
        assert entry.function_call.arguments == "{\"q\": 1}"

    def test_neither_content_nor_call_is_malformed(self):
        with pytest.raises(MalformedResponse):
            entry_from_message({"role": "assistant", "content": None})

    def test_missing_message_is_malformed(self):
        with pytest.raises(MalformedResponse, match="no message response"):
            entry_from_message(None)

    def test_unknown_role_is_malformed(self):
        with pytest.raises(MalformedResponse, match="unknown message role"):
            entry_from_message({"role": "tool", "content": "x"})

    def test_non_mapping_message_is_malformed(self):
        with pytest.raises(MalformedResponse, match="not a mapping"):
            entry_from_message("Hi!")

    def test_non_mapping_function_call_is_malformed(self):
        with pytest.raises(MalformedResponse, match="function_call is not a mapping"):
            entry_from_message({"role": "assistant", "content": None, "function_call": "list_errors"})

    def test_non_text_content_is_malformed(self):
        with pytest.raises(MalformedResponse, match="content is not text"):
            entry_from_message({"role": "assistant", "content": ["Hi!"]})

    def test_non_string_call_arguments_are_malformed(self):
        with pytest.raises(MalformedResponse, match="must be strings"):
            entry_from_message({
                "role": "assistant",
                "function_call": {"name": "list_errors", "arguments": {"q": 1}},
            })
