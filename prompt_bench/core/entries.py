"""
Conversation entries.

An entry is one turn of the conversation. It is either free text or a
structured function call returned by the model, never both. The two
variants are separate frozen types so a text entry cannot carry a call
and a call entry has no content to edit.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import MalformedResponse


class Role(Enum):
    """Who speaks an entry."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


# function re-enters the cycle at user instead of completing it
_NEXT_ROLE = {
    Role.SYSTEM: Role.USER,
    Role.USER: Role.ASSISTANT,
    Role.ASSISTANT: Role.SYSTEM,
    Role.FUNCTION: Role.USER,
}


@dataclass(frozen=True)
class FunctionCall:
    """A structured call requested by the model."""
    name: str
    arguments: str


@dataclass(frozen=True)
class TextEntry:
    """A free-text turn. Content may be empty."""
    role: Role
    content: str


@dataclass(frozen=True)
class CallEntry:
    """A structured function call turn produced by the model boundary."""
    role: Role
    function_call: FunctionCall


Entry = Union[TextEntry, CallEntry]


def cycle_role(role: Role) -> Role:
    """Return the role that follows ``role`` in the editing cycle."""
    return _NEXT_ROLE[role]


def with_role(entry: Entry, role: Role) -> Entry:
    """Return the same kind of entry with its role replaced."""
    if isinstance(entry, (TextEntry, CallEntry)):
        return replace(entry, role=role)
    raise TypeError(f"Not a conversation entry: {entry!r}")


def with_content(entry: TextEntry, text: str) -> TextEntry:
    """Return a text entry with new content.
    
    Raises:
        TypeError: If called with a call entry, which has no content
    """
    if not isinstance(entry, TextEntry):
        raise TypeError("Only text entries have editable content")
    return replace(entry, content=text)


def is_empty_user_text(entry: Entry) -> bool:
    """Whether the entry is an empty user text turn (the placeholder shape)."""
    return isinstance(entry, TextEntry) and entry.role is Role.USER and entry.content == ""


def entry_to_message(entry: Entry) -> Dict[str, Any]:
    """Convert an entry to the chat message shape sent to the model."""
    if isinstance(entry, TextEntry):
        return {"role": entry.role.value, "content": entry.content}
    if isinstance(entry, CallEntry):
        return {
            "role": entry.role.value,
            "content": None,
            "function_call": {
                "name": entry.function_call.name,
                "arguments": entry.function_call.arguments,
            },
        }
    raise TypeError(f"Not a conversation entry: {entry!r}")


def entry_from_message(message: Optional[Mapping[str, Any]]) -> Entry:
    """Classify a message returned by the model into an entry.
    
    Non-empty textual content gives a text entry. Otherwise a function call
    gives a call entry. Anything else is malformed.
    
    Args:
        message: Mapping with ``role`` and ``content`` and/or ``function_call``
        
    Returns:
        TextEntry or CallEntry
        
    Raises:
        MalformedResponse: If the message is missing or not a mapping, has an
            unknown role or a badly shaped field, or carries neither content
            nor a function call
    """
    if not message:
        raise MalformedResponse("no message response")
    if not isinstance(message, Mapping):
        raise MalformedResponse(f"message is not a mapping: {type(message).__name__}")
    
    try:
        role = Role(message.get("role"))
    except ValueError:
        raise MalformedResponse(f"unknown message role: {message.get('role')!r}")
    
    content = message.get("content")
    if content:
        if not isinstance(content, str):
            raise MalformedResponse(f"message content is not text: {type(content).__name__}")
        return TextEntry(role=role, content=content)

    function_call = message.get("function_call")
    if function_call:
        if not isinstance(function_call, Mapping):
            raise MalformedResponse(f"function_call is not a mapping: {function_call!r}")
        name = function_call.get("name") or ""
        arguments = function_call.get("arguments") or ""
        if not isinstance(name, str) or not isinstance(arguments, str):
            raise MalformedResponse("function_call name and arguments must be strings")
        return CallEntry(
            role=role,
            function_call=FunctionCall(name=name, arguments=arguments),
        )
    
    raise MalformedResponse("message has neither content nor a function call")
