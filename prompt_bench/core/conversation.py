"""
Conversation sequence operations.

A conversation is an immutable tuple of entries in turn order. Every
operation returns a new tuple; order only changes by append or delete.
"""

from typing import Iterable, Tuple

from .entries import CallEntry, Entry, Role, TextEntry, is_empty_user_text

Conversation = Tuple[Entry, ...]

EMPTY_USER_ENTRY = TextEntry(role=Role.USER, content="")


def conversation(entries: Iterable[Entry] = ()) -> Conversation:
    """Build a conversation from any iterable of entries."""
    return tuple(entries)


def _check_index(entries: Conversation, index: int) -> None:
    if not 0 <= index < len(entries):
        raise IndexError(f"entry index {index} out of range for {len(entries)} entries")


def edit(entries: Conversation, index: int, new_entry: Entry) -> Conversation:
    """Replace the entry at ``index``.
    
    Clearing the trailing user turn removes it instead of leaving an empty
    turn behind. Earlier entries keep an empty replacement in place.
    
    Args:
        entries: Current conversation
        index: Position to replace
        new_entry: Replacement entry
        
    Returns:
        New conversation
        
    Raises:
        IndexError: If index is out of range
        TypeError: If the edit would introduce a function call entry
    """
    _check_index(entries, index)
    
    if isinstance(new_entry, CallEntry):
        # only a role change on an existing call entry is allowed
        current = entries[index]
        if not (isinstance(current, CallEntry) and current.function_call == new_entry.function_call):
            raise TypeError("function call entries can only come from the model")
    
    if index == len(entries) - 1 and is_empty_user_text(new_entry):
        return entries[:index]
    
    return entries[:index] + (new_entry,) + entries[index + 1:]


def delete(entries: Conversation, index: int) -> Conversation:
    """Remove the entry at ``index`` unconditionally."""
    _check_index(entries, index)
    return entries[:index] + entries[index + 1:]


def append(entries: Conversation, entry: Entry) -> Conversation:
    """Add an entry at the end of the conversation."""
    return entries + (entry,)


def ensure_trailing_user_placeholder(entries: Conversation) -> Conversation:
    """Give the author an empty user box after an assistant turn.
    
    Applying this twice is the same as applying it once, since the
    appended placeholder is not an assistant entry.
    """
    if entries and entries[-1].role is Role.ASSISTANT:
        return append(entries, EMPTY_USER_ENTRY)
    return entries


def has_pending_placeholder(entries: Conversation) -> bool:
    """Whether the conversation ends with an empty user text turn."""
    return bool(entries) and is_empty_user_text(entries[-1])
