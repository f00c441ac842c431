"""
Editing session.

The session owns the current conversation and usage ledger. Editing
operations are pure functions from the conversation module; the session
only swaps in their results. A submission works on the snapshot taken when
it starts and, on success, replaces both the conversation and the ledger
with what it derived from that snapshot.
"""

from typing import Iterable, Optional

from .conversation import (
    Conversation,
    EMPTY_USER_ENTRY,
    append,
    conversation,
    delete,
    edit,
    ensure_trailing_user_placeholder,
    has_pending_placeholder,
)
from .entries import Entry, Role, TextEntry, cycle_role, with_content, with_role
from .ledger import EMPTY_LEDGER, Ledger
from .pricing import PRICING_TABLE, PricingTable, estimated_cost
from .submission import SubmissionController, SubmissionResult


def initial_conversation(system_prompt: Optional[str]) -> Conversation:
    """Starting conversation: the system prompt and an empty user turn."""
    if system_prompt is None:
        return conversation([EMPTY_USER_ENTRY])
    return conversation([TextEntry(role=Role.SYSTEM, content=system_prompt), EMPTY_USER_ENTRY])


class Session:
    """Single-author editing session over one conversation."""

    def __init__(
        self,
        controller: SubmissionController,
        entries: Optional[Iterable[Entry]] = None,
        ledger: Optional[Ledger] = None,
        pricing_table: PricingTable = PRICING_TABLE
    ):
        """Initialize the session.

        Args:
            controller: Submission controller used for every exchange
            entries: Starting conversation (defaults to a single empty user turn)
            ledger: Starting usage (defaults to empty)
            pricing_table: Rates used for cost estimation
        """
        self.controller = controller
        self.entries: Conversation = conversation(entries) if entries is not None else initial_conversation(None)
        self.ledger: Ledger = dict(ledger) if ledger is not None else EMPTY_LEDGER
        self.pricing_table = pricing_table
        self.error: Optional[str] = None

    @property
    def waiting(self) -> bool:
        """True while a submission is in flight."""
        return self.controller.in_flight

    def view(self) -> Conversation:
        """Conversation as it should be rendered, with the trailing user box."""
        return ensure_trailing_user_placeholder(self.entries)

    def edit(self, index: int, entry: Entry) -> None:
        self.entries = edit(self.entries, index, entry)

    def delete(self, index: int) -> None:
        self._reject_placeholder(index)
        self.entries = delete(self.entries, index)

    def append(self, entry: Entry) -> None:
        self.entries = append(self.entries, entry)

    def cycle_role(self, index: int) -> None:
        """Advance the role of the entry at ``index`` through the role cycle."""
        entry = self._entry_at(index)
        self.edit(index, with_role(entry, cycle_role(entry.role)))

    def set_content(self, index: int, text: str) -> None:
        """Replace the text of the entry at ``index``.

        The empty user box shown after a reply is filled as the next turn.

        Raises:
            TypeError: If the entry is a function call
        """
        if self._is_placeholder(index):
            self.type_next_turn(text)
            return
        entry = self._entry_at(index)
        if not isinstance(entry, TextEntry):
            raise TypeError("Only text entries have editable content")
        self.edit(index, with_content(entry, text))

    def _is_placeholder(self, index: int) -> bool:
        """Whether ``index`` points at the user box that only exists in ``view()``."""
        return index == len(self.entries) and has_pending_placeholder(self.view())

    def _reject_placeholder(self, index: int) -> None:
        if self._is_placeholder(index):
            raise IndexError(f"entry {index} is the empty user box; type text to fill it first")

    def _entry_at(self, index: int) -> Entry:
        self._reject_placeholder(index)
        if not 0 <= index < len(self.entries):
            raise IndexError(f"entry index {index} out of range for {len(self.entries)} entries")
        return self.entries[index]

    def type_next_turn(self, text: str) -> None:
        """Write into the trailing user box.

        Replaces the content of a trailing user text entry, or starts a new
        user turn when the conversation does not end with one.
        """
        if self.entries:
            last = self.entries[-1]
            if isinstance(last, TextEntry) and last.role is Role.USER:
                self.set_content(len(self.entries) - 1, text)
                return
        if text:
            self.append(TextEntry(role=Role.USER, content=text))

    async def submit(self) -> Optional[SubmissionResult]:
        """Submit the current conversation and adopt the result on success.

        Edits made while the request is pending are overwritten by the
        successful result, which was derived from the earlier snapshot.

        Returns:
            The controller's result, or None if a submission was already in flight
        """
        result = await self.controller.submit(self.entries, self.ledger)
        if result is None:
            return None

        if result.ok:
            self.entries = result.entries
            self.ledger = result.ledger
            self.error = None
        else:
            self.error = result.error
        return result

    def estimated_cost(self) -> float:
        """Estimated cost of everything in the ledger.

        Raises:
            ConfigurationError: If the ledger holds a model without pricing
        """
        return estimated_cost(self.ledger, self.pricing_table)
