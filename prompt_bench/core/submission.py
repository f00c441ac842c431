"""
Submission controller.

Runs one exchange with the model boundary: sends the current conversation,
merges the returned usage into the ledger and appends the returned entry.
Only one submission may be in flight per controller; failures leave the
conversation and ledger untouched and are recorded as display strings.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from .conversation import Conversation, append
from .entries import entry_from_message, entry_to_message
from .errors import MalformedResponse, SubmissionError, TransportError
from .ledger import Ledger, merge, usage_delta
from .pricing import ModelId
from .token_counter import ModelUsage, ZERO_USAGE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    """What the model boundary is asked to complete."""
    target_model: str
    messages: List[Dict[str, Any]]
    functions: Tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True)
class CompletionResponse:
    """What the model boundary returns for one request."""
    responding_model: str
    message: Optional[Mapping[str, Any]]
    usage: Optional[ModelUsage] = None


class ModelBoundary(Protocol):
    """Remote completion service seen as a single async call."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        ...


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of one submission.
    
    On failure ``entries`` and ``ledger`` are the objects that were passed in
    and ``error`` holds the display string.
    """
    entries: Conversation
    ledger: Ledger
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def error_to_string(error: BaseException) -> str:
    """Human-readable form of an error for display."""
    return str(error) or type(error).__name__


@dataclass
class SubmissionController:
    """Sends conversations to the model boundary one at a time."""
    boundary: ModelBoundary
    target_model: str = ModelId.GPT_4_0613.value
    functions: Tuple[Mapping[str, Any], ...] = ()
    in_flight: bool = field(default=False, init=False)
    last_error: Optional[str] = field(default=None, init=False)

    async def submit(self, entries: Conversation, ledger: Ledger) -> Optional[SubmissionResult]:
        """Run one exchange with the model boundary.
        
        Args:
            entries: Conversation as authored, sent in full
            ledger: Usage accumulated so far
            
        Returns:
            SubmissionResult with the new conversation and ledger, or with the
            unchanged inputs and an error string. None if another submission
            is already in flight.
        """
        if self.in_flight:
            logger.warning("Submission rejected: another request is in flight")
            return None
        
        self.in_flight = True
        try:
            next_entries, next_ledger = await self._exchange(entries, ledger)
        except SubmissionError as e:
            message = error_to_string(e)
            logger.error(f"Submission failed: {type(e).__name__}: {message}")
            self.last_error = message
            return SubmissionResult(entries=entries, ledger=ledger, error=message)
        finally:
            self.in_flight = False
        
        self.last_error = None
        return SubmissionResult(entries=next_entries, ledger=next_ledger)

    async def _exchange(self, entries: Conversation, ledger: Ledger) -> Tuple[Conversation, Ledger]:
        request = CompletionRequest(
            target_model=self.target_model,
            messages=[entry_to_message(entry) for entry in entries],
            functions=tuple(self.functions),
        )
        logger.info(f"Submitting {len(request.messages)} messages to {self.target_model}")
        
        try:
            response = await self.boundary.complete(request)
        except SubmissionError:
            raise
        except Exception as e:
            raise TransportError(error_to_string(e)) from e
        
        if response is None:
            raise MalformedResponse("no response from model boundary")
        
        usage = response.usage or ZERO_USAGE
        entry = entry_from_message(response.message)
        logger.info(
            f"Response from {response.responding_model}: "
            f"{usage.prompt_tokens} prompt / {usage.completion_tokens} completion tokens"
        )
        
        delta = usage_delta(response.responding_model, usage)
        return append(entries, entry), merge(ledger, delta)
