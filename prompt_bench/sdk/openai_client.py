"""
OpenAI model boundary.

Turns a completion request into one chat completions call and the reply
into a completion response. No retries: any failure is reported once.
"""

import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from ..core.errors import MalformedResponse, TransportError
from ..core.submission import CompletionRequest, CompletionResponse
from ..core.token_counter import ModelUsage

logger = logging.getLogger(__name__)


class OpenAIBoundary:
    """Chat completions client seen as the model boundary.
    
    The API key is read by the OpenAI client itself (``OPENAI_API_KEY``)
    unless one is passed explicitly; it is never inspected here.
    """
    
    def __init__(self, api_key: Optional[str] = None, **client_kwargs: Any):
        """Initialize the boundary.
        
        Args:
            api_key: Explicit API key (optional)
            **client_kwargs: Additional AsyncOpenAI parameters such as timeout
        """
        self._api_key = api_key
        self._client_kwargs = client_kwargs
        self._client: Optional[AsyncOpenAI] = None
    
    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            try:
                self._client = AsyncOpenAI(api_key=self._api_key, **self._client_kwargs)
            except OpenAIError as e:
                raise TransportError(str(e)) from e
        return self._client
    
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Create one chat completion for the request.
        
        Args:
            request: Target model, messages and optional function definitions
            
        Returns:
            CompletionResponse with the responding model, usage and message
            
        Raises:
            TransportError: If the API call fails
            MalformedResponse: If the response has no choices
        """
        params: Dict[str, Any] = {
            "model": request.target_model,
            "messages": request.messages,
        }
        if request.functions:
            params["functions"] = [dict(function) for function in request.functions]
        
        logger.info(f"[OpenAI] chat completion - model={request.target_model}, messages={len(request.messages)}")
        
        try:
            response = await self.client.chat.completions.create(**params)
        except OpenAIError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e
        
        if not response.choices:
            logger.debug(f"[OpenAI] response without choices: {response!r}")
            raise MalformedResponse("no message response")
        
        usage = response.usage
        token_usage = ModelUsage(
            prompt_tokens=(usage.prompt_tokens or 0) if usage else 0,
            completion_tokens=(usage.completion_tokens or 0) if usage else 0
        )
        
        return CompletionResponse(
            responding_model=response.model or request.target_model,
            message=_message_to_dict(response.choices[0].message),
            usage=token_usage
        )


def _message_to_dict(message: Any) -> Optional[Dict[str, Any]]:
    """Reduce an SDK message object to role, content and function call."""
    if message is None:
        return None
    
    result: Dict[str, Any] = {
        "role": message.role,
        "content": message.content,
    }
    function_call = getattr(message, "function_call", None)
    if function_call is not None:
        result["function_call"] = {
            "name": function_call.name,
            "arguments": function_call.arguments,
        }
    return result
