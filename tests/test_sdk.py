"""
Unit tests for SDK layer.

Tests the OpenAI boundary: request shaping, response conversion and
error translation.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest
from openai import OpenAIError

from prompt_bench.core.errors import MalformedResponse, TransportError
from prompt_bench.core.submission import CompletionRequest
from prompt_bench.core.token_counter import ModelUsage
from prompt_bench.sdk.openai_client import OpenAIBoundary


def _mock_response(content="Hi!", function_call=None, model="gpt-4-0613", usage=(10, 5)):
    """Build a chat completion response shaped like the SDK's."""
    message = Mock()
    message.role = "assistant"
    message.content = content
    message.function_call = function_call

    response = Mock()
    response.model = model
    response.choices = [Mock(message=message)]
    if usage is None:
        response.usage = None
    else:
        response.usage.prompt_tokens = usage[0]
        response.usage.completion_tokens = usage[1]
    return response


def _request(functions=()):
    return CompletionRequest(
        target_model="gpt-4-0613",
        messages=[{"role": "system", "content": "You are helpful"}],
        functions=functions
    )


class TestOpenAIBoundary:
    """Test OpenAIBoundary."""

    def _boundary(self, mock_openai_class, response=None, error=None):
        mock_client = Mock()
        mock_client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
        mock_openai_class.return_value = mock_client
        return OpenAIBoundary(), mock_client

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_client_created_lazily(self, mock_openai_class):
        """Test the OpenAI client is only built on first use."""
        boundary = OpenAIBoundary(api_key="sk-test", timeout=30)
        mock_openai_class.assert_not_called()

        boundary.client
        boundary.client

        mock_openai_class.assert_called_once_with(api_key="sk-test", timeout=30)

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_text_response(self, mock_openai_class):
        """Test a text reply is converted to a completion response."""
        boundary, mock_client = self._boundary(mock_openai_class, response=_mock_response())

        result = asyncio.run(boundary.complete(_request()))

        mock_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4-0613",
            messages=[{"role": "system", "content": "You are helpful"}]
        )
        assert result.responding_model == "gpt-4-0613"
        assert result.usage == ModelUsage(prompt_tokens=10, completion_tokens=5)
        assert result.message == {"role": "assistant", "content": "Hi!"}

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_functions_sent_when_present(self, mock_openai_class):
        """Test function definitions are included only when configured."""
        boundary, mock_client = self._boundary(mock_openai_class, response=_mock_response())
        functions = ({"name": "list_errors", "parameters": {"type": "object", "properties": {}}},)

        asyncio.run(boundary.complete(_request(functions=functions)))

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["functions"] == [
            {"name": "list_errors", "parameters": {"type": "object", "properties": {}}}
        ]

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_function_call_response(self, mock_openai_class):
        """Test a function call reply keeps name and arguments."""
        function_call = Mock()
        function_call.name = "list_errors"
        function_call.arguments = "{}"
        boundary, _ = self._boundary(
            mock_openai_class,
            response=_mock_response(content=None, function_call=function_call)
        )

        result = asyncio.run(boundary.complete(_request()))

        assert result.message == {
            "role": "assistant",
            "content": None,
            "function_call": {"name": "list_errors", "arguments": "{}"},
        }

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_missing_usage_counts_as_zero(self, mock_openai_class):
        """Test a response without usage reports zero tokens."""
        boundary, _ = self._boundary(mock_openai_class, response=_mock_response(usage=None))

        result = asyncio.run(boundary.complete(_request()))

        assert result.usage == ModelUsage(0, 0)

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_responding_model_reported(self, mock_openai_class):
        """Test the ledger key is the model that answered, not the one asked for."""
        boundary, _ = self._boundary(
            mock_openai_class,
            response=_mock_response(model="gpt-3.5-turbo-0613")
        )

        result = asyncio.run(boundary.complete(_request()))

        assert result.responding_model == "gpt-3.5-turbo-0613"

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_api_failure_becomes_transport_error(self, mock_openai_class):
        """Test OpenAI failures surface as transport errors."""
        boundary, _ = self._boundary(mock_openai_class, error=OpenAIError("Invalid API key"))

        with pytest.raises(TransportError, match="Invalid API key"):
            asyncio.run(boundary.complete(_request()))

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_client_construction_failure_becomes_transport_error(self, mock_openai_class):
        """Test a missing credential is reported like any other transport failure."""
        mock_openai_class.side_effect = OpenAIError("The api_key client option must be set")
        boundary = OpenAIBoundary()

        with pytest.raises(TransportError, match="api_key"):
            asyncio.run(boundary.complete(_request()))

    @patch('prompt_bench.sdk.openai_client.AsyncOpenAI')
    def test_no_choices_is_malformed(self, mock_openai_class):
        """Test a response without choices is malformed."""
        response = _mock_response()
        response.choices = []
        boundary, _ = self._boundary(mock_openai_class, response=response)

        with pytest.raises(MalformedResponse, match="no message response"):
            asyncio.run(boundary.complete(_request()))
