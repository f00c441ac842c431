"""
SDK for Prompt Bench.

Provides the OpenAI-backed model boundary used by the submission controller.
"""

from .openai_client import OpenAIBoundary

__all__ = ["OpenAIBoundary"]
