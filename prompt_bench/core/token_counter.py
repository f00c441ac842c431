"""
Token counting and usage tracking.

Holds the per-model token counts reported by the model boundary.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelUsage:
    """Token usage for a single model.
    
    Contains exact token counts as reported by the remote service.
    """
    prompt_tokens: int = 0
    completion_tokens: int = 0
    
    def __post_init__(self):
        """Validate token counts are non-negative."""
        if self.prompt_tokens < 0:
            raise ValueError("prompt_tokens must be >= 0")
        if self.completion_tokens < 0:
            raise ValueError("completion_tokens must be >= 0")
    
    @property
    def total_tokens(self) -> int:
        """Total tokens used (prompt + completion)."""
        return self.prompt_tokens + self.completion_tokens
    
    def __add__(self, other: "ModelUsage") -> "ModelUsage":
        if not isinstance(other, ModelUsage):
            return NotImplemented
        return ModelUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens
        )


ZERO_USAGE = ModelUsage()
