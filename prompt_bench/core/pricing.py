"""
Pricing calculations and rate management.

Handles cost computations for the models the editor can talk to.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Mapping

from .errors import ConfigurationError
from .ledger import Ledger


class ModelId(str, Enum):
    """Known remote model identifiers."""
    GPT_4_0613 = "gpt-4-0613"
    GPT_35_TURBO_0613 = "gpt-3.5-turbo-0613"


@dataclass(frozen=True)
class ModelPricing:
    """Per-token pricing for a specific model."""
    prompt_cost_per_1k: Decimal  # Cost per 1K prompt tokens
    completion_cost_per_1k: Decimal  # Cost per 1K completion tokens


@dataclass(frozen=True)
class PricingTable:
    """Fixed pricing table for supported models."""
    prices: Dict[str, ModelPricing]

    def get_pricing(self, model: str) -> ModelPricing:
        """Get pricing for a specific model.
        
        Args:
            model: Model identifier
            
        Returns:
            ModelPricing for the model
            
        Raises:
            ConfigurationError: If model is not in the table
        """
        key = model.value if isinstance(model, ModelId) else model
        if key not in self.prices:
            raise ConfigurationError(f"Unsupported model: {key}")
        return self.prices[key]

    def with_overrides(self, overrides: Mapping[str, ModelPricing]) -> "PricingTable":
        """Return a copy of the table with entries added or replaced."""
        prices = dict(self.prices)
        prices.update(overrides)
        return PricingTable(prices)


# Fixed pricing table - no dynamic fetching, no defaults
PRICING_TABLE = PricingTable({
    ModelId.GPT_4_0613.value: ModelPricing(
        prompt_cost_per_1k=Decimal("0.03"),
        completion_cost_per_1k=Decimal("0.06")
    ),
    ModelId.GPT_35_TURBO_0613.value: ModelPricing(
        prompt_cost_per_1k=Decimal("0.0015"),
        completion_cost_per_1k=Decimal("0.002")
    )
})


def estimated_cost(ledger: Ledger, pricing_table: PricingTable = PRICING_TABLE) -> float:
    """Estimate the total cost of every model's usage in a ledger.
    
    Args:
        ledger: Accumulated usage keyed by model identifier
        pricing_table: Rates to apply
        
    Returns:
        Total cost in USD, unrounded
        
    Raises:
        ConfigurationError: If a ledger key has no pricing entry
    """
    total = Decimal("0")
    for model, usage in ledger.items():
        pricing = pricing_table.get_pricing(model)
        
        # (tokens / 1000) * cost_per_1k for each side of the exchange
        completion_cost = (Decimal(usage.completion_tokens) / Decimal("1000")) * pricing.completion_cost_per_1k
        prompt_cost = (Decimal(usage.prompt_tokens) / Decimal("1000")) * pricing.prompt_cost_per_1k
        
        total += completion_cost + prompt_cost
    
    return float(total)
