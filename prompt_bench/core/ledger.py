"""
Usage ledger accumulation.

A ledger maps a model identifier to the tokens consumed on that model.
Ledgers are treated as immutable values: every operation returns a new
mapping and leaves its arguments untouched.
"""

from types import MappingProxyType
from typing import Dict, Mapping

from .token_counter import ModelUsage, ZERO_USAGE

Ledger = Mapping[str, ModelUsage]

EMPTY_LEDGER: Ledger = MappingProxyType({})


def merge(a: Ledger, b: Ledger) -> Dict[str, ModelUsage]:
    """Combine two ledgers by summing usage per model.
    
    Keys present in only one ledger are treated as zero usage in the other.
    The operation is commutative and associative with the empty ledger as
    identity.
    
    Args:
        a: First ledger
        b: Second ledger
        
    Returns:
        New ledger covering the union of both key sets
    """
    merged: Dict[str, ModelUsage] = {}
    for model in list(a) + [key for key in b if key not in a]:
        merged[model] = a.get(model, ZERO_USAGE) + b.get(model, ZERO_USAGE)
    return merged


def usage_delta(model: str, usage: ModelUsage) -> Dict[str, ModelUsage]:
    """Build a one-entry ledger for a single completion call."""
    return {model: usage}


def total_usage(ledger: Ledger) -> ModelUsage:
    """Sum usage across every model in the ledger."""
    total = ZERO_USAGE
    for usage in ledger.values():
        total = total + usage
    return total
