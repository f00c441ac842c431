"""
Configuration management and loading.

Handles the editor settings: target model, starting system prompt,
function definitions and pricing overrides.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..core.errors import ConfigurationError
from ..core.pricing import PRICING_TABLE, ModelId, ModelPricing, PricingTable


DEFAULT_SYSTEM_PROMPT = (
    "You are an expert in how native Spanish speakers talk.\n"
    "You are helping the user create flashcards.\n"
    "Sometimes the user has trouble expressing in Spanish some concept or meaning.\n"
    "He will type the concept or meaning in English and you will invent flashcards\n"
    "with a concept or meaning in english on the front (text only)\n"
    "and how he should learn to express the concept or meaning in spanish on the back.\n"
    "Sometimes the user's request will contain sufficient context. If so, you may prepend "
    "or append some invented context to the front of the card.\n"
    "The user may ask for more information.\n"
)


@dataclass(frozen=True)
class EditorConfig:
    """Complete editor configuration."""
    target_model: str
    system_prompt: Optional[str] = None
    functions: Tuple[Mapping[str, Any], ...] = ()
    pricing: Dict[str, ModelPricing] = field(default_factory=dict)

    def __post_init__(self):
        """Validate the target model is priced."""
        self.pricing_table().get_pricing(self.target_model)

    def pricing_table(self) -> PricingTable:
        """Built-in pricing with this configuration's overrides applied."""
        return PRICING_TABLE.with_overrides(self.pricing)


DEFAULT_CONFIG = EditorConfig(
    target_model=ModelId.GPT_4_0613.value,
    system_prompt=DEFAULT_SYSTEM_PROMPT
)


def load_editor_config(path: str) -> EditorConfig:
    """Load and validate editor configuration from a YAML file.

    Unknown keys are rejected so a typo cannot silently fall back to a
    default model or price.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated EditorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ConfigurationError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Editor config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ConfigurationError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration must be a dictionary")

    allowed_top_keys = {'target_model', 'system_prompt', 'functions', 'pricing'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown configuration keys: {unknown_keys}")

    if 'target_model' not in raw_config:
        raise ConfigurationError("Missing required 'target_model'")
    target_model = raw_config['target_model']
    if not isinstance(target_model, str) or not target_model.strip():
        raise ConfigurationError("'target_model' must be a non-empty string")

    system_prompt = raw_config.get('system_prompt')
    if system_prompt is not None and not isinstance(system_prompt, str):
        raise ConfigurationError("'system_prompt' must be a string")

    functions_data = raw_config.get('functions') or []
    if not isinstance(functions_data, list):
        raise ConfigurationError("'functions' must be a list")
    functions = tuple(
        _parse_function(function_data, f"functions[{i}]")
        for i, function_data in enumerate(functions_data)
    )

    pricing_data = raw_config.get('pricing') or {}
    if not isinstance(pricing_data, dict):
        raise ConfigurationError("'pricing' must be a dictionary")
    pricing = {
        str(model): _parse_pricing(model_data, f"pricing.{model}")
        for model, model_data in pricing_data.items()
    }

    return EditorConfig(
        target_model=target_model,
        system_prompt=system_prompt,
        functions=functions,
        pricing=pricing
    )


def _parse_function(data: Any, path: str) -> Dict[str, Any]:
    """Validate one function definition.

    Only the fields the chat completions API reads are accepted.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must be a dictionary")

    allowed_keys = {'name', 'description', 'parameters'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown keys in {path}: {unknown_keys}")

    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"Missing required 'name' in {path}")

    if 'parameters' in data and not isinstance(data['parameters'], dict):
        raise ConfigurationError(f"'parameters' in {path} must be a dictionary")

    return dict(data)


def _parse_pricing(data: Any, path: str) -> ModelPricing:
    """Parse and validate per-1k pricing for one model.

    Args:
        data: Pricing data with 'prompt' and 'completion' rates
        path: Path for error messages

    Returns:
        Validated ModelPricing

    Raises:
        ConfigurationError: If pricing is invalid
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must be a dictionary")

    allowed_keys = {'prompt', 'completion'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown keys in {path}: {unknown_keys}")

    rates = {}
    for key in ('prompt', 'completion'):
        if key not in data:
            raise ConfigurationError(f"Missing required '{key}' in {path}")
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ConfigurationError(f"'{key}' in {path} must be a number")
        try:
            rate = Decimal(str(value))
        except InvalidOperation:
            raise ConfigurationError(f"'{key}' in {path} must be a number")
        if not rate.is_finite():
            raise ConfigurationError(f"'{key}' in {path} must be a number")
        if rate < 0:
            raise ConfigurationError(f"'{key}' in {path} must be >= 0")
        rates[key] = rate

    return ModelPricing(
        prompt_cost_per_1k=rates['prompt'],
        completion_cost_per_1k=rates['completion']
    )
