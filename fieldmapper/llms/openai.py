"""OpenAI LLM provider implementation."""

import os
import dspy
from fieldmapper.config import get_config


def create_openai_lm() -> dspy.LM:
    """
    Create DSPy LM instance for OpenAI or OpenRouter.

    Sampling settings (temperature, max tokens, JSON mode) are sent per call
    by the oracle, so only connection settings are fixed here.

    Returns:
        Configured dspy.LM instance for OpenAI/OpenRouter
    """
    config = get_config()

    model = config.openai.model
    api_key = config.openai.api_key

    # Auto-detect OpenRouter keys (they start with "sk-or-")
    is_openrouter = api_key and api_key.startswith("sk-or-")

    if is_openrouter:
        # LiteLLM reads the OpenRouter key from the environment
        os.environ["OPENROUTER_API_KEY"] = api_key

        if not model.startswith("openrouter/"):
            model = f"openrouter/openai/{model}"

    lm_kwargs = {
        "model": model,
        "api_key": api_key,
        "temperature": config.oracle.temperature,
        "max_tokens": config.oracle.max_output_tokens,
        # No response cache: a retried request must reach the provider again
        "cache": False,
    }

    if config.openai.base_url:
        lm_kwargs["api_base"] = config.openai.base_url

    return dspy.LM(**lm_kwargs)
