"""Completion capability consulted for mapping suggestions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import dspy

from fieldmapper.config import get_config
from fieldmapper.exceptions import OracleError
from fieldmapper.llms.llm import get_llm_for_agent


@dataclass(frozen=True)
class OracleOptions:
    """Sampling options for a single completion"""

    temperature: float = 0.3
    max_output_tokens: int = 1000
    force_json_output: bool = True

    @classmethod
    def from_config(cls) -> "OracleOptions":
        oracle_config = get_config().oracle
        return cls(
            temperature=oracle_config.temperature,
            max_output_tokens=oracle_config.max_output_tokens,
            force_json_output=oracle_config.force_json_output,
        )


class BaseOracle(ABC):

    @abstractmethod
    def complete(self, system_instruction: str, user_prompt: str, options: OracleOptions) -> str:
        """Return raw completion text, expected to be a JSON document."""
        pass


class DSPyOracle(BaseOracle):
    """Oracle backed by a DSPy language model (OpenAI / Anthropic through LiteLLM)."""

    def __init__(self, lm: Optional[dspy.LM] = None, request_timeout: Optional[float] = None):
        """
        Args:
            lm: DSPy language model (if None, uses config for the field mapping agent)
            request_timeout: Transport timeout in seconds handed to the provider client
        """
        if lm is None:
            lm = get_llm_for_agent("field_mapping")
        self.lm = lm
        self.request_timeout = request_timeout

    def complete(self, system_instruction: str, user_prompt: str, options: OracleOptions) -> str:
        messages = [
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": user_prompt},
        ]
        kwargs = {
            "temperature": options.temperature,
            "max_tokens": options.max_output_tokens,
        }
        if options.force_json_output:
            kwargs["response_format"] = {"type": "json_object"}
        if self.request_timeout:
            kwargs["timeout"] = self.request_timeout

        outputs = self.lm(messages=messages, **kwargs)
        if not outputs:
            raise OracleError("Language model returned no completions", reason=OracleError.MALFORMED)

        # Newer DSPy versions return dicts when extra output (logprobs, tool calls) is present
        first = outputs[0]
        if isinstance(first, dict):
            first = first.get("text") or ""
        return first
