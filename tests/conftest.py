"""Shared fixtures for field mapping tests."""

import json
import threading
from typing import Callable, List, Optional, Union

import pytest

from fieldmapper.agents.field_mapping import FieldMappingAgent, MappingRequester
from fieldmapper.llms.oracle import BaseOracle, OracleOptions


class ScriptedOracle(BaseOracle):
    """Oracle returning canned responses and recording every call."""

    def __init__(self, response: Union[str, Exception, Callable[[str, str], str]] = '{"mappings": []}',
                 block: Optional[threading.Event] = None):
        self.response = response
        self.block = block
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def complete(self, system_instruction: str, user_prompt: str, options: OracleOptions) -> str:
        with self._lock:
            self.calls.append({
                "system_instruction": system_instruction,
                "user_prompt": user_prompt,
                "options": options,
            })
        if self.block is not None:
            self.block.wait(timeout=5)
        if isinstance(self.response, Exception):
            raise self.response
        if callable(self.response):
            return self.response(system_instruction, user_prompt)
        return self.response


def mappings_json(*entries) -> str:
    return json.dumps({"mappings": [
        {"targetField": target, "direct": direct, "formula": formula}
        for target, direct, formula in entries
    ]})


@pytest.fixture
def options():
    return OracleOptions(temperature=0.3, max_output_tokens=1000, force_json_output=True)


@pytest.fixture
def oracle():
    return ScriptedOracle()


@pytest.fixture
def requester(oracle, options):
    return MappingRequester(oracle, options=options)


@pytest.fixture
def make_agent(options):
    def _make(oracle, target_fields=("product_id", "is_available"), hints=None, timeout=5.0):
        return FieldMappingAgent(
            target_fields=target_fields,
            oracle=oracle,
            hints=hints,
            options=options,
            timeout=timeout,
            enable_tracing=False,
        )
    return _make
