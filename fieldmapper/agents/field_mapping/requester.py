"""Builds mapping requests and obtains raw suggestions from the oracle."""

import json
import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, List, Optional, Sequence, Tuple, Union

from fieldmapper.agents.field_mapping.model import MappingSuggestion, RequestPayload
from fieldmapper.agents.field_mapping.prompts import SYSTEM_INSTRUCTION, build_user_prompt
from fieldmapper.agents.field_mapping.validation import (
    validate_supplier_fields,
    validate_target_fields,
)
from fieldmapper.exceptions import OracleError
from fieldmapper.llms.oracle import BaseOracle, OracleOptions

logger = logging.getLogger(__name__)

# How often a pending call checks its cancellation token
CANCEL_POLL_INTERVAL = 0.1

# Keys accepted for the target field name of a suggestion entry
TARGET_FIELD_KEYS = ("targetField", "zoroField")

OPENING_FENCE = re.compile(r"^```[\w-]*")
CLOSING_FENCE = re.compile(r"```$")


def normalize_hints(extra_instructions: Union[str, Sequence[str], None]) -> Tuple[str, ...]:
    if extra_instructions is None:
        return ()
    if isinstance(extra_instructions, str):
        extra_instructions = [extra_instructions]
    return tuple(hint.strip() for hint in extra_instructions if hint and hint.strip())


def _strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        # Opening fence with optional language tag, closing fence if present
        cleaned = OPENING_FENCE.sub("", cleaned, count=1)
        cleaned = CLOSING_FENCE.sub("", cleaned, count=1).strip()
    return cleaned


def _optional_text(entry: dict, key: str, raw: str) -> Optional[str]:
    value = entry.get(key)
    if value is None or isinstance(value, str):
        return value
    raise OracleError(
        f"Suggestion field '{key}' must be a string, got {type(value).__name__}",
        reason=OracleError.MALFORMED,
        raw_response=raw,
    )


def parse_suggestions(raw: Any) -> List[MappingSuggestion]:
    """
    Parse oracle output into suggestions.

    Expects a JSON object ``{"mappings": [{"targetField", "direct", "formula"}, ...]}``,
    optionally wrapped in Markdown code fences.

    Raises:
        OracleError: If the text is not a document of that shape
    """
    if not isinstance(raw, str) or not raw.strip():
        raise OracleError("Oracle returned an empty response", reason=OracleError.MALFORMED)

    try:
        document = json.loads(_strip_code_fences(raw))
    except json.JSONDecodeError as e:
        raise OracleError(
            f"Oracle response is not valid JSON: {e}",
            reason=OracleError.MALFORMED,
            raw_response=raw,
        ) from e

    if not isinstance(document, dict) or not isinstance(document.get("mappings"), list):
        raise OracleError(
            "Oracle response must be a JSON object with a 'mappings' array",
            reason=OracleError.MALFORMED,
            raw_response=raw,
        )

    suggestions = []
    for position, entry in enumerate(document["mappings"]):
        if not isinstance(entry, dict):
            raise OracleError(
                f"Mapping entry {position} is not an object",
                reason=OracleError.MALFORMED,
                raw_response=raw,
            )
        target = next((entry[key] for key in TARGET_FIELD_KEYS if key in entry), None)
        if not isinstance(target, str) or not target:
            raise OracleError(
                f"Mapping entry {position} has no target field name",
                reason=OracleError.MALFORMED,
                raw_response=raw,
            )
        suggestions.append(MappingSuggestion(
            target_field=target,
            direct=_optional_text(entry, "direct", raw),
            formula=_optional_text(entry, "formula", raw),
        ))
    return suggestions


class MappingRequester:
    """Turns two field lists into a request and asks the oracle for suggestions"""

    def __init__(
        self,
        oracle: BaseOracle,
        options: Optional[OracleOptions] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            oracle: Completion capability to consult
            options: Sampling options (defaults from config)
            timeout: Default seconds to wait for a suggestion (None waits indefinitely)
        """
        self.oracle = oracle
        self.options = options or OracleOptions.from_config()
        self.timeout = timeout

    def build_request(
        self,
        target_fields: Sequence[str],
        supplier_fields: Sequence[str],
        extra_instructions: Union[str, Sequence[str], None] = None,
    ) -> RequestPayload:
        """
        Build the prompt pair for one supplier.

        Args:
            target_fields: Target schema field names (non-empty, unique)
            supplier_fields: Supplier field names (may be empty)
            extra_instructions: Business-rule hint, or list of hints, appended verbatim

        Raises:
            SchemaError: If either field list is invalid
        """
        targets = validate_target_fields(target_fields)
        suppliers = validate_supplier_fields(supplier_fields)
        hints = normalize_hints(extra_instructions)

        if not suppliers:
            logger.warning("Building mapping request with no supplier fields; all targets will likely be unmapped")

        return RequestPayload(
            system_instruction=SYSTEM_INSTRUCTION,
            user_prompt=build_user_prompt(targets, suppliers, hints),
            target_fields=targets,
            supplier_fields=suppliers,
            hints=hints,
        )

    def request_suggestions(
        self,
        payload: RequestPayload,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[MappingSuggestion]:
        """
        Ask the oracle for suggestions. Makes exactly one oracle call and never retries.

        Args:
            payload: Request from build_request()
            timeout: Seconds to wait (overrides the requester default)
            cancel_event: Set by the caller to abandon the request

        Raises:
            OracleError: On transport failure, timeout, cancellation or malformed output
        """
        timeout = self.timeout if timeout is None else timeout

        try:
            raw = self._call_oracle(payload, timeout, cancel_event)
        except OracleError:
            raise
        except Exception as e:
            logger.error(f"Oracle call failed: {e}")
            raise OracleError(f"Oracle call failed: {e}", reason=OracleError.TRANSPORT) from e

        suggestions = parse_suggestions(raw)
        logger.debug(f"Oracle returned {len(suggestions)} suggestions for {len(payload.target_fields)} target fields")
        return suggestions

    def _call_oracle(
        self,
        payload: RequestPayload,
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> str:
        if cancel_event is not None and cancel_event.is_set():
            raise OracleError("Mapping request cancelled before dispatch", reason=OracleError.CANCELLED)

        deadline = None if timeout is None else time.monotonic() + timeout
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oracle")
        try:
            future = executor.submit(
                self.oracle.complete,
                payload.system_instruction,
                payload.user_prompt,
                self.options,
            )
            while True:
                wait_for = CANCEL_POLL_INTERVAL if cancel_event is not None else None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    wait_for = remaining if wait_for is None else min(wait_for, remaining)

                done, _ = wait([future], timeout=max(wait_for, 0) if wait_for is not None else None)

                if cancel_event is not None and cancel_event.is_set():
                    future.cancel()
                    raise OracleError("Mapping request cancelled", reason=OracleError.CANCELLED)
                if done:
                    return future.result()
                if deadline is not None and time.monotonic() >= deadline:
                    future.cancel()
                    raise OracleError(
                        f"Mapping request timed out after {timeout}s",
                        reason=OracleError.TIMEOUT,
                    )
        finally:
            # A timed out call keeps running in its worker thread; don't block on it
            executor.shutdown(wait=False)
