"""Tests for building mapping requests and parsing oracle output."""

import threading

import pytest

from fieldmapper.agents.field_mapping import MappingRequester, MappingSuggestion, parse_suggestions
from fieldmapper.agents.field_mapping.prompts import HINTS_HEADER, SYSTEM_INSTRUCTION
from fieldmapper.exceptions import OracleError, SchemaError

from tests.conftest import ScriptedOracle, mappings_json

TARGETS = ["product_id", "is_available"]
SUPPLIER = ["PRODUCTCODE", "isStocked"]


class TestBuildRequest:

    def test_prompt_lists_both_field_lists(self, requester):
        payload = requester.build_request(TARGETS, SUPPLIER)

        assert payload.system_instruction == SYSTEM_INSTRUCTION
        assert "Zoro Fields: product_id, is_available" in payload.user_prompt
        assert "Supplier Fields: PRODUCTCODE, isStocked" in payload.user_prompt
        assert '"mappings"' in payload.user_prompt
        assert '"targetField"' in payload.user_prompt
        assert payload.target_fields == tuple(TARGETS)
        assert payload.supplier_fields == tuple(SUPPLIER)

    def test_single_hint_string_is_appended(self, requester):
        hint = "is_available is boolean based on isStocked equals YES"

        payload = requester.build_request(TARGETS, SUPPLIER, hint)

        assert payload.hints == (hint,)
        assert HINTS_HEADER in payload.user_prompt
        assert payload.user_prompt.endswith(f"- {hint}")

    def test_hint_list_skips_blanks(self, requester):
        payload = requester.build_request(TARGETS, SUPPLIER, ["first", "  ", "second"])

        assert payload.hints == ("first", "second")
        assert "- first\n- second" in payload.user_prompt

    def test_no_hints_no_header(self, requester):
        payload = requester.build_request(TARGETS, SUPPLIER)

        assert HINTS_HEADER not in payload.user_prompt

    def test_empty_supplier_fields_allowed(self, requester):
        payload = requester.build_request(TARGETS, [])

        assert payload.supplier_fields == ()
        assert "Supplier Fields: (none)" in payload.user_prompt

    def test_empty_targets_rejected(self, requester):
        with pytest.raises(SchemaError):
            requester.build_request([], SUPPLIER)

    def test_blank_supplier_field_rejected(self, requester):
        with pytest.raises(SchemaError):
            requester.build_request(TARGETS, ["PRODUCTCODE", ""])

    def test_duplicate_supplier_field_rejected(self, requester):
        with pytest.raises(SchemaError):
            requester.build_request(TARGETS, ["STOCK", "STOCK"])

    def test_build_request_does_not_call_oracle(self, requester, oracle):
        requester.build_request(TARGETS, SUPPLIER)

        assert oracle.calls == []


class TestParseSuggestions:

    def test_documented_shape(self):
        raw = mappings_json(("product_id", "PRODUCTCODE", ""), ("is_available", "", 'isStocked === "YES"'))

        assert parse_suggestions(raw) == [
            MappingSuggestion("product_id", direct="PRODUCTCODE", formula=""),
            MappingSuggestion("is_available", direct="", formula='isStocked === "YES"'),
        ]

    def test_code_fences_are_stripped(self):
        raw = "```json\n" + mappings_json(("product_id", "PRODUCTCODE", "")) + "\n```"

        assert parse_suggestions(raw)[0].direct == "PRODUCTCODE"

    @pytest.mark.parametrize("template", [
        "```json {}```",
        "```{}```",
        "```json\n{}",
    ])
    def test_single_line_and_unclosed_fences(self, template):
        raw = template.format(mappings_json(("product_id", "PRODUCTCODE", "")))

        assert parse_suggestions(raw)[0].direct == "PRODUCTCODE"

    def test_legacy_zoro_field_key(self):
        raw = '{"mappings": [{"zoroField": "price", "direct": "COST"}]}'

        assert parse_suggestions(raw) == [MappingSuggestion("price", direct="COST")]

    def test_null_and_missing_values(self):
        raw = '{"mappings": [{"targetField": "price", "direct": null}]}'

        suggestion = parse_suggestions(raw)[0]

        assert suggestion.is_unmapped

    @pytest.mark.parametrize("raw", [
        "",
        "Sure! Here are your mappings",
        "[]",
        '{"rules": []}',
        '{"mappings": {"price": "COST"}}',
        '{"mappings": ["price"]}',
        '{"mappings": [{"direct": "COST"}]}',
        '{"mappings": [{"targetField": "price", "direct": 5}]}',
    ])
    def test_malformed_documents(self, raw):
        with pytest.raises(OracleError) as exc_info:
            parse_suggestions(raw)

        assert exc_info.value.reason == OracleError.MALFORMED


class TestRequestSuggestions:

    def test_exactly_one_call(self, options):
        oracle = ScriptedOracle(mappings_json(("product_id", "PRODUCTCODE", "")))
        requester = MappingRequester(oracle, options=options)

        suggestions = requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER))

        assert len(oracle.calls) == 1
        assert oracle.calls[0]["options"] == options
        assert suggestions == [MappingSuggestion("product_id", direct="PRODUCTCODE", formula="")]

    def test_non_json_raises_oracle_error(self, options):
        oracle = ScriptedOracle("I could not find any mappings.")
        requester = MappingRequester(oracle, options=options)

        with pytest.raises(OracleError) as exc_info:
            requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER))

        assert exc_info.value.reason == OracleError.MALFORMED
        assert exc_info.value.raw_response == "I could not find any mappings."
        assert len(oracle.calls) == 1

    def test_transport_failure_is_wrapped(self, options):
        oracle = ScriptedOracle(ConnectionError("connection reset"))
        requester = MappingRequester(oracle, options=options)

        with pytest.raises(OracleError) as exc_info:
            requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER))

        assert exc_info.value.reason == OracleError.TRANSPORT
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert len(oracle.calls) == 1

    def test_timeout(self, options):
        release = threading.Event()
        oracle = ScriptedOracle(mappings_json(), block=release)
        requester = MappingRequester(oracle, options=options)

        try:
            with pytest.raises(OracleError) as exc_info:
                requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER), timeout=0.05)
        finally:
            release.set()

        assert exc_info.value.reason == OracleError.TIMEOUT

    def test_default_timeout_from_constructor(self, options):
        release = threading.Event()
        oracle = ScriptedOracle(mappings_json(), block=release)
        requester = MappingRequester(oracle, options=options, timeout=0.05)

        try:
            with pytest.raises(OracleError) as exc_info:
                requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER))
        finally:
            release.set()

        assert exc_info.value.reason == OracleError.TIMEOUT

    def test_cancelled_before_dispatch(self, requester, oracle):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(OracleError) as exc_info:
            requester.request_suggestions(requester.build_request(TARGETS, SUPPLIER), cancel_event=cancel)

        assert exc_info.value.reason == OracleError.CANCELLED
        assert oracle.calls == []

    def test_cancelled_while_in_flight(self, options):
        release = threading.Event()
        cancel = threading.Event()
        oracle = ScriptedOracle(mappings_json(), block=release)
        requester = MappingRequester(oracle, options=options)
        timer = threading.Timer(0.05, cancel.set)
        timer.start()

        try:
            with pytest.raises(OracleError) as exc_info:
                requester.request_suggestions(
                    requester.build_request(TARGETS, SUPPLIER), timeout=5, cancel_event=cancel
                )
        finally:
            release.set()
            timer.cancel()

        assert exc_info.value.reason == OracleError.CANCELLED
