"""Tests for ramlmock.collector.responses."""

from __future__ import annotations

from typing import Any, Optional

import pytest

from ramlmock.collector.responses import extract_response_candidates, select_body
from ramlmock.models import BodyNode, ResponseNode

USER_SCHEMA = '{"type": "object", "properties": {"id": {"type": "integer"}}}'


def _body(media_type: str = "application/json", schema: Optional[str] = None, example: Any = None):
    return {media_type: BodyNode(schema=schema, example=example)}


# ---------------------------------------------------------------------------
# select_body
# ---------------------------------------------------------------------------


class TestSelectBody:
    def test_json_preferred(self) -> None:
        body = {
            "application/xml": BodyNode(example="<user/>"),
            "application/json": BodyNode(example={"id": 1}),
        }
        assert select_body(body).example == {"id": 1}

    def test_vendor_json_media_type(self) -> None:
        body = _body("application/vnd.acme.v2+json", example=[1])
        assert select_body(body).example == [1]

    def test_vendor_xml_media_type(self) -> None:
        body = _body("application/vnd.acme+xml", example="<a/>")
        assert select_body(body).example == "<a/>"

    def test_media_type_match_is_case_insensitive(self) -> None:
        body = _body("Application/JSON", example={"ok": True})
        assert select_body(body).example == {"ok": True}

    def test_first_matching_vendor_type_wins(self) -> None:
        body = {
            "text/plain": BodyNode(example="nope"),
            "application/vnd.a+json": BodyNode(example="a"),
            "application/vnd.b+json": BodyNode(example="b"),
        }
        assert select_body(body).example == "a"

    def test_text_plain_only(self) -> None:
        assert select_body(_body("text/plain", example="pong")) is None

    def test_empty_or_missing(self) -> None:
        assert select_body(None) is None
        assert select_body({}) is None


# ---------------------------------------------------------------------------
# extract_response_candidates
# ---------------------------------------------------------------------------


class TestExtractResponseCandidates:
    def test_schema_is_parsed(self, reporter) -> None:
        responses = {"200": ResponseNode(body=_body(schema=USER_SCHEMA, example={"id": 7}))}

        [candidate] = extract_response_candidates(responses, reporter)

        assert candidate.code == 200
        assert candidate.schema_ == {"type": "object", "properties": {"id": {"type": "integer"}}}
        assert candidate.example == {"id": 7}
        reporter.warning.assert_not_called()

    def test_discovery_order_kept(self, reporter) -> None:
        responses = {
            "404": ResponseNode(body=_body(example={"m": "missing"})),
            "200": ResponseNode(body=_body(example={"id": 1})),
        }
        codes = [c.code for c in extract_response_candidates(responses, reporter)]
        assert codes == [404, 200]

    def test_integer_keys_accepted(self, reporter) -> None:
        responses = {201: ResponseNode(body=_body(example={}))}
        assert extract_response_candidates(responses, reporter)[0].code == 201

    def test_null_response_skipped(self, reporter) -> None:
        responses = {"400": None, "200": ResponseNode(body=_body(example=1))}
        assert [c.code for c in extract_response_candidates(responses, reporter)] == [200]

    def test_response_without_body_skipped(self, reporter) -> None:
        responses = {"204": ResponseNode(description="No content")}
        assert extract_response_candidates(responses, reporter) == []

    def test_text_plain_response_skipped(self, reporter) -> None:
        responses = {"200": ResponseNode(body=_body("text/plain", example="pong"))}
        assert extract_response_candidates(responses, reporter) == []

    def test_non_numeric_code_skipped(self, reporter) -> None:
        responses = {
            "default": ResponseNode(body=_body(example={})),
            "200": ResponseNode(body=_body(example={})),
        }
        assert [c.code for c in extract_response_candidates(responses, reporter)] == [200]

    def test_malformed_schema_warns_and_keeps_example(self, reporter) -> None:
        responses = {
            "200": ResponseNode(body=_body(schema="{not json", example={"id": 1})),
            "404": ResponseNode(body=_body(schema='{"type": "object"}')),
        }

        candidates = extract_response_candidates(responses, reporter)

        assert [c.code for c in candidates] == [200, 404]
        assert candidates[0].schema_ is None
        assert candidates[0].example == {"id": 1}
        assert candidates[1].schema_ == {"type": "object"}
        reporter.warning.assert_called_once()
        message = reporter.warning.call_args[0][0]
        assert "response 200" in message
        assert "!include" in message

    def test_body_without_schema_or_example(self, reporter) -> None:
        [candidate] = extract_response_candidates({"200": ResponseNode(body=_body())}, reporter)
        assert candidate.schema_ is None
        assert candidate.example is None

    def test_uses_global_output_by_default(self, monkeypatch, reporter) -> None:
        monkeypatch.setattr("ramlmock.collector.responses.get_output", lambda: reporter)
        extract_response_candidates({"200": ResponseNode(body=_body(schema="oops"))})
        reporter.warning.assert_called_once()

    def test_deeply_nested_schema_warns_and_keeps_other_codes(self, reporter) -> None:
        nested = "[" * 200000 + "]" * 200000
        responses = {
            "200": ResponseNode(body=_body(schema=USER_SCHEMA)),
            "400": ResponseNode(body=_body(schema=nested, example={"error": "bad"})),
        }

        candidates = extract_response_candidates(responses, reporter)

        assert [c.code for c in candidates] == [200, 400]
        assert candidates[1].schema_ is None
        assert candidates[1].example == {"error": "bad"}
        reporter.warning.assert_called_once()

    @pytest.mark.parametrize("code", ["2_00", "+200", " 200 ", "\uff12\uff10\uff10", "200.0", "-1"])
    def test_only_plain_digit_codes_accepted(self, code: str, reporter) -> None:
        responses = {code: ResponseNode(body=_body(example={}))}
        assert extract_response_candidates(responses, reporter) == []
