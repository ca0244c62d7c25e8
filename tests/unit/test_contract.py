"""
Unit tests for structured output contracts and result finalization.

Tests the JSON Schema -> Pydantic model conversion and the rules that
decide whether a terminal result counts as a success.
"""

import pytest
from pydantic import BaseModel

from agentcookbook.agentic.contract import OutputContract, build_model
from agentcookbook.agentic.streaming.events import ResultEvent
from agentcookbook.agentic.streaming.finalizer import finalize
from agentcookbook.agentic.streaming.outcome import FailureKind, OutcomeStatus
from agentcookbook.exceptions import SchemaViolation


class TestBuildModel:
    """Test dynamic model creation from JSON Schema."""

    def test_builds_pydantic_model(self):
        schema = {
            "type": "object",
            "properties": {
                "answer": {"type": "string"},
                "confidence": {"type": "number"},
            },
            "required": ["answer"],
        }

        model = build_model(schema)

        assert issubclass(model, BaseModel)
        assert model.model_fields["answer"].is_required()
        assert not model.model_fields["confidence"].is_required()

    def test_nested_array_items_become_models(self, review_schema):
        model = build_model(review_schema, "ReviewOutput")

        instance = model.model_validate({
            "issues": [{"severity": "low", "category": "style", "file": "a.py", "description": "x"}],
            "summary": "ok",
            "overallScore": 90,
        })

        assert isinstance(instance.issues[0], BaseModel)
        assert instance.issues[0].severity == "low"


class TestOutputContract:
    """Test payload validation against a contract."""

    def test_valid_payload_returned(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)

        payload = contract.validate(sample_review)

        assert payload["summary"] == "Two issues found."
        assert payload["overallScore"] == 80
        assert len(payload["issues"]) == 2
        assert "suggestion" not in payload["issues"][0]

    def test_payload_returned_unchanged(self):
        contract = OutputContract.from_schema({
            "type": "object",
            "properties": {"score": {"type": "number"}, "note": {"type": ["string", "null"]}},
            "required": ["score"],
        })
        payload = {"score": 80, "note": None}

        result = contract.validate(payload)

        assert result == {"score": 80, "note": None}
        assert isinstance(result["score"], int)

    def test_property_without_type_accepts_any_value(self):
        contract = OutputContract.from_schema({
            "type": "object",
            "properties": {"data": {"description": "anything"}},
            "required": ["data"],
        })

        assert contract.validate({"data": {"k": 1}}) == {"data": {"k": 1}}
        assert contract.validate({"data": [1, "two"]}) == {"data": [1, "two"]}

    def test_nullable_type_union(self):
        contract = OutputContract.from_schema({
            "type": "object",
            "properties": {"note": {"type": ["string", "null"]}},
            "required": ["note"],
        })

        assert contract.validate({"note": None}) == {"note": None}
        assert contract.validate({"note": "x"}) == {"note": "x"}
        with pytest.raises(SchemaViolation):
            contract.validate({"note": 3})

    def test_multi_type_union(self):
        contract = OutputContract.from_schema({
            "type": "object",
            "properties": {"value": {"type": ["string", "integer"]}},
            "required": ["value"],
        })

        assert contract.validate({"value": 3}) == {"value": 3}
        assert contract.validate({"value": "three"}) == {"value": "three"}
        with pytest.raises(SchemaViolation):
            contract.validate({"value": 3.5})

    def test_missing_required_field(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)
        del sample_review["summary"]

        with pytest.raises(SchemaViolation) as exc_info:
            contract.validate(sample_review)

        assert exc_info.value.details[0]["loc"] == ("summary",)
        assert "summary" in str(exc_info.value)

    def test_enum_outside_declared_values(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)
        sample_review["issues"][0]["severity"] = "catastrophic"

        with pytest.raises(SchemaViolation) as exc_info:
            contract.validate(sample_review)

        assert exc_info.value.details[0]["loc"] == ("issues", 0, "severity")

    def test_missing_nested_required_field(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)
        del sample_review["issues"][1]["file"]

        with pytest.raises(SchemaViolation) as exc_info:
            contract.validate(sample_review)

        assert exc_info.value.details[0]["loc"] == ("issues", 1, "file")

    def test_numeric_field_rejects_string(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)
        sample_review["overallScore"] = "80"

        with pytest.raises(SchemaViolation):
            contract.validate(sample_review)

    def test_integer_accepted_for_number(self):
        contract = OutputContract.from_schema({
            "type": "object",
            "properties": {"score": {"type": "number"}},
            "required": ["score"],
        })

        assert contract.validate({"score": 7})["score"] == 7

    @pytest.mark.parametrize("payload", [None, "text", ["a", "b"], 42])
    def test_non_object_payload(self, review_schema, payload):
        contract = OutputContract.from_schema(review_schema)

        with pytest.raises(SchemaViolation):
            contract.validate(payload)

    def test_non_object_schema_rejected(self):
        with pytest.raises(ValueError, match="object"):
            OutputContract.from_schema({"type": "array"})

    def test_to_output_format(self, review_schema):
        contract = OutputContract.from_schema(review_schema)

        assert contract.to_output_format() == {"type": "json_schema", "schema": review_schema}


class TestFinalize:
    """Test terminal result -> Outcome."""

    def test_text_success(self):
        outcome = finalize(ResultEvent(result="done", total_cost_usd=0.01))

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.payload == "done"

    def test_text_success_falls_back_to_accumulated(self):
        outcome = finalize(ResultEvent(), accumulated_text="streamed answer")

        assert outcome.payload == "streamed answer"

    def test_structured_success(self, review_schema, sample_review):
        contract = OutputContract.from_schema(review_schema)

        outcome = finalize(ResultEvent(structured_output=sample_review), contract)

        assert outcome.is_success
        assert outcome.payload["overallScore"] == 80

    def test_structured_missing_payload_is_violation(self, review_schema):
        contract = OutputContract.from_schema(review_schema)

        outcome = finalize(ResultEvent(result="I could not produce JSON"), contract)

        assert outcome.failure == FailureKind.SCHEMA_VIOLATION

    def test_structured_violation_despite_upstream_success(self, review_schema):
        contract = OutputContract.from_schema(review_schema)

        outcome = finalize(ResultEvent(subtype="success", structured_output={"overallScore": 80}), contract)

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.failure == FailureKind.SCHEMA_VIOLATION
        assert {tuple(e["loc"]) for e in outcome.errors} == {("issues",), ("summary",)}

    def test_upstream_failure_verbatim(self, review_schema):
        contract = OutputContract.from_schema(review_schema)

        outcome = finalize(
            ResultEvent(subtype="error_max_structured_output_retries", is_error=True),
            contract,
        )

        assert outcome.failure == FailureKind.UPSTREAM_FAILURE
        assert outcome.subtype == "error_max_structured_output_retries"

    def test_is_error_with_success_subtype_is_failure(self):
        outcome = finalize(ResultEvent(subtype="success", is_error=True))

        assert outcome.failure == FailureKind.UPSTREAM_FAILURE
