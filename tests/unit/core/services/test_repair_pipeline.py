from __future__ import annotations

import json

import pytest

import form_json_repair.core.services.metrics_service as metrics
from form_json_repair.core.domain.repair_models import (
    Attempt,
    FailureKind,
    ParseResult,
    RepairFailure,
    RepairSuccess,
)
from form_json_repair.core.services.json_validator import JsonValidator
from form_json_repair.core.services.repair_pipeline import (
    DEFAULT_COMBINATIONS,
    RepairPipeline,
    repair,
)
from form_json_repair.core.services.repair_stages import STRIP_TRAILING_COMMAS


class CountingValidator(JsonValidator):
    """Test double that records how many candidates were actually parsed."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def validate(self, text: str) -> ParseResult:
        self.calls.append(text)
        return super().validate(text)


def test_valid_json_is_returned_unchanged_after_one_attempt(
    pipeline: RepairPipeline,
) -> None:
    text = '{\n  "b": 1.50,\n  "a": [1e3, "x"]\n}'

    outcome = pipeline.run("Translations", text)

    assert isinstance(outcome, RepairSuccess)
    assert outcome.text == text
    assert outcome.stages == ()
    assert not outcome.repaired
    assert len(outcome.attempts) == 1


def test_single_quotes_are_recovered(pipeline: RepairPipeline) -> None:
    outcome = pipeline.run("Translations", "{'a': 1, 'b': 2}")

    assert isinstance(outcome, RepairSuccess)
    assert json.loads(outcome.text) == {"a": 1, "b": 2}
    assert outcome.stages == (
        "NormalizeQuotes",
        "InsertMissingCommas",
        "StripTrailingCommas",
    )
    assert len(outcome.attempts) == 4


def test_missing_comma_is_recovered(pipeline: RepairPipeline) -> None:
    outcome = pipeline.run("Translations", '{"a": 1\n"b": 2}')

    assert isinstance(outcome, RepairSuccess)
    assert outcome.text == '{"a": 1,\n"b": 2}'
    assert json.loads(outcome.text) == {"a": 1, "b": 2}
    assert outcome.stages == ("InsertMissingCommas", "StripTrailingCommas")


def test_trailing_comma_is_recovered(pipeline: RepairPipeline) -> None:
    outcome = pipeline.run("Packaging options", "[1, 2, 3,]")

    assert isinstance(outcome, RepairSuccess)
    assert outcome.text == "[1, 2, 3]"
    assert outcome.stages == ("StripTrailingCommas",)
    assert [a.succeeded for a in outcome.attempts] == [False, True]


def test_combined_repairs(pipeline: RepairPipeline) -> None:
    outcome = pipeline.run("Packaging options", "[{'x': 1,}\n{'y': 2}]")

    assert isinstance(outcome, RepairSuccess)
    assert json.loads(outcome.text) == [{"x": 1}, {"y": 2}]
    assert outcome.value == [{"x": 1}, {"y": 2}]


def test_operator_formatting_and_numbers_are_preserved(
    pipeline: RepairPipeline,
) -> None:
    outcome = pipeline.run(
        "Packaging options",
        "[{'base_price': 12.50, 'quantity_in_packaging': 1E2,\n}]",
    )

    assert isinstance(outcome, RepairSuccess)
    assert outcome.text == '[{"base_price": 12.50, "quantity_in_packaging": 1E2}]'


def test_arabic_translations_are_recovered(pipeline: RepairPipeline) -> None:
    raw = (
        "[\n"
        "  {'language_code': 'ar', 'translated_product_name': 'تمر سكري'}\n"
        "  {'language_code': 'en', 'translated_product_name': 'Sukkari dates'},\n"
        "]"
    )

    outcome = pipeline.run("Translations", raw)

    assert isinstance(outcome, RepairSuccess)
    assert json.loads(outcome.text) == [
        {"language_code": "ar", "translated_product_name": "تمر سكري"},
        {"language_code": "en", "translated_product_name": "Sukkari dates"},
    ]


def test_unrecoverable_input_reports_every_attempt(pipeline: RepairPipeline) -> None:
    outcome = pipeline.run("Translations", "not json at all")

    assert isinstance(outcome, RepairFailure)
    assert outcome.kind is FailureKind.UNRECOVERABLE_SYNTAX
    assert outcome.text == "not json at all"
    assert len(outcome.attempts) == len(DEFAULT_COMBINATIONS)
    assert outcome.attempts[0].stages == ()
    assert outcome.final_error.offset == 0
    assert outcome.final_error is outcome.attempts[-1].result.error


def test_final_error_comes_from_the_most_repaired_candidate(
    pipeline: RepairPipeline,
) -> None:
    outcome = pipeline.run("Translations", "{'a': 1,, 'b': 2}")

    assert isinstance(outcome, RepairFailure)
    assert outcome.attempts[-1].text == '{"a": 1,, "b": 2}'
    assert outcome.final_error.offset == 8
    assert outcome.text == "{'a': 1,, 'b': 2}"


@pytest.mark.parametrize("raw", ["", "   \n\t", None])
def test_blank_input_is_an_empty_input_failure(
    pipeline: RepairPipeline, raw: str | None
) -> None:
    outcome = pipeline.run("Translations", raw)

    assert isinstance(outcome, RepairFailure)
    assert outcome.kind is FailureKind.EMPTY_INPUT
    assert len(outcome.attempts) == 1
    assert outcome.attempts[0].label == "direct"


def test_identical_candidates_are_parsed_once() -> None:
    validator = CountingValidator()
    pipeline = RepairPipeline(validator=validator)

    outcome = pipeline.run("Translations", "not json at all")

    assert len(outcome.attempts) == 4
    assert validator.calls == ["not json at all"]


def test_same_input_yields_same_outcome(pipeline: RepairPipeline) -> None:
    raw = "[{'x': 1,}\n{'y': 2}"

    assert pipeline.run("Translations", raw) == pipeline.run("Translations", raw)


def test_outcomes_are_counted(pipeline: RepairPipeline) -> None:
    pipeline.run("Translations", "[1,]")
    pipeline.run("Translations", "")

    assert metrics.get("repair.success") == 1
    assert metrics.get("repair.success.StripTrailingCommas") == 1
    assert metrics.get("repair.failure.empty_input") == 1
    assert metrics.get("repair.attempts") == 3


def test_first_combination_must_be_the_direct_parse() -> None:
    with pytest.raises(ValueError):
        RepairPipeline(combinations=[(STRIP_TRAILING_COMMAS,)])


def test_describe_lists_combinations_in_order(pipeline: RepairPipeline) -> None:
    steps = pipeline.describe()

    assert [step["step"] for step in steps] == [1, 2, 3, 4]
    assert steps[0]["stages"] == []
    assert steps[-1]["stages"] == [
        "NormalizeQuotes",
        "InsertMissingCommas",
        "StripTrailingCommas",
    ]


def test_module_level_repair_uses_default_pipeline() -> None:
    assert isinstance(repair("Translations", "[1 2]"), RepairFailure)
    assert repair("Translations", '["a" "b"]').text == '["a", "b"]'


def test_valid_text_with_huge_integer_is_returned_unchanged(
    pipeline: RepairPipeline,
) -> None:
    text = '{"sku": ' + "1" * 5000 + "}"

    outcome = pipeline.run("Packaging options", text)

    assert isinstance(outcome, RepairSuccess)
    assert outcome.text == text
    assert outcome.stages == ()


def test_failure_without_a_failed_attempt_is_rejected(
    pipeline: RepairPipeline,
) -> None:
    parsed = Attempt(stages=(), text="[]", result=ParseResult(value=[]))

    with pytest.raises(ValueError, match="must end with a failed attempt"):
        pipeline._fail(
            "Translations", FailureKind.UNRECOVERABLE_SYNTAX, "[]", [parsed]
        )

    assert metrics.snapshot() == {}
