from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import form_json_repair.core.services.metrics_service as metrics
from form_json_repair.core.common.logging_utils import preview
from form_json_repair.core.domain.repair_models import (
    Attempt,
    FailureKind,
    ParseResult,
    RepairFailure,
    RepairOutcome,
    RepairSuccess,
)
from form_json_repair.core.services.json_validator import JsonValidator
from form_json_repair.core.services.repair_stages import (
    INSERT_MISSING_COMMAS,
    NORMALIZE_QUOTES,
    STRIP_TRAILING_COMMAS,
    Stage,
)

logger = logging.getLogger(__name__)

StageCombination = tuple[Stage, ...]

# Tried in order; each combination is applied to the raw input. Later entries
# extend earlier ones, so the last attempt is always the most repaired text.
DEFAULT_COMBINATIONS: tuple[StageCombination, ...] = (
    (),
    (STRIP_TRAILING_COMMAS,),
    (INSERT_MISSING_COMMAS, STRIP_TRAILING_COMMAS),
    (NORMALIZE_QUOTES, INSERT_MISSING_COMMAS, STRIP_TRAILING_COMMAS),
)


class RepairPipeline:
    """
    Recover strictly valid JSON from near-miss operator input.

    The raw text is validated as-is first; on failure each stage combination
    is applied and re-validated until one parses. The winning candidate's
    text is returned verbatim, never a re-serialization of the parsed value.
    """

    def __init__(
        self,
        combinations: Sequence[StageCombination] = DEFAULT_COMBINATIONS,
        validator: JsonValidator | None = None,
    ) -> None:
        combos = tuple(tuple(combo) for combo in combinations)
        if not combos or combos[0] != ():
            raise ValueError("The first combination must be the direct parse ()")
        self._combinations = combos
        self._validator = validator or JsonValidator()

    @property
    def combinations(self) -> tuple[StageCombination, ...]:
        return self._combinations

    def describe(self) -> list[dict[str, Any]]:
        """Stage combinations in the order they are tried, for introspection."""
        return [
            {
                "step": index + 1,
                "stages": [stage.name for stage in combo],
                "descriptions": [stage.description for stage in combo],
            }
            for index, combo in enumerate(self._combinations)
        ]

    def run(self, field_label: str, raw_text: str | None) -> RepairOutcome:
        """
        Repair one form field.

        Args:
            field_label: Human-readable field name used in diagnostics.
            raw_text: The operator's text exactly as submitted.

        Returns:
            RepairSuccess with the first parseable candidate, or RepairFailure
            carrying every attempt and the most informative parse error.
        """
        text = raw_text or ""
        attempts: list[Attempt] = []
        # Stages often leave text unchanged; identical candidates share a parse
        seen: dict[str, ParseResult] = {}

        if not text.strip():
            direct = self._attempt((), text, seen)
            attempts.append(direct)
            return self._fail(field_label, FailureKind.EMPTY_INPUT, text, attempts)

        for combo in self._combinations:
            candidate = text
            for stage in combo:
                candidate = stage(candidate)
            attempt = self._attempt(combo, candidate, seen)
            attempts.append(attempt)
            if attempt.succeeded:
                return self._succeed(field_label, attempt, attempts)

        return self._fail(
            field_label, FailureKind.UNRECOVERABLE_SYNTAX, text, attempts
        )

    def _attempt(
        self, combo: StageCombination, candidate: str, seen: dict[str, ParseResult]
    ) -> Attempt:
        metrics.record_attempt()
        result = seen.get(candidate)
        if result is None:
            result = self._validator.validate(candidate)
            seen[candidate] = result
        return Attempt(
            stages=tuple(stage.name for stage in combo), text=candidate, result=result
        )

    def _succeed(
        self, field_label: str, attempt: Attempt, attempts: list[Attempt]
    ) -> RepairSuccess:
        metrics.record_success(attempt.stages)
        if attempt.stages:
            logger.debug(
                "Repaired field %r via %s after %d attempts",
                field_label,
                attempt.label,
                len(attempts),
            )
        return RepairSuccess(
            field_label=field_label, text=attempt.text, attempts=tuple(attempts)
        )

    def _fail(
        self,
        field_label: str,
        kind: FailureKind,
        text: str,
        attempts: list[Attempt],
    ) -> RepairFailure:
        final_error = attempts[-1].result.error
        if final_error is None:
            raise ValueError("A failed repair must end with a failed attempt")
        metrics.record_failure(kind)
        logger.info(
            "Could not repair field %r (%s): %s; input preview: %s",
            field_label,
            kind.value,
            final_error.message,
            preview(text),
        )
        return RepairFailure(
            field_label=field_label,
            kind=kind,
            text=text,
            attempts=tuple(attempts),
            final_error=final_error,
        )


_default_pipeline = RepairPipeline()


def get_default_pipeline() -> RepairPipeline:
    return _default_pipeline


def repair(field_label: str, raw_text: str | None) -> RepairOutcome:
    """Repair ``raw_text`` with the default stage combinations."""
    return _default_pipeline.run(field_label, raw_text)
