"""Value types produced by the repair engine.

Every type here is immutable and lives only for the duration of a single
``repair`` call: the pipeline builds them, the caller reads them, nothing is
persisted or shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from form_json_repair.core.interfaces.model_bases import InternalDTO

DIRECT_ATTEMPT_LABEL = "direct"


class FailureKind(str, Enum):
    """Why a field could not be turned into valid JSON."""

    UNRECOVERABLE_SYNTAX = "unrecoverable_syntax"
    EMPTY_INPUT = "empty_input"


@dataclass(frozen=True)
class ParseError(InternalDTO):
    """Location-aware description of a strict JSON parse failure.

    ``offset`` is a character index into the text that was parsed; ``line``
    and ``column`` are 1-based, following the standard library parser.
    """

    message: str
    offset: int | None = None
    line: int | None = None
    column: int | None = None

    def location(self) -> str | None:
        if self.line is not None and self.column is not None:
            return f"line {self.line}, column {self.column}"
        if self.offset is not None:
            return f"char {self.offset}"
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
        }


@dataclass(frozen=True)
class ParseResult(InternalDTO):
    value: Any = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Attempt(InternalDTO):
    """One pipeline step: the stages applied, the candidate text, its parse result."""

    stages: tuple[str, ...]
    text: str
    result: ParseResult

    @property
    def label(self) -> str:
        if not self.stages:
            return DIRECT_ATTEMPT_LABEL
        return " -> ".join(self.stages)

    @property
    def succeeded(self) -> bool:
        return self.result.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "stages": list(self.stages),
            "label": self.label,
            "ok": self.succeeded,
            "text": self.text,
            "error": self.result.error.to_dict() if self.result.error else None,
        }


@dataclass(frozen=True)
class RepairSuccess(InternalDTO):
    """The first candidate text that parsed, exactly as it was produced."""

    field_label: str
    text: str
    attempts: tuple[Attempt, ...]

    ok = True

    @property
    def stages(self) -> tuple[str, ...]:
        return self.attempts[-1].stages

    @property
    def value(self) -> Any:
        return self.attempts[-1].result.value

    @property
    def repaired(self) -> bool:
        return bool(self.stages)


@dataclass(frozen=True)
class RepairFailure(InternalDTO):
    """Exhausted pipeline (or blank input) with the operator's original text."""

    field_label: str
    kind: FailureKind
    text: str
    attempts: tuple[Attempt, ...]
    final_error: ParseError

    ok = False

    def __post_init__(self) -> None:
        if not self.attempts:
            raise ValueError("RepairFailure requires at least the direct parse attempt")


RepairOutcome = RepairSuccess | RepairFailure
