"""In-process counters for repair outcomes.

Counter names are dotted paths:

    repair.attempts                  every candidate checked by the validator
    repair.success                   fields that ended in a parseable text
    repair.success.<combination>     ... broken down by winning combination
    repair.failure.<kind>            fields that could not be repaired
    form.field_too_large             fields rejected by the size gate
"""

from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Sequence

from form_json_repair.core.domain.repair_models import (
    DIRECT_ATTEMPT_LABEL,
    FailureKind,
)

ATTEMPTS = "repair.attempts"
SUCCESS = "repair.success"
FAILURE_PREFIX = "repair.failure"
FIELD_TOO_LARGE = "form.field_too_large"

_lock = threading.Lock()
_counters: Counter[str] = Counter()


def inc(name: str, by: int = 1) -> None:
    with _lock:
        _counters[name] += by


def get(name: str) -> int:
    with _lock:
        return _counters[name]


def snapshot() -> dict[str, int]:
    with _lock:
        return dict(_counters)


def reset() -> None:
    with _lock:
        _counters.clear()


def record_attempt() -> None:
    inc(ATTEMPTS)


def combination_key(stage_names: Sequence[str]) -> str:
    return "+".join(stage_names) or DIRECT_ATTEMPT_LABEL


def record_success(stage_names: Sequence[str]) -> None:
    """Count a repaired field under both the total and its winning combination."""
    with _lock:
        _counters[SUCCESS] += 1
        _counters[f"{SUCCESS}.{combination_key(stage_names)}"] += 1


def record_failure(kind: FailureKind) -> None:
    inc(f"{FAILURE_PREFIX}.{kind.value}")


def record_oversized_field() -> None:
    inc(FIELD_TOO_LARGE)


def successes_by_combination() -> dict[str, int]:
    """Repaired-field counts keyed by ``combination_key``."""
    prefix = SUCCESS + "."
    with _lock:
        return {
            name[len(prefix) :]: count
            for name, count in _counters.items()
            if name.startswith(prefix)
        }
