"""Lenient repair and validation of operator-typed JSON form fields."""

from form_json_repair.core.domain.repair_models import (
    Attempt,
    FailureKind,
    ParseError,
    RepairFailure,
    RepairOutcome,
    RepairSuccess,
)
from form_json_repair.core.services.diagnostic_composer import compose_diagnostic
from form_json_repair.core.services.json_validator import validate
from form_json_repair.core.services.repair_pipeline import RepairPipeline, repair

__version__ = "0.1.0"

__all__ = [
    "Attempt",
    "FailureKind",
    "ParseError",
    "RepairFailure",
    "RepairOutcome",
    "RepairPipeline",
    "RepairSuccess",
    "compose_diagnostic",
    "repair",
    "validate",
]
