"""
HTTP endpoints that let the console validate JSON fields before submitting.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import Field
from starlette.responses import JSONResponse

import form_json_repair.core.services.metrics_service as metrics
from form_json_repair.core.common.exceptions import (
    FieldTooLargeError,
    InvalidRequestError,
)
from form_json_repair.core.common.logging_utils import get_logger
from form_json_repair.core.domain.repair_models import RepairFailure, RepairSuccess
from form_json_repair.core.interfaces.model_bases import DomainModel
from form_json_repair.core.services.diagnostic_composer import (
    SUPPORTED_LANGUAGES,
    compose_diagnostic,
)
from form_json_repair.core.services.form_payload_service import FormPayloadService
from form_json_repair.core.services.repair_pipeline import RepairPipeline

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/json-fields", tags=["json-fields"])


class RepairRequest(DomainModel):
    field_label: str = "JSON"
    text: str
    language: str | None = None


class FormRequest(DomainModel):
    fields: dict[str, str | None] = Field(default_factory=dict)
    language: str | None = None


def get_pipeline(request: Request) -> RepairPipeline:
    return request.app.state.pipeline  # type: ignore[no-any-return]


def get_form_service(request: Request) -> FormPayloadService:
    return request.app.state.form_service  # type: ignore[no-any-return]


def _check_language(language: str | None) -> None:
    if language is not None and language not in SUPPORTED_LANGUAGES:
        raise InvalidRequestError(
            message=f"Unsupported language: {language}",
            details={"supported": list(SUPPORTED_LANGUAGES)},
        )


def _failure_body(failure: RepairFailure, language: str | None) -> dict[str, Any]:
    return {
        "ok": False,
        "field_label": failure.field_label,
        "kind": failure.kind.value,
        "message": compose_diagnostic(failure, language),
        "error": failure.final_error.to_dict(),
        "attempts": [attempt.to_dict() for attempt in failure.attempts],
    }


@router.get("/stages")
async def list_stages(
    pipeline: RepairPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """Stage combinations the pipeline tries, in order, with their success counts."""
    successes = metrics.successes_by_combination()
    combinations = pipeline.describe()
    for combination in combinations:
        key = metrics.combination_key(combination["stages"])
        combination["successes"] = successes.get(key, 0)
    return {"combinations": combinations}


@router.post("/repair")
async def repair_field(
    body: RepairRequest,
    pipeline: RepairPipeline = Depends(get_pipeline),
    form_service: FormPayloadService = Depends(get_form_service),
) -> Any:
    """Repair a single field's text.

    Returns 200 with the validated text, or 422 with the diagnostic.
    """
    _check_language(body.language)
    language = body.language or form_service.language
    size_message = form_service.check_size(body.field_label, body.text, language)
    if size_message is not None:
        raise FieldTooLargeError(
            message=size_message, details={"field_label": body.field_label}
        )

    outcome = pipeline.run(body.field_label, body.text)
    if isinstance(outcome, RepairSuccess):
        logger.info(
            "json_field_repaired",
            field_label=outcome.field_label,
            stages=list(outcome.stages),
        )
        return {
            "ok": True,
            "field_label": outcome.field_label,
            "text": outcome.text,
            "stages": list(outcome.stages),
        }

    logger.info(
        "json_field_rejected",
        field_label=outcome.field_label,
        kind=outcome.kind.value,
        attempts=len(outcome.attempts),
    )
    return JSONResponse(_failure_body(outcome, language), status_code=422)


@router.post("/form")
async def prepare_form(
    body: FormRequest,
    form_service: FormPayloadService = Depends(get_form_service),
) -> dict[str, Any]:
    """Validate every JSON field of a form submission at once."""
    _check_language(body.language)
    payload = form_service.prepare_or_raise(body.fields, body.language)
    logger.info("form_payload_prepared", fields=sorted(payload))
    return {"payload": payload}
