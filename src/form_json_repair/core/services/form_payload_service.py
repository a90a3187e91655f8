from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import form_json_repair.core.services.metrics_service as metrics
from form_json_repair.core.common.exceptions import FieldValidationError
from form_json_repair.core.config.app_config import RepairConfig
from form_json_repair.core.domain.repair_models import RepairOutcome, RepairSuccess
from form_json_repair.core.interfaces.model_bases import InternalDTO
from form_json_repair.core.services.diagnostic_composer import (
    compose_diagnostic,
    compose_size_message,
    resolve_language,
)
from form_json_repair.core.services.repair_pipeline import (
    RepairPipeline,
    get_default_pipeline,
)

logger = logging.getLogger(__name__)


@dataclass
class FormPayloadResult(InternalDTO):
    """Form fields ready to submit, or one message per field that is not."""

    payload: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    outcomes: dict[str, RepairOutcome] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class FormPayloadService:
    """
    Gate between the product forms and the backend request.

    Every configured JSON field is size-checked and run through the repair
    pipeline; the validated text is forwarded verbatim. Other form fields
    pass through untouched.
    """

    def __init__(
        self, config: RepairConfig, pipeline: RepairPipeline | None = None
    ) -> None:
        self._config = config
        self._pipeline = pipeline or get_default_pipeline()

    @property
    def language(self) -> str:
        return self._config.language

    @property
    def json_fields(self) -> tuple[str, ...]:
        return tuple(self._config.json_fields)

    def field_label(self, field_name: str, language: str | None = None) -> str:
        field_config = self._config.json_fields.get(field_name)
        if field_config is None:
            return field_name
        return field_config.label_for(language or self._config.language)

    def check_size(
        self, field_label: str, text: str, language: str | None = None
    ) -> str | None:
        """Return the rejection message when ``text`` exceeds the byte limit."""
        size = len(text.encode("utf-8"))
        if size <= self._config.max_field_bytes:
            return None
        metrics.record_oversized_field()
        logger.warning(
            "Rejecting field %r: %d bytes exceeds limit of %d",
            field_label,
            size,
            self._config.max_field_bytes,
        )
        return compose_size_message(
            field_label,
            size,
            self._config.max_field_bytes,
            language or self._config.language,
        )

    def prepare(
        self, fields: Mapping[str, str | None], language: str | None = None
    ) -> FormPayloadResult:
        """
        Validate the JSON-carrying fields of a form submission.

        Args:
            fields: Form field name to submitted text.
            language: Diagnostic language, defaults to the configured one.

        Returns:
            FormPayloadResult with the request-ready payload and, for each
            failing field, exactly one consolidated message.
        """
        lang = resolve_language(language or self._config.language)
        result = FormPayloadResult()

        for name, value in fields.items():
            text = value or ""
            if name not in self._config.json_fields:
                result.payload[name] = text
                continue

            label = self.field_label(name, lang)
            size_message = self.check_size(label, text, lang)
            if size_message is not None:
                result.errors[name] = size_message
                continue

            outcome = self._pipeline.run(label, text)
            result.outcomes[name] = outcome
            if isinstance(outcome, RepairSuccess):
                result.payload[name] = outcome.text
            else:
                result.errors[name] = compose_diagnostic(outcome, lang)

        if result.errors:
            logger.info(
                "Form submission blocked, invalid JSON fields: %s",
                ", ".join(sorted(result.errors)),
            )
        return result

    def prepare_or_raise(
        self, fields: Mapping[str, str | None], language: str | None = None
    ) -> dict[str, str]:
        """Like prepare(), but raise FieldValidationError when any field fails."""
        result = self.prepare(fields, language)
        if not result.ok:
            raise FieldValidationError(
                message="One or more JSON fields are invalid",
                details={"fields": result.errors},
            )
        return result.payload
