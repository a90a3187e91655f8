from __future__ import annotations

import logging

from fastapi import FastAPI

from form_json_repair import __version__
from form_json_repair.core.app.controllers.repair_controller import router
from form_json_repair.core.app.exception_handlers import register_exception_handlers
from form_json_repair.core.config.app_config import AppConfig
from form_json_repair.core.services.form_payload_service import FormPayloadService
from form_json_repair.core.services.repair_pipeline import RepairPipeline

logger = logging.getLogger(__name__)


def build_app(
    config: AppConfig | None = None, pipeline: RepairPipeline | None = None
) -> FastAPI:
    """Create the FastAPI application serving the JSON field endpoints.

    Args:
        config: Application configuration, defaults to AppConfig()
        pipeline: Repair pipeline to use, defaults to the standard combinations

    Returns:
        The configured FastAPI application
    """
    cfg = config or AppConfig()
    repair_pipeline = pipeline or RepairPipeline()

    app = FastAPI(title="form-json-repair", version=__version__)
    app.state.config = cfg
    app.state.pipeline = repair_pipeline
    app.state.form_service = FormPayloadService(cfg.repair, repair_pipeline)

    register_exception_handlers(app)
    app.include_router(router)

    logger.debug(
        "Application built with JSON fields: %s",
        ", ".join(cfg.repair.json_fields) or "(none)",
    )
    return app
