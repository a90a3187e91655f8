from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from form_json_repair.core.common.exceptions import FormJsonRepairError

logger = logging.getLogger(__name__)


async def form_json_repair_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Render application errors with their own status code hint."""
    if not isinstance(exc, FormJsonRepairError):
        raise exc
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, exc_info=True)
    else:
        logger.info("Request rejected (%d): %s", exc.status_code, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def request_validation_error_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle malformed request bodies as 400 Bad Request."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    logger.warning("Request validation error: %s", errors)
    return JSONResponse(
        {
            "error": {
                "message": "Invalid request body",
                "type": "RequestValidationError",
                "details": {
                    "errors": [
                        {
                            "loc": list(error.get("loc", [])),
                            "msg": error.get("msg", ""),
                            "type": error.get("type", ""),
                        }
                        for error in errors
                    ]
                },
            }
        },
        status_code=400,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FormJsonRepairError, form_json_repair_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
