"""
Common exception classes for form-json-repair.

Malformed operator input is never an exception inside the repair engine; it is
represented as a ``RepairFailure`` value. The classes below cover the edges:
configuration problems, the form payload gate and the HTTP surface.
"""

from __future__ import annotations


class FormJsonRepairError(Exception):
    """Base exception class for all form-json-repair errors."""

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        *,
        status_code: int | None = None,
        **kwargs,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
            status_code: Optional HTTP status code hint for transport adapters
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code or 500
        for key, value in (kwargs or {}).items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        error_dict = {
            "message": self.message,
            "type": self.__class__.__name__,
            "details": self.details,
        }

        # Include any additional attributes that were set via kwargs
        for attr_name in dir(self):
            if (
                not attr_name.startswith("_")
                and attr_name not in ["message", "details", "status_code", "args"]
                and not callable(getattr(self, attr_name))
            ):
                error_dict[attr_name] = getattr(self, attr_name)

        return {"error": error_dict}


class ConfigurationError(FormJsonRepairError):
    """Raised when there's a configuration issue."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class InvalidRequestError(FormJsonRepairError):
    """Raised when a request is invalid."""

    def __init__(
        self, message: str = "Invalid request", details: dict | None = None, **kwargs
    ):
        super().__init__(message, details, status_code=400, **kwargs)


class FieldValidationError(FormJsonRepairError):
    """Raised when one or more JSON form fields could not be recovered."""

    def __init__(
        self,
        message: str = "Form field validation failed",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=422, **kwargs)


class FieldTooLargeError(FormJsonRepairError):
    def __init__(
        self,
        message: str = "Form field exceeds the maximum allowed size",
        details: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, details, status_code=413, **kwargs)
