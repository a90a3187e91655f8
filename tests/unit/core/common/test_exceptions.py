from form_json_repair.core.common.exceptions import (
    ConfigurationError,
    FieldTooLargeError,
    FieldValidationError,
    FormJsonRepairError,
    InvalidRequestError,
)


def test_base_error() -> None:
    error = FormJsonRepairError("Something went wrong", details={"field": "x"})

    assert str(error) == "Something went wrong"
    assert error.status_code == 500
    assert error.to_dict() == {
        "error": {
            "message": "Something went wrong",
            "type": "FormJsonRepairError",
            "details": {"field": "x"},
        }
    }


def test_extra_attributes_are_serialized() -> None:
    error = InvalidRequestError("Bad language", param="language")

    assert error.param == "language"
    assert error.to_dict()["error"]["param"] == "language"


def test_status_codes() -> None:
    assert ConfigurationError().status_code == 400
    assert InvalidRequestError().status_code == 400
    assert FieldValidationError().status_code == 422
    assert FieldTooLargeError().status_code == 413


def test_default_messages() -> None:
    assert ConfigurationError().message == "Configuration error"
    assert FieldValidationError().details == {}
    assert isinstance(FieldTooLargeError(), FormJsonRepairError)
