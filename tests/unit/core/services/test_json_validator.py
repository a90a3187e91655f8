from __future__ import annotations

import pytest

from form_json_repair.core.domain.repair_models import ParseError
from form_json_repair.core.services.json_validator import JsonValidator, validate


@pytest.fixture
def validator() -> JsonValidator:
    return JsonValidator()


def test_valid_json_returns_parsed_value(validator: JsonValidator) -> None:
    result = validator.validate('{"a": [1, 2.5, "x"], "b": null}')

    assert result.ok
    assert result.value == {"a": [1, 2.5, "x"], "b": None}
    assert result.error is None


def test_error_carries_parser_offset_line_and_column(validator: JsonValidator) -> None:
    result = validator.validate("not json at all")

    assert not result.ok
    assert result.error == ParseError(
        message="Expecting value", offset=0, line=1, column=1
    )


def test_error_location_on_later_line(validator: JsonValidator) -> None:
    result = validator.validate('{\n  "a": 1\n  "b": 2\n}')

    assert result.error is not None
    assert result.error.message == "Expecting ',' delimiter"
    assert (result.error.offset, result.error.line, result.error.column) == (13, 3, 3)
    assert result.error.location() == "line 3, column 3"


def test_trailing_comma_is_rejected(validator: JsonValidator) -> None:
    result = validator.validate('{"a": 1,}')

    assert result.error is not None
    # newer interpreters point at the comma itself, older ones at the brace
    assert result.error.offset in (7, 8)
    assert result.error.line == 1


@pytest.mark.parametrize(
    "text, constant, offset",
    [
        ('{"a": NaN}', "NaN", 6),
        ("[1, Infinity]", "Infinity", 4),
        ("[-Infinity]", "-Infinity", 1),
    ],
)
def test_non_standard_constants_are_rejected(
    validator: JsonValidator, text: str, constant: str, offset: int
) -> None:
    result = validator.validate(text)

    assert result.error is not None
    assert constant in result.error.message
    assert result.error.offset == offset
    assert result.error.line == 1
    assert result.error.column == offset + 1


def test_constant_names_inside_strings_are_plain_text(
    validator: JsonValidator,
) -> None:
    assert validator.validate('{"a": "NaN", "b": "Infinity"}').ok


def test_excessive_nesting_is_reported_not_raised(validator: JsonValidator) -> None:
    depth = 100_000
    result = validator.validate("[" * depth + "]" * depth)

    assert result.error is not None
    assert result.error.offset is None
    assert result.error.location() is None


def test_module_level_validate_uses_strict_grammar() -> None:
    assert validate("[1, 2]").value == [1, 2]
    assert not validate("[1, 2,]").ok


def test_integer_beyond_conversion_limit_is_valid(validator: JsonValidator) -> None:
    digits = "1" * 5000
    result = validator.validate('{"sku": ' + digits + "}")

    assert result.ok
    assert str(result.value["sku"]) == digits
