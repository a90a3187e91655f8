from __future__ import annotations

import decimal
import json
import logging

from form_json_repair.core.domain.repair_models import ParseError, ParseResult
from form_json_repair.core.services.text_scanner import (
    find_outside_strings,
    line_and_column,
)

logger = logging.getLogger(__name__)


class _NonStandardConstantError(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


def _parse_int(literal: str) -> int | decimal.Decimal:
    try:
        return int(literal)
    except ValueError:
        # beyond the interpreter's int conversion limit; still a valid number
        return decimal.Decimal(literal)


def _reject_constant(name: str) -> None:
    # json.loads accepts NaN/Infinity by default; strict JSON does not
    raise _NonStandardConstantError(name)


class JsonValidator:
    """
    Strict JSON parseability check built on the standard library parser.

    The parsed value is only a proof that the text is valid; callers keep
    using the text itself so operator formatting, key order and numeric
    spelling survive untouched.
    """

    def validate(self, text: str) -> ParseResult:
        """
        Parse ``text`` under the strict JSON grammar.

        Args:
            text: Candidate text, never modified.

        Returns:
            A ParseResult holding either the parsed value or a ParseError
            with the parser's own message and location.
        """
        try:
            value = json.loads(
                text, parse_int=_parse_int, parse_constant=_reject_constant
            )
        except json.JSONDecodeError as e:
            return ParseResult(
                error=ParseError(
                    message=e.msg, offset=e.pos, line=e.lineno, column=e.colno
                )
            )
        except _NonStandardConstantError as e:
            return ParseResult(error=self._constant_error(text, e.name))
        except RecursionError:
            logger.warning("JSON nesting too deep to validate (%d chars)", len(text))
            return ParseResult(
                error=ParseError(message="Nesting depth exceeds the parser limit")
            )
        return ParseResult(value=value)

    def _constant_error(self, text: str, name: str) -> ParseError:
        message = f"Non-standard constant '{name}' is not allowed"
        offset = find_outside_strings(text, name)
        if offset is None:
            return ParseError(message=message)
        line, column = line_and_column(text, offset)
        return ParseError(message=message, offset=offset, line=line, column=column)


_default_validator = JsonValidator()


def validate(text: str) -> ParseResult:
    """Validate ``text`` with the shared stateless validator."""
    return _default_validator.validate(text)
