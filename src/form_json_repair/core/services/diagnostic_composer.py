"""
Operator-facing messages for fields the repair pipeline could not recover.

Each failing field gets exactly one consolidated message: what the parser
objected to and where, followed by the conventions the automatic repairs
already tried to enforce. The console is Arabic-first, so every message
exists in English and Arabic.
"""

from __future__ import annotations

import logging

from form_json_repair.core.domain.repair_models import (
    FailureKind,
    ParseError,
    RepairFailure,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "ar")

_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "empty": "{label}: this field is required. Enter a JSON value, for example [] or {{}}.",
        "header": "{label}: the text is not valid JSON and could not be repaired automatically.",
        "error": "Parser error: {message} at {location}.",
        "error_no_location": "Parser error: {message}.",
        "location": "line {line}, column {column} (character {offset})",
        "checklist": "Check that the text follows these conventions:",
        "too_large": "{label}: the text is too large ({size} bytes, the limit is {limit} bytes).",
    },
    "ar": {
        "empty": "{label}: هذا الحقل مطلوب. أدخل قيمة JSON، مثل [] أو {{}}.",
        "header": "{label}: النص ليس بصيغة JSON صحيحة وتعذّر إصلاحه تلقائياً.",
        "error": "خطأ في التحليل: {message} عند {location}.",
        "error_no_location": "خطأ في التحليل: {message}.",
        "location": "السطر {line}، العمود {column} (الحرف {offset})",
        "checklist": "تأكد من أن النص يتبع القواعد التالية:",
        "too_large": "{label}: النص كبير جداً ({size} بايت، والحد الأقصى {limit} بايت).",
    },
}

CONVENTIONS: dict[str, tuple[str, str, str]] = {
    "en": (
        'Use double quotes (") around every key and text value.',
        "Separate properties and array items with commas.",
        "Do not leave a comma before a closing } or ].",
    ),
    "ar": (
        'استخدم علامات التنصيص المزدوجة (") حول كل مفتاح وكل قيمة نصية.',
        "افصل بين الخصائص وعناصر المصفوفة بفواصل.",
        "لا تترك فاصلة قبل } أو ] الختامية.",
    ),
}


def resolve_language(language: str | None) -> str:
    if language is None:
        return DEFAULT_LANGUAGE
    if language not in SUPPORTED_LANGUAGES:
        logger.warning(
            "Unsupported diagnostic language %r, falling back to %s",
            language,
            DEFAULT_LANGUAGE,
        )
        return DEFAULT_LANGUAGE
    return language


def _describe_error(error: ParseError, messages: dict[str, str]) -> str:
    if error.line is None or error.column is None:
        return messages["error_no_location"].format(message=error.message)
    location = messages["location"].format(
        line=error.line, column=error.column, offset=error.offset
    )
    return messages["error"].format(message=error.message, location=location)


def _excerpt(text: str, error: ParseError) -> list[str]:
    """The offending line of the parsed candidate with a caret under the column."""
    if error.line is None or error.column is None:
        return []
    # json counts lines by "\n" only, so split the same way
    lines = text.split("\n")
    if error.line > len(lines):
        return []
    line = lines[error.line - 1].rstrip("\r")
    return [f"    {line}", "    " + " " * (error.column - 1) + "^"]


def compose_diagnostic(failure: RepairFailure, language: str | None = None) -> str:
    """
    Build the single message shown next to a field that failed repair.

    Args:
        failure: The pipeline's failure outcome.
        language: "en" or "ar"; anything else falls back to English.

    Returns:
        A multi-line, human-readable message.
    """
    lang = resolve_language(language)
    messages = _MESSAGES[lang]

    if failure.kind is FailureKind.EMPTY_INPUT:
        return messages["empty"].format(label=failure.field_label)

    # The last attempt is the one the final error was reported against
    parsed_text = failure.attempts[-1].text
    lines = [
        messages["header"].format(label=failure.field_label),
        _describe_error(failure.final_error, messages),
        *_excerpt(parsed_text, failure.final_error),
        messages["checklist"],
    ]
    lines.extend(f"  - {item}" for item in CONVENTIONS[lang])
    return "\n".join(lines)


def compose_size_message(
    field_label: str, size: int, limit: int, language: str | None = None
) -> str:
    """Message for a field rejected before repair because it is too large."""
    messages = _MESSAGES[resolve_language(language)]
    return messages["too_large"].format(label=field_label, size=size, limit=limit)
