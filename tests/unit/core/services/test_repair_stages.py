from __future__ import annotations

import pytest

from form_json_repair.core.services.repair_stages import (
    INSERT_MISSING_COMMAS,
    NORMALIZE_QUOTES,
    STAGES,
    STRIP_TRAILING_COMMAS,
    insert_missing_commas,
    normalize_quotes,
    strip_trailing_commas,
)


class TestNormalizeQuotes:
    def test_rewrites_single_quoted_keys_and_values(self) -> None:
        assert normalize_quotes("{'a': 1, 'b': 'x'}") == '{"a": 1, "b": "x"}'

    def test_leaves_apostrophe_inside_double_quoted_string(self) -> None:
        text = '{"note": "it\'s fine", "name": "O\'Neil"}'
        assert normalize_quotes(text) == text

    def test_keeps_apostrophe_inside_single_quoted_value(self) -> None:
        assert normalize_quotes("{'note': 'it's fine'}") == '{"note": "it\'s fine"}'

    def test_escapes_double_quotes_inside_single_quoted_value(self) -> None:
        assert normalize_quotes(r"""['say "hi"']""") == r"""["say \"hi\""]"""

    def test_unescapes_backslash_single_quote(self) -> None:
        assert normalize_quotes(r"{'a': 'don\'t'}") == '{"a": "don\'t"}'

    def test_key_at_start_of_line_is_a_delimiter(self) -> None:
        assert normalize_quotes("{'a': 1\n'b': 2}") == '{"a": 1\n"b": 2}'

    def test_quote_in_the_middle_of_a_word_is_untouched(self) -> None:
        text = '{"a": rock\'n\'roll}'
        assert normalize_quotes(text) == text

    def test_unpaired_quote_is_left_as_typed(self) -> None:
        assert normalize_quotes("{'a: 1}") == "{'a: 1}"

    def test_single_quoted_value_does_not_span_lines(self) -> None:
        text = "{'a': 'x\ny'}"
        assert normalize_quotes(text) == "{\"a\": 'x\ny'}"

    def test_arabic_content_is_preserved(self) -> None:
        assert (
            normalize_quotes("[{'language_code': 'ar', 'name': 'تفاح أحمر'}]")
            == '[{"language_code": "ar", "name": "تفاح أحمر"}]'
        )

    def test_text_without_single_quotes_is_unchanged(self) -> None:
        text = '{\n  "a": [1, 2],\n  "b": {"c": null}\n}'
        assert normalize_quotes(text) == text


class TestStripTrailingCommas:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("[1, 2, 3,]", "[1, 2, 3]"),
            ('{"a": 1,\n  }', '{"a": 1}'),
            ('{"a": [1, 2,],}', '{"a": [1, 2]}'),
            ("[1,,]", "[1]"),
            ('{"a": 1},', '{"a": 1}'),
            ('{"a": 1},\n', '{"a": 1}\n'),
        ],
    )
    def test_removes_trailing_commas(self, text: str, expected: str) -> None:
        assert strip_trailing_commas(text) == expected

    def test_comma_inside_string_is_kept(self) -> None:
        text = '{"a": "x,}", "b": "[y, ]"}'
        assert strip_trailing_commas(text) == text

    def test_applying_twice_equals_applying_once(self) -> None:
        text = "[[1,, ], {'a': 2,\n},,]"
        once = strip_trailing_commas(text)
        assert strip_trailing_commas(once) == once


class TestInsertMissingCommas:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ('{"a": "x"\n"b": "y"}', '{"a": "x",\n"b": "y",}'),
            ('{"a": "x"\n}', '{"a": "x",\n}'),
            ('{"a": [1]\n"b": 2}', '{"a": [1],\n"b": 2}'),
            ('[{"x": 1}\n{"y": 2}]', '[{"x": 1},\n{"y": 2}]'),
            ('{"a": 1\n"b": 2}', '{"a": 1,\n"b": 2}'),
            ('{"a": true\n"b": null}', '{"a": true,\n"b": null}'),
            ('{"a": -1.5e3\n"b": 0}', '{"a": -1.5e3,\n"b": 0}'),
        ],
    )
    def test_inserts_comma_at_recognised_transitions(
        self, text: str, expected: str
    ) -> None:
        assert insert_missing_commas(text) == expected

    def test_string_content_shaped_like_a_transition_is_untouched(self) -> None:
        text = '{"note": "ends with } {\\"next\\"", "a": 1}'
        assert insert_missing_commas(text) == text

    def test_non_identifier_key_is_not_a_transition(self) -> None:
        text = '{"a": 1\n"b c": 2}'
        assert insert_missing_commas(text) == text

    def test_existing_commas_are_not_doubled(self) -> None:
        text = '[{"x": 1},\n{"y": 2}]'
        assert insert_missing_commas(text) == text


def test_stage_registry_names_every_stage() -> None:
    assert list(STAGES) == [
        "NormalizeQuotes",
        "StripTrailingCommas",
        "InsertMissingCommas",
    ]
    assert STAGES["NormalizeQuotes"] is NORMALIZE_QUOTES
    assert STRIP_TRAILING_COMMAS("[1,]") == "[1]"
    assert INSERT_MISSING_COMMAS.description
