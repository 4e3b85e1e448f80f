# tests/unit/text/test_unit_placeholder.py - v1
"""Tests for text/placeholder.py - reversible code/variable masking."""

from __future__ import annotations

import pytest

from transbatch.text.placeholder import PlaceholderCodec


@pytest.fixture
def codec() -> PlaceholderCodec:
    return PlaceholderCodec()


class TestMask:
    def test_plain_text_untouched(self, codec):
        masked, table = codec.mask("Nothing to protect here.")
        assert masked == "Nothing to protect here."
        assert table == {}

    def test_inline_code(self, codec):
        masked, table = codec.mask("Run `npm install` first")
        assert masked == "Run __CODE_0__ first"
        assert table == {"__CODE_0__": "`npm install`"}

    def test_fenced_code_block(self, codec):
        text = "Example:\n```python\nprint('hi')\n```\nDone"
        masked, table = codec.mask(text)
        assert masked == "Example:\n__CODE_0__\nDone"
        assert table["__CODE_0__"] == "```python\nprint('hi')\n```"

    def test_variable_forms(self, codec):
        masked, table = codec.mask("Hi ${user}, you have {count} items (%d new, %s)")
        assert masked == "Hi __VAR_0__, you have __VAR_1__ items (__VAR_2__ new, __VAR_3__)"
        assert list(table.values()) == ["${user}", "{count}", "%d", "%s"]

    def test_numbering_by_first_appearance(self, codec):
        masked, _ = codec.mask("`a` {x} `b` {y}")
        assert masked == "__CODE_0__ __VAR_0__ __CODE_1__ __VAR_1__"

    def test_variables_inside_code_stay_in_code(self, codec):
        masked, table = codec.mask("Use `{name}` literally")
        assert masked == "Use __CODE_0__ literally"
        assert table == {"__CODE_0__": "`{name}`"}

    def test_preserve_code_disabled(self):
        masked, table = PlaceholderCodec(preserve_code=False).mask("Run `cmd` as {user}")
        assert masked == "Run `cmd` as __VAR_0__"
        assert table == {"__VAR_0__": "{user}"}


class TestRoundTrip:
    @pytest.mark.parametrize("text", [
        "",
        "plain",
        "Mix `code` with ${var} and {other} and %s",
        "```\nblock {x}\n```\ntext %d",
        "Literal __CODE_0__ and __VAR_3__ in input, plus `real`",
        "Unbalanced ` backtick and { brace",
    ])
    def test_unmask_inverts_mask(self, codec, text):
        masked, table = codec.mask(text)
        assert codec.unmask(masked, table) == text

    def test_unmask_after_translation(self, codec):
        masked, table = codec.mask("Hello {name}, run `ls`")
        translated = masked.replace("Hello", "Hola").replace("run", "ejecuta")
        assert codec.unmask(translated, table) == "Hola {name}, ejecuta `ls`"

    def test_unmask_does_not_rescan_restored_spans(self):
        table = {"__VAR_0__": "__VAR_1__", "__VAR_1__": "x"}
        assert PlaceholderCodec.unmask("__VAR_0__ __VAR_1__", table) == "__VAR_1__ x"

    def test_tokens_with_common_prefix(self, codec):
        text = " ".join(f"{{v{i}}}" for i in range(12))
        masked, table = codec.mask(text)
        assert "__VAR_11__" in table
        assert codec.unmask(masked, table) == text

    def test_empty_table_is_identity(self):
        assert PlaceholderCodec.unmask("__CODE_0__", {}) == "__CODE_0__"
