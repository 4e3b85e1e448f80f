# src/text/placeholder.py - v1
"""Reversible masking of code and variable spans.

Code spans (fenced ```...``` blocks and inline `...`) and variable spans
(``${name}``, ``{name}``, ``%s``/``%d``) are swapped for opaque tokens
``__CODE_n__`` / ``__VAR_n__`` before translation and restored afterwards.

Masking is a single left-to-right scan, so tokens are numbered in order of
first appearance. Token-shaped text already present in the input is masked
too; the masked string therefore contains no token-like sequence except the
ones in the table, which keeps ``unmask(*mask(t)) == t`` for any ``t``.
"""

from __future__ import annotations

import re
from typing import NamedTuple

_TOKEN_LITERAL = r"__(?:CODE|VAR)_\d+(?:__)?"
_FENCED_CODE = r"```[\s\S]*?```"
_INLINE_CODE = r"`[^`]+`"
_DOLLAR_VAR = r"\$\{[A-Za-z0-9_]+\}"
_BRACE_VAR = r"\{[A-Za-z0-9_]+\}"
_PRINTF_VAR = r"%[sd]"

# Order matters: alternatives are tried left to right at each position.
_CODE_AND_VARS_RE = re.compile(
    f"(?P<literal>{_TOKEN_LITERAL})"
    f"|(?P<code>{_FENCED_CODE}|{_INLINE_CODE})"
    f"|(?P<var>{_DOLLAR_VAR}|{_BRACE_VAR}|{_PRINTF_VAR})"
)
_VARS_ONLY_RE = re.compile(
    f"(?P<literal>{_TOKEN_LITERAL})"
    f"|(?P<var>{_DOLLAR_VAR}|{_BRACE_VAR}|{_PRINTF_VAR})"
)


class MaskResult(NamedTuple):
    masked: str
    token_table: dict[str, str]


class PlaceholderCodec:
    """Mask/unmask protected spans with an explicit token table.

    Args:
        preserve_code: Also mask code spans. Variables are always masked.
    """

    def __init__(self, preserve_code: bool = True) -> None:
        self._preserve_code = preserve_code
        self._pattern = _CODE_AND_VARS_RE if preserve_code else _VARS_ONLY_RE

    @property
    def preserve_code(self) -> bool:
        return self._preserve_code

    def mask(self, text: str) -> MaskResult:
        table: dict[str, str] = {}
        counters = {"CODE": 0, "VAR": 0}

        def _replace(match: re.Match[str]) -> str:
            kind = "CODE" if match.lastgroup == "code" else "VAR"
            token = f"__{kind}_{counters[kind]}__"
            counters[kind] += 1
            table[token] = match.group(0)
            return token

        masked = self._pattern.sub(_replace, text)
        return MaskResult(masked, table)

    @staticmethod
    def unmask(text: str, token_table: dict[str, str]) -> str:
        """Substitute every token back in one pass.

        Restored spans are not rescanned, so a span that itself looks like a
        token is never substituted twice.
        """
        if not token_table:
            return text
        keys = sorted(token_table, key=len, reverse=True)
        pattern = re.compile("|".join(re.escape(k) for k in keys))
        return pattern.sub(lambda m: token_table[m.group(0)], text)
