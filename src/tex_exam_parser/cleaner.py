"""Display cleanup of exercise text.

Removes a small allow-list of cosmetic LaTeX markup so prompts, options and
solutions read as plain text. Math and TikZ markup is left alone.
"""

from __future__ import annotations

import re

from .constants import BARE_MACROS, LAYOUT_ENVIRONMENTS, SPACING_MACROS, UNWRAP_MACROS
from .scanner import match_brace_run

LAYOUT_PATTERN: re.Pattern = re.compile(
    r"\\(?:begin|end)\s*\{\s*(?:"
    + "|".join(re.escape(env) for env in LAYOUT_ENVIRONMENTS)
    + r")\s*\}"
)
SPACING_PATTERN: re.Pattern = re.compile(
    r"\\(?:" + "|".join(SPACING_MACROS) + r")\*?\s*\{[^{}]*\}"
)
BARE_PATTERN: re.Pattern = re.compile(r"\\(?:" + "|".join(BARE_MACROS) + r")(?![A-Za-z])")
UNWRAP_PATTERN: re.Pattern = re.compile(
    r"\\(?:" + "|".join(sorted(UNWRAP_MACROS, key=len, reverse=True)) + r")\s*\{"
)
LINE_BREAK_PATTERN: re.Pattern = re.compile(r"\\\\(?:\[[^\]]*\])?")
WHITESPACE_PATTERN: re.Pattern = re.compile(r"\s+")


def unwrap_macros(text: str, pattern: re.Pattern = UNWRAP_PATTERN) -> str:
    r"""Replace ``\macro{inner}`` by ``inner`` for every match of ``pattern``.

    The argument is matched by brace depth, so nested groups survive intact.
    A macro whose argument never closes is left as written.
    """
    pos = 0
    while True:
        m = pattern.search(text, pos)
        if not m:
            return text
        brace = m.end() - 1
        end = match_brace_run(text, brace)
        if end is None:
            pos = m.end()
            continue
        text = text[: m.start()] + text[brace + 1 : end - 1] + text[end:]
        pos = m.start()


def _clean_pass(text: str) -> str:
    text = LAYOUT_PATTERN.sub("", text)
    text = SPACING_PATTERN.sub("", text)
    text = unwrap_macros(text)
    text = BARE_PATTERN.sub("", text)
    text = LINE_BREAK_PATTERN.sub(" ", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def clean_latex_content(text: str | None) -> str:
    """Strip cosmetic markup and collapse whitespace.

    Passes are repeated until the text stops changing, so cleaning an
    already cleaned string returns it unchanged.
    """
    if not text:
        return ""
    while True:
        cleaned = _clean_pass(text)
        if cleaned == text:
            return cleaned
        text = cleaned
