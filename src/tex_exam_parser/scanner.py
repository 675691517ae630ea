"""Low-level scanners for exercise markup.

These functions work on plain text with explicit cursors and depth counters.
They never raise on malformed input: an unterminated span or an unbalanced
brace run ends the scan and whatever was collected so far is returned.

Usage:
    from tex_exam_parser.scanner import extract_blocks, extract_brace_groups

    for block in extract_blocks(latex):
        groups, cursor = extract_brace_groups(block, max_items=4)
"""

from __future__ import annotations

import logging
import re

from .constants import (
    COMMENT_PREFIX_PATTERN,
    COMMENT_START_PATTERN,
    EXERCISE_ENV,
    LINE_SPLIT_PATTERN,
    env_pattern,
)

logger = logging.getLogger(__name__)


def _advance_span_state(
    line: str,
    in_span: bool,
    open_re: re.Pattern,
    close_re: re.Pattern,
) -> tuple[bool, bool]:
    """Consume open/close markers on one line, left to right.

    Open markers after the start of a trailing comment are ignored.

    Returns:
        (in_span after the line, whether any span touched the line)
    """
    comment = COMMENT_START_PATTERN.search(line)
    code_end = comment.start() if comment else len(line)
    touched = in_span
    pos = 0
    while True:
        if in_span:
            m = close_re.search(line, pos)
        else:
            m = open_re.search(line, pos, code_end)
        if not m:
            return in_span, touched
        in_span = not in_span
        touched = True
        pos = m.end()


def _in_trailing_comment(text: str, pos: int) -> bool:
    """Check whether ``pos`` follows an unescaped ``%`` on its own line."""
    line_start = max(text.rfind("\n", 0, pos), text.rfind("\r", 0, pos)) + 1
    return COMMENT_START_PATTERN.search(text, line_start, pos) is not None


def decomment_exercise_blocks(text: str, env: str = EXERCISE_ENV) -> str:
    r"""Strip leading comment markers inside exercise spans only.

    A line belongs to a span when it opens one (``\begin{ex}`` found in its
    comment-stripped form, before any trailing comment) or when a span is
    still open at its start. Such lines lose their leading ``%`` run and at
    most one following space. Lines outside every span come back unchanged,
    comments and line endings included.
    """
    open_re = env_pattern("begin", env)
    close_re = env_pattern("end", env)
    # Even indexes hold lines, odd indexes the line endings between them
    parts = LINE_SPLIT_PATTERN.split(text)
    in_span = False
    for i in range(0, len(parts), 2):
        stripped = COMMENT_PREFIX_PATTERN.sub("", parts[i], count=1)
        in_span, touched = _advance_span_state(stripped, in_span, open_re, close_re)
        if touched:
            parts[i] = stripped
    return "".join(parts)


def extract_blocks(text: str, env: str = EXERCISE_ENV, normalize: bool = True) -> list[str]:
    """Return the trimmed interiors of all exercise environments in order.

    Args:
        text: Full document text
        env: Exercise environment name
        normalize: Run the comment normalizer first

    Empty interiors are skipped; a trailing open marker without a matching
    close marker is dropped. Open markers inside a trailing comment are not
    structural.
    """
    if normalize:
        text = decomment_exercise_blocks(text, env)
    open_re = env_pattern("begin", env)
    close_re = env_pattern("end", env)

    blocks: list[str] = []
    cursor = 0
    while True:
        start = open_re.search(text, cursor)
        if not start:
            break
        if _in_trailing_comment(text, start.start()):
            cursor = start.end()
            continue
        end = close_re.search(text, start.end())
        if not end:
            logger.debug("Dropping unterminated exercise at offset %d", start.start())
            break
        content = text[start.end() : end.start()].strip()
        if content:
            blocks.append(content)
        cursor = end.end()
    return blocks


def match_brace_run(text: str, pos: int) -> int | None:
    r"""Find the end of the balanced brace run opening at ``text[pos]``.

    Escaped braces such as ``\{`` are literal text and do not count.

    Returns:
        Index just past the matching close brace, or None if it never closes
    """
    depth = 1
    j = pos + 1
    while j < len(text):
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return j + 1
        j += 1
    return None


def read_brace_group(text: str, pos: int = 0) -> tuple[str, int] | None:
    """Read one brace group starting at the first non-space char at ``pos``.

    Returns:
        (inner text, index past the group) or None if there is no balanced group
    """
    while pos < len(text) and text[pos].isspace():
        pos += 1
    if pos >= len(text) or text[pos] != "{":
        return None
    end = match_brace_run(text, pos)
    if end is None:
        return None
    return text[pos + 1 : end - 1], end


def extract_brace_groups(
    text: str,
    max_items: int = 10,
    start: int = 0,
    stop: re.Pattern | None = None,
) -> tuple[list[str], int]:
    """Collect up to ``max_items`` balanced brace groups from ``text``.

    Args:
        text: Span to scan
        max_items: Maximum number of non-empty groups to return
        start: Initial cursor
        stop: Marker that ends the scan when met before an open brace

    Returns:
        (trimmed group contents, cursor after the last consumed group)
    """
    items: list[str] = []
    i = start
    while i < len(text) and len(items) < max_items:
        while i < len(text) and text[i] != "{":
            if stop is not None and stop.match(text, i):
                return items, i
            i += 2 if text[i] == "\\" else 1
        if i >= len(text):
            break
        end = match_brace_run(text, i)
        if end is None:
            logger.debug("Unbalanced brace group at offset %d", i)
            break
        raw = text[i + 1 : end - 1].strip()
        if raw:
            items.append(raw)
        i = end
    return items, min(i, len(text))


def split_enumerated_list(text: str, letters: str, max_items: int = 10) -> list[str]:
    """Split ``text`` on labels like ``A.`` or ``b)`` drawn from ``letters``.

    A label only counts at the start of the text or after whitespace. Each
    item runs to the next label and loses its own label.
    """
    label_re = re.compile(r"(^|\s)([" + re.escape(letters) + r"])[.)]")
    positions = [m.start(2) for m in label_re.finditer(text)]
    if not positions:
        return []

    parts: list[str] = []
    for k, begin in enumerate(positions):
        end = positions[k + 1] if k + 1 < len(positions) else len(text)
        chunk = text[begin:end].strip()
        chunk = re.sub(r"^[A-Za-z][.)]\s*", "", chunk, count=1).strip()
        if chunk:
            parts.append(chunk)
        if len(parts) >= max_items:
            break
    return parts
