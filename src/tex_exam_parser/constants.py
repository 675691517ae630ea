"""Constants for LaTeX exam parsing."""

import re

# Default macro vocabulary of the ex_test exercise format
EXERCISE_ENV: str = "ex"
DIAGRAM_ENV: str = "tikzpicture"
SOLUTION_MACRO: str = "loigiai"
CHOICE_MACRO: str = "choice"
TRUE_FALSE_MACRO: str = "choiceTF"
SHORT_ANSWER_MACRO: str = "shortans"
CORRECT_MARKER: str = "True"

# Option / statement limits and fallback labels
MAX_CHOICES: int = 4
MAX_STATEMENTS: int = 4
CHOICE_LABELS: str = "ABCD"
STATEMENT_LABELS: str = "abcd"

# Fewer brace groups than this triggers the lettered-list fallback
MIN_CHOICE_GROUPS: int = 2
MIN_STATEMENT_GROUPS: int = 1

# Comment prefix stripped from lines inside exercise spans
COMMENT_PREFIX_PATTERN: re.Pattern = re.compile(r"^\s*%+\s?")

# Line endings accepted by the comment normalizer, captured so they survive a split
LINE_SPLIT_PATTERN: re.Pattern = re.compile(r"(\r\n|\r|\n)")

# Start of a trailing comment: a percent sign not escaped by a backslash
COMMENT_START_PATTERN: re.Pattern = re.compile(r"(?<!\\)%")

# Content cleaner allow-list
LAYOUT_ENVIRONMENTS: list[str] = ["center", "align", "align*", "flushleft", "flushright"]
SPACING_MACROS: list[str] = ["vspace", "hspace"]
BARE_MACROS: list[str] = ["hline", "noindent", "par"]
UNWRAP_MACROS: list[str] = ["textbf", "textit", "text", "emph"]

# Short codes used in CLI summaries
KIND_CODES: dict[str, str] = {
    "multiple_choice": "mc",
    "true_false": "tf",
    "short_answer": "short",
    "unknown": "unk",
}

# Markdown assembly labels
MARKDOWN_TITLE: str = "MULTIPLE CHOICE EXERCISES"
MARKDOWN_AUTHOR_LABEL: str = "Compiled by"
MARKDOWN_EXERCISE_LABEL: str = "Question"
MARKDOWN_ANSWER_LABEL: str = "Answer"
MARKDOWN_SOLUTION_LABEL: str = "Solution"
MARKDOWN_TRUE_LABEL: str = "True"
MARKDOWN_FALSE_LABEL: str = "False"
HEADING_COLOR: str = "#0d9488"
CORRECT_COLOR: str = "#dc2626"
DEFAULT_COLOR: str = "#000000"


def env_pattern(marker: str, name: str) -> re.Pattern:
    r"""Build a whitespace tolerant ``\begin{name}`` / ``\end{name}`` pattern."""
    return re.compile(r"\\" + marker + r"\s*\{\s*" + re.escape(name) + r"\s*\}")


def macro_pattern(name: str) -> re.Pattern:
    """Build a pattern matching ``\\name`` as a whole control word."""
    return re.compile(r"\\" + re.escape(name) + r"(?![A-Za-z])")
