"""LaTeX Exam Parser - Main parser implementation."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .cleaner import clean_latex_content
from .config import ParserConfig
from .constants import env_pattern, macro_pattern
from .models import (
    ExerciseKind,
    ExerciseRecord,
    MultipleChoice,
    ParsedDocument,
    Payload,
    ShortAnswer,
    TrueFalseSet,
)
from .scanner import extract_blocks, extract_brace_groups, read_brace_group, split_enumerated_list

logger = logging.getLogger(__name__)


def read_tex(tex_path: Path | str) -> str:
    """Read a LaTeX file as text, tolerating a BOM and stray bytes."""
    return Path(tex_path).read_bytes().decode("utf-8-sig", errors="replace")


class ExamParser:
    """Parser for LaTeX exam documents written with ``ex`` environments.

    Extracts each exercise's prompt, answer mechanism, TikZ diagrams and
    worked solution. Malformed markup degrades to partial records instead of
    raising.

    Args:
        tex_path: Path to the .tex file (optional when text is given)
        text: Document text, read from tex_path when omitted
        config: Macro vocabulary and limits
    """

    def __init__(
        self,
        tex_path: Path | str | None = None,
        text: str | None = None,
        config: ParserConfig | None = None,
    ) -> None:
        if tex_path is None and text is None:
            raise ValueError("Either tex_path or text is required")
        self.tex_path = Path(tex_path) if tex_path is not None else None
        self.text = text if text is not None else read_tex(self.tex_path)
        self.config = config or ParserConfig()
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        c = self.config
        self._tf_token = "\\" + c.true_false_macro
        self._choice_token = "\\" + c.choice_macro
        self._short_token = "\\" + c.short_answer_macro

        optional_arg = r"\s*(?:\[[^\]]*\])?"
        self._tf_re = re.compile(
            r"\\" + re.escape(c.true_false_macro) + r"(?![A-Za-z])" + optional_arg + r"\s*"
        )
        self._choice_re = macro_pattern(c.choice_macro)
        self._short_re = re.compile(
            r"\\" + re.escape(c.short_answer_macro) + r"(?![A-Za-z])" + optional_arg
        )
        self._solution_re = macro_pattern(c.solution_macro)
        self._section_stop = re.compile(
            macro_pattern(c.solution_macro).pattern + "|" + env_pattern("end", c.exercise_env).pattern
        )
        # The body may not cross another open marker, so an unclosed fragment
        # never swallows the complete diagram after it.
        diagram_begin = env_pattern("begin", c.diagram_env).pattern
        self._diagram_re = re.compile(
            diagram_begin
            + r"(?:(?!" + diagram_begin + r").)*?"
            + env_pattern("end", c.diagram_env).pattern,
            re.DOTALL,
        )
        self._marker_re = re.compile(r"^\\" + re.escape(c.correct_marker) + r"\s+", re.IGNORECASE)

    def parse(self) -> ParsedDocument:
        """Parse the document and return a ParsedDocument object."""
        filename = self.tex_path.name if self.tex_path else "<text>"
        return ParsedDocument(filename=filename, exercises=self.parse_exercises())

    def extract_exercises(self) -> list[str]:
        """Return the raw interiors of all well-formed exercise blocks."""
        return extract_blocks(self.text, self.config.exercise_env)

    def parse_exercises(self) -> list[ExerciseRecord]:
        """Parse every exercise block, in document order."""
        return [self.parse_exercise(block) for block in self.extract_exercises()]

    def classify(self, content: str) -> ExerciseKind:
        """Pick the answer mechanism of a block.

        The true/false macro is checked first because its name contains the
        generic choice macro.
        """
        if self._tf_token in content:
            return ExerciseKind.TRUE_FALSE
        if self._choice_token in content:
            return ExerciseKind.MULTIPLE_CHOICE
        if self._short_token in content:
            return ExerciseKind.SHORT_ANSWER
        return ExerciseKind.UNKNOWN

    def parse_exercise(self, content: str) -> ExerciseRecord:
        """Build one ExerciseRecord from a block interior."""
        kind = self.classify(content)
        payload: Payload | None = None
        if kind == ExerciseKind.TRUE_FALSE:
            prompt_raw, payload = self._parse_true_false(content)
        elif kind == ExerciseKind.MULTIPLE_CHOICE:
            prompt_raw, payload = self._parse_multiple_choice(content)
        elif kind == ExerciseKind.SHORT_ANSWER:
            prompt_raw, payload = self._parse_short_answer(content)
        else:
            prompt_raw = self._prompt_before_solution(content)

        solution, solution_diagram, solution_span = self._extract_solution(content)
        diagram = self._extract_diagram(content, exclude=solution_span)

        return ExerciseRecord(
            kind=kind,
            prompt=clean_latex_content(prompt_raw),
            prompt_raw=prompt_raw,
            payload=payload,
            diagram_source=diagram,
            solution=solution,
            solution_diagram_source=solution_diagram,
        )

    def _prompt_before_solution(self, content: str) -> str:
        m = self._solution_re.search(content)
        return (content[: m.start()] if m else content).strip()

    def _slice_after_macro(self, content: str, start: int) -> str:
        """Text after a mechanism macro up to the solution or block end."""
        section = content[start:]
        stop = self._section_stop.search(section)
        if stop:
            section = section[: stop.start()]
        return section.strip()

    def _strip_correct_marker(self, text: str) -> tuple[str, bool]:
        m = self._marker_re.match(text)
        if m:
            return text[m.end() :].strip(), True
        return text.strip(), False

    def _collect_items(
        self,
        section: str,
        max_items: int,
        min_groups: int,
        labels: str,
    ) -> list[tuple[str, bool]]:
        """Brace groups first, lettered labels when too few groups are found."""
        items, _ = extract_brace_groups(section, max_items, stop=self._section_stop)
        if len(items) < min_groups:
            lettered = split_enumerated_list(section, labels, max_items)
            logger.debug(
                "Only %d brace group(s), lettered fallback found %d item(s)",
                len(items),
                len(lettered),
            )
            if lettered or not items:
                items = lettered
        return [self._strip_correct_marker(item) for item in items]

    def _parse_multiple_choice(self, content: str) -> tuple[str, MultipleChoice]:
        m = self._choice_re.search(content)
        if not m:
            logger.debug("Choice macro is only a prefix of another command")
            return content.strip(), MultipleChoice()

        prompt_raw = content[: m.start()].strip()
        section = self._slice_after_macro(content, m.end())
        options = self._collect_items(
            section,
            self.config.max_choices,
            self.config.min_choice_groups,
            self.config.choice_labels,
        )

        correct_index = None
        for i, (_, is_correct) in enumerate(options):
            if is_correct:
                correct_index = i
                break
        choices = tuple(clean_latex_content(text) for text, _ in options)
        return prompt_raw, MultipleChoice(choices=choices, correct_index=correct_index)

    def _parse_true_false(self, content: str) -> tuple[str, TrueFalseSet]:
        m = self._tf_re.search(content)
        if not m:
            logger.debug("True/false macro is only a prefix of another command")
            return content.strip(), TrueFalseSet()

        prompt_raw = content[: m.start()].strip()
        section = self._slice_after_macro(content, m.end())
        items = self._collect_items(
            section,
            self.config.max_statements,
            self.config.min_statement_groups,
            self.config.statement_labels,
        )
        return prompt_raw, TrueFalseSet(
            statements=tuple(clean_latex_content(text) for text, _ in items),
            truth=tuple(is_true for _, is_true in items),
        )

    def _parse_short_answer(self, content: str) -> tuple[str, ShortAnswer]:
        m = self._short_re.search(content)
        group = read_brace_group(content, m.end()) if m else None
        if group is None:
            logger.debug("Short answer macro without a balanced argument")
            return content.strip(), ShortAnswer()
        return content[: m.start()].strip(), ShortAnswer(answer=clean_latex_content(group[0].strip()))

    def _extract_solution(self, content: str) -> tuple[str | None, str | None, tuple[int, int] | None]:
        """Find the solution argument and split off its diagram.

        Returns:
            (cleaned solution, solution diagram, span of the whole macro call)
        """
        for m in self._solution_re.finditer(content):
            group = read_brace_group(content, m.end())
            if group is None:
                continue
            body, end = group
            body = body.strip()
            diagram = None
            d = self._diagram_re.search(body)
            if d:
                diagram = d.group(0)
                body = (body[: d.start()] + body[d.end() :]).strip()
            return clean_latex_content(body), diagram, (m.start(), end)
        return None, None, None

    def _extract_diagram(self, content: str, exclude: tuple[int, int] | None = None) -> str | None:
        """First complete diagram environment outside the excluded span."""
        if exclude is None:
            parts = [content]
        else:
            parts = [content[: exclude[0]], content[exclude[1] :]]
        for part in parts:
            m = self._diagram_re.search(part)
            if m:
                return m.group(0)
        return None


def parse_text(text: str, config: ParserConfig | None = None) -> list[ExerciseRecord]:
    """Parse LaTeX text into exercise records, in document order."""
    return ExamParser(text=text, config=config).parse_exercises()


def extract_exercises(text: str, config: ParserConfig | None = None) -> list[str]:
    """Return the raw interiors of all well-formed exercise blocks."""
    return ExamParser(text=text, config=config).extract_exercises()


def parse_file(tex_path: Path | str, config: ParserConfig | None = None) -> ParsedDocument:
    """Parse a .tex file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    return ExamParser(tex_path, config=config).parse()


def parse_document(tex_path: Path | str, config: ParserConfig | None = None) -> ParsedDocument | None:
    """Parse a single exam file.

    Args:
        tex_path: Path to the .tex file
        config: Optional parser configuration

    Returns:
        ParsedDocument object or None if the file could not be read
    """
    try:
        return parse_file(tex_path, config)
    except OSError as e:
        logger.warning("Could not read %s: %s", tex_path, e)
        return None


def is_exam_document(tex_path: Path | str, config: ParserConfig | None = None) -> bool:
    """Check if a file is a LaTeX document with at least one exercise block.

    Args:
        tex_path: Path to the file

    Returns:
        True if the file has a .tex suffix and contains an exercise open marker
    """
    path = Path(tex_path)
    if path.suffix.lower() != ".tex":
        return False
    env = (config or ParserConfig()).exercise_env
    try:
        text = read_tex(path)
    except OSError:
        return False
    return env_pattern("begin", env).search(text) is not None


def scan_directory(
    directory: Path | str,
    recursive: bool = True,
    config: ParserConfig | None = None,
) -> list[Path]:
    """Scan a directory for LaTeX exam files.

    Args:
        directory: Directory to scan
        recursive: Whether to scan subdirectories

    Returns:
        Sorted list of .tex files containing exercise blocks
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    pattern = "**/*.tex" if recursive else "*.tex"
    return sorted(p for p in directory.glob(pattern) if is_exam_document(p, config))
