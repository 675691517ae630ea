"""Tests for the ExamParser."""

from __future__ import annotations

from pathlib import Path

import pytest

from tex_exam_parser import (
    ExamParser,
    ExerciseKind,
    ParserConfig,
    extract_exercises,
    parse_document,
    parse_file,
    parse_text,
)


def parse_one(latex: str, config: ParserConfig | None = None):
    records = parse_text(latex, config)
    assert len(records) == 1
    return records[0]


def wrap(body: str) -> str:
    return "\\begin{ex}\n" + body + "\n\\end{ex}"


class TestClassification:
    """Tests for answer mechanism detection."""

    def test_true_false_takes_precedence(self, parser: ExamParser):
        """A block with both choice macros is a true/false set."""
        assert parser.classify("Q \\choice {x}{y} \\choiceTF {a}{b}") == ExerciseKind.TRUE_FALSE

    def test_choice_before_short_answer(self, parser: ExamParser):
        assert parser.classify("Q \\shortans{1} \\choice {a}{b}") == ExerciseKind.MULTIPLE_CHOICE

    def test_short_answer(self, parser: ExamParser):
        assert parser.classify("Q \\shortans{1}") == ExerciseKind.SHORT_ANSWER

    def test_unknown(self, parser: ExamParser):
        assert parser.classify("Prove that $1 + 1 = 2$.") == ExerciseKind.UNKNOWN

    def test_precedence_in_parsed_record(self):
        record = parse_one(wrap("Q \\choice {x}{y} \\choiceTF {a}{b}"))
        assert record.kind == ExerciseKind.TRUE_FALSE
        assert record.statements == ("a", "b")
        assert record.prompt_raw == "Q \\choice {x}{y}"


class TestMultipleChoice:
    """Tests for multiple choice extraction."""

    def test_brace_options(self, mcq_latex: str):
        record = parse_one(mcq_latex)
        assert record.kind == ExerciseKind.MULTIPLE_CHOICE
        assert record.prompt == "Which number is prime?"
        assert record.prompt_raw == "Which number is prime?"
        assert record.choices == ("$4$", "$6$", "$7$", "$9$")
        assert record.correct_index == 2
        assert record.statements is None
        assert record.answer is None

    def test_lettered_fallback_matches_brace_options(self, mcq_latex: str, lettered_mcq_latex: str):
        braced = parse_one(mcq_latex)
        lettered = parse_one(lettered_mcq_latex)
        assert lettered.kind == braced.kind
        assert lettered.choices == braced.choices
        assert lettered.correct_index == braced.correct_index == 2
        assert lettered.prompt == braced.prompt
        assert lettered.solution == braced.solution

    def test_first_correct_wins(self):
        record = parse_one(wrap("Q \\choice {\\True a}{\\True b}{c}"))
        assert record.correct_index == 0
        assert record.choices == ("a", "b", "c")

    def test_no_correct_marker(self):
        record = parse_one(wrap("Q \\choice {a}{b}"))
        assert record.correct_index is None
        assert record.has_answer() is False

    def test_marker_is_case_insensitive(self):
        record = parse_one(wrap("Q \\choice {a}{\\TRUE b}"))
        assert record.correct_index == 1

    def test_marker_requires_whitespace(self):
        record = parse_one(wrap("Q \\choice {\\Truea}{b}"))
        assert record.correct_index is None
        assert record.choices[0] == "\\Truea"

    def test_at_most_four_options(self):
        record = parse_one(wrap("Q \\choice {a}{b}{c}{d}{e}"))
        assert record.choices == ("a", "b", "c", "d")

    def test_options_are_cleaned(self):
        record = parse_one(wrap("Q \\choice {\\textbf{bold}}{two\\\\lines}"))
        assert record.choices == ("bold", "two lines")

    def test_nested_braces_in_option(self):
        record = parse_one(wrap("Q \\choice {$\\frac{1}{\\sqrt{2}}$}{b}"))
        assert record.choices[0] == "$\\frac{1}{\\sqrt{2}}$"

    def test_escaped_braces_in_option(self):
        record = parse_one(wrap("Q \\choice {\\True $\\left\\{ x > 0 \\right.$}{$\\{1\\}$}"))
        assert record.choices == ("$\\left\\{ x > 0 \\right.$", "$\\{1\\}$")
        assert record.correct_index == 0

    def test_single_group_replaced_by_labels(self):
        """One brace group is below the threshold, so labels win when present."""
        record = parse_one(wrap("Q \\choice {only} A. x B. y"))
        assert record.choices == ("x", "y")

    def test_single_group_kept_without_labels(self):
        record = parse_one(wrap("Q \\choice {only}"))
        assert record.choices == ("only",)

    def test_options_stop_at_solution(self):
        record = parse_one(wrap("Q \\choice {a}{b} \\loigiai{sol {x}}"))
        assert record.choices == ("a", "b")
        assert record.solution == "sol {x}"

    def test_choice_prefix_only(self):
        """A longer command starting with the macro name yields no options."""
        record = parse_one(wrap("Use \\choices here"))
        assert record.kind == ExerciseKind.MULTIPLE_CHOICE
        assert record.choices == ()
        assert record.prompt == "Use \\choices here"


class TestTrueFalse:
    """Tests for true/false extraction."""

    def test_statements_and_solution_diagram(self, true_false_latex: str):
        record = parse_one(true_false_latex)
        assert record.kind == ExerciseKind.TRUE_FALSE
        assert record.prompt == "Consider the function $f(x) = x^2$."
        assert record.statements == (
            "$f$ is odd",
            "$f(2) = 4$",
            "$f$ is decreasing on $\\mathbb{R}$",
        )
        assert record.truth == (False, True, False)
        assert record.solution == "The graph is a parabola."
        assert record.solution_diagram_source.startswith("\\begin{tikzpicture}")
        assert record.solution_diagram_source.endswith("\\end{tikzpicture}")
        assert record.diagram_source is None

    def test_lettered_fallback(self):
        record = parse_one(wrap("Q \\choiceTF\na) \\True one\nb) two"))
        assert record.statements == ("one", "two")
        assert record.truth == (True, False)

    def test_every_statement_gets_a_verdict(self):
        record = parse_one(wrap("Q \\choiceTF {a}{b}{c}{d}"))
        assert record.truth == (False, False, False, False)
        assert len(record.truth) == len(record.statements)

    def test_single_group_kept(self):
        record = parse_one(wrap("Q \\choiceTF {\\True only} a) x b) y"))
        assert record.statements == ("only",)
        assert record.truth == (True,)


class TestShortAnswer:
    """Tests for short answer extraction."""

    def test_answer(self, short_answer_latex: str):
        record = parse_one(short_answer_latex)
        assert record.kind == ExerciseKind.SHORT_ANSWER
        assert record.prompt == "Compute $2 + 3$."
        assert record.prompt_raw == "Compute $\\textbf{2} + 3$."
        assert record.answer == "$5$"

    def test_optional_argument(self):
        record = parse_one(wrap("Q \\shortans[oly]{$3$}"))
        assert record.answer == "$3$"
        assert record.prompt == "Q"

    def test_nested_answer(self):
        record = parse_one(wrap("Q \\shortans{$\\dfrac{1}{2}$}"))
        assert record.answer == "$\\dfrac{1}{2}$"

    def test_missing_argument(self):
        record = parse_one(wrap("Q \\shortans"))
        assert record.kind == ExerciseKind.SHORT_ANSWER
        assert record.answer == ""
        assert record.prompt == "Q \\shortans"


class TestUnclassified:
    """Tests for blocks without a mechanism macro."""

    def test_prompt_only(self):
        record = parse_one(wrap("Prove that \\textit{every} prime $p > 2$ is odd. \\loigiai{Because.}"))
        assert record.kind == ExerciseKind.UNKNOWN
        assert record.payload is None
        assert record.prompt == "Prove that every prime $p > 2$ is odd."
        assert record.solution == "Because."


class TestDiagramsAndSolutions:
    """Tests for diagram and solution extraction."""

    def test_question_diagram(self):
        tikz = "\\begin{tikzpicture}\\draw (0,0) -- (1,0);\\end{tikzpicture}"
        record = parse_one(wrap(f"Look: {tikz} \\choice {{a}}{{b}}"))
        assert record.diagram_source == tikz
        assert record.choices == ("a", "b")

    def test_unclosed_diagram_is_absent(self):
        record = parse_one(wrap("\\begin{tikzpicture} \\draw; \\choice {a}{b}"))
        assert record.diagram_source is None

    def test_unclosed_diagram_before_complete_one(self):
        tikz = "\\begin{tikzpicture}\\draw;\\end{tikzpicture}"
        record = parse_one(wrap(f"Q \\begin{{tikzpicture}} broken {tikz}"))
        assert record.diagram_source == tikz

    def test_unclosed_solution_diagram_before_complete_one(self):
        tikz = "\\begin{tikzpicture}\\draw;\\end{tikzpicture}"
        record = parse_one(wrap(f"Q \\loigiai{{See \\begin{{tikzpicture}} broken {tikz}}}"))
        assert record.solution_diagram_source == tikz
        assert record.solution == "See \\begin{tikzpicture} broken"
        assert record.diagram_source is None

    def test_first_diagram_only(self):
        first = "\\begin{tikzpicture}1\\end{tikzpicture}"
        second = "\\begin{tikzpicture}2\\end{tikzpicture}"
        record = parse_one(wrap(f"{first} {second} Q"))
        assert record.diagram_source == first

    def test_solution_with_only_diagram(self):
        record = parse_one(wrap("Q \\loigiai{\\begin{tikzpicture}x\\end{tikzpicture}}"))
        assert record.solution == ""
        assert record.solution_diagram_source == "\\begin{tikzpicture}x\\end{tikzpicture}"
        assert record.diagram_source is None

    def test_unbalanced_solution_is_absent(self):
        record = parse_one(wrap("Q \\shortans{1} \\loigiai{open"))
        assert record.solution is None
        assert record.answer == "1"

    def test_nested_solution_braces(self):
        record = parse_one(wrap("Q \\loigiai{a {b {c}} d}"))
        assert record.solution == "a {b {c}} d"

    def test_no_solution(self, short_answer_latex: str):
        record = parse_one(short_answer_latex)
        assert record.solution is None
        assert record.solution_diagram_source is None


class TestDocumentParsing:
    """Tests for whole-document parsing."""

    def test_exam_in_order(self, exam_latex: str):
        records = parse_text(exam_latex)
        assert [r.kind for r in records] == [
            ExerciseKind.MULTIPLE_CHOICE,
            ExerciseKind.TRUE_FALSE,
            ExerciseKind.SHORT_ANSWER,
        ]

    def test_identical_exercises_get_distinct_ids(self, mcq_latex: str):
        records = parse_text(mcq_latex + mcq_latex)
        assert len(records) == 2
        assert records[0].id != records[1].id

    def test_reparse_gives_fresh_ids(self, exam_latex: str):
        first = {r.id for r in parse_text(exam_latex)}
        second = {r.id for r in parse_text(exam_latex)}
        assert first.isdisjoint(second)

    @pytest.mark.parametrize("text", ["", "no exercises at all", "\\begin{ex} unterminated"])
    def test_empty_results(self, text: str):
        assert parse_text(text) == []

    def test_unterminated_block_excluded(self, mcq_latex: str):
        records = parse_text(mcq_latex + "\\begin{ex} Which? \\choice {a}{b}")
        assert len(records) == 1

    def test_record_count_matches_blocks(self, exam_latex: str):
        text = exam_latex + "\\begin{ex}\\end{ex}\n%\\begin{ex} commented \\end{ex}\n"
        assert len(parse_text(text)) == len(extract_exercises(text)) == 4

    def test_commented_marker_inside_block(self):
        """A commented-out close marker inside a block is made live."""
        text = "\\begin{ex}\nA\n% \\end{ex}\nB\n\\end{ex}"
        assert extract_exercises(text) == ["A"]

    def test_open_marker_in_trailing_comment(self):
        """Text after a mid-line comment marker does not start an exercise."""
        text = "real % c \\begin{ex} draft\n\\begin{ex}\nQ \\shortans{1}\n\\end{ex}"
        record = parse_one(text)
        assert record.prompt == "Q"
        assert record.answer == "1"


class TestExamParserFiles:
    """Tests for file-based parsing."""

    def test_parse_file(self, exam_file: Path):
        result = parse_file(exam_file)
        assert result.filename == "exam.tex"
        assert len(result.exercises) == 3

    def test_parser_with_path(self, exam_file: Path):
        result = ExamParser(exam_file).parse()
        assert result.to_dict()["total_exercises"] == 3

    def test_text_without_path(self):
        result = ExamParser(text=wrap("Q")).parse()
        assert result.filename == "<text>"

    def test_requires_input(self):
        with pytest.raises(ValueError):
            ExamParser()

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            parse_file(tmp_path / "missing.tex")

    def test_parse_document_missing_returns_none(self, tmp_path: Path):
        assert parse_document(tmp_path / "missing.tex") is None

    def test_bom_is_ignored(self, tmp_path: Path):
        path = tmp_path / "bom.tex"
        path.write_bytes("\ufeff".encode("utf-8") + wrap("Q \\shortans{1}").encode("utf-8"))
        result = parse_file(path)
        assert result.exercises[0].prompt == "Q"


class TestParserConfig:
    """Tests for configurable vocabulary."""

    def test_max_choices(self, mcq_latex: str):
        record = parse_one(mcq_latex, ParserConfig(max_choices=2))
        assert record.choices == ("$4$", "$6$")
        assert record.correct_index is None

    def test_custom_environment_and_solution(self):
        config = ParserConfig(exercise_env="bt", solution_macro="solution")
        record = parse_one("\\begin{bt}Q \\choice {a}{b} \\solution{S}\\end{bt}", config)
        assert record.choices == ("a", "b")
        assert record.solution == "S"
