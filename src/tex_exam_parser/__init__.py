"""LaTeX Exam Parser - Extract structured exercises from ex_test LaTeX exams.

Exam documents written with the ``ex`` environment mark each exercise's
answer mechanism with ``\\choice``, ``\\choiceTF`` or ``\\shortans`` and its
worked solution with ``\\loigiai``. This library recovers one record per
exercise: prompt, options or statements with their verdicts, TikZ diagram
sources and the solution text.

Basic usage:
    from tex_exam_parser import parse_text, parse_document

    # Parse text already in memory
    for exercise in parse_text(latex):
        print(f"[{exercise.kind.value}] {exercise.prompt}")
        if exercise.choices is not None:
            print(f"  Correct: {exercise.correct_index}")

    # Or parse a file
    document = parse_document("exam.tex")

    # Or use the parser directly for more control
    parser = ExamParser("exam.tex", config=ParserConfig(max_choices=5))
    document = parser.parse()
"""

from .assembler import (
    DiagramRenderer,
    DiagramSlot,
    RenderedImage,
    RenderRequest,
    build_markdown,
    collect_render_requests,
    exercise_to_markdown,
    render_diagrams,
)
from .cleaner import clean_latex_content
from .config import ParserConfig, setup_logging
from .constants import KIND_CODES
from .fixture import (
    dump_expected,
    exercise_to_fixture,
    load_fixture,
    save_fixture,
    split_exercises,
)
from .models import (
    ExerciseKind,
    ExerciseRecord,
    MultipleChoice,
    ParsedDocument,
    ShortAnswer,
    TrueFalseSet,
)
from .parser import (
    ExamParser,
    extract_exercises,
    is_exam_document,
    parse_document,
    parse_file,
    parse_text,
    scan_directory,
)
from .scanner import (
    decomment_exercise_blocks,
    extract_blocks,
    extract_brace_groups,
    read_brace_group,
    split_enumerated_list,
)

__version__ = "0.1.0"

__all__ = [
    # Main parser
    "ExamParser",
    "parse_text",
    "parse_file",
    "parse_document",
    "extract_exercises",
    # Detection & scanning
    "is_exam_document",
    "scan_directory",
    # Scanners & cleanup
    "decomment_exercise_blocks",
    "extract_blocks",
    "extract_brace_groups",
    "read_brace_group",
    "split_enumerated_list",
    "clean_latex_content",
    # Rendering & assembly
    "DiagramRenderer",
    "DiagramSlot",
    "RenderRequest",
    "RenderedImage",
    "collect_render_requests",
    "render_diagrams",
    "build_markdown",
    "exercise_to_markdown",
    # Models
    "ExerciseKind",
    "ExerciseRecord",
    "MultipleChoice",
    "TrueFalseSet",
    "ShortAnswer",
    "ParsedDocument",
    # Configuration
    "ParserConfig",
    "setup_logging",
    "KIND_CODES",
    # Fixtures (for testing)
    "dump_expected",
    "exercise_to_fixture",
    "save_fixture",
    "load_fixture",
    "split_exercises",
]
