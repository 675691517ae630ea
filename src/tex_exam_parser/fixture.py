"""Expected-output fixtures for regression testing the parser.

A fixture pairs a ``.tex`` file with an ``.expected.yaml`` file holding the
parser output minus the random exercise ids.

Usage:
    from tex_exam_parser.fixture import dump_expected, save_fixture

    expected = dump_expected("exam.tex")
    save_fixture(expected, "exam.expected.yaml")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .config import ParserConfig
from .models import ExerciseRecord
from .parser import ExamParser


def exercise_to_fixture(exercise: ExerciseRecord) -> dict[str, Any]:
    """Dictionary form of an exercise without its identifier."""
    d = exercise.to_dict()
    d.pop("id", None)
    return d


def dump_expected(
    tex_path: Path | str | None = None,
    text: str | None = None,
    config: ParserConfig | None = None,
) -> dict[str, Any]:
    """Parse a file (or text) and return its fixture structure."""
    parser = ExamParser(tex_path, text=text, config=config)
    return {"exercises": [exercise_to_fixture(e) for e in parser.parse_exercises()]}


def save_fixture(fixture: dict[str, Any], path: Path | str) -> Path:
    """Write a fixture as YAML."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(fixture, f, allow_unicode=True, sort_keys=False, default_flow_style=False)
    return path


def load_fixture(path: Path | str) -> dict[str, Any]:
    """Load a YAML fixture."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def split_exercises(text: str, config: ParserConfig | None = None) -> list[str]:
    """Re-wrap every exercise block as a standalone LaTeX snippet."""
    parser = ExamParser(text=text, config=config)
    env = parser.config.exercise_env
    return [f"\\begin{{{env}}}\n{block}\n\\end{{{env}}}\n" for block in parser.extract_exercises()]
