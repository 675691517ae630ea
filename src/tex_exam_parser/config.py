"""Parser configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from . import constants

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ParserConfig:
    """Macro vocabulary and limits used by the exercise parser."""

    # Markup names
    exercise_env: str = constants.EXERCISE_ENV
    diagram_env: str = constants.DIAGRAM_ENV
    solution_macro: str = constants.SOLUTION_MACRO
    choice_macro: str = constants.CHOICE_MACRO
    true_false_macro: str = constants.TRUE_FALSE_MACRO
    short_answer_macro: str = constants.SHORT_ANSWER_MACRO
    correct_marker: str = constants.CORRECT_MARKER

    # Option limits
    max_choices: int = constants.MAX_CHOICES
    max_statements: int = constants.MAX_STATEMENTS
    choice_labels: str = constants.CHOICE_LABELS
    statement_labels: str = constants.STATEMENT_LABELS
    min_choice_groups: int = constants.MIN_CHOICE_GROUPS
    min_statement_groups: int = constants.MIN_STATEMENT_GROUPS

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: dict) -> ParserConfig:
        """Build a config from a mapping of field overrides."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> ParserConfig:
        """Load overrides from a YAML file. An empty file yields the defaults."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
        return cls.from_dict(data)


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a console handler to the package logger (idempotent)."""
    log_level = getattr(logging, level.upper(), logging.WARNING)
    package_logger = logging.getLogger("tex_exam_parser")
    package_logger.setLevel(log_level)

    if not package_logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        package_logger.addHandler(console)
    for handler in package_logger.handlers:
        handler.setLevel(log_level)
    return package_logger
