"""Data models for LaTeX exam parsing."""

from __future__ import annotations

import uuid
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class ExerciseKind(str, Enum):
    """Answer mechanisms recognized in exercise blocks."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MultipleChoice:
    """Options of a ``\\choice`` exercise."""

    choices: tuple[str, ...] = ()
    correct_index: int | None = None  # First option carrying the correctness marker


@dataclass(frozen=True)
class TrueFalseSet:
    """Statements of a ``\\choiceTF`` exercise with one verdict each."""

    statements: tuple[str, ...] = ()
    truth: tuple[bool, ...] = ()

    def __post_init__(self):
        if len(self.statements) != len(self.truth):
            raise ValueError(
                f"{len(self.statements)} statements but {len(self.truth)} verdicts"
            )


@dataclass(frozen=True)
class ShortAnswer:
    """Expected answer of a ``\\shortans`` exercise."""

    answer: str = ""


Payload = Union[MultipleChoice, TrueFalseSet, ShortAnswer]

PAYLOAD_KINDS: dict[type, ExerciseKind] = {
    MultipleChoice: ExerciseKind.MULTIPLE_CHOICE,
    TrueFalseSet: ExerciseKind.TRUE_FALSE,
    ShortAnswer: ExerciseKind.SHORT_ANSWER,
}


def new_exercise_id() -> str:
    """Generate a fresh exercise identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ExerciseRecord:
    """A parsed exercise block."""

    kind: ExerciseKind
    prompt: str  # Cleaned for display
    prompt_raw: str
    payload: Payload | None = None
    diagram_source: str | None = None
    solution: str | None = None  # Cleaned, diagram removed
    solution_diagram_source: str | None = None
    id: str = field(default_factory=new_exercise_id)

    def __post_init__(self):
        if self.payload is not None and type(self.payload) not in PAYLOAD_KINDS:
            raise ValueError(f"Unsupported payload: {self.payload!r}")
        expected = PAYLOAD_KINDS.get(type(self.payload), ExerciseKind.UNKNOWN)
        if expected != self.kind:
            raise ValueError(f"Payload {type(self.payload).__name__} does not match kind {self.kind.value}")

    @property
    def choices(self) -> tuple[str, ...] | None:
        if isinstance(self.payload, MultipleChoice):
            return self.payload.choices
        return None

    @property
    def correct_index(self) -> int | None:
        if isinstance(self.payload, MultipleChoice):
            return self.payload.correct_index
        return None

    @property
    def statements(self) -> tuple[str, ...] | None:
        if isinstance(self.payload, TrueFalseSet):
            return self.payload.statements
        return None

    @property
    def truth(self) -> tuple[bool, ...] | None:
        if isinstance(self.payload, TrueFalseSet):
            return self.payload.truth
        return None

    @property
    def answer(self) -> str | None:
        if isinstance(self.payload, ShortAnswer):
            return self.payload.answer
        return None

    def has_answer(self) -> bool:
        """Check if this exercise carries answer data."""
        if isinstance(self.payload, MultipleChoice):
            return self.payload.correct_index is not None
        if isinstance(self.payload, TrueFalseSet):
            return bool(self.payload.statements)
        if isinstance(self.payload, ShortAnswer):
            return bool(self.payload.answer)
        return False

    def has_diagrams(self) -> bool:
        """Check if this exercise has diagram source to render."""
        return bool(self.diagram_source or self.solution_diagram_source)

    def to_dict(self) -> dict:
        """Convert exercise to dictionary format."""
        d: dict = {
            "id": self.id,
            "type": self.kind.value,
            "question": self.prompt,
            "raw_question": self.prompt_raw,
        }
        if isinstance(self.payload, MultipleChoice):
            d["choices"] = list(self.payload.choices)
            d["correct_choice"] = self.payload.correct_index
        elif isinstance(self.payload, TrueFalseSet):
            d["statements"] = [
                {"text": s, "is_true": t}
                for s, t in zip(self.payload.statements, self.payload.truth)
            ]
        elif isinstance(self.payload, ShortAnswer):
            d["answer"] = self.payload.answer
        if self.diagram_source:
            d["tikz"] = self.diagram_source
        if self.solution is not None:
            d["solution"] = self.solution
        if self.solution_diagram_source:
            d["solution_tikz"] = self.solution_diagram_source
        return d


@dataclass
class ParsedDocument:
    """All exercises parsed from one LaTeX document."""

    filename: str
    exercises: list[ExerciseRecord]

    def count_by_kind(self) -> dict[str, int]:
        """Number of exercises per kind, in first-seen order."""
        return dict(Counter(e.kind.value for e in self.exercises))

    def to_dict(self) -> dict:
        """Convert document to dictionary format."""
        return {
            "filename": self.filename,
            "exercises": [e.to_dict() for e in self.exercises],
            "total_exercises": len(self.exercises),
        }
