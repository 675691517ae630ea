"""Diagram render planning and Markdown assembly.

Parsed exercises hand their TikZ sources to an external renderer and the
rendered images back to a document assembler. The only link between the two
is the ``(exercise id, slot)`` key, where the slot says whether the image
belongs to the question or to the solution.

Usage:
    requests = collect_render_requests(exercises)
    images = render_diagrams(exercises, renderer)
    markdown = build_markdown(exercises, images, author="J. Doe")
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from .constants import (
    CORRECT_COLOR,
    DEFAULT_COLOR,
    HEADING_COLOR,
    MARKDOWN_ANSWER_LABEL,
    MARKDOWN_AUTHOR_LABEL,
    MARKDOWN_EXERCISE_LABEL,
    MARKDOWN_FALSE_LABEL,
    MARKDOWN_SOLUTION_LABEL,
    MARKDOWN_TITLE,
    MARKDOWN_TRUE_LABEL,
)
from .models import ExerciseRecord, MultipleChoice, ShortAnswer, TrueFalseSet

logger = logging.getLogger(__name__)


class DiagramSlot(str, Enum):
    """Where a diagram sits inside an exercise."""

    QUESTION = "question"
    SOLUTION = "solution"


ImageKey = tuple[str, DiagramSlot]


@dataclass(frozen=True)
class RenderRequest:
    """A diagram source waiting to be rendered."""

    exercise_id: str
    slot: DiagramSlot
    source: str = field(repr=False)

    @property
    def key(self) -> str:
        """Flat key, e.g. ``3f2a..._question``."""
        return f"{self.exercise_id}_{self.slot.value}"

    @property
    def image_key(self) -> ImageKey:
        return (self.exercise_id, self.slot)


@dataclass(frozen=True)
class RenderedImage:
    """A rendered diagram as base64 PNG with display size in pixels."""

    base64: str = field(repr=False)
    width: int
    height: int

    def to_markdown(self) -> str:
        return f"![](data:image/png;base64,{self.base64}){{width={self.width}px height={self.height}px}}"


class DiagramRenderer(Protocol):
    """Anything that turns TikZ source into an image."""

    def render(self, source: str) -> RenderedImage | None: ...


def collect_render_requests(exercises: Iterable[ExerciseRecord]) -> list[RenderRequest]:
    """List question and solution diagrams in document order."""
    requests = []
    for ex in exercises:
        if ex.diagram_source:
            requests.append(RenderRequest(ex.id, DiagramSlot.QUESTION, ex.diagram_source))
        if ex.solution_diagram_source:
            requests.append(RenderRequest(ex.id, DiagramSlot.SOLUTION, ex.solution_diagram_source))
    return requests


def render_diagrams(
    exercises: Iterable[ExerciseRecord],
    renderer: DiagramRenderer,
) -> dict[ImageKey, RenderedImage]:
    """Render every diagram, skipping the ones the renderer cannot handle."""
    images: dict[ImageKey, RenderedImage] = {}
    requests = collect_render_requests(exercises)
    for i, request in enumerate(requests, 1):
        logger.info("Rendering image %d of %d (%s)", i, len(requests), request.key)
        try:
            image = renderer.render(request.source)
        except Exception as e:
            logger.warning("Render failed for %s: %s", request.key, e)
            continue
        if image is None:
            logger.warning("Renderer returned no image for %s", request.key)
            continue
        images[request.image_key] = image
    return images


def _choice_lines(payload: MultipleChoice) -> list[str]:
    lines = []
    for i, choice in enumerate(payload.choices):
        letter = chr(ord("A") + i)
        color = CORRECT_COLOR if i == payload.correct_index else DEFAULT_COLOR
        lines.append(f'<span style="color: {color}">**{letter}.**</span> {choice}')
    return lines


def _statement_lines(payload: TrueFalseSet) -> list[str]:
    lines = []
    for i, (statement, is_true) in enumerate(zip(payload.statements, payload.truth)):
        letter = chr(ord("a") + i)
        verdict = MARKDOWN_TRUE_LABEL if is_true else MARKDOWN_FALSE_LABEL
        lines.append(f"**{letter})** {statement} *({verdict})*")
    return lines


def exercise_to_markdown(
    exercise: ExerciseRecord,
    number: int,
    images: Mapping[ImageKey, RenderedImage] | None = None,
) -> str:
    """Render one exercise as Markdown paragraphs."""
    images = images or {}
    paragraphs = [
        f'<span style="color: {HEADING_COLOR}">**{MARKDOWN_EXERCISE_LABEL} {number}.**</span> {exercise.prompt}'
    ]

    question_image = images.get((exercise.id, DiagramSlot.QUESTION))
    if question_image:
        paragraphs.append(question_image.to_markdown())

    payload = exercise.payload
    if isinstance(payload, MultipleChoice):
        paragraphs.extend(_choice_lines(payload))
    elif isinstance(payload, TrueFalseSet):
        paragraphs.extend(_statement_lines(payload))
    elif isinstance(payload, ShortAnswer) and payload.answer:
        paragraphs.append(f"**{MARKDOWN_ANSWER_LABEL}:** {payload.answer}")

    if exercise.solution or exercise.solution_diagram_source:
        paragraphs.append(f"*{MARKDOWN_SOLUTION_LABEL}:*")
        if exercise.solution:
            paragraphs.append(exercise.solution)
        solution_image = images.get((exercise.id, DiagramSlot.SOLUTION))
        if solution_image:
            paragraphs.append(solution_image.to_markdown())

    paragraphs.append("***")
    return "\n\n".join(paragraphs) + "\n\n"


def build_markdown(
    exercises: Iterable[ExerciseRecord],
    images: Mapping[ImageKey, RenderedImage] | None = None,
    author: str = "",
    title: str = MARKDOWN_TITLE,
) -> str:
    """Assemble the Markdown handed to the document converter."""
    md = f"# {title}\n\n"
    if author:
        md += f"**{MARKDOWN_AUTHOR_LABEL}: {author}**\n\n"
    for number, exercise in enumerate(exercises, 1):
        md += exercise_to_markdown(exercise, number, images)
    return md
