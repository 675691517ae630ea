"""Pytest fixtures for tex-exam-parser tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tex_exam_parser import ExamParser


@pytest.fixture
def mcq_latex() -> str:
    """A multiple choice exercise with brace options, C marked correct."""
    return r"""
\begin{ex}
Which number is prime?
\choice
{$4$}
{$6$}
{\True $7$}
{$9$}
\loigiai{Only $7$ has no divisor other than $1$ and itself.}
\end{ex}
"""


@pytest.fixture
def lettered_mcq_latex() -> str:
    """The same exercise with lettered options instead of brace groups."""
    return r"""
\begin{ex}
Which number is prime?
\choice
A. $4$
B. $6$
C. \True $7$
D. $9$
\loigiai{Only $7$ has no divisor other than $1$ and itself.}
\end{ex}
"""


@pytest.fixture
def true_false_latex() -> str:
    """A true/false exercise with a solution carrying a diagram."""
    return r"""
\begin{ex}
Consider the function $f(x) = x^2$.
\choiceTF[t]
{$f$ is odd}
{\True $f(2) = 4$}
{$f$ is decreasing on $\mathbb{R}$}
\loigiai{
The graph is a parabola.
\begin{tikzpicture}
\draw (0,0) parabola (1,1);
\end{tikzpicture}
}
\end{ex}
"""


@pytest.fixture
def short_answer_latex() -> str:
    """A short answer exercise."""
    return r"""
\begin{ex}
Compute $\textbf{2} + 3$.
\shortans{$5$}
\end{ex}
"""


@pytest.fixture
def exam_latex(mcq_latex: str, true_false_latex: str, short_answer_latex: str) -> str:
    """A full document with preamble, comments and three exercises."""
    return (
        "\\documentclass{article}\n"
        "% A comment outside any exercise\n"
        "\\begin{document}\n"
        + mcq_latex
        + true_false_latex
        + short_answer_latex
        + "\\end{document}\n"
    )


@pytest.fixture
def parser() -> ExamParser:
    """A parser with default configuration and no document."""
    return ExamParser(text="")


@pytest.fixture
def exam_file(tmp_path: Path, exam_latex: str) -> Path:
    """The full document written to a .tex file."""
    path = tmp_path / "exam.tex"
    path.write_text(exam_latex, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers attached by setup_logging so they don't outlive a test."""
    yield
    logger = logging.getLogger("tex_exam_parser")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
