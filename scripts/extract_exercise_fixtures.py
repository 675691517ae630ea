#!/usr/bin/env python3
"""Extract per-exercise fixtures from real LaTeX exam documents.

Creates a standalone .tex snippet and its expected-output YAML for each
exercise. Naming convention: {exam_stem}-{exercise_num:02d}.tex and
{exam_stem}-{exercise_num:02d}.expected.yaml

Usage:
    python scripts/extract_exercise_fixtures.py path/to/exam.tex -o tests/fixtures/exercises/
"""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path

from tex_exam_parser import dump_expected, save_fixture, split_exercises
from tex_exam_parser.parser import read_tex


def fixture_stem(filename: str) -> str:
    """Lowercase, dash-separated stem of an exam filename."""
    stem = Path(filename).stem.lower()
    return re.sub(r"[^a-z0-9]+", "-", stem).strip("-") or "exam"


def extract_exercise_fixtures(tex_path: Path, output_dir: Path) -> list[Path]:
    """Extract per-exercise fixture pairs from an exam.

    Args:
        tex_path: Path to the exam .tex file
        output_dir: Directory to save fixtures

    Returns:
        List of paths to created .tex fixture files
    """
    snippets = split_exercises(read_tex(tex_path))
    if not snippets:
        print(f"No exercises found in {tex_path}")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = fixture_stem(tex_path.name)
    created_files = []

    for number, snippet in enumerate(snippets, 1):
        tex_file = output_dir / f"{stem}-{number:02d}.tex"
        tex_file.write_text(snippet, encoding="utf-8")
        save_fixture(dump_expected(text=snippet), tex_file.with_suffix(".expected.yaml"))
        created_files.append(tex_file)
        print(f"  Created: {tex_file.name}")

    return created_files


def main():
    parser = argparse.ArgumentParser(
        description="Extract per-exercise fixtures from LaTeX exam documents"
    )
    parser.add_argument("tex_path", type=Path, help="Path to exam .tex file")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("tests/fixtures/exercises"),
        help="Output directory for fixtures"
    )
    args = parser.parse_args()

    if not args.tex_path.exists():
        print(f"Error: {args.tex_path} not found")
        return 1

    print(f"Extracting fixtures from: {args.tex_path}")
    print(f"Output: {args.output}")

    files = extract_exercise_fixtures(args.tex_path, args.output)
    print(f"\nCreated {len(files)} fixture files")
    return 0


if __name__ == "__main__":
    sys.exit(main())
