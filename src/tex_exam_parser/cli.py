"""LaTeX Exam Parser CLI - Command-line interface."""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path

import yaml

from .assembler import build_markdown, collect_render_requests
from .config import ParserConfig, setup_logging
from .constants import KIND_CODES
from .fixture import dump_expected, save_fixture
from .parser import ExamParser, parse_file, scan_directory


def _load_config(args: argparse.Namespace) -> ParserConfig:
    if getattr(args, "config", None):
        return ParserConfig.from_yaml(args.config)
    return ParserConfig()


def _require_file(path_str: str) -> Path | None:
    path = Path(path_str)
    if not path.is_file():
        print(f"Error: File not found: {path}")
        return None
    return path


def _preview(text: str, limit: int = 100) -> str:
    text = text.replace("\n", " ")
    return text[:limit] + "..." if len(text) > limit else text


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a single exam and show results."""
    tex_path = _require_file(args.file)
    if tex_path is None:
        return 1

    result = parse_file(tex_path, args.parser_config)
    exercises = result.exercises

    print(f"=== {tex_path.name} ===")
    print(f"Total exercises: {len(exercises)}")

    with_answer = sum(1 for e in exercises if e.has_answer())
    print(f"With answers: {with_answer}/{len(exercises)}")
    print(f"Diagrams to render: {len(collect_render_requests(exercises))}")

    answered_by_kind = Counter(e.kind.value for e in exercises if e.has_answer())

    print("\nBy type:")
    for kind, total in sorted(result.count_by_kind().items(), key=lambda kv: KIND_CODES[kv[0]]):
        print(f"  {KIND_CODES[kind]}: {answered_by_kind[kind]}/{total}")

    limit = args.limit or 10
    print(f"\nFirst {limit} exercises:")
    for number, e in enumerate(exercises[:limit], 1):
        answered = "Y" if e.has_answer() else "N"
        print(f"\n--- Q{number} [{KIND_CODES[e.kind.value]}] answered={answered} ---")
        print(f"Text: {_preview(e.prompt)}")

        if e.choices is not None:
            print(f"Choices ({len(e.choices)}):")
            for i, choice in enumerate(e.choices):
                marker = "*" if i == e.correct_index else " "
                print(f"  {marker} {chr(ord('A') + i)}. {_preview(choice, 70)}")
        elif e.statements is not None:
            print(f"Statements ({len(e.statements)}):")
            for i, (statement, is_true) in enumerate(zip(e.statements, e.truth)):
                print(f"  {chr(ord('a') + i)}) [{'T' if is_true else 'F'}] {_preview(statement, 70)}")
        elif e.answer is not None:
            print(f"Answer: {_preview(e.answer, 70)}")

        if e.diagram_source:
            print("Diagram: question")
        if e.solution is not None:
            print(f"Solution: {_preview(e.solution, 70)}")
        if e.solution_diagram_source:
            print("Diagram: solution")

    return 0


def _parse_and_export_worker(work: tuple[str, str, ParserConfig]) -> tuple[int, str | None]:
    """Parse one file and write its YAML export (runs in a worker process)."""
    path_str, output_dir_str, config = work
    try:
        result = parse_file(path_str, config)
    except OSError as e:
        return 0, str(e)

    out_path = Path(output_dir_str) / (Path(path_str).stem + ".yaml")
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(result.to_dict(), f, allow_unicode=True, sort_keys=False)
    return len(result.exercises), None


def cmd_process(args: argparse.Namespace) -> int:
    """Scan a directory for exams, parse them, and write YAML output."""
    import os
    from concurrent.futures import ProcessPoolExecutor, as_completed

    directory = Path(args.directory)
    if not directory.is_dir():
        print(f"Error: Not a directory: {directory}")
        return 1

    config = args.parser_config
    output_dir = Path(args.output or "output_exercises")
    output_dir.mkdir(parents=True, exist_ok=True)

    num_workers = args.workers or os.cpu_count() or 4
    recursive = not args.no_recursive

    print(f"Scanning {directory} for LaTeX exams...")
    print(f"  Recursive: {recursive}")
    print(f"  Workers: {num_workers}")

    exams = scan_directory(directory, recursive=recursive, config=config)
    print(f"  Found {len(exams)} exam files")
    if not exams:
        print("No exam files found.")
        return 0

    total_exercises = 0
    errors = 0
    work_items = [(str(p), str(output_dir), config) for p in exams]

    with ProcessPoolExecutor(max_workers=num_workers) as executor:
        futures = {executor.submit(_parse_and_export_worker, item): item[0] for item in work_items}
        for completed, future in enumerate(as_completed(futures), 1):
            count, error = future.result()
            if error:
                errors += 1
                print(f"  Error: {Path(futures[future]).name}: {error}")
            else:
                total_exercises += count
            if completed % 25 == 0:
                print(f"  Progress: {completed}/{len(exams)} files...")

    print("\nDone!")
    print(f"  Files processed: {len(exams)}")
    print(f"  Total exercises: {total_exercises}")
    print(f"  Errors: {errors}")
    print(f"  Output: {output_dir}/")
    return 0


def cmd_blocks(args: argparse.Namespace) -> int:
    """Debug: show the normalized exercise blocks of a file."""
    tex_path = _require_file(args.file)
    if tex_path is None:
        return 1

    parser = ExamParser(tex_path, config=args.parser_config)
    blocks = parser.extract_exercises()
    print(f"=== {tex_path.name}: {len(blocks)} blocks ===")
    for number, block in enumerate(blocks, 1):
        kind = parser.classify(block)
        print(f"\n--- Block {number} [{KIND_CODES[kind.value]}] ({len(block)} chars) ---")
        print(block)
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    """Dump the expected-output fixture of a file."""
    tex_path = _require_file(args.file)
    if tex_path is None:
        return 1

    fixture = dump_expected(tex_path, config=args.parser_config)
    if args.output:
        save_fixture(fixture, args.output)
        print(f"Dumped to {args.output}")
        print(f"  Exercises: {len(fixture['exercises'])}")
    else:
        print(yaml.safe_dump(fixture, allow_unicode=True, sort_keys=False), end="")
    return 0


def cmd_markdown(args: argparse.Namespace) -> int:
    """Assemble Markdown from a file (diagrams are not rendered)."""
    tex_path = _require_file(args.file)
    if tex_path is None:
        return 1

    result = parse_file(tex_path, args.parser_config)
    markdown = build_markdown(result.exercises, author=args.author or "")
    if args.output:
        Path(args.output).write_text(markdown, encoding="utf-8")
        print(f"Wrote {len(result.exercises)} exercises to {args.output}")
    else:
        print(markdown, end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="LaTeX Exam Parser CLI - Extract exercises from ex_test LaTeX documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s parse exam.tex                  # Parse single file
  %(prog)s parse exam.tex --limit 5        # Show first 5 exercises
  %(prog)s process ./exams/ -o output/     # Parse a directory to YAML
  %(prog)s blocks exam.tex                 # Show normalized exercise blocks
  %(prog)s dump exam.tex -o exam.expected.yaml
  %(prog)s markdown exam.tex --author "J. Doe" -o exam.md
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="YAML file with parser configuration overrides")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    p_parse = subparsers.add_parser("parse", help="Parse a single exam")
    p_parse.add_argument("file", help="Path to .tex file")
    p_parse.add_argument("--limit", type=int, help="Limit exercises shown")

    p_process = subparsers.add_parser("process", help="Scan directory, parse & export YAML")
    p_process.add_argument("directory", help="Directory to scan for .tex files")
    p_process.add_argument("-o", "--output", help="Output directory for YAML files (default: output_exercises)")
    p_process.add_argument("-w", "--workers", type=int, help="Number of worker processes (default: CPU count)")
    p_process.add_argument("--no-recursive", action="store_true", help="Don't scan subdirectories")

    p_blocks = subparsers.add_parser("blocks", help="Debug normalized exercise blocks")
    p_blocks.add_argument("file", help="Path to .tex file")

    p_dump = subparsers.add_parser("dump", help="Dump expected-output YAML fixture")
    p_dump.add_argument("file", help="Path to .tex file")
    p_dump.add_argument("-o", "--output", help="Output YAML file (default: stdout)")

    p_markdown = subparsers.add_parser("markdown", help="Assemble Markdown document")
    p_markdown.add_argument("file", help="Path to .tex file")
    p_markdown.add_argument("-o", "--output", help="Output Markdown file (default: stdout)")
    p_markdown.add_argument("--author", help="Author line under the title")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = _load_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Invalid config: {e}")
        return 1
    setup_logging("DEBUG" if args.verbose else config.log_level)
    args.parser_config = config

    if args.command == "parse":
        return cmd_parse(args)
    elif args.command == "process":
        return cmd_process(args)
    elif args.command == "blocks":
        return cmd_blocks(args)
    elif args.command == "dump":
        return cmd_dump(args)
    elif args.command == "markdown":
        return cmd_markdown(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
