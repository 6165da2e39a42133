# src/openrepo/cli.py
import argparse
import os
import sys
from pathlib import Path

from openrepo.config import INSTRUCTION_MARKER, INSTRUCTION_TEMPLATES
from openrepo.core.prompt import assemble_prompt
from openrepo.core.scanner import scan_directory
from openrepo.core.tree import FileTree
from openrepo.errors import InvalidRootError, OutputError
from openrepo.logger_config import get_logger, setup_logging

logger = get_logger(__name__)


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="openrepo",
        description="Pick files from a directory and pack them, with an instruction, into one LLM prompt.",
    )
    parser.add_argument("root_dir", type=str, nargs="?", default=os.getcwd(), help="Project root directory")
    parser.add_argument(
        "-s", "--select",
        action="append",
        default=[],
        metavar="PATH",
        help="File or folder to include, relative to the root (repeatable; default: every file)",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-i", "--instruction", type=str, default="", help="Instruction appended to the prompt")
    group.add_argument(
        "-t", "--template",
        choices=sorted(INSTRUCTION_TEMPLATES),
        help="Use a predefined instruction",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra gitignore-style pattern (repeatable)",
    )
    parser.add_argument("-o", "--output", type=str, default=None, help="Output file (default: stdout)")
    parser.add_argument("-j", "--jobs", type=int, default=1, help="Files read in parallel (default: 1)")
    parser.add_argument("--list", action="store_true", help="Print the filtered file tree and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def selection_key(raw: str) -> str:
    """Absolute paths pass through; relative ones become tree keys ("." is the root)."""
    path = Path(raw)
    if path.is_absolute():
        return str(path)
    key = path.as_posix().strip("/")
    return "" if key == "." else key


def print_summary(artifact, file_count: int) -> None:
    details = sorted(
        (d for d in artifact.file_details if d.path != INSTRUCTION_MARKER),
        key=lambda d: d.token_count,
        reverse=True,
    )
    out = sys.stderr
    print("\n--- Top 10 Largest Files (Tokens) ---", file=out)
    print(f"{'Rank':<5} | {'Tokens':<10} | {'File Path'}", file=out)
    print("-" * 60, file=out)
    for i, d in enumerate(details[:10]):
        print(f"{i+1:<5} | {d.token_count:<10} | {d.path}", file=out)
    print("-" * 60, file=out)
    print(f"Total files: {file_count}", file=out)
    print(f"Total tokens: {artifact.total_tokens}", file=out)
    print("-" * 60, file=out)

    if artifact.errors:
        print(f"\nWarning: {len(artifact.errors)} file(s) could not be included:", file=out)
        for err in artifact.errors:
            suffix = f" ({err.message})" if err.message else ""
            print(f"  > {err.path}: {err.error}{suffix}", file=out)


def write_output(text: str, output: str) -> None:
    try:
        with open(output, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.write("\n")
    except OSError as e:
        raise OutputError(f"Could not write to output file '{output}': {e}") from e


def main(argv=None):
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args(argv)
        setup_logging(args.verbose)

        root_dir = Path(args.root_dir).resolve()
        if not root_dir.is_dir():
            print(f"Error: Invalid directory '{root_dir}'", file=sys.stderr)
            sys.exit(1)

        # 2. Scanning; the output file must not end up in its own prompt
        entries = scan_directory(root_dir, args.ignore)
        if args.output:
            output_path = str(Path(args.output).resolve())
            entries = [e for e in entries if e.path != output_path]
        logger.debug("Scanned %d files under %s", len(entries), root_dir)
        tree = FileTree.from_entries(entries, root_dir)

        if args.list:
            sys.stdout.write(tree.render())
            print(f"{len(entries)} files", file=sys.stderr)
            return

        # 3. Selection
        if args.select:
            selected = tree.expand_selection(selection_key(s) for s in args.select)
        else:
            selected = [e.path for e in entries]

        if not selected:
            print("No matching files found.", file=sys.stderr)

        instruction = INSTRUCTION_TEMPLATES[args.template] if args.template else args.instruction

        # 4. Assembly
        artifact = assemble_prompt(selected, instruction, str(root_dir), max_workers=max(1, args.jobs))
        print_summary(artifact, len(selected))

        # 5. Output
        if args.output:
            write_output(artifact.formatted_prompt, args.output)
            print(f"\nSuccess! Prompt written to: {args.output}", file=sys.stderr)
        else:
            sys.stdout.write(artifact.formatted_prompt + "\n")

    except (InvalidRootError, OutputError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
