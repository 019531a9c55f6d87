"""dagopt CLI entry point.

Usage examples:
  dagopt                       # type quadruples, blank line to finish
  dagopt block.txt --dump-dag
  dagopt blocks/ -o out/ --verify
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from dagopt.compiler.dag import DagInvariantError
from dagopt.compiler.optimizer import OptimizationResult, optimize_lines
from dagopt.compiler.quad import NoInstructionsError, format_quadruples
from dagopt.compiler.simulator import verify
from dagopt.config import (
    DEFAULT_SAMPLE_FILE,
    INPUT_GLOB,
    LOG_LEVEL,
    OUTPUT_SUFFIX,
    SAMPLE_BLOCK,
)

LOG = logging.getLogger("dagopt.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_MISMATCH = 2


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dagopt", description="Basic-block DAG optimizer")
    parser.add_argument(
        "source",
        nargs="?",
        type=Path,
        help="Block file or directory of block files (default: read stdin)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        help=f"Write each result to <dir>/<stem>{OUTPUT_SUFFIX} instead of the console",
    )
    parser.add_argument("--dump-dag", action="store_true", help="Print the DAG of each block")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Simulate input and output and report names whose values differ",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help=f"Logging level (default {LOG_LEVEL})")
    return parser


# ------------------------------------------------------------------
# Source acquisition
# ------------------------------------------------------------------

def read_interactive(stream: TextIO) -> List[str]:
    """Read lines until an empty line or end of input."""
    if stream.isatty():
        print("Enter quadruples (empty line to finish):")
    lines: List[str] = []
    for raw in stream:
        line = raw.rstrip("\r\n")
        if not line:
            break
        lines.append(line)
    return lines


def _fallback_lines() -> List[str]:
    sample = Path(DEFAULT_SAMPLE_FILE)
    if sample.is_file():
        LOG.info("no input on stdin, reading %s", sample)
        lines = sample.read_text(encoding="utf-8").splitlines()
        if lines:
            return lines
    LOG.info("no input on stdin, using the built-in sample block")
    return list(SAMPLE_BLOCK)


def collect_sources(source: Optional[Path]) -> List[Tuple[str, Path | None]]:
    """Return ``(name, path)`` pairs; a None path means stdin."""
    if source is None:
        return [("<stdin>", None)]
    if source.is_dir():
        files = [
            p for p in sorted(source.glob(INPUT_GLOB))
            if p.is_file() and not p.name.endswith(OUTPUT_SUFFIX)
        ]
        return [(p.name, p) for p in files]
    return [(source.name, source)]


# ------------------------------------------------------------------
# Sinks
# ------------------------------------------------------------------

def print_result(result: OptimizationResult, dump_dag: bool) -> None:
    print("Input quadruples:")
    for line in format_quadruples(result.input):
        print(line)
    print()
    if dump_dag:
        for line in result.state.dump():
            print(line)
        print()
    print("Optimized quadruples:")
    for line in format_quadruples(result.output):
        print(line)


def write_result(result: OptimizationResult, out_dir: Path, stem: str) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / f"{stem}{OUTPUT_SUFFIX}"
    text = "".join(line + "\n" for line in format_quadruples(result.output))
    target.write_text(text, encoding="utf-8")
    return target


# ------------------------------------------------------------------
# Runs
# ------------------------------------------------------------------

def run_block(name: str, lines: List[str], args: argparse.Namespace, stem: str) -> int:
    """Optimize one block; failures are reported and confined to it."""
    try:
        result = optimize_lines(lines)
    except NoInstructionsError as exc:
        LOG.error("%s: %s", name, exc)
        return EXIT_FAILED
    except DagInvariantError as exc:
        LOG.error("%s: internal error: %s", name, exc)
        return EXIT_FAILED

    status = EXIT_OK
    if args.verify:
        for var in verify(result.input, result.output):
            LOG.warning("%s: final value of '%s' changed by optimization", name, var)
            status = EXIT_MISMATCH

    if args.output_dir is not None:
        target = write_result(result, args.output_dir, stem)
        LOG.info("%s: wrote %d instructions to %s", name, len(result.output), target)
    else:
        print_result(result, args.dump_dag)
    return status


def main(argv: List[str] | None = None, stdin: TextIO | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    stdin = stdin if stdin is not None else sys.stdin

    if args.source is not None and not args.source.exists():
        LOG.error("%s: no such file or directory", args.source)
        return EXIT_FAILED

    sources = collect_sources(args.source)
    if not sources:
        LOG.error("%s: no files matching %s", args.source, INPUT_GLOB)
        return EXIT_FAILED

    many = args.source is not None and args.source.is_dir()
    status = EXIT_OK
    for name, path in sources:
        if path is None:
            lines = read_interactive(stdin) or _fallback_lines()
            stem = "stdin"
        else:
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except OSError as exc:
                LOG.error("%s: cannot read: %s", name, exc)
                status = max(status, EXIT_FAILED)
                continue
            stem = path.stem

        if many and args.output_dir is None:
            print(f"== {name} ==")
        status = max(status, run_block(name, lines, args, stem))
        if many and args.output_dir is None:
            print()

    return status


if __name__ == "__main__":
    sys.exit(main())
