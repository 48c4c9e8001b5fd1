#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/cli.py
"""Command-line interface for the convertflow engine.

Examples
--------
Show what a file is:
    $ convertflow detect report.pdf photo.HEIC

List conversion options and operations:
    $ convertflow options data.csv

Convert several files; each one succeeds or fails on its own:
    $ convertflow convert *.json --to yaml --output-dir ./converted

Batch and special operations:
    $ convertflow merge a.pdf b.pdf c.pdf
    $ convertflow split report.pdf --output-dir ./pages
    $ convertflow grayscale photo.png
    $ convertflow compress photo.png report.pdf
    $ convertflow rotate scan.pdf --angle 180

Use a configuration file and plain output:
    $ convertflow --config settings.toml --no-rich convert notes.txt --to pdf
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Set

from convertflow import __version__
from convertflow.capabilities import operations_for, options_for
from convertflow.catalog import detect, format_file_size
from convertflow.config import ConvertFlowConfig, load_config
from convertflow.constants import EXIT_ERROR, EXIT_SUCCESS, EXIT_USAGE_ERROR
from convertflow.dispatcher import Dispatcher
from convertflow.exceptions import ConfigError, ConvertFlowError
from convertflow.logging_utils import configure_logging
from convertflow.models import ConversionResult, SourceFile
from convertflow.progress import ProgressCallback

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class FileOutcome:
    """Result of processing one input on the command line."""

    source: str
    outputs: List[Path]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """Whether the input was processed without error."""
        return self.error is None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_output_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=Path("."),
        help="Directory to write outputs to (default: current directory)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="convertflow",
        description="Detect file types and convert files between formats.",
    )
    parser.add_argument("--version", "-v", action="version", version=f"convertflow {__version__}")
    parser.add_argument("--config", type=Path, help="Path to a configuration file (TOML, YAML or JSON)")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--log-file", type=str, help="Also write log messages to this file")
    parser.add_argument("--trace", action="store_true", help="Verbose logging with timestamps (implies DEBUG)")
    parser.add_argument("--no-rich", action="store_true", help="Plain text output without rich formatting")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    detect_parser = subparsers.add_parser("detect", help="Show the detected type of files")
    detect_parser.add_argument("files", nargs="+", help="File names or paths")

    options_parser = subparsers.add_parser("options", help="List conversion options and operations for a file")
    options_parser.add_argument("file", help="File name or path")

    convert_parser = subparsers.add_parser("convert", help="Convert files to another format")
    convert_parser.add_argument("files", nargs="+", type=Path, help="Input files")
    convert_parser.add_argument("--to", "-t", required=True, dest="target", help="Target format code (e.g. pdf, csv)")
    _add_output_dir(convert_parser)

    merge_parser = subparsers.add_parser("merge", help="Merge PDF documents into merged.pdf")
    merge_parser.add_argument("files", nargs="+", type=Path, help="Input PDFs, in order")
    _add_output_dir(merge_parser)

    split_parser = subparsers.add_parser("split", help="Split PDF documents into single pages")
    split_parser.add_argument("files", nargs="+", type=Path, help="Input PDFs")
    _add_output_dir(split_parser)

    grayscale_parser = subparsers.add_parser("grayscale", help="Convert images to grayscale")
    grayscale_parser.add_argument("files", nargs="+", type=Path, help="Input images")
    _add_output_dir(grayscale_parser)

    compress_parser = subparsers.add_parser("compress", help="Recompress images as JPEG or compress PDFs")
    compress_parser.add_argument("files", nargs="+", type=Path, help="Input images or PDFs")
    compress_parser.add_argument("--quality", type=int, help="JPEG quality for images (default from config)")
    _add_output_dir(compress_parser)

    rotate_parser = subparsers.add_parser("rotate", help="Rotate images or PDF pages clockwise")
    rotate_parser.add_argument("files", nargs="+", type=Path, help="Input images or PDFs")
    rotate_parser.add_argument("--angle", type=int, choices=[90, 180, 270], default=90, help="Angle (default: 90)")
    _add_output_dir(rotate_parser)

    return parser


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class Reporter:
    """Writes command output with rich, or as plain text."""

    def __init__(self, use_rich: bool):
        """Initialize the reporter."""
        self.use_rich = use_rich
        self._console: Any = None
        if use_rich:
            from rich.console import Console

            self._console = Console()

    def table(self, title: str, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
        """Print a table."""
        if self.use_rich:
            from rich.table import Table

            table = Table(title=title)
            for column in columns:
                table.add_column(column)
            for row in rows:
                table.add_row(*row)
            self._console.print(table)
            return

        print(title)
        widths = [max([len(column)] + [len(row[i]) for row in rows]) for i, column in enumerate(columns)]
        print("  ".join(column.ljust(width) for column, width in zip(columns, widths)).rstrip())
        for row in rows:
            print("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())

    def outcome(self, outcome: FileOutcome) -> None:
        """Print the per-file status line."""
        if outcome.ok:
            status, style = "OK", "green"
            detail = f"{outcome.source} -> {', '.join(str(path) for path in outcome.outputs) or '(no output)'}"
        else:
            status, style = "FAILED", "red"
            detail = f"{outcome.source}: {outcome.error}"

        if self.use_rich:
            from rich.markup import escape

            self._console.print(f"[{style}]{status:<8}[/{style}]{escape(detail)}", highlight=False)
        else:
            print(f"{status:<8}{detail}")

    def summary(self, outcomes: Sequence[FileOutcome]) -> None:
        """Print the success/failure counts."""
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        line = f"{len(outcomes) - failed} succeeded, {failed} failed"
        if self.use_rich:
            style = "red" if failed else "green"
            self._console.print(f"[{style}]{line}[/{style}]")
        else:
            print(line)

    def run_with_progress(self, description: str, work: Callable[[ProgressCallback], Any]) -> Any:
        """Run ``work(on_progress)`` under a progress bar when rich output is enabled."""
        if not self.use_rich:
            return work(lambda percent: None)

        from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

        with Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self._console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(description, total=100)
            return work(lambda percent: progress.update(task_id, completed=percent))


def should_use_rich_output(args: argparse.Namespace) -> bool:
    """Use rich formatting unless ``--no-rich`` is given or stdout is not a terminal."""
    if args.no_rich:
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(callable(isatty) and isatty())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _save_results(
    results: Sequence[ConversionResult], output_dir: Path, inputs: Sequence[Path], written: Set[Path]
) -> List[Path]:
    """Write results into ``output_dir``.

    Refuses to overwrite an input file or a file already written earlier in
    the same run; ``written`` collects the resolved output paths.
    """
    protected = {path.resolve() for path in inputs}
    targets = [(output_dir / result.name).resolve() for result in results]
    for result, target in zip(results, targets):
        if target in protected:
            raise ConvertFlowError(f"{result.name} would overwrite an input file; choose another --output-dir")
        if target in written:
            raise ConvertFlowError(f"{result.name} would overwrite the output of an earlier input")
    written.update(targets)
    return [result.save(output_dir) for result in results]


def _process_each(
    files: Sequence[Path],
    reporter: Reporter,
    output_dir: Path,
    action: Callable[[SourceFile, ProgressCallback], Sequence[ConversionResult]],
) -> int:
    """Run ``action`` on each file independently and report every outcome."""
    outcomes = []
    written: Set[Path] = set()
    for path in files:
        try:
            source = SourceFile.from_path(path)
            results = reporter.run_with_progress(path.name, lambda on_progress: action(source, on_progress))
            outcome = FileOutcome(str(path), _save_results(results, output_dir, files, written))
        except ConvertFlowError as e:
            outcome = FileOutcome(str(path), [], e.message)
        except OSError as e:
            logger.error("Cannot read or write %s: %s", path, e)
            outcome = FileOutcome(str(path), [], str(e))
        outcomes.append(outcome)
        reporter.outcome(outcome)

    if len(outcomes) > 1:
        reporter.summary(outcomes)
    return EXIT_SUCCESS if all(outcome.ok for outcome in outcomes) else EXIT_ERROR


def handle_detect(args: argparse.Namespace, reporter: Reporter, config: ConvertFlowConfig) -> int:
    """Print the descriptor of each named file."""
    rows = []
    for name in args.files:
        path = Path(name)
        descriptor = detect(path.name)
        size = format_file_size(path.stat().st_size) if path.is_file() else "-"
        rows.append(
            [
                path.name,
                descriptor.category.value,
                descriptor.subcategory,
                descriptor.label,
                f"{descriptor.confidence:.2f}",
                size,
            ]
        )
    reporter.table("Detected file types", ["File", "Category", "Type", "Label", "Confidence", "Size"], rows)
    return EXIT_SUCCESS


def handle_options(args: argparse.Namespace, reporter: Reporter, config: ConvertFlowConfig) -> int:
    """Print the conversion options and operations of one file."""
    descriptor = detect(Path(args.file).name)
    options = options_for(descriptor)
    operations = operations_for(descriptor)

    if options:
        rows = [[option.format, option.display_name, "yes" if option.is_recommended else ""] for option in options]
        reporter.table(f"Conversion options for {descriptor.label}", ["Format", "Name", "Recommended"], rows)
    else:
        print(f"No conversion options for {descriptor.label}")

    if operations:
        reporter.table("Operations", ["Id", "Label"], [[op.id, op.label] for op in operations])
    return EXIT_SUCCESS


def handle_convert(args: argparse.Namespace, reporter: Reporter, config: ConvertFlowConfig) -> int:
    """Convert every file to the requested target."""
    dispatcher = Dispatcher(config)
    target = args.target.strip().lower().lstrip(".")
    return _process_each(
        args.files,
        reporter,
        args.output_dir,
        lambda source, on_progress: [dispatcher.convert(source, target, on_progress=on_progress)],
    )


def handle_merge(args: argparse.Namespace, reporter: Reporter, config: ConvertFlowConfig) -> int:
    """Merge all inputs into a single PDF."""
    dispatcher = Dispatcher(config)
    label = f"{len(args.files)} files"
    try:
        sources = [SourceFile.from_path(path) for path in args.files]
        results = reporter.run_with_progress(
            "merge", lambda on_progress: dispatcher.run_operation("merge", sources, on_progress=on_progress)
        )
        outcome = FileOutcome(label, _save_results(results, args.output_dir, args.files, set()))
    except ConvertFlowError as e:
        outcome = FileOutcome(label, [], e.message)
    except OSError as e:
        outcome = FileOutcome(label, [], str(e))
    reporter.outcome(outcome)
    return EXIT_SUCCESS if outcome.ok else EXIT_ERROR


def _operation_handler(operation_id: str, **options: Any) -> Callable:
    def handler(args: argparse.Namespace, reporter: Reporter, config: ConvertFlowConfig) -> int:
        dispatcher = Dispatcher(config)
        return _process_each(
            args.files,
            reporter,
            args.output_dir,
            lambda source, on_progress: dispatcher.run_operation(
                operation_id, [source], on_progress=on_progress, **{k: getattr(args, v) for k, v in options.items()}
            ),
        )

    handler.__name__ = f"handle_{operation_id.replace('-', '_')}"
    return handler


COMMANDS = {
    "detect": handle_detect,
    "options": handle_options,
    "convert": handle_convert,
    "merge": handle_merge,
    "split": _operation_handler("split"),
    "grayscale": _operation_handler("grayscale"),
    "compress": _operation_handler("compress", quality="quality"),
    "rotate": _operation_handler("rotate", angle="angle"),
}


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface.

    Parameters
    ----------
    argv : list[str], optional
        Arguments without the program name, defaults to ``sys.argv[1:]``

    Returns
    -------
    int
        0 on success, 1 if any file failed, 2 for usage or configuration errors

    """
    parser = create_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits on --help/--version (0) and on usage errors (2)
        return e.code if isinstance(e.code, int) else EXIT_USAGE_ERROR

    configure_logging(args.log_level, log_file=args.log_file, trace_mode=args.trace)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        where = f" ({e.source})" if e.source else ""
        print(f"Error: invalid configuration{where}: {e.message}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    reporter = Reporter(should_use_rich_output(args))
    return COMMANDS[args.command](args, reporter, config)


if __name__ == "__main__":
    sys.exit(main())
