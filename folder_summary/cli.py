"""CLI entrypoint for folder-summary."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn

from .config import ConfigError, SummaryConfig, apply_environment, load_config
from .errors import FolderSummaryError
from .logging import configure_logging
from .pipeline import SummaryPipeline
from .stores import AnalysisCache


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folder-summary",
        description="Summarize the structure of a codebase into a Markdown report.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Folder to analyze (defaults to current directory).",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a .folder-summary.yml file (defaults to the one in the analyzed folder).",
    )
    parser.add_argument(
        "-l",
        "--llm-provider",
        choices=("ollama", "openai", "gemini", "none"),
        help="Override the text-generation provider.",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Skip function summaries entirely.",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        help="Maximum number of files analyzed concurrently.",
    )
    parser.add_argument(
        "--cache-file",
        help="Location of the analysis cache (relative paths resolve against the folder).",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Analyze every file without reading or writing the cache.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before starting.",
    )
    parser.add_argument(
        "--log-file",
        help="Also write detailed logs, tagged with the worker thread, to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for folder-summary."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
    )

    directory = Path(args.directory).expanduser()
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    try:
        config = load_config(Path(args.config) if args.config else directory)
        _apply_overrides(config, args)
        pipeline = SummaryPipeline(
            config,
            cache=AnalysisCache(None) if args.no_cache else None,
        )
    except (ConfigError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")

    print("Starting folder summary task")
    print(f"Using LLM model: {pipeline.model_name or 'none (summaries disabled)'}")
    print(f"Folder to analyze: {directory}")

    if not args.yes and sys.stdin.isatty():
        answer = input("Do you want to proceed? (y/n): ")
        if answer.strip().lower() != "y":
            print("Aborted.")
            return

    try:
        files = pipeline.collect_code_files(directory)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    if not files:
        parser.exit(
            1,
            "No code files found to analyze. Please check your configuration and directory path.\n",
        )

    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
        ) as progress:
            task = progress.add_task("Analyzing", total=len(files))
            result = pipeline.run(
                directory,
                files=files,
                progress=lambda _path: progress.advance(task),
            )
    except FolderSummaryError as exc:
        parser.exit(
            1, f"folder-summary failed: {exc}\nRun with --verbose for more details.\n"
        )

    print(f"Analyzed {len(result.analysis)} files")
    print(f"Summary written to {_relativize(result.report_path)}")


def _apply_overrides(config: SummaryConfig, args: argparse.Namespace) -> None:
    if args.llm_provider and args.llm_provider != config.llm.provider:
        config.llm.provider = args.llm_provider
        # Models and keys configured for another provider do not carry over.
        config.llm.model = None
        config.llm.api_key = None
        config.llm.base_url = None
        apply_environment(
            config.llm, {key: value for key, value in os.environ.items() if key != "LLM_PROVIDER"}
        )
    if args.no_llm:
        config.llm.provider = "none"
    if args.workers is not None:
        config.analysis.max_workers = args.workers
    if args.cache_file:
        config.analysis.cache_file = args.cache_file


def _relativize(path: Path | None) -> str:
    if path is None:
        return "(not written)"
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
