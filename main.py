"""CLI entry point for the CV screener."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from src.core.config import Settings, WeightConfiguration
from src.core.errors import AnalysisAborted, ScreenerError, describe_error
from src.pipeline.scoring_client import ScoringClient
from src.pipeline.session import ScreeningSession
from src.results.analytics import score_distribution, skills_cloud
from src.results.exporters import EXPORT_FORMATS, render_export, write_export
from src.results.store import NUMERIC_SORT_FIELDS, TEXT_SORT_FIELDS


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in defaults)",
    )
    parser.add_argument(
        "--provider",
        default=None,
        choices=["anthropic", "openai", "gemini", "ollama"],
        help="LLM provider (overrides llm.provider in the config)",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Model name (overrides llm.model in the config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def _add_job_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--title", default="", help="Job title")
    description = parser.add_mutually_exclusive_group(required=True)
    description.add_argument("--description", help="Job description text")
    description.add_argument("--description-file", help="Path to a file holding the job description")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="CV screener - score candidate CVs against a job description",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- analyze subcommand ---
    analyze_parser = subparsers.add_parser("analyze", help="Score CVs against a job")
    analyze_parser.add_argument("files", nargs="+", help="CV files (.pdf, .doc, .docx)")
    _add_job_args(analyze_parser)
    _add_common_args(analyze_parser)
    analyze_parser.add_argument(
        "--weights",
        default=None,
        help="role,experience,skills,education,achievements (must sum to 100)",
    )
    analyze_parser.add_argument(
        "--no-priorities",
        action="store_true",
        help="Skip job priority extraction and use the default rubric",
    )
    analyze_parser.add_argument("--min-score", type=int, default=0, help="Minimum score to show")
    analyze_parser.add_argument("--search", default="", help="Search name, role, company, summary")
    analyze_parser.add_argument(
        "--skill", action="append", default=[], help="Skill tag filter (repeatable)",
    )
    analyze_parser.add_argument(
        "--education", action="append", default=[], help="Education tag filter (repeatable)",
    )
    analyze_parser.add_argument(
        "--sort",
        default="score",
        choices=list(NUMERIC_SORT_FIELDS + TEXT_SORT_FIELDS),
        help="Sort field (default: score)",
    )
    analyze_parser.add_argument("--page", type=int, default=1, help="Result page to print")
    analyze_parser.add_argument(
        "--export",
        choices=list(EXPORT_FORMATS),
        help="Export the filtered view (csv, json or report)",
    )
    analyze_parser.add_argument(
        "--output",
        default=None,
        help="Export path (default: a file in the working directory; '-' for stdout)",
    )

    # --- extract-priorities subcommand ---
    priorities_parser = subparsers.add_parser(
        "extract-priorities",
        help="Extract the priority profile of a job description",
    )
    _add_job_args(priorities_parser)
    _add_common_args(priorities_parser)

    # --- test-connection subcommand ---
    connection_parser = subparsers.add_parser(
        "test-connection",
        help="Check that the configured LLM provider answers",
    )
    _add_common_args(connection_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply command-line overrides."""
    settings = Settings.from_yaml(args.config) if args.config else Settings()
    overrides = {}
    if args.provider:
        overrides["provider"] = args.provider
    if args.model:
        overrides["model"] = args.model
    if overrides:
        settings.llm = settings.llm.model_copy(update=overrides)
    if getattr(args, "weights", None):
        settings.weights = WeightConfiguration.from_csv(args.weights)
    return settings


def read_description(args: argparse.Namespace) -> str:
    if args.description_file:
        path = Path(args.description_file)
        if not path.is_file():
            msg = f"Job description file not found: {path}"
            raise FileNotFoundError(msg)
        return path.read_text(encoding="utf-8")
    return args.description


def _print_progress(done: int, total: int) -> None:
    print(f"Analyzed {done}/{total} CVs...")


async def cmd_analyze(args: argparse.Namespace, settings: Settings) -> None:
    """Handle analyze subcommand."""
    client = ScoringClient.from_config(settings.llm)

    with ScreeningSession(settings) as session:
        session.set_job(args.title, read_description(args))

        report = session.add_paths(args.files)
        for rejected in report.rejected:
            print(f"Skipped {rejected.file_name}: {rejected}", file=sys.stderr)
        print(f"{len(session.documents)} CVs ready for analysis.")

        await session.analyze(
            client,
            use_priorities=not args.no_priorities,
            on_progress=_print_progress,
        )

        store = session.store
        store.apply_filters(
            min_score=args.min_score,
            search_text=args.search,
            skill_tags=args.skill,
            education_tags=args.education,
        )
        store.sort_by(args.sort)
        page = store.page(args.page)

        print(f"\nShowing {page.start_index}-{page.end_index} of {page.total_items} "
              f"(page {page.number}/{page.total_pages})")
        for rank, r in enumerate(page.items, start=page.start_index):
            print(f"  {rank}. [{r.score:3d}] {r.name} - {r.role} ({r.file_name})")

        view = store.view
        print("\nScore distribution:")
        for label, count in score_distribution(view).items():
            print(f"  {label}: {count}")
        terms = skills_cloud(view, top_n=10)
        if terms:
            print("Top terms: " + ", ".join(word for word, _ in terms))

        if args.export:
            if args.output == "-":
                print(render_export(view, args.export, session.job))
            else:
                path = write_export(view, args.export, args.output, session.job)
                print(f"Exported {len(view)} results to {path}")


async def cmd_extract_priorities(args: argparse.Namespace, settings: Settings) -> None:
    """Handle extract-priorities subcommand."""
    from src.profile.priorities import extract_priorities

    client = ScoringClient.from_config(settings.llm)
    client.validate_credentials()
    priorities = await extract_priorities(client, args.title, read_description(args))
    print(priorities.model_dump_json(indent=2))


async def cmd_test_connection(args: argparse.Namespace, settings: Settings) -> bool:
    """Handle test-connection subcommand."""
    client = ScoringClient.from_config(settings.llm)
    client.validate_credentials()
    ok = await client.test_connection()
    status = "OK" if ok else "FAILED"
    print(f"Connection to {settings.llm.provider}: {status}")
    return ok


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "analyze":
            asyncio.run(cmd_analyze(args, settings))
        elif args.command == "extract-priorities":
            asyncio.run(cmd_extract_priorities(args, settings))
        elif not asyncio.run(cmd_test_connection(args, settings)):
            sys.exit(1)
    except AnalysisAborted as e:
        print(f"Error: {describe_error(e)} ({e})", file=sys.stderr)
        sys.exit(1)
    except ScreenerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, ImportError, ValidationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
