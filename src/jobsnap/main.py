import argparse
import asyncio
import logging
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from jobsnap import config
from jobsnap.catalog import INDEX_FILENAME, SORT_KEYS, Catalog, days_until, filter_by_deadline
from jobsnap.errors import ExitCode, JobSnapError
from jobsnap.models import CatalogEntry
from jobsnap.snapshot import reparse_job_snapshot, save_job_snapshot

# Set up logging once, in the application entry point only
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger(__name__)


def format_deadline(value: str | None, today: date | None = None) -> str:
    """The deadline followed by how soon it is, e.g. "25 Dec 2024 (Tomorrow)"."""
    if not value:
        return "No deadline"
    days = days_until(value, today)
    if days is None:
        return value
    if days < 0:
        urgency = f"Expired {-days}d ago"
    elif days == 0:
        urgency = "Today!"
    elif days == 1:
        urgency = "Tomorrow"
    else:
        urgency = f"{days}d left"
    return f"{value} ({urgency})"


def format_entry(entry: CatalogEntry, today: date | None = None) -> str:
    """One catalog entry as two console lines."""
    deadline = format_deadline(entry.application_deadline, today)
    return (
        f"{entry.job_id:<10}{entry.title or 'Untitled'}\n"
        f"{'':<10}{entry.company or 'Unknown company'}  {deadline}"
    )


def run_save(args: argparse.Namespace) -> ExitCode:
    output_root = Path(args.out or config.OUTPUT_DIR)
    skip_existing = args.skip or config.SKIP_EXISTING
    template = args.template or config.FILENAME_TEMPLATE

    result = asyncio.run(
        save_job_snapshot(
            args.url,
            output_root,
            skip_existing=skip_existing,
            filename_template=template,
            timeout=config.HTTP_TIMEOUT,
        )
    )
    logger.info(f"{'Skipped' if result.skipped else 'Saved'}: {result.job_dir}")
    logger.info(f"Markdown: {result.md_path}")
    logger.info(f"Index: {result.index_path}")
    return ExitCode.OK


def run_reparse(args: argparse.Namespace) -> ExitCode:
    template = args.template or config.FILENAME_TEMPLATE
    result = reparse_job_snapshot(args.target, filename_template=template)
    logger.info(f"Reparsed: {result.job_dir}")
    logger.info(f"Markdown: {result.md_path}")
    logger.info(f"Index: {result.index_path}")
    return ExitCode.OK


def run_list(args: argparse.Namespace) -> ExitCode:
    catalog = Catalog(Path(args.out or config.OUTPUT_DIR) / INDEX_FILENAME)
    entries = catalog.sorted_entries(by=args.by)
    if args.status:
        entries = filter_by_deadline(entries, args.status)
    if not entries:
        print("No jobs found matching the criteria." if args.status else "No jobs found.")
        print("Run 'jobsnap save <url>' to save your first job.")
        return ExitCode.OK

    print(f"{len(entries)} job{'' if len(entries) == 1 else 's'} found\n")
    for entry in entries:
        print(format_entry(entry) + "\n")
    return ExitCode.OK


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="jobsnap",
        description="Save bdjobs.com job circulars as structured JSON and markdown.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    save = commands.add_parser("save", help="Fetch and save a job page.")
    save.add_argument("url", help="Job URL, e.g. https://bdjobs.com/jobs/details/1436685")
    save.add_argument("--out", metavar="DIR", help="Output directory (overrides JOBSNAP_OUTPUT_DIR).")
    save.add_argument(
        "--skip",
        action="store_true",
        help="Skip jobs that are already in the catalog.",
    )
    save.add_argument(
        "--template",
        metavar="PATTERN",
        help="Markdown filename template using {title}, {company} and {job_id}.",
    )
    save.set_defaults(handler=run_save)

    reparse = commands.add_parser("reparse", help="Re-parse a saved raw.html.")
    reparse.add_argument("target", help="Job directory or path to its raw.html.")
    reparse.add_argument("--template", metavar="PATTERN", help="Markdown filename template.")
    reparse.set_defaults(handler=run_reparse)

    listing = commands.add_parser("list", help="List saved jobs.")
    listing.add_argument("--out", metavar="DIR", help="Output directory (overrides JOBSNAP_OUTPUT_DIR).")
    listing.add_argument("--by", choices=SORT_KEYS, default="saved", help="Sort order (default: saved).")
    status = listing.add_mutually_exclusive_group()
    status.add_argument(
        "--active",
        dest="status",
        action="store_const",
        const="active",
        help="Only jobs whose deadline has not passed.",
    )
    status.add_argument(
        "--expired",
        dest="status",
        action="store_const",
        const="expired",
        help="Only jobs whose deadline has passed.",
    )
    listing.set_defaults(handler=run_list)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run one CLI command and return its exit status."""
    args = parse_args(argv)
    try:
        return int(args.handler(args))
    except JobSnapError as e:
        logger.error(str(e))
        return int(e.exit_code)
    except ValidationError as e:
        logger.error(f"Invalid job data: {e}")
        return int(ExitCode.PARSE_FAILED)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return int(ExitCode.CONFIG_INVALID)
    except OSError as e:
        logger.error(f"File system error: {e}")
        return int(ExitCode.WRITE_FAILED)


def cli(argv: list[str] | None = None) -> None:
    """CLI entry point for the package."""
    raise SystemExit(main(argv))


if __name__ == "__main__":
    cli()
