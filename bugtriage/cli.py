"""
bugtriage-report
================
Command line entry point: builds the weekly intermittent / perma failure
report, writes it as HTML and opens it in a browser.

    bugtriage-report [--no-open] [--concurrency N] [--output PATH] [--json PATH]
"""
import sys
import time
import asyncio
import logging
import argparse
from typing import List, Optional

from bugtriage.agents.bugzilla_client import BugzillaError
from bugtriage.agents.orchestrator import ReportOrchestrator
from bugtriage.core.config import LOG_LEVEL, MAX_CONCURRENCY, OUTPUT_HTML, RunConfig
from bugtriage.services.browser import open_in_browser
from bugtriage.services.report_writer import ReportWriter
from bugtriage.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bugtriage-report",
        description="Generate the Bugzilla intermittent / perma failure triage report.",
    )
    parser.add_argument("--no-open", action="store_true",
                        help="Disable opening browser after generating report")
    parser.add_argument("--concurrency", type=_positive_int, default=MAX_CONCURRENCY,
                        help="Maximum number of concurrent Bugzilla fetches (default: %(default)s)")
    parser.add_argument("--output", default=OUTPUT_HTML,
                        help="HTML report path (default: %(default)s)")
    parser.add_argument("--json", dest="json_output", default=None,
                        help="Also write the report data as JSON to this path")
    parser.add_argument("--log-level", default=LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log verbosity (default: %(default)s)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level))

    start = time.time()
    try:
        return _generate(args)
    finally:
        print(f"Report generated in {time.time() - start:.2f}s")


def _generate(args: argparse.Namespace) -> int:
    print("Generating Bugzilla report...")

    orchestrator = ReportOrchestrator(config=RunConfig(concurrency=args.concurrency))
    try:
        data = asyncio.run(orchestrator.run())
    except BugzillaError as e:
        logger.error("%s (%s)", e, e.url)
        return 1

    if data.is_empty:
        print("No matching bugs found.")
        return 0

    writer = ReportWriter()
    writer.write_html(data, args.output)
    if args.json_output:
        writer.write_json(data, args.json_output)
    print(f"Report written to {args.output}")

    if not args.no_open:
        open_in_browser(args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
