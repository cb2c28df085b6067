# calcheck
# Copyright (C) 2026 The calcheck authors
#
# This program is free software; you can redistribute it and/or
# modify it under the terms of the GNU General Public License
# as published by the Free Software Foundation; version 3
# of the License or (at your option) any later version of
# the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston,
# MA  02110-1301, USA.

"""calcheck command-line handling."""

import argparse
import asyncio
import logging
import os
import sys

from . import version_string
from .config import ConfigError, load_configs, resolve_settings
from .report import RunReport, write_github_outputs
from .sources import (
    EnumerationError,
    display_name,
    find_files,
    split_patterns,
    validate_sources,
)


class GitHubActionsFormatter(logging.Formatter):
    """Format log records as GitHub Actions workflow commands."""

    commands = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.commands.get(record.levelno)
        if command is None:
            return message
        # Workflow command data must be on a single line
        message = (
            message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        )
        return f"::{command}::{message}"


def setup_logging(level=logging.INFO, github_annotations=False) -> None:
    if github_annotations:
        handler = logging.StreamHandler()
        handler.setFormatter(GitHubActionsFormatter("%(message)s"))
        logging.basicConfig(level=level, handlers=[handler], force=True)
    else:
        logging.basicConfig(level=level, format="%(message)s", force=True)


def add_parser(parser):
    parser.add_argument(
        "locations",
        nargs="*",
        metavar="FILE",
        help="Calendar files or http(s) URLs to validate. "
        "Overrides --files.",
    )
    parser.add_argument(
        "--files",
        default=None,
        help="Glob pattern(s) of files to validate, one per line; "
        "prefix a pattern with ! to exclude matches. [**/*.ics]",
    )
    parser.add_argument(
        "--fail-on-error",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exit with an error status if any errors are found. [yes]",
    )
    parser.add_argument(
        "--fail-on-warning",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exit with an error status if any warnings are found. [no]",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of calendars to read at the same time. [8]",
    )
    parser.add_argument(
        "--report",
        default=None,
        metavar="PATH",
        help="Write a JSON report to PATH ('-' for standard output).",
    )
    parser.add_argument(
        "--config",
        default=None,
        metavar="PATH",
        help="Configuration file to read. [.calcheck, if present]",
    )
    parser.add_argument(
        "--github-annotations",
        action="store_true",
        default=os.environ.get("GITHUB_ACTIONS") == "true",
        help="Emit errors and warnings as GitHub Actions annotations.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug output."
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only show problems."
    )


def log_results(report: RunReport) -> None:
    for name, result in report.items():
        for diagnostic in result.errors:
            logging.error("%s: %s", name, diagnostic)
        for diagnostic in result.warnings:
            logging.warning("%s: %s", name, diagnostic)


def log_summary(report: RunReport) -> None:
    logging.info("")
    logging.info("=== Validation Summary ===")
    logging.info("Total files validated: %d", len(report))
    logging.info("Total errors: %d", report.total_errors)
    logging.info("Total warnings: %d", report.total_warnings)


def write_report(report: RunReport, path: str) -> None:
    if path == "-":
        sys.stdout.write(report.dumps() + "\n")
        return
    with open(path, "w", encoding="utf-8") as f:
        f.write(report.dumps())
        f.write("\n")
    logging.info("Wrote report to %s", path)


async def run(args, environ=None) -> int:
    """Validate the calendars selected by the command-line arguments.

    Returns: Process exit status
    """
    if environ is None:
        environ = os.environ
    try:
        settings = resolve_settings(args, load_configs(args.config, environ))
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc.message)
        return 2

    if args.locations:
        locations = list(args.locations)
        description = " ".join(locations)
    else:
        description = settings.files
        try:
            locations = find_files(split_patterns(settings.files))
        except EnumerationError as exc:
            logging.error("Action failed: %s", exc)
            return 2

    if not locations:
        logging.warning("No ICS files found matching pattern: %s", description)
        return 0

    logging.info("Found %d ICS file(s) to validate", len(locations))

    results = await validate_sources(locations, concurrency=settings.concurrency)
    report = RunReport()
    for location, result in results.items():
        report.add(display_name(location), result)

    log_results(report)
    log_summary(report)

    try:
        if args.report:
            write_report(report, args.report)
        if environ.get("GITHUB_OUTPUT"):
            write_github_outputs(report, environ["GITHUB_OUTPUT"])
    except OSError as exc:
        logging.error("Action failed: unable to write report: %s", exc)
        return 2

    reason = report.failure_reason(settings.fail_on_error, settings.fail_on_warning)
    if reason is not None:
        logging.error("%s", reason)
        return 1
    if report.total_errors == 0 and report.total_warnings == 0:
        logging.info("All ICS files are valid!")
    return 0


async def main(argv):
    parser = argparse.ArgumentParser(prog="calcheck")
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + version_string,
    )
    add_parser(parser)
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    setup_logging(level, github_annotations=args.github_annotations)

    return await run(args)


def cli_main():
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    cli_main()
