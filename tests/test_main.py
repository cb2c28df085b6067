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

"""Tests for calcheck.__main__."""

import argparse
import asyncio
import json
import logging
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from calcheck.__main__ import GitHubActionsFormatter, add_parser, main, run
from calcheck.sources import EnumerationError, display_name

VALID_VCALENDAR = """\
BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//calcheck//tests//EN
BEGIN:VEVENT
UID:abc123
DTSTAMP:20240101T120000Z
DTSTART:20240115T090000Z
DTEND:20240115T100000Z
SUMMARY:Team meeting
END:VEVENT
END:VCALENDAR
"""

NO_SUMMARY_VCALENDAR = """\
BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//calcheck//tests//EN
BEGIN:VEVENT
UID:abc123
DTSTAMP:20240101T120000Z
DTSTART:20240115T090000Z
DTEND:20240115T100000Z
END:VEVENT
END:VCALENDAR
"""

DUPLICATE_VCALENDAR = """\
BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//calcheck//tests//EN
BEGIN:VEVENT
UID:abc123
DTSTAMP:20240101T120000Z
DTSTART:20240115T090000Z
DTEND:20240115T100000Z
SUMMARY:Team meeting
END:VEVENT
BEGIN:VEVENT
UID:abc123
DTSTAMP:20240101T120000Z
DTSTART:20240116T090000Z
DTEND:20240116T100000Z
SUMMARY:Team meeting
END:VEVENT
END:VCALENDAR
"""


def parse_args(argv):
    parser = argparse.ArgumentParser()
    add_parser(parser)
    return parser.parse_args(argv)


class RunTests(unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)

    def write(self, name, contents):
        path = os.path.join(self.test_dir, name)
        with open(path, "w") as f:
            f.write(contents)
        return path

    def run_main(self, argv, environ=None):
        return asyncio.run(run(parse_args(argv), environ or {}))

    def test_valid(self):
        path = self.write("valid.ics", VALID_VCALENDAR)
        with self.assertLogs(level="INFO") as cm:
            self.assertEqual(0, self.run_main([path]))
        self.assertIn("INFO:root:Found 1 ICS file(s) to validate", cm.output)
        self.assertIn("INFO:root:All ICS files are valid!", cm.output)

    def test_errors_fail(self):
        path = self.write("dup.ics", DUPLICATE_VCALENDAR)
        with self.assertLogs(level="ERROR") as cm:
            self.assertEqual(1, self.run_main([path]))
        self.assertEqual(
            [
                f"ERROR:root:{display_name(path)}: "
                "Event 2: Duplicate UID found: abc123",
                "ERROR:root:Validation failed with 1 error(s)",
            ],
            cm.output,
        )

    def test_errors_not_gated(self):
        path = self.write("dup.ics", DUPLICATE_VCALENDAR)
        with self.assertLogs(level="INFO"):
            self.assertEqual(0, self.run_main(["--no-fail-on-error", path]))

    def test_warnings_not_gated_by_default(self):
        path = self.write("nosummary.ics", NO_SUMMARY_VCALENDAR)
        with self.assertLogs(level="WARNING") as cm:
            self.assertEqual(0, self.run_main([path]))
        self.assertEqual(
            [
                f"WARNING:root:{display_name(path)}: "
                "Event 1: Missing SUMMARY property (recommended)"
            ],
            cm.output,
        )

    def test_warnings_gated(self):
        path = self.write("nosummary.ics", NO_SUMMARY_VCALENDAR)
        with self.assertLogs(level="INFO"):
            self.assertEqual(1, self.run_main(["--fail-on-warning", path]))

    def test_warnings_gated_by_environment(self):
        path = self.write("nosummary.ics", NO_SUMMARY_VCALENDAR)
        with self.assertLogs(level="INFO"):
            self.assertEqual(
                1, self.run_main([path], {"INPUT_FAIL-ON-WARNING": "true"})
            )

    def test_unreadable_file_does_not_stop_run(self):
        valid = self.write("valid.ics", VALID_VCALENDAR)
        missing = os.path.join(self.test_dir, "missing.ics")
        report_path = os.path.join(self.test_dir, "report.json")
        with self.assertLogs(level="INFO"):
            self.assertEqual(
                1, self.run_main(["--report", report_path, missing, valid])
            )
        with open(report_path) as f:
            report = json.load(f)
        self.assertEqual([display_name(missing), display_name(valid)], list(report))
        self.assertEqual(
            {"errors": [], "warnings": []}, report[display_name(valid)]
        )
        self.assertTrue(
            report[display_name(missing)]["errors"][0].startswith(
                "Failed to read file: "
            )
        )

    def test_pattern(self):
        self.write("valid.ics", VALID_VCALENDAR)
        self.write("dup.ics", DUPLICATE_VCALENDAR)
        cwd = os.getcwd()
        os.chdir(self.test_dir)
        self.addCleanup(os.chdir, cwd)
        with self.assertLogs(level="INFO") as cm:
            self.assertEqual(0, self.run_main(["--files", "valid.ics"]))
        self.assertIn("INFO:root:Validating: valid.ics", cm.output)
        self.assertNotIn("INFO:root:Validating: dup.ics", cm.output)

    def test_no_matches(self):
        cwd = os.getcwd()
        os.chdir(self.test_dir)
        self.addCleanup(os.chdir, cwd)
        with self.assertLogs(level="WARNING") as cm:
            self.assertEqual(0, self.run_main(["--files", "**/*.ics"]))
        self.assertEqual(
            ["WARNING:root:No ICS files found matching pattern: **/*.ics"], cm.output
        )

    def test_enumeration_failure(self):
        with patch(
            "calcheck.__main__.find_files",
            side_effect=EnumerationError("*.ics", "boom"),
        ):
            with self.assertLogs(level="ERROR") as cm:
                self.assertEqual(2, self.run_main(["--files", "*.ics"]))
        self.assertEqual(
            ["ERROR:root:Action failed: Unable to find files matching '*.ics': boom"],
            cm.output,
        )

    def test_invalid_configuration(self):
        path = self.write("valid.ics", VALID_VCALENDAR)
        with self.assertLogs(level="ERROR"):
            self.assertEqual(
                2, self.run_main([path], {"INPUT_FAIL-ON-ERROR": "sometimes"})
            )

    def test_github_outputs(self):
        path = self.write("dup.ics", DUPLICATE_VCALENDAR)
        output = os.path.join(self.test_dir, "github_output")
        with self.assertLogs(level="INFO"):
            self.run_main([path], {"GITHUB_OUTPUT": output})
        with open(output) as f:
            lines = f.read().splitlines()
        self.assertEqual(["errors=1", "warnings=0"], lines[:2])


class GitHubActionsFormatterTests(unittest.TestCase):
    def format(self, level, msg, *args):
        formatter = GitHubActionsFormatter("%(message)s")
        record = logging.LogRecord("root", level, __file__, 1, msg, args, None)
        return formatter.format(record)

    def test_info(self):
        self.assertEqual("Found 1 file", self.format(logging.INFO, "Found %d file", 1))

    def test_error(self):
        self.assertEqual(
            "::error::a.ics: Missing UID property",
            self.format(logging.ERROR, "%s: %s", "a.ics", "Missing UID property"),
        )

    def test_warning_multiline(self):
        self.assertEqual(
            "::warning::100%25 broken%0Areally",
            self.format(logging.WARNING, "100% broken\nreally"),
        )


class MainTests(unittest.TestCase):
    def test_version(self):
        with patch("sys.stdout"):
            with self.assertRaises(SystemExit) as cm:
                asyncio.run(main(["--version"]))
        self.assertEqual(0, cm.exception.code)


if __name__ == "__main__":
    unittest.main()
