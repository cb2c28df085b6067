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

"""Reports covering a whole validation run."""

import json
import uuid
from typing import Optional

from .diagnostics import ValidationResult


class RunReport:
    """Validation results for a set of calendars, keyed by name."""

    def __init__(self) -> None:
        self._results: dict[str, ValidationResult] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._results!r})"

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self):
        return iter(self._results)

    def __getitem__(self, name: str) -> ValidationResult:
        return self._results[name]

    def items(self):
        return self._results.items()

    def add(self, name: str, result: ValidationResult) -> None:
        self._results[name] = result

    @property
    def total_errors(self) -> int:
        return sum(len(r.errors) for r in self._results.values())

    @property
    def total_warnings(self) -> int:
        return sum(len(r.warnings) for r in self._results.values())

    def to_json(self):
        return {name: result.to_json() for (name, result) in self._results.items()}

    def dumps(self) -> str:
        return json.dumps(self.to_json(), indent=2)

    @classmethod
    def from_json(cls, data):
        ret = cls()
        for name, result in data.items():
            ret.add(name, ValidationResult.from_json(result))
        return ret

    @classmethod
    def loads(cls, text: str):
        return cls.from_json(json.loads(text))

    def failure_reason(
        self, fail_on_error: bool = True, fail_on_warning: bool = False
    ) -> Optional[str]:
        """Determine whether the run should fail.

        Returns: Description of the failure, or None if the run passed
        """
        if fail_on_error and self.total_errors > 0:
            return f"Validation failed with {self.total_errors} error(s)"
        if fail_on_warning and self.total_warnings > 0:
            return f"Validation failed with {self.total_warnings} warning(s)"
        return None


def format_github_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_github_outputs(report: RunReport, path: str) -> None:
    """Append the run totals and report to a GitHub Actions output file."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(format_github_output("errors", str(report.total_errors)))
        f.write(format_github_output("warnings", str(report.total_warnings)))
        f.write(format_github_output("report", report.dumps()))
