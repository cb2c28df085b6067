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

"""Diagnostics produced while validating a calendar."""

import collections
from collections.abc import Iterable
from typing import Optional

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


class Diagnostic(
    collections.namedtuple(
        "Diagnostic", ["severity", "message", "scope"], defaults=[None]
    )
):
    """A single finding.

    Args:
      severity: SEVERITY_ERROR or SEVERITY_WARNING
      message: Human readable description
      scope: Document-relative locator (e.g. "Event 3"), or None for
        findings that apply to the whole document
    """

    __slots__ = ()

    def __str__(self) -> str:
        if self.scope:
            return f"{self.scope}: {self.message}"
        return self.message


def error(message: str, scope: Optional[str] = None) -> Diagnostic:
    return Diagnostic(SEVERITY_ERROR, message, scope)


def warning(message: str, scope: Optional[str] = None) -> Diagnostic:
    return Diagnostic(SEVERITY_WARNING, message, scope)


class ValidationResult:
    """Errors and warnings found in a single document."""

    def __init__(self, errors=None, warnings=None) -> None:
        self.errors: list[Diagnostic] = list(errors or [])
        self.warnings: list[Diagnostic] = list(warnings or [])

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errors={self.errors!r}, warnings={self.warnings!r})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, ValidationResult)
            and self.errors == other.errors
            and self.warnings == other.warnings
        )

    def add(self, diagnostic: Diagnostic) -> None:
        if diagnostic.severity == SEVERITY_ERROR:
            self.errors.append(diagnostic)
        elif diagnostic.severity == SEVERITY_WARNING:
            self.warnings.append(diagnostic)
        else:
            raise ValueError(f"unknown severity {diagnostic.severity!r}")

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    @classmethod
    def from_diagnostics(cls, diagnostics: Iterable[Diagnostic]):
        ret = cls()
        ret.extend(diagnostics)
        return ret

    @property
    def is_valid(self) -> bool:
        return not self.errors and not self.warnings

    def to_json(self) -> dict[str, list[str]]:
        """Return the JSON representation used in reports."""
        return {
            "errors": [str(d) for d in self.errors],
            "warnings": [str(d) for d in self.warnings],
        }

    @classmethod
    def from_json(cls, data):
        """Rebuild a result from its JSON representation.

        Scopes are not recovered; they remain part of the message text.
        """
        return cls(
            errors=[error(m) for m in data.get("errors", [])],
            warnings=[warning(m) for m in data.get("warnings", [])],
        )
