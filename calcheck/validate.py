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

"""Calendar validation rules.

Every rule is a generator over Diagnostic objects. Rules never modify the
calendar they inspect and keep no state between calls, so the same document
always produces the same diagnostics in the same order.
"""

import logging
from collections.abc import Iterator
from typing import Callable

from icalendar.cal import Calendar, Component

from .diagnostics import Diagnostic, ValidationResult, error, warning
from .icalendar import (
    ParseError,
    as_comparable_ts,
    compare_ts,
    get_property,
    get_tzid,
    parse_calendar,
)

EXPECTED_VERSION = "2.0"

# (marker, diagnostic) pairs checked against the raw text.
STRUCTURE_MARKERS = [
    ("BEGIN:VCALENDAR", error("Missing BEGIN:VCALENDAR declaration")),
    ("END:VCALENDAR", error("Missing END:VCALENDAR declaration")),
    ("VERSION:", error("Missing VERSION property")),
    ("PRODID:", warning("Missing PRODID property (recommended)")),
]


def precheck(text: str) -> Iterator[Diagnostic]:
    """Check the raw text for gross structural problems.

    This works on any text, including text that can not be parsed.

    Args:
      text: Raw calendar contents
    Returns: iterator over diagnostics
    """
    for marker, diagnostic in STRUCTURE_MARKERS:
        if marker not in text:
            yield diagnostic


def get_events(cal: Calendar) -> list[Component]:
    return [comp for comp in cal.subcomponents if comp.name == "VEVENT"]


def has_timezones(cal: Calendar) -> bool:
    return any(comp.name == "VTIMEZONE" for comp in cal.subcomponents)


def event_scope(index: int) -> str:
    return f"Event {index}"


def check_version(cal: Calendar) -> Iterator[Diagnostic]:
    version = get_property(cal, "VERSION")
    # A missing VERSION is reported by precheck()
    if version is not None and str(version) != EXPECTED_VERSION:
        yield warning(f"VERSION should be {EXPECTED_VERSION}, found: {version}")


def check_has_events(cal: Calendar) -> Iterator[Diagnostic]:
    if not get_events(cal):
        yield warning("No events found in calendar")


CALENDAR_RULES: list[Callable[[Calendar], Iterator[Diagnostic]]] = [
    check_version,
    check_has_events,
]


def check_required_properties(
    cal: Calendar, event: Component, scope: str
) -> Iterator[Diagnostic]:
    for name in ("UID", "DTSTAMP", "DTSTART"):
        if not get_property(event, name):
            yield error(f"Missing {name} property", scope)
    if not get_property(event, "SUMMARY"):
        yield warning("Missing SUMMARY property (recommended)", scope)


def check_end_or_duration(
    cal: Calendar, event: Component, scope: str
) -> Iterator[Diagnostic]:
    dtend = get_property(event, "DTEND")
    duration = get_property(event, "DURATION")
    if not dtend and not duration:
        yield warning("No DTEND or DURATION specified", scope)
    if dtend and duration:
        yield error("Both DTEND and DURATION specified (only one allowed)", scope)


def check_date_order(
    cal: Calendar, event: Component, scope: str
) -> Iterator[Diagnostic]:
    dtstart = get_property(event, "DTSTART")
    dtend = get_property(event, "DTEND")
    if not dtstart or not dtend:
        return
    try:
        order = compare_ts(as_comparable_ts(dtend), as_comparable_ts(dtstart))
    except (TypeError, ValueError, AttributeError, OverflowError) as exc:
        # Malformed dates are reported by the parser
        logging.debug("Unable to compare DTSTART and DTEND of %s: %s", scope, exc)
        return
    if order < 0:
        yield error("End date is before start date", scope)


def check_timezone_defined(
    cal: Calendar, event: Component, scope: str
) -> Iterator[Diagnostic]:
    dtstart = get_property(event, "DTSTART")
    if not dtstart:
        return
    tzid = get_tzid(dtstart)
    # Any VTIMEZONE will do; it is not matched against the TZID.
    if tzid is not None and not has_timezones(cal):
        yield warning(
            f"Uses timezone {tzid} but no VTIMEZONE component found", scope
        )


EVENT_RULES: list[Callable[[Calendar, Component, str], Iterator[Diagnostic]]] = [
    check_required_properties,
    check_end_or_duration,
    check_date_order,
    check_timezone_defined,
]


def check_duplicate_uids(cal: Calendar) -> Iterator[Diagnostic]:
    """Report every event that reuses a UID seen on an earlier event."""
    seen = set()
    for i, event in enumerate(get_events(cal), 1):
        uid = get_property(event, "UID")
        if not uid:
            continue
        uid = str(uid)
        if uid in seen:
            yield error(f"Duplicate UID found: {uid}", event_scope(i))
        seen.add(uid)


def validate_event(cal: Calendar, event: Component, index: int) -> Iterator[Diagnostic]:
    scope = event_scope(index)
    for rule in EVENT_RULES:
        yield from rule(cal, event, scope)


def validate_calendar(cal: Calendar) -> Iterator[Diagnostic]:
    """Validate a parsed calendar.

    Args:
      cal: Calendar object
    Returns: iterator over diagnostics
    """
    for rule in CALENDAR_RULES:
        yield from rule(cal)
    for i, event in enumerate(get_events(cal), 1):
        yield from validate_event(cal, event, i)
    yield from check_duplicate_uids(cal)


def validate_document(text: str) -> ValidationResult:
    """Validate the contents of a single calendar file.

    Structural findings always come first. If the text can not be parsed,
    a single parse error is added and no further checks are run.

    Args:
      text: Raw calendar contents
    Returns: A new ValidationResult
    """
    result = ValidationResult.from_diagnostics(precheck(text))
    try:
        cal = parse_calendar(text)
    except ParseError as exc:
        result.add(error(f"Failed to parse ICS file: {exc}"))
        return result
    result.extend(validate_calendar(cal))
    return result
