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

"""ICalendar parsing and date/time handling."""

from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from icalendar.cal import Calendar, Component

# Zone identifiers that denote UTC rather than a named zone.
UTC_TZIDS = {"utc", "etc/utc", "z"}


class ParseError(Exception):
    """The calendar could not be parsed."""

    def __init__(self, cause) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return str(self.cause)


def _format_component_error(err) -> str:
    if isinstance(err, tuple):
        return ": ".join(str(e) for e in err)
    return str(err)


def parse_calendar(text: Union[str, bytes]) -> Calendar:
    """Parse a VCALENDAR document.

    Args:
      text: Calendar contents
    Returns: icalendar Calendar object
    Raises:
      ParseError: if the contents are not a well-formed calendar
    """
    try:
        cal = Calendar.from_ical(text)
    except (ValueError, IndexError) as exc:
        raise ParseError(str(exc)) from exc
    if cal.name != "VCALENDAR":
        raise ParseError(f"root component is {cal.name}, expected VCALENDAR")
    errors = []
    for comp in cal.walk():
        errors.extend(_format_component_error(e) for e in comp.errors)
    if errors:
        raise ParseError("Broken calendar file: " + ", ".join(errors))
    return cal


def get_property(comp: Component, name: str):
    """Return the first value of a property, or None if it is absent."""
    value = comp.get(name)
    if isinstance(value, list):
        # Property occurred more than once
        return value[0] if value else None
    return value


def is_named_timezone(tzid: Optional[str]) -> bool:
    return bool(tzid) and tzid.lower() not in UTC_TZIDS


def get_tzid(prop) -> Optional[str]:
    """Find the named timezone of a DATE-TIME property.

    Returns: TZID, or None for floating, DATE and UTC values
    """
    if not isinstance(getattr(prop, "dt", None), datetime):
        return None
    tzid = prop.params.get("TZID")
    if not is_named_timezone(tzid):
        return None
    return tzid


def as_comparable_ts(prop) -> datetime:
    """Resolve a DATE or DATE-TIME property to a datetime.

    DATE values resolve to midnight. Naive values with a TZID parameter
    are localized if the zone is known; otherwise they stay floating.

    Raises:
      TypeError: if the property does not hold a date or date-time
    """
    dt = prop.dt
    if not isinstance(dt, date):
        raise TypeError(f"not a date or date-time: {dt!r}")
    if not isinstance(dt, datetime):
        dt = datetime.combine(dt, time())
    if dt.tzinfo is None:
        tzid = get_tzid(prop)
        if tzid is not None:
            try:
                dt = dt.replace(tzinfo=ZoneInfo(tzid))
            except (ZoneInfoNotFoundError, ValueError):
                # Unknown zone; compare as floating time
                pass
    return dt


def compare_ts(a: datetime, b: datetime) -> int:
    """Order two resolved timestamps.

    Floating timestamps are compared at face value; when only one of the
    two is floating, the wall-clock time of the other is used.
    """
    if (a.tzinfo is None) != (b.tzinfo is None):
        a = a.replace(tzinfo=None)
        b = b.replace(tzinfo=None)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0
