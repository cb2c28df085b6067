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

"""Locating and reading calendar files."""

import asyncio
import glob
import logging
import os
from collections.abc import Iterable, Iterator
from typing import Optional

import aiohttp

from .config import DEFAULT_CONCURRENCY
from .diagnostics import ValidationResult, error
from .validate import validate_document

DEFAULT_TIMEOUT = 30


class SourceError(Exception):
    """A calendar could not be read."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(reason)
        self.location = location
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class EnumerationError(Exception):
    """The set of files to validate could not be determined."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(reason)
        self.pattern = pattern
        self.reason = reason

    def __str__(self) -> str:
        return f"Unable to find files matching {self.pattern!r}: {self.reason}"


def split_patterns(patterns: str) -> Iterator[str]:
    """Split a pattern argument into individual glob patterns.

    Patterns are separated by newlines. Blank lines and lines starting
    with '#' are ignored.
    """
    for line in patterns.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def _expand(pattern: str, root: str) -> set[str]:
    path = pattern if os.path.isabs(pattern) else os.path.join(root, pattern)
    return {
        os.path.normpath(p)
        for p in glob.glob(path, recursive=True)
        if os.path.isfile(p)
    }


def find_files(patterns: Iterable[str], root: Optional[str] = None) -> list[str]:
    """Find the files matching a set of glob patterns.

    Args:
      patterns: Glob patterns; patterns starting with '!' exclude matches
      root: Directory relative patterns are resolved against
        (defaults to the current directory)
    Returns: Sorted list of file paths
    Raises:
      EnumerationError: if the patterns can not be evaluated
    """
    patterns = list(patterns)
    if root is None:
        root = os.getcwd()
    if not os.path.isdir(root):
        raise EnumerationError("\n".join(patterns), f"{root} is not a directory")
    include = [p for p in patterns if not p.startswith("!")]
    exclude = [p[1:] for p in patterns if p.startswith("!")]
    if not include:
        raise EnumerationError("\n".join(patterns), "no patterns to match")
    found: set[str] = set()
    for pattern in include:
        found.update(_expand(pattern, root))
    for pattern in exclude:
        found.difference_update(_expand(pattern, root))
    return sorted(found)


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def display_name(location: str) -> str:
    """Return the name used for a location in logs and reports."""
    if is_url(location):
        return location
    try:
        return os.path.relpath(location)
    except ValueError:
        # Different drive on Windows
        return location


def read_file(path: str) -> str:
    with open(path, "rb") as f:
        return f.read().decode("utf-8", "replace")


async def fetch_url(session: aiohttp.ClientSession, url: str) -> str:
    async with session.get(url) as response:
        if response.status >= 400:
            raise SourceError(url, f"HTTP {response.status} {response.reason}")
        data = await response.read()
    return data.decode("utf-8", "replace")


async def load_source(location: str, session: aiohttp.ClientSession) -> str:
    """Load the contents of a file or URL.

    Raises:
      SourceError: if the contents could not be retrieved
    """
    try:
        if is_url(location):
            return await fetch_url(session, location)
        return await asyncio.to_thread(read_file, location)
    except asyncio.TimeoutError as exc:
        raise SourceError(location, "timed out") from exc
    except OSError as exc:
        raise SourceError(location, str(exc)) from exc
    except aiohttp.ClientError as exc:
        raise SourceError(location, str(exc) or type(exc).__name__) from exc


async def validate_source(
    location: str, session: aiohttp.ClientSession
) -> ValidationResult:
    """Read and validate a single calendar.

    A read failure is reported as a single error in the result.
    """
    try:
        text = await load_source(location, session)
    except SourceError as exc:
        logging.debug("Unable to read %s: %s", location, exc)
        return ValidationResult([error(f"Failed to read file: {exc}")])
    return validate_document(text)


async def validate_sources(
    locations: Iterable[str],
    concurrency: int = DEFAULT_CONCURRENCY,
    timeout: float = DEFAULT_TIMEOUT,
) -> dict[str, ValidationResult]:
    """Validate a set of calendars.

    Calendars are validated independently of each other, at most
    `concurrency` at a time.

    Returns: dictionary mapping location to result, in input order
    """
    locations = list(locations)
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _validate(location, session):
        async with semaphore:
            logging.info("Validating: %s", display_name(location))
            return await validate_source(location, session)

    async with aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=timeout)
    ) as session:
        results = await asyncio.gather(
            *[_validate(location, session) for location in locations]
        )
    return dict(zip(locations, results))
