"""
Dot-separated numeric version ordering.

Each segment of a version string contributes the integer formed by its
leading decimal digits, or 0 when it has none. Missing trailing segments
count as 0, so ``"1.2"``, ``"1.2.0"`` and ``"1.2.x"`` all compare equal, and
so do ``"1.2.3-rc1"`` and ``"1.2.3"``.
"""

from __future__ import annotations

import functools
import re
from itertools import zip_longest
from typing import Iterable, List, Tuple


ParsedVersion = Tuple[int, ...]

SEGMENT_DELIMITER = "."

_LEADING_DIGITS = re.compile(r"[0-9]+")

# Below the interpreter's str -> int digit limit.
_DIGIT_CHUNK = 1000


def _digits_to_int(digits: str) -> int:
    value = 0
    for start in range(0, len(digits), _DIGIT_CHUNK):
        chunk = digits[start:start + _DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def _segment_value(segment: str) -> int:
    match = _LEADING_DIGITS.match(segment)
    if match is None:
        return 0
    return _digits_to_int(match.group())


def parse_version(identifier: str) -> ParsedVersion:
    """Parse a version string into one integer per segment."""
    return tuple(_segment_value(part) for part in identifier.split(SEGMENT_DELIMITER))


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        -1 if ``a`` orders before ``b``, 1 if after, 0 if they are equal.
    """
    for left, right in zip_longest(parse_version(a), parse_version(b), fillvalue=0):
        if left > right:
            return 1
        if left < right:
            return -1
    return 0


def version_key(identifier: str) -> ParsedVersion:
    """Sort key that agrees with :func:`compare_versions`."""
    parsed = list(parse_version(identifier))
    while parsed and parsed[-1] == 0:
        parsed.pop()
    return tuple(parsed)


def sort_versions(identifiers: Iterable[str], reverse: bool = False) -> List[str]:
    return sorted(identifiers, key=version_key, reverse=reverse)


@functools.total_ordering
class NumericVersion:
    """A version string compared under the numeric segment ordering."""

    __slots__ = ("raw", "_key")

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self._key = version_key(raw)

    @property
    def parts(self) -> ParsedVersion:
        return parse_version(self.raw)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumericVersion):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: "NumericVersion") -> bool:
        if not isinstance(other, NumericVersion):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        return f"NumericVersion({self.raw!r})"

    def __str__(self) -> str:
        return self.raw
