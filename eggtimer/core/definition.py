# eggtimer/core/definition.py
from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from .exceptions import InvalidSegmentDefinition


@runtime_checkable
class SegmentDefinition(Protocol):
    """
    Recognizer deciding whether a line opens or closes a segment instance.

    Implementations must be stateless: the same line always gives the same
    answer, whatever was seen before.
    """

    @property
    def type_name(self) -> str: ...

    def is_start(self, line: str) -> str | None:
        """Tag of the segment this line starts, or None."""
        ...

    def is_finish(self, line: str) -> str | None:
        """Tag of the segment this line finishes, or None."""
        ...


def _compile(expr: str | re.Pattern[str], role: str, type_name: str) -> re.Pattern[str]:
    try:
        pattern = expr if isinstance(expr, re.Pattern) else re.compile(expr)
    except (re.error, TypeError) as e:
        raise InvalidSegmentDefinition(
            f"{type_name}: invalid {role} expression {expr!r}: {e}"
        ) from e
    if pattern.groups != 1:
        raise InvalidSegmentDefinition(
            f"{type_name}: {role} expression {pattern.pattern!r} must contain exactly "
            f"one capturing group, found {pattern.groups}."
        )
    return pattern


class RegexpDef:
    """Regular-expression based SegmentDefinition.

    Each expression has a single capturing group holding the tag of the
    segment instance, e.g. ``r"^Start\\s+(\\w+)"`` turns "Start x" into tag
    "x". Patterns are searched anywhere in the line; anchor them with ``^``
    when needed. A match whose group is empty is not a match.
    """

    __slots__ = ("_name", "_start", "_finish")

    def __init__(
        self,
        type_name: str,
        start_expr: str | re.Pattern[str],
        finish_expr: str | re.Pattern[str],
    ) -> None:
        if not isinstance(type_name, str) or not type_name.strip():
            raise InvalidSegmentDefinition("RegexpDef.type_name must be a non-empty string.")
        self._name = type_name
        self._start = _compile(start_expr, "start", type_name)
        self._finish = _compile(finish_expr, "finish", type_name)

    @property
    def type_name(self) -> str:
        return self._name

    @property
    def start_pattern(self) -> str:
        return self._start.pattern

    @property
    def finish_pattern(self) -> str:
        return self._finish.pattern

    def is_start(self, line: str) -> str | None:
        return _tag(self._start, line)

    def is_finish(self, line: str) -> str | None:
        return _tag(self._finish, line)

    def __repr__(self) -> str:
        return (
            f"RegexpDef({self._name!r}, {self._start.pattern!r}, {self._finish.pattern!r})"
        )


def _tag(pattern: re.Pattern[str], line: str) -> str | None:
    m = pattern.search(line)
    if m is None:
        return None
    return m.group(1) or None
