"""Glob patterns for selecting tools by name."""

import re
from collections.abc import Iterable


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob where ``*`` matches any run and ``?`` one character."""
    escaped = re.escape(pattern).replace(r"\*", ".*").replace(r"\?", ".")
    return re.compile(f"^{escaped}$")


def normalize_patterns(patterns: str | Iterable[str] | None) -> list[str]:
    """Return patterns as a list, accepting a single string."""
    if patterns is None:
        return []
    if isinstance(patterns, str):
        return [patterns]
    return list(patterns)


def matches_filter(name: str, patterns: str | Iterable[str] | None) -> bool:
    """Check whether a tool name passes a set of glob filters.

    Patterns prefixed with ``!`` exclude matching names. When no positive
    pattern is given every name is included before exclusions apply.

    Examples:
        >>> matches_filter("hris_list_employees", "hris_*")
        True
        >>> matches_filter("hris_delete_employee", ["hris_*", "!*_delete_*"])
        False

    Args:
        name: Tool name to test
        patterns: A glob or list of globs

    Returns:
        True if the name is selected by the patterns.
    """
    pattern_list = normalize_patterns(patterns)
    positive = [p for p in pattern_list if not p.startswith("!")]
    negative = [p[1:] for p in pattern_list if p.startswith("!")]

    included = not positive or any(_glob_to_regex(p).match(name) for p in positive)
    excluded = any(_glob_to_regex(p).match(name) for p in negative)
    return included and not excluded
