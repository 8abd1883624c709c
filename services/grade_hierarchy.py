"""
Effective grade resolution.

A session can carry up to four grades on the 20-80 scouting scale. The
authoritative one is the first non-null value in GRADE_PRECEDENCE. The order
is declared once here; nothing else in the codebase should chain grades.
"""

from typing import Any, Optional, Sequence

GRADE_PRECEDENCE: Sequence[str] = (
    "coach_override_grade",
    "coach_grade",
    "scout_grade",
    "player_grade",
)


def _read(source: Any, field: str):
    if isinstance(source, dict):
        return source.get(field)
    return getattr(source, field, None)


def resolve_effective_grade(
    grades: Any,
    fallback: Optional[float] = None,
    precedence: Sequence[str] = GRADE_PRECEDENCE,
) -> Optional[float]:
    """
    First non-null grade in precedence order, else the fallback.

    Args:
        grades: dict or object exposing the grade fields (e.g. a PerformanceSession)
        fallback: value used when no grade is set (the session's execution average)
    """
    for field in precedence:
        value = _read(grades, field)
        if value is not None:
            return float(value)
    return fallback


def grade_source(grades: Any, precedence: Sequence[str] = GRADE_PRECEDENCE) -> Optional[str]:
    """Name of the field that supplied the effective grade, or None."""
    for field in precedence:
        if _read(grades, field) is not None:
            return field
    return None
