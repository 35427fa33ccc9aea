"""Text helpers shared by prompt assembly and the fallback report."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..domain.report_models import FacultyCoordinator

PLACEHOLDER = "Not specified"

_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_date(value: date) -> str:
    """Render a date as ``10 January 2024`` regardless of process locale."""
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"


def or_placeholder(value: Optional[object], placeholder: str = PLACEHOLDER) -> str:
    if value is None:
        return placeholder
    text = str(value).strip()
    return text or placeholder


def format_coordinators(coordinators: Iterable[FacultyCoordinator], empty: str = PLACEHOLDER) -> str:
    parts = []
    for fc in coordinators:
        if fc.designation:
            parts.append(f"{fc.name} ({fc.designation})")
        else:
            parts.append(fc.name)
    return ", ".join(parts) or empty
