"""
Input parsers for job and interview fields.

Every parser is pure and never raises on bad input: it returns a ParseResult
whose ``error`` carries a field-specific message, so callers can collect
messages per field before deciding to reject a request.
"""
import math
import re
from datetime import date, datetime, timezone
from typing import Any, List, NamedTuple, Optional

SALARY_PATTERN = re.compile(r"^(\d+(\.\d+)?)(\s*LPA)?$", re.IGNORECASE)
REQUIREMENT_DELIMITERS = re.compile(r"[,;\n]")


class ParseResult(NamedTuple):
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fail(message: str) -> ParseResult:
    return ParseResult(None, message)


def normalize_text(value: Any) -> str:
    """Trimmed string form of a value; None becomes an empty string."""
    if value is None:
        return ""
    return str(value).strip()


def parse_requirements(value: Any) -> ParseResult:
    """
    Parse a requirement list.

    Accepts a list/tuple of strings or a single string separated by commas,
    semicolons or newlines. Entries are trimmed and empty ones dropped; the
    result may be an empty list.
    """
    if value is None:
        return ParseResult([])

    if isinstance(value, (list, tuple)):
        items = value
    elif isinstance(value, str):
        items = REQUIREMENT_DELIMITERS.split(value)
    else:
        return _fail("Requirements must be a list or a comma-separated string.")

    requirements: List[str] = []
    for item in items:
        text = normalize_text(item)
        if text:
            requirements.append(text)
    return ParseResult(requirements)


def parse_salary(value: Any) -> ParseResult:
    """Parse a salary such as ``12``, ``12.5`` or ``"12.5 LPA"`` into a float."""
    if isinstance(value, bool) or value is None:
        return _fail("Salary is required.")

    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        match = SALARY_PATTERN.match(normalize_text(value))
        if not match:
            return _fail("Salary must be a number, optionally followed by LPA (e.g. 12 or 12.5 LPA).")
        amount = float(match.group(1))

    if not math.isfinite(amount) or amount <= 0:
        return _fail("Salary must be a positive number.")
    return ParseResult(amount)


def parse_deadline(value: Any, field: str = "deadline") -> ParseResult:
    """
    Parse a timestamp into naive UTC.

    Accepts datetime/date objects and ISO-8601 strings (``2025-06-01``,
    ``2025-06-01T10:00:00Z``, with or without an offset).
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return _fail(f"{field} is required.")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return _fail(f"{field} must be a valid date.")
    else:
        return _fail(f"{field} must be a valid date.")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return ParseResult(parsed)


def _parse_number(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_position(value: Any) -> ParseResult:
    """Number of open positions, truncated to an integer; must be at least 1."""
    number = _parse_number(value)
    if number is None:
        return _fail("Position must be a valid number.")
    if number <= 0:
        return _fail("Position must be greater than 0.")
    return ParseResult(number)


def parse_experience(value: Any) -> ParseResult:
    """Years of experience, truncated to an integer; must not be negative."""
    number = _parse_number(value)
    if number is None:
        return _fail("Experience level must be a valid number.")
    if number < 0:
        return _fail("Experience level cannot be negative.")
    return ParseResult(number)
