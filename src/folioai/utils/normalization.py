# ---------- NORMALIZATION FUNCTIONS ----------

import re
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Sequence

from dateutil import parser as date_parser

EPOCH_DATE = date(1970, 1, 1)

_HORIZONTAL_WS = re.compile(r"[ \t\f\v\r]+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def is_blank(value: Any) -> bool:
    """
    True for values that count as "not provided" in loosely-structured input.

    None, empty or whitespace-only strings, and empty lists/dicts are blank.
    False and 0 are real values.
    """

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def first_present(data: Mapping[str, Any], keys: Sequence[str], default: Any = None) -> Any:
    """
    Resolve a field from a prioritized list of alternative source keys

    Args:
        data: the raw record
        keys: alternative spellings, highest priority first
        default: returned when every alternative is absent or blank

    Returns:
        the first present, non-blank value
    """

    for key in keys:
        value = data.get(key)
        if not is_blank(value):
            return value
    return default


def as_text(value: Any) -> str:
    """
    Coerce a scalar from raw input into a string ("" for None)
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def as_optional_text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    return as_text(value)


def as_list(value: Any) -> list:
    """
    Coerce a list-valued field; anything that is not a list/tuple becomes []
    """

    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_text_list(value: Any) -> List[str]:
    """
    Coerce a list of scalars into a list of non-blank strings
    """

    return [as_text(item) for item in as_list(value) if not is_blank(item)]


def normalize_date(value: Any) -> str:
    """
    Normalize a date to YYYY-MM-DD

    Missing values become "". Strings that cannot be parsed are returned unchanged,
    other types are stringified. Never raises.

    Args:
        value: raw date value

    Returns:
        the normalized date string
    """

    if value is None or value is False or value == 0 or value == "":
        return ""
    if not isinstance(value, str):
        return str(value)
    if not value.strip():
        return ""

    # Missing month and day default to January 1st. A missing year makes the
    # two parses disagree, and such input is kept as given.
    try:
        parsed = date_parser.parse(value.strip(), default=datetime(2000, 1, 1))
        check = date_parser.parse(value.strip(), default=datetime(2001, 1, 1))
    except (ValueError, OverflowError):
        return value
    if parsed.year != check.year:
        return value
    return parsed.date().isoformat()


def date_sort_key(value: str) -> date:
    """
    Sort key for a normalized date string; unparseable and empty dates sort as the epoch
    """

    if not value:
        return EPOCH_DATE
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return date.fromisoformat(normalize_date(value))
    except ValueError:
        return EPOCH_DATE


def collapse_whitespace(text: str) -> str:
    """
    Collapse runs of spaces/tabs to one space, trim every line, cap blank lines at one
    """

    if not text:
        return ""
    lines = [_HORIZONTAL_WS.sub(" ", line).strip() for line in text.split("\n")]
    return _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines)).strip()
