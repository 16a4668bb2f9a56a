"""
String, path and date helpers shared by the node collections and the
schema inference.
"""

import hashlib
import os
import posixpath
import re
import unicodedata
from datetime import date, datetime, timezone
from typing import Any, Optional


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_LEADING_SEPARATORS_RE = re.compile(r"^[_.\- ]+")
_SEPARATED_WORD_RE = re.compile(r"[_.\- ]+(\w|$)")
_DIGIT_RUN_RE = re.compile(r"\d+(\w|$)")

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9]+")

_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
_FILE_EXTENSION_RE = re.compile(r"^\.[a-zA-Z][a-zA-Z0-9]*$")

# Keys with this prefix hold internal metadata and never reach the schema.
INTERNAL_KEY_PREFIX = "__"

# Strict ISO 8601: a full calendar date, optionally followed by a time
# and a UTC offset.
ISO_8601_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:[T ](?P<hour>\d{2})(?::?(?P<minute>\d{2})"
    r"(?::?(?P<second>\d{2})(?:\.(?P<fraction>\d{1,6})\d*)?)?)?"
    r"(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)?)?$"
)


def camel_case(value: str, pascal_case: bool = False) -> str:
    """
    Convert a dash/dot/underscore/space separated string to camelCase.

    Existing camelCase boundaries are preserved, all-uppercase words are
    lowercased and letters following a run of digits are uppercased.

    Examples:
        camel_case("foo-bar")        # "fooBar"
        camel_case("Title")          # "title"
        camel_case("post tag", True) # "PostTag"
    """
    value = value.strip()

    if not value:
        return ""

    if len(value) == 1:
        return value.upper() if pascal_case else value.lower()

    if value != value.lower():
        value = _CAMEL_BOUNDARY_RE.sub("-", value)

    value = _LEADING_SEPARATORS_RE.sub("", value).lower()
    value = _SEPARATED_WORD_RE.sub(lambda m: m.group(1).upper(), value)
    value = _DIGIT_RUN_RE.sub(lambda m: m.group(0).upper(), value)

    if pascal_case:
        value = value[:1].upper() + value[1:]

    return value


def slugify(value: Any = "") -> str:
    """
    Convert a display string to a URL-friendly slug.

    Examples:
        "Hello World"     -> "hello-world"
        "Crème Brûlée!"   -> "creme-brulee"
    """
    text = unicodedata.normalize("NFKD", str(value))
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = _SLUG_INVALID_RE.sub("-", text)
    return text.strip("-")


def make_uid(value: str) -> str:
    """Return the md5 hex fingerprint of a string."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_resolvable_path(value: Any) -> bool:
    """
    Check whether a field value looks like a relative path to a local file.

    The value must start with a dot or contain a directory separator and
    end in a file extension. URLs, absolute paths, anchors and anything
    containing whitespace are left alone.
    """
    if not isinstance(value, str) or not value:
        return False

    if any(char.isspace() for char in value):
        return False

    if value.startswith(("/", "#", "?")) or _URL_RE.match(value):
        return False

    if not value.startswith(".") and "/" not in value:
        return False

    extension = posixpath.splitext(value)[1]
    return bool(_FILE_EXTENSION_RE.match(extension))


def resolve_file_path(origin: Optional[str], value: str, resolve_absolute: bool = False) -> str:
    """
    Resolve a relative file path found in a field of a node.

    Args:
        origin: Path of the file the node was created from
        value: The relative path found in the node fields
        resolve_absolute: Return an absolute file system path instead of
            a normalized path relative to the origin directory

    Returns:
        The resolved path, or the value untouched when there is no origin
    """
    if not origin:
        return value

    if resolve_absolute:
        base_dir = os.path.dirname(os.path.abspath(origin))
        return os.path.normpath(os.path.join(base_dir, value))

    return posixpath.normpath(value)


def parse_iso_date(value: Any) -> Optional[datetime]:
    """
    Strictly parse an ISO 8601 value into a UTC datetime.

    Returns:
        The parsed datetime, or None when the value is not a valid date
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if not isinstance(value, str):
        return None

    match = ISO_8601_PATTERN.match(value.strip())
    if not match:
        return None

    parts = match.groupdict()
    offset = parts["offset"]
    text = "{year}-{month}-{day}T{hour}:{minute}:{second}.{fraction}".format(
        year=parts["year"],
        month=parts["month"],
        day=parts["day"],
        hour=parts["hour"] or "00",
        minute=parts["minute"] or "00",
        second=parts["second"] or "00",
        fraction=(parts["fraction"] or "0").ljust(6, "0"),
    )

    if offset and offset != "Z":
        digits = offset[1:].replace(":", "").ljust(4, "0")
        text += f"{offset[0]}{digits[:2]}:{digits[2:]}"
    else:
        text += "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    return parsed.astimezone(timezone.utc)


def is_date(value: Any) -> bool:
    """Check whether a value is a date object or a strict ISO 8601 string."""
    return parse_iso_date(value) is not None
