"""Utility functions."""
import math
import random
import re
import string
from datetime import datetime, timezone
from typing import Optional

# Leading numeric prefix, the way spreadsheet cells like "12.5kg" are read
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 7


def parse_number(s: Optional[str]) -> Optional[float]:
    """Parse the leading decimal number of a string, returning None if there is none."""
    if s is None:
        return None
    m = _FLOAT_PREFIX_RE.match(str(s))
    if not m:
        return None
    value = float(m.group(1))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_integer(s: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a string ("8.9" -> 8), returning None if there is none."""
    if s is None:
        return None
    m = _INT_PREFIX_RE.match(str(s))
    return int(m.group(1)) if m else None


def format_number(value: float) -> str:
    """Render a number for a sheet cell: integral values without a trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return math.floor(value + 0.5)


def generate_id(now: Optional[datetime] = None) -> str:
    """Creation-time id: UTC ISO timestamp followed by a random base-36 suffix."""
    now = now or datetime.now(timezone.utc)
    timestamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    suffix = "".join(random.choices(_ID_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return timestamp + suffix
