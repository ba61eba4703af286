"""Shared text helpers for report parsers.

Report files come from platform tools that emit loosely structured HTML,
CSV and key/value text; these helpers keep the per-format modules focused on
their thresholds.
"""

from __future__ import annotations

import csv
import io
import math
import re
from collections.abc import Sequence

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_NUMBER_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def to_int(text: str) -> int:
    """Parse an integer that may contain thousands separators."""
    return int(text.replace(",", "").strip())


def parse_number(text: str | None) -> float | None:
    """Parse the leading number of ``text`` (``"12.5 GB"`` -> 12.5)."""
    if not text:
        return None
    m = _NUMBER_PREFIX_RE.match(text)
    if not m:
        return None
    return float(m.group(1))


def parse_int_prefix(text: str | None) -> int | None:
    """Parse the leading integer of ``text``; None when there is none."""
    if not text:
        return None
    m = re.match(r"^\s*([+-]?\d+)", text)
    return int(m.group(1)) if m else None


def round_to(value: float, places: int) -> float:
    """Round half up to ``places`` decimals."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def fmt_num(value: float) -> str:
    """Format a number without a trailing ``.0`` for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def plural(count: int, suffix: str = "s") -> str:
    return suffix if count > 1 else ""


def strip_tags(text: str) -> str:
    """Replace HTML tags with spaces and collapse whitespace."""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()


def extract_section(content: str, keyword: str, span: int = 300, limit: int = 200) -> str:
    """Return a short tag-free excerpt starting at ``keyword``."""
    idx = content.find(keyword)
    if idx == -1:
        return ""
    return strip_tags(content[idx : idx + span])[:limit]


def search_group(pattern: re.Pattern[str], content: str, group: int = 1) -> str | None:
    """Return one group of the first match, or None."""
    m = pattern.search(content)
    return m.group(group) if m else None


def csv_rows(content: str) -> list[list[str]]:
    """Split CSV text into rows, dropping blank lines.

    Tool output is frequently preceded by a BOM or padded with blank lines;
    quoted fields may contain commas.
    """
    text = content.lstrip("\ufeff")
    lines = [line for line in text.splitlines() if line.strip()]
    reader = csv.reader(io.StringIO("\n".join(lines)), skipinitialspace=False)
    return [[c.strip() for c in row] for row in reader]


def cell(row: Sequence[str], idx: int) -> str:
    """Return a trimmed cell or ``""`` when the column is missing."""
    if idx < 0 or idx >= len(row):
        return ""
    return row[idx].strip()


def header_containing(headers: Sequence[str], *fragments: str) -> int:
    """Index of the first header containing any of ``fragments``."""
    lowered = [h.strip().lower() for h in headers]
    for i, h in enumerate(lowered):
        if any(f.lower() in h for f in fragments):
            return i
    return -1


def is_html_name(filename: str) -> bool:
    fn = filename.lower()
    return fn.endswith(".html") or fn.endswith(".htm")
