"""Report file intake: path expansion, sandboxing and text decoding.

Platform tools write their reports in a mix of encodings (PowerShell
redirection produces UTF-16 with a BOM, msinfo32 exports are often UTF-16,
Linux tools write UTF-8) and users sometimes gzip them. Everything is decoded
to ``str`` here so parsers only ever see text.
"""

from __future__ import annotations

import asyncio
import codecs
import gzip
import io
import logging
import os
from collections import Counter
from collections.abc import Iterable, Sequence
from pathlib import Path

import aiofiles

logger = logging.getLogger(__name__)

BASE_DIR_ENV = "HEALTH_CHECK_BASE_DIR"
MAX_BYTES_ENV = "HEALTH_CHECK_MAX_BYTES"
DEFAULT_MAX_BYTES = 20 * 1024 * 1024

_GZIP_MAGIC = b"\x1f\x8b"


def max_report_bytes() -> int:
    """Per-file size cap from HEALTH_CHECK_MAX_BYTES (default 20 MiB)."""
    env = os.getenv(MAX_BYTES_ENV)
    if not env:
        return DEFAULT_MAX_BYTES
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{MAX_BYTES_ENV} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{MAX_BYTES_ENV} must be >= 1")
    return value


def configured_base_dir() -> Path | None:
    raw = os.getenv(BASE_DIR_ENV)
    return Path(raw).expanduser().resolve() if raw else None


def resolve_under_base(path: str | Path, base_dir: Path) -> Path:
    """Resolve ``path`` (relative paths against ``base_dir``) and reject escapes."""
    base = base_dir.resolve()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def collect_report_paths(paths: Iterable[str | Path], *, recursive: bool = False) -> list[Path]:
    """Expand directories into their (non-hidden) files, keeping argument order.

    Files inside a directory are sorted by name. Missing paths raise
    FileNotFoundError.
    """
    out: list[Path] = []
    seen: set[Path] = set()
    for raw in paths:
        p = Path(raw).expanduser()
        if p.is_dir():
            candidates = p.rglob("*") if recursive else p.iterdir()
            files = sorted(
                (c for c in candidates if c.is_file() and not c.name.startswith(".")),
                key=lambda c: str(c.relative_to(p)),
            )
        elif p.is_file():
            files = [p]
        else:
            raise FileNotFoundError(f"File not found: {p}")
        for f in files:
            key = f.resolve()
            if key not in seen:
                seen.add(key)
                out.append(f)
    return out


def decode_report(data: bytes, *, name: str = "", max_bytes: int | None = None) -> str:
    """Decode report bytes: gzip, UTF-8/UTF-16 BOMs, else UTF-8 with replacement.

    At most ``max_bytes + 1`` bytes are inflated from a gzip payload, so a
    small archive cannot expand past the size cap.
    """
    if data.startswith(_GZIP_MAGIC):
        with gzip.GzipFile(fileobj=io.BytesIO(data)) as gz:
            data = gz.read() if max_bytes is None else gz.read(max_bytes + 1)
        if max_bytes is not None and len(data) > max_bytes:
            raise ValueError(
                f"{name or 'report'} exceeds the {max_bytes}-byte report size limit "
                "after decompression"
            )
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8) :].decode("utf-8", errors="replace")
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return data.decode("utf-16", errors="replace")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("%s is not valid UTF-8; decoding with replacement", name or "<report>")
        return data.decode("utf-8", errors="replace")


async def read_report(path: str | Path, *, max_bytes: int | None = None) -> str:
    """Read one report file fully into memory as text."""
    p = Path(path)
    limit = max_bytes if max_bytes is not None else max_report_bytes()
    async with aiofiles.open(p, mode="rb") as f:
        data = await f.read(limit + 1)
    if len(data) > limit:
        raise ValueError(f"{p.name} exceeds the {limit}-byte report size limit")
    return decode_report(data, name=p.name, max_bytes=limit)


def report_labels(paths: Sequence[Path]) -> list[str]:
    """Display names for ``paths``: the basename, widened with parent folders until unique.

    ``a/battery.txt`` and ``b/battery.txt`` read in one batch stay distinct
    instead of the later file replacing the earlier one.
    """
    depth = [1] * len(paths)
    while True:
        labels = [Path(*p.parts[-d:]).as_posix() for p, d in zip(paths, depth)]
        counts = Counter(labels)
        widened = False
        for i, (p, label) in enumerate(zip(paths, labels)):
            if counts[label] > 1 and depth[i] < len(p.parts):
                depth[i] += 1
                widened = True
        if not widened:
            return labels


async def read_reports(
    paths: Sequence[Path], *, max_bytes: int | None = None
) -> list[tuple[str, str]]:
    """Read several reports concurrently; returns ``(label, text)`` pairs in input order."""
    texts = await asyncio.gather(*(read_report(p, max_bytes=max_bytes) for p in paths))
    return list(zip(report_labels(paths), texts))
