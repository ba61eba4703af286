from __future__ import annotations

import codecs
import gzip
from pathlib import Path

import pytest

from mcp_health_check_server.core.intake import (
    DEFAULT_MAX_BYTES,
    collect_report_paths,
    decode_report,
    max_report_bytes,
    read_report,
    read_reports,
    report_labels,
    resolve_under_base,
)


def test_decode_utf8_bom() -> None:
    assert decode_report(codecs.BOM_UTF8 + b"Host Name: PC") == "Host Name: PC"


def test_decode_utf16_with_bom() -> None:
    data = "Windows IP Configuration\r\n".encode("utf-16")

    assert decode_report(data) == "Windows IP Configuration\r\n"


def test_decode_gzip() -> None:
    data = gzip.compress("[    0.000000] Linux version 6.5.0\n".encode("utf-8"))

    assert decode_report(data).startswith("[    0.000000] Linux version")


def test_decode_invalid_utf8_uses_replacement() -> None:
    assert decode_report(b"caf\xe9") == "caf\ufffd"


def test_max_report_bytes_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HEALTH_CHECK_MAX_BYTES", raising=False)
    assert max_report_bytes() == DEFAULT_MAX_BYTES

    monkeypatch.setenv("HEALTH_CHECK_MAX_BYTES", "1024")
    assert max_report_bytes() == 1024

    monkeypatch.setenv("HEALTH_CHECK_MAX_BYTES", "lots")
    with pytest.raises(ValueError, match="must be an integer"):
        max_report_bytes()

    monkeypatch.setenv("HEALTH_CHECK_MAX_BYTES", "0")
    with pytest.raises(ValueError, match=">= 1"):
        max_report_bytes()


def test_resolve_under_base_rejects_escape(tmp_path: Path) -> None:
    base = tmp_path / "base"
    base.mkdir()

    assert resolve_under_base("reports/a.txt", base) == (base / "reports" / "a.txt").resolve()
    with pytest.raises(ValueError, match="Path escapes base dir"):
        resolve_under_base("../outside.txt", base)


def test_collect_report_paths(tmp_path: Path) -> None:
    (tmp_path / "b.txt").write_text("b", encoding="utf-8")
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")
    (tmp_path / ".hidden").write_text("h", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.txt").write_text("c", encoding="utf-8")

    flat = collect_report_paths([tmp_path])
    deep = collect_report_paths([tmp_path, tmp_path / "a.txt"], recursive=True)

    assert [p.name for p in flat] == ["a.txt", "b.txt"]
    assert [p.name for p in deep] == ["a.txt", "b.txt", "c.txt"]


def test_collect_report_paths_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        collect_report_paths([tmp_path / "nope.txt"])


@pytest.mark.asyncio
async def test_read_report_decodes_utf16(tmp_path: Path) -> None:
    path = tmp_path / "systeminfo.txt"
    path.write_bytes("Host Name: DESKTOP\r\n".encode("utf-16"))

    assert await read_report(path) == "Host Name: DESKTOP\r\n"


@pytest.mark.asyncio
async def test_read_report_size_cap(tmp_path: Path) -> None:
    path = tmp_path / "big.txt"
    path.write_text("x" * 100, encoding="utf-8")

    with pytest.raises(ValueError, match="size limit"):
        await read_report(path, max_bytes=10)


@pytest.mark.asyncio
async def test_read_reports_keeps_order(tmp_path: Path) -> None:
    paths = []
    for name in ("one.txt", "two.txt"):
        p = tmp_path / name
        p.write_text(name, encoding="utf-8")
        paths.append(p)

    assert await read_reports(paths) == [("one.txt", "one.txt"), ("two.txt", "two.txt")]


def test_decode_gzip_stops_at_size_cap() -> None:
    data = gzip.compress(b"x" * 10_000)

    with pytest.raises(ValueError, match="after decompression"):
        decode_report(data, name="dmesg.gz", max_bytes=100)
    assert decode_report(data, max_bytes=10_000) == "x" * 10_000


@pytest.mark.asyncio
async def test_read_report_caps_decompressed_size(tmp_path: Path) -> None:
    path = tmp_path / "journal.txt.gz"
    path.write_bytes(gzip.compress(b"x" * 10_000))
    assert path.stat().st_size < 100

    with pytest.raises(ValueError, match="journal.txt.gz exceeds"):
        await read_report(path, max_bytes=100)


def test_report_labels_widen_only_on_collision(tmp_path: Path) -> None:
    paths = [
        tmp_path / "a" / "battery-report.txt",
        tmp_path / "b" / "battery-report.txt",
        tmp_path / "a" / "dmesg.txt",
    ]

    assert report_labels(paths) == ["a/battery-report.txt", "b/battery-report.txt", "dmesg.txt"]
