"""Disk and volume CSV parser (``wmic diskdrive`` / ``wmic logicaldisk``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import cell, csv_rows, plural

_GIB = 1024 * 1024 * 1024


def _digits(value: str) -> int:
    digits = re.sub(r"[^0-9]", "", value or "0")
    return int(digits) if digits else 0


def _first_index(headers: list[str], *fragments: str) -> int:
    for i, h in enumerate(headers):
        if any(f in h for f in fragments):
            return i
    return -1


@dataclass(frozen=True, slots=True)
class DiskInfoParser:
    """Physical drive status or per-volume free space, depending on the columns."""

    name: ClassVar[str] = "Disk Info"
    category: ClassVar[Category] = Category.STORAGE

    _model_re = re.compile(r"Model", re.I)
    _size_re = re.compile(r"Size", re.I)
    _status_re = re.compile(r"Status", re.I)
    _node_re = re.compile(r"Node", re.I)
    _caption_re = re.compile(r"Caption", re.I)
    _capacity_re = re.compile(r"Capacity", re.I)
    _free_re = re.compile(r"FreeSpace", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("disk" in fn or "volume" in fn) and fn.endswith(".csv"):
            return True
        drive_like = (
            self._model_re.search(content)
            and self._size_re.search(content)
            and self._status_re.search(content)
            and self._node_re.search(content)
        )
        volume_like = (
            self._caption_re.search(content)
            and self._capacity_re.search(content)
            and self._free_re.search(content)
        )
        return bool(drive_like or volume_like)

    def parse(self, content: str) -> ParseResult:
        rows = csv_rows(content)
        if len(rows) < 2:
            return ParseResult(
                summary={"disk_count": 0},
                score=100,
                issues=[
                    Issue(
                        severity=Severity.INFO,
                        title="No disk data found",
                        detail="Could not parse disk info output.",
                        recommendation=(
                            "Ensure the file was generated with: "
                            "wmic diskdrive get model,size,status /format:csv"
                        ),
                    )
                ],
            )

        headers = [h.lower().strip() for h in rows[0]]
        is_volume = any("freespace" in h or "capacity" in h for h in headers)
        is_drive = any("model" in h for h in headers)
        if is_volume and not is_drive:
            return self._parse_volumes(rows, headers)
        return self._parse_drives(rows, headers)

    @staticmethod
    def _parse_drives(rows: list[list[str]], headers: list[str]) -> ParseResult:
        issues: list[Issue] = []
        model_idx = _first_index(headers, "model")
        size_idx = _first_index(headers, "size")
        status_idx = _first_index(headers, "status")
        width = max(model_idx, size_idx, status_idx)

        disks: list[dict[str, Any]] = []
        for row in rows[1:]:
            if len(row) <= width:
                continue
            size_bytes = _digits(cell(row, size_idx))
            disks.append(
                {
                    "model": cell(row, model_idx) or "Unknown",
                    "size_gb": round_half_up(size_bytes / _GIB),
                    "status": cell(row, status_idx) or "Unknown",
                }
            )
        summary: dict[str, Any] = {"disk_count": len(disks), "disks": disks}

        for disk in disks:
            model, size_gb, status = disk["model"], disk["size_gb"], disk["status"]
            if status.lower() not in ("ok", "", "unknown"):
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f'Disk "{model}" status: {status}',
                        detail=(
                            f'Disk {model} ({size_gb} GB) is reporting status "{status}" which '
                            "indicates potential failure."
                        ),
                        raw=f"Model: {model}, Size: {size_gb} GB, Status: {status}",
                        recommendation=(
                            "BACK UP YOUR DATA IMMEDIATELY. This disk may be failing. Replace the "
                            "drive as soon as possible."
                        ),
                    )
                )
            elif 0 < size_gb < 64:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        title=f"Small disk detected: {model} ({size_gb} GB)",
                        detail=(
                            f"Disk {model} is only {size_gb} GB. This may be a boot drive or "
                            "removable media."
                        ),
                        raw=f"Model: {model}, Size: {size_gb} GB",
                        recommendation="Ensure you have adequate storage space for your needs.",
                    )
                )

        if disks and not issues:
            n = len(disks)
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{n} disk{plural(n)} detected - all reporting OK",
                    detail=", ".join(f"{d['model']} ({d['size_gb']} GB)" for d in disks),
                    recommendation="Disk health looks good.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

    @staticmethod
    def _parse_volumes(rows: list[list[str]], headers: list[str]) -> ParseResult:
        issues: list[Issue] = []
        caption_idx = _first_index(headers, "caption")
        capacity_idx = _first_index(headers, "capacity")
        free_idx = _first_index(headers, "freespace", "free")
        width = max(caption_idx, capacity_idx, free_idx)

        volumes: list[dict[str, Any]] = []
        for row in rows[1:]:
            if len(row) <= width:
                continue
            capacity = _digits(cell(row, capacity_idx))
            free = _digits(cell(row, free_idx))
            if capacity <= 0:
                continue
            volumes.append(
                {
                    "caption": cell(row, caption_idx),
                    "capacity_gb": round_half_up(capacity / _GIB),
                    "free_gb": round_half_up(free / _GIB),
                    "used_percent": round_half_up((capacity - free) / capacity * 100),
                }
            )
        summary: dict[str, Any] = {"volume_count": len(volumes), "volumes": volumes}

        for v in volumes:
            caption, used = v["caption"], v["used_percent"]
            raw = f"Caption: {caption}, Capacity: {v['capacity_gb']} GB, Free: {v['free_gb']} GB"
            if used > 95:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"Volume {caption} is almost full ({used}% used)",
                        detail=(
                            f"Only {v['free_gb']} GB free of {v['capacity_gb']} GB total on "
                            f"{caption}."
                        ),
                        raw=raw,
                        recommendation=(
                            "Free up disk space immediately. Delete temp files, empty recycle "
                            "bin, or move data to external storage."
                        ),
                    )
                )
            elif used > 85:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Volume {caption} is {used}% full",
                        detail=(
                            f"{v['free_gb']} GB free of {v['capacity_gb']} GB total on {caption}."
                        ),
                        raw=raw,
                        recommendation=(
                            "Consider freeing up space. Run Disk Cleanup or remove unused "
                            "applications."
                        ),
                    )
                )

        if not issues and volumes:
            n = len(volumes)
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{n} volume{plural(n)} - adequate free space",
                    detail=", ".join(
                        f"{v['caption']} {v['free_gb']}/{v['capacity_gb']} GB free" for v in volumes
                    ),
                    recommendation="Storage space looks sufficient.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)
