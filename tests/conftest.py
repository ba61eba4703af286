from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

BATTERY_REPORT = (
    "Battery report\n"
    "Design Capacity: 50000 mWh\n"
    "Full Charge Capacity: 20000 mWh\n"
)

DMESG = "\n".join(
    [
        "[    0.000000] Linux version 6.5.0-14-generic (buildd@lcy02) (gcc 12.3.0)",
        "[    0.000000] DMI: LENOVO 20XW/20XW, BIOS N32ET75W 04/12/2022",
        "[    2.345678] usb 1-2: device descriptor read/64, error -71",
        "[ 1234.567890] mce: [Hardware Error]: Machine check events logged",
    ]
)

MEMINFO = "\n".join(
    [
        "MemTotal:       16384000 kB",
        "MemFree:         1000000 kB",
        "MemAvailable:    8192000 kB",
        "SwapTotal:             0 kB",
        "SwapFree:              0 kB",
    ]
)

IP_ADDR = "\n".join(
    [
        "1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536 qdisc noqueue state UNKNOWN group default qlen 1000",
        "    link/loopback 00:00:00:00:00:00 brd 00:00:00:00:00:00",
        "    inet 127.0.0.1/8 scope host lo",
        "2: eth0: <BROADCAST,MULTICAST> mtu 1500 qdisc fq_codel state DOWN group default qlen 1000",
        "    link/ether 52:54:00:12:34:56 brd ff:ff:ff:ff:ff:ff",
    ]
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def battery_report() -> str:
    return BATTERY_REPORT


@pytest.fixture
def dmesg_log() -> str:
    return DMESG


@pytest.fixture
def meminfo() -> str:
    return MEMINFO


@pytest.fixture
def ip_addr() -> str:
    return IP_ADDR


@pytest.fixture
def write_report() -> Callable[[Path, str], Path]:
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def report_dir(tmp_path: Path, write_report: Callable[[Path, str], Path]) -> Path:
    """A folder with a battery report, a dmesg log and an unrecognized note."""
    write_report(tmp_path / "reports" / "battery-report.txt", BATTERY_REPORT)
    write_report(tmp_path / "reports" / "dmesg.txt", DMESG)
    write_report(tmp_path / "reports" / "notes.txt", "remember to buy milk\n")
    return tmp_path / "reports"
