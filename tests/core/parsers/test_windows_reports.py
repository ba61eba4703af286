from __future__ import annotations

from datetime import datetime

import pytest

from mcp_health_check_server.core.models import Severity
from mcp_health_check_server.core.parsers import (
    DxDiagParser,
    EnergyReportParser,
    MsInfoParser,
    RunningProcessesParser,
    SleepStudyParser,
    StartupProgramsParser,
    SystemEventsParser,
    SystemInfoParser,
    WifiReportParser,
    WindowsUpdatesParser,
)


def _titles(result) -> list[str]:
    return [i.title for i in result.issues]


# Energy report


def test_energy_report_errors_and_warnings() -> None:
    text = (
        "<html><title>Energy Efficiency Diagnostics Report</title>"
        "<p>3 Errors</p><p>2 Warnings</p><p>5 Informational</p></html>"
    )
    p = EnergyReportParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary == {"errors": 3, "warnings": 2, "informational": 5}
    assert _titles(result) == ["Energy report found 3 errors", "Energy report has 2 warnings"]
    assert result.score == 68


def test_energy_report_without_counts_reports_no_data() -> None:
    result = EnergyReportParser().parse(
        "<html><title>Energy Efficiency Diagnostics Report</title></html>"
    )

    assert _titles(result) == ["No energy report data found"]
    assert result.issues[0].severity is Severity.INFO
    assert result.score == 98


# Sleep study


def test_sleep_study_high_and_excessive_drain() -> None:
    text = "\n".join(
        [
            "<html><h1>Sleep Study</h1><table>",
            "<tr><td>Modern Standby 2:00:00 25%</td></tr>",
            "<tr><td>Modern Standby 1:00:00 8%</td></tr>",
            "<tr><td>Modern Standby 0:30:00 1%</td></tr>",
            "</table></html>",
        ]
    )
    p = SleepStudyParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["session_count"] == 3
    assert _titles(result) == [
        "High sleep drain detected in 2 of 3 sessions",
        "1 sleep session with excessive drain (>20%)",
    ]
    assert result.issues[1].raw == "Duration: 2:00:00, Drain: 25%"
    assert result.score == 60


def test_sleep_study_offender_is_informational() -> None:
    text = (
        "<html><h1>Sleep Study</h1>"
        "<p>Modern Standby 1:00:00 2%</p>"
        "<p>Top Offender: <span>Realtek Audio</span></p></html>"
    )

    result = SleepStudyParser().parse(text)

    assert result.summary["top_offenders"] == ["Realtek Audio"]
    assert _titles(result) == ["1 device active during sleep"]
    assert result.score == 98


# MSInfo32


def _msinfo(available: str) -> str:
    return "\n".join(
        [
            "[System Summary]",
            "Item\tValue",
            "OS Name\tMicrosoft Windows 11 Pro",
            "System Manufacturer\tLENOVO",
            "System Model\t20XW",
            "Processor\t11th Gen Intel(R) Core(TM) i7-1165G7",
            "Total Physical Memory\t16.0 GB",
            f"Available Physical Memory\t{available}",
        ]
    )


@pytest.mark.parametrize(
    ("available", "titles", "score"),
    [
        ("1.40 GB", ["RAM usage critically high: 91%"], 70),
        ("1.60 GB", ["RAM usage high: 90%"], 90),
        ("3.00 GB", ["RAM usage high: 81%"], 90),
        ("3.20 GB", ["System hardware appears healthy"], 98),
    ],
)
def test_msinfo_ram_thresholds(available: str, titles: list[str], score: int) -> None:
    result = MsInfoParser().parse(_msinfo(available))

    assert _titles(result) == titles
    assert result.score == score


def test_msinfo_problem_devices() -> None:
    text = _msinfo("8.00 GB") + "\n[Problem Devices]\nItem\tValue\nBluetooth Radio\tError 28\n"
    p = MsInfoParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["manufacturer"] == "LENOVO"
    assert result.summary["ram_used_percent"] == 50
    assert _titles(result) == ["1 problem device detected"]


# DxDiag


def _dxdiag(driver_date: str) -> str:
    return "\n".join(
        [
            "------------------",
            "System Information",
            "------------------",
            "Operating System: Windows 11 Pro 64-bit",
            "Processor: Intel(R) Core(TM) i7-10700",
            "Memory: 16384MB RAM",
            "DirectX Version: DirectX 12",
            "",
            "---------------",
            "Display Devices",
            "---------------",
            "Card name: NVIDIA GeForce RTX 3060",
            "Manufacturer: NVIDIA",
            "Driver Version: 31.0.15.3623",
            f"Driver Date/Size: {driver_date} 12:00:00 AM, 1234 bytes",
            "WHQL Logo'd: Yes",
        ]
    )


@pytest.mark.parametrize(
    ("driver_date", "titles", "severity"),
    [
        ("6/1/2023", ["Display driver is 31 months old"], Severity.WARNING),
        ("6/1/2024", ["Display driver is 19 months old"], Severity.INFO),
        ("6/1/2025", ["Display and DirectX configuration looks good"], Severity.INFO),
    ],
)
def test_dxdiag_driver_age(
    fixed_now: datetime, driver_date: str, titles: list[str], severity: Severity
) -> None:
    text = _dxdiag(driver_date)
    p = DxDiagParser(now=fixed_now)
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["gpu_name"] == "NVIDIA GeForce RTX 3060"
    assert _titles(result) == titles
    assert result.issues[0].severity is severity


def test_dxdiag_driver_age_depends_on_now() -> None:
    result = DxDiagParser(now=datetime(2023, 7, 1)).parse(_dxdiag("6/1/2023"))

    assert _titles(result) == ["Display and DirectX configuration looks good"]


# systeminfo


def _systeminfo(boot_time: str, available: str) -> str:
    return "\n".join(
        [
            "Host Name:                 DESKTOP-01",
            "OS Name:                   Microsoft Windows 11 Pro",
            "OS Version:                10.0.22631 N/A Build 22631",
            "System Manufacturer:       Dell Inc.",
            "System Model:              XPS 8960",
            f"System Boot Time:          {boot_time}",
            "Total Physical Memory:     16,384 MB",
            f"Available Physical Memory: {available}",
            "Hotfix(s):                 2 Hotfix(s) Installed.",
            "                           [01]: KB5031356",
            "                           [02]: KB5032190",
        ]
    )


@pytest.mark.parametrize(
    ("available", "titles"),
    [
        ("1,500 MB", ["RAM usage critically high: 91%"]),
        ("1,638 MB", ["RAM usage high: 90%"]),
        ("3,000 MB", ["RAM usage high: 82%"]),
        ("3,277 MB", ["System info looks healthy"]),
    ],
)
def test_systeminfo_ram_thresholds(fixed_now: datetime, available: str, titles: list[str]) -> None:
    text = _systeminfo("12/31/2025, 12:00:00 PM", available)
    p = SystemInfoParser(now=fixed_now)
    assert p.detect(text)

    result = p.parse(text)

    assert _titles(result) == titles
    assert result.summary["uptime_days"] == 1
    assert result.summary["hotfix_count"] == 2
    assert result.summary["hotfixes"] == ["KB5031356", "KB5032190"]


@pytest.mark.parametrize(
    ("boot_time", "title", "severity"),
    [
        ("12/1/2025, 12:00:00 PM", "System hasn't been rebooted in 31 days", Severity.WARNING),
        ("12/2/2025, 12:00:00 PM", "System uptime: 30 days", Severity.INFO),
    ],
)
def test_systeminfo_uptime(
    fixed_now: datetime, boot_time: str, title: str, severity: Severity
) -> None:
    result = SystemInfoParser(now=fixed_now).parse(_systeminfo(boot_time, "8,192 MB"))

    assert _titles(result) == [title]
    assert result.issues[0].severity is severity


# WLAN report


@pytest.mark.parametrize(
    ("quality", "titles", "score"),
    [
        (29, ["Very weak WiFi signal: 29%"], 70),
        (30, ["Weak WiFi signal: 30%"], 90),
        (49, ["Weak WiFi signal: 49%"], 90),
        (50, ["WiFi report shows no significant issues"], 98),
    ],
)
def test_wifi_signal_quality(quality: int, titles: list[str], score: int) -> None:
    text = (
        "<html><h1>Wireless LAN Report</h1><p>wlan session</p>"
        f"<table><tr><td>Signal Quality: {quality}%</td></tr></table></html>"
    )
    p = WifiReportParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["signal_quality"] == quality
    assert _titles(result) == titles
    assert result.score == score


# Windows updates


def _qfe(installed_on: str) -> str:
    return "\n".join(
        [
            "Node,Description,HotFixID,InstalledOn",
            f"DESKTOP,Security Update,KB5031356,{installed_on}",
            "DESKTOP,Update,KB5030651,9/1/2025",
        ]
    )


@pytest.mark.parametrize(
    ("installed_on", "title", "severity"),
    [
        ("10/2/2025", "Windows updates are 91 days old", Severity.CRITICAL),
        ("10/3/2025", "Last Windows update was 90 days ago", Severity.WARNING),
        ("11/16/2025", "Last Windows update was 46 days ago", Severity.WARNING),
        ("11/17/2025", "Windows updates are current (45 days ago)", Severity.INFO),
    ],
)
def test_windows_updates_age(
    fixed_now: datetime, installed_on: str, title: str, severity: Severity
) -> None:
    text = _qfe(installed_on)
    p = WindowsUpdatesParser(now=fixed_now)
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["update_count"] == 2
    assert result.summary["security_updates"] == 1
    assert result.summary["last_update_kb"] == "KB5031356"
    assert _titles(result) == [title]
    assert result.issues[0].severity is severity


def test_windows_updates_without_security_updates(fixed_now: datetime) -> None:
    text = "Node,Description,HotFixID,InstalledOn\nDESKTOP,Update,KB5030651,12/20/2025\n"

    result = WindowsUpdatesParser(now=fixed_now).parse(text)

    assert _titles(result) == [
        "Windows updates are current (12 days ago)",
        "No security updates detected in installed updates",
    ]


def test_windows_updates_without_dates() -> None:
    text = "Node,Description,HotFixID,InstalledOn\nDESKTOP,Security Update,KB5031356,\n"

    result = WindowsUpdatesParser().parse(text)

    assert _titles(result) == ["No update install dates found"]


# System events


def _event(level: int, event_id: int, provider: str) -> str:
    return (
        "<Event xmlns='http://schemas.microsoft.com/win/2004/08/events/event'><System>"
        f"<Provider Name='{provider}'/><EventID>{event_id}</EventID><Level>{level}</Level>"
        "<TimeCreated SystemTime='2025-12-30T10:00:00.000Z'/></System>"
        "<EventData><Data>details</Data></EventData></Event>"
    )


def test_system_events_crash_shutdown_and_errors() -> None:
    events = [
        _event(1, 41, "Microsoft-Windows-Kernel-Power"),
        _event(2, 6008, "EventLog"),
        *[_event(2, 7000, "Service Control Manager") for _ in range(6)],
        _event(3, 10016, "DistributedCOM"),
    ]
    text = "\n".join(events)
    p = SystemEventsParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary == {
        "total_events": 9,
        "critical": 1,
        "errors": 7,
        "warnings": 1,
        "informational": 0,
    }
    assert _titles(result) == [
        "1 BSOD/crash event detected",
        "1 unexpected shutdown detected",
        "7 error events in system log",
    ]
    assert result.score == 58


def test_system_events_clean_log() -> None:
    text = "\n".join(_event(4, 7036, "Service Control Manager") for _ in range(3))

    result = SystemEventsParser().parse(text)

    assert _titles(result) == ["3 system events analyzed - no major issues"]


# Startup programs


def _startup(count: int) -> str:
    rows = [f"DESKTOP,App{i},C:\\Apps\\app{i}.exe" for i in range(count)]
    return "\n".join(["Node,Caption,Command", *rows])


@pytest.mark.parametrize(
    ("count", "title", "severity"),
    [
        (10, "10 startup programs - good", Severity.INFO),
        (11, "11 startup programs", Severity.INFO),
        (15, "15 startup programs", Severity.INFO),
        (16, "16 startup programs - may slow boot time", Severity.WARNING),
        (25, "25 startup programs - may slow boot time", Severity.WARNING),
        (26, "26 startup programs - severely impacting boot time", Severity.CRITICAL),
    ],
)
def test_startup_program_count(count: int, title: str, severity: Severity) -> None:
    text = _startup(count)
    p = StartupProgramsParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["startup_count"] == count
    assert _titles(result) == [title]
    assert result.issues[0].severity is severity


def test_startup_heavy_apps() -> None:
    text = "\n".join(
        [
            "Node,Caption,Command",
            "DESKTOP,Discord,C:\\Users\\me\\Discord\\Update.exe",
            "DESKTOP,Spotify,C:\\Users\\me\\Spotify\\Spotify.exe",
            "DESKTOP,Steam,C:\\Program Files\\Steam\\steam.exe",
            "DESKTOP,OneDrive,C:\\Program Files\\OneDrive\\OneDrive.exe",
        ]
    )

    result = StartupProgramsParser().parse(text)

    assert _titles(result) == ["4 startup programs - good", "4 resource-heavy apps in startup"]


# Running processes


def _tasklist(*rows: tuple[str, str]) -> str:
    header = (
        '"Image Name","PID","Session Name","Session#","Mem Usage","Status","User Name",'
        '"CPU Time","Window Title"'
    )
    lines = [
        f'"{name}","{1000 + n}","Console","1","{mem} K","Running","PC\\me","0:00:10","N/A"'
        for n, (name, mem) in enumerate(rows)
    ]
    return "\n".join([header, *lines])


@pytest.mark.parametrize(
    ("mem", "titles", "score"),
    [
        ("1,048,576", ["1 processes running - total 1024 MB RAM used"], 98),
        ("1,048,577", ["1 process using over 1 GB of RAM"], 90),
        ("2,097,152", ["1 process using over 1 GB of RAM"], 90),
        (
            "2,097,153",
            ["1 process using over 1 GB of RAM", "1 process using over 2 GB of RAM"],
            60,
        ),
    ],
)
def test_process_memory_thresholds(mem: str, titles: list[str], score: int) -> None:
    text = _tasklist(("chrome.exe", mem))
    p = RunningProcessesParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["process_count"] == 1
    assert _titles(result) == titles
    assert result.score == score


def test_processes_header_without_rows() -> None:
    text = '"Image Name","PID","Mem Usage"\n"","1","0 K"\n'

    result = RunningProcessesParser().parse(text)

    assert result.summary["process_count"] == 0
    assert _titles(result) == ["No process data found"]
