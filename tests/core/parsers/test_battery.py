from __future__ import annotations

from mcp_health_check_server.core.models import Severity
from mcp_health_check_server.core.parsers import BatteryReportParser


def test_detects_by_content_and_by_html_name(battery_report: str) -> None:
    p = BatteryReportParser()
    assert p.detect(battery_report)
    assert p.detect("<html></html>", "battery-report.html")
    assert not p.detect("nothing to see", "battery.txt")


def test_critical_at_forty_percent(battery_report: str) -> None:
    result = BatteryReportParser().parse(battery_report)

    assert result.summary["design_capacity"] == 50000
    assert result.summary["full_charge_capacity"] == 20000
    assert result.summary["health_percent"] == 40
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.severity is Severity.CRITICAL
    assert issue.title == "Battery health critically low at 40%"
    assert result.score == 70


def test_healthy_battery_keeps_full_score() -> None:
    text = "Battery report\nDesign Capacity: 50,000 mWh\nFull Charge Capacity: 48,000 mWh\n"
    result = BatteryReportParser().parse(text)

    assert result.summary["health_percent"] == 96
    assert result.score == 100
    assert [i.title for i in result.issues] == ["Battery health is good"]


def test_cycle_count_and_drain_rate() -> None:
    text = "\n".join(
        [
            "Battery report",
            "Design Capacity: 50000 mWh",
            "Full Charge Capacity: 45000 mWh",
            "Cycle Count: 1200",
            "<tr><td>Active</td><td>35000 mW</td></tr>",
            "<tr><td>Active</td><td>33000 mW</td></tr>",
        ]
    )
    result = BatteryReportParser().parse(text)

    assert result.summary["cycle_count"] == 1200
    assert result.summary["avg_drain_rate"] == 34000
    titles = [i.title for i in result.issues]
    assert "High battery cycle count: 1200" in titles
    assert "High average battery drain rate: 34.0W" in titles
    assert result.score == 80


def test_missing_capacity_reports_no_data() -> None:
    result = BatteryReportParser().parse("Battery report with no numbers")

    assert result.summary["design_capacity"] is None
    assert [i.title for i in result.issues] == ["No battery data found"]
    assert result.issues[0].severity is Severity.INFO
    assert result.score == 98


def test_missing_capacity_still_reports_cycles() -> None:
    result = BatteryReportParser().parse("Battery report\nCycle Count: 1200\n")

    assert [i.title for i in result.issues] == [
        "High battery cycle count: 1200",
        "No battery data found",
    ]
    assert result.score == 88
