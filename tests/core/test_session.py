from __future__ import annotations

from mcp_health_check_server.core.models import Category
from mcp_health_check_server.core.session import HealthCheckSession


def test_empty_session_has_no_scores() -> None:
    session = HealthCheckSession()

    assert session.scores is None
    assert len(session) == 0


def test_add_recomputes_scores(battery_report: str, dmesg_log: str) -> None:
    session = HealthCheckSession()

    first = session.add("battery-report.txt", battery_report)
    assert first.recognized
    assert first.message == "battery-report.txt: Battery Report"
    assert session.scores is not None
    assert session.scores.global_score == 70

    session.add("dmesg.txt", dmesg_log)

    assert "dmesg.txt" in session
    assert session.scores.category_scores[Category.SYSTEM].score == 68
    assert session.scores.global_score == 69


def test_unrecognized_file_is_listed() -> None:
    session = HealthCheckSession()

    result = session.add("notes.txt", "remember to buy milk\n")

    assert not result.recognized
    assert result.message == "notes.txt: could not identify report type"
    assert session.unrecognized == ["notes.txt"]
    assert session.scores is None


def test_same_name_replaces_earlier_file(battery_report: str) -> None:
    session = HealthCheckSession()
    session.add("battery-report.txt", battery_report)

    healthy = "Battery report\nDesign Capacity: 50000 mWh\nFull Charge Capacity: 49000 mWh\n"
    session.add("battery-report.txt", healthy)

    assert len(session) == 1
    assert session.scores is not None
    assert session.scores.global_score == 98


def test_remove_and_clear(battery_report: str, meminfo: str) -> None:
    session = HealthCheckSession()
    results = session.add_many([("battery-report.txt", battery_report), ("meminfo", meminfo)])
    assert [r.recognized for r in results] == [True, True]

    assert session.remove("battery-report.txt")
    assert not session.remove("battery-report.txt")
    assert session.scores is not None
    assert session.scores.category_scores[Category.POWER].has_data is False
    assert session.scores.global_score == 98

    session.clear()

    assert session.scores is None
    assert session.outcomes == {}
