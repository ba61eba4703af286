from __future__ import annotations

from pathlib import Path

import pytest

from mcp_health_check_server.tools.analyze import (
    analyze_report_text_impl,
    analyze_reports_impl,
    export_markdown_impl,
    list_parsers_impl,
    remediation_impl,
    scoring_reference,
)


@pytest.fixture(autouse=True)
def _no_base_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HEALTH_CHECK_BASE_DIR", raising=False)
    monkeypatch.delenv("HEALTH_CHECK_MAX_BYTES", raising=False)


@pytest.mark.asyncio
async def test_analyze_reports_impl_directory(report_dir: Path) -> None:
    out = await analyze_reports_impl(paths=[str(report_dir)])

    assert [r["filename"] for r in out["reports"]] == [
        "battery-report.txt",
        "dmesg.txt",
        "notes.txt",
    ]
    assert out["reports"][0]["parser"] == "Battery Report"
    assert out["reports"][2]["parser"] is None
    assert out["unrecognized"] == ["notes.txt"]
    assert out["scores"]["global_score"] == 69
    assert out["scores"]["category_scores"]["power"]["score"] == 70
    assert out["scores"]["category_scores"]["network"] == {
        "score": None,
        "has_data": False,
        "issue_counts": {"critical": 0, "warning": 0, "info": 0},
        "parsers": [],
    }
    assert out["count"] == 3


@pytest.mark.asyncio
async def test_analyze_reports_impl_filters_and_remediation(report_dir: Path) -> None:
    out = await analyze_reports_impl(
        paths=[str(report_dir)],
        severities=["CRITICAL"],
        include_remediation=True,
    )

    assert out["count"] == 2
    battery, kernel = out["issues"]
    assert battery["parser_name"] == "Battery Report"
    assert battery["category"] == "power"
    assert battery["remediation"]["fix_kind"] == "hardware"
    assert kernel["parser_name"] == "dmesg"
    # scores still cover every issue, not just the filtered ones
    assert out["scores"]["total_issue_counts"] == {"critical": 2, "warning": 0, "info": 1}


@pytest.mark.asyncio
async def test_analyze_reports_impl_query(report_dir: Path) -> None:
    out = await analyze_reports_impl(paths=[str(report_dir)], query="usb descriptor")

    assert [i["title"] for i in out["issues"]] == ["1 USB error(s) in kernel log"]


@pytest.mark.asyncio
async def test_analyze_reports_impl_nothing_recognized(tmp_path: Path) -> None:
    note = tmp_path / "notes.txt"
    note.write_text("remember to buy milk\n", encoding="utf-8")

    out = await analyze_reports_impl(paths=[str(note)])

    assert out["scores"] is None
    assert out["issues"] == []
    assert out["unrecognized"] == ["notes.txt"]


@pytest.mark.asyncio
async def test_analyze_reports_impl_rejects_bad_input(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unknown category 'sound'"):
        await analyze_reports_impl(paths=[str(tmp_path)], categories=["sound"])
    with pytest.raises(ValueError, match="File not found"):
        await analyze_reports_impl(paths=[str(tmp_path / "missing.txt")])
    with pytest.raises(ValueError, match="No report files found"):
        await analyze_reports_impl(paths=[str(tmp_path)])
    with pytest.raises(ValueError, match="At least one report path"):
        await analyze_reports_impl(paths=[])


@pytest.mark.asyncio
async def test_analyze_reports_impl_base_dir_sandbox(
    report_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("HEALTH_CHECK_BASE_DIR", str(report_dir))

    out = await analyze_reports_impl(paths=["battery-report.txt"])
    assert out["scores"]["global_score"] == 70

    with pytest.raises(ValueError, match="Path escapes base dir"):
        await analyze_reports_impl(paths=["../elsewhere.txt"])


@pytest.mark.asyncio
async def test_analyze_reports_impl_same_name_in_sibling_folders(
    tmp_path: Path, write_report, battery_report: str
) -> None:
    healthy = "Battery report\nDesign Capacity: 50000 mWh\nFull Charge Capacity: 49000 mWh\n"
    write_report(tmp_path / "a" / "battery-report.txt", battery_report)
    write_report(tmp_path / "b" / "battery-report.txt", healthy)

    out = await analyze_reports_impl(paths=[str(tmp_path)], recursive=True)

    assert [r["filename"] for r in out["reports"]] == [
        "a/battery-report.txt",
        "b/battery-report.txt",
    ]
    power = out["scores"]["category_scores"]["power"]
    assert power["parsers"] == ["Battery Report", "Battery Report"]
    assert power["score"] == 68
    assert [i["title"] for i in out["issues"]] == [
        "Battery health critically low at 40%",
        "Battery health is good",
    ]


def test_analyze_report_text_impl_detects(dmesg_log: str) -> None:
    out = analyze_report_text_impl(filename="dmesg.txt", content=dmesg_log)

    assert out["recognized"] is True
    assert out["parser"] == "dmesg"
    assert out["category"] == "system"
    assert out["score"] == 68
    assert out["summary"]["hardware_errors"] == 1
    assert {i["parser_name"] for i in out["issues"]} == {"dmesg"}


def test_analyze_report_text_impl_forced_parser(meminfo: str) -> None:
    out = analyze_report_text_impl(
        filename="", content=meminfo, parser_name="Memory (Linux)", include_remediation=True
    )

    assert out["parser"] == "Memory (Linux)"
    assert out["issues"][0]["title"] == "No swap space configured"


def test_analyze_report_text_impl_unknown_and_unrecognized() -> None:
    with pytest.raises(ValueError, match="Unknown parser 'nope'"):
        analyze_report_text_impl(filename="x.txt", content="x", parser_name="nope")

    out = analyze_report_text_impl(filename="x.txt", content="remember to buy milk")
    assert out == {
        "recognized": False,
        "filename": "x.txt",
        "message": "could not identify report type",
    }


def test_list_parsers_impl() -> None:
    out = list_parsers_impl()

    assert out["count"] == 24
    assert out["parsers"][0] == {"order": 1, "name": "Battery Report", "category": "power"}
    assert out["by_category"]["storage"] == ["Disk Info", "smartctl"]


def test_remediation_impl() -> None:
    out = remediation_impl(title="Battery health critically low at 35%")

    assert out["found"] is True
    assert out["remediation"]["fix_kind"] == "hardware"
    assert remediation_impl(title="Fan spins quietly") == {"found": False, "remediation": None}
    with pytest.raises(ValueError, match="title is required"):
        remediation_impl(title="  ")


@pytest.mark.asyncio
async def test_export_markdown_impl(report_dir: Path) -> None:
    out = await export_markdown_impl(paths=[str(report_dir)])

    assert out["filename"].startswith("pc-health-report-")
    assert out["filename"].endswith(".md")
    assert out["global_score"] == 69
    assert out["markdown"].startswith("# PC Health Check Report")


@pytest.mark.asyncio
async def test_export_markdown_impl_requires_a_recognized_report(tmp_path: Path) -> None:
    note = tmp_path / "notes.txt"
    note.write_text("remember to buy milk\n", encoding="utf-8")

    with pytest.raises(ValueError, match="could be identified"):
        await export_markdown_impl(paths=[str(note)])


def test_scoring_reference() -> None:
    ref = scoring_reference()

    assert ref["severity_penalties"] == {"critical": 30, "warning": 10, "info": 2}
    assert sum(ref["category_weights"].values()) == pytest.approx(1.0)
