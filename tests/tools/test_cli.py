from __future__ import annotations

import json
from pathlib import Path

import pytest

from mcp_health_check_server.cli import main


@pytest.fixture(autouse=True)
def _no_base_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("HEALTH_CHECK_BASE_DIR", raising=False)


def test_cli_parsers(capsys: pytest.CaptureFixture[str]) -> None:
    main(["parsers"])

    out = capsys.readouterr().out.splitlines()
    assert out[0] == " 1. Battery Report [power]"
    assert len(out) == 24


def test_cli_analyze_text(report_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["analyze", str(report_dir), "--severity", "critical", "--remediation"])

    out = capsys.readouterr().out
    assert "notes.txt: could not identify report type" in out
    assert "Global score: 69/100 (Fair)" in out
    assert "[critical] power/Battery Report: Battery health critically low at 40%" in out
    assert "fix [hardware]" in out
    assert "USB error" not in out


def test_cli_analyze_json(report_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["analyze", str(report_dir), "--format", "json", "--category", "system"])

    data = json.loads(capsys.readouterr().out)
    assert data["count"] == 2
    assert {i["category"] for i in data["issues"]} == {"system"}


def test_cli_analyze_markdown(report_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["analyze", str(report_dir), "--format", "markdown"])

    assert "# PC Health Check Report" in capsys.readouterr().out


def test_cli_exit_code_when_nothing_identified(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    note = tmp_path / "notes.txt"
    note.write_text("remember to buy milk\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc:
        main(["analyze", str(note)])

    assert exc.value.code == 2
    assert "No report could be identified" in capsys.readouterr().err


def test_cli_invalid_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["analyze", str(tmp_path / "missing.txt")])

    assert exc.value.code == 2
    assert "Error: File not found" in capsys.readouterr().err
