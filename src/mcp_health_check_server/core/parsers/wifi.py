"""WLAN report parser (``netsh wlan show wlanreport`` HTML)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import is_html_name, plural, search_group


@dataclass(frozen=True, slots=True)
class WifiReportParser:
    name: ClassVar[str] = "WiFi Report"
    category: ClassVar[Category] = Category.NETWORK

    _wireless_re = re.compile(r"Wireless LAN", re.I)
    _wlan_re = re.compile(r"wlan", re.I)
    _report_re = re.compile(r"WlanReport|Wi-Fi\s*Session", re.I)

    _adapter_re = re.compile(
        r"(?:Adapter|Interface)\s*(?:Name|Description)[^<:]*?[>:]\s*([^<\n]+)", re.I
    )
    _ssid_re = re.compile(r"SSID[^<:]*?[>:]\s*([^<\n]+)", re.I)
    _profile_re = re.compile(r"Profile[^<:]*?[>:]\s*([^<\n]+)", re.I)
    _disconnect_re = re.compile(r"disconnect", re.I)
    _fail_re = re.compile(r"fail|failure|failed", re.I)
    _signal_re = re.compile(r"Signal\s*(?:Quality|Strength)[^<\d]*?(\d+)\s*%", re.I)
    _error_code_re = re.compile(r"(?:Error|error code)[^<\d]*?(?:0x[0-9a-fA-F]+|\d+)", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("wifi" in fn or "wlan" in fn) and is_html_name(fn):
            return True
        return bool(
            (self._wireless_re.search(content) and self._wlan_re.search(content))
            or self._report_re.search(content)
        )

    @staticmethod
    def _field(pattern: re.Pattern[str], content: str) -> str:
        value = search_group(pattern, content)
        return value.strip() if value is not None else ""

    def _signal_issue(self, signal: int) -> Issue | None:
        raw = f"Signal Quality: {signal}%"
        if signal < 30:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"Very weak WiFi signal: {signal}%",
                detail=(
                    "WiFi signal quality is very poor, which will cause slow speeds and frequent "
                    "disconnections."
                ),
                raw=raw,
                recommendation=(
                    "Move closer to the router, remove physical obstructions, or consider a WiFi "
                    "extender/mesh system."
                ),
            )
        if signal < 50:
            return Issue(
                severity=Severity.WARNING,
                title=f"Weak WiFi signal: {signal}%",
                detail="WiFi signal is below optimal levels. You may experience slower speeds.",
                raw=raw,
                recommendation=(
                    "Try moving closer to the router or adjusting its position for better coverage."
                ),
            )
        return None

    @staticmethod
    def _disconnect_issue(count: int) -> Issue | None:
        raw = f"Disconnection events: ~{count}"
        if count > 10:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"{count} WiFi disconnections detected",
                detail="Frequent WiFi disconnections indicate a serious connectivity problem.",
                raw=raw,
                recommendation=(
                    "Check WiFi driver, router firmware, and interference from nearby networks. "
                    "Try changing WiFi channel."
                ),
            )
        if count > 5:
            return Issue(
                severity=Severity.WARNING,
                title=f"{count} WiFi disconnections detected",
                detail="Several WiFi disconnection events found in the report.",
                raw=raw,
                recommendation=(
                    "Update WiFi adapter driver. Check for interference from other WiFi networks "
                    "or devices."
                ),
            )
        if count > 0:
            return Issue(
                severity=Severity.INFO,
                title=f"{count} WiFi disconnection{plural(count)} detected",
                detail="A few WiFi disconnections were found, which may be normal.",
                raw=raw,
                recommendation="Monitor for recurring disconnection patterns.",
            )
        return None

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        summary: dict[str, Any] = {
            "adapter": self._field(self._adapter_re, content),
            "ssid": self._field(self._ssid_re, content),
            "profile": self._field(self._profile_re, content),
        }

        # Labels and values both mention the event, so raw hits are halved.
        disconnects = len(self._disconnect_re.findall(content)) // 2
        failures = len(self._fail_re.findall(content)) // 2
        summary["disconnects"] = disconnects
        summary["connection_failures"] = failures

        m = self._signal_re.search(content)
        if m:
            signal = int(m.group(1))
            summary["signal_quality"] = signal
            issue = self._signal_issue(signal)
            if issue is not None:
                issues.append(issue)

        issue = self._disconnect_issue(disconnects)
        if issue is not None:
            issues.append(issue)

        if failures > 5:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title="Multiple WiFi connection failures detected",
                    detail=f"Approximately {failures} connection failures found in the report.",
                    raw=f"Connection failures: ~{failures}",
                    recommendation=(
                        "Check WiFi password, driver, and router settings. Try forgetting and "
                        "reconnecting to the network."
                    ),
                )
            )

        errors: list[str] = []
        for em in self._error_code_re.finditer(content):
            text = em.group(0).strip()
            if text not in errors:
                errors.append(text)
        if len(errors) > 3:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{len(errors)} error codes found in WiFi report",
                    detail="Error codes: " + ", ".join(errors[:5]),
                    raw="\n".join(errors[:10]),
                    recommendation=(
                        "Search for these error codes to identify specific WiFi issues. Updating "
                        "the WiFi driver often resolves many errors."
                    ),
                )
            )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="WiFi report shows no significant issues",
                    detail=(
                        f"Connected to: {summary['ssid']}"
                        if summary["ssid"]
                        else "No major WiFi problems detected."
                    ),
                    recommendation="WiFi connectivity appears healthy.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)
