"""Pending package updates (``apt list --upgradable`` or ``dnf check-update``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_APT_LINE_RE = re.compile(r"^(\S+)/(\S+)\s+(\S+)\s+\S+\s+\[upgradable\s+from:\s+(\S+)\]", re.I)
_DNF_LINE_RE = re.compile(r"^(\S+)\s+(\S+)\s+(\S+)")
_DNF_SKIP_RE = re.compile(r"^Last metadata|Obsoleting", re.I)
_RPM_ARCH_RE = re.compile(r"\.x86_64|\.noarch|\.i686", re.I)
_UPGRADABLE_RE = re.compile(r"upgradable", re.I)
_SECURITY_RE = re.compile(r"security", re.I)


def parse_apt(content: str) -> list[dict[str, str]]:
    packages = []
    for line in content.split("\n"):
        m = _APT_LINE_RE.match(line)
        if m:
            packages.append(
                {
                    "name": m.group(1),
                    "repo": m.group(2),
                    "new_version": m.group(3),
                    "old_version": m.group(4),
                }
            )
    return packages


def parse_dnf(content: str) -> list[dict[str, str]]:
    packages = []
    for line in content.split("\n"):
        line = line.strip()
        if not line or _DNF_SKIP_RE.search(line):
            continue
        m = _DNF_LINE_RE.match(line)
        # package names carry an ".arch" suffix
        if m and re.search(r"\.\S+$", m.group(1)):
            packages.append({"name": m.group(1), "new_version": m.group(2), "repo": m.group(3)})
    return packages


@dataclass(frozen=True, slots=True)
class LinuxUpdatesParser:
    name: ClassVar[str] = "Linux Updates"
    category: ClassVar[Category] = Category.SECURITY

    _apt_marker_re = re.compile(r"\[upgradable\s+from:", re.I)
    _listing_re = re.compile(r"Listing\.\.\.", re.I)
    _dnf_repo_re = re.compile(r"updates|fedora|epel", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "linux-updates" in fn or "upgradable" in fn or "check-update" in fn:
            return True
        return bool(
            self._apt_marker_re.search(content)
            or (self._listing_re.search(content) and _UPGRADABLE_RE.search(content))
            or (_RPM_ARCH_RE.search(content) and self._dnf_repo_re.search(content))
        )

    def parse(self, content: str) -> ParseResult:
        is_apt = bool(_UPGRADABLE_RE.search(content))
        if is_apt:
            packages = parse_apt(content)
        elif _RPM_ARCH_RE.search(content):
            packages = parse_dnf(content)
        else:
            packages = []

        total = len(packages)
        security = sum(1 for p in packages if _SECURITY_RE.search(p["repo"]))
        summary: dict[str, Any] = {
            "total_updates": total,
            "security_updates": security,
            "packages": packages,
        }

        issues: list[Issue] = []
        if security > 0:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{security} security update(s) pending",
                    detail="Security patches are available but not installed.",
                    raw=f"Security updates: {security} out of {total} total",
                    recommendation=(
                        "Run: sudo apt update && sudo apt upgrade -y"
                        if is_apt
                        else "Run: sudo dnf update --security -y"
                    ),
                )
            )

        if total > 50:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{total} package updates pending",
                    detail="A large number of packages have updates available.",
                    raw=f"Total pending: {total}",
                    recommendation=(
                        "Run: sudo apt update && sudo apt upgrade -y"
                        if is_apt
                        else "Run: sudo dnf update -y"
                    ),
                )
            )
        elif total > 10:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{total} package updates available",
                    detail="Several package updates are waiting to be installed.",
                    raw=f"Total pending: {total}",
                    recommendation="Run your package manager update command to stay current.",
                )
            )
        elif total > 0 and security == 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{total} package update(s) available",
                    detail="Minor updates are available.",
                    raw=f"Total pending: {total}",
                    recommendation="Install updates at your convenience.",
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="System is up to date",
                    detail="No pending package updates found.",
                    recommendation=(
                        "No action needed. The system has all available updates installed."
                    ),
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)
