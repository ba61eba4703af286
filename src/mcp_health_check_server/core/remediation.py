"""Issue to remediation mapping.

Rules are tried in order against ``title + detail + recommendation`` and the
first match wins, so severe or specific patterns sit above broader ones
(e.g. a critically low battery must resolve to a replacement, not to the
generic calibration advice for a degraded battery).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import FixKind, Issue, RemediationEntry


@dataclass(frozen=True, slots=True)
class RemediationRule:
    pattern: re.Pattern[str]
    fix_kind: FixKind
    command: str | None
    guide: str

    def entry(self) -> RemediationEntry:
        return RemediationEntry(fix_kind=self.fix_kind, command=self.command, guide=self.guide)


def _rule(pattern: str, fix_kind: FixKind, command: str | None, guide: str) -> RemediationRule:
    return RemediationRule(re.compile(pattern, re.I), fix_kind, command, guide)


REMEDIATION_RULES: tuple[RemediationRule, ...] = (
    # power
    _rule(
        r"battery.*(?:critically|very)\s*low|battery.*health.*(?:[0-3]\d|[0-4]0)%",
        FixKind.HARDWARE,
        None,
        "Battery is severely degraded. Replace the battery or contact the manufacturer for a "
        "replacement part.",
    ),
    _rule(
        r"battery.*(?:degraded|health.*(?:[4-7]\d)%)",
        FixKind.MANUAL,
        None,
        "Battery health is declining. Calibrate by fully charging, then discharging to ~5%, then "
        "fully charging again. Avoid extreme temperatures.",
    ),
    _rule(
        r"high.*(?:battery|power).*drain",
        FixKind.FIXABLE,
        "powercfg /energy",
        "Run an energy report to identify power-hungry components. Check background apps and "
        'adjust power plan to "Balanced" or "Power Saver".',
    ),
    _rule(
        r"high.*cycle\s*count",
        FixKind.HARDWARE,
        None,
        "Battery has exceeded its rated charge cycle life. Consider replacing the battery to "
        "restore full capacity.",
    ),
    # drivers
    _rule(
        r"outdated.*driver|driver.*outdated|old.*driver",
        FixKind.FIXABLE,
        "pnputil /scan-devices",
        "Update outdated drivers via Device Manager > right-click device > Update driver, or "
        "download from the manufacturer website.",
    ),
    _rule(
        r"driver.*error|driver.*problem|device.*error",
        FixKind.FIXABLE,
        "pnputil /scan-devices",
        "Reinstall the problematic driver: Device Manager > right-click > Uninstall device > "
        "Scan for hardware changes.",
    ),
    # startup and boot
    _rule(
        r"(?:high|many|too many).*startup|startup.*(?:count|programs?).*(?:high|\d{2,})",
        FixKind.FIXABLE,
        "msconfig",
        "Open Task Manager > Startup tab, and disable unnecessary startup programs to speed up "
        "boot time.",
    ),
    _rule(
        r"slow.*boot|boot.*slow|long.*boot",
        FixKind.FIXABLE,
        "systemd-analyze blame",
        "Identify slow boot services. Disable unnecessary services that delay startup.",
    ),
    # storage
    _rule(
        r"low.*(?:disk|storage|space)|disk.*(?:space|full)|free.*space.*(?:low|critical)",
        FixKind.FIXABLE,
        "cleanmgr",
        "Run Disk Cleanup (cleanmgr) to remove temporary files. Uninstall unused programs. Move "
        "large files to external storage.",
    ),
    _rule(
        r"bad\s*sectors|reallocated|pending\s*sectors",
        FixKind.HARDWARE,
        None,
        "Disk has failing sectors. Back up data immediately and plan to replace the drive.",
    ),
    _rule(
        r"disk.*(?:temperature|temp).*high|high.*disk.*temp",
        FixKind.MANUAL,
        None,
        "Ensure adequate airflow around the drive. Clean dust from vents and fans. Consider "
        "adding a cooling pad for laptops.",
    ),
    _rule(
        r"smart.*(?:fail|warning|alert)",
        FixKind.HARDWARE,
        None,
        "SMART health check indicates the drive may be failing. Back up all data immediately "
        "and replace the drive.",
    ),
    # network
    _rule(
        r"wifi.*disconnect|wireless.*disconnect|wifi.*drop|connection.*drop",
        FixKind.FIXABLE,
        "netsh wlan show wlanreport",
        "Reset the WiFi adapter: Settings > Network > Wi-Fi > Manage > Forget network, then "
        "reconnect. Update WiFi drivers.",
    ),
    _rule(
        r"no.*(?:ip|network|internet)|network.*(?:down|unavailable)",
        FixKind.FIXABLE,
        "ipconfig /release && ipconfig /renew",
        "Release and renew IP address. If that fails, reset the network stack: netsh winsock "
        "reset && netsh int ip reset",
    ),
    _rule(
        r"interface.*down|link.*down",
        FixKind.FIXABLE,
        "sudo ip link set <iface> up",
        "Bring the interface up. Check cable connections or WiFi settings if the issue persists.",
    ),
    # updates and security
    _rule(
        r"missing.*update|update.*missing|no.*recent.*update"
        r"|days.*since.*update.*(?:[6-9]\d|\d{3,})",
        FixKind.FIXABLE,
        "wuauclt /detectnow",
        "Open Windows Update (Settings > Update & Security) and install all pending updates to "
        "stay protected.",
    ),
    _rule(
        r"pending.*update|upgradable.*package|package.*upgrade",
        FixKind.FIXABLE,
        "sudo apt update && sudo apt upgrade -y",
        "Install pending package updates to get the latest security patches and bug fixes.",
    ),
    _rule(
        r"critical.*event|critical.*error|kernel.*panic|oops",
        FixKind.MANUAL,
        None,
        "Review the critical events in detail. These may indicate hardware failure, driver bugs, "
        "or OS corruption. Consider running system file checks.",
    ),
    _rule(
        r"segfault|segmentation\s*fault",
        FixKind.MANUAL,
        None,
        "Segmentation faults indicate software or memory issues. Test RAM with memtest86+ and "
        "check for software updates.",
    ),
    # memory
    _rule(
        r"high.*memory.*usage|memory.*(?:high|critical|full)|ram.*(?:full|maxed|high)",
        FixKind.FIXABLE,
        "tasklist /v /fo csv",
        "Close memory-hungry applications. Check for memory leaks. Consider adding more RAM if "
        "usage is consistently high.",
    ),
    _rule(
        r"high.*swap|swap.*(?:usage|full|high)",
        FixKind.MANUAL,
        None,
        "High swap usage means RAM is full. Close unused applications or add more RAM. "
        "Increasing swap size is a temporary workaround.",
    ),
    # graphics
    _rule(
        r"gpu.*(?:error|problem|issue)|display.*(?:error|problem)",
        FixKind.FIXABLE,
        None,
        "Update GPU drivers from the manufacturer website (NVIDIA, AMD, or Intel). Use DDU "
        "(Display Driver Uninstaller) for a clean reinstall if needed.",
    ),
    # system stability
    _rule(
        r"unexpected\s*shutdown|improper\s*shutdown|bsod|blue\s*screen",
        FixKind.MANUAL,
        "sfc /scannow",
        "Run System File Checker (sfc /scannow) and DISM (DISM /Online /Cleanup-Image "
        "/RestoreHealth) to repair system files.",
    ),
    # hardware
    _rule(
        r"usb.*(?:error|fail|disconnect)|device.*descriptor.*read",
        FixKind.MANUAL,
        None,
        "Try a different USB port. Check the USB cable. If the issue persists, the USB device or "
        "port may be faulty.",
    ),
    _rule(
        r"hardware.*error|pcie.*error|mce|machine\s*check",
        FixKind.HARDWARE,
        None,
        "Hardware errors detected. Run hardware diagnostics from the manufacturer. Check for "
        "overheating and loose connections.",
    ),
)


def remediation_text(issue: Issue) -> str:
    return f"{issue.title or ''} {issue.detail or ''} {issue.recommendation or ''}"


def get_remediation(
    issue: Issue, rules: tuple[RemediationRule, ...] = REMEDIATION_RULES
) -> RemediationEntry | None:
    """First matching rule for the issue, or None when no fix is known."""
    text = remediation_text(issue)
    for rule in rules:
        if rule.pattern.search(text):
            return rule.entry()
    return None
