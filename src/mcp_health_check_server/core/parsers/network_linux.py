"""Linux network parser (``ip addr``, optionally followed by ``---SS---`` and ``ss`` output)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_SS_MARKER_RE = re.compile(r"---SS---", re.I)
_IFACE_SPLIT_RE = re.compile(r"(?=^\d+:\s)", re.M)
_IFACE_HEADER_RE = re.compile(r"^\d+:\s+(\S+):\s+<([^>]*)>")
_IPV4_RE = re.compile(r"inet\s+([\d.]+)/(\d+)")
_MAC_RE = re.compile(r"link/ether\s+([\da-f:]+)", re.I)
_STATE_RE = re.compile(r"state\s+(\S+)")


@dataclass(frozen=True, slots=True)
class Interface:
    name: str
    state: str
    ip: str | None
    loopback: bool
    mac: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state,
            "ip": self.ip,
            "loopback": self.loopback,
            "mac": self.mac,
        }


def parse_interface(block: str) -> tuple[Interface, bool] | None:
    """Parse one ``ip addr`` block; returns the interface and whether its UP flag is set."""
    m = _IFACE_HEADER_RE.match(block)
    if not m:
        return None
    flags = m.group(2)
    is_up = bool(re.search(r"\bUP\b", flags))
    ipv4 = _IPV4_RE.search(block)
    mac = _MAC_RE.search(block)
    state = _STATE_RE.search(block)
    iface = Interface(
        name=m.group(1),
        state=state.group(1) if state else ("UP" if is_up else "DOWN"),
        ip=ipv4.group(1) if ipv4 else None,
        loopback=bool(re.search(r"\bLOOPBACK\b", flags)),
        mac=mac.group(1) if mac else None,
    )
    return iface, is_up


@dataclass(frozen=True, slots=True)
class NetworkLinuxParser:
    name: ClassVar[str] = "Network (Linux)"
    category: ClassVar[Category] = Category.NETWORK

    _link_line_re = re.compile(r"^\d+:\s+\S+:\s+<", re.M)
    _inet_re = re.compile(r"inet\s+\d+\.\d+", re.M)
    _flags_re = re.compile(r"BROADCAST|LOOPBACK|MULTICAST", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "network-linux" in fn or fn == "ip-addr.txt":
            return True
        return bool(
            self._link_line_re.search(content)
            or (self._inet_re.search(content) and self._flags_re.search(content))
        )

    def parse(self, content: str) -> ParseResult:
        parts = _SS_MARKER_RE.split(content)
        ip_section = parts[0] or content
        ss_section = parts[1] if len(parts) > 1 else ""

        interfaces: list[Interface] = []
        summary: dict[str, Any] = {"interfaces": [], "connections": 0}
        issues: list[Issue] = []

        for block in _IFACE_SPLIT_RE.split(ip_section):
            block = block.strip()
            if not block:
                continue
            parsed = parse_interface(block)
            if parsed is None:
                continue
            iface, is_up = parsed
            interfaces.append(iface)

            if not iface.loopback and iface.state == "DOWN":
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Network interface {iface.name} is DOWN",
                        detail=f"Interface {iface.name} is not active.",
                        raw=block[:200],
                        recommendation=f"Bring it up with: sudo ip link set {iface.name} up",
                    )
                )
            if not iface.loopback and is_up and not iface.ip and iface.state != "DOWN":
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Interface {iface.name} has no IPv4 address",
                        detail="The interface is up but has no IP address assigned.",
                        raw=f"Interface: {iface.name} | State: {iface.state}",
                        recommendation="Check DHCP or configure a static IP address.",
                    )
                )
        summary["interfaces"] = [i.to_dict() for i in interfaces]

        if ss_section:
            lines = ss_section.strip().split("\n")
            listening = sum(1 for line in lines if re.match(r"LISTEN", line, re.I))
            established = sum(1 for line in lines if re.match(r"ESTAB", line, re.I))
            summary["listening_ports"] = listening
            summary["established_connections"] = established
            summary["connections"] = listening + established
            if listening > 50:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        title=f"{listening} listening ports detected",
                        detail="A high number of services are listening for incoming connections.",
                        raw=f"Listening: {listening} | Established: {established}",
                        recommendation=(
                            "Review listening services: ss -tulnp. Disable unnecessary services."
                        ),
                    )
                )

        active = [i for i in interfaces if not i.loopback and i.ip]
        if not active and interfaces:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title="No active network connection detected",
                    detail="No non-loopback interface has an IP address assigned.",
                    raw="Interfaces: " + ", ".join(f"{i.name}({i.state})" for i in interfaces),
                    recommendation="Check network cables, WiFi connection, or DHCP configuration.",
                )
            )
        summary["adapters"] = [{"name": i.name, "ip": i.ip} for i in active]

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Network configuration looks good",
                    detail=f"{len(active)} active interface(s) with IP addresses.",
                    raw=", ".join(f"{i.name}: {i.ip}" for i in active),
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)
