"""``ipconfig /all`` parser."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import plural

_ADAPTER_SPLIT_RE = re.compile(
    r"(?:Ethernet adapter|Wireless LAN adapter|Unknown adapter)\s+", re.I
)
_APIPA_RE = re.compile(r"^169\.254\.")
_PAREN_RE = re.compile(r"\(.*\)")


def _label_re(label: str) -> re.Pattern[str]:
    # ipconfig pads labels with ". . . ."; the value stays on the same line.
    return re.compile(rf"{re.escape(label)}[\s.]*:[ \t]*(.+)", re.I)


def extract_field(block: str, label: str) -> str:
    m = _label_re(label).search(block)
    return m.group(1).strip() if m else ""


def extract_all_fields(block: str, label: str) -> list[str]:
    """All values for ``label`` plus indented continuation lines of the first one."""
    pattern = _label_re(label)
    results = [m.group(1).strip() for m in pattern.finditer(block)]
    first = pattern.search(block)
    if first is None:
        return results
    lines = block[first.start() :].split("\n")
    for line in lines[1:]:
        if re.match(r"^\s{20,}[\d.:a-fA-F]", line):
            results.append(line.strip())
        elif re.match(r"^\s", line) and re.search(r"\d", line) and not re.search(r":\s", line[:30]):
            results.append(line.strip())
        else:
            break
    return results


@dataclass(slots=True)
class Adapter:
    name: str
    connected: bool
    ipv4: str = ""
    ipv6: str = ""
    subnet_mask: str = ""
    gateway: str = ""
    dns: list[str] = field(default_factory=list)
    dhcp: str = ""
    dhcp_server: str = ""
    mac_address: str = ""
    description: str = ""


def parse_adapters(content: str) -> list[Adapter]:
    adapters: list[Adapter] = []
    blocks = _ADAPTER_SPLIT_RE.split(content)
    for i, block in enumerate(blocks[1:], start=1):
        m = re.match(r"^([^:]+):", block)
        adapter = Adapter(
            name=m.group(1).strip() if m else f"Adapter {i}",
            connected=not re.search(r"Media disconnected", block, re.I),
            ipv4=extract_field(block, "IPv4 Address"),
            ipv6=extract_field(block, "IPv6 Address") or extract_field(block, "Link-local IPv6"),
            subnet_mask=extract_field(block, "Subnet Mask"),
            gateway=extract_field(block, "Default Gateway"),
            dns=extract_all_fields(block, "DNS Servers"),
            dhcp=extract_field(block, "DHCP Enabled"),
            dhcp_server=extract_field(block, "DHCP Server"),
            mac_address=extract_field(block, "Physical Address"),
            description=extract_field(block, "Description"),
        )
        # Drop "(Preferred)" style annotations.
        adapter.ipv4 = _PAREN_RE.sub("", adapter.ipv4, count=1).strip()
        adapter.ipv6 = _PAREN_RE.sub("", adapter.ipv6, count=1).strip()
        adapters.append(adapter)
    return adapters


@dataclass(frozen=True, slots=True)
class NetworkConfigParser:
    """Check adapters for connectivity, DHCP failures, gateways and DNS."""

    name: ClassVar[str] = "Network Config"
    category: ClassVar[Category] = Category.NETWORK

    _title_re = re.compile(r"Windows IP Configuration", re.I)
    _ipv4_re = re.compile(r"IPv4 Address", re.I)
    _mask_re = re.compile(r"Subnet Mask", re.I)
    _gateway_re = re.compile(r"Default Gateway", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("ipconfig" in fn or "network" in fn) and fn.endswith(".txt"):
            return True
        return bool(
            self._title_re.search(content)
            or (
                self._ipv4_re.search(content)
                and self._mask_re.search(content)
                and self._gateway_re.search(content)
            )
        )

    @staticmethod
    def _adapter_issues(adapter: Adapter) -> list[Issue]:
        issues: list[Issue] = []
        apipa = bool(adapter.ipv4 and _APIPA_RE.match(adapter.ipv4))
        if apipa:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{adapter.name}: APIPA address detected (no DHCP)",
                    detail=(
                        f'Adapter "{adapter.name}" has IP {adapter.ipv4}, which is a '
                        "self-assigned address. This means DHCP failed and the adapter cannot "
                        "reach the network."
                    ),
                    raw=f"{adapter.name}: IPv4 {adapter.ipv4}",
                    recommendation=(
                        "Check DHCP server (router) is running. Try: ipconfig /release && "
                        "ipconfig /renew. Restart the router if needed."
                    ),
                )
            )

        if adapter.gateway in ("", "0.0.0.0") and adapter.ipv4 and not apipa:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{adapter.name}: No default gateway configured",
                    detail=(
                        f'Adapter "{adapter.name}" has IP {adapter.ipv4} but no default gateway. '
                        "Internet access will not work."
                    ),
                    raw=f"{adapter.name}: Gateway: {adapter.gateway or 'none'}",
                    recommendation=(
                        "Check network configuration. If using static IP, ensure the gateway is "
                        "set correctly."
                    ),
                )
            )

        if not any(adapter.dns):
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{adapter.name}: No DNS servers configured",
                    detail=f'Adapter "{adapter.name}" has no DNS servers. Name resolution will fail.',
                    raw=f"{adapter.name}: DNS: none",
                    recommendation=(
                        "Set DNS servers (e.g., 8.8.8.8 and 8.8.4.4 for Google DNS, or 1.1.1.1 "
                        "for Cloudflare)."
                    ),
                )
            )
        return issues

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        adapters = parse_adapters(content)
        connected = [a for a in adapters if a.connected]
        summary: dict[str, Any] = {
            "adapter_count": len(adapters),
            "connected_adapters": len(connected),
            "adapters": [asdict(a) for a in adapters],
        }

        if not connected and adapters:
            n = len(adapters)
            verb = "s are" if n > 1 else " is"
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title="No network adapters are connected",
                    detail=f"All {n} network adapter{verb} disconnected.",
                    raw="\n".join(f"{a.name}: Disconnected" for a in adapters),
                    recommendation=(
                        "Check physical network connections (Ethernet cable or WiFi). Enable "
                        "network adapters in Network Settings."
                    ),
                )
            )

        for adapter in connected:
            issues.extend(self._adapter_issues(adapter))

        static = [a for a in connected if re.search(r"no", a.dhcp, re.I)]
        if static:
            n = len(static)
            verb = "s use" if n > 1 else " uses"
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{n} adapter{verb} static IP",
                    detail="Static IP adapters: " + ", ".join(f"{a.name} ({a.ipv4})" for a in static),
                    recommendation=(
                        "Static IP is fine for servers/printers. For regular use, DHCP is "
                        "recommended."
                    ),
                )
            )

        if not issues:
            n = len(connected)
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Network configuration looks healthy",
                    detail=f"{n} connected adapter{plural(n)}.",
                    raw=", ".join(f"{a.name}: {a.ipv4}" for a in connected),
                    recommendation="No network configuration issues detected.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)
