"""Report format parsers.

One module per diagnostic report format: Windows tool output (battery,
energy and sleep reports, msinfo32, dxdiag, systeminfo, driverquery, wmic,
netsh, ipconfig, wevtutil, tasklist) and Linux tool output (upower, dmesg,
journalctl, lshw, lspci, meminfo, ip/ss, smartctl, systemd-analyze, apt/dnf).
"""

from __future__ import annotations

from .base import ReportParser, identity_of
from .battery import BatteryReportParser
from .disk import DiskInfoParser
from .dmesg import DmesgParser
from .drivers import DriverQueryParser
from .dxdiag import DxDiagParser
from .energy import EnergyReportParser
from .events import SystemEventsParser
from .journalctl import JournalctlParser
from .linux_updates import LinuxUpdatesParser
from .lshw import LshwParser
from .lspci import LspciParser
from .memory_linux import MemoryLinuxParser
from .msinfo import MsInfoParser
from .network import NetworkConfigParser
from .network_linux import NetworkLinuxParser
from .processes import RunningProcessesParser
from .sleep import SleepStudyParser
from .smartctl import SmartctlParser
from .startup import StartupProgramsParser
from .sysinfo import SystemInfoParser
from .systemd_analyze import SystemdAnalyzeParser
from .updates import WindowsUpdatesParser
from .upower import UpowerParser
from .wifi import WifiReportParser

__all__ = [
    "BatteryReportParser",
    "DiskInfoParser",
    "DmesgParser",
    "DriverQueryParser",
    "DxDiagParser",
    "EnergyReportParser",
    "JournalctlParser",
    "LinuxUpdatesParser",
    "LshwParser",
    "LspciParser",
    "MemoryLinuxParser",
    "MsInfoParser",
    "NetworkConfigParser",
    "NetworkLinuxParser",
    "ReportParser",
    "RunningProcessesParser",
    "SleepStudyParser",
    "SmartctlParser",
    "StartupProgramsParser",
    "SystemEventsParser",
    "SystemInfoParser",
    "SystemdAnalyzeParser",
    "UpowerParser",
    "WifiReportParser",
    "WindowsUpdatesParser",
    "identity_of",
]
