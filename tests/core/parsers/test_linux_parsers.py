from __future__ import annotations

import json

import pytest

from mcp_health_check_server.core.models import Severity
from mcp_health_check_server.core.parsers import (
    DmesgParser,
    JournalctlParser,
    LinuxUpdatesParser,
    LshwParser,
    LspciParser,
    MemoryLinuxParser,
    NetworkLinuxParser,
    SmartctlParser,
    SystemdAnalyzeParser,
    UpowerParser,
)
from mcp_health_check_server.core.parsers.smartctl import smart_attribute
from mcp_health_check_server.core.parsers.systemd_analyze import parse_blame, parse_duration


def _titles(result) -> list[str]:
    return [i.title for i in result.issues]


def test_upower_health_cycles_and_low_charge() -> None:
    text = "\n".join(
        [
            "  native-path:          BAT0",
            "  vendor:               SMP",
            "  model:                5B10W13975",
            "  battery",
            "    state:               discharging",
            "    energy:              5.5 Wh",
            "    energy-full:         45.6 Wh",
            "    energy-full-design:  57 Wh",
            "    percentage:          12%",
            "    charge-cycles:       612",
            "    technology:          lithium-polymer",
        ]
    )
    p = UpowerParser()
    assert p.detect(text, "upower.txt")

    result = p.parse(text)

    assert result.summary["health_percent"] == 80
    assert result.summary["state"] == "discharging"
    assert result.summary["vendor"] == "SMP"
    assert _titles(result) == ["Battery cycle count: 612", "Battery charge low: 12%"]
    assert result.score == 88


def test_upower_without_battery_reports_desktop() -> None:
    result = UpowerParser().parse("Device: /org/freedesktop/UPower/devices/line_power_AC\n")

    assert _titles(result) == ["No battery detected"]
    assert result.score == 100


def test_dmesg_counts_hardware_and_usb_errors(dmesg_log: str) -> None:
    p = DmesgParser()
    assert p.detect(dmesg_log)

    result = p.parse(dmesg_log)

    assert result.summary["hardware_errors"] == 1
    assert result.summary["usb_errors"] == 1
    assert result.summary["errors"] == 2
    assert [i.severity for i in result.issues] == [Severity.CRITICAL, Severity.INFO]
    assert result.score == 68


def test_dmesg_oom_and_segfault() -> None:
    text = "\n".join(
        [
            "[  100.000000] app[1234]: segfault at 0 ip 00007f sp 00007ffd error 4",
            "[  200.000000] Out of memory: Killed process 4321 (java)",
        ]
    )
    result = DmesgParser().parse(text)

    titles = _titles(result)
    assert "1 segfault(s) or kernel oops detected" in titles
    assert "OOM killer invoked 1 time(s)" in titles


def test_dmesg_clean_log() -> None:
    result = DmesgParser().parse("[    0.000000] Linux version 6.5.0\n")

    assert _titles(result) == ["Kernel log looks clean"]
    assert result.score == 100


def test_journalctl_priorities_and_units() -> None:
    lines = [
        {"PRIORITY": "2", "_SYSTEMD_UNIT": "kernel", "MESSAGE": "x"},
        {"PRIORITY": "3", "_SYSTEMD_UNIT": "nginx.service", "MESSAGE": "y"},
        {"PRIORITY": "4", "SYSLOG_IDENTIFIER": "sudo", "MESSAGE": "z"},
        {"_SYSTEMD_UNIT": "cron.service", "MESSAGE": "no priority"},
    ]
    text = "\n".join(json.dumps(obj) for obj in lines) + "\n{broken\nplain text\n"
    p = JournalctlParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["total_entries"] == 4
    assert result.summary["critical"] == 1
    assert result.summary["errors"] == 1
    assert result.summary["warnings"] == 1
    assert result.summary["units"] == {
        "kernel": 1,
        "nginx.service": 1,
        "sudo": 1,
        "cron.service": 1,
    }
    assert [i.severity for i in result.issues] == [Severity.CRITICAL, Severity.INFO]
    assert result.score == 68


def test_lshw_inventory_and_unclaimed_device() -> None:
    data = {
        "id": "host",
        "class": "system",
        "product": "ThinkPad",
        "vendor": "LENOVO",
        "children": [
            {
                "id": "core",
                "class": "bus",
                "children": [
                    {"id": "memory", "class": "memory", "size": 17179869184},
                    {
                        "id": "cpu",
                        "class": "processor",
                        "product": "Intel Core i7",
                        "vendor": "Intel",
                        "capacity": 4700000000,
                    },
                    {
                        "id": "network",
                        "class": "network",
                        "product": "Wi-Fi 6 AX201",
                        "claimed": False,
                    },
                ],
            }
        ],
    }
    text = json.dumps(data, indent=2)
    p = LshwParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["cpu"] == "Intel Core i7"
    assert result.summary["cpu_max_speed"] == "4.70 GHz"
    assert result.summary["total_ram"] == "16.0 GB"
    assert result.summary["model"] == "ThinkPad"
    assert _titles(result) == ["1 unclaimed/disabled device(s) found"]
    assert result.score == 90


def test_lshw_list_root() -> None:
    data = [
        {
            "id": "host",
            "class": "system",
            "product": "XPS 13",
            "vendor": "Dell Inc.",
            "children": [
                {"id": "memory", "class": "memory", "size": 8589934592},
                {"id": "cpu", "class": "processor", "product": "Intel Core i5"},
            ],
        }
    ]

    result = LshwParser().parse(json.dumps(data))

    assert result.summary["model"] == "XPS 13"
    assert result.summary["manufacturer"] == "Dell Inc."
    assert result.summary["cpu"] == "Intel Core i5"
    assert result.summary["total_ram"] == "8.0 GB"


def test_lshw_invalid_json_is_a_warning() -> None:
    result = LshwParser().parse("{not json")

    assert result.score == 50
    assert _titles(result) == ["Could not parse lshw JSON"]


def test_lspci_missing_driver() -> None:
    text = "\n".join(
        [
            "00:02.0 VGA compatible controller: Intel Corporation Iris Xe Graphics (rev 0c)",
            "\tSubsystem: Lenovo Device 22e7",
            "\tKernel driver in use: i915",
            "\tKernel modules: i915",
            "",
            "00:14.3 Network controller: Intel Corporation CNVi WiFi (rev 01)",
            "\tSubsystem: Intel Corporation Wi-Fi 6 AX201 160MHz",
            "\tKernel modules: iwlwifi",
        ]
    )
    p = LspciParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["devices"] == 2
    assert result.summary["gpus"] == ["Intel Corporation Iris Xe Graphics (rev 0c)"]
    assert _titles(result) == ["No kernel driver loaded for: Intel Corporation CNVi WiFi (rev 01)"]
    assert result.score == 90


def test_meminfo_without_swap(meminfo: str) -> None:
    p = MemoryLinuxParser()
    assert p.detect(meminfo)

    result = p.parse(meminfo)

    assert result.summary["ram_used_percent"] == 50
    assert result.summary["total_ram_gb"] == "15.6 GB"
    assert _titles(result) == ["No swap space configured"]
    assert result.score == 98


def test_meminfo_pressure() -> None:
    text = "\n".join(
        [
            "MemTotal:        8000000 kB",
            "MemFree:          100000 kB",
            "MemAvailable:     200000 kB",
            "SwapTotal:       2000000 kB",
            "SwapFree:         200000 kB",
        ]
    )
    result = MemoryLinuxParser().parse(text)

    assert result.summary["ram_used_percent"] == 98
    assert result.summary["swap_used_percent"] == 90
    assert [i.severity for i in result.issues] == [Severity.CRITICAL, Severity.WARNING]
    assert result.score == 60


def test_ip_addr_down_interface_and_no_connection(ip_addr: str) -> None:
    result = NetworkLinuxParser().parse(ip_addr)

    names = [i["name"] for i in result.summary["interfaces"]]
    assert names == ["lo", "eth0"]
    assert _titles(result) == [
        "Network interface eth0 is DOWN",
        "No active network connection detected",
    ]
    assert result.score == 60


def test_ip_addr_with_ss_section() -> None:
    text = "\n".join(
        [
            "2: wlan0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 state UP",
            "    link/ether aa:bb:cc:dd:ee:ff brd ff:ff:ff:ff:ff:ff",
            "    inet 192.168.1.20/24 brd 192.168.1.255 scope global dynamic wlan0",
            "---SS---",
            "LISTEN 0 128 0.0.0.0:22 0.0.0.0:*",
            "ESTAB  0 0   192.168.1.20:22 192.168.1.5:50000",
        ]
    )
    result = NetworkLinuxParser().parse(text)

    assert result.summary["listening_ports"] == 1
    assert result.summary["established_connections"] == 1
    assert result.summary["adapters"] == [{"name": "wlan0", "ip": "192.168.1.20"}]
    assert _titles(result) == ["Network configuration looks good"]
    assert result.score == 100


ATA_SMART = "\n".join(
    [
        "smartctl 7.3 2022-02-28 r5338 [x86_64-linux-6.5.0] (local build)",
        "=== START OF INFORMATION SECTION ===",
        "Device Model:     Samsung SSD 860 EVO 500GB",
        "Serial Number:    S3Z1NB0K123456",
        "",
        "SMART overall-health self-assessment test result: PASSED",
        "",
        "ID# ATTRIBUTE_NAME          FLAG     VALUE WORST THRESH TYPE      UPDATED  WHEN_FAILED RAW_VALUE",
        "  5 Reallocated_Sector_Ct   0x0033   100   100   010    Pre-fail  Always       -       12",
        "  9 Power_On_Hours          0x0032   090   090   000    Old_age   Always       -       12034",
        "194 Temperature_Celsius     0x0022   045   052   000    Old_age   Always       -       55 (Min/Max 20/72)",
        "197 Current_Pending_Sector  0x0012   100   100   000    Old_age   Always       -       0",
    ]
)


def test_smart_attribute_reads_raw_value_column() -> None:
    assert smart_attribute(ATA_SMART, "Temperature_Celsius") == 55
    assert smart_attribute(ATA_SMART, "Power_On_Hours") == 12034
    assert smart_attribute(ATA_SMART, "Offline_Uncorrectable") is None


def test_smartctl_ata_attributes() -> None:
    p = SmartctlParser()
    assert p.detect(ATA_SMART)

    result = p.parse(ATA_SMART)

    assert result.summary["model"] == "Samsung SSD 860 EVO 500GB"
    assert result.summary["health"] == "PASSED"
    assert result.summary["temperature"] == "55 C"
    assert result.summary["pending_sectors"] == 0
    assert _titles(result) == [
        "Disk temperature elevated: 55 C",
        "12 reallocated sector(s) detected",
    ]
    assert result.score == 80


def test_smartctl_nvme_failure() -> None:
    text = "\n".join(
        [
            "smartctl 7.3 2022-02-28",
            "SMART overall-health self-assessment test result: FAILED!",
            "SMART/Health Information (NVMe Log 0x02)",
            "Temperature:                        65 Celsius",
            "Power On Hours:                     51,234",
        ]
    )
    result = SmartctlParser().parse(text)

    assert result.summary["power_on_hours"] == 51234
    assert [i.severity for i in result.issues] == [
        Severity.CRITICAL,
        Severity.CRITICAL,
        Severity.WARNING,
    ]
    assert result.score == 30


def test_parse_duration() -> None:
    assert parse_duration("1min 5.2s") == pytest.approx(65.2)
    assert parse_duration("850ms") == pytest.approx(0.85)
    assert parse_duration("1h 2min") == pytest.approx(3720)
    assert parse_duration("soon") is None


SYSTEMD = "\n".join(
    [
        "Startup finished in 5.123s (firmware) + 2.001s (loader) + 1.500s (kernel) "
        "+ 1min 5.200s (userspace) = 1min 13.824s",
        "graphical.target reached after 1min 5.100s in userspace",
        "---BLAME---",
        "1min 2.500s NetworkManager-wait-online.service",
        "     12.100s snapd.service",
        "      3.200s systemd-udevd.service",
    ]
)


def test_parse_blame_scoped_to_marker() -> None:
    services = parse_blame(SYSTEMD)

    assert [s.name for s in services] == [
        "NetworkManager-wait-online.service",
        "snapd.service",
        "systemd-udevd.service",
    ]
    assert services[0].seconds == pytest.approx(62.5)


def test_systemd_analyze_boot_phases_and_slow_services() -> None:
    p = SystemdAnalyzeParser()
    assert p.detect(SYSTEMD)

    result = p.parse(SYSTEMD)

    assert result.summary["total_boot_time"] == "73.8s"
    assert result.summary["kernel_time"] == "1.5s"
    assert result.summary["userspace_time"] == "65.2s"
    assert result.summary["firmware_time"] == "5.1s"
    assert result.summary["total_services"] == 3
    assert result.summary["slow_services"] == 2
    assert _titles(result) == ["Boot time: 73.8s", "2 slow boot service(s) (>10s)"]
    assert result.score == 96


def test_apt_security_update_is_critical() -> None:
    text = "\n".join(
        [
            "Listing... Done",
            "openssl/jammy-security 3.0.2-0ubuntu1.15 amd64 [upgradable from: 3.0.2-0ubuntu1.14]",
            "curl/jammy-updates 7.81.0-1ubuntu1.16 amd64 [upgradable from: 7.81.0-1ubuntu1.15]",
        ]
    )
    p = LinuxUpdatesParser()
    assert p.detect(text)

    result = p.parse(text)

    assert result.summary["total_updates"] == 2
    assert result.summary["security_updates"] == 1
    assert result.summary["packages"][0]["old_version"] == "3.0.2-0ubuntu1.14"
    assert _titles(result) == ["1 security update(s) pending"]
    assert "apt" in result.issues[0].recommendation
    assert result.score == 70


def test_dnf_check_update() -> None:
    text = "\n".join(
        [
            "Last metadata expiration check: 0:12:01 ago on Mon 01 Jan 2026.",
            "",
            "kernel.x86_64           6.6.9-200.fc39         updates",
            "bash.x86_64             5.2.21-1.fc39          updates",
        ]
    )
    result = LinuxUpdatesParser().parse(text)

    assert [p["name"] for p in result.summary["packages"]] == ["kernel.x86_64", "bash.x86_64"]
    assert _titles(result) == ["2 package update(s) available"]
    assert result.score == 98
