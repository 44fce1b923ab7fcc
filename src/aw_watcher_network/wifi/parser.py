"""SSID extraction from platform network utility output.

Two layouts are understood:

* ``sectioned``: macOS ``system_profiler SPAirPortDataType``. Networks are
  indented ``Name:`` headers, the connected one sits under
  ``Current Network Information:``.
* ``delimited``: Linux tools. Either ``nmcli -t -f ACTIVE,SSID`` rows
  (``yes:HomeNet``) or ``iwlist scan`` cells (``ESSID:"HomeNet"``).

Parsing never raises. Anything unrecognized yields an empty result.
"""

import enum
import logging
import re
from collections.abc import Iterable

from aw_watcher_network.wifi.base import WifiScanResult

logger = logging.getLogger(__name__)


class ParserVariant(enum.StrEnum):
    sectioned = "sectioned"
    delimited = "delimited"


CURRENT_NETWORK_SECTION = "Current Network Information"
OTHER_NETWORKS_SECTION = "Other Local Wi-Fi Networks"

# Section headers and attribute labels that end in a colon but are not networks.
EXCLUDED_LABELS: frozenset[str] = frozenset({
    "Wi-Fi",
    "Software Versions",
    "Interfaces",
    CURRENT_NETWORK_SECTION,
    OTHER_NETWORKS_SECTION,
    "CoreWLAN",
    "CoreWLANKit",
    "Menu Extra",
    "System Information",
    "IO80211 Family",
    "Diagnostics",
    "AirPort Utility",
    "Card Type",
    "Firmware Version",
    "MAC Address",
    "Locale",
    "Country Code",
    "Supported PHY Modes",
    "Supported Channels",
    "Wake On Wireless",
    "AirDrop",
    "Auto Unlock",
    "Status",
    "PHY Mode",
    "Channel",
    "Network Type",
    "Security",
    "Signal / Noise",
    "Transmit Rate",
    "MCS Index",
})

EXCLUDED_INTERFACES: frozenset[str] = frozenset({"en0", "en1", "awdl0", "llw0", "p2p0"})

# Interface names are one of these prefixes followed by a unit number.
INTERFACE_PREFIXES: tuple[str, ...] = ("en", "awdl", "llw", "p2p", "utun", "bridge", "ap", "anpi")

_INTERFACE_RE = re.compile(r"^(?:%s)\d+$" % "|".join(INTERFACE_PREFIXES))

# Indentation, a label, and a colon closing the line.
_LABEL_LINE_RE = re.compile(r"^\s+(\S.*?)\s*:\s*$")

IWLIST_MARKER = "ESSID:"
_ESSID_RE = re.compile(r'ESSID:"([^"]*)"')

NMCLI_ACTIVE_FIELD = 0
NMCLI_SSID_FIELD = 1
_NMCLI_ACTIVE_VALUES = frozenset({"yes", "*"})
_NMCLI_INACTIVE_VALUES = frozenset({"no", ""})


def is_network_name(label: str, extra_excluded: Iterable[str] = ()) -> bool:
    """Check a candidate label against the label and interface exclusion lists."""
    label = label.strip()
    if not label:
        return False
    if label in EXCLUDED_LABELS or label in extra_excluded:
        return False
    if label in EXCLUDED_INTERFACES or _INTERFACE_RE.match(label):
        return False
    return True


def parse_sectioned(raw: str, extra_excluded: Iterable[str] = ()) -> WifiScanResult:
    """Parse ``system_profiler SPAirPortDataType`` output."""
    excluded = frozenset(extra_excluded)
    visible: list[str] = []
    connected: str | None = None
    in_current = False
    current_indent = 0

    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        indent = len(line) - len(line.lstrip())
        label = stripped[:-1].strip() if stripped.endswith(":") else None

        if label == CURRENT_NETWORK_SECTION:
            in_current = True
            current_indent = indent
            continue
        if in_current and (label == OTHER_NETWORKS_SECTION or indent <= current_indent):
            in_current = False

        if label is None:
            continue
        if not in_current:
            m = _LABEL_LINE_RE.match(line)
            if not m:
                continue
            label = m.group(1)
        if not is_network_name(label, excluded):
            continue

        visible.append(label)
        if in_current and connected is None:
            connected = label

    return WifiScanResult.build(connected, visible)


def _split_terse(line: str) -> list[str]:
    """Split an ``nmcli -t`` row on unescaped colons."""
    fields: list[str] = []
    buf: list[str] = []
    escaped = False
    for ch in line:
        if escaped:
            buf.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ":":
            fields.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    fields.append("".join(buf))
    return fields


def parse_delimited(raw: str) -> WifiScanResult:
    """Parse ``nmcli -t -f ACTIVE,SSID`` or ``iwlist scan`` output."""
    if IWLIST_MARKER in raw:
        # iwlist does not say which cell is associated
        return WifiScanResult.build(None, _ESSID_RE.findall(raw))

    visible: list[str] = []
    connected: str | None = None
    for line in raw.splitlines():
        fields = _split_terse(line.rstrip("\r\n"))
        if len(fields) <= NMCLI_SSID_FIELD:
            continue
        active = fields[NMCLI_ACTIVE_FIELD].strip().lower()
        ssid = fields[NMCLI_SSID_FIELD].strip()
        if not ssid or active not in _NMCLI_ACTIVE_VALUES | _NMCLI_INACTIVE_VALUES:
            continue
        visible.append(ssid)
        if connected is None and active in _NMCLI_ACTIVE_VALUES:
            connected = ssid

    return WifiScanResult.build(connected, visible)


def parse(
    raw: str,
    variant: ParserVariant,
    extra_excluded: Iterable[str] = (),
) -> WifiScanResult:
    """Parse scan output. Never raises; unusable input gives an empty result."""
    if not raw or not raw.strip():
        return WifiScanResult()
    try:
        if variant is ParserVariant.sectioned:
            return parse_sectioned(raw, extra_excluded)
        return parse_delimited(raw)
    except Exception:
        logger.debug("Scan output parse error", exc_info=True)
        return WifiScanResult()
