"""macOS Wi-Fi controller via networksetup and system_profiler."""

import logging
from collections.abc import Iterable

from aw_watcher_network.wifi.base import RadioState, ScanError, WifiController, WifiScanResult
from aw_watcher_network.wifi.commands import run_command
from aw_watcher_network.wifi.parser import ParserVariant, parse

logger = logging.getLogger(__name__)

DEFAULT_INTERFACE = "en0"


def parse_hardware_ports(output: str) -> str | None:
    """Find the Wi-Fi device in ``networksetup -listallhardwareports`` output."""
    lines = output.splitlines()
    for i, line in enumerate(lines):
        if line.strip() in ("Hardware Port: Wi-Fi", "Hardware Port: AirPort") and i + 1 < len(lines):
            device_line = lines[i + 1].strip()
            if device_line.startswith("Device:"):
                return device_line.split(":", 1)[1].strip() or None
    return None


def parse_airport_power(output: str) -> RadioState | None:
    """Parse ``Wi-Fi Power (en0): On``. Returns None if unrecognized."""
    _, sep, value = output.strip().rpartition(":")
    if not sep:
        return None
    value = value.strip().lower()
    if value == "on":
        return RadioState.enabled
    if value == "off":
        return RadioState.disabled
    return None


class MacWifiController(WifiController):
    """Scans with system_profiler, toggles power with networksetup."""

    name = "macos"

    def __init__(
        self,
        interface: str | None = None,
        command_timeout: float | None = None,
        extra_excluded: Iterable[str] = (),
    ) -> None:
        self._interface = interface
        self.command_timeout = command_timeout
        self.extra_excluded = frozenset(extra_excluded)

    async def interface(self) -> str:
        """Wi-Fi device name, discovered once and cached."""
        if self._interface is None:
            try:
                result = await run_command(["networksetup", "-listallhardwareports"])
                self._interface = parse_hardware_ports(result.stdout) or DEFAULT_INTERFACE
            except ScanError as e:
                logger.warning("Wi-Fi interface lookup failed, using %s: %s", DEFAULT_INTERFACE, e)
                self._interface = DEFAULT_INTERFACE
            logger.info("Using Wi-Fi interface %s", self._interface)
        return self._interface

    async def radio_state(self) -> RadioState:
        iface = await self.interface()
        result = await run_command(["networksetup", "-getairportpower", iface])
        state = parse_airport_power(result.stdout)
        if state is None:
            raise ScanError(f"Unrecognized airport power output: {result.stdout.strip()!r}")
        return state

    async def set_radio(self, enabled: bool) -> None:
        iface = await self.interface()
        result = await run_command(
            ["networksetup", "-setairportpower", iface, "on" if enabled else "off"]
        )
        if not result.ok:
            raise ScanError(f"networksetup exited with status {result.returncode}")

    async def scan_raw(self) -> str:
        result = await run_command(
            ["system_profiler", "SPAirPortDataType"], timeout=self.command_timeout
        )
        return result.stdout

    def parse(self, raw: str) -> WifiScanResult:
        return parse(raw, ParserVariant.sectioned, self.extra_excluded)
