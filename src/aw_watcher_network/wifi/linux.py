"""Linux Wi-Fi controllers.

NetworkManager hosts use nmcli for everything. Hosts without it fall back to
rfkill for radio power, iwlist for scanning and iwgetid for the connected
network, since iwlist output does not mark the associated cell.
"""

import logging

from aw_watcher_network.wifi.base import RadioState, ScanError, WifiController, WifiScanResult
from aw_watcher_network.wifi.commands import run_command
from aw_watcher_network.wifi.parser import ParserVariant, parse

logger = logging.getLogger(__name__)


def parse_nmcli_radio(output: str) -> RadioState | None:
    value = output.strip().lower()
    if value in ("enabled", "on"):
        return RadioState.enabled
    if value in ("disabled", "off"):
        return RadioState.disabled
    return None


def parse_rfkill(output: str) -> RadioState | None:
    """Any soft-blocked Wi-Fi device counts as disabled."""
    states = [
        line.split(":", 1)[1].strip().lower()
        for line in output.splitlines()
        if line.strip().startswith("Soft blocked:")
    ]
    if not states:
        return None
    return RadioState.disabled if "yes" in states else RadioState.enabled


class NmcliWifiController(WifiController):
    """NetworkManager backend."""

    name = "nmcli"

    def __init__(self, command_timeout: float | None = None) -> None:
        self.command_timeout = command_timeout

    async def radio_state(self) -> RadioState:
        result = await run_command(["nmcli", "radio", "wifi"])
        state = parse_nmcli_radio(result.stdout)
        if state is None:
            raise ScanError(f"Unrecognized nmcli radio output: {result.stdout.strip()!r}")
        return state

    async def set_radio(self, enabled: bool) -> None:
        result = await run_command(["nmcli", "radio", "wifi", "on" if enabled else "off"])
        if not result.ok:
            raise ScanError(f"nmcli radio exited with status {result.returncode}")

    async def scan_raw(self) -> str:
        result = await run_command(
            ["nmcli", "-t", "-f", "ACTIVE,SSID", "device", "wifi", "list"],
            timeout=self.command_timeout,
        )
        return result.stdout

    def parse(self, raw: str) -> WifiScanResult:
        return parse(raw, ParserVariant.delimited)


class IwlistWifiController(WifiController):
    """Wireless-tools backend for hosts without NetworkManager."""

    name = "iwlist"

    def __init__(self, command_timeout: float | None = None) -> None:
        self.command_timeout = command_timeout

    async def radio_state(self) -> RadioState:
        result = await run_command(["rfkill", "list", "wifi"])
        state = parse_rfkill(result.stdout)
        if state is None:
            raise ScanError("rfkill reported no Wi-Fi devices")
        return state

    async def set_radio(self, enabled: bool) -> None:
        result = await run_command(["rfkill", "unblock" if enabled else "block", "wifi"])
        if not result.ok:
            raise ScanError(f"rfkill exited with status {result.returncode}")

    async def scan_raw(self) -> str:
        result = await run_command(["iwlist", "scan"], timeout=self.command_timeout)
        return result.stdout

    def parse(self, raw: str) -> WifiScanResult:
        return parse(raw, ParserVariant.delimited)

    async def connected_ssid(self) -> str | None:
        try:
            result = await run_command(["iwgetid", "-r"])
        except ScanError as e:
            logger.debug("iwgetid unavailable: %s", e)
            return None
        if not result.ok:
            return None
        return result.stdout.strip() or None
