"""Mock Wi-Fi controller for development and testing.

Produces system_profiler-style output with a mix of stable home networks and
intermittently visible neighbours. The radio is simulated in memory.
"""

import logging
import random

from aw_watcher_network.wifi.base import RadioState, WifiController, WifiScanResult
from aw_watcher_network.wifi.parser import ParserVariant, parse

logger = logging.getLogger(__name__)

_HOME_NETWORKS = ["HomeNetwork", "HomeNetwork-5G"]

_NEIGHBOUR_NETWORKS = ["Neighbor-Guest", "CoffeeShop", "DIRECT-printer"]


class MockWifiController(WifiController):
    """Generates fake scans; connected to the first home network."""

    name = "mock"
    settle_delay = 0.0

    def __init__(self, radio_enabled: bool = True, seed: int | None = None) -> None:
        self.radio_enabled = radio_enabled
        self.radio_toggles = 0
        self._random = random.Random(seed)

    async def radio_state(self) -> RadioState:
        return RadioState.enabled if self.radio_enabled else RadioState.disabled

    async def set_radio(self, enabled: bool) -> None:
        self.radio_enabled = enabled
        self.radio_toggles += 1

    async def scan_raw(self) -> str:
        if not self.radio_enabled:
            return ""
        # Neighbours: visible on roughly half of the scans
        others = [n for n in _NEIGHBOUR_NETWORKS if self._random.random() < 0.5]
        return self.render(_HOME_NETWORKS[0], _HOME_NETWORKS[1:] + others)

    def parse(self, raw: str) -> WifiScanResult:
        return parse(raw, ParserVariant.sectioned)

    @staticmethod
    def render(connected: str | None, others: list[str]) -> str:
        """Render networks in the system_profiler layout."""
        lines = [
            "Wi-Fi:",
            "",
            "      Interfaces:",
            "        en0:",
            "          Card Type: Wi-Fi  (0x14E4, 0x4387)",
            "          Status: Connected" if connected else "          Status: Disconnected",
        ]
        if connected:
            lines += [
                "          Current Network Information:",
                f"            {connected}:",
                "              PHY Mode: 802.11ax",
                "              Channel: 149 (5GHz, 80MHz)",
                "              Security: WPA2 Personal",
                "              Signal / Noise: -48 dBm / -92 dBm",
            ]
        if others:
            lines.append("          Other Local Wi-Fi Networks:")
            for name in others:
                lines += [
                    f"            {name}:",
                    "              PHY Mode: 802.11",
                    "              Channel: 6 (2GHz, 20MHz)",
                    "              Security: WPA2 Personal",
                ]
        lines += ["        awdl0:", "          MAC Address: 00:00:00:00:00:00"]
        return "\n".join(lines) + "\n"
