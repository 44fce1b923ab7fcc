"""Base interface for Wi-Fi controllers.

A controller wraps one platform's radio and scan tooling. ``scan()`` runs the
shared protocol: read the radio state, switch the radio on if needed, scan,
then put the radio back the way it was.
"""

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# An uninitialized radio returns an empty scan; give it time to come up.
RADIO_SETTLE_SECONDS = 2.0


class ScanError(Exception):
    """An external Wi-Fi command could not be run."""


class RadioState(enum.StrEnum):
    enabled = "enabled"
    disabled = "disabled"


@dataclass(frozen=True)
class WifiScanResult:
    """Connected SSID (if any) and the sorted, deduplicated visible SSIDs."""

    connected: str | None = None
    visible: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def build(cls, connected: str | None, visible: Iterable[str]) -> "WifiScanResult":
        names = {name.strip() for name in visible if name and name.strip()}
        if connected is not None:
            connected = connected.strip() or None
        if connected:
            names.add(connected)
        return cls(connected=connected, visible=tuple(sorted(names)))


class WifiController(ABC):
    """Abstract base for all platform Wi-Fi backends."""

    name = "base"
    settle_delay = RADIO_SETTLE_SECONDS

    @abstractmethod
    async def radio_state(self) -> RadioState:
        """Query whether the Wi-Fi radio is powered."""

    @abstractmethod
    async def set_radio(self, enabled: bool) -> None:
        """Power the Wi-Fi radio on or off. Raises ScanError on failure."""

    @abstractmethod
    async def scan_raw(self) -> str:
        """Run the platform scan command and return its text output."""

    @abstractmethod
    def parse(self, raw: str) -> WifiScanResult:
        """Turn scan output into a WifiScanResult."""

    async def connected_ssid(self) -> str | None:
        """Connected network from a source other than the scan text, if any."""
        return None

    async def scan(self) -> WifiScanResult:
        """Scan for networks, enabling the radio for the duration if it is off."""
        toggled = await self._ensure_radio_on()
        try:
            raw = await self.scan_raw()
        finally:
            if toggled:
                _ = await self._restore_radio()

        result = self.parse(raw)
        connected = await self.connected_ssid()
        if connected:
            result = WifiScanResult.build(connected, result.visible)
        return result

    async def _ensure_radio_on(self) -> bool:
        """Enable the radio if it is off. Returns True if it was toggled."""
        try:
            state = await self.radio_state()
        except ScanError as e:
            logger.warning("Could not read Wi-Fi radio state, assuming on: %s", e)
            return False
        if state is RadioState.enabled:
            return False

        logger.info("Wi-Fi radio is off, enabling it for a scan (%s)", self.name)
        await self.set_radio(True)
        await asyncio.sleep(self.settle_delay)
        return True

    async def _restore_radio(self) -> bool:
        """Switch the radio back off. Failures are logged, never raised."""
        try:
            await self.set_radio(False)
        except ScanError as e:
            logger.warning("Failed to switch Wi-Fi radio back off: %s", e)
            return False
        logger.info("Wi-Fi radio switched back off (%s)", self.name)
        return True
