"""Wi-Fi radio control, scanning and SSID parsing."""

import logging
import shutil
import sys

from aw_watcher_network.wifi.base import (
    RadioState,
    ScanError,
    WifiController,
    WifiScanResult,
)

logger = logging.getLogger(__name__)

__all__ = [
    "RadioState",
    "ScanError",
    "WifiController",
    "WifiScanResult",
    "create_controller",
    "detect_backend",
]


def detect_backend() -> str:
    """Pick the Wi-Fi backend for this host."""
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        if shutil.which("nmcli"):
            return "nmcli"
        if shutil.which("iwlist"):
            return "iwlist"
    return "none"


def create_controller(
    backend: str,
    command_timeout: float | None = None,
    extra_excluded: list[str] | None = None,
) -> WifiController | None:
    """Factory: instantiate the configured Wi-Fi backend."""
    if backend == "auto":
        backend = detect_backend()
        logger.info("Detected Wi-Fi backend: %s", backend)
    if backend == "macos":
        from aw_watcher_network.wifi.macos import MacWifiController

        return MacWifiController(
            command_timeout=command_timeout, extra_excluded=extra_excluded or ()
        )
    if backend == "nmcli":
        from aw_watcher_network.wifi.linux import NmcliWifiController

        return NmcliWifiController(command_timeout=command_timeout)
    if backend == "iwlist":
        from aw_watcher_network.wifi.linux import IwlistWifiController

        return IwlistWifiController(command_timeout=command_timeout)
    if backend == "mock":
        from aw_watcher_network.wifi.mock import MockWifiController

        return MockWifiController()
    if backend == "none":
        return None
    logger.warning("Unknown Wi-Fi backend '%s', Wi-Fi scanning disabled", backend)
    return None
