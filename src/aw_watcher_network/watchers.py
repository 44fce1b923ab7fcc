"""Per-tick task bodies: probe or scan, then report one heartbeat."""

import logging
import threading
from collections.abc import Iterable, Sequence
from typing import Any

from aw_watcher_network.connectivity import (
    DEFAULT_TARGETS,
    DEFAULT_TIMEOUT,
    ConnectivityStatus,
    probe,
)
from aw_watcher_network.sink import ActivityWatchSink, Event, SinkError
from aw_watcher_network.wifi.base import ScanError, WifiController, WifiScanResult

logger = logging.getLogger(__name__)

CONNECTIVITY_EVENT_TYPE = "network-status"
WIFI_EVENT_TYPE = "wifi-status"

# Trailing space on "online " is part of the published title; keep it.
_CONNECTIVITY_TITLES = {
    ConnectivityStatus.online: "online ",
    ConnectivityStatus.offline: "offline",
}

NOT_CONNECTED_TITLE = "Not connected"
NO_NETWORKS_TITLE = "No Wi-Fi networks"


def connectivity_payload(status: ConnectivityStatus) -> dict[str, Any]:
    return {"title": _CONNECTIVITY_TITLES[status]}


def wifi_payload(result: WifiScanResult) -> dict[str, Any]:
    if result.connected:
        title = result.connected
    elif result.visible:
        title = NOT_CONNECTED_TITLE
    else:
        title = NO_NETWORKS_TITLE
    return {"title": title, "ssids": sorted(result.visible)}


class SSIDSnapshot:
    """Latest visible SSID set, safe to read from any thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ssids: frozenset[str] = frozenset()

    def replace(self, ssids: Iterable[str]) -> None:
        new = frozenset(ssids)
        with self._lock:
            self._ssids = new

    def get(self) -> frozenset[str]:
        with self._lock:
            return self._ssids


class ConnectivityWatcher:
    """Probes internet reachability and reports it to the sink."""

    def __init__(
        self,
        sink: ActivityWatchSink,
        bucket_id: str,
        interval: float,
        targets: Sequence[tuple[str, int]] = DEFAULT_TARGETS,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.sink = sink
        self.bucket_id = bucket_id
        self.interval = interval
        self.targets = targets
        self.timeout = timeout

    @property
    def pulsetime(self) -> float:
        return 2 * self.interval

    async def tick(self) -> ConnectivityStatus:
        status = await probe(self.targets, self.timeout)
        event = Event(data=connectivity_payload(status))
        try:
            await self.sink.heartbeat(self.bucket_id, event, self.pulsetime)
            logger.info("Sent heartbeat: %s", status)
        except SinkError as e:
            logger.warning("Failed to send heartbeat: %s", e)
        return status


class WifiWatcher:
    """Scans for Wi-Fi networks and reports them to the sink."""

    def __init__(
        self,
        sink: ActivityWatchSink,
        controller: WifiController,
        bucket_id: str,
        interval: float,
    ) -> None:
        self.sink = sink
        self.controller = controller
        self.bucket_id = bucket_id
        self.interval = interval
        self.snapshot = SSIDSnapshot()

    @property
    def pulsetime(self) -> float:
        return 2 * self.interval

    async def tick(self) -> WifiScanResult | None:
        try:
            result = await self.controller.scan()
        except ScanError as e:
            logger.warning("Wi-Fi scan failed: %s", e)
            return None

        self.snapshot.replace(result.visible)
        event = Event(data=wifi_payload(result))
        try:
            await self.sink.heartbeat(self.bucket_id, event, self.pulsetime)
            logger.info(
                "Sent Wi-Fi heartbeat: %s (%d networks)", event.data["title"], len(result.visible)
            )
        except SinkError as e:
            logger.warning("Failed to send Wi-Fi heartbeat: %s", e)
        return result
