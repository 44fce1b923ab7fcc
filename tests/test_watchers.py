"""Tests for the connectivity and Wi-Fi watchers."""

import threading
from unittest.mock import AsyncMock, patch

import pytest

from aw_watcher_network.connectivity import ConnectivityStatus
from aw_watcher_network.watchers import (
    ConnectivityWatcher,
    SSIDSnapshot,
    WifiWatcher,
    connectivity_payload,
    wifi_payload,
)
from aw_watcher_network.wifi.base import ScanError, WifiScanResult
from aw_watcher_network.wifi.mock import MockWifiController


class TestPayloads:
    def test_online_title_has_trailing_space(self):
        assert connectivity_payload(ConnectivityStatus.online) == {"title": "online "}

    def test_offline_title(self):
        assert connectivity_payload(ConnectivityStatus.offline) == {"title": "offline"}

    def test_wifi_connected(self):
        result = WifiScanResult.build("HomeNet", ["Cafe"])
        assert wifi_payload(result) == {"title": "HomeNet", "ssids": ["Cafe", "HomeNet"]}

    def test_wifi_not_connected(self):
        result = WifiScanResult.build(None, ["Zeta", "Alpha"])
        assert wifi_payload(result) == {"title": "Not connected", "ssids": ["Alpha", "Zeta"]}

    def test_wifi_nothing_visible(self):
        assert wifi_payload(WifiScanResult()) == {"title": "No Wi-Fi networks", "ssids": []}


class TestSSIDSnapshot:
    def test_starts_empty(self):
        assert SSIDSnapshot().get() == frozenset()

    def test_replace_is_whole_set(self):
        snapshot = SSIDSnapshot()
        snapshot.replace(["a", "b"])
        snapshot.replace(["c"])
        assert snapshot.get() == frozenset({"c"})

    def test_read_from_other_thread(self):
        snapshot = SSIDSnapshot()
        snapshot.replace(["HomeNet"])
        seen = []
        reader = threading.Thread(target=lambda: seen.append(snapshot.get()))
        reader.start()
        reader.join()
        assert seen == [frozenset({"HomeNet"})]


class TestConnectivityWatcher:
    @pytest.mark.asyncio
    async def test_tick_sends_heartbeat(self, sink):
        watcher = ConnectivityWatcher(sink, "aw-watcher-network", interval=5)
        with patch(
            "aw_watcher_network.watchers.probe",
            new_callable=AsyncMock,
            return_value=ConnectivityStatus.offline,
        ):
            status = await watcher.tick()

        assert status is ConnectivityStatus.offline
        bucket, event, pulsetime = sink.heartbeats[0]
        assert bucket == "aw-watcher-network"
        assert event.data == {"title": "offline"}
        assert pulsetime == 10

    @pytest.mark.asyncio
    async def test_sink_failure_is_logged(self, failing_sink, caplog):
        watcher = ConnectivityWatcher(failing_sink, "aw-watcher-network", interval=5)
        with patch(
            "aw_watcher_network.watchers.probe",
            new_callable=AsyncMock,
            return_value=ConnectivityStatus.online,
        ):
            status = await watcher.tick()

        assert status is ConnectivityStatus.online
        assert "Failed to send heartbeat" in caplog.text

    @pytest.mark.asyncio
    async def test_passes_targets_and_timeout(self, sink):
        targets = [("127.0.0.1", 53)]
        watcher = ConnectivityWatcher(sink, "b", interval=5, targets=targets, timeout=0.5)
        with patch(
            "aw_watcher_network.watchers.probe",
            new_callable=AsyncMock,
            return_value=ConnectivityStatus.online,
        ) as probe:
            await watcher.tick()
        probe.assert_awaited_once_with(targets, 0.5)


class FailingController(MockWifiController):
    async def scan_raw(self) -> str:
        raise ScanError("Command not found: nmcli")


class TestWifiWatcher:
    @pytest.mark.asyncio
    async def test_tick_updates_snapshot_and_reports(self, sink):
        watcher = WifiWatcher(sink, MockWifiController(seed=3), "aw-watcher-network-wifi", 300)
        result = await watcher.tick()

        assert result is not None
        assert result.connected == "HomeNetwork"
        assert watcher.snapshot.get() == frozenset(result.visible)
        bucket, event, pulsetime = sink.heartbeats[0]
        assert bucket == "aw-watcher-network-wifi"
        assert event.data["title"] == "HomeNetwork"
        assert event.data["ssids"] == sorted(result.visible)
        assert pulsetime == 600

    @pytest.mark.asyncio
    async def test_scan_failure_keeps_previous_snapshot(self, sink, caplog):
        watcher = WifiWatcher(sink, FailingController(), "wifi", 300)
        watcher.snapshot.replace(["Previous"])

        assert await watcher.tick() is None
        assert watcher.snapshot.get() == frozenset({"Previous"})
        assert sink.heartbeats == []
        assert "Wi-Fi scan failed" in caplog.text

    @pytest.mark.asyncio
    async def test_sink_failure_still_updates_snapshot(self, failing_sink, caplog):
        watcher = WifiWatcher(failing_sink, MockWifiController(seed=3), "wifi", 300)
        result = await watcher.tick()

        assert result is not None
        assert "HomeNetwork" in watcher.snapshot.get()
        assert "Failed to send Wi-Fi heartbeat" in caplog.text
