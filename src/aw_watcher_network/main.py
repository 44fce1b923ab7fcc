"""aw-watcher-network entrypoint."""

import argparse
import asyncio
import logging
import signal
import sys

from aw_watcher_network import __version__
from aw_watcher_network.config import APP_NAME, Settings, load_config
from aw_watcher_network.scheduler import PeriodicLoop
from aw_watcher_network.sink import TESTING_PORT, ActivityWatchSink, SinkError
from aw_watcher_network.watchers import (
    CONNECTIVITY_EVENT_TYPE,
    WIFI_EVENT_TYPE,
    ConnectivityWatcher,
    WifiWatcher,
)
from aw_watcher_network.wifi import create_controller

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Report internet connectivity and Wi-Fi networks to ActivityWatch.",
    )
    parser.add_argument("--testing", action="store_true", help="use the aw-server testing instance")
    parser.add_argument("--host", help="aw-server host (overrides config)")
    parser.add_argument("--port", type=int, help="aw-server port (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops: Ctrl+C surfaces as KeyboardInterrupt instead
            pass


async def run(
    cfg: Settings,
    testing: bool = False,
    sink: ActivityWatchSink | None = None,
    stop: asyncio.Event | None = None,
) -> int:
    """Set up buckets, run both loops until ``stop`` is set. Returns exit status."""
    suffix = "-testing" if testing else ""
    bucket_id = cfg.bucket_id + suffix
    wifi_bucket_id = cfg.wifi_bucket_id + suffix
    if sink is None:
        sink = ActivityWatchSink(host=cfg.server_host, port=cfg.server_port, client_name=APP_NAME)

    controller = create_controller(
        cfg.wifi_backend,
        command_timeout=cfg.command_timeout,
        extra_excluded=cfg.extra_excluded_labels,
    )

    try:
        await sink.ensure_bucket(bucket_id, CONNECTIVITY_EVENT_TYPE)
        if controller is not None:
            await sink.ensure_bucket(wifi_bucket_id, WIFI_EVENT_TYPE)
    except SinkError as e:
        logger.error("Cannot reach ActivityWatch server: %s", e)
        await sink.aclose()
        return 1

    connectivity = ConnectivityWatcher(
        sink,
        bucket_id,
        cfg.polling_interval_seconds,
        targets=cfg.get_probe_targets(),
        timeout=cfg.probe_timeout_seconds,
    )
    loops = [PeriodicLoop("connectivity", cfg.polling_interval_seconds, connectivity.tick)]

    if controller is not None:
        wifi = WifiWatcher(sink, controller, wifi_bucket_id, cfg.wifi_scan_interval_seconds)
        loops.append(PeriodicLoop("wifi", cfg.wifi_scan_interval_seconds, wifi.tick))
    else:
        logger.info("Wi-Fi scanning disabled on this host")

    if stop is None:
        stop = asyncio.Event()
        _install_signal_handlers(stop)

    for loop in loops:
        await loop.start()
    try:
        await stop.wait()
    finally:
        for loop in loops:
            await loop.stop()
        await sink.aclose()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    cfg = load_config()

    if args.host:
        cfg.server_host = args.host
    if args.port:
        cfg.server_port = args.port
    elif args.testing:
        cfg.server_port = TESTING_PORT

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else cfg.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info(
        "Starting %s %s with polling interval of %g seconds",
        APP_NAME,
        __version__,
        cfg.polling_interval_seconds,
    )

    try:
        status = asyncio.run(run(cfg, testing=args.testing))
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        status = 0
    sys.exit(status)


if __name__ == "__main__":
    main()
