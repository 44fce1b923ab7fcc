"""Internet reachability probe.

Tries raw TCP connections to well-known public DNS resolvers. Any resolver
accepting a connection means the host is online; the probe never raises.
"""

import asyncio
import enum
import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Ordered by expected latency; any one answering is enough.
DEFAULT_TARGETS: tuple[tuple[str, int], ...] = (
    ("1.1.1.1", 53),  # Cloudflare
    ("8.8.8.8", 53),  # Google
    ("9.9.9.9", 53),  # Quad9
)

DEFAULT_TIMEOUT = 1.0


class ConnectivityStatus(enum.StrEnum):
    online = "online"
    offline = "offline"


async def _can_connect(host: str, port: int, timeout: float) -> bool:
    # ValueError covers bad IDNA host names, OverflowError out-of-range ports
    try:
        _reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except (OSError, ValueError, OverflowError, asyncio.TimeoutError) as e:
        logger.debug("Probe %s:%d failed: %s", host, port, e or type(e).__name__)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def probe(
    targets: Sequence[tuple[str, int]] = DEFAULT_TARGETS,
    timeout: float = DEFAULT_TIMEOUT,
) -> ConnectivityStatus:
    """Return ONLINE on the first reachable target, OFFLINE if none answer."""
    for host, port in targets:
        if await _can_connect(host, port, timeout):
            return ConnectivityStatus.online
    return ConnectivityStatus.offline
