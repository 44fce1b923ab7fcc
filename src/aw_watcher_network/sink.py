"""ActivityWatch REST client: bucket creation and heartbeat submission."""

import logging
import socket
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5600
TESTING_PORT = 5666

# aw-server answers 304 when the bucket already exists.
_BUCKET_OK = (200, 201, 304)


class SinkError(Exception):
    """The ActivityWatch server rejected a request or could not be reached."""


@dataclass
class Event:
    """A single ActivityWatch event."""

    data: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    duration: float = 0.0

    def to_json(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration,
            "data": self.data,
        }


class ActivityWatchSink:
    """Thin async client for the aw-server bucket and heartbeat endpoints."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = DEFAULT_PORT,
        client_name: str = "aw-watcher-network",
        hostname: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client_name = client_name
        self.hostname = hostname or socket.gethostname()
        self._client = client or httpx.AsyncClient(
            base_url=f"http://{host}:{port}/api/0",
            timeout=10.0,
        )

    async def ensure_bucket(self, bucket_id: str, event_type: str) -> None:
        """Create the bucket if it does not exist yet. Idempotent."""
        payload = {
            "client": self.client_name,
            "type": event_type,
            "hostname": self.hostname,
        }
        try:
            resp = await self._client.post(f"/buckets/{bucket_id}", json=payload)
        except httpx.HTTPError as e:
            raise SinkError(f"Could not create bucket {bucket_id}: {e}") from e
        if resp.status_code not in _BUCKET_OK:
            raise SinkError(
                f"Could not create bucket {bucket_id}: HTTP {resp.status_code} {resp.text[:200]}"
            )
        logger.info("Bucket ready: %s (%s)", bucket_id, event_type)

    async def heartbeat(self, bucket_id: str, event: Event, pulsetime: float) -> None:
        """Submit a heartbeat; the server merges it with an identical predecessor
        seen within ``pulsetime`` seconds."""
        try:
            resp = await self._client.post(
                f"/buckets/{bucket_id}/heartbeat",
                params={"pulsetime": pulsetime},
                json=event.to_json(),
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise SinkError(f"Heartbeat to {bucket_id} failed: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
