"""Network quality detection for picking player and thumbnail sizes.

Quality comes from connection hints when the platform reports them
(effective type, downlink), otherwise from timing a small HEAD request.
The probe is expensive, so the result is memoized in a single-slot cache
for two minutes. A connection change invalidates it immediately instead
of waiting for the TTL, since the old answer is then simply wrong.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from muzik.config import NETWORK_CACHE_TTL_SECONDS, NETWORK_PROBE_TIMEOUT_SECONDS
from muzik.models import NetworkQuality
from muzik.utils import ExpiringCache

logger = logging.getLogger(__name__)

_QUALITY_KEY = "quality"

# Probe round-trip thresholds, seconds
SLOW_PROBE_SECONDS = 2.0
MEDIUM_PROBE_SECONDS = 1.0


@dataclass
class ConnectionInfo:
    """Connection hints as reported by the platform."""

    online: bool = True
    effective_type: Optional[str] = None  # "slow-2g", "2g", "3g", "4g"
    downlink: Optional[float] = None  # Mbit/s


def classify_connection(connection: ConnectionInfo) -> NetworkQuality:
    if not connection.online:
        return NetworkQuality.OFFLINE
    if connection.effective_type in ("slow-2g", "2g"):
        return NetworkQuality.SLOW
    if connection.effective_type == "3g":
        return NetworkQuality.MEDIUM
    if connection.downlink:
        if connection.downlink < 1:
            return NetworkQuality.SLOW
        if connection.downlink < 2:
            return NetworkQuality.MEDIUM
    return NetworkQuality.GOOD


class NetworkQualityMonitor:
    """Detects connection quality and notifies listeners when it changes."""

    PROBE_URL = "https://www.youtube.com/favicon.ico"

    def __init__(
        self,
        probe_url: str = PROBE_URL,
        cache: Optional[ExpiringCache[str, NetworkQuality]] = None,
        transport: httpx.AsyncBaseTransport | None = None,
        probe_timeout: float = NETWORK_PROBE_TIMEOUT_SECONDS,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._probe_url = probe_url
        if cache is None:
            cache = ExpiringCache(capacity=1, ttl_seconds=NETWORK_CACHE_TTL_SECONDS)
        self._cache = cache
        self._transport = transport
        self._probe_timeout = probe_timeout
        self._timer = timer
        self._listeners: list[Callable[[NetworkQuality], None]] = []

    @property
    def cache(self) -> ExpiringCache[str, NetworkQuality]:
        return self._cache

    async def detect(self, connection: Optional[ConnectionInfo] = None) -> NetworkQuality:
        """Return the current quality, probing only when nothing is cached.

        Args:
            connection: Platform connection hints, or None when the platform
                has no Network Information API (forces a probe).
        """
        cached = self._cache.get(_QUALITY_KEY)
        if cached is not None:
            return cached

        if connection is not None:
            quality = classify_connection(connection)
        else:
            quality = await self.measure()

        self._cache.set(_QUALITY_KEY, quality)
        return quality

    async def measure(self) -> NetworkQuality:
        """Time a HEAD request to the probe URL.

        Never raises: timeouts and transport errors fall back to MEDIUM.
        """
        start = self._timer()
        try:
            async with httpx.AsyncClient(
                timeout=self._probe_timeout,
                transport=self._transport,
                headers={"Cache-Control": "no-cache"},
            ) as client:
                await asyncio.wait_for(client.head(self._probe_url), timeout=self._probe_timeout)
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.warning(f"[NETWORK] Speed measurement failed: {type(e).__name__}")
            return NetworkQuality.MEDIUM

        duration = self._timer() - start
        if duration > SLOW_PROBE_SECONDS:
            return NetworkQuality.SLOW
        if duration > MEDIUM_PROBE_SECONDS:
            return NetworkQuality.MEDIUM
        return NetworkQuality.GOOD

    def invalidate(self) -> None:
        self._cache.delete(_QUALITY_KEY)

    async def on_connection_change(
        self, connection: Optional[ConnectionInfo] = None
    ) -> NetworkQuality:
        """Handle a platform connection-change event."""
        self.invalidate()
        quality = await self.detect(connection)
        for callback in list(self._listeners):
            callback(quality)
        return quality

    def subscribe(self, callback: Callable[[NetworkQuality], None]) -> Callable[[], None]:
        """Register ``callback`` for quality changes. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


def get_optimal_quality(quality: NetworkQuality, audio_only: bool = False) -> str:
    """Map network quality to a YouTube player quality level."""
    if audio_only:
        return "tiny"
    if quality == NetworkQuality.SLOW:
        return "small"
    if quality == NetworkQuality.MEDIUM:
        return "medium"
    return "default"


def get_optimal_player_vars(
    quality: NetworkQuality, audio_only: bool = False, origin: Optional[str] = None
) -> dict:
    """Player parameters that keep data usage down on weak connections."""
    player_vars = {
        "autoplay": 0,
        "controls": 0 if audio_only else 1,
        "loop": 0,
        "modestbranding": 1,
        "rel": 0,
        "showinfo": 0,
        "enablejsapi": 1,
        "iv_load_policy": 3,
        "cc_load_policy": 0,
        "fs": 0,
        "vq": get_optimal_quality(quality, audio_only),
        "playsinline": 1,
    }
    if origin:
        player_vars["origin"] = origin
    return player_vars


def get_thumbnail_size(quality: NetworkQuality = NetworkQuality.GOOD) -> str:
    """``default`` (120x90) on slow links, ``mqdefault`` (320x180) otherwise."""
    return "default" if quality == NetworkQuality.SLOW else "mqdefault"


def get_thumbnail_url(
    video_id: Optional[str], quality: NetworkQuality = NetworkQuality.GOOD
) -> Optional[str]:
    if not video_id:
        return None
    return f"https://img.youtube.com/vi/{video_id}/{get_thumbnail_size(quality)}.jpg"
