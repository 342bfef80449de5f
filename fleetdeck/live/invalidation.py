"""Maps live message tags to query cache invalidations."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Tuple

import structlog

from ..contracts import Invalidator
from .messages import CacheKey, LiveMessage, MessageType

logger = structlog.get_logger(__name__)

# Metrics are derived from loads and drivers, so both tags refresh them too.
INVALIDATION_MAP: Dict[MessageType, Tuple[str, ...]] = {
    MessageType.LOAD_UPDATE: (CacheKey.LOADS, CacheKey.METRICS),
    MessageType.DRIVER_UPDATE: (CacheKey.DRIVERS, CacheKey.METRICS),
    MessageType.IOT_UPDATE: (CacheKey.IOT_DEVICES,),
    MessageType.NEGOTIATION_UPDATE: (CacheKey.NEGOTIATIONS,),
    MessageType.ALERT: (CacheKey.ALERTS,),
    MessageType.SECURITY_EVENT: (CacheKey.SECURITY_EVENTS, CacheKey.SECURITY_REPORT),
    MessageType.WEATHER_UPDATE: (CacheKey.WEATHER,),
}


class InvalidationRouter:
    """Marks cache keys stale for each inbound live message."""

    def __init__(self, cache: Invalidator) -> None:
        self._cache = cache
        self.unhandled_counts: Counter = Counter()

    def keys_for(self, message_type: str) -> Tuple[str, ...]:
        try:
            return INVALIDATION_MAP[MessageType(message_type)]
        except ValueError:
            return ()

    def route(self, message: LiveMessage) -> List[str]:
        """Invalidate the keys mapped to ``message.type`` and return them in order."""
        keys = self.keys_for(message.type)
        if not keys:
            self.unhandled_counts[message.type] += 1
            logger.info(
                "Unhandled live message type",
                message_type=message.type,
                occurrences=self.unhandled_counts[message.type],
            )
            return []

        invalidated: List[str] = []
        for key in keys:
            self._cache.invalidate(key)
            invalidated.append(key)
        logger.debug("Invalidated cache keys", message_type=message.type, keys=invalidated)
        return invalidated
