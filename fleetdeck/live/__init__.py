"""Live push channel: client, message model and cache invalidation."""

from .client import ConnectionState, LiveChannelClient
from .invalidation import INVALIDATION_MAP, InvalidationRouter
from .messages import CacheKey, LiveMessage, MalformedMessageError, MessageType

__all__ = [
    "CacheKey",
    "ConnectionState",
    "INVALIDATION_MAP",
    "InvalidationRouter",
    "LiveChannelClient",
    "LiveMessage",
    "MalformedMessageError",
    "MessageType",
]
