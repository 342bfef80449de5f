"""Typed collaborator contracts for dependency injection."""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Optional, Protocol, Union


class LiveConnection(Protocol):
    """One open push-channel connection."""

    def send(self, data: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[Union[str, bytes]]: ...


class LiveTransport(Protocol):
    """Opens push-channel connections; raises on failure to connect."""

    async def open(self, url: str) -> LiveConnection: ...


class Invalidator(Protocol):
    """Cache surface used by the invalidation router."""

    def invalidate(self, key: str) -> int: ...


class DashboardDataSource(Protocol):
    """Read access to dashboard collections keyed by cache key."""

    async def fetch(self, key: str) -> Any: ...

    async def close(self) -> None: ...

    async def health_check(self) -> bool: ...


class NegotiationSource(Protocol):
    """Rate negotiation calls issued from load and negotiation views."""

    async def negotiate_rate(self, load_id: int) -> Dict[str, Any]: ...

    async def update_negotiation(
        self, negotiation_id: int, *, status: str, final_rate: Optional[str] = None
    ) -> Dict[str, Any]: ...
