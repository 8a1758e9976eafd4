"""Port for the best-effort external mirror side channel."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MirrorPort(Protocol):
    """Fire-and-forget copy of store mutations to an external channel.

    ``publish`` never raises and never blocks the caller on network I/O.
    """

    @property
    def enabled(self) -> bool: ...

    def publish(self, kind: str, payload: dict[str, Any]) -> None: ...

    def start(self) -> bool: ...

    def stop(self) -> bool: ...

    def status(self) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...
