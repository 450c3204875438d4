# src/dotcat_widget/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the snapshot core.

Writer, reader and the refresh loops depend on Protocols instead of concrete
implementations. This keeps the shared store swappable per host platform and
makes testing easier.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol


class Clock(Protocol):
    """Returns the current local wall-clock time (naive datetime)."""
    def __call__(self) -> datetime: ...


class SnapshotRepo(Protocol):
    """
    Process-external key/value area shared by the app and its renderers.

    Only atomic single-key writes and last-writer-wins reads are required.
    """

    def put(self, key: str, snapshot: Any) -> bool: ...
    def get(self, key: str) -> Any | None: ...
    def get_raw(self, key: str) -> str | None: ...
    def clear(self, key: str) -> None: ...


class TaskSource(Protocol):
    """App-side provider of the already filtered "relevant today" task set."""
    def __call__(self) -> Iterable[Any]: ...


class RenderSink(Protocol):
    """
    Renderer-side port: draws a RenderModel on its own surface.

    The core never references a view technology; every renderer implements
    this against the same model shape.
    """
    def __call__(self, model: Any) -> None: ...
