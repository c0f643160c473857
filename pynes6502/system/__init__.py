"""Host assembly helpers for the 6502 model."""

from __future__ import annotations

from .host import ExecutionLimitError, Host, HostConfig

__all__ = [
    "ExecutionLimitError",
    "Host",
    "HostConfig",
]
