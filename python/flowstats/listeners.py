"""Listener interfaces for flow registry events."""

from __future__ import annotations

from typing import Protocol

from .flow_key import FlowKey


class FlowRegistryListener(Protocol):
    def on_flow_registered(self, key: FlowKey) -> None:  # pragma: no cover - protocol definition
        ...


__all__ = ["FlowRegistryListener"]
