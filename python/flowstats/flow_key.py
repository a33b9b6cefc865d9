"""Flow identity: source and sink endpoints plus the registry-assigned index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .utils import CSV_SUFFIX


@dataclass(frozen=True)
class FlowKey:
    source_node_id: int
    source_app_id: int
    sink_node_id: int
    sink_app_id: int
    # Assigned by the registry in first-seen order; not part of identity.
    index: int = field(default=0, compare=False)

    def identity(self) -> Tuple[int, int, int, int]:
        return (
            self.source_node_id,
            self.source_app_id,
            self.sink_node_id,
            self.sink_app_id,
        )

    def matches(
        self,
        source_node_id: int,
        source_app_id: int,
        sink_node_id: int,
        sink_app_id: int,
    ) -> bool:
        return self.identity() == (source_node_id, source_app_id, sink_node_id, sink_app_id)

    def file_name(self, prefix: str = "Stats") -> str:
        return f"{prefix}-Flow_{self}{CSV_SUFFIX}"

    def identity_row(self) -> str:
        return ",".join(str(value) for value in (self.index, *self.identity()))

    def __str__(self) -> str:
        return (
            f"{self.index}-SourceNode_{self.source_node_id}"
            f"-SourceApp_{self.source_app_id}"
            f"-SinkNode_{self.sink_node_id}"
            f"-SinkApp_{self.sink_app_id}"
        )


__all__ = ["FlowKey"]
