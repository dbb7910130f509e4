"""
Events emitted while aggregating subscription feeds.

Progress is modelled as an ordered stream: status and progress events while
the pipeline runs, then exactly one terminal result event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .enums import AggregationPhase
from .subscription import Subscription
from .video import VideoRecord


@dataclass(frozen=True)
class StatusEvent:
    """The pipeline entered a new phase."""

    phase: AggregationPhase

    @property
    def label(self) -> str:
        return self.phase.value


@dataclass(frozen=True)
class ProgressEvent:
    """``current`` of ``total`` channels have been dispatched."""

    current: int
    total: int


@dataclass(frozen=True)
class BatchCompleted:
    """All batches settled; ``videos`` holds every record fetched."""

    videos: list[VideoRecord]
    failed_channels: int = 0


@dataclass(frozen=True)
class AggregationComplete:
    """Terminal event of a full load."""

    videos: list[VideoRecord]
    subscriptions: list[Subscription] = field(default_factory=list)
    from_cache: bool = False


AggregationEvent = Union[StatusEvent, ProgressEvent, BatchCompleted, AggregationComplete]
