"""
Tailorman Result Types.

Structured results for allocation, production and scan operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tailorman.models import Batch, Bin, Order, ProductionRequest, ScanEvent, Unit


@dataclass
class AllocationResult:
    """
    Outcome of an allocation.

    units: stock units found (bound to the order unless it was a dry run)
    shortfall: how many garments stock could not cover
    production_request: request the order was waitlisted on, if any
    """

    units: list[Unit] = field(default_factory=list)
    shortfall: int = 0
    production_request: ProductionRequest | None = None

    @property
    def satisfied(self) -> bool:
        return self.shortfall == 0


@dataclass
class AcceptResult:
    """Units materialized when a production request is accepted."""

    batch: Batch
    units: list[Unit] = field(default_factory=list)
    committed: list[Unit] = field(default_factory=list)
    detached_orders: list[Order] = field(default_factory=list)


@dataclass
class ScanResult:
    """
    State after a successful scan.

    next_action hints the operator at the following step, e.g.
    ``await_destination`` after the first movement scan.
    """

    unit: Unit
    stage: str
    commitment: str
    scan_event: ScanEvent
    next_action: str | None = None
    bin: Bin | None = None
    requires_defect_report: bool = False

    @property
    def scan_event_id(self) -> int:
        return self.scan_event.pk


@dataclass
class QueueResult:
    """Summary of a batch queueing run over unprocessed orders."""

    allocated: list[Order] = field(default_factory=list)
    waitlisted: list[Order] = field(default_factory=list)
    production_requests: list[ProductionRequest] = field(default_factory=list)
