"""
Tailorman Models.

Core models for garment tracking:
- Customer / Order: Demand, one garment per order
- ProductionRequest / WaitlistEntry: Production runs and the orders queued on them
- Batch: Traceability of an accepted run
- Unit: One physical garment, two status axes (commitment × stage)
- ScanEvent: Immutable audit trail of scans
- Bin: Storage and wash locations with capacity
- CodeSequence: Atomic code counters
"""

from tailorman.models.batch import Batch
from tailorman.models.bin import Bin
from tailorman.models.enums import (
    BatchStatus,
    BinStatus,
    BinType,
    Commitment,
    OrderStatus,
    ProductionRequestStatus,
    ScanType,
    Stage,
    Wash,
)
from tailorman.models.order import Customer, Order
from tailorman.models.production import ProductionRequest, WaitlistEntry
from tailorman.models.scan import ScanEvent
from tailorman.models.sequence import CodeSequence
from tailorman.models.unit import Unit

__all__ = [
    'Wash',
    'Commitment',
    'Stage',
    'ScanType',
    'OrderStatus',
    'ProductionRequestStatus',
    'BatchStatus',
    'BinType',
    'BinStatus',
    'Customer',
    'Order',
    'ProductionRequest',
    'WaitlistEntry',
    'Batch',
    'Unit',
    'ScanEvent',
    'Bin',
    'CodeSequence',
]
