"""
Tailorman services — modular organization of garment operations.

    from tailorman.services import StockAllocation, ProductionRequests, UnitLifecycle, StorageBins, OrderIntake
"""

from tailorman.services.allocation import StockAllocation
from tailorman.services.bins import StorageBins
from tailorman.services.lifecycle import UnitLifecycle
from tailorman.services.orders import OrderIntake
from tailorman.services.production import ProductionRequests

__all__ = [
    'StockAllocation',
    'ProductionRequests',
    'UnitLifecycle',
    'StorageBins',
    'OrderIntake',
]
