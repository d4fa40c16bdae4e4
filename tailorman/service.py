"""
Tailor Service — The single public interface for garment operations.

Usage:
    from tailorman import tailor, TailorError

    order = tailor.create_order(customer, "ST-32-X-32-STA")
    result = tailor.process_order(order.code)      # bind stock or waitlist
    tailor.accept_production_request(result.production_request.code)
    tailor.apply_scan(unit.code, ScanType.ACTIVATION)
"""

from tailorman.models.bin import Bin
from tailorman.models.order import Customer, Order
from tailorman.models.production import ProductionRequest
from tailorman.models.unit import Unit
from tailorman.results import AcceptResult, AllocationResult, QueueResult, ScanResult
from tailorman.services.allocation import StockAllocation
from tailorman.services.bins import StorageBins
from tailorman.services.lifecycle import UnitLifecycle
from tailorman.services.orders import OrderIntake
from tailorman.services.production import ProductionRequests
from tailorman.sku import Sku


class Tailor:
    """
    Single interface for all garment operations.

    IMPORTANT: All state-changing methods use atomic transactions
    with appropriate locking. See the services for details.
    """

    # ══════════════════════════════════════════════════════════════
    # ORDERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create_customer(cls, name: str, **contact) -> Customer:
        return OrderIntake.create_customer(name, **contact)

    @classmethod
    def create_order(cls, customer: Customer, target_sku: Sku | str,
                     hem_type: str | None = None, button_color: str | None = None) -> Order:
        return OrderIntake.create_order(customer, target_sku, hem_type, button_color)

    @classmethod
    def process_order(cls, order_id) -> AllocationResult:
        return OrderIntake.process_order(order_id)

    @classmethod
    def queue_pending_orders(cls, use_stock: bool = True) -> QueueResult:
        return OrderIntake.queue_pending_orders(use_stock=use_stock)

    # ══════════════════════════════════════════════════════════════
    # ALLOCATION & PRODUCTION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def allocate(cls, target_sku: Sku | str, quantity: int = 1, order: Order | None = None) -> AllocationResult:
        return StockAllocation.allocate(target_sku, quantity, order=order)

    @classmethod
    def create_or_extend_production_request(cls, universal_sku: Sku, orders) -> ProductionRequest:
        return ProductionRequests.create_or_extend_production_request(universal_sku, orders)

    @classmethod
    def modify_production_request(cls, request_id, quantity: int | None = None,
                                  length: int | None = None) -> ProductionRequest:
        return ProductionRequests.modify_production_request(request_id, quantity=quantity, length=length)

    @classmethod
    def accept_production_request(cls, request_id) -> AcceptResult:
        return ProductionRequests.accept_production_request(request_id)

    # ══════════════════════════════════════════════════════════════
    # SCANS & BINS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def apply_scan(cls, unit_id, scan_type, bin_code: str | None = None,
                   location: str | None = None, user=None, **metadata) -> ScanResult:
        return UnitLifecycle.apply_scan(
            unit_id, scan_type, bin_code=bin_code, location=location, user=user, **metadata
        )

    @classmethod
    def unit_history(cls, unit_id):
        return UnitLifecycle.unit_history(unit_id)

    @classmethod
    def select_storage_bin(cls, unit: Unit, candidate_bins=None) -> Bin:
        return StorageBins.select_storage_bin(unit, candidate_bins)

    @classmethod
    def scan_out_wash_bin(cls, bin_code: str, location: str | None = None, user=None) -> list[Unit]:
        return UnitLifecycle.scan_out_wash_bin(bin_code, location=location, user=user)
