"""
Stock allocation — match a target SKU against anonymous stock.

Lookup order:
1. Exact match (all five fields), oldest first
2. Universal match (same style/waist/shape, universal wash, long enough), oldest first
3. Shortfall: the order is waitlisted on a production request

Binding a unit to an order is a conditional UPDATE that only succeeds while
the unit is still UNCOMMITTED, in STOCK and unbound. Losing that race
triggers a fresh lookup, up to ALLOCATION_MAX_ATTEMPTS times.
"""

import logging

from django.db import transaction
from django.utils import timezone

from tailorman.conf import tailorman_settings
from tailorman.exceptions import TailorError
from tailorman.models.enums import Commitment, OrderStatus, Stage
from tailorman.models.order import Order
from tailorman.models.unit import Unit
from tailorman.results import AllocationResult
from tailorman.sku import (
    TARGET_WASHES,
    Sku,
    is_universal_match,
    is_universal_wash,
    universal_candidates_filter,
)

logger = logging.getLogger('tailorman')


def _as_sku(target) -> Sku:
    if isinstance(target, Sku):
        return target
    return Sku.parse(str(target))


def _check_wash(target: Sku) -> None:
    if target.wash not in TARGET_WASHES and not is_universal_wash(target.wash):
        raise TailorError('INVALID_WASH_CODE', wash=target.wash)


class StockAllocation:
    """Allocation of stock units to orders."""

    @classmethod
    def find_stock(cls, target_sku, quantity: int = 1, exclude=()) -> list[Unit]:
        """
        Available units able to satisfy ``target_sku``, best first.

        Exact matches come before universal ones; each group is FIFO.
        """
        target = _as_sku(target_sku)
        _check_wash(target)

        available = Unit.objects.available().exclude(pk__in=list(exclude))
        found = list(available.for_sku(target).fifo()[:quantity])

        remaining = quantity - len(found)
        if remaining > 0 and target.wash in TARGET_WASHES:
            universal = available.filter(**universal_candidates_filter(target)).fifo()
            for unit in universal[:remaining]:
                if is_universal_match(target, unit.sku):
                    found.append(unit)
        return found

    @classmethod
    def allocate(cls, target_sku, quantity: int = 1, order: Order | None = None) -> AllocationResult:
        """
        Allocate stock for a target SKU.

        Without an order this is a dry run: matching units and the shortfall
        are reported, nothing is bound and no production request is touched.

        With an order, quantity must be 1. The order is bound to the best
        unit, or waitlisted on a production request when stock is short.

        Raises:
            TailorError('INVALID_QUANTITY'): quantity <= 0, or != 1 with an order
            TailorError('INVALID_WASH_CODE'): Unknown target wash
            TailorError('ORDER_ALREADY_PROCESSED'): Order already bound or waitlisted
            TailorError('ALLOCATION_CONFLICT'): Lost every binding race
        """
        target = _as_sku(target_sku)
        if quantity <= 0:
            raise TailorError('INVALID_QUANTITY', requested=quantity)
        _check_wash(target)

        if order is None:
            units = cls.find_stock(target, quantity)
            return AllocationResult(units=units, shortfall=quantity - len(units))

        if quantity != 1:
            raise TailorError('INVALID_QUANTITY', requested=quantity, order=order.code)

        with transaction.atomic():
            order = Order.objects.select_for_update().get(pk=order.pk)
            if order.status != OrderStatus.CREATED or order.is_waitlisted:
                raise TailorError('ORDER_ALREADY_PROCESSED', order=order.code)

            lost = []
            for attempt in range(tailorman_settings.ALLOCATION_MAX_ATTEMPTS):
                candidates = cls.find_stock(target, 1, exclude=lost)
                if not candidates:
                    from tailorman.services.production import ProductionRequests
                    request = ProductionRequests.waitlist_for_shortfall(order)
                    return AllocationResult(shortfall=1, production_request=request)

                unit = candidates[0]
                if cls._bind(unit, order):
                    unit.refresh_from_db()
                    return AllocationResult(units=[unit])

                lost.append(unit.pk)
                logger.warning(
                    "tailorman.allocation.conflict",
                    extra={"order": order.code, "unit": unit.code, "attempt": attempt + 1},
                )

            raise TailorError(
                'ALLOCATION_CONFLICT',
                order=order.code,
                attempts=tailorman_settings.ALLOCATION_MAX_ATTEMPTS,
            )

    @classmethod
    def _bind(cls, unit: Unit, order: Order) -> bool:
        """Conditionally bind ``unit`` to ``order``. Returns False if the unit was taken."""
        updated = Unit.objects.filter(
            pk=unit.pk,
            commitment=Commitment.UNCOMMITTED,
            stage=Stage.STOCK,
            order__isnull=True,
        ).update(
            order=order,
            commitment=Commitment.ASSIGNED,
            updated_at=timezone.now(),
        )
        if not updated:
            return False

        order.status = OrderStatus.ASSIGNED
        order.stage = Stage.STOCK
        order.save(update_fields=['status', 'stage', 'updated_at'])

        logger.info(
            "tailorman.allocation.bound",
            extra={"order": order.code, "unit": unit.code, "sku": str(unit.sku)},
        )
        return True
