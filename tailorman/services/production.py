"""
Production requests — grouping, waitlists, modification and acceptance.

All state-changing methods run under transaction.atomic() and lock the
request row with select_for_update() before touching its waitlist counter.
"""

import logging
from collections import defaultdict

from django.db import transaction
from django.utils import timezone

from tailorman.conf import tailorman_settings
from tailorman.exceptions import TailorError
from tailorman.models.batch import Batch
from tailorman.models.enums import (
    BatchStatus,
    Commitment,
    OrderStatus,
    ProductionRequestStatus,
    Stage,
)
from tailorman.models.order import Order
from tailorman.models.production import ProductionRequest, WaitlistEntry
from tailorman.models.sequence import CodeSequence
from tailorman.models.unit import Unit
from tailorman.results import AcceptResult
from tailorman.sku import Sku, can_satisfy, universal_wash_of, universalize

logger = logging.getLogger('tailorman')


def _check_unprocessed(order: Order) -> None:
    if order.status != OrderStatus.CREATED or order.is_waitlisted:
        raise TailorError('ORDER_ALREADY_PROCESSED', order=order.code)


class ProductionRequests:
    """Production request lifecycle methods."""

    @classmethod
    def get_request(cls, request_id, for_update: bool = False) -> ProductionRequest:
        """Fetch by code or primary key."""
        qs = ProductionRequest.objects.select_for_update() if for_update else ProductionRequest.objects
        lookup = {'pk': request_id} if isinstance(request_id, int) else {'code': request_id}
        try:
            return qs.get(**lookup)
        except ProductionRequest.DoesNotExist:
            raise TailorError('PRODUCTION_REQUEST_NOT_FOUND', production_request=str(request_id)) from None

    # ══════════════════════════════════════════════════════════════
    # GROUPING & MATCHING
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def group_orders(cls, orders) -> dict[str, list[Order]]:
        """
        Group orders by their universalized SKU.

        Returns:
            {"ST-32-X-36-RAW": [order, ...], ...} in first-seen order
        """
        length = tailorman_settings.UNIVERSAL_LENGTH
        groups = defaultdict(list)
        for order in orders:
            groups[universalize(order.target_sku, length).key].append(order)
        return dict(groups)

    @classmethod
    def find_matching_request(cls, target_sku: Sku) -> ProductionRequest | None:
        """
        PENDING request able to cover ``target_sku``.

        Exact SKU first; otherwise the oldest request with the same
        style/waist/shape, the universal wash and enough length.
        """
        pending = ProductionRequest.objects.pending().order_by('created_at', 'pk')

        exact = pending.for_sku(target_sku).first()
        if exact is not None:
            return exact

        universal = pending.filter(
            style=target_sku.style,
            waist=target_sku.waist,
            shape=target_sku.shape,
            wash=universal_wash_of(target_sku.wash),
        )
        for request in universal:
            if can_satisfy(target_sku, request.sku):
                return request
        return None

    # ══════════════════════════════════════════════════════════════
    # WAITLIST
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _append(cls, request: ProductionRequest, orders) -> list[WaitlistEntry]:
        """Append orders to a locked request's waitlist."""
        entries = []
        for order in orders:
            request.last_position += 1
            entries.append(WaitlistEntry.objects.create(
                order=order,
                production_request=request,
                position=request.last_position,
            ))
        request.save(update_fields=['last_position', 'quantity'])
        return entries

    @classmethod
    def create_or_extend_production_request(cls, universal_sku: Sku, orders) -> ProductionRequest:
        """
        Queue ``orders`` on the PENDING request for ``universal_sku``.

        Extends the oldest such request (quantity += len(orders)) or founds
        a new one with quantity = len(orders).

        Raises:
            TailorError('INVALID_QUANTITY'): No orders given
            TailorError('INVALID_SKU'): An order cannot be made from this SKU
            TailorError('ORDER_ALREADY_PROCESSED'): An order is bound or waitlisted
        """
        orders = list(orders)
        if not orders:
            raise TailorError('INVALID_QUANTITY', requested=0)

        for order in orders:
            _check_unprocessed(order)
            if not can_satisfy(order.target_sku, universal_sku):
                raise TailorError('INVALID_SKU', sku=str(universal_sku), order=order.code)

        with transaction.atomic():
            request = (
                ProductionRequest.objects.select_for_update()
                .pending()
                .for_sku(universal_sku)
                .order_by('created_at', 'pk')
                .first()
            )
            created = request is None
            if created:
                request = ProductionRequest.objects.create(quantity=0, **universal_sku.as_fields())

            request.quantity += len(orders)
            cls._append(request, orders)

        logger.info(
            "tailorman.production.created" if created else "tailorman.production.extended",
            extra={
                "production_request": request.code,
                "sku": str(universal_sku),
                "quantity": request.quantity,
                "orders": [o.code for o in orders],
            },
        )
        return request

    @classmethod
    def waitlist_for_shortfall(cls, order: Order) -> ProductionRequest:
        """
        Waitlist an order that stock could not satisfy.

        Joins a matching PENDING request when there is one (quantity + 1),
        else goes through create_or_extend_production_request.

        The match is re-checked under the row lock: a request accepted in
        between no longer takes waitlist entries.
        """
        target = order.target_sku
        _check_unprocessed(order)

        with transaction.atomic():
            match = cls.find_matching_request(target)
            request = None
            if match is not None:
                request = ProductionRequest.objects.select_for_update().get(pk=match.pk)
                if request.status != ProductionRequestStatus.PENDING:
                    logger.info(
                        "tailorman.production.match_lost",
                        extra={"production_request": request.code, "order": order.code},
                    )
                    request = None

            if request is None:
                universal = universalize(target, tailorman_settings.UNIVERSAL_LENGTH)
                return cls.create_or_extend_production_request(universal, [order])

            request.quantity += 1
            cls._append(request, [order])

        logger.info(
            "tailorman.production.waitlisted",
            extra={"production_request": request.code, "order": order.code},
        )
        return request

    # ══════════════════════════════════════════════════════════════
    # MODIFICATION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def modify_production_request(cls, request_id, quantity: int | None = None,
                                  length: int | None = None) -> ProductionRequest:
        """
        Grow a PENDING request.

        Quantity must increase. Length must increase and stay at or above the
        longest waitlisted order.

        Raises:
            TailorError('INVALID_STATUS'): Request is not PENDING
            TailorError('INVALID_MODIFICATION'): A bound is violated, named in data['bound']
        """
        with transaction.atomic():
            request = cls.get_request(request_id, for_update=True)

            if request.status != ProductionRequestStatus.PENDING:
                raise TailorError(
                    'INVALID_STATUS',
                    production_request=request.code,
                    status=request.status,
                )
            if quantity is None and length is None:
                raise TailorError('INVALID_MODIFICATION', production_request=request.code, bound='empty')

            if quantity is not None and quantity <= request.quantity:
                raise TailorError(
                    'INVALID_MODIFICATION',
                    production_request=request.code,
                    bound='quantity',
                    current=request.quantity,
                    requested=quantity,
                )

            if length is not None:
                if length <= request.length:
                    raise TailorError(
                        'INVALID_MODIFICATION',
                        production_request=request.code,
                        bound='length',
                        current=request.length,
                        requested=length,
                    )
                floor = request.waitlist_floor
                if length < floor:
                    raise TailorError(
                        'INVALID_MODIFICATION',
                        production_request=request.code,
                        bound='waitlist_length',
                        minimum=floor,
                        requested=length,
                    )

            fields = []
            if quantity is not None:
                request.quantity = quantity
                fields.append('quantity')
            if length is not None:
                request.length = length
                fields.append('length')
            request.save(update_fields=fields)

        logger.info(
            "tailorman.production.modified",
            extra={
                "production_request": request.code,
                "quantity": request.quantity,
                "length": request.length,
            },
        )
        return request

    # ══════════════════════════════════════════════════════════════
    # ACCEPTANCE & COMPLETION
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def accept_production_request(cls, request_id) -> AcceptResult:
        """
        Start manufacturing: PENDING -> IN_PROGRESS.

        Creates a batch and ``quantity`` units in PRODUCTION. The first
        waitlisted orders (by position) get a COMMITTED unit each and leave
        the waitlist. Waitlisted orders the request SKU can no longer satisfy
        are detached instead. Everything happens in one transaction.

        Raises:
            TailorError('PRODUCTION_REQUEST_NOT_FOUND')
            TailorError('INVALID_STATUS'): Request is not PENDING
            TailorError('INVALID_QUANTITY'): Request quantity is zero
        """
        with transaction.atomic():
            request = cls.get_request(request_id, for_update=True)
            if request.status != ProductionRequestStatus.PENDING:
                raise TailorError(
                    'INVALID_STATUS',
                    production_request=request.code,
                    status=request.status,
                )
            if request.quantity <= 0:
                raise TailorError('INVALID_QUANTITY', production_request=request.code, requested=request.quantity)

            sku = request.sku
            entries = list(request.waitlist.select_related('order').order_by('position'))

            keep, detached = [], []
            for entry in entries:
                if can_satisfy(entry.order.target_sku, sku):
                    keep.append(entry)
                else:
                    detached.append(entry)

            for entry in detached:
                order = entry.order
                entry.delete()
                order.status = OrderStatus.CREATED
                order.save(update_fields=['status', 'updated_at'])
                logger.warning(
                    "tailorman.production.waitlist_dropped",
                    extra={
                        "production_request": request.code,
                        "order": order.code,
                        "target": str(order.target_sku),
                        "sku": str(sku),
                    },
                )

            binding = keep[:request.quantity]
            batch = Batch.objects.create(production_request=request)
            codes = CodeSequence.next_codes('U', request.quantity, width=6)

            Unit.objects.bulk_create([
                Unit(
                    code=code,
                    batch=batch,
                    production_request=request,
                    stage=Stage.PRODUCTION,
                    commitment=Commitment.COMMITTED if i < len(binding) else Commitment.UNCOMMITTED,
                    order=binding[i].order if i < len(binding) else None,
                    **sku.as_fields(),
                )
                for i, code in enumerate(codes)
            ])

            for entry in binding:
                order = entry.order
                entry.delete()
                order.status = OrderStatus.COMMITTED
                order.stage = Stage.PRODUCTION
                order.save(update_fields=['status', 'stage', 'updated_at'])

            request.status = ProductionRequestStatus.IN_PROGRESS
            request.accepted_at = timezone.now()
            request.save(update_fields=['status', 'accepted_at'])

            units = list(Unit.objects.filter(batch=batch).order_by('code'))

        logger.info(
            "tailorman.production.accepted",
            extra={
                "production_request": request.code,
                "batch": batch.code,
                "units": len(units),
                "committed": len(binding),
                "detached": len(detached),
            },
        )
        return AcceptResult(
            batch=batch,
            units=units,
            committed=[u for u in units if u.commitment == Commitment.COMMITTED],
            detached_orders=[e.order for e in detached],
        )

    @classmethod
    def complete_if_done(cls, request: ProductionRequest) -> bool:
        """Close an IN_PROGRESS request and its batch once no unit is left in PRODUCTION."""
        request = ProductionRequest.objects.select_for_update().get(pk=request.pk)
        if request.status != ProductionRequestStatus.IN_PROGRESS:
            return False
        if request.units.filter(stage=Stage.PRODUCTION).exists():
            return False

        now = timezone.now()
        request.status = ProductionRequestStatus.COMPLETED
        request.completed_at = now
        request.save(update_fields=['status', 'completed_at'])
        Batch.objects.filter(production_request=request).update(
            status=BatchStatus.COMPLETED,
            completed_at=now,
        )

        logger.info("tailorman.production.completed", extra={"production_request": request.code})
        return True
