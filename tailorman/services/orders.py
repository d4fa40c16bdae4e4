"""
Order intake — customers, orders and batch queueing.
"""

import logging

from django.db import transaction

from tailorman.conf import tailorman_settings
from tailorman.exceptions import TailorError
from tailorman.models.enums import OrderStatus
from tailorman.models.order import Customer, Order
from tailorman.results import AllocationResult, QueueResult
from tailorman.services.allocation import StockAllocation
from tailorman.services.production import ProductionRequests
from tailorman.sku import TARGET_WASHES, Sku, universalize

logger = logging.getLogger('tailorman')


class OrderIntake:
    """Customer and order entry points."""

    @classmethod
    def create_customer(cls, name: str, email: str = '', phone: str = '', address: str = '') -> Customer:
        customer = Customer.objects.create(name=name, email=email, phone=phone, address=address)
        logger.info("tailorman.customer.created", extra={"customer": customer.pk})
        return customer

    @classmethod
    def update_customer_contact(cls, customer: Customer, **contact) -> Customer:
        """Change contact fields only. Anything else is rejected."""
        unknown = set(contact) - set(Customer.CONTACT_FIELDS)
        if unknown:
            raise ValueError(f"Only contact fields can change, got: {', '.join(sorted(unknown))}")
        for field, value in contact.items():
            setattr(customer, field, value)
        customer.save(update_fields=[*contact, 'updated_at'])
        return customer

    @classmethod
    def create_order(cls, customer: Customer, target_sku, hem_type: str | None = None,
                     button_color: str | None = None) -> Order:
        """
        Create an order for one garment.

        Raises:
            TailorError('INVALID_SKU'): Malformed SKU
            TailorError('INVALID_WASH_CODE'): Universal or unknown target wash
        """
        target = target_sku if isinstance(target_sku, Sku) else Sku.parse(str(target_sku))
        if target.wash not in TARGET_WASHES:
            raise TailorError('INVALID_WASH_CODE', wash=target.wash)

        order = Order.objects.create(
            customer=customer,
            hem_type=hem_type or tailorman_settings.DEFAULT_HEM_TYPE,
            button_color=button_color or tailorman_settings.DEFAULT_BUTTON_COLOR,
            **target.as_fields(prefix='target_'),
        )
        logger.info(
            "tailorman.order.created",
            extra={"order": order.code, "customer": customer.pk, "target": str(target)},
        )
        return order

    @classmethod
    def get_order(cls, order_id) -> Order:
        lookup = {'pk': order_id} if isinstance(order_id, int) else {'code': order_id}
        try:
            return Order.objects.get(**lookup)
        except Order.DoesNotExist:
            raise TailorError('ORDER_NOT_FOUND', order=str(order_id)) from None

    @classmethod
    def process_order(cls, order_id) -> AllocationResult:
        """Bind an order to stock, or waitlist it on a production request."""
        order = order_id if isinstance(order_id, Order) else cls.get_order(order_id)
        return StockAllocation.allocate(order.target_sku, 1, order=order)

    @classmethod
    def unprocessed_orders(cls):
        """CREATED orders neither bound to a unit nor waitlisted."""
        return (
            Order.objects
            .filter(status=OrderStatus.CREATED, waitlist_entry__isnull=True, unit__isnull=True)
            .order_by('created_at', 'pk')
        )

    @classmethod
    def queue_pending_orders(cls, use_stock: bool = True) -> QueueResult:
        """
        Process every unprocessed order in one pass.

        With use_stock, each order first tries stock. Whatever is left is
        grouped by universal SKU, one production request per group.
        """
        result = QueueResult()
        remaining = []

        with transaction.atomic():
            for order in cls.unprocessed_orders():
                if use_stock and StockAllocation.find_stock(order.target_sku, 1):
                    allocation = StockAllocation.allocate(order.target_sku, 1, order=order)
                    if allocation.units:
                        result.allocated.append(order)
                        continue
                    result.waitlisted.append(order)
                    if allocation.production_request not in result.production_requests:
                        result.production_requests.append(allocation.production_request)
                    continue
                remaining.append(order)

            length = tailorman_settings.UNIVERSAL_LENGTH
            for orders in ProductionRequests.group_orders(remaining).values():
                universal = universalize(orders[0].target_sku, length)
                request = ProductionRequests.create_or_extend_production_request(universal, orders)
                result.waitlisted.extend(orders)
                if request not in result.production_requests:
                    result.production_requests.append(request)

        logger.info(
            "tailorman.orders.queued",
            extra={
                "allocated": len(result.allocated),
                "waitlisted": len(result.waitlisted),
                "production_requests": [r.code for r in result.production_requests],
            },
        )
        return result
