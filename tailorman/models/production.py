"""
ProductionRequest and WaitlistEntry models.
"""

from django.db import models
from django.db.models import Max
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import ProductionRequestStatus, Wash
from tailorman.models.sequence import CodeSequence
from tailorman.sku import Sku


class ProductionRequestQuerySet(models.QuerySet):

    def pending(self):
        return self.filter(status=ProductionRequestStatus.PENDING)

    def for_sku(self, sku: Sku):
        return self.filter(**sku.as_fields())


class ProductionRequest(models.Model):
    """
    Request to manufacture ``quantity`` units of one (usually universal) SKU.

    Status: PENDING → IN_PROGRESS → COMPLETED

    While PENDING:
    - quantity only grows
    - length only grows, never below the longest waitlisted order
    - orders queue on the waitlist with positions from ``last_position``
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_('Code'),
    )

    style = models.CharField(max_length=20, verbose_name=_('Style'))
    waist = models.PositiveSmallIntegerField(verbose_name=_('Waist'))
    shape = models.CharField(max_length=20, verbose_name=_('Shape'))
    length = models.PositiveSmallIntegerField(verbose_name=_('Length'))
    wash = models.CharField(max_length=3, choices=Wash.choices, verbose_name=_('Wash'))

    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    status = models.CharField(
        max_length=20,
        choices=ProductionRequestStatus.choices,
        default=ProductionRequestStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )

    # Waitlist position counter (incremented under row lock)
    last_position = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Last waitlist position'),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    accepted_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Accepted at'))
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Completed at'))

    objects = ProductionRequestQuerySet.as_manager()

    class Meta:
        verbose_name = _('Production request')
        verbose_name_plural = _('Production requests')
        ordering = ['created_at', 'pk']
        indexes = [
            models.Index(fields=['style', 'waist', 'shape', 'wash', 'status'], name='tailorman_p_style_6b1c2e_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = CodeSequence.next_code('PR')
        super().save(*args, **kwargs)

    @property
    def sku(self) -> Sku:
        return Sku.of(self)

    @property
    def waitlist_floor(self) -> int:
        """Longest target length among waitlisted orders (0 when empty)."""
        return self.waitlist.aggregate(m=Max('order__target_length'))['m'] or 0

    def __str__(self) -> str:
        return f"{self.code} {self.sku} x{self.quantity} ({self.status})"


class WaitlistEntry(models.Model):
    """
    Order queued against a production request.

    ``position`` defines FIFO consumption on acceptance.
    Deleted as soon as the order is bound to a concrete unit.
    """

    order = models.OneToOneField(
        'tailorman.Order',
        on_delete=models.CASCADE,
        related_name='waitlist_entry',
        verbose_name=_('Order'),
    )
    production_request = models.ForeignKey(
        'tailorman.ProductionRequest',
        on_delete=models.CASCADE,
        related_name='waitlist',
        verbose_name=_('Production request'),
    )
    position = models.PositiveIntegerField(verbose_name=_('Position'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Waitlist entry')
        verbose_name_plural = _('Waitlist entries')
        ordering = ['production_request', 'position']
        constraints = [
            models.UniqueConstraint(
                fields=['production_request', 'position'],
                name='unique_waitlist_position',
            ),
        ]

    def __str__(self) -> str:
        return f"#{self.position} {self.order.code} -> {self.production_request.code}"
