"""
Customer and Order models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import OrderStatus, Stage, Wash
from tailorman.models.sequence import CodeSequence
from tailorman.sku import Sku


class Customer(models.Model):
    """
    Who ordered.

    Identity is immutable once created; only contact fields may change.
    """

    CONTACT_FIELDS = ('email', 'phone', 'address')

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    email = models.EmailField(blank=True, default='', verbose_name=_('E-mail'))
    phone = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Phone'))
    address = models.TextField(blank=True, default='', verbose_name=_('Address'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Customer')
        verbose_name_plural = _('Customers')
        ordering = ['name']

    def save(self, *args, **kwargs):
        """Reject identity changes on existing customers."""
        if self.pk:
            stored = Customer.objects.filter(pk=self.pk).values_list('name', flat=True).first()
            if stored is not None and stored != self.name:
                raise ValueError(
                    "Customer identity is immutable. "
                    "Only contact fields (email, phone, address) can change."
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name


class Order(models.Model):
    """
    One garment built to a target SKU plus finishing attributes.

    LIFECYCLE:

        CREATED ──► (waitlisted on a ProductionRequest) ──► COMMITTED ──► ASSIGNED
           │                                                                ▲
           └──────────────── bound to a stock unit ─────────────────────────┘

    ``stage`` mirrors the bound unit's stage once a unit exists.
    An order is either waitlisted or has a unit, never both.
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_('Code'),
    )
    customer = models.ForeignKey(
        'tailorman.Customer',
        on_delete=models.PROTECT,
        related_name='orders',
        verbose_name=_('Customer'),
    )

    # Target SKU
    target_style = models.CharField(max_length=20, verbose_name=_('Style'))
    target_waist = models.PositiveSmallIntegerField(verbose_name=_('Waist'))
    target_shape = models.CharField(max_length=20, verbose_name=_('Shape'))
    target_length = models.PositiveSmallIntegerField(verbose_name=_('Length'))
    target_wash = models.CharField(max_length=3, choices=Wash.choices, verbose_name=_('Wash'))

    # Finishing
    hem_type = models.CharField(max_length=20, verbose_name=_('Hem type'))
    button_color = models.CharField(max_length=20, verbose_name=_('Button color'))

    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.CREATED,
        db_index=True,
        verbose_name=_('Status'),
    )
    stage = models.CharField(
        max_length=20,
        choices=Stage.choices,
        blank=True,
        default='',
        verbose_name=_('Stage'),
        help_text=_('Mirrors the bound unit'),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Order')
        verbose_name_plural = _('Orders')
        ordering = ['created_at', 'pk']

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = CodeSequence.next_code('ORD')
        super().save(*args, **kwargs)

    @property
    def target_sku(self) -> Sku:
        return Sku.of(self, prefix='target_')

    @property
    def is_waitlisted(self) -> bool:
        # Import here to avoid circular import
        from tailorman.models.production import WaitlistEntry
        return WaitlistEntry.objects.filter(order_id=self.pk).exists()

    @property
    def bound_unit(self):
        """The unit bound to this order, or None."""
        from tailorman.models.unit import Unit
        return Unit.objects.filter(order_id=self.pk).first()

    def __str__(self) -> str:
        return f"{self.code} {self.target_sku}"
