"""
Unit model — One physical garment.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import Commitment, Stage, Wash
from tailorman.models.sequence import CodeSequence
from tailorman.sku import Sku


class UnitQuerySet(models.QuerySet):
    """QuerySet with helper filters for Unit queries."""

    def available(self):
        """Anonymous stock that can be bound to an order."""
        return self.filter(
            commitment=Commitment.UNCOMMITTED,
            stage=Stage.STOCK,
            order__isnull=True,
        )

    def for_sku(self, sku: Sku):
        return self.filter(**sku.as_fields())

    def in_bin(self, bin):
        return self.filter(bin=bin)

    def fifo(self):
        return self.order_by('created_at', 'pk')


class Unit(models.Model):
    """
    One physical garment instance.

    Two independent status axes:
    - commitment: UNCOMMITTED → COMMITTED → ASSIGNED
      (stock units jump UNCOMMITTED → ASSIGNED when picked for an order)
    - stage: PRODUCTION → … → FULFILLED, or DEFECT

    Status only changes through tailorman.services (scans and allocation);
    every change is recorded as a ScanEvent.
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        blank=True,
        verbose_name=_('Code'),
        help_text=_('QR payload printed on the unit label'),
    )

    # Concrete SKU
    style = models.CharField(max_length=20, verbose_name=_('Style'))
    waist = models.PositiveSmallIntegerField(verbose_name=_('Waist'))
    shape = models.CharField(max_length=20, verbose_name=_('Shape'))
    length = models.PositiveSmallIntegerField(verbose_name=_('Length'))
    wash = models.CharField(max_length=3, choices=Wash.choices, verbose_name=_('Wash'))

    commitment = models.CharField(
        max_length=20,
        choices=Commitment.choices,
        default=Commitment.UNCOMMITTED,
        db_index=True,
        verbose_name=_('Commitment'),
    )
    stage = models.CharField(
        max_length=20,
        choices=Stage.choices,
        default=Stage.PRODUCTION,
        db_index=True,
        verbose_name=_('Stage'),
    )
    location = models.CharField(
        max_length=100,
        blank=True,
        default='',
        verbose_name=_('Location'),
    )
    bin = models.ForeignKey(
        'tailorman.Bin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='units',
        verbose_name=_('Bin'),
    )

    batch = models.ForeignKey(
        'tailorman.Batch',
        on_delete=models.PROTECT,
        related_name='units',
        verbose_name=_('Batch'),
    )
    production_request = models.ForeignKey(
        'tailorman.ProductionRequest',
        on_delete=models.PROTECT,
        related_name='units',
        verbose_name=_('Production request'),
    )
    order = models.OneToOneField(
        'tailorman.Order',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='unit',
        verbose_name=_('Order'),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UnitQuerySet.as_manager()

    class Meta:
        verbose_name = _('Unit')
        verbose_name_plural = _('Units')
        ordering = ['created_at', 'pk']
        indexes = [
            models.Index(fields=['style', 'waist', 'shape', 'wash', 'length'], name='tailorman_u_style_3f8a1d_idx'),
            models.Index(fields=['commitment', 'stage'], name='tailorman_u_commitm_9c4e7b_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = CodeSequence.next_code('U', width=6)
        super().save(*args, **kwargs)

    @property
    def sku(self) -> Sku:
        return Sku.of(self)

    @property
    def snapshot(self) -> dict:
        """Status snapshot stored in ScanEvent metadata."""
        return {
            'stage': self.stage,
            'commitment': self.commitment,
            'location': self.location,
            'bin': self.bin.code if self.bin_id else None,
            'order': self.order.code if self.order_id else None,
        }

    def __str__(self) -> str:
        return f"{self.code} {self.sku} [{self.commitment}/{self.stage}]"
