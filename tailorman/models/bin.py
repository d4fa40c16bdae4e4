"""
Bin model — Where units rest between stages.
"""

from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import BinStatus, BinType, Wash


class BinQuerySet(models.QuerySet):

    def active(self):
        return self.filter(status=BinStatus.ACTIVE)

    def storage(self):
        return self.filter(type=BinType.STORAGE)

    def wash(self):
        return self.filter(type=BinType.WASH)

    def with_space(self):
        return self.filter(current_count__lt=F('capacity'))


class Bin(models.Model):
    """
    Physical storage or wash location.

    Bins are stable entities, created during system setup (see ``setup_bins``).
    ``current_count`` is only changed through conditional F() updates
    in tailorman.services.bins, never by assigning the attribute.

    Examples:
        Bin.objects.create(code='STORAGE-Z1A', name='ZONE1-A', type=BinType.STORAGE, zone='ZONE1', capacity=10)
        Bin.objects.create(code='WASH-STA-001', name='STARDUST', type=BinType.WASH, wash=Wash.STA, capacity=50)
    """

    code = models.CharField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('QR payload printed on the bin'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    type = models.CharField(
        max_length=20,
        choices=BinType.choices,
        default=BinType.STORAGE,
        db_index=True,
        verbose_name=_('Type'),
    )
    status = models.CharField(
        max_length=20,
        choices=BinStatus.choices,
        default=BinStatus.ACTIVE,
        verbose_name=_('Status'),
    )
    zone = models.CharField(
        max_length=50,
        blank=True,
        default='',
        verbose_name=_('Zone'),
    )
    wash = models.CharField(
        max_length=3,
        choices=Wash.choices,
        blank=True,
        default='',
        verbose_name=_('Wash'),
        help_text=_('Wash bins only: the wash this bin is loaded for'),
    )
    capacity = models.PositiveIntegerField(verbose_name=_('Capacity'))
    current_count = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Current count'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BinQuerySet.as_manager()

    class Meta:
        verbose_name = _('Bin')
        verbose_name_plural = _('Bins')
        ordering = ['created_at', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=Q(current_count__lte=F('capacity')),
                name='bin_count_within_capacity',
            ),
        ]

    @property
    def free_space(self) -> int:
        return self.capacity - self.current_count

    @property
    def is_full(self) -> bool:
        return self.current_count >= self.capacity

    def __str__(self) -> str:
        return f"{self.name} [{self.current_count}/{self.capacity}]"
