"""
ScanEvent model — Immutable audit trail of scans.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import ScanType


class ScanEventQuerySet(models.QuerySet):

    def successful(self):
        return self.filter(success=True)

    def of_type(self, scan_type):
        return self.filter(type=scan_type)

    def latest_first(self):
        return self.order_by('-timestamp', '-pk')


class ScanEvent(models.Model):
    """
    Immutable record of one scan attempt.

    Rules:
    - NEVER update() or delete()
    - Failed attempts are recorded too (success=False, error_code set)
    - metadata holds 'before' and 'after' status snapshots

    This is the ONLY audit trail of stage changes.
    """

    unit = models.ForeignKey(
        'tailorman.Unit',
        on_delete=models.PROTECT,
        related_name='scan_events',
        verbose_name=_('Unit'),
    )
    type = models.CharField(
        max_length=30,
        choices=ScanType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )
    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    location = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Location'))
    success = models.BooleanField(verbose_name=_('Success'))
    error_code = models.CharField(max_length=50, blank=True, default='', verbose_name=_('Error code'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name=_('Operator'),
    )

    objects = ScanEventQuerySet.as_manager()

    class Meta:
        verbose_name = _('Scan event')
        verbose_name_plural = _('Scan events')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['unit', 'timestamp'], name='tailorman_s_unit_id_5d2a90_idx'),
        ]

    def save(self, *args, **kwargs):
        """Append only."""
        if self.pk:
            raise ValueError(
                "Scan events are immutable. "
                "Record a new scan instead of changing an existing one."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — scan events are immutable."""
        raise ValueError("Scan events are immutable and cannot be deleted.")

    def __str__(self) -> str:
        mark = 'ok' if self.success else f"failed:{self.error_code}"
        return f"{self.type} {self.unit_id} [{mark}]"
