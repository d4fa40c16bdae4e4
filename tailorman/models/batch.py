"""
Batch model — production run traceability.

One Batch per accepted ProductionRequest. Every unit created on acceptance
references it, so a run can be traced end to end:

    batch = request.batch
    batch.units.filter(stage=Stage.DEFECT)   # defects of this run
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from tailorman.models.enums import BatchStatus, Stage
from tailorman.models.sequence import CodeSequence


class BatchQuerySet(models.QuerySet):
    """Custom QuerySet for Batch with convenience filters."""

    def in_progress(self):
        return self.filter(status=BatchStatus.IN_PROGRESS)

    def for_request(self, production_request):
        return self.filter(production_request=production_request)


class Batch(models.Model):
    """
    Production run of an accepted request.

    Completed once no unit of the run remains in PRODUCTION.
    """

    code = models.CharField(
        max_length=50,
        unique=True,
        blank=True,
        verbose_name=_('Batch code'),
    )
    production_request = models.OneToOneField(
        'tailorman.ProductionRequest',
        on_delete=models.PROTECT,
        related_name='batch',
        verbose_name=_('Production request'),
    )
    status = models.CharField(
        max_length=20,
        choices=BatchStatus.choices,
        default=BatchStatus.IN_PROGRESS,
        verbose_name=_('Status'),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created at'))
    completed_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Completed at'))

    objects = BatchQuerySet.as_manager()

    class Meta:
        verbose_name = _('Batch')
        verbose_name_plural = _('Batches')
        ordering = ['created_at']

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = CodeSequence.next_code('BATCH')
        super().save(*args, **kwargs)

    @property
    def in_production(self) -> int:
        """Units of this run not yet activated."""
        return self.units.filter(stage=Stage.PRODUCTION).count()

    def __str__(self) -> str:
        return f"Batch {self.code} ({self.status})"
