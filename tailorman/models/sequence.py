"""
Code sequence for atomic code generation.

Orders, production requests, batches and units get human-readable codes
(``ORD-2026-00001``) from a per-prefix counter locked with SELECT FOR UPDATE.
"""

from django.db import models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class CodeSequence(models.Model):
    """
    Atomic counter for generating sequential codes.

    One row per prefix, e.g. "ORD-2026" -> last_value = 42.
    """

    prefix = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_('Prefix'),
    )
    last_value = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Last value'),
    )

    class Meta:
        db_table = 'tailorman_code_sequence'
        verbose_name = _('Code sequence')
        verbose_name_plural = _('Code sequences')

    def __str__(self) -> str:
        return f"{self.prefix} -> {self.last_value}"

    @classmethod
    def next_range(cls, prefix: str, count: int = 1) -> range:
        """Atomically reserve ``count`` consecutive values for a prefix."""
        with transaction.atomic():
            seq, _ = cls.objects.select_for_update().get_or_create(
                prefix=prefix, defaults={'last_value': 0}
            )
            start = seq.last_value + 1
            seq.last_value += count
            seq.save(update_fields=['last_value'])
            return range(start, seq.last_value + 1)

    @classmethod
    def next_value(cls, prefix: str) -> int:
        return cls.next_range(prefix, 1)[0]

    @classmethod
    def next_codes(cls, kind: str, count: int = 1, width: int = 5) -> list[str]:
        """Codes in the form KIND-YYYY-NNNNN."""
        prefix = f"{kind}-{timezone.now().year}"
        return [f"{prefix}-{n:0{width}d}" for n in cls.next_range(prefix, count)]

    @classmethod
    def next_code(cls, kind: str, width: int = 5) -> str:
        return cls.next_codes(kind, 1, width)[0]
