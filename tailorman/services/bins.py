"""
Storage bins — selection heuristic and occupancy tracking.

Selection never reserves. Occupancy only changes through conditional
F() updates so the count can never pass capacity under concurrency.
"""

import logging

from django.db.models import F

from tailorman.exceptions import TailorError
from tailorman.models.bin import Bin
from tailorman.models.unit import Unit
from tailorman.sku import Sku

logger = logging.getLogger('tailorman')


def choose_bin(candidates, sku_bin_ids=()):
    """
    Pick a bin from ``candidates`` (ordered by creation).

    Rules, in order:
    1. A bin already holding the same SKU, with space
    2. An empty bin
    3. The bin with the most free space (first one on ties)

    Returns None when every candidate is full.
    """
    candidates = list(candidates)
    sku_bin_ids = set(sku_bin_ids)

    for bin in candidates:
        if bin.pk in sku_bin_ids and bin.current_count < bin.capacity:
            return bin

    for bin in candidates:
        if bin.current_count == 0 and bin.capacity > 0:
            return bin

    with_space = [b for b in candidates if b.free_space > 0]
    if not with_space:
        return None
    # max() keeps the first maximal element, i.e. creation order on ties
    return max(with_space, key=lambda b: b.free_space)


class StorageBins:
    """Bin lookup, selection and occupancy."""

    @classmethod
    def get_bin(cls, bin_code: str, for_update: bool = False) -> Bin:
        qs = Bin.objects.select_for_update() if for_update else Bin.objects
        try:
            return qs.get(code=bin_code)
        except Bin.DoesNotExist:
            raise TailorError('BIN_NOT_FOUND', bin=bin_code) from None

    @classmethod
    def select_storage_bin(cls, unit: Unit, candidate_bins=None) -> Bin:
        """
        Choose the storage bin a unit should be placed in.

        Args:
            unit: Unit (or anything exposing the five SKU fields)
            candidate_bins: Bins to choose from (default: active storage bins)

        Raises:
            TailorError('NO_CAPACITY'): If every candidate is full
        """
        if candidate_bins is None:
            candidate_bins = Bin.objects.active().storage().order_by('created_at', 'pk')
        candidates = list(candidate_bins)

        sku = Sku.of(unit)
        holders = Unit.objects.for_sku(sku).filter(bin__in=[b.pk for b in candidates])
        if getattr(unit, 'pk', None):
            holders = holders.exclude(pk=unit.pk)
        sku_bin_ids = holders.values_list('bin_id', flat=True).distinct()

        chosen = choose_bin(candidates, sku_bin_ids)
        if chosen is None:
            raise TailorError('NO_CAPACITY', sku=str(sku))

        logger.info(
            "tailorman.bin.selected",
            extra={"sku": str(sku), "bin": chosen.code, "count": chosen.current_count},
        )
        return chosen

    @classmethod
    def occupy(cls, bin: Bin) -> None:
        """
        Take one slot in ``bin``.

        The increment only applies while count < capacity, checked by the
        database at commit time of the UPDATE.

        Raises:
            TailorError('BIN_AT_CAPACITY'): If the bin filled up meanwhile
        """
        updated = Bin.objects.filter(
            pk=bin.pk,
            current_count__lt=F('capacity'),
        ).update(current_count=F('current_count') + 1)
        if not updated:
            raise TailorError('BIN_AT_CAPACITY', bin=bin.code, capacity=bin.capacity)
        bin.refresh_from_db(fields=['current_count'])

    @classmethod
    def release_bin(cls, bin: Bin) -> None:
        """Free one slot (no-op when the bin is already empty)."""
        Bin.objects.filter(
            pk=bin.pk,
            current_count__gt=0,
        ).update(current_count=F('current_count') - 1)
        bin.refresh_from_db(fields=['current_count'])

    @classmethod
    def empty_bin(cls, bin: Bin) -> None:
        Bin.objects.filter(pk=bin.pk).update(current_count=0)
        bin.refresh_from_db(fields=['current_count'])
