"""
Tests for bin selection and occupancy.
"""

from io import StringIO

import pytest
from django.core.management import call_command

from tailorman import tailor, TailorError
from tailorman.models import Bin, BinStatus, BinType, Stage
from tailorman.services.bins import StorageBins, choose_bin


def make_bin(pk, capacity=10, count=0):
    return Bin(pk=pk, code=f'B{pk}', capacity=capacity, current_count=count)


class TestChooseBin:
    """Pure selection rules, no database."""

    def test_same_sku_with_space_wins(self):
        a, b = make_bin(1, count=3), make_bin(2)
        assert choose_bin([a, b], sku_bin_ids={1}) is a

    def test_same_sku_but_full_is_skipped(self):
        a, b = make_bin(1, count=10), make_bin(2)
        assert choose_bin([a, b], sku_bin_ids={1}) is b

    def test_empty_bin_before_fuller(self):
        a, b = make_bin(1, count=2), make_bin(2)
        assert choose_bin([a, b]) is b

    def test_most_free_space(self):
        a, b, c = make_bin(1, count=8), make_bin(2, count=3), make_bin(3, count=5)
        assert choose_bin([a, b, c]) is b

    def test_tie_keeps_creation_order(self):
        a, b = make_bin(1, count=4), make_bin(2, count=4)
        assert choose_bin([a, b]) is a

    def test_all_full(self):
        assert choose_bin([make_bin(1, count=10), make_bin(2, capacity=5, count=5)]) is None
        assert choose_bin([]) is None


@pytest.mark.django_db
class TestSelectStorageBin:

    def test_prefers_bin_holding_the_sku(self, make_unit, storage_bins):
        a, b = storage_bins
        make_unit('ST-32-X-32-STA', bin=b)
        Bin.objects.filter(pk=b.pk).update(current_count=1)
        unit = make_unit('ST-32-X-32-STA', stage=Stage.STORAGE_QUEUE)

        assert tailor.select_storage_bin(unit) == b

    def test_other_sku_does_not_attract(self, make_unit, storage_bins):
        a, b = storage_bins
        make_unit('ST-32-X-34-STA', bin=b)
        Bin.objects.filter(pk=b.pk).update(current_count=1)
        unit = make_unit('ST-32-X-32-STA', stage=Stage.STORAGE_QUEUE)

        assert tailor.select_storage_bin(unit) == a

    def test_selection_does_not_reserve(self, make_unit, storage_bins):
        a, _ = storage_bins
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        assert tailor.select_storage_bin(unit) == a
        assert tailor.select_storage_bin(unit) == a
        a.refresh_from_db()
        assert a.current_count == 0

    def test_skips_inactive_and_wash_bins(self, make_unit, storage_bins, wash_bin):
        a, b = storage_bins
        Bin.objects.filter(pk=a.pk).update(status=BinStatus.INACTIVE)
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        assert tailor.select_storage_bin(unit) == b

    def test_explicit_candidates(self, make_unit, storage_bins):
        a, b = storage_bins
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        assert tailor.select_storage_bin(unit, candidate_bins=[b]) == b

    def test_no_capacity(self, make_unit, storage_bins):
        Bin.objects.update(current_count=10)
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        with pytest.raises(TailorError) as exc:
            tailor.select_storage_bin(unit)
        assert exc.value.code == 'NO_CAPACITY'


@pytest.mark.django_db
class TestOccupancy:

    def test_occupy_and_release(self, storage_bins):
        a, _ = storage_bins

        StorageBins.occupy(a)
        StorageBins.occupy(a)
        assert a.current_count == 2

        StorageBins.release_bin(a)
        assert a.current_count == 1

    def test_occupy_full_bin(self, db):
        bin = Bin.objects.create(code='STORAGE-TINY', name='TINY', type=BinType.STORAGE, capacity=1)
        StorageBins.occupy(bin)

        with pytest.raises(TailorError) as exc:
            StorageBins.occupy(bin)

        assert exc.value.code == 'BIN_AT_CAPACITY'
        bin.refresh_from_db()
        assert bin.current_count == 1
        assert bin.is_full

    def test_release_never_goes_negative(self, storage_bins):
        a, _ = storage_bins
        StorageBins.release_bin(a)
        assert a.current_count == 0

    def test_get_bin_not_found(self, db):
        with pytest.raises(TailorError) as exc:
            StorageBins.get_bin('NOPE')
        assert exc.value.code == 'BIN_NOT_FOUND'


@pytest.mark.django_db
class TestSetupBinsCommand:

    def test_creates_defaults_once(self):
        out = StringIO()
        call_command('setup_bins', stdout=out)
        call_command('setup_bins', stdout=out)

        assert Bin.objects.storage().count() == 2
        assert set(Bin.objects.wash().values_list('wash', flat=True)) == {'IND', 'STA', 'ONX', 'JAG'}
        assert '0 bin(s) created, 6 already present' in out.getvalue()

    def test_dry_run(self):
        out = StringIO()
        call_command('setup_bins', '--dry-run', stdout=out)

        assert not Bin.objects.exists()
        assert '6 bin(s) would be created' in out.getvalue()
