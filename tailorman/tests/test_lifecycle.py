"""
Tests for scan-driven unit lifecycle (tailor.apply_scan).
"""

import pytest

from tailorman import tailor, TailorError
from tailorman.models import (
    Bin,
    Commitment,
    OrderStatus,
    ScanEvent,
    ScanType,
    Stage,
    WaitlistEntry,
)
from tailorman.sku import Sku


pytestmark = pytest.mark.django_db


def fill(bin, count):
    Bin.objects.filter(pk=bin.pk).update(current_count=count)
    bin.refresh_from_db()


@pytest.fixture
def committed(make_order):
    """Unit in PRODUCTION, committed to an ST-32-X-32-STA order."""
    order = make_order('ST-32-X-32-STA')
    result = tailor.allocate(order.target_sku, order=order)
    accepted = tailor.accept_production_request(result.production_request.code)
    unit = accepted.committed[0]
    return unit, order


@pytest.fixture
def washing(committed, wash_bin):
    """Committed unit loaded into the Stardust wash bin."""
    unit, order = committed
    tailor.apply_scan(unit.code, ScanType.ACTIVATION)
    tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=wash_bin.code)
    return unit, order


class TestActivation:

    def test_committed_goes_to_wash_queue(self, committed):
        unit, order = committed

        result = tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        order.refresh_from_db()
        assert result.stage == Stage.WASH_QUEUE
        assert result.commitment == Commitment.ASSIGNED
        assert result.next_action == 'move_to_wash'
        assert result.unit.location == 'WASH_STAGING'
        assert order.status == OrderStatus.ASSIGNED
        assert order.stage == Stage.WASH_QUEUE

    def test_uncommitted_goes_to_storage_queue(self, make_unit):
        unit = make_unit(stage=Stage.PRODUCTION)

        result = tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        assert result.stage == Stage.STORAGE_QUEUE
        assert result.commitment == Commitment.UNCOMMITTED
        assert result.next_action == 'move_to_storage'
        assert result.unit.location == 'STORAGE_STAGING'

    def test_committed_without_order_takes_waitlist_head(self, make_unit, make_order, stock_run):
        unit = make_unit('ST-32-X-36-RAW', stage=Stage.PRODUCTION, commitment=Commitment.COMMITTED)
        request = stock_run.production_request
        too_long = make_order('ST-32-X-38-IND')
        first = make_order('ST-32-X-34-STA')
        second = make_order('ST-32-X-30-IND')
        WaitlistEntry.objects.create(order=too_long, production_request=request, position=1)
        WaitlistEntry.objects.create(order=first, production_request=request, position=2)
        WaitlistEntry.objects.create(order=second, production_request=request, position=3)

        result = tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        assert result.unit.order_id == first.pk
        assert result.stage == Stage.WASH_QUEUE
        assert list(request.waitlist.values_list('order_id', flat=True)) == [too_long.pk, second.pk]

    def test_committed_with_nothing_to_bind_becomes_stock(self, make_unit):
        unit = make_unit('ST-32-X-36-RAW', stage=Stage.PRODUCTION, commitment=Commitment.COMMITTED)

        result = tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        assert result.commitment == Commitment.UNCOMMITTED
        assert result.stage == Stage.STORAGE_QUEUE

    def test_activation_after_production_is_wrong_stage(self, make_unit):
        unit = make_unit(stage=Stage.STOCK)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        assert exc.value.code == 'INVALID_STAGE_FOR_SCAN_TYPE'
        assert exc.value.data['expected'] == ScanType.MOVEMENT

    def test_already_activated(self, make_unit):
        unit = make_unit(stage=Stage.PRODUCTION)
        ScanEvent.objects.create(unit=unit, type=ScanType.ACTIVATION, success=True)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        assert exc.value.code == 'ALREADY_ACTIVATED'
        unit.refresh_from_db()
        assert unit.stage == Stage.PRODUCTION
        assert unit.scan_events.get(success=False).error_code == 'ALREADY_ACTIVATED'


class TestRejectedScans:

    @pytest.mark.parametrize('stage,scan_type,expected', [
        (Stage.PRODUCTION, ScanType.COMPLETION, ScanType.ACTIVATION),
        (Stage.PRODUCTION, ScanType.MOVEMENT, ScanType.ACTIVATION),
        (Stage.STORAGE_QUEUE, ScanType.COMPLETION, ScanType.MOVEMENT),
        (Stage.WASHING, ScanType.MOVEMENT, ScanType.SCAN_OUT),
        (Stage.LAUNDRY, ScanType.COMPLETION, ScanType.REACTIVATE_FROM_LAUNDRY),
        (Stage.QC, ScanType.REACTIVATE_FROM_LAUNDRY, ScanType.COMPLETION),
        (Stage.QC, ScanType.SCAN_OUT, ScanType.COMPLETION),
        (Stage.QC, ScanType.ACTIVATION, ScanType.COMPLETION),
        (Stage.LAUNDRY, ScanType.ACTIVATION, ScanType.REACTIVATE_FROM_LAUNDRY),
    ])
    def test_wrong_scan_for_stage(self, make_unit, stage, scan_type, expected):
        unit = make_unit(stage=stage)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, scan_type)

        assert exc.value.code == 'INVALID_STAGE_FOR_SCAN_TYPE'
        assert exc.value.data['expected'] == expected
        unit.refresh_from_db()
        assert unit.stage == stage

    def test_failed_scan_is_recorded(self, make_unit, user):
        unit = make_unit(stage=Stage.QC)

        with pytest.raises(TailorError):
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, location='QC_AREA', user=user)

        event = unit.scan_events.get()
        assert event.success is False
        assert event.error_code == 'INVALID_STAGE_FOR_SCAN_TYPE'
        assert event.user == user
        assert event.location == 'QC_AREA'
        assert event.metadata['before'] == event.metadata['after']

    def test_unknown_scan_type_is_recorded(self, make_unit):
        unit = make_unit(stage=Stage.QC)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, 'TELEPORT')

        assert exc.value.code == 'INVALID_STAGE_FOR_SCAN_TYPE'
        assert exc.value.data['expected'] == ScanType.COMPLETION
        event = ScanEvent.objects.get()
        assert event.unit == unit
        assert event.type == ScanType.UNKNOWN
        assert event.success is False
        assert event.error_code == 'INVALID_STAGE_FOR_SCAN_TYPE'
        assert event.metadata['raw_scan_type'] == 'TELEPORT'
        unit.refresh_from_db()
        assert unit.stage == Stage.QC

    def test_unit_not_found(self, db):
        with pytest.raises(TailorError) as exc:
            tailor.apply_scan('U-0000-000000', ScanType.ACTIVATION)
        assert exc.value.code == 'UNIT_NOT_FOUND'

    @pytest.mark.parametrize('stage', [Stage.FULFILLED, Stage.DEFECT])
    def test_no_defect_after_terminal(self, make_unit, stage):
        unit = make_unit(stage=stage)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.DEFECT)
        assert exc.value.code == 'INVALID_STAGE_FOR_SCAN_TYPE'


class TestStorageMovement:
    """Two-step placement into storage bins."""

    def test_select_then_confirm(self, make_unit, storage_bins):
        a, b = storage_bins
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        first = tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        assert first.stage == Stage.STORAGE_QUEUE
        assert first.next_action == 'await_destination'
        assert first.bin == a
        assert first.scan_event.metadata['requires_destination_scan'] is True
        assert first.scan_event.metadata['selected_bin'] == a.code
        a.refresh_from_db()
        assert a.current_count == 0

        second = tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=a.code)

        a.refresh_from_db()
        assert second.stage == Stage.STOCK
        assert second.unit.bin == a
        assert second.unit.location == a.code
        assert a.current_count == 1

    def test_affinity_beats_empty_bin(self, make_unit, storage_bins):
        a, b = storage_bins
        a.created_at, b.created_at = b.created_at, a.created_at
        Bin.objects.filter(pk=a.pk).update(created_at=a.created_at)
        Bin.objects.filter(pk=b.pk).update(created_at=b.created_at)
        for _ in range(3):
            make_unit('ST-32-X-32-STA', bin=a)
        fill(a, 3)
        unit = make_unit('ST-32-X-32-STA', stage=Stage.STORAGE_QUEUE)

        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        assert result.bin == a

    def test_bin_mismatch(self, make_unit, storage_bins):
        a, b = storage_bins
        unit = make_unit(stage=Stage.STORAGE_QUEUE)
        tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=b.code)

        assert exc.value.code == 'BIN_MISMATCH'
        assert exc.value.data == {'expected': a.code, 'scanned': b.code}
        unit.refresh_from_db()
        assert unit.stage == Stage.STORAGE_QUEUE
        b.refresh_from_db()
        assert b.current_count == 0

        # The selection is still pending after a mismatch
        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=a.code)
        assert result.stage == Stage.STOCK

    def test_confirm_without_selection(self, make_unit, storage_bins):
        a, _ = storage_bins
        unit = make_unit(stage=Stage.PRODUCTION)
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=a.code)

        assert exc.value.code == 'NO_PENDING_MOVEMENT'

    def test_bin_filled_before_confirm(self, make_unit, storage_bins):
        a, _ = storage_bins
        unit = make_unit(stage=Stage.STORAGE_QUEUE)
        tailor.apply_scan(unit.code, ScanType.MOVEMENT)
        fill(a, a.capacity)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=a.code)

        assert exc.value.code == 'BIN_AT_CAPACITY'
        unit.refresh_from_db()
        assert unit.stage == Stage.STORAGE_QUEUE
        assert unit.bin is None

    def test_no_capacity(self, make_unit, storage_bins):
        for bin in storage_bins:
            fill(bin, bin.capacity)
        unit = make_unit(stage=Stage.STORAGE_QUEUE)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        assert exc.value.code == 'NO_CAPACITY'


class TestWashMovement:

    def test_into_matching_wash_bin(self, committed, wash_bin):
        unit, order = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        waiting = tailor.apply_scan(unit.code, ScanType.MOVEMENT)
        assert waiting.stage == Stage.WASH_QUEUE
        assert waiting.next_action == 'await_destination'

        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=wash_bin.code)

        wash_bin.refresh_from_db()
        order.refresh_from_db()
        assert result.stage == Stage.WASHING
        assert result.unit.bin == wash_bin
        assert wash_bin.current_count == 1
        assert order.stage == Stage.WASHING

    def test_wrong_wash_rejected(self, committed, onyx_bin):
        unit, _ = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=onyx_bin.code)

        assert exc.value.code == 'INVALID_BIN_TYPE'
        assert exc.value.data['expected'] == 'STA'
        onyx_bin.refresh_from_db()
        assert onyx_bin.current_count == 0

    def test_wrong_wash_allowed_when_not_enforced(self, settings, committed, onyx_bin):
        settings.TAILORMAN = {'ENFORCE_WASH_BIN_MATCH': False}
        unit, _ = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=onyx_bin.code)

        assert result.stage == Stage.WASHING

    def test_storage_bin_rejected(self, committed, storage_bins):
        unit, _ = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=storage_bins[0].code)

        assert exc.value.code == 'INVALID_BIN_TYPE'

    def test_full_wash_bin(self, committed, wash_bin):
        unit, _ = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)
        fill(wash_bin, wash_bin.capacity)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=wash_bin.code)

        assert exc.value.code == 'BIN_AT_CAPACITY'

    def test_unknown_bin(self, committed):
        unit, _ = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION)

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code='WASH-NOPE')

        assert exc.value.code == 'BIN_NOT_FOUND'


class TestScanOut:

    def test_single_unit(self, washing, wash_bin):
        unit, _ = washing

        result = tailor.apply_scan(unit.code, ScanType.SCAN_OUT)

        wash_bin.refresh_from_db()
        assert result.stage == Stage.LAUNDRY
        assert result.unit.bin is None
        assert result.unit.location == 'LAUNDRY'
        assert wash_bin.current_count == 0

    def test_single_unit_leaves_rest_of_bin(self, make_unit, wash_bin):
        leaving, staying = [make_unit(stage=Stage.WASHING, bin=wash_bin) for _ in range(2)]
        fill(wash_bin, 2)

        tailor.apply_scan(leaving.code, ScanType.SCAN_OUT)

        wash_bin.refresh_from_db()
        staying.refresh_from_db()
        assert wash_bin.current_count == 1
        assert staying.stage == Stage.WASHING
        assert staying.bin == wash_bin

    def test_whole_bin(self, make_unit, wash_bin, user):
        units = [make_unit(stage=Stage.WASHING, bin=wash_bin) for _ in range(2)]
        fill(wash_bin, 2)

        moved = tailor.scan_out_wash_bin(wash_bin.code, location='WASH', user=user)

        wash_bin.refresh_from_db()
        assert sorted(u.pk for u in moved) == sorted(u.pk for u in units)
        assert wash_bin.current_count == 0
        for unit in units:
            unit.refresh_from_db()
            assert unit.stage == Stage.LAUNDRY
            assert unit.bin is None
            event = unit.scan_events.get()
            assert event.type == ScanType.SCAN_OUT
            assert event.metadata['bin_scan_out'] is True
            assert event.metadata['source_bin'] == wash_bin.code

    def test_whole_bin_needs_wash_bin(self, storage_bins):
        with pytest.raises(TailorError) as exc:
            tailor.scan_out_wash_bin(storage_bins[0].code)
        assert exc.value.code == 'INVALID_BIN_TYPE'


class TestFinishing:

    def test_full_path_to_fulfilled(self, washing):
        unit, order = washing
        tailor.apply_scan(unit.code, ScanType.SCAN_OUT)

        stages = [tailor.apply_scan(unit.code, ScanType.REACTIVATE_FROM_LAUNDRY).stage]
        for _ in range(4):
            stages.append(tailor.apply_scan(unit.code, ScanType.COMPLETION).stage)

        assert stages == [Stage.QC, Stage.FINISHING, Stage.PACKING, Stage.SHIPPING, Stage.FULFILLED]
        order.refresh_from_db()
        assert order.stage == Stage.FULFILLED
        assert order.status == OrderStatus.ASSIGNED
        unit.refresh_from_db()
        assert unit.location == 'SHIPPED'

        with pytest.raises(TailorError):
            tailor.apply_scan(unit.code, ScanType.COMPLETION)


class TestPickFromStock:

    def test_exact_wash_goes_to_qc(self, make_order, make_unit, storage_bins):
        a, _ = storage_bins
        unit = make_unit('ST-32-X-32-STA', bin=a)
        fill(a, 1)
        order = make_order('ST-32-X-32-STA')
        tailor.allocate(order.target_sku, order=order)

        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        a.refresh_from_db()
        assert result.stage == Stage.QC
        assert result.unit.bin is None
        assert a.current_count == 0
        assert result.scan_event.metadata['source_bin'] == a.code

    def test_universal_goes_to_wash(self, make_order, make_unit):
        unit = make_unit('ST-32-X-36-RAW')
        order = make_order('ST-32-X-32-IND')
        tailor.allocate(order.target_sku, order=order)

        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        assert result.stage == Stage.WASH_QUEUE
        assert result.next_action == 'move_to_wash'

    def test_unassigned_stock_stays(self, make_unit):
        unit = make_unit()

        with pytest.raises(TailorError) as exc:
            tailor.apply_scan(unit.code, ScanType.MOVEMENT)

        assert exc.value.code == 'INVALID_STAGE_FOR_SCAN_TYPE'


class TestDefect:

    def test_defect_releases_bin(self, make_unit, storage_bins):
        a, _ = storage_bins
        unit = make_unit(bin=a)
        fill(a, 1)

        result = tailor.apply_scan(unit.code, ScanType.DEFECT)

        a.refresh_from_db()
        assert result.stage == Stage.DEFECT
        assert result.requires_defect_report is True
        assert result.next_action == 'fill_defect_report'
        assert result.scan_event.metadata['previous_stage'] == Stage.STOCK
        assert result.unit.bin is None
        assert a.current_count == 0

    def test_defect_in_wash(self, washing, wash_bin):
        unit, order = washing

        tailor.apply_scan(unit.code, ScanType.DEFECT)

        wash_bin.refresh_from_db()
        order.refresh_from_db()
        assert wash_bin.current_count == 0
        assert order.stage == Stage.DEFECT


class TestScanHistory:

    def test_events_with_snapshots(self, committed, wash_bin, user):
        unit, order = committed
        tailor.apply_scan(unit.code, ScanType.ACTIVATION, user=user)
        with pytest.raises(TailorError):
            tailor.apply_scan(unit.code, ScanType.COMPLETION)
        result = tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=wash_bin.code, operator_note='rush')

        history = list(tailor.unit_history(unit.code))

        assert [(e.type, e.success) for e in history] == [
            (ScanType.ACTIVATION, True),
            (ScanType.COMPLETION, False),
            (ScanType.MOVEMENT, True),
        ]
        activation = history[0]
        assert activation.user == user
        assert activation.metadata['before']['stage'] == Stage.PRODUCTION
        assert activation.metadata['after'] == {
            'stage': Stage.WASH_QUEUE,
            'commitment': Commitment.ASSIGNED,
            'location': 'WASH_STAGING',
            'bin': None,
            'order': order.code,
        }
        assert history[2].metadata['after']['bin'] == wash_bin.code
        assert history[2].metadata['operator_note'] == 'rush'
        assert result.scan_event_id == history[2].pk

    def test_events_are_immutable(self, make_unit):
        unit = make_unit(stage=Stage.PRODUCTION)
        event = tailor.apply_scan(unit.code, ScanType.ACTIVATION).scan_event

        event.location = 'elsewhere'
        with pytest.raises(ValueError):
            event.save()
        with pytest.raises(ValueError):
            event.delete()


class TestEndToEnd:

    def test_order_without_stock_to_washing(self, make_order, wash_bin):
        order = make_order('ST-32-X-32-STA')

        allocation = tailor.allocate(order.target_sku, order=order)
        assert allocation.shortfall == 1
        request = allocation.production_request
        assert request.sku == Sku('ST', 32, 'X', 36, 'RAW')
        assert request.quantity == 1
        assert request.waitlist.get().position == 1

        accepted = tailor.accept_production_request(request.code)
        [unit] = accepted.units
        assert unit.commitment == Commitment.COMMITTED
        assert unit.stage == Stage.PRODUCTION
        assert unit.order_id == order.pk

        assert tailor.apply_scan(unit.code, ScanType.ACTIVATION).stage == Stage.WASH_QUEUE
        bin_code = f"WASH-{order.target_wash}-001"
        assert tailor.apply_scan(unit.code, ScanType.MOVEMENT, bin_code=bin_code).stage == Stage.WASHING
