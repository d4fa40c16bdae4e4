"""
Unit lifecycle — scan-driven state machine.

Each unit carries two status axes: commitment and stage. Scans move the
stage forward; only one scan type is valid per stage (DEFECT is accepted
anywhere before a terminal stage).

    PRODUCTION ─ACTIVATION─► WASH_QUEUE (committed) ─MOVEMENT─► WASHING ─SCAN_OUT─► LAUNDRY
         │                                                                          │
         └─────────────────► STORAGE_QUEUE ─MOVEMENT×2─► STOCK              REACTIVATE_FROM_LAUNDRY
                                                            │                       ▼
                                                  MOVEMENT (assigned)  ───────────► QC ─COMPLETION─►
                                                                       FINISHING ─► PACKING ─► SHIPPING ─► FULFILLED

Every attempt, successful or not, appends a ScanEvent with before/after
snapshots. Rejected scans leave the unit untouched.
"""

import logging

from django.db import transaction

from tailorman.conf import tailorman_settings
from tailorman.exceptions import TailorError
from tailorman.models.enums import BinType, Commitment, OrderStatus, ScanType, Stage
from tailorman.models.production import WaitlistEntry
from tailorman.models.scan import ScanEvent
from tailorman.models.unit import Unit
from tailorman.results import ScanResult
from tailorman.services.bins import StorageBins
from tailorman.sku import can_satisfy, is_universal_wash

logger = logging.getLogger('tailorman')


# Stage-to-stage moves with no side effects beyond the stage change
SIMPLE_TRANSITIONS = {
    (Stage.LAUNDRY, ScanType.REACTIVATE_FROM_LAUNDRY): Stage.QC,
    (Stage.QC, ScanType.COMPLETION): Stage.FINISHING,
    (Stage.FINISHING, ScanType.COMPLETION): Stage.PACKING,
    (Stage.PACKING, ScanType.COMPLETION): Stage.SHIPPING,
    (Stage.SHIPPING, ScanType.COMPLETION): Stage.FULFILLED,
}

# The scan type each stage waits for
EXPECTED_SCAN = {
    Stage.PRODUCTION: ScanType.ACTIVATION,
    Stage.STORAGE_QUEUE: ScanType.MOVEMENT,
    Stage.STOCK: ScanType.MOVEMENT,
    Stage.WASH_QUEUE: ScanType.MOVEMENT,
    Stage.WASHING: ScanType.SCAN_OUT,
    Stage.LAUNDRY: ScanType.REACTIVATE_FROM_LAUNDRY,
    Stage.QC: ScanType.COMPLETION,
    Stage.FINISHING: ScanType.COMPLETION,
    Stage.PACKING: ScanType.COMPLETION,
    Stage.SHIPPING: ScanType.COMPLETION,
}

TERMINAL_STAGES = (Stage.FULFILLED, Stage.DEFECT)

# Location labels written on the unit when it enters a stage
STAGE_LOCATIONS = {
    Stage.WASH_QUEUE: 'WASH_STAGING',
    Stage.STORAGE_QUEUE: 'STORAGE_STAGING',
    Stage.LAUNDRY: 'LAUNDRY',
    Stage.QC: 'QC_AREA',
    Stage.FINISHING: 'FINISHING_AREA',
    Stage.PACKING: 'PACKING_AREA',
    Stage.SHIPPING: 'SHIPPING_AREA',
    Stage.FULFILLED: 'SHIPPED',
}


class _Transition:
    """Mutable outcome of a handler, applied and recorded by apply_scan."""

    def __init__(self, stage, next_action=None, bin=None, **metadata):
        self.stage = stage
        self.next_action = next_action
        self.bin = bin
        self.metadata = metadata


class UnitLifecycle:
    """Scan handling for units."""

    @classmethod
    def get_unit(cls, unit_id, for_update: bool = False) -> Unit:
        """Fetch by code (QR payload), primary key or instance."""
        if isinstance(unit_id, Unit):
            unit_id = unit_id.pk
        qs = Unit.objects.select_for_update(of=('self',)) if for_update else Unit.objects
        lookup = {'pk': unit_id} if isinstance(unit_id, int) else {'code': unit_id}
        try:
            return qs.select_related('bin', 'order').get(**lookup)
        except Unit.DoesNotExist:
            raise TailorError('UNIT_NOT_FOUND', unit=str(unit_id)) from None

    @classmethod
    def apply_scan(cls, unit_id, scan_type, bin_code: str | None = None,
                   location: str | None = None, user=None, **metadata) -> ScanResult:
        """
        Apply one scan to a unit.

        Args:
            unit_id: Unit code, pk or instance
            scan_type: ScanType value
            bin_code: Scanned bin QR (MOVEMENT destination)
            location: Where the scan happened (defaults to the unit's location)
            user: Operator
            **metadata: Extra data stored on the ScanEvent

        Returns:
            ScanResult with the new state

        Raises:
            TailorError: On any rejected scan. The failed attempt is still
                recorded as a ScanEvent.
        """
        try:
            scan_type = ScanType(scan_type)
        except ValueError:
            # Still recorded against the unit, as a failed UNKNOWN scan
            metadata['raw_scan_type'] = str(scan_type)
            scan_type = ScanType.UNKNOWN

        error = None
        with transaction.atomic():
            unit = cls.get_unit(unit_id, for_update=True)
            before = unit.snapshot

            try:
                # Savepoint: a rejected scan rolls back its partial changes only
                with transaction.atomic():
                    transition = cls._dispatch(unit, scan_type, bin_code)
                    cls._apply(unit, transition)
            except TailorError as e:
                error = e
                unit.refresh_from_db()
                cls._record(unit, scan_type, location, user, before, success=False,
                            error_code=e.code, extra={**metadata, **e.data})
            else:
                event = cls._record(unit, scan_type, location, user, before, success=True,
                                    extra={**metadata, **transition.metadata})

                if before['stage'] == Stage.PRODUCTION and unit.stage != Stage.PRODUCTION:
                    from tailorman.services.production import ProductionRequests
                    ProductionRequests.complete_if_done(unit.production_request)

        if error is not None:
            logger.warning(
                "tailorman.scan.rejected",
                extra={"unit": unit.code, "scan_type": scan_type, "stage": unit.stage, "code": error.code},
            )
            raise error

        logger.info(
            "tailorman.scan.applied",
            extra={
                "unit": unit.code,
                "scan_type": scan_type,
                "from": before['stage'],
                "to": unit.stage,
            },
        )
        return ScanResult(
            unit=unit,
            stage=unit.stage,
            commitment=unit.commitment,
            scan_event=event,
            next_action=transition.next_action,
            bin=transition.bin,
            requires_defect_report=transition.metadata.get('requires_defect_report', False),
        )

    # ══════════════════════════════════════════════════════════════
    # DISPATCH
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _dispatch(cls, unit: Unit, scan_type: ScanType, bin_code: str | None) -> _Transition:
        stage = unit.stage

        if scan_type == ScanType.DEFECT:
            if stage in TERMINAL_STAGES:
                raise TailorError('INVALID_STAGE_FOR_SCAN_TYPE', stage=stage, scan_type=scan_type)
            return cls._defect(unit)

        simple = SIMPLE_TRANSITIONS.get((stage, scan_type))
        if simple is not None:
            return _Transition(simple)

        handler = {
            (Stage.PRODUCTION, ScanType.ACTIVATION): cls._activate,
            (Stage.STORAGE_QUEUE, ScanType.MOVEMENT): cls._move_to_storage,
            (Stage.WASH_QUEUE, ScanType.MOVEMENT): cls._move_to_wash,
            (Stage.STOCK, ScanType.MOVEMENT): cls._pick_from_stock,
            (Stage.WASHING, ScanType.SCAN_OUT): cls._scan_out,
        }.get((stage, scan_type))

        if handler is None:
            raise TailorError(
                'INVALID_STAGE_FOR_SCAN_TYPE',
                stage=stage,
                scan_type=scan_type,
                expected=EXPECTED_SCAN.get(stage, ''),
            )
        return handler(unit, bin_code)

    @classmethod
    def _apply(cls, unit: Unit, transition: _Transition) -> None:
        unit.stage = transition.stage
        if transition.stage in STAGE_LOCATIONS:
            unit.location = STAGE_LOCATIONS[transition.stage]
        unit.save()

        if unit.order_id:
            order = unit.order
            order.stage = unit.stage
            order.save(update_fields=['stage', 'updated_at'])

    @classmethod
    def _record(cls, unit, scan_type, location, user, before, success, error_code='', extra=None):
        return ScanEvent.objects.create(
            unit=unit,
            type=scan_type,
            location=location or unit.location,
            success=success,
            error_code=error_code,
            user=user,
            metadata={
                **(extra or {}),
                'before': before,
                'after': unit.snapshot,
            },
        )

    # ══════════════════════════════════════════════════════════════
    # HANDLERS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _activate(cls, unit: Unit, bin_code=None) -> _Transition:
        """
        First scan after sewing.

        Committed units get their order (already bound, or the head of the
        request's waitlist) and head to washing. Others go to storage.
        """
        if unit.scan_events.successful().of_type(ScanType.ACTIVATION).exists():
            raise TailorError('ALREADY_ACTIVATED', unit=unit.code, stage=unit.stage)

        if unit.commitment == Commitment.COMMITTED:
            order = unit.order if unit.order_id else cls._next_waitlisted_order(unit)
            if order is not None:
                unit.order = order
                unit.commitment = Commitment.ASSIGNED
                order.status = OrderStatus.ASSIGNED
                order.save(update_fields=['status', 'updated_at'])
                logger.info("tailorman.unit.activated", extra={"unit": unit.code, "order": order.code})
                return _Transition(Stage.WASH_QUEUE, next_action='move_to_wash', order=order.code)

            # Nothing left to bind: the unit joins anonymous stock
            unit.commitment = Commitment.UNCOMMITTED
            logger.warning("tailorman.unit.commitment_dropped", extra={"unit": unit.code})

        logger.info("tailorman.unit.activated", extra={"unit": unit.code})
        return _Transition(Stage.STORAGE_QUEUE, next_action='move_to_storage')

    @classmethod
    def _next_waitlisted_order(cls, unit: Unit):
        """Oldest waitlisted order the unit can satisfy; its entry is consumed."""
        entries = (
            WaitlistEntry.objects
            .filter(production_request_id=unit.production_request_id)
            .select_related('order')
            .order_by('position')
        )
        for entry in entries:
            if can_satisfy(entry.order.target_sku, unit.sku):
                order = entry.order
                entry.delete()
                return order
        return None

    @classmethod
    def _move_to_storage(cls, unit: Unit, bin_code=None) -> _Transition:
        """
        Two-step placement.

        Without a bin: select one and wait for it to be scanned.
        With a bin: it must be the selected one and still have space.
        """
        if not bin_code:
            bin = StorageBins.select_storage_bin(unit)
            return _Transition(
                Stage.STORAGE_QUEUE,
                next_action='await_destination',
                bin=bin,
                selected_bin=bin.code,
                requires_destination_scan=True,
            )

        selected = cls._pending_destination(unit)
        if selected is None:
            raise TailorError('NO_PENDING_MOVEMENT', unit=unit.code)
        if bin_code != selected:
            raise TailorError('BIN_MISMATCH', expected=selected, scanned=bin_code)

        bin = StorageBins.get_bin(bin_code)
        StorageBins.occupy(bin)
        unit.bin = bin
        unit.location = bin.code
        return _Transition(Stage.STOCK, bin=bin, destination_bin=bin.code)

    @classmethod
    def _pending_destination(cls, unit: Unit) -> str | None:
        last = unit.scan_events.successful().latest_first().first()
        if last is None or last.type != ScanType.MOVEMENT:
            return None
        if not last.metadata.get('requires_destination_scan'):
            return None
        return last.metadata.get('selected_bin')

    @classmethod
    def _move_to_wash(cls, unit: Unit, bin_code=None) -> _Transition:
        if not bin_code:
            return _Transition(Stage.WASH_QUEUE, next_action='await_destination', requires_destination_scan=True)

        bin = StorageBins.get_bin(bin_code)
        if bin.type != BinType.WASH:
            raise TailorError('INVALID_BIN_TYPE', bin=bin.code, type=bin.type, expected=BinType.WASH)
        if tailorman_settings.ENFORCE_WASH_BIN_MATCH and bin.wash and unit.order_id:
            if bin.wash != unit.order.target_wash:
                raise TailorError(
                    'INVALID_BIN_TYPE',
                    bin=bin.code,
                    wash=bin.wash,
                    expected=unit.order.target_wash,
                )

        StorageBins.occupy(bin)
        unit.bin = bin
        unit.location = bin.code
        return _Transition(Stage.WASHING, bin=bin, destination_bin=bin.code)

    @classmethod
    def _pick_from_stock(cls, unit: Unit, bin_code=None) -> _Transition:
        """Take an assigned unit out of storage for finishing."""
        if unit.commitment != Commitment.ASSIGNED:
            raise TailorError(
                'INVALID_STAGE_FOR_SCAN_TYPE',
                stage=unit.stage,
                scan_type=ScanType.MOVEMENT,
                commitment=unit.commitment,
            )
        source = unit.bin
        if source is not None:
            StorageBins.release_bin(source)
            unit.bin = None

        if is_universal_wash(unit.wash):
            return _Transition(Stage.WASH_QUEUE, next_action='move_to_wash',
                               source_bin=source.code if source else None)
        return _Transition(Stage.QC, source_bin=source.code if source else None)

    @classmethod
    def _scan_out(cls, unit: Unit, bin_code=None) -> _Transition:
        """
        Single-unit scan-out of a wash bin: frees one slot.

        Emptying the whole bin (count reset to 0) is scan_out_wash_bin.
        """
        source = unit.bin
        if source is not None:
            StorageBins.release_bin(source)
            unit.bin = None
        return _Transition(Stage.LAUNDRY, source_bin=source.code if source else None)

    @classmethod
    def _defect(cls, unit: Unit) -> _Transition:
        source = unit.bin
        if source is not None:
            StorageBins.release_bin(source)
            unit.bin = None
        logger.warning("tailorman.unit.defect", extra={"unit": unit.code, "stage": unit.stage})
        return _Transition(
            Stage.DEFECT,
            next_action='fill_defect_report',
            requires_defect_report=True,
            previous_stage=unit.stage,
        )

    # ══════════════════════════════════════════════════════════════
    # BIN-LEVEL & QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def scan_out_wash_bin(cls, bin_code: str, location: str | None = None, user=None) -> list[Unit]:
        """
        Empty a wash bin: every unit in it goes to LAUNDRY, count resets to 0.

        Raises:
            TailorError('BIN_NOT_FOUND')
            TailorError('INVALID_BIN_TYPE'): Not a wash bin
        """
        with transaction.atomic():
            bin = StorageBins.get_bin(bin_code, for_update=True)
            if bin.type != BinType.WASH:
                raise TailorError('INVALID_BIN_TYPE', bin=bin.code, type=bin.type, expected=BinType.WASH)

            units = list(
                Unit.objects.select_for_update(of=('self',))
                .filter(bin=bin, stage=Stage.WASHING)
                .select_related('order')
            )
            for unit in units:
                before = unit.snapshot
                unit.bin = None
                cls._apply(unit, _Transition(Stage.LAUNDRY))
                cls._record(unit, ScanType.SCAN_OUT, location, user, before, success=True,
                            extra={'source_bin': bin.code, 'bin_scan_out': True})

            StorageBins.empty_bin(bin)

        logger.info("tailorman.bin.scanned_out", extra={"bin": bin.code, "units": len(units)})
        return units

    @classmethod
    def unit_history(cls, unit_id):
        """Scan trail of a unit, oldest first."""
        unit = cls.get_unit(unit_id)
        return unit.scan_events.order_by('timestamp', 'pk')
