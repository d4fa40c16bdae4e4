"""
Exceptions for Tailorman.

All errors are TailorError with a structured code for programmatic handling.
"""

from typing import Any


class TailorError(Exception):
    """
    Structured exception for allocation, production and scan operations.

    Usage:
        try:
            tailor.apply_scan(unit.code, ScanType.COMPLETION)
        except TailorError as e:
            if e.code == 'INVALID_STAGE_FOR_SCAN_TYPE':
                print(f"Wrong scan for this step, expected {e.data['expected']}")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'INVALID_WASH_CODE': 'Unknown wash code',
        'INVALID_SKU': 'Malformed SKU',
        'INVALID_QUANTITY': 'Invalid quantity (must be positive)',
        'INVALID_MODIFICATION': 'Production request modification violates a bound',
        'INVALID_STATUS': 'Invalid status for this operation',
        'ORDER_NOT_FOUND': 'Order not found',
        'ORDER_ALREADY_PROCESSED': 'Order is already waitlisted or bound to a unit',
        'UNIT_NOT_FOUND': 'Unit not found',
        'BIN_NOT_FOUND': 'Bin not found',
        'PRODUCTION_REQUEST_NOT_FOUND': 'Production request not found',
        'INVALID_STAGE_FOR_SCAN_TYPE': 'Wrong scan for this step',
        'BIN_MISMATCH': 'Scanned bin does not match the selected bin',
        'INVALID_BIN_TYPE': 'Bin type not valid for this unit',
        'BIN_AT_CAPACITY': 'Bin is at capacity',
        'NO_CAPACITY': 'No storage bin with free capacity',
        'ALREADY_ACTIVATED': 'Unit is already activated',
        'NO_PENDING_MOVEMENT': 'No pending movement for this unit',
        'ALLOCATION_CONFLICT': 'Concurrent allocation conflict, retry the order',
    }

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"{code}: {self.message}")

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': dict(self.data),
        }

    def __str__(self) -> str:
        if self.data:
            details = ", ".join(f"{k}={v}" for k, v in self.data.items())
            return f"TailorError({self.code}: {details})"
        return f"TailorError({self.code})"
