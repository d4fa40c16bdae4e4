"""
Django Tailorman — Garment allocation and lifecycle engine.

Usage:
    from tailorman import tailor, TailorError

    order = tailor.create_order(customer, "ST-32-X-32-STA")
    tailor.process_order(order.code)
    tailor.apply_scan(unit.code, "ACTIVATION")
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'tailor':
        from tailorman.service import Tailor
        return Tailor
    elif name == 'TailorError':
        from tailorman.exceptions import TailorError
        return TailorError
    elif name == 'Sku':
        from tailorman.sku import Sku
        return Sku
    elif name == 'Unit':
        from tailorman.models.unit import Unit
        return Unit
    elif name == 'Order':
        from tailorman.models.order import Order
        return Order
    elif name == 'ProductionRequest':
        from tailorman.models.production import ProductionRequest
        return ProductionRequest
    elif name == 'Bin':
        from tailorman.models.bin import Bin
        return Bin
    elif name == 'ScanEvent':
        from tailorman.models.scan import ScanEvent
        return ScanEvent
    elif name == 'ScanType':
        from tailorman.models.enums import ScanType
        return ScanType
    elif name == 'Stage':
        from tailorman.models.enums import Stage
        return Stage
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'tailor',
    'TailorError',
    'Sku',
    'Unit',
    'Order',
    'ProductionRequest',
    'Bin',
    'ScanEvent',
    'ScanType',
    'Stage',
]

__version__ = '0.1.0'
