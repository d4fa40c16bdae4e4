"""
Enums for Tailorman models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Wash(models.TextChoices):
    """
    Wash codes.

    STA/IND (light) and ONX/JAG (dark) are customer-facing.
    RAW/BRW are the universal (undyed) codes of each group, production only.
    """
    STA = 'STA', _('Stardust')
    IND = 'IND', _('Indigo')
    ONX = 'ONX', _('Onyx')
    JAG = 'JAG', _('Jagger')
    RAW = 'RAW', _('Raw (light universal)')
    BRW = 'BRW', _('Brown (dark universal)')


class Commitment(models.TextChoices):
    """Whether a unit is promised to an order."""
    UNCOMMITTED = 'UNCOMMITTED', _('Uncommitted')  # Anonymous, available
    COMMITTED = 'COMMITTED', _('Committed')        # Reserved by a production request allocation
    ASSIGNED = 'ASSIGNED', _('Assigned')           # Bound to a specific order


class Stage(models.TextChoices):
    """Physical processing step a unit occupies."""
    PRODUCTION = 'PRODUCTION', _('Production')
    STORAGE_QUEUE = 'STORAGE_QUEUE', _('Storage queue')
    STOCK = 'STOCK', _('Stock')
    WASH_QUEUE = 'WASH_QUEUE', _('Wash queue')
    WASHING = 'WASHING', _('Washing')
    LAUNDRY = 'LAUNDRY', _('Laundry')
    QC = 'QC', _('Quality control')
    FINISHING = 'FINISHING', _('Finishing')
    PACKING = 'PACKING', _('Packing')
    SHIPPING = 'SHIPPING', _('Shipping')
    FULFILLED = 'FULFILLED', _('Fulfilled')
    DEFECT = 'DEFECT', _('Defect')


class ScanType(models.TextChoices):
    """Physical scan events."""
    ACTIVATION = 'ACTIVATION', _('Activation')
    MOVEMENT = 'MOVEMENT', _('Movement')
    SCAN_OUT = 'SCAN_OUT', _('Wash bin scan-out')
    REACTIVATE_FROM_LAUNDRY = 'REACTIVATE_FROM_LAUNDRY', _('Reactivate from laundry')
    COMPLETION = 'COMPLETION', _('Step completion')
    DEFECT = 'DEFECT', _('Defect')
    UNKNOWN = 'UNKNOWN', _('Unrecognized')  # Rejected scan whose type could not be read


class OrderStatus(models.TextChoices):
    """Order commitment status."""
    CREATED = 'CREATED', _('Created')
    COMMITTED = 'COMMITTED', _('Committed')
    ASSIGNED = 'ASSIGNED', _('Assigned')


class ProductionRequestStatus(models.TextChoices):
    """Production request lifecycle."""
    PENDING = 'PENDING', _('Pending')
    IN_PROGRESS = 'IN_PROGRESS', _('In progress')
    COMPLETED = 'COMPLETED', _('Completed')


class BatchStatus(models.TextChoices):
    IN_PROGRESS = 'IN_PROGRESS', _('In progress')
    COMPLETED = 'COMPLETED', _('Completed')


class BinType(models.TextChoices):
    """
    Kind of bin.

    STORAGE: holds anonymous stock between activation and an order.
    WASH:    collects committed units to be washed together.
    """
    STORAGE = 'STORAGE', _('Storage')
    WASH = 'WASH', _('Wash')


class BinStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', _('Active')
    INACTIVE = 'INACTIVE', _('Inactive')
