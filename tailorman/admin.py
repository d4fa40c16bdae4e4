"""
Tailorman Admin.

Provides views for production debugging:
- Customer: editable contact data, identity fixed once created
- Order: read-only (created and processed via tailor)
- ProductionRequest: read-only with "accept" action
- Unit: read-only (status only changes through scans)
- ScanEvent: read-only audit trail
- Bin: editable setup, with "scan out" action for wash bins
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from tailorman.exceptions import TailorError
from tailorman.models import (
    Batch,
    Bin,
    BinType,
    Customer,
    Order,
    ProductionRequest,
    ProductionRequestStatus,
    ScanEvent,
    Unit,
    WaitlistEntry,
)

logger = logging.getLogger(__name__)


class ReadOnlyAdmin(admin.ModelAdmin):
    """Nothing is added, changed or deleted from the admin."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# CUSTOMER & ORDER ADMIN
# =========================================================================

@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):

    list_display = ['name', 'email', 'phone', 'created_at']
    search_fields = ['name', 'email']
    readonly_fields = ['created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        # Identity is immutable once created
        if obj is not None:
            return [*self.readonly_fields, 'name']
        return self.readonly_fields


@admin.register(Order)
class OrderAdmin(ReadOnlyAdmin):
    """Order admin — read-only. Orders are created and processed via tailor."""

    list_display = ['code', 'customer', 'sku_display', 'hem_type', 'button_color', 'status', 'stage']
    list_filter = ['status', 'stage', 'target_wash']
    search_fields = ['code', 'customer__name']

    @admin.display(description=_('Target SKU'))
    def sku_display(self, obj):
        return str(obj.target_sku)


# =========================================================================
# PRODUCTION ADMIN
# =========================================================================

class WaitlistInline(admin.TabularInline):
    model = WaitlistEntry
    fields = ['position', 'order', 'created_at']
    readonly_fields = fields
    extra = 0
    can_delete = False
    ordering = ['position']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ProductionRequest)
class ProductionRequestAdmin(ReadOnlyAdmin):
    """ProductionRequest admin — read-only with accept action."""

    list_display = ['code', 'sku_display', 'quantity', 'status', 'created_at', 'accepted_at', 'completed_at']
    list_filter = ['status', 'wash']
    search_fields = ['code', 'style']
    inlines = [WaitlistInline]
    actions = ['accept_requests']

    @admin.display(description=_('SKU'))
    def sku_display(self, obj):
        return str(obj.sku)

    @admin.action(description=_('Accept selected production requests'))
    def accept_requests(self, request, queryset):
        from tailorman import tailor

        count = 0
        for pr in queryset.filter(status=ProductionRequestStatus.PENDING):
            try:
                tailor.accept_production_request(pr.code)
                count += 1
            except TailorError as exc:
                logger.warning("accept_requests: failed to accept %s: %s", pr.code, exc)

        self.message_user(request, _('{count} request(s) accepted.').format(count=count))


@admin.register(Batch)
class BatchAdmin(ReadOnlyAdmin):
    """Batch admin — production run traceability."""

    list_display = ['code', 'production_request', 'status', 'created_at', 'completed_at']
    list_filter = ['status']
    search_fields = ['code', 'production_request__code']


# =========================================================================
# UNIT & SCAN ADMIN (read-only)
# =========================================================================

class ScanEventInline(admin.TabularInline):
    model = ScanEvent
    fields = ['timestamp', 'type', 'success', 'error_code', 'location', 'user']
    readonly_fields = fields
    extra = 0
    can_delete = False
    ordering = ['timestamp', 'pk']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Unit)
class UnitAdmin(ReadOnlyAdmin):
    """Unit admin — read-only. Status only changes through scans."""

    list_display = ['code', 'sku_display', 'commitment', 'stage', 'location', 'bin', 'order']
    list_filter = ['commitment', 'stage', 'wash']
    search_fields = ['code', 'order__code']
    inlines = [ScanEventInline]

    @admin.display(description=_('SKU'))
    def sku_display(self, obj):
        return str(obj.sku)


@admin.register(ScanEvent)
class ScanEventAdmin(ReadOnlyAdmin):
    """ScanEvent admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'unit', 'type', 'success', 'error_code', 'location', 'user']
    list_filter = ['type', 'success', 'timestamp']
    search_fields = ['unit__code', 'error_code']
    date_hierarchy = 'timestamp'


# =========================================================================
# BIN ADMIN
# =========================================================================

@admin.register(Bin)
class BinAdmin(admin.ModelAdmin):
    """Bin admin — setup is editable, occupancy is not."""

    list_display = ['code', 'name', 'type', 'status', 'zone', 'wash', 'current_count', 'capacity']
    list_filter = ['type', 'status', 'zone']
    search_fields = ['code', 'name']
    readonly_fields = ['current_count', 'created_at', 'updated_at']
    actions = ['scan_out_bins']

    @admin.action(description=_('Scan out selected wash bins'))
    def scan_out_bins(self, request, queryset):
        from tailorman import tailor

        count = 0
        for bin in queryset.filter(type=BinType.WASH):
            try:
                count += len(tailor.scan_out_wash_bin(bin.code, user=request.user))
            except TailorError as exc:
                logger.warning("scan_out_bins: failed to scan out %s: %s", bin.code, exc)

        self.message_user(request, _('{count} unit(s) sent to laundry.').format(count=count))
