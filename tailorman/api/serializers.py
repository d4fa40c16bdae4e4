"""
Tailorman API Serializers.
"""

from rest_framework import serializers

from tailorman.models import Bin, Order, ProductionRequest, ScanEvent, Unit


class UnitSerializer(serializers.ModelSerializer):
    """Serializer for Unit model."""

    sku = serializers.SerializerMethodField()
    bin_code = serializers.CharField(source="bin.code", read_only=True, default=None)
    order_code = serializers.CharField(source="order.code", read_only=True, default=None)
    batch_code = serializers.CharField(source="batch.code", read_only=True)

    class Meta:
        model = Unit
        fields = [
            "code",
            "sku",
            "style",
            "waist",
            "shape",
            "length",
            "wash",
            "commitment",
            "stage",
            "location",
            "bin_code",
            "order_code",
            "batch_code",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_sku(self, obj) -> str:
        return str(obj.sku)


class ScanEventSerializer(serializers.ModelSerializer):
    """Serializer for ScanEvent model."""

    class Meta:
        model = ScanEvent
        fields = [
            "id",
            "type",
            "timestamp",
            "location",
            "success",
            "error_code",
            "metadata",
        ]
        read_only_fields = fields


class ScanSerializer(serializers.Serializer):
    """Input for POST scan/."""

    unit = serializers.CharField()
    type = serializers.CharField(max_length=50)
    bin = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)


class OrderSerializer(serializers.ModelSerializer):
    """Serializer for Order model."""

    target_sku = serializers.SerializerMethodField()
    unit_code = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "code",
            "customer",
            "target_sku",
            "target_style",
            "target_waist",
            "target_shape",
            "target_length",
            "target_wash",
            "hem_type",
            "button_color",
            "status",
            "stage",
            "unit_code",
            "created_at",
        ]
        read_only_fields = ["code", "target_sku", "status", "stage", "unit_code", "created_at"]
        extra_kwargs = {
            "hem_type": {"required": False},
            "button_color": {"required": False},
        }

    def get_target_sku(self, obj) -> str:
        return str(obj.target_sku)

    def get_unit_code(self, obj) -> str | None:
        unit = obj.bound_unit
        return unit.code if unit else None


class ProductionRequestSerializer(serializers.ModelSerializer):
    """Serializer for ProductionRequest model."""

    sku = serializers.SerializerMethodField()
    waitlist = serializers.SerializerMethodField()

    class Meta:
        model = ProductionRequest
        fields = [
            "code",
            "sku",
            "style",
            "waist",
            "shape",
            "length",
            "wash",
            "quantity",
            "status",
            "waitlist",
            "created_at",
            "accepted_at",
            "completed_at",
        ]
        read_only_fields = fields

    def get_sku(self, obj) -> str:
        return str(obj.sku)

    def get_waitlist(self, obj) -> list:
        return [
            {"position": entry.position, "order": entry.order.code}
            for entry in obj.waitlist.select_related("order").order_by("position")
        ]


class ModifyProductionRequestSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(required=False, min_value=1)
    length = serializers.IntegerField(required=False, min_value=1)


class BinSerializer(serializers.ModelSerializer):
    """Serializer for Bin model."""

    free_space = serializers.IntegerField(read_only=True)

    class Meta:
        model = Bin
        fields = [
            "code",
            "name",
            "type",
            "status",
            "zone",
            "wash",
            "capacity",
            "current_count",
            "free_space",
        ]
        read_only_fields = fields
