"""
Tailorman API Views.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from tailorman import tailor
from tailorman.exceptions import TailorError
from tailorman.models import Bin, Order, ProductionRequest, Unit
from tailorman.sku import Sku

from .serializers import (
    BinSerializer,
    ModifyProductionRequestSerializer,
    OrderSerializer,
    ProductionRequestSerializer,
    ScanEventSerializer,
    ScanSerializer,
    UnitSerializer,
)


def error_response(error: TailorError) -> Response:
    """TailorError as an HTTP response (404 for unknown objects, else 400)."""
    code = status.HTTP_404_NOT_FOUND if error.code.endswith('_NOT_FOUND') else status.HTTP_400_BAD_REQUEST
    return Response(error.as_dict(), status=code)


class ScanView(APIView):
    """
    Apply a scan to a unit.

    POST /api/tailorman/scan/
    {
        "unit": "U-2026-000001",
        "type": "MOVEMENT",
        "bin": "STORAGE-Z1A"   // optional
    }
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = ScanSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            result = tailor.apply_scan(
                data["unit"],
                data["type"],
                bin_code=data.get("bin") or None,
                location=data.get("location") or None,
                user=request.user,
            )
        except TailorError as e:
            return error_response(e)

        return Response(
            {
                "unit": UnitSerializer(result.unit).data,
                "stage": result.stage,
                "commitment": result.commitment,
                "scan_event": result.scan_event_id,
                "next_action": result.next_action,
                "bin": result.bin.code if result.bin else None,
                "requires_defect_report": result.requires_defect_report,
            }
        )


class UnitViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Unit (read-only).

    list: List units
    retrieve: Get a unit by code
    history: Scan trail of a unit
    """

    permission_classes = [IsAuthenticated]
    queryset = Unit.objects.select_related("bin", "order", "batch")
    serializer_class = UnitSerializer
    lookup_field = "code"

    @action(detail=True, methods=["get"])
    def history(self, request, code=None):
        """
        GET /api/tailorman/units/{code}/history/
        """
        try:
            events = tailor.unit_history(code)
        except TailorError as e:
            return error_response(e)
        return Response(ScanEventSerializer(events, many=True).data)


class OrderViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Order.

    list: List orders
    create: Create an order
    retrieve: Get an order by code
    process: Bind to stock or waitlist on a production request
    """

    permission_classes = [IsAuthenticated]
    queryset = Order.objects.select_related("customer")
    serializer_class = OrderSerializer
    lookup_field = "code"

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        target = Sku(
            data["target_style"],
            data["target_waist"],
            data["target_shape"],
            data["target_length"],
            data["target_wash"],
        )
        try:
            order = tailor.create_order(
                data["customer"],
                target,
                hem_type=data.get("hem_type"),
                button_color=data.get("button_color"),
            )
        except TailorError as e:
            return error_response(e)
        return Response(self.get_serializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def process(self, request, code=None):
        """
        POST /api/tailorman/orders/{code}/process/
        """
        try:
            result = tailor.process_order(code)
        except TailorError as e:
            return error_response(e)
        return Response(
            {
                "units": [u.code for u in result.units],
                "shortfall": result.shortfall,
                "production_request": result.production_request.code if result.production_request else None,
            }
        )


class ProductionRequestViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for ProductionRequest.

    list: List production requests
    retrieve: Get a request by code
    accept: Start manufacturing (creates units)
    modify: Grow quantity and/or length
    """

    permission_classes = [IsAuthenticated]
    queryset = ProductionRequest.objects.all()
    serializer_class = ProductionRequestSerializer
    lookup_field = "code"

    @action(detail=True, methods=["post"])
    def accept(self, request, code=None):
        """
        POST /api/tailorman/production-requests/{code}/accept/
        """
        try:
            result = tailor.accept_production_request(code)
        except TailorError as e:
            return error_response(e)
        return Response(
            {
                "status": "accepted",
                "batch": result.batch.code,
                "units": [u.code for u in result.units],
                "committed": [u.code for u in result.committed],
                "detached_orders": [o.code for o in result.detached_orders],
            }
        )

    @action(detail=True, methods=["post"])
    def modify(self, request, code=None):
        """
        POST /api/tailorman/production-requests/{code}/modify/
        {
            "quantity": 8,    // optional
            "length": 38      // optional
        }
        """
        serializer = ModifyProductionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            pr = tailor.modify_production_request(
                code,
                quantity=serializer.validated_data.get("quantity"),
                length=serializer.validated_data.get("length"),
            )
        except TailorError as e:
            return error_response(e)
        return Response(ProductionRequestSerializer(pr).data)


class BinViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Bin (read-only).

    list: List bins
    retrieve: Get a bin by code
    scan_out: Send every unit of a wash bin to laundry
    """

    permission_classes = [IsAuthenticated]
    queryset = Bin.objects.all()
    serializer_class = BinSerializer
    lookup_field = "code"

    @action(detail=True, methods=["post"], url_path="scan-out")
    def scan_out(self, request, code=None):
        """
        POST /api/tailorman/bins/{code}/scan-out/
        """
        try:
            units = tailor.scan_out_wash_bin(code, user=request.user)
        except TailorError as e:
            return error_response(e)
        return Response({"bin": code, "units": [u.code for u in units]})
