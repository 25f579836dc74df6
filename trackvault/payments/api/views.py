# trackvault/payments/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from trackvault.common.api.pagination import paginate
from trackvault.common.api.params import UUID_PATTERN, date_or_none, uuid_or_none
from trackvault.common.permissions import PaymentPermission
from trackvault.payments.api.serializers import (
    BalanceRequestSerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    PaymentUpdateSerializer,
)
from trackvault.payments.models import Payment
from trackvault.payments.selectors import get_payment, payments_filtered
from trackvault.payments.services import BalanceService, PaymentService
from trackvault.suppliers.api.serializers import SupplierBalanceSerializer


def _actor_id(request) -> int | None:
    return request.user.id if request.user and request.user.is_authenticated else None


class PaymentViewSet(viewsets.ViewSet):
    """
    Payments v1: list/retrieve, record, versioned update, delete, and balance calculation.
    """
    permission_classes = [PaymentPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = PaymentSerializer
    queryset = Payment.objects.none()

    @extend_schema(
        tags=["Payments"],
        responses={200: PaymentSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="supplier", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="payment_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="from_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="to_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = payments_filtered(
            supplier_id=uuid_or_none(request.query_params.get("supplier"), "supplier"),
            payment_type=request.query_params.get("payment_type") or None,
            from_date=date_or_none(request.query_params.get("from_date"), "from_date"),
            to_date=date_or_none(request.query_params.get("to_date"), "to_date"),
        )
        return paginate(request, qs, PaymentSerializer)

    @extend_schema(tags=["Payments"], request=PaymentCreateSerializer, responses={201: PaymentSerializer})
    def create(self, request):
        ser = PaymentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        pay = PaymentService.record_payment(actor_user_id=_actor_id(request), **ser.validated_data)
        return Response(PaymentSerializer(pay).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Payments"], responses={200: PaymentSerializer})
    def retrieve(self, request, pk=None):
        pay = get_payment(payment_id=UUID(str(pk)))
        return Response(PaymentSerializer(pay).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Payments"], request=PaymentUpdateSerializer, responses={200: PaymentSerializer})
    def partial_update(self, request, pk=None):
        ser = PaymentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        data = dict(ser.validated_data)
        pay = PaymentService.update_payment(
            actor_user_id=_actor_id(request),
            payment_id=UUID(str(pk)),
            version=data.pop("version"),
            data=data,
        )
        return Response(PaymentSerializer(pay).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Payments"], request=PaymentUpdateSerializer, responses={200: PaymentSerializer})
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    @extend_schema(tags=["Payments"], responses={204: None})
    def destroy(self, request, pk=None):
        PaymentService.delete_payment(actor_user_id=_actor_id(request), payment_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=["Payments"], request=BalanceRequestSerializer, responses={200: SupplierBalanceSerializer})
    @action(detail=False, methods=["post"], url_path="calculate")
    def calculate(self, request):
        ser = BalanceRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        balance = BalanceService.calculate_balance(**ser.validated_data)
        return Response(SupplierBalanceSerializer(balance).data, status=status.HTTP_200_OK)
