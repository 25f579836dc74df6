# trackvault/suppliers/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from trackvault.common.api.pagination import paginate
from trackvault.common.api.params import UUID_PATTERN, date_or_none
from trackvault.common.permissions import SupplierPermission
from trackvault.payments.services import BalanceService
from trackvault.suppliers.api.serializers import (
    SupplierBalanceSerializer,
    SupplierCreateSerializer,
    SupplierSerializer,
    SupplierUpdateSerializer,
)
from trackvault.suppliers.models import Supplier
from trackvault.suppliers.selectors import get_supplier, search_suppliers
from trackvault.suppliers.services import SupplierService


def _actor_id(request) -> int | None:
    return request.user.id if request.user and request.user.is_authenticated else None


class SupplierViewSet(viewsets.ViewSet):
    permission_classes = [SupplierPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = SupplierSerializer
    queryset = Supplier.objects.none()

    @extend_schema(
        tags=["Suppliers"],
        responses={200: SupplierSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="q", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = search_suppliers(
            q=request.query_params.get("q", ""),
            status=request.query_params.get("status") or None,
        )
        return paginate(request, qs, SupplierSerializer)

    @extend_schema(tags=["Suppliers"], request=SupplierCreateSerializer, responses={201: SupplierSerializer})
    def create(self, request):
        ser = SupplierCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        supplier = SupplierService.create_supplier(actor_user_id=_actor_id(request), **ser.validated_data)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Suppliers"], responses={200: SupplierSerializer})
    def retrieve(self, request, pk=None):
        supplier = get_supplier(supplier_id=UUID(str(pk)))
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Suppliers"], request=SupplierUpdateSerializer, responses={200: SupplierSerializer})
    def partial_update(self, request, pk=None):
        ser = SupplierUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        supplier = SupplierService.update_supplier(
            actor_user_id=_actor_id(request),
            supplier_id=UUID(str(pk)),
            data=ser.validated_data,
        )
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Suppliers"], request=SupplierUpdateSerializer, responses={200: SupplierSerializer})
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    @extend_schema(tags=["Suppliers"], responses={204: None})
    def destroy(self, request, pk=None):
        SupplierService.delete_supplier(actor_user_id=_actor_id(request), supplier_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Suppliers"],
        responses={200: SupplierBalanceSerializer},
        parameters=[
            OpenApiParameter(name="from_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="to_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    @action(detail=True, methods=["get"], url_path="balance")
    def balance(self, request, pk=None):
        """
        /suppliers/<id>/balance/?from_date=&to_date=
        Total collections minus total payments, optionally within a date window.
        """
        balance = BalanceService.calculate_balance(
            supplier_id=UUID(str(pk)),
            from_date=date_or_none(request.query_params.get("from_date"), "from_date"),
            to_date=date_or_none(request.query_params.get("to_date"), "to_date"),
        )
        return Response(SupplierBalanceSerializer(balance).data, status=status.HTTP_200_OK)
