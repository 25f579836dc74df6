# trackvault/products/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from trackvault.common.api.pagination import paginate
from trackvault.common.api.params import UUID_PATTERN, bool_param, date_or_none
from trackvault.common.permissions import ProductPermission
from trackvault.products.api.serializers import (
    ProductCreateSerializer,
    ProductRateCreateSerializer,
    ProductRateSerializer,
    ProductRateSupersedeSerializer,
    ProductSerializer,
    ProductUpdateSerializer,
    SupersedeResultSerializer,
)
from trackvault.products.models import Product, ProductRate
from trackvault.products.selectors import get_product, search_products
from trackvault.products.services import ProductRateService, ProductService


def _actor_id(request) -> int | None:
    return request.user.id if request.user and request.user.is_authenticated else None


class ProductViewSet(viewsets.ViewSet):
    """
    Products v1:
    - CRUD
    - rates: GET (list) / POST (add)
    - rates/supersede: close the open rate and start a new one
    - current-rate: resolve the rate for a unit on a date
    """
    permission_classes = [ProductPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = ProductSerializer
    queryset = Product.objects.none()

    @extend_schema(
        tags=["Products"],
        responses={200: ProductSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="q", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = search_products(
            q=request.query_params.get("q", ""),
            status=request.query_params.get("status") or None,
        )
        return paginate(request, qs, ProductSerializer)

    @extend_schema(tags=["Products"], request=ProductCreateSerializer, responses={201: ProductSerializer})
    def create(self, request):
        ser = ProductCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        product = ProductService.create_product(actor_user_id=_actor_id(request), **ser.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Products"], responses={200: ProductSerializer})
    def retrieve(self, request, pk=None):
        product = get_product(product_id=UUID(str(pk)))
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Products"], request=ProductUpdateSerializer, responses={200: ProductSerializer})
    def partial_update(self, request, pk=None):
        ser = ProductUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        product = ProductService.update_product(
            actor_user_id=_actor_id(request),
            product_id=UUID(str(pk)),
            data=ser.validated_data,
        )
        return Response(ProductSerializer(product).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Products"], request=ProductUpdateSerializer, responses={200: ProductSerializer})
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    @extend_schema(tags=["Products"], responses={204: None})
    def destroy(self, request, pk=None):
        ProductService.delete_product(actor_user_id=_actor_id(request), product_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------
    # Rates
    # -------------------------

    @extend_schema(
        tags=["Product Rates"],
        responses={200: ProductRateSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="active_only",
                type=OpenApiTypes.BOOL,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only return active rates.",
            ),
        ],
    )
    @action(detail=True, methods=["get"], url_path="rates")
    def rates(self, request, pk=None):
        product = get_product(product_id=UUID(str(pk)))
        rates = ProductRateService().resolver.list_rates_for_product(
            product.id,
            active_only=bool_param(request.query_params.get("active_only")),
        )
        return Response(ProductRateSerializer(rates, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Product Rates"],
        request=ProductRateCreateSerializer,
        responses={201: ProductRateSerializer},
    )
    @rates.mapping.post
    def add_rate(self, request, pk=None):
        ser = ProductRateCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        rate = ProductRateService().add_rate(
            actor_user_id=_actor_id(request),
            product_id=UUID(str(pk)),
            **ser.validated_data,
        )
        return Response(ProductRateSerializer(rate).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Product Rates"],
        request=ProductRateSupersedeSerializer,
        responses={201: SupersedeResultSerializer},
    )
    @action(detail=True, methods=["post"], url_path="rates/supersede")
    def supersede_rate(self, request, pk=None):
        ser = ProductRateSupersedeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = ProductRateService().supersede_rate(
            actor_user_id=_actor_id(request),
            product_id=UUID(str(pk)),
            **ser.validated_data,
        )
        return Response(SupersedeResultSerializer(result).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Product Rates"],
        responses={200: ProductRateSerializer},
        parameters=[
            OpenApiParameter(name="unit", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(
                name="date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Reference date (YYYY-MM-DD). Defaults to today.",
            ),
        ],
    )
    @action(detail=True, methods=["get"], url_path="current-rate")
    def current_rate(self, request, pk=None):
        rate = ProductRateService().resolver.resolve_current_rate(
            UUID(str(pk)),
            request.query_params.get("unit", ""),
            date_or_none(request.query_params.get("date"), "date"),
        )
        return Response(ProductRateSerializer(rate).data, status=status.HTTP_200_OK)


class ProductRateViewSet(viewsets.ViewSet):
    """
    State changes on a single rate. Rates are created through
    /products/<id>/rates/ and never edited in place.
    """
    permission_classes = [ProductPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = ProductRateSerializer
    queryset = ProductRate.objects.none()

    @extend_schema(tags=["Product Rates"], request=None, responses={200: ProductRateSerializer})
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        rate = ProductRateService().deactivate_rate(actor_user_id=_actor_id(request), rate_id=UUID(str(pk)))
        return Response(ProductRateSerializer(rate).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Product Rates"], request=None, responses={200: ProductRateSerializer})
    @action(detail=True, methods=["post"], url_path="activate")
    def activate(self, request, pk=None):
        rate = ProductRateService().activate_rate(actor_user_id=_actor_id(request), rate_id=UUID(str(pk)))
        return Response(ProductRateSerializer(rate).data, status=status.HTTP_200_OK)
