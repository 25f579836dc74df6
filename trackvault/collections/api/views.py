# trackvault/collections/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from trackvault.collections.api.serializers import (
    CollectionCreateSerializer,
    CollectionSerializer,
    CollectionUpdateSerializer,
)
from trackvault.collections.models import Collection
from trackvault.collections.selectors import collections_filtered, get_collection
from trackvault.collections.services import CollectionService
from trackvault.common.api.pagination import paginate
from trackvault.common.api.params import UUID_PATTERN, date_or_none, uuid_or_none
from trackvault.common.permissions import CollectionPermission


class CollectionViewSet(viewsets.ViewSet):
    """
    Collections v1: list/retrieve, create (rate resolved when omitted), versioned update, delete.
    """
    permission_classes = [CollectionPermission]
    lookup_value_regex = UUID_PATTERN

    serializer_class = CollectionSerializer
    queryset = Collection.objects.none()

    @extend_schema(
        tags=["Collections"],
        responses={200: CollectionSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="supplier", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="product", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="from_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="to_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = collections_filtered(
            supplier_id=uuid_or_none(request.query_params.get("supplier"), "supplier"),
            product_id=uuid_or_none(request.query_params.get("product"), "product"),
            from_date=date_or_none(request.query_params.get("from_date"), "from_date"),
            to_date=date_or_none(request.query_params.get("to_date"), "to_date"),
        )
        return paginate(request, qs, CollectionSerializer)

    @extend_schema(tags=["Collections"], request=CollectionCreateSerializer, responses={201: CollectionSerializer})
    def create(self, request):
        ser = CollectionCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        actor_id = request.user.id if request.user and request.user.is_authenticated else None
        collection = CollectionService.create_collection(actor_user_id=actor_id, **ser.validated_data)
        return Response(CollectionSerializer(collection).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Collections"], responses={200: CollectionSerializer})
    def retrieve(self, request, pk=None):
        collection = get_collection(collection_id=UUID(str(pk)))
        return Response(CollectionSerializer(collection).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Collections"], request=CollectionUpdateSerializer, responses={200: CollectionSerializer})
    def partial_update(self, request, pk=None):
        ser = CollectionUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        data = dict(ser.validated_data)
        actor_id = request.user.id if request.user and request.user.is_authenticated else None
        collection = CollectionService.update_collection(
            actor_user_id=actor_id,
            collection_id=UUID(str(pk)),
            version=data.pop("version"),
            data=data,
        )
        return Response(CollectionSerializer(collection).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Collections"], request=CollectionUpdateSerializer, responses={200: CollectionSerializer})
    def update(self, request, pk=None):
        return self.partial_update(request, pk=pk)

    @extend_schema(tags=["Collections"], responses={204: None})
    def destroy(self, request, pk=None):
        actor_id = request.user.id if request.user and request.user.is_authenticated else None
        CollectionService.delete_collection(actor_user_id=actor_id, collection_id=UUID(str(pk)))
        return Response(status=status.HTTP_204_NO_CONTENT)
