# trackvault/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError as DRFValidationError

from trackvault.audit.api.serializers import AuditEventSerializer
from trackvault.audit.models import AuditEvent
from trackvault.audit.selectors import list_audit_events
from trackvault.common.api.pagination import paginate
from trackvault.common.api.params import date_or_none, uuid_or_none
from trackvault.common.permissions import AuditPermission


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Audit trail (admin only, read-only).
    """
    permission_classes = [AuditPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description='Exact code, or a family prefix ending in "." (e.g. "product_rate.").',
            ),
            OpenApiParameter(name="actor_user_id", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="from_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="to_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        params = request.query_params

        actor_user_id = None
        if params.get("actor_user_id"):
            try:
                actor_user_id = int(params["actor_user_id"])
            except ValueError:
                raise DRFValidationError({"actor_user_id": "Invalid integer"})

        qs = list_audit_events(
            entity_type=params.get("entity_type") or None,
            entity_id=uuid_or_none(params.get("entity_id"), "entity_id"),
            event_code=params.get("event_code") or None,
            actor_user_id=actor_user_id,
            from_date=date_or_none(params.get("from_date"), "from_date"),
            to_date=date_or_none(params.get("to_date"), "to_date"),
        )
        return paginate(request, qs, AuditEventSerializer)
