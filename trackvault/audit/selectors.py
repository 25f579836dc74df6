# trackvault/audit/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet

from trackvault.audit.models import AuditEvent


def list_audit_events(
    *,
    entity_type: str | None = None,
    entity_id: UUID | None = None,
    event_code: str | None = None,
    actor_user_id: int | None = None,
    from_date: date | None = None,
    to_date: date | None = None,
) -> QuerySet[AuditEvent]:
    """
    `event_code` ending in "." matches the whole family,
    e.g. "product_rate." -> created/closed/activated/deactivated.
    """
    qs = AuditEvent.objects.select_related("actor_user")

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=entity_id)
    if event_code:
        if event_code.endswith("."):
            qs = qs.filter(event_code__startswith=event_code)
        else:
            qs = qs.filter(event_code=event_code)
    if actor_user_id is not None:
        qs = qs.filter(actor_user_id=actor_user_id)
    if from_date:
        qs = qs.filter(occurred_at__date__gte=from_date)
    if to_date:
        qs = qs.filter(occurred_at__date__lte=to_date)

    return qs.order_by("-occurred_at")
