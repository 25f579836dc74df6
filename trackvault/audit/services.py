# trackvault/audit/services.py
from __future__ import annotations

import json
import logging
from typing import Any, Mapping
from uuid import UUID

from django.core.serializers.json import DjangoJSONEncoder

from trackvault.audit.models import AuditEvent

logger = logging.getLogger(__name__)


def _json_safe(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    # Decimal / date / UUID values become their string forms
    return json.loads(json.dumps(dict(metadata or {}), cls=DjangoJSONEncoder))


class AuditService:
    """
    Append-only audit trail. Each service write ends with exactly one `log`
    call per touched entity, inside the caller's transaction.
    """

    @staticmethod
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        actor_user_id: int | None,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditEvent:
        event = AuditEvent.objects.create(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=actor_user_id,
            metadata=_json_safe(metadata),
        )
        logger.debug("audit %s %s:%s by %s", event_code, entity_type, entity_id, actor_user_id)
        return event
