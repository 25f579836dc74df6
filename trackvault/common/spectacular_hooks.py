# trackvault/common/spectacular_hooks.py
from __future__ import annotations

PRIMARY_PREFIX = "/api/v1/"


def preprocess_exclude_legacy_api(endpoints):
    """
    The API is mounted twice (/api/v1/ and the /api/ alias). Publish only the
    versioned copy so operationIds stay unique; non-API paths pass through.
    """
    return [
        endpoint
        for endpoint in endpoints
        if endpoint[0].startswith(PRIMARY_PREFIX) or not endpoint[0].startswith("/api/")
    ]
