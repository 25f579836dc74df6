# trackvault/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from trackvault.common.permissions import user_roles
from trackvault.iam.api.schema_serializers import MeResponseSerializer


class MeView(APIView):
    """
    Current user and resolved roles; the mobile client gates screens on `roles`.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        user = request.user
        payload = MeResponseSerializer(
            {
                "user": {
                    "id": user.pk,
                    "username": user.get_username(),
                    "email": user.email or None,
                    "is_superuser": user.is_superuser,
                },
                "roles": sorted(user_roles(user)),
            }
        )
        return Response(payload.data)
