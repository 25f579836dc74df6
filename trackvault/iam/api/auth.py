# trackvault/iam/api/auth.py

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from trackvault.iam.api.schema_serializers import (
    LoginRequestSerializer,
    LoginResponseSerializer,
    LogoutResponseSerializer,
    RefreshRequestSerializer,
    RefreshResponseSerializer,
)
from trackvault.iam.auth import TokenCookies

logger = logging.getLogger(__name__)


class LoginView(APIView):
    """
    Username/password -> access + refresh.
    The pair is in the body for the mobile client and in HttpOnly cookies for browsers.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(request=LoginRequestSerializer, responses={200: LoginResponseSerializer}, tags=["IAM"])
    def post(self, request):
        tokens = TokenObtainPairSerializer(data=request.data)
        tokens.is_valid(raise_exception=True)
        pair = tokens.validated_data

        logger.info("Login for %s", request.data.get("username"))

        response = Response({"detail": "login ok", "access": pair["access"], "refresh": pair["refresh"]})
        TokenCookies.from_settings().attach(response, access=pair["access"], refresh=pair["refresh"])
        return response


class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(request=RefreshRequestSerializer, responses={200: RefreshResponseSerializer}, tags=["IAM"])
    def post(self, request):
        cookies = TokenCookies.from_settings()
        refresh = request.data.get("refresh") or request.COOKIES.get(cookies.refresh_name)

        tokens = TokenRefreshSerializer(data={"refresh": refresh})
        tokens.is_valid(raise_exception=True)
        access = tokens.validated_data["access"]

        response = Response({"detail": "refreshed", "access": access})
        # rotation hands back a new refresh token; otherwise reuse the one sent
        cookies.attach(response, access=access, refresh=tokens.validated_data.get("refresh", refresh))
        return response


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: LogoutResponseSerializer}, tags=["IAM"])
    def post(self, request):
        response = Response({"detail": "logged out"})
        TokenCookies.from_settings().clear(response)
        logger.info("Logout for user %s", request.user.pk)
        return response
