# trackvault/iam/openapi.py
from __future__ import annotations

from drf_spectacular.extensions import OpenApiAuthenticationExtension

from trackvault.iam.auth import TokenCookies


class CookieOrHeaderJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    """
    Documents both token sources accepted by CookieOrHeaderJWTAuthentication.
    """
    target_class = "trackvault.iam.auth.CookieOrHeaderJWTAuthentication"
    name = ["BearerJWT", "AccessCookie"]

    def get_security_definition(self, auto_schema):
        return [
            {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
            {"type": "apiKey", "in": "cookie", "name": TokenCookies.from_settings().access_name},
        ]
