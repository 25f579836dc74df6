# trackvault/iam/auth.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication


@dataclass(frozen=True)
class TokenCookies:
    """
    Cookie names and flags for the browser session, read from SIMPLE_JWT.
    """
    access_name: str
    refresh_name: str
    access_max_age: int
    refresh_max_age: int
    secure: bool
    samesite: str

    @classmethod
    def from_settings(cls) -> "TokenCookies":
        cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
        return cls(
            access_name=cfg.get("AUTH_COOKIE", "tv_access"),
            refresh_name=cfg.get("AUTH_COOKIE_REFRESH", "tv_refresh"),
            access_max_age=_lifetime_seconds(cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=15))),
            refresh_max_age=_lifetime_seconds(cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
            secure=bool(cfg.get("AUTH_COOKIE_SECURE", False)),
            samesite=cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
        )

    def attach(self, response, *, access: str, refresh: str) -> None:
        for name, value, max_age in (
            (self.access_name, access, self.access_max_age),
            (self.refresh_name, refresh, self.refresh_max_age),
        ):
            response.set_cookie(
                name,
                value,
                max_age=max_age or None,
                httponly=True,
                secure=self.secure,
                samesite=self.samesite,
                path="/",
            )

    def clear(self, response) -> None:
        response.delete_cookie(self.access_name, path="/")
        response.delete_cookie(self.refresh_name, path="/")


def _lifetime_seconds(value) -> int:
    # 0 -> session cookie
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Access token from `Authorization: Bearer <access>` (mobile client) or,
    when no header is sent, from the HttpOnly access cookie (browser).
    A header always wins over the cookie.
    """

    def raw_token_from(self, request) -> bytes | None:
        header = self.get_header(request)
        if header is not None:
            return self.get_raw_token(header)

        cookie = request.COOKIES.get(TokenCookies.from_settings().access_name)
        return cookie.encode("utf-8") if cookie else None

    def authenticate(self, request):
        raw_token = self.raw_token_from(request)
        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token
