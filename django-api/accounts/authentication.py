"""DRF authentication resolving a JWT access token to the calling user."""

from django.apps import apps
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from accounts.models import User
from accounts.tokens import TokenService

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def token_service() -> TokenService:
    return apps.get_app_config("accounts").token_service


def bearer_token(request) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header, if present."""
    parts = get_authorization_header(request).split()
    if len(parts) != 2 or parts[0].lower() != b"bearer":
        return None
    return parts[1].decode("latin-1")


class JWTAuthentication(BaseAuthentication):
    """Reads the bearer header first, then the access token cookie."""

    keyword = "Bearer"

    def authenticate(self, request):
        token = bearer_token(request) or request.COOKIES.get(ACCESS_COOKIE)
        if not token:
            return None

        payload = token_service().decode_access_token(token)
        if payload is None:
            raise AuthenticationFailed("Invalid or expired access token")

        user = User.objects.filter(id=payload["sub"], is_active=True).first()
        if user is None:
            raise AuthenticationFailed("User not found")
        return user, payload

    def authenticate_header(self, request) -> str:
        return self.keyword
