"""HTTP handlers for registration and session tokens."""

import logging

from rest_framework import exceptions, status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authentication import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    JWTAuthentication,
    bearer_token,
    token_service,
)
from accounts.models import User
from accounts.serializers import LoginSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class EmailTakenError(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User already exists"
    default_code = "email_taken"


class PublicAPIView(APIView):
    """Unauthenticated endpoint that still answers auth failures with 401."""

    authentication_classes = []
    permission_classes = [AllowAny]

    def get_authenticate_header(self, request: Request) -> str:
        return JWTAuthentication.keyword


def set_auth_cookie(response: Response, name: str, token: str, max_age: int) -> None:
    secure = token_service().config.secure_cookies
    response.set_cookie(
        name,
        token,
        max_age=max_age,
        httponly=True,
        secure=secure,
        samesite="None" if secure else "Lax",
    )


class RegisterView(PublicAPIView):
    """Handler for POST /api/auth/register"""

    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if User.objects.filter(email__iexact=data["email"]).exists():
            raise EmailTakenError()

        user = User.objects.create_user(
            email=data["email"], user_name=data["user_name"], password=data["password"]
        )
        logger.info(f"Registered user {user.id}")
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(PublicAPIView):
    """Handler for POST /api/auth/login"""

    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = User.objects.filter(email__iexact=data["email"], is_active=True).first()
        if user is None or not user.check_password(data["password"]):
            logger.warning("Failed login attempt")
            raise exceptions.AuthenticationFailed("Invalid email or password")

        tokens = token_service()
        access_token = tokens.issue_access_token(user)
        refresh_token = tokens.issue_refresh_token(user)
        user.refresh_token = refresh_token
        user.save(update_fields=["refresh_token", "updated_at"])

        response = Response(
            {
                "access_token": access_token,
                "refresh_token": refresh_token,
                "user": UserSerializer(user).data,
            }
        )
        config = tokens.config
        set_auth_cookie(
            response, ACCESS_COOKIE, access_token, int(config.access_lifetime.total_seconds())
        )
        set_auth_cookie(
            response, REFRESH_COOKIE, refresh_token, int(config.refresh_lifetime.total_seconds())
        )
        return response


class RefreshView(PublicAPIView):
    """Handler for POST /api/auth/refresh

    The refresh token must match the one stored at the last login.
    """

    def post(self, request: Request) -> Response:
        incoming = request.COOKIES.get(REFRESH_COOKIE) or bearer_token(request)
        if not incoming:
            raise exceptions.NotAuthenticated("Refresh token is required")

        tokens = token_service()
        payload = tokens.decode_refresh_token(incoming)
        if payload is None:
            raise exceptions.AuthenticationFailed("Invalid refresh token")

        user = User.objects.filter(id=payload["sub"], is_active=True).first()
        if user is None or user.refresh_token != incoming:
            raise exceptions.AuthenticationFailed("Invalid refresh token")

        access_token = tokens.issue_access_token(user)
        response = Response({"access_token": access_token})
        set_auth_cookie(
            response,
            ACCESS_COOKIE,
            access_token,
            int(tokens.config.access_lifetime.total_seconds()),
        )
        return response


class LogoutView(APIView):
    """Handler for POST /api/auth/logout"""

    def post(self, request: Request) -> Response:
        user = request.user
        user.refresh_token = ""
        user.save(update_fields=["refresh_token", "updated_at"])

        response = Response({"message": "User logged out successfully"})
        response.delete_cookie(ACCESS_COOKIE)
        response.delete_cookie(REFRESH_COOKIE)
        return response


class MeView(APIView):
    """Handler for GET /api/auth/me"""

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)
