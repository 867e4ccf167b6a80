"""
core/auth.py
============
Bearer authentication for every django-ninja router.

The authenticated user becomes the caller identity handed to ledger
services. Retired (soft-deleted) accounts are refused even while their
tokens are still unexpired.
"""
from ninja.errors import HttpError
from ninja.security import HttpBearer

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

jwt_authentication = JWTAuthentication()


class JWTBearer(HttpBearer):
    def authenticate(self, request, token: str):
        try:
            validated = jwt_authentication.get_validated_token(token)
            user = jwt_authentication.get_user(validated)
        except (InvalidToken, TokenError, AuthenticationFailed):
            raise HttpError(401, "Invalid or expired token")

        if not user.is_active or getattr(user, "is_deleted", False):
            raise HttpError(401, "User account is retired")

        request.user = user
        return user


def get_current_user(request):
    """The ledger caller for this request. 401 if the endpoint skipped auth."""
    user = getattr(request, "auth", None)
    if user is None:
        raise HttpError(401, "Authentication required")
    return user
