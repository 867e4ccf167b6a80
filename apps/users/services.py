"""
users/services.py
=================
Identity for the ledger: turning credentials into JWT pairs and path ids
into live principals. Ledger services receive the resolved User as caller.

Function index:
  login_user(email, password)     → dict (token pair + user)
  refresh_tokens(raw_refresh)     → dict (token pair)
  get_active_user(user_id)        → User | None
  get_any_user(user_id)           → User | None
  describe_principal(user)        → dict (user + ledger roles)
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.utils import timezone

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.ledger.services import is_chief_medical_officer
from apps.records.services import get_physician_stats

from .exceptions import AccountDeactivatedError, AuthenticationError, InvalidRefreshToken

logger = logging.getLogger(__name__)
User = get_user_model()


def _token_pair(refresh: RefreshToken) -> dict:
    return {
        "access":     str(refresh.access_token),
        "refresh":    str(refresh),
        "token_type": "Bearer",
    }


# ===========================================================================
# TOKENS
# ===========================================================================

def login_user(email: str, password: str) -> dict:
    """
    Authenticate by email and password.

    soft_delete() also clears is_active, so ModelBackend refuses retired
    accounts before they get here. The is_deleted check covers accounts an
    admin re-activated without clearing is_deleted.
    """
    user = authenticate(username=email, password=password)

    if user is None:
        logger.warning("Login rejected. email=%s", email)
        raise AuthenticationError("Invalid email or password.")
    if user.is_deleted:
        logger.warning("Login rejected for deleted account. user_id=%s", user.pk)
        raise AccountDeactivatedError("Account disabled.")

    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])

    logger.info("Principal logged in. user_id=%s", user.pk)

    return {**_token_pair(RefreshToken.for_user(user)), "user": user}


def refresh_tokens(raw_refresh: str) -> dict:
    try:
        refresh = RefreshToken(raw_refresh)
    except TokenError:
        raise InvalidRefreshToken()
    return _token_pair(refresh)


# ===========================================================================
# PRINCIPALS
# ===========================================================================

def get_active_user(user_id):
    """
    Resolve a user id to a live principal, or None.
    Used where the ledger is about to hand the user new rights (granting),
    which a retired account must not receive.
    """
    return User.objects.live().filter(pk=user_id).first()


def get_any_user(user_id):
    """
    Resolve a user id including retired principals, or None.
    Revocation and read-only lookups must still reach soft-deleted users:
    their grants and statistics stay on the ledger.
    """
    return User.objects.filter(pk=user_id).first()


def describe_principal(user) -> dict:
    """The caller as the ledger sees it: who they are and which roles they hold."""
    return {
        "user":                     user,
        "is_chief_medical_officer": is_chief_medical_officer(user),
        "records_created":          get_physician_stats(user).record_count,
        "grants_held":              user.medical_access_grants.count(),
    }
