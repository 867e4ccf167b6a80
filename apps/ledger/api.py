"""
ledger/api.py
=============
Django-ninja router for the administrative gate.

Endpoints:
  GET    /system/                               system_status
  POST   /system/maintenance/enable             enable_maintenance
  POST   /system/maintenance/disable            disable_maintenance
  GET    /system/administrator/{user_id}/       is_chief_medical_officer

Patterns followed from records/api.py:
  - JWT bearer auth on every endpoint
  - LedgerError caught and mapped via core.errors.ledger_error_response
  - Unexpected failures on writes logged with logger.exception, returned as 500
"""

import logging
from http import HTTPStatus
from uuid import UUID

from ninja import Router

from apps.users.services import get_any_user
from core.auth import JWTBearer, get_current_user
from core.errors import LEDGER_ERROR_RESPONSES, error_response, ledger_error_response

from .exceptions import LedgerError, LedgerNotInitialized
from .schemas import AdministratorCheckSchema, SystemStateSchema
from . import services

logger = logging.getLogger(__name__)
router = Router(tags=["System"])
jwt_auth = JWTBearer()


@router.get(
    "/",
    auth=jwt_auth,
    response={HTTPStatus.OK: SystemStateSchema, **LEDGER_ERROR_RESPONSES},
    summary="Ledger status",
    description="Total records, maintenance flag, block height and administrator.",
)
def system_status(request):
    state = services.get_system_state()
    if state is None:
        return ledger_error_response(LedgerNotInitialized())
    return HTTPStatus.OK, state


@router.post(
    "/maintenance/enable",
    auth=jwt_auth,
    response={HTTPStatus.OK: SystemStateSchema, **LEDGER_ERROR_RESPONSES},
    summary="Enable maintenance (administrator only)",
    description=(
        "Blocks record creation and data access. "
        "Grant, revoke and archive stay available."
    ),
)
def enable_maintenance(request):
    user = get_current_user(request)
    try:
        return HTTPStatus.OK, services.enable_maintenance(user)
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error enabling maintenance. user_id=%s", user.pk)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.post(
    "/maintenance/disable",
    auth=jwt_auth,
    response={HTTPStatus.OK: SystemStateSchema, **LEDGER_ERROR_RESPONSES},
    summary="Disable maintenance (administrator only)",
)
def disable_maintenance(request):
    user = get_current_user(request)
    try:
        return HTTPStatus.OK, services.disable_maintenance(user)
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error disabling maintenance. user_id=%s", user.pk)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.get(
    "/administrator/{user_id}/",
    auth=jwt_auth,
    response={HTTPStatus.OK: AdministratorCheckSchema, **LEDGER_ERROR_RESPONSES},
    summary="Is this user the chief medical officer?",
)
def is_chief_medical_officer(request, user_id: UUID):
    identity = get_any_user(user_id)
    if identity is None:
        return error_response(HTTPStatus.NOT_FOUND, "User not found.", code="user_not_found")
    return HTTPStatus.OK, {
        "user_id":                  identity.pk,
        "is_chief_medical_officer": services.is_chief_medical_officer(identity),
    }
