"""
records/api.py
==============
Django-ninja router for the records app.

Endpoints:
  POST   /records/                                   create_record
  GET    /records/{record_id}/                       get_record
  POST   /records/{record_id}/access/                access_data
  POST   /records/{record_id}/archive/               archive_record
  GET    /records/{record_id}/grants/{staff_id}/     get_grant
  PUT    /records/{record_id}/grants/{staff_id}/     grant_access
  DELETE /records/{record_id}/grants/{staff_id}/     revoke_access
  GET    /records/physicians/{physician_id}/stats/   physician_stats

Patterns followed from users/api.py:
  - ninja Router (registered on the main API in config/api.py)
  - JWT bearer auth via get_current_user; the authenticated user is the caller
  - LedgerError → core.errors.ledger_error_response (status by error kind)
  - ValidationError → 400
  - HTTP 201 for creates, 200 for everything else, 204 for revoke
  - Unknown staff / physician ids are rejected here, before any service call.
    Granting needs a live user; revocation and stats also reach retired ones.
  - Anything unexpected is logged with logger.exception and returned as 500
"""

import logging
from http import HTTPStatus
from uuid import UUID

from django.core.exceptions import ValidationError
from ninja import Router

from apps.ledger.exceptions import LedgerError
from apps.users.services import get_active_user, get_any_user
from core.auth import JWTBearer, get_current_user
from core.errors import (
    LEDGER_ERROR_RESPONSES,
    error_response,
    ledger_error_response,
    validation_error_response,
)

from .schemas import (
    AccessDataSchema,
    AccessGrantSchema,
    CreateRecordSchema,
    GrantAccessSchema,
    MedicalRecordSchema,
    PhysicianStatsSchema,
)
from . import services

logger = logging.getLogger(__name__)
router = Router(tags=["Medical Records"])
jwt_auth = JWTBearer()


def _unknown_user(field: str):
    return error_response(
        HTTPStatus.BAD_REQUEST,
        "No active user found with this id.",
        code="user_not_found",
        field=field,
    )


# ===========================================================================
# RECORD ENDPOINTS
# ===========================================================================

@router.post(
    "/",
    auth=jwt_auth,
    response={HTTPStatus.CREATED: MedicalRecordSchema, **LEDGER_ERROR_RESPONSES},
    summary="Create a medical record",
    description="The caller becomes the record's physician. Returns the new record; its id is sequential.",
)
def create_record(request, data: CreateRecordSchema):
    user = get_current_user(request)
    try:
        record = services.create_medical_record(user, data.category, data.data_volume)
        return HTTPStatus.CREATED, record
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error creating medical record. user_id=%s", user.pk)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.get(
    "/{record_id}/",
    auth=jwt_auth,
    response={HTTPStatus.OK: MedicalRecordSchema, **LEDGER_ERROR_RESPONSES},
    summary="Get a medical record",
)
def get_record(request, record_id: int):
    record = services.get_medical_record(record_id)
    if record is None:
        return error_response(HTTPStatus.NOT_FOUND, "Medical record not found.", code="record_not_found")
    return HTTPStatus.OK, record


@router.post(
    "/{record_id}/access/",
    auth=jwt_auth,
    response={HTTPStatus.OK: MedicalRecordSchema, **LEDGER_ERROR_RESPONSES},
    summary="Access medical data",
    description=(
        "Consume part of the record's data volume. Allowed for the physician, "
        "or for staff whose grant limit covers this single access."
    ),
)
def access_data(request, record_id: int, data: AccessDataSchema):
    user = get_current_user(request)
    try:
        record = services.access_medical_data(user, record_id, data.access_volume)
        return HTTPStatus.OK, record
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error accessing medical data. record_id=%s user_id=%s", record_id, user.pk)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.post(
    "/{record_id}/archive/",
    auth=jwt_auth,
    response={HTTPStatus.OK: MedicalRecordSchema, **LEDGER_ERROR_RESPONSES},
    summary="Archive a medical record",
    description="Physician only. Archived records reject all data access. Archiving twice is a no-op.",
)
def archive_record(request, record_id: int):
    user = get_current_user(request)
    try:
        record = services.archive_record(user, record_id)
        return HTTPStatus.OK, record
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error archiving record. record_id=%s", record_id)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


# ===========================================================================
# ACCESS GRANT ENDPOINTS
# ===========================================================================

@router.get(
    "/{record_id}/grants/{staff_id}/",
    auth=jwt_auth,
    response={HTTPStatus.OK: AccessGrantSchema, **LEDGER_ERROR_RESPONSES},
    summary="Get a staff member's access privilege on a record",
)
def get_grant(request, record_id: int, staff_id: UUID):
    grant = services.get_access_privilege(record_id, staff_id)
    if grant is None:
        return error_response(HTTPStatus.NOT_FOUND, "No access privilege found.", code="grant_not_found")
    return HTTPStatus.OK, grant


@router.put(
    "/{record_id}/grants/{staff_id}/",
    auth=jwt_auth,
    response={HTTPStatus.OK: AccessGrantSchema, **LEDGER_ERROR_RESPONSES},
    summary="Grant a staff member access to a record",
    description="Physician only. Replaces any existing grant for the same staff member.",
)
def grant_access(request, record_id: int, staff_id: UUID, data: GrantAccessSchema):
    user  = get_current_user(request)
    staff = get_active_user(staff_id)
    if staff is None:
        return _unknown_user("staff_id")
    try:
        grant = services.grant_medical_access(user, record_id, staff, data.access_limit)
        return HTTPStatus.OK, grant
    except LedgerError as e:
        return ledger_error_response(e)
    except ValidationError as e:
        return validation_error_response(e)
    except Exception:
        logger.exception("Unexpected error granting access. record_id=%s staff_id=%s", record_id, staff_id)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.delete(
    "/{record_id}/grants/{staff_id}/",
    auth=jwt_auth,
    response={HTTPStatus.NO_CONTENT: None, **LEDGER_ERROR_RESPONSES},
    summary="Revoke a staff member's access to a record",
    description="Physician only. Revoking a grant that does not exist succeeds.",
)
def revoke_access(request, record_id: int, staff_id: UUID):
    user  = get_current_user(request)
    staff = get_any_user(staff_id)
    if staff is None:
        return _unknown_user("staff_id")
    try:
        services.revoke_medical_access(user, record_id, staff)
        return HTTPStatus.NO_CONTENT, None
    except LedgerError as e:
        return ledger_error_response(e)
    except Exception:
        logger.exception("Unexpected error revoking access. record_id=%s staff_id=%s", record_id, staff_id)
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


# ===========================================================================
# PHYSICIAN STATS
# ===========================================================================

@router.get(
    "/physicians/{physician_id}/stats/",
    auth=jwt_auth,
    response={HTTPStatus.OK: PhysicianStatsSchema, **LEDGER_ERROR_RESPONSES},
    summary="Get a physician's aggregate statistics",
    description="Zero-valued for users who never created a record.",
)
def physician_stats(request, physician_id: UUID):
    physician = get_any_user(physician_id)
    if physician is None:
        return error_response(HTTPStatus.NOT_FOUND, "User not found.", code="user_not_found")
    return HTTPStatus.OK, services.get_physician_stats(physician)
