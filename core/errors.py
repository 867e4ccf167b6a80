"""
core/errors.py
==============
Shared error-response helpers for django-ninja routers.

Every router returns (status, body) tuples built here so error bodies are
identical across apps. LedgerError subclasses map to a fixed HTTP status;
the error kind travels verbatim in the body's `code` field.
"""

import logging
from http import HTTPStatus

from django.core.exceptions import ValidationError

from apps.ledger.exceptions import (
    AdministratorOnly,
    CategoryTooLong,
    InsufficientClearance,
    InvalidDataSize,
    LedgerAlreadyInitialized,
    LedgerError,
    LedgerNotInitialized,
    MaintenanceActive,
    RecordDuplicate,
    RecordInactive,
    RecordNotFound,
    UnauthorizedAccess,
)
from apps.users.schemas import ErrorSchema

logger = logging.getLogger(__name__)

LEDGER_ERROR_STATUS = {
    AdministratorOnly:        HTTPStatus.FORBIDDEN,
    UnauthorizedAccess:       HTTPStatus.FORBIDDEN,
    RecordNotFound:           HTTPStatus.NOT_FOUND,
    RecordInactive:           HTTPStatus.GONE,
    InsufficientClearance:    HTTPStatus.CONFLICT,
    RecordDuplicate:          HTTPStatus.CONFLICT,
    LedgerAlreadyInitialized: HTTPStatus.CONFLICT,
    InvalidDataSize:          HTTPStatus.BAD_REQUEST,
    CategoryTooLong:          HTTPStatus.BAD_REQUEST,
    MaintenanceActive:        HTTPStatus.SERVICE_UNAVAILABLE,
    LedgerNotInitialized:     HTTPStatus.SERVICE_UNAVAILABLE,
}

# Response declarations for any endpoint that calls a ledger service.
LEDGER_ERROR_RESPONSES = {
    status: ErrorSchema
    for status in (
        HTTPStatus.BAD_REQUEST,
        HTTPStatus.UNAUTHORIZED,
        HTTPStatus.FORBIDDEN,
        HTTPStatus.NOT_FOUND,
        HTTPStatus.CONFLICT,
        HTTPStatus.GONE,
        HTTPStatus.SERVICE_UNAVAILABLE,
        HTTPStatus.INTERNAL_SERVER_ERROR,
    )
}


def error_response(status: HTTPStatus, message: str, code: str = None, field: str = None):
    return status, {
        "detail": message,
        "field": field,
        "code": code,
        "status_code": int(status),
    }


def ledger_error_status(exc: LedgerError) -> HTTPStatus:
    """Status for the nearest mapped kind in the exception's class hierarchy."""
    for kind in type(exc).__mro__:
        if kind in LEDGER_ERROR_STATUS:
            return LEDGER_ERROR_STATUS[kind]
    return HTTPStatus.BAD_REQUEST


def ledger_error_response(exc: LedgerError):
    status = ledger_error_status(exc)
    logger.warning("Ledger operation rejected. code=%s detail=%s", exc.code, exc.message)
    return error_response(status, exc.message, code=exc.code, field=exc.field)


def validation_error_response(exc: ValidationError):
    messages = exc.message_dict if hasattr(exc, "message_dict") else {"detail": exc.messages}
    detail = "; ".join(
        f"{k}: {', '.join(v) if isinstance(v, list) else v}"
        for k, v in messages.items()
    )
    field = next(iter(messages)) if hasattr(exc, "message_dict") else None
    return error_response(HTTPStatus.BAD_REQUEST, detail, code="invalid", field=field)
