import logging
from http import HTTPStatus

from ninja import Router

from core.auth import JWTBearer, get_current_user
from core.errors import error_response

from .exceptions import AuthenticationError, InvalidRefreshToken
from .schemas import (
    ErrorSchema,
    LoginResponseSchema,
    LoginSchema,
    PrincipalProfileSchema,
    RefreshSchema,
    TokenPairSchema,
)
from .services import describe_principal, login_user, refresh_tokens

logger = logging.getLogger(__name__)
router = Router(tags=["Users"])
jwt_auth = JWTBearer()


@router.post(
    "/login",
    response={
        HTTPStatus.OK: LoginResponseSchema,
        HTTPStatus.UNAUTHORIZED: ErrorSchema,
        HTTPStatus.INTERNAL_SERVER_ERROR: ErrorSchema,
    },
)
def login(request, body: LoginSchema):
    """Exchange email and password for a Bearer token pair."""
    try:
        return HTTPStatus.OK, login_user(body.email, body.password)
    except AuthenticationError as e:
        return error_response(HTTPStatus.UNAUTHORIZED, str(e), code="authentication_failed")
    except Exception:
        logger.exception("Unexpected login error")
        return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error.")


@router.post(
    "/refresh",
    response={HTTPStatus.OK: TokenPairSchema, HTTPStatus.BAD_REQUEST: ErrorSchema},
)
def refresh(request, body: RefreshSchema):
    try:
        return HTTPStatus.OK, refresh_tokens(body.refresh)
    except InvalidRefreshToken as e:
        return error_response(HTTPStatus.BAD_REQUEST, str(e), code="invalid_refresh_token", field="refresh")


@router.get(
    "/me",
    auth=jwt_auth,
    response={HTTPStatus.OK: PrincipalProfileSchema, HTTPStatus.UNAUTHORIZED: ErrorSchema},
)
def me(request):
    """The authenticated caller and the ledger roles they hold right now."""
    return HTTPStatus.OK, describe_principal(get_current_user(request))
