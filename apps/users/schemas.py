from datetime import datetime
from typing import Optional
from uuid import UUID

from ninja import Schema
from pydantic import EmailStr, Field, field_validator


# ===========================================================================
# INPUT
# ===========================================================================

class LoginSchema(Schema):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalise_email(cls, v):
        return v.strip().lower()


class RefreshSchema(Schema):
    refresh: str = Field(..., min_length=1)


# ===========================================================================
# OUTPUT
# ===========================================================================

class PrincipalSchema(Schema):
    id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    created_at: datetime

    class Config:
        from_attributes = True


class PrincipalProfileSchema(Schema):
    """/users/me: the caller plus the ledger roles they currently hold."""
    user: PrincipalSchema
    is_chief_medical_officer: bool
    records_created: int
    grants_held: int


class TokenPairSchema(Schema):
    access: str
    refresh: str
    token_type: str = "Bearer"


class LoginResponseSchema(TokenPairSchema):
    user: PrincipalSchema


class ErrorSchema(Schema):
    """
    Shared error body for every app.
    code carries the ledger error kind (e.g. "maintenance_active") when the
    failure came from a LedgerError.
    """
    detail: str
    field: Optional[str] = None
    code: Optional[str] = None
    status_code: Optional[int] = None
