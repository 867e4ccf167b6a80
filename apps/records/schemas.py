"""
records/schemas.py
==================
All input and response schemas for the records API.

Patterns followed from users/schemas.py:
  - ninja.Schema base class
  - Separate input schemas (what the client sends) from response schemas (what we return)
  - All response schemas use Config: from_attributes = True
  - ErrorSchema is shared, imported from the users app

Input schemas deliberately stop at type, sign and storage-width checks.
Zero volumes and over-long categories reach the service layer, which decides
which error wins (e.g. MaintenanceActive beats InvalidDataSize). Validating
them here would surface a 422 ahead of the gate.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema
from pydantic import Field

from .models import MAX_VOLUME


# ===========================================================================
# INPUT SCHEMAS
# ===========================================================================

class CreateRecordSchema(Schema):
    category:    str
    data_volume: int = Field(..., ge=0, le=MAX_VOLUME, description="Total quota. Must be greater than zero.")


class AccessDataSchema(Schema):
    access_volume: int = Field(..., ge=0, le=MAX_VOLUME, description="Volume consumed by this single access.")


class GrantAccessSchema(Schema):
    access_limit: int = Field(..., ge=0, le=MAX_VOLUME, description="Maximum volume per single access call.")


# ===========================================================================
# RESPONSE SCHEMAS
# ===========================================================================

class MedicalRecordSchema(Schema):
    id:               int
    physician_id:     UUID
    category:         str
    data_volume:      int
    accessed_volume:  int
    remaining_volume: int
    created_at_block: int
    is_active:        bool
    created_at:       datetime

    class Config:
        from_attributes = True


class AccessGrantSchema(Schema):
    record_id:    int
    staff_id:     UUID
    can_access:   bool
    access_limit: int
    granted_at:   datetime

    class Config:
        from_attributes = True


class PhysicianStatsSchema(Schema):
    physician_id:       UUID
    record_count:       int
    total_data_managed: int

    class Config:
        from_attributes = True
