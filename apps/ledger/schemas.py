"""
ledger/schemas.py
=================
Response schemas for the system (administrative gate) API.
The gate takes no input bodies: the caller identity is the only input.
"""

from datetime import datetime
from uuid import UUID

from ninja import Schema


class SystemStateSchema(Schema):
    """Current ledger status. Returned by GET /system/ and the maintenance toggles."""
    total_records:      int
    maintenance_active: bool
    block_height:       int
    administrator_id:   UUID
    initialized_at:     datetime

    class Config:
        from_attributes = True


class AdministratorCheckSchema(Schema):
    user_id:                  UUID
    is_chief_medical_officer: bool
