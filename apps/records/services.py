"""
records/services.py
===================
Service layer for the record store, access privilege registry and
physician statistics tracker.

Patterns followed from ledger/services.py:
  - Plain functions (not classes)
  - transaction.atomic for all writes
  - ledger.services.lock_state() first in every write: the SystemState row
    lock serialises the whole ledger, so each call is one atomic step
  - Every constraint is checked before the first write. A raised LedgerError
    therefore never leaves partial state behind.
  - Raises domain exceptions (LedgerError subclasses) for expected failure states
  - Raises Django ValidationError for input-level failures
  - Never returns HTTP responses. The API layer maps exceptions to status codes

Constraint order is part of the contract. Callers observe which error wins
when several constraints fail at once:
  maintenance → shape/range → existence → state/authorisation → capacity
with the single documented twist in access_medical_data, where the capacity
(clearance) check runs before the grant's per-call limit is compared.

Maintenance gates create_medical_record and access_medical_data only.
Grant, revoke and archive stay available while the gate is closed.

Function index:
  create_medical_record(user, category, data_volume)      → MedicalRecord
  access_medical_data(user, record_id, access_volume)     → MedicalRecord
  archive_record(user, record_id)                         → MedicalRecord
  grant_medical_access(user, record_id, staff, limit)     → AccessGrant
  revoke_medical_access(user, record_id, staff)           → None
  get_medical_record(record_id)                           → MedicalRecord | None
  get_access_privilege(record_id, staff)                  → AccessGrant | None
  get_physician_stats(physician)                          → PhysicianStats
"""

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.ledger import services as ledger
from apps.ledger.exceptions import (
    CategoryTooLong,
    InsufficientClearance,
    InvalidDataSize,
    RecordInactive,
    RecordNotFound,
    UnauthorizedAccess,
)

from .models import MAX_CATEGORY_LENGTH, MAX_VOLUME, AccessGrant, MedicalRecord, PhysicianStats

logger = logging.getLogger(__name__)


# ===========================================================================
# INTERNAL HELPERS
# ===========================================================================

def _require_record(record_id: int) -> MedicalRecord:
    """Fetch a record with a row lock. Raises RecordNotFound on absence."""
    try:
        return MedicalRecord.objects.select_for_update().get(pk=record_id)
    except MedicalRecord.DoesNotExist:
        raise RecordNotFound()


def _assert_physician(record: MedicalRecord, user) -> None:
    if not record.is_physician(user):
        raise UnauthorizedAccess(
            "Only the record's physician can perform this action."
        )


def _is_authorised_for(record: MedicalRecord, user, volume: int) -> bool:
    """
    Physician always passes. Anyone else needs a grant whose per-call limit
    covers this single access.
    """
    if record.is_physician(user):
        return True

    grant = get_access_privilege(record.id, user)
    if grant is None:
        return False
    return grant.covers(volume)


def _managed_volume(physician) -> int:
    stats = PhysicianStats.objects.filter(physician=physician).first()
    return stats.total_data_managed if stats else 0


def _record_created(physician, data_volume: int) -> PhysicianStats:
    """
    Physician statistics update. Only called from create_medical_record,
    under the ledger lock.
    """
    stats, _ = PhysicianStats.objects.get_or_create(physician=physician)
    stats.record_count       += 1
    stats.total_data_managed += data_volume
    stats.save(update_fields=["record_count", "total_data_managed", "updated_at"])
    return stats


# ===========================================================================
# CREATE MEDICAL RECORD
# ===========================================================================

@transaction.atomic
def create_medical_record(user, category: str, data_volume: int) -> MedicalRecord:
    """
    Create a record owned by the caller and return it (new id on .id).

    The id is total_records + 1, taken under the ledger lock, so ids form
    the sequence 1, 2, 3, … with no gaps or reuse.
    Raises MaintenanceActive, InvalidDataSize, CategoryTooLong in that order.
    A volume too large to store, or one that would push the physician's
    total_data_managed past MAX_VOLUME, is an InvalidDataSize.
    """
    state = ledger.lock_state()
    ledger.assert_not_in_maintenance(state)

    if data_volume <= 0 or data_volume > MAX_VOLUME:
        raise InvalidDataSize()
    if len(category) > MAX_CATEGORY_LENGTH:
        raise CategoryTooLong()
    if _managed_volume(user) + data_volume > MAX_VOLUME:
        raise InvalidDataSize("Physician's total managed volume would overflow.")

    record = MedicalRecord.objects.create(
        id               = state.total_records + 1,
        physician        = user,
        category         = category,
        data_volume      = data_volume,
        accessed_volume  = 0,
        created_at_block = state.next_block_height,
        is_active        = True,
    )
    _record_created(user, data_volume)

    state.total_records = record.id
    ledger.commit_block(state, "total_records")

    logger.info(
        "Medical record created. record_id=%s physician_id=%s data_volume=%s block=%s",
        record.id, user.pk, data_volume, record.created_at_block,
    )

    return record


# ===========================================================================
# ACCESS MEDICAL DATA
# ===========================================================================

@transaction.atomic
def access_medical_data(user, record_id: int, access_volume: int) -> MedicalRecord:
    """
    Consume `access_volume` units of a record's quota.

    Check order:
      1. maintenance            → MaintenanceActive
      2. access_volume > 0      → InvalidDataSize
      3. record exists          → RecordNotFound
      4. record active          → RecordInactive
      5. fits remaining quota   → InsufficientClearance
      6. physician, or grant with can_access and access_volume <= access_limit
                                → UnauthorizedAccess

    The grant limit bounds each call, not the staff member's running total:
    two calls of 150 under a limit of 200 both succeed.
    """
    state = ledger.lock_state()
    ledger.assert_not_in_maintenance(state)

    if access_volume <= 0:
        raise InvalidDataSize()

    record = _require_record(record_id)

    if not record.is_active:
        raise RecordInactive()
    if record.accessed_volume + access_volume > record.data_volume:
        raise InsufficientClearance()
    if not _is_authorised_for(record, user, access_volume):
        raise UnauthorizedAccess()

    record.accessed_volume += access_volume
    record.save(update_fields=["accessed_volume", "updated_at"])
    ledger.commit_block(state)

    logger.info(
        "Medical data accessed. record_id=%s user_id=%s volume=%s accessed=%s/%s",
        record.id, user.pk, access_volume, record.accessed_volume, record.data_volume,
    )

    return record


# ===========================================================================
# ARCHIVE RECORD
# ===========================================================================

@transaction.atomic
def archive_record(user, record_id: int) -> MedicalRecord:
    """
    Soft-archive a record. Physician only. Not gated by maintenance.

    Archiving an already archived record is a no-op success: there is no
    "already archived" error kind.
    """
    state  = ledger.lock_state()
    record = _require_record(record_id)
    _assert_physician(record, user)

    if record.is_active:
        record.is_active = False
        record.save(update_fields=["is_active", "updated_at"])
    ledger.commit_block(state)

    logger.info("Medical record archived. record_id=%s by user_id=%s", record.id, user.pk)

    return record


# ===========================================================================
# GRANT / REVOKE ACCESS
# ===========================================================================

@transaction.atomic
def grant_medical_access(user, record_id: int, staff, access_limit: int) -> AccessGrant:
    """
    Give `staff` per-call access of up to `access_limit` on a record.
    Physician only. Not gated by maintenance.

    Upsert: an existing grant for the same staff member is replaced outright,
    including a lower limit than before.
    """
    state  = ledger.lock_state()
    record = _require_record(record_id)
    _assert_physician(record, user)

    if access_limit < 0:
        raise ValidationError({"access_limit": "Access limit cannot be negative."})
    if access_limit > MAX_VOLUME:
        raise ValidationError({"access_limit": f"Access limit cannot exceed {MAX_VOLUME}."})

    grant, _ = AccessGrant.objects.update_or_create(
        record   = record,
        staff    = staff,
        defaults = {"can_access": True, "access_limit": access_limit},
    )
    ledger.commit_block(state)

    logger.info(
        "Medical access granted. record_id=%s staff_id=%s access_limit=%s by user_id=%s",
        record.id, staff.pk, access_limit, user.pk,
    )

    return grant


@transaction.atomic
def revoke_medical_access(user, record_id: int, staff) -> None:
    """
    Remove `staff`'s grant on a record. Physician only. Not gated by maintenance.
    Revoking a grant that does not exist is a silent success.
    """
    state  = ledger.lock_state()
    record = _require_record(record_id)
    _assert_physician(record, user)

    deleted, _ = AccessGrant.objects.filter(record=record, staff=staff).delete()
    ledger.commit_block(state)

    logger.info(
        "Medical access revoked. record_id=%s staff_id=%s existed=%s by user_id=%s",
        record.id, staff.pk, bool(deleted), user.pk,
    )


# ===========================================================================
# READS
# Pure lookups. Absence is a normal outcome, not an error.
# ===========================================================================

def get_medical_record(record_id: int) -> MedicalRecord | None:
    return MedicalRecord.objects.filter(pk=record_id).first()


def get_access_privilege(record_id: int, staff) -> AccessGrant | None:
    return AccessGrant.objects.filter(record_id=record_id, staff=staff).first()


def get_physician_stats(physician) -> PhysicianStats:
    """
    Stats for a physician. A physician who never created a record gets an
    unsaved zero-valued instance rather than None.
    """
    stats = PhysicianStats.objects.filter(physician=physician).first()
    if stats is None:
        stats = PhysicianStats(physician=physician, record_count=0, total_data_managed=0)
    return stats
