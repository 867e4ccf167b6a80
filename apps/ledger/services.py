"""
ledger/services.py
==================
Service layer for the administrative gate.

Conventions shared with records/services.py:
  - Plain functions (not classes)
  - transaction.atomic for all writes
  - select_for_update() on the SystemState row before any write
  - Raises domain exceptions (LedgerError subclasses) for expected failure states
  - Never returns HTTP responses. The API layer maps exceptions to status codes

Function index:
  initialize_ledger(administrator)     → SystemState
  enable_maintenance(user)             → SystemState
  disable_maintenance(user)            → SystemState
  is_system_maintenance()              → bool
  is_chief_medical_officer(identity)   → bool
  get_total_records()                  → int
  get_system_state()                   → SystemState | None

Helpers shared with records/services.py:
  lock_state()                         → SystemState (row-locked)
  assert_not_in_maintenance(state)
  commit_block(state, *fields)
"""

import logging

from django.db import IntegrityError, transaction

from .exceptions import (
    AdministratorOnly,
    LedgerAlreadyInitialized,
    LedgerNotInitialized,
    MaintenanceActive,
)
from .models import SystemState

logger = logging.getLogger(__name__)


# ===========================================================================
# INTERNAL HELPERS
# ===========================================================================

def lock_state() -> SystemState:
    """
    Fetch the SystemState row with a row-level lock.
    Must be called inside transaction.atomic. Every mutating ledger operation
    calls this first, so concurrent writes queue up behind the lock.
    Raises LedgerNotInitialized if initialize_ledger has never run.
    """
    try:
        return SystemState.objects.select_for_update().get(pk=SystemState.SINGLETON_PK)
    except SystemState.DoesNotExist:
        raise LedgerNotInitialized()


def assert_not_in_maintenance(state: SystemState) -> None:
    """Raise MaintenanceActive if the gate is closed."""
    if state.maintenance_active:
        raise MaintenanceActive()


def commit_block(state: SystemState, *fields: str) -> int:
    """
    Advance the block height for the operation holding the lock and persist
    it together with any other SystemState fields the operation changed.
    Returns the committed height.
    """
    state.block_height = state.next_block_height
    state.save(update_fields=["block_height", *fields, "updated_at"])
    return state.block_height


def _assert_administrator(state: SystemState, user) -> None:
    if not state.is_administrator(user):
        raise AdministratorOnly()


# ===========================================================================
# INITIALISATION
# ===========================================================================

@transaction.atomic
def initialize_ledger(administrator) -> SystemState:
    """
    Create the singleton SystemState with a fixed administrator.
    Runs once per deployment. A second call raises LedgerAlreadyInitialized
    and leaves the original administrator in place.
    """
    if SystemState.objects.filter(pk=SystemState.SINGLETON_PK).exists():
        raise LedgerAlreadyInitialized()

    try:
        with transaction.atomic():
            state = SystemState.objects.create(
                id            = SystemState.SINGLETON_PK,
                administrator = administrator,
            )
    except IntegrityError:
        # Lost a race with a concurrent initialisation.
        raise LedgerAlreadyInitialized()

    logger.info("Ledger initialised. administrator_id=%s", administrator.pk)
    return state


# ===========================================================================
# MAINTENANCE GATE
# ===========================================================================

@transaction.atomic
def enable_maintenance(user) -> SystemState:
    """
    Close the gate. Administrator only.
    Enabling while already enabled is a no-op success.
    """
    state = lock_state()
    _assert_administrator(state, user)

    state.maintenance_active = True
    commit_block(state, "maintenance_active")

    logger.info("Maintenance enabled. by user_id=%s", user.pk)
    return state


@transaction.atomic
def disable_maintenance(user) -> SystemState:
    """
    Reopen the gate. Administrator only.
    Disabling while already disabled is a no-op success.
    """
    state = lock_state()
    _assert_administrator(state, user)

    state.maintenance_active = False
    commit_block(state, "maintenance_active")

    logger.info("Maintenance disabled. by user_id=%s", user.pk)
    return state


# ===========================================================================
# READS
# Total functions: an uninitialised ledger reads as empty and open.
# ===========================================================================

def get_system_state() -> SystemState | None:
    return SystemState.objects.filter(pk=SystemState.SINGLETON_PK).first()


def is_system_maintenance() -> bool:
    state = get_system_state()
    return state is not None and state.maintenance_active


def is_chief_medical_officer(identity) -> bool:
    state = get_system_state()
    return state is not None and state.is_administrator(identity)


def get_total_records() -> int:
    state = get_system_state()
    return state.total_records if state is not None else 0
