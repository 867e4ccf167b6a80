"""
ledger/exceptions.py
====================
Error taxonomy for the whole ledger.

Pattern mirrors users/exceptions.py: service layer raises these, API layer
catches and maps them to HTTP responses. Every kind carries a stable
machine-readable code so clients receive the failure kind verbatim.

The records app imports its errors from here.
"""


class LedgerError(Exception):
    """
    Base exception for all ledger errors.
    Carry a human-readable message, a machine-readable code and an optional
    field name so the API layer can produce consistent ErrorSchema responses.
    """
    default_message = "Ledger operation rejected."
    default_code    = "ledger_error"

    def __init__(self, message: str = None, field: str = None, code: str = None):
        self.message = message or self.default_message
        self.field   = field
        self.code    = code or self.default_code
        super().__init__(self.message)


# ===========================================================================
# ADMINISTRATIVE GATE
# ===========================================================================

class AdministratorOnly(LedgerError):
    """Maintenance toggle attempted by someone other than the administrator."""
    default_message = "Only the chief medical officer can perform this action."
    default_code    = "administrator_only"


class MaintenanceActive(LedgerError):
    """A gated operation was attempted while the system is under maintenance."""
    default_message = "The system is under maintenance. Try again later."
    default_code    = "maintenance_active"


# ===========================================================================
# RECORD STORE / ACCESS PRIVILEGE REGISTRY
# ===========================================================================

class RecordNotFound(LedgerError):
    """The referenced record id has no stored record."""
    default_message = "Medical record not found."
    default_code    = "record_not_found"


class InsufficientClearance(LedgerError):
    """The requested access would push accessed volume past the record's data volume."""
    default_message = "Requested volume exceeds the record's remaining data volume."
    default_code    = "insufficient_clearance"


class InvalidDataSize(LedgerError):
    """A volume of zero, or one too large for the ledger to store, was supplied."""
    default_message = "Volume must be greater than zero."
    default_code    = "invalid_data_size"


class RecordDuplicate(LedgerError):
    """
    Reserved for duplicate-record detection.
    No operation raises this today.
    """
    default_message = "Medical record already exists."
    default_code    = "record_duplicate"


class UnauthorizedAccess(LedgerError):
    """
    The caller is neither the record's physician nor the holder of a grant
    that covers the requested volume.
    """
    default_message = "You are not authorised to perform this action on this record."
    default_code    = "unauthorized_access"


class CategoryTooLong(LedgerError):
    """Category label exceeds MAX_CATEGORY_LENGTH characters."""
    default_message = "Category must be at most 64 characters."
    default_code    = "category_too_long"


class RecordInactive(LedgerError):
    """Access was attempted on an archived record."""
    default_message = "This medical record has been archived."
    default_code    = "record_inactive"


# ===========================================================================
# INITIALISATION
# ===========================================================================

class LedgerNotInitialized(LedgerError):
    """No SystemState row exists yet. Run the init_ledger management command."""
    default_message = "The ledger has not been initialised."
    default_code    = "ledger_not_initialized"


class LedgerAlreadyInitialized(LedgerError):
    """initialize_ledger was called a second time. The administrator is fixed."""
    default_message = "The ledger is already initialised."
    default_code    = "ledger_already_initialized"
