"""
records/models.py
=================
Record store, access privilege registry and physician statistics.

Models:
  - MedicalRecord : one unit of patient data volume under a physician's stewardship
  - PhysicianStats: aggregate counters per physician
  - AccessGrant   : a staff member's per-record access privilege

Dependency rule:
  records/ depends on → users/ (AUTH_USER_MODEL), ledger/ (gate + counters)
  Nothing depends on records/.

The ledger tracks data VOLUME only. No medical payload is stored here.
"""

from django.conf import settings
from django.db import models

MAX_CATEGORY_LENGTH = 64

# Largest value a PositiveBigIntegerField holds on every supported backend.
MAX_VOLUME = 2**63 - 1


# ===========================================================================
# MODEL: MEDICAL RECORD
# ===========================================================================

class MedicalRecord(models.Model):
    """
    A metered medical record.

    Architectural rules:
      - id is assigned by the service layer as SystemState.total_records + 1
        while holding the ledger lock. Ids are dense: 1..total_records.
      - physician, category, data_volume and created_at_block never change.
      - accessed_volume only grows and never exceeds data_volume.
        Enforced at DB level as well as in the service layer.
      - is_active only goes True → False (archival). No hard deletes.
    """

    id = models.PositiveBigIntegerField(primary_key=True, editable=False)

    physician = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="medical_records",
        editable=False,
    )
    category = models.CharField(max_length=MAX_CATEGORY_LENGTH, editable=False)

    # ── Metering ──────────────────────────────────────────────────────────────
    data_volume     = models.PositiveBigIntegerField(editable=False, help_text="Total quota.")
    accessed_volume = models.PositiveBigIntegerField(default=0)

    # Ledger block height of the creating operation (see SystemState.block_height).
    created_at_block = models.PositiveBigIntegerField(editable=False)

    # ── Archival ──────────────────────────────────────────────────────────────
    is_active = models.BooleanField(
        default=True,
        help_text="Set to False on archival. Never set back to True.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "records"
        db_table  = "medical_records"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(data_volume__gt=0),
                name="chk_record_data_volume_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(accessed_volume__lte=models.F("data_volume")),
                name="chk_record_accessed_within_quota",
            ),
        ]
        indexes = [
            models.Index(fields=["physician", "is_active"], name="idx_record_physician_active"),
        ]
        ordering = ["id"]

    def __str__(self):
        return f"Record {self.id} [{self.category}] {self.accessed_volume}/{self.data_volume}"

    @property
    def remaining_volume(self) -> int:
        return self.data_volume - self.accessed_volume

    def is_physician(self, identity) -> bool:
        return identity is not None and self.physician_id == identity.pk


# ===========================================================================
# MODEL: PHYSICIAN STATS
# ===========================================================================

class PhysicianStats(models.Model):
    """
    Aggregate counters for one physician.

    Row is created lazily on the physician's first record. Readers that find
    no row get an unsaved zero-valued instance from the service layer.
    Both counters are monotonically non-decreasing.
    """

    physician = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        primary_key=True,
        related_name="physician_stats",
    )
    record_count       = models.PositiveBigIntegerField(default=0)
    total_data_managed = models.PositiveBigIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "records"
        db_table  = "physician_stats"
        verbose_name_plural = "physician stats"

    def __str__(self):
        return (
            f"Physician {self.physician_id}: "
            f"{self.record_count} records, {self.total_data_managed} volume"
        )


# ===========================================================================
# MODEL: ACCESS GRANT
# ===========================================================================

class AccessGrant(models.Model):
    """
    A staff member's privilege on one record.

    Core rules:
      - At most one grant per (record, staff). A re-grant overwrites it.
      - Only the record's physician creates or removes grants.
      - Revocation deletes the row. Absence means no privilege.
      - access_limit caps the volume of a SINGLE access call, not the
        cumulative volume a staff member may consume.
    """

    record = models.ForeignKey(
        "records.MedicalRecord",
        on_delete=models.PROTECT,
        related_name="access_grants",
    )
    staff = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="medical_access_grants",
    )
    can_access   = models.BooleanField(default=True)
    access_limit = models.PositiveBigIntegerField(default=0)

    granted_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "records"
        db_table  = "access_grants"
        constraints = [
            models.UniqueConstraint(
                fields=["record", "staff"],
                name="uq_grant_record_staff",
            ),
        ]
        indexes = [
            models.Index(fields=["staff"], name="idx_grant_staff"),
        ]

    def __str__(self):
        return (
            f"Staff {self.staff_id} → Record {self.record_id} "
            f"limit={self.access_limit} can_access={self.can_access}"
        )

    def covers(self, volume: int) -> bool:
        """Whether this grant authorises a single access of `volume`."""
        return self.can_access and volume <= self.access_limit
