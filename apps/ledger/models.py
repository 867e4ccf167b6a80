"""
ledger/models.py
================
Process-wide ledger state. One row, ever.

Models:
  - SystemState: administrator identity, maintenance flag, record counter
                  and the monotonic block height that stamps record creation.

Dependency rule:
  ledger/ depends on → users/ (AUTH_USER_MODEL)
  ledger/ is depended on by → records/
  This app must never import from records/.
"""

from django.conf import settings
from django.db import models


class SystemState(models.Model):
    """
    Singleton holding the ledger's global state.

    Invariants:
      - Exactly one row, pk=SINGLETON_PK. Enforced by a check constraint.
      - administrator is set once by initialize_ledger and never reassigned.
      - total_records equals the last-assigned MedicalRecord id.
      - block_height only grows. Every committed mutating operation
        advances it by exactly one.

    The row doubles as the global write lock: every mutating service locks
    it with select_for_update() before reading anything else, which
    serialises all ledger writes.
    """

    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(
        primary_key=True,
        default=SINGLETON_PK,
        editable=False,
    )

    administrator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        editable=False,
        help_text="Chief medical officer. Fixed at initialisation.",
    )

    total_records      = models.PositiveBigIntegerField(default=0)
    maintenance_active = models.BooleanField(default=False)
    block_height       = models.PositiveBigIntegerField(
        default=0,
        help_text="Sequence counter advanced once per committed write.",
    )

    initialized_at = models.DateTimeField(auto_now_add=True)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "ledger"
        db_table  = "ledger_system_state"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(id=1),
                name="chk_system_state_singleton",
            ),
        ]

    def __str__(self):
        return (
            f"SystemState records={self.total_records} "
            f"maintenance={self.maintenance_active} height={self.block_height}"
        )

    @property
    def next_block_height(self) -> int:
        """Height the operation currently holding the lock will commit at."""
        return self.block_height + 1

    def is_administrator(self, identity) -> bool:
        return identity is not None and self.administrator_id == identity.pk
