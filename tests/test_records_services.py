"""
Record store, access privilege registry and physician statistics.
"""

import pytest
from django.core.exceptions import ValidationError

from apps.ledger import services as gate
from apps.ledger.exceptions import (
    CategoryTooLong,
    InsufficientClearance,
    InvalidDataSize,
    MaintenanceActive,
    RecordDuplicate,
    RecordInactive,
    RecordNotFound,
    UnauthorizedAccess,
)
from apps.records import services
from apps.records.models import MAX_CATEGORY_LENGTH, MAX_VOLUME, AccessGrant, MedicalRecord

pytestmark = pytest.mark.django_db


@pytest.fixture
def record(ledger, physician):
    return services.create_medical_record(physician, "Cardiology", 1000)


def _accessed(record_id):
    return MedicalRecord.objects.get(pk=record_id).accessed_volume


# ===========================================================================
# CREATE
# ===========================================================================

class TestCreateMedicalRecord:
    def test_first_record(self, ledger, physician):
        record = services.create_medical_record(physician, "Cardiology", 1000)

        assert record.id == 1
        stored = services.get_medical_record(1)
        assert stored.physician == physician
        assert stored.category == "Cardiology"
        assert stored.data_volume == 1000
        assert stored.accessed_volume == 0
        assert stored.is_active is True
        assert stored.created_at_block == 1

    def test_ids_are_dense_and_match_total(self, ledger, physician, staff):
        ids = [
            services.create_medical_record(physician, "Cardiology", 10).id,
            services.create_medical_record(staff, "Radiology", 20).id,
            services.create_medical_record(physician, "Oncology", 30).id,
        ]

        assert ids == [1, 2, 3]
        assert gate.get_total_records() == 3

    def test_failed_creation_does_not_consume_an_id(self, ledger, physician):
        services.create_medical_record(physician, "Cardiology", 10)
        with pytest.raises(InvalidDataSize):
            services.create_medical_record(physician, "Cardiology", 0)

        assert services.create_medical_record(physician, "Neurology", 5).id == 2
        assert gate.get_total_records() == 2

    def test_created_at_block_follows_sequence_counter(self, ledger, administrator, physician):
        gate.enable_maintenance(administrator)
        gate.disable_maintenance(administrator)

        record = services.create_medical_record(physician, "Cardiology", 10)

        assert record.created_at_block == 3

    def test_volume_beyond_storage_rejected(self, ledger, physician):
        with pytest.raises(InvalidDataSize):
            services.create_medical_record(physician, "Cardiology", MAX_VOLUME + 1)

        assert gate.get_total_records() == 0

    def test_managed_volume_overflow_rejected_before_any_write(self, ledger, physician):
        services.create_medical_record(physician, "Cardiology", MAX_VOLUME)
        height = gate.get_system_state().block_height

        with pytest.raises(InvalidDataSize):
            services.create_medical_record(physician, "Cardiology", 5)

        assert gate.get_total_records() == 1
        assert gate.get_system_state().block_height == height
        stats = services.get_physician_stats(physician)
        assert stats.record_count == 1
        assert stats.total_data_managed == MAX_VOLUME

    def test_other_physicians_are_not_affected_by_overflow(self, ledger, physician, staff):
        services.create_medical_record(physician, "Cardiology", MAX_VOLUME)

        assert services.create_medical_record(staff, "Radiology", 5).id == 2

    def test_zero_volume_rejected(self, ledger, physician):
        with pytest.raises(InvalidDataSize):
            services.create_medical_record(physician, "Cardiology", 0)

    def test_category_length_boundary(self, ledger, physician):
        services.create_medical_record(physician, "x" * MAX_CATEGORY_LENGTH, 1)

        with pytest.raises(CategoryTooLong):
            services.create_medical_record(physician, "x" * (MAX_CATEGORY_LENGTH + 1), 1)

    def test_empty_category_allowed(self, ledger, physician):
        assert services.create_medical_record(physician, "", 1).category == ""

    def test_maintenance_reported_before_bad_input(self, ledger, administrator, physician):
        gate.enable_maintenance(administrator)

        with pytest.raises(MaintenanceActive):
            services.create_medical_record(physician, "x" * 100, 0)

        assert gate.get_total_records() == 0

    def test_zero_volume_reported_before_long_category(self, ledger, physician):
        with pytest.raises(InvalidDataSize):
            services.create_medical_record(physician, "x" * 100, 0)


# ===========================================================================
# PHYSICIAN STATS
# ===========================================================================

class TestPhysicianStats:
    def test_unseen_physician_reads_as_zero(self, ledger, physician):
        stats = services.get_physician_stats(physician)

        assert stats.record_count == 0
        assert stats.total_data_managed == 0
        assert stats.physician_id == physician.pk

    def test_creation_updates_creator_only(self, ledger, physician, staff):
        services.create_medical_record(physician, "Cardiology", 1000)
        services.create_medical_record(physician, "Radiology", 250)
        services.create_medical_record(staff, "Oncology", 7)

        stats = services.get_physician_stats(physician)
        assert stats.record_count == 2
        assert stats.total_data_managed == 1250

        other = services.get_physician_stats(staff)
        assert other.record_count == 1
        assert other.total_data_managed == 7

    def test_rejected_creation_leaves_stats_untouched(self, ledger, physician):
        services.create_medical_record(physician, "Cardiology", 100)
        with pytest.raises(CategoryTooLong):
            services.create_medical_record(physician, "x" * 65, 100)

        stats = services.get_physician_stats(physician)
        assert (stats.record_count, stats.total_data_managed) == (1, 100)

    def test_access_and_archive_do_not_touch_stats(self, record, physician):
        services.access_medical_data(physician, record.id, 400)
        services.archive_record(physician, record.id)

        stats = services.get_physician_stats(physician)
        assert (stats.record_count, stats.total_data_managed) == (1, 1000)


# ===========================================================================
# ACCESS
# ===========================================================================

class TestAccessMedicalData:
    def test_physician_can_consume_full_quota(self, record, physician):
        services.access_medical_data(physician, record.id, 600)
        services.access_medical_data(physician, record.id, 400)

        assert _accessed(record.id) == 1000

    def test_limit_applies_per_call_not_cumulatively(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)

        services.access_medical_data(staff, record.id, 150)
        assert _accessed(record.id) == 150

        services.access_medical_data(staff, record.id, 100)
        assert _accessed(record.id) == 250

        services.access_medical_data(staff, record.id, 200)
        assert _accessed(record.id) == 450

    def test_clearance_checked_before_grant_limit(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)
        services.access_medical_data(staff, record.id, 150)
        services.access_medical_data(staff, record.id, 100)

        # 900 is over the grant limit AND over the remaining quota.
        with pytest.raises(InsufficientClearance):
            services.access_medical_data(staff, record.id, 900)

        assert _accessed(record.id) == 250

    def test_over_limit_within_quota_is_unauthorised(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)

        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(staff, record.id, 201)

        assert _accessed(record.id) == 0

    def test_identity_without_grant_is_unauthorised(self, record, outsider):
        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(outsider, record.id, 1)

    def test_disabled_grant_is_unauthorised(self, record, physician, staff):
        AccessGrant.objects.create(record=record, staff=staff, can_access=False, access_limit=500)

        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(staff, record.id, 1)

    def test_zero_volume_rejected(self, record, physician):
        with pytest.raises(InvalidDataSize):
            services.access_medical_data(physician, record.id, 0)

    def test_missing_record(self, ledger, physician):
        with pytest.raises(RecordNotFound):
            services.access_medical_data(physician, 42, 1)

    def test_zero_volume_reported_before_missing_record(self, ledger, physician):
        with pytest.raises(InvalidDataSize):
            services.access_medical_data(physician, 42, 0)

    def test_exceeding_quota_rejected(self, record, physician):
        services.access_medical_data(physician, record.id, 999)

        with pytest.raises(InsufficientClearance):
            services.access_medical_data(physician, record.id, 2)

        assert _accessed(record.id) == 999

    def test_clearance_reported_before_missing_grant(self, record, outsider):
        with pytest.raises(InsufficientClearance):
            services.access_medical_data(outsider, record.id, 1001)

    def test_archived_record_rejects_everyone(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 500)
        services.archive_record(physician, record.id)

        with pytest.raises(RecordInactive):
            services.access_medical_data(physician, record.id, 1)
        with pytest.raises(RecordInactive):
            services.access_medical_data(staff, record.id, 1)

    def test_inactive_reported_before_clearance(self, record, physician):
        services.archive_record(physician, record.id)

        with pytest.raises(RecordInactive):
            services.access_medical_data(physician, record.id, 5000)

    def test_maintenance_blocks_access(self, record, administrator, physician):
        gate.enable_maintenance(administrator)

        with pytest.raises(MaintenanceActive):
            services.access_medical_data(physician, record.id, 1)

        gate.disable_maintenance(administrator)
        services.access_medical_data(physician, record.id, 1)
        assert _accessed(record.id) == 1

    def test_maintenance_reported_before_missing_record(self, ledger, administrator, physician):
        gate.enable_maintenance(administrator)

        with pytest.raises(MaintenanceActive):
            services.access_medical_data(physician, 99, 0)

    def test_accessed_volume_never_decreases(self, record, physician, staff, outsider):
        services.grant_medical_access(physician, record.id, staff, 100)
        history = [_accessed(record.id)]

        attempts = [
            (physician, 300), (staff, 100), (outsider, 5), (staff, 101),
            (physician, 0), (physician, 700), (physician, 600), (staff, 1),
        ]
        for caller, volume in attempts:
            try:
                services.access_medical_data(caller, record.id, volume)
            except (UnauthorizedAccess, InvalidDataSize, InsufficientClearance):
                pass
            current = _accessed(record.id)
            assert 0 <= current <= 1000
            assert current >= history[-1]
            history.append(current)

        assert history[-1] == 1000


# ===========================================================================
# GRANT / REVOKE
# ===========================================================================

class TestGrantMedicalAccess:
    def test_grant_creates_privilege(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)

        grant = services.get_access_privilege(record.id, staff)
        assert grant.can_access is True
        assert grant.access_limit == 200

    def test_regrant_replaces_limit(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 500)
        services.grant_medical_access(physician, record.id, staff, 50)

        assert services.get_access_privilege(record.id, staff).access_limit == 50
        assert AccessGrant.objects.filter(record=record, staff=staff).count() == 1

        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(staff, record.id, 51)

    def test_zero_limit_grant_allows_nothing(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 0)

        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(staff, record.id, 1)

    def test_only_physician_may_grant(self, record, staff, outsider):
        with pytest.raises(UnauthorizedAccess):
            services.grant_medical_access(staff, record.id, outsider, 100)

        assert services.get_access_privilege(record.id, outsider) is None

    def test_grantee_cannot_regrant(self, record, physician, staff, outsider):
        services.grant_medical_access(physician, record.id, staff, 100)

        with pytest.raises(UnauthorizedAccess):
            services.grant_medical_access(staff, record.id, outsider, 100)

    def test_missing_record(self, ledger, physician, staff):
        with pytest.raises(RecordNotFound):
            services.grant_medical_access(physician, 7, staff, 100)

    def test_negative_limit_rejected(self, record, physician, staff):
        with pytest.raises(ValidationError):
            services.grant_medical_access(physician, record.id, staff, -1)

    def test_limit_beyond_storage_rejected(self, record, physician, staff):
        with pytest.raises(ValidationError):
            services.grant_medical_access(physician, record.id, staff, MAX_VOLUME + 1)

        assert services.get_access_privilege(record.id, staff) is None

    def test_grant_works_during_maintenance(self, record, administrator, physician, staff):
        gate.enable_maintenance(administrator)

        services.grant_medical_access(physician, record.id, staff, 100)

        assert services.get_access_privilege(record.id, staff).access_limit == 100

    def test_grant_allowed_on_archived_record(self, record, physician, staff):
        services.archive_record(physician, record.id)

        services.grant_medical_access(physician, record.id, staff, 10)

        assert services.get_access_privilege(record.id, staff) is not None


class TestRevokeMedicalAccess:
    def test_revoke_removes_privilege(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)

        services.revoke_medical_access(physician, record.id, staff)

        assert services.get_access_privilege(record.id, staff) is None
        with pytest.raises(UnauthorizedAccess):
            services.access_medical_data(staff, record.id, 1)

    def test_revoking_absent_grant_is_silent(self, record, physician, staff):
        services.revoke_medical_access(physician, record.id, staff)
        services.revoke_medical_access(physician, record.id, staff)

        assert services.get_access_privilege(record.id, staff) is None

    def test_only_physician_may_revoke(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)

        with pytest.raises(UnauthorizedAccess):
            services.revoke_medical_access(staff, record.id, staff)

        assert services.get_access_privilege(record.id, staff) is not None

    def test_missing_record(self, ledger, physician, staff):
        with pytest.raises(RecordNotFound):
            services.revoke_medical_access(physician, 3, staff)

    def test_revoke_works_during_maintenance(self, record, administrator, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 200)
        gate.enable_maintenance(administrator)

        services.revoke_medical_access(physician, record.id, staff)

        assert services.get_access_privilege(record.id, staff) is None


def test_grants_are_scoped_to_one_record(ledger, physician, staff):
    first = services.create_medical_record(physician, "Cardiology", 100)
    second = services.create_medical_record(physician, "Radiology", 100)
    services.grant_medical_access(physician, first.id, staff, 50)

    services.access_medical_data(staff, first.id, 50)
    with pytest.raises(UnauthorizedAccess):
        services.access_medical_data(staff, second.id, 1)


# ===========================================================================
# ARCHIVE
# ===========================================================================

class TestArchiveRecord:
    def test_physician_archives(self, record, physician):
        services.archive_record(physician, record.id)

        assert services.get_medical_record(record.id).is_active is False

    def test_rearchive_is_noop_success(self, record, physician):
        services.archive_record(physician, record.id)
        archived = services.archive_record(physician, record.id)

        assert archived.is_active is False

    def test_non_physician_cannot_archive(self, record, physician, staff):
        services.grant_medical_access(physician, record.id, staff, 1000)

        with pytest.raises(UnauthorizedAccess):
            services.archive_record(staff, record.id)

        assert services.get_medical_record(record.id).is_active is True

    def test_missing_record(self, ledger, physician):
        with pytest.raises(RecordNotFound):
            services.archive_record(physician, 1)

    def test_archive_works_during_maintenance(self, record, administrator, physician):
        gate.enable_maintenance(administrator)

        services.archive_record(physician, record.id)

        assert services.get_medical_record(record.id).is_active is False


# ===========================================================================
# READS
# ===========================================================================

def test_reads_return_none_on_absence(ledger, staff):
    assert services.get_medical_record(1) is None
    assert services.get_access_privilege(1, staff) is None


def test_record_duplicate_is_defined_but_dormant():
    err = RecordDuplicate()
    assert err.code == "record_duplicate"
