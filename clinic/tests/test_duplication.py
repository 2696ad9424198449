"""
Unit tests for duplicate detection (national ID, sign-up e-mail).
"""
import pytest
from django.db import IntegrityError

from clinic_dashboard.exceptions import BlockError

from clinic.duplication_detection import (
    check_email_available,
    check_resident_id,
    is_unique_violation,
)
from clinic.models import PatientQuestionnaire
from clinic import services


@pytest.mark.django_db
class TestCheckResidentId:

    def test_new_id_passes(self):
        check_resident_id("900101-1234568")

    def test_blank_never_duplicate(self):
        PatientQuestionnaire.objects.create(name="방문자", resident_id="")
        check_resident_id("")
        check_resident_id(None)

    def test_existing_id_blocked(self):
        existing = PatientQuestionnaire.objects.create(name="김민수", resident_id="900101-1234568")
        with pytest.raises(BlockError) as exc_info:
            check_resident_id("900101-1234568")
        assert exc_info.value.code == "DUPLICATE_RESIDENT_ID"
        assert exc_info.value.http_status == 409
        assert exc_info.value.detail == {"existing_id": existing.id}


@pytest.mark.django_db
class TestUniqueConstraint:

    def test_blank_ids_may_repeat(self):
        PatientQuestionnaire.objects.create(name="방문자1", resident_id="")
        PatientQuestionnaire.objects.create(name="방문자2", resident_id="")
        assert PatientQuestionnaire.objects.filter(resident_id="").count() == 2

    def test_database_violation_mapped_to_block(self, questionnaire_payload, monkeypatch):
        PatientQuestionnaire.objects.create(name="김민수", resident_id="900101-1234568")
        # simulate a concurrent insert that slipped past the pre-check
        monkeypatch.setattr(services, "check_resident_id", lambda resident_id: None)
        with pytest.raises(BlockError) as exc_info:
            services.create_questionnaire(questionnaire_payload)
        assert exc_info.value.code == "DUPLICATE_RESIDENT_ID"


class TestIsUniqueViolation:

    @pytest.mark.parametrize("message", [
        "UNIQUE constraint failed: clinic_patientquestionnaire.resident_id",
        'duplicate key value violates unique constraint "uniq_questionnaire_resident_id"',
        "Key (resident_id) already exists",
    ])
    def test_markers(self, message):
        assert is_unique_violation(IntegrityError(message)) is True

    def test_other_integrity_error(self):
        assert is_unique_violation(IntegrityError("NOT NULL constraint failed: clinic_consultation.patient_id")) is False


@pytest.mark.django_db
class TestCheckEmailAvailable:

    def test_free_email(self):
        check_email_available("new@clinic.test")

    def test_taken_email_case_insensitive(self, staff_user):
        with pytest.raises(BlockError) as exc_info:
            check_email_available("STAFF@clinic.test")
        assert exc_info.value.code == "EMAIL_ALREADY_REGISTERED"
