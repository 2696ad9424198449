"""
Unit tests for intake adapters (questionnaire sources)
"""
import json

import pytest

from clinic_dashboard.exceptions import ValidationError

from clinic.intake import IntakeQuestionnaire, get_adapter
from clinic.intake.adapters import LegacyFormAdapter, WebFormAdapter


LEGACY_PAYLOAD = {
    "patient": "김민수 / 900101-1234568 / 010-1234-5678",
    "gender": "남성",
    "referrer": "홍길동 / 010-1111-2222 / 1985",
    "emergency_contact": "김영희 / 010-9876-5432 / 배우자",
    "consent": "예",
    "treatment_area": "앞니, 어금니",
}


class TestWebFormAdapter:
    """Structured web form JSON."""

    def test_transform_maps_structured_contacts(self, questionnaire_payload):
        questionnaire_payload["referrer_name"] = "홍길동"
        questionnaire_payload["referrer_birth_year"] = "1985"
        result = WebFormAdapter().process(json.dumps(questionnaire_payload))

        assert isinstance(result, IntakeQuestionnaire)
        assert result.source == "webform"
        assert result.emergency_contact.name == "김영희"
        assert result.emergency_contact.extra == "배우자"
        assert result.referrer.name == "홍길동"

        data = result.to_create_dict()
        assert data["emergency_contact_relation"] == "배우자"
        assert data["referrer_birth_year"] == "1985"
        assert data["consent"] is True
        assert "source" not in data

    def test_invalid_json(self):
        with pytest.raises(ValidationError) as exc_info:
            WebFormAdapter().process(b"{not json")
        assert exc_info.value.code == "INVALID_JSON"

    def test_non_object(self):
        with pytest.raises(ValidationError) as exc_info:
            WebFormAdapter().process(b'"text"')
        assert exc_info.value.code == "INVALID_REQUEST"

    def test_validation_runs(self, questionnaire_payload):
        questionnaire_payload["resident_id"] = "900101-1234567"
        with pytest.raises(ValidationError) as exc_info:
            WebFormAdapter().process(json.dumps(questionnaire_payload))
        assert exc_info.value.code == "VALIDATION_ERROR"


class TestLegacyFormAdapter:
    """Old export with '/'-packed columns."""

    def test_unpacks_packed_columns(self):
        result = LegacyFormAdapter().process(json.dumps(LEGACY_PAYLOAD).encode("utf-8"))

        assert result.name == "김민수"
        assert result.resident_id == "900101-1234568"
        assert result.phone == "010-1234-5678"
        assert result.referrer.name == "홍길동"
        assert result.referrer.phone == "010-1111-2222"
        assert result.referrer.extra == "1985"
        assert result.emergency_contact.extra == "배우자"
        assert result.consent is True
        assert result.source == "legacy"

    def test_two_part_contact_without_phone(self):
        payload = dict(LEGACY_PAYLOAD, emergency_contact="김영희 / 배우자")
        result = LegacyFormAdapter().process(json.dumps(payload))
        assert result.emergency_contact.name == "김영희"
        assert result.emergency_contact.phone == ""
        assert result.emergency_contact.extra == "배우자"

    def test_two_part_contact_with_phone(self):
        payload = dict(LEGACY_PAYLOAD, referrer="홍길동 / 010-1111-2222")
        result = LegacyFormAdapter().process(json.dumps(payload))
        assert result.referrer.phone == "010-1111-2222"
        assert result.referrer.extra == ""

    def test_contact_without_name_keeps_phone(self):
        payload = dict(LEGACY_PAYLOAD, referrer="/ 010-3333-4444 / 1980")
        result = LegacyFormAdapter().process(json.dumps(payload))
        assert result.referrer.name == ""
        assert result.referrer.phone == "010-3333-4444"
        assert result.referrer.extra == "1980"

    def test_separate_columns_win(self):
        payload = dict(LEGACY_PAYLOAD, name="김민준")
        result = LegacyFormAdapter().process(json.dumps(payload))
        assert result.name == "김민준"

    def test_missing_patient_fails_validation(self):
        payload = {k: v for k, v in LEGACY_PAYLOAD.items() if k != "patient"}
        with pytest.raises(ValidationError) as exc_info:
            LegacyFormAdapter().process(json.dumps(payload))
        fields = {e["field"] for e in exc_info.value.detail["errors"]}
        assert fields == {"name", "resident_id", "phone"}


class TestGetAdapter:

    def test_known_sources(self):
        assert isinstance(get_adapter("webform"), WebFormAdapter)
        assert isinstance(get_adapter("legacy"), LegacyFormAdapter)
        assert isinstance(get_adapter("LEGACY_SHEET"), LegacyFormAdapter)

    def test_unknown_source(self):
        with pytest.raises(ValidationError) as exc_info:
            get_adapter("fax")
        assert exc_info.value.code == "UNKNOWN_SOURCE"

    def test_process_records_source_alias(self):
        result = get_adapter("legacy_sheet").process(json.dumps(LEGACY_PAYLOAD), source="legacy_sheet")
        assert result.source == "legacy_sheet"
