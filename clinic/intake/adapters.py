"""
Intake adapters: parse, transform, validate
"""
import json
from abc import ABC, abstractmethod
from typing import Any

from clinic_dashboard.exceptions import ValidationError

from clinic.serializers import parse_bool, validate_questionnaire_data
from clinic.text_fields import unpack_slash_field
from clinic.validators import is_valid_phone

from .types import IntakeQuestionnaire, ContactInfo

_TEXT_FIELDS = (
    "gender", "address", "private_insurance_period", "insurance_company",
    "visit_reason", "treatment_area", "referral_source", "last_visit",
    "medications", "other_medication", "medical_conditions", "other_condition",
    "allergies", "other_allergy", "pregnancy_status", "pregnancy_week",
    "smoking_status", "smoking_amount", "dental_fears", "additional_info",
)


def _text(parsed, key):
    value = parsed.get(key)
    return "" if value is None else str(value).strip()


class BaseIntakeAdapter(ABC):
    """
    Base class of every intake source.
    A new source implements parse / transform; validate is shared.
    """

    source_id: str = "unknown"

    def process(self, raw: bytes | str, source: str | None = None) -> IntakeQuestionnaire:
        """parse -> transform -> validate, ValidationError on failure"""
        parsed = self.parse(raw)
        questionnaire = self.transform(parsed)
        self.validate(questionnaire)
        questionnaire.source = source or self.source_id
        questionnaire.raw_data = raw
        return questionnaire

    def parse(self, raw: bytes | str) -> Any:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(
                message="Invalid JSON format",
                code="INVALID_JSON",
                detail={"error": str(e)},
            )
        if not isinstance(parsed, dict):
            raise ValidationError(
                message="요청 본문은 JSON 객체여야 합니다.",
                code="INVALID_REQUEST",
            )
        return parsed

    @abstractmethod
    def transform(self, parsed: Any) -> IntakeQuestionnaire:
        pass

    def validate(self, questionnaire: IntakeQuestionnaire) -> None:
        """Same rules as the web form: national ID checksum, phone patterns"""
        validate_questionnaire_data(questionnaire.to_create_dict())

    def _common(self, parsed: dict) -> dict:
        data = {key: _text(parsed, key) for key in _TEXT_FIELDS}
        for key in ("at_clinic", "consent", "has_private_insurance"):
            data[key] = parse_bool(parsed.get(key))
        data["submitted_at"] = parsed.get("submitted_at") or None
        return data


class WebFormAdapter(BaseIntakeAdapter):
    """
    Current questionnaire form: one column per field
    (emergency_contact_name / _relation / _phone, referrer_name / _phone / _birth_year)
    """

    source_id = "webform"

    def transform(self, parsed: dict) -> IntakeQuestionnaire:
        return IntakeQuestionnaire(
            name=_text(parsed, "name"),
            resident_id=_text(parsed, "resident_id"),
            phone=_text(parsed, "phone"),
            emergency_contact=ContactInfo(
                name=_text(parsed, "emergency_contact_name"),
                phone=_text(parsed, "emergency_contact_phone"),
                extra=_text(parsed, "emergency_contact_relation"),
            ),
            referrer=ContactInfo(
                name=_text(parsed, "referrer_name"),
                phone=_text(parsed, "referrer_phone"),
                extra=_text(parsed, "referrer_birth_year"),
            ),
            source=self.source_id,
            **self._common(parsed),
        )


class LegacyFormAdapter(BaseIntakeAdapter):
    """
    Legacy export: several fields packed into one text column
    - patient: "name / resident_id / phone"  (or separate name, resident_id, phone)
    - referrer: "name / phone / birth year"
    - emergency_contact: "name / phone / relation"
    """

    source_id = "legacy"

    def _contact(self, packed, names) -> ContactInfo:
        parts = unpack_slash_field(packed, names)
        name, phone, extra = (parts[n] for n in names)
        # 'name / relation' rows: the second segment is not a phone number
        if phone and not is_valid_phone(phone) and not extra:
            phone, extra = "", phone
        return ContactInfo(name=name, phone=phone, extra=extra)

    def transform(self, parsed: dict) -> IntakeQuestionnaire:
        patient = unpack_slash_field(parsed.get("patient"), ("name", "resident_id", "phone"))
        return IntakeQuestionnaire(
            name=_text(parsed, "name") or patient["name"],
            resident_id=_text(parsed, "resident_id") or patient["resident_id"],
            phone=_text(parsed, "phone") or patient["phone"],
            emergency_contact=self._contact(parsed.get("emergency_contact"), ("name", "phone", "relation")),
            referrer=self._contact(parsed.get("referrer"), ("name", "phone", "birth_year")),
            source=self.source_id,
            **self._common(parsed),
        )
