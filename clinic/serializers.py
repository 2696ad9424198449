"""
Request validation and format conversion (dashboard <-> backend)
"""
import json
from datetime import datetime

from clinic_dashboard.exceptions import ValidationError

from .validators import is_valid_phone, is_valid_resident_id, normalize_resident_id

QUESTIONNAIRE_REQUIRED_FIELDS = ["name", "resident_id", "phone"]

QUESTIONNAIRE_BOOLEAN_FIELDS = ["at_clinic", "consent", "has_private_insurance"]

QUESTIONNAIRE_TEXT_FIELDS = [
    "name", "resident_id", "gender", "phone", "address",
    "private_insurance_period", "insurance_company",
    "emergency_contact_name", "emergency_contact_relation", "emergency_contact_phone",
    "visit_reason", "treatment_area", "referral_source",
    "referrer_name", "referrer_phone", "referrer_birth_year", "last_visit",
    "medications", "other_medication", "medical_conditions", "other_condition",
    "allergies", "other_allergy", "pregnancy_status", "pregnancy_week",
    "smoking_status", "smoking_amount", "dental_fears", "additional_info",
]

# optional phone numbers, validated only when filled in
OPTIONAL_PHONE_FIELDS = ["emergency_contact_phone", "referrer_phone"]

CONSULTATION_MONEY_FIELDS = ["diagnosis_amount", "consultation_amount", "payment_amount"]

CONSULTATION_COUNT_FIELDS = [
    "ip_count", "ipd_count", "ipb_count", "bg_count",
    "cr_count", "in_count", "r_count", "ca_count",
]

CONSULTATION_DATE_FIELDS = [
    "consultation_date", "first_contact_date", "second_contact_date",
    "third_contact_date", "appointment_date",
]

CONSULTATION_TEXT_FIELDS = [
    "doctor", "consultant", "treatment_details", "consultation_content",
    "non_consent_reason", "consultation_memo", "today_treatment", "next_treatment",
    "appointment_time", "treatment_status",
]

CONSULTATION_CHOICE_FIELDS = {
    "patient_type": ("신환", "구환"),
    "consultation_result": ("비동의", "부분동의", "전체동의", "보류", "환불"),
    "first_contact_type": ("방문", "전화"),
    "second_contact_type": ("방문", "전화"),
    "third_contact_type": ("방문", "전화"),
}

_TRUE_STRINGS = {"true", "1", "yes", "y", "예", "on"}


def parse_json_body(body):
    """
    Parse a POST/PATCH body (JSON) -> dict
    Malformed JSON or a non-object raises ValidationError
    """
    try:
        data = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(
            message="Invalid JSON format",
            code="INVALID_JSON",
            detail={"error": str(e)},
        )
    if not isinstance(data, dict):
        raise ValidationError(
            message="요청 본문은 JSON 객체여야 합니다.",
            code="INVALID_REQUEST",
            detail={"errors": [{"field": "_", "message": "요청 본문은 JSON 객체여야 합니다."}]},
        )
    return data


def parse_amount(value):
    """'1,234,000' / 1234000 / '' -> int, anything that is not a digit is dropped"""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0, int(value))
    digits = "".join(ch for ch in str(value) if ch.isdigit())
    return int(digits) if digits else 0


def parse_date(value):
    """'YYYY-MM-DD' (or an ISO timestamp) -> date, blank -> None, garbage -> ValueError"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


def parse_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


def validate_questionnaire_data(data):
    """
    Validate an intake questionnaire payload.
    All problems are collected and raised as one ValidationError.
    """
    errors = []

    for field in QUESTIONNAIRE_REQUIRED_FIELDS:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append({"field": field, "message": "필수 입력 항목입니다."})

    resident_id = data.get("resident_id")
    if resident_id and not is_valid_resident_id(str(resident_id)):
        errors.append({"field": "resident_id", "message": "유효하지 않은 주민등록번호입니다."})

    phone = data.get("phone")
    if phone and not is_valid_phone(str(phone)):
        errors.append({"field": "phone", "message": "전화번호 형식이 올바르지 않습니다. (예: 010-1234-5678)"})

    for field in OPTIONAL_PHONE_FIELDS:
        value = data.get(field)
        if value and not is_valid_phone(str(value)):
            errors.append({"field": field, "message": "전화번호 형식이 올바르지 않습니다. (예: 010-1234-5678)"})

    if errors:
        raise ValidationError(
            message="입력값 검증에 실패했습니다.",
            code="VALIDATION_ERROR",
            detail={"errors": errors},
        )


def questionnaire_to_model_kwargs(data):
    """Validated payload -> PatientQuestionnaire kwargs (unknown keys are ignored)"""
    kwargs = {}
    for field in QUESTIONNAIRE_TEXT_FIELDS:
        if field in data and data[field] is not None:
            kwargs[field] = str(data[field]).strip()
    for field in QUESTIONNAIRE_BOOLEAN_FIELDS:
        if field in data:
            kwargs[field] = parse_bool(data[field])
    if kwargs.get("resident_id"):
        kwargs["resident_id"] = normalize_resident_id(kwargs["resident_id"])
    if data.get("submitted_at"):
        try:
            kwargs["submitted_at"] = datetime.fromisoformat(str(data["submitted_at"]).replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError(
                message="입력값 검증에 실패했습니다.",
                code="VALIDATION_ERROR",
                detail={"errors": [{"field": "submitted_at", "message": "ISO 8601 형식이어야 합니다."}]},
            )
    return kwargs


def validate_consultation_data(data, partial=False):
    """
    Validate a consultation payload and return the model kwargs.
    partial=True (edit) only checks the keys that are present.
    """
    errors = []
    kwargs = {}

    if not partial or "patient_id" in data:
        patient_id = str(data.get("patient_id") or "").strip()
        if not patient_id:
            errors.append({"field": "patient_id", "message": "환자 ID가 없습니다."})
        kwargs["patient_id"] = patient_id

    for field in CONSULTATION_DATE_FIELDS:
        if field not in data:
            continue
        try:
            kwargs[field] = parse_date(data[field])
        except ValueError:
            errors.append({"field": field, "message": "날짜 형식은 YYYY-MM-DD 이어야 합니다."})

    # a consultation always needs a date, an edit may leave it untouched
    date_required = not partial or "consultation_date" in data
    date_error = any(e["field"] == "consultation_date" for e in errors)
    if date_required and not date_error and kwargs.get("consultation_date") is None:
        errors.append({"field": "consultation_date", "message": "상담 일자가 올바르지 않습니다."})

    for field, choices in CONSULTATION_CHOICE_FIELDS.items():
        if field not in data:
            continue
        if data[field] not in choices:
            errors.append({"field": field, "message": f"허용값: {', '.join(choices)}"})
        else:
            kwargs[field] = data[field]

    for field in CONSULTATION_MONEY_FIELDS + CONSULTATION_COUNT_FIELDS:
        if field in data:
            kwargs[field] = parse_amount(data[field])

    for field in CONSULTATION_TEXT_FIELDS:
        if field in data:
            kwargs[field] = str(data[field] or "").strip()

    if errors:
        raise ValidationError(
            message="입력값 검증에 실패했습니다.",
            code="VALIDATION_ERROR",
            detail={"errors": errors},
        )
    return kwargs


def remaining_payment(consultation_amount, payment_amount):
    return max(0, consultation_amount - payment_amount)
