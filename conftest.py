"""
Pytest configuration and shared fixtures.
"""
import pytest
from django.test import Client

# national IDs with a valid check digit
VALID_RESIDENT_ID = "900101-1234568"
OTHER_RESIDENT_ID = "850505-2345674"
STAFF_EMAIL = "staff@clinic.test"
STAFF_PASSWORD = "clinic1234!"


@pytest.fixture(autouse=True)
def mock_llm(settings):
    """Never call a real LLM from tests."""
    settings.USE_MOCK_LLM = True


@pytest.fixture
def questionnaire_payload():
    """Web form questionnaire payload."""
    return {
        "name": "김민수",
        "resident_id": VALID_RESIDENT_ID,
        "phone": "010-1234-5678",
        "gender": "남성",
        "address": "서울특별시 강남구 테헤란로 123",
        "consent": True,
        "at_clinic": True,
        "emergency_contact_name": "김영희",
        "emergency_contact_relation": "배우자",
        "emergency_contact_phone": "010-9876-5432",
        "treatment_area": "앞니, 어금니",
        "medical_conditions": "고혈압",
        "medications": "아스피린",
    }


@pytest.fixture
def consultation_payload():
    """Consultation form payload for the patient of questionnaire_payload."""
    return {
        "patient_id": VALID_RESIDENT_ID,
        "consultation_date": "2024-03-15",
        "patient_type": "신환",
        "doctor": "박원장",
        "consultant": "이실장",
        "consultation_result": "부분동의",
        "consultation_amount": "1,500,000",
        "payment_amount": "500,000",
        "treatment_details": "임플란트 2개",
        "appointment_date": "2024-03-22",
        "appointment_time": "14:30",
    }


@pytest.fixture
def staff_user(django_user_model):
    return django_user_model.objects.create_user(
        username=STAFF_EMAIL,
        email=STAFF_EMAIL,
        password=STAFF_PASSWORD,
    )


@pytest.fixture
def auth_client(staff_user):
    """Client with a logged-in staff session."""
    client = Client()
    client.force_login(staff_user)
    return client
