"""
Internal standard format: the only questionnaire shape the services know
"""
from dataclasses import dataclass, field, fields
from typing import Any


@dataclass
class ContactInfo:
    """A person reachable by phone (emergency contact / referrer)"""
    name: str = ""
    phone: str = ""
    # relation for an emergency contact, birth year for a referrer
    extra: str = ""


@dataclass
class IntakeQuestionnaire:
    """
    Internal intake questionnaire.
    create_questionnaire only accepts this (through to_create_dict).
    """
    name: str
    resident_id: str
    phone: str
    gender: str = ""
    address: str = ""
    at_clinic: bool = False
    consent: bool = False
    has_private_insurance: bool = False
    private_insurance_period: str = ""
    insurance_company: str = ""
    emergency_contact: ContactInfo = field(default_factory=ContactInfo)
    referrer: ContactInfo = field(default_factory=ContactInfo)
    visit_reason: str = ""
    treatment_area: str = ""
    referral_source: str = ""
    last_visit: str = ""
    medications: str = ""
    other_medication: str = ""
    medical_conditions: str = ""
    other_condition: str = ""
    allergies: str = ""
    other_allergy: str = ""
    pregnancy_status: str = ""
    pregnancy_week: str = ""
    smoking_status: str = ""
    smoking_amount: str = ""
    dental_fears: str = ""
    additional_info: str = ""
    submitted_at: str | None = None
    source: str = "webform"
    raw_data: Any = field(default=None, repr=False)  # original payload, kept for troubleshooting

    def to_create_dict(self) -> dict:
        """Flatten into the dict create_questionnaire expects"""
        data = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("emergency_contact", "referrer", "source", "raw_data")
        }
        data.update({
            "emergency_contact_name": self.emergency_contact.name,
            "emergency_contact_phone": self.emergency_contact.phone,
            "emergency_contact_relation": self.emergency_contact.extra,
            "referrer_name": self.referrer.name,
            "referrer_phone": self.referrer.phone,
            "referrer_birth_year": self.referrer.extra,
        })
        return data
