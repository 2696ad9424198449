"""
Duplicate detection
- Questionnaire: national ID already registered -> block (BlockError 409)
- Database uniqueness violation on insert -> same block, matched on the error text
- Sign-up: e-mail already registered -> block
"""
import logging

from django.contrib.auth import get_user_model

from clinic_dashboard.exceptions import BlockError

from .models import PatientQuestionnaire

logger = logging.getLogger(__name__)

# substrings the database drivers use for unique-constraint violations
_UNIQUE_VIOLATION_MARKERS = ("unique", "duplicate", "already")


def check_resident_id(resident_id):
    """
    National ID already in use -> BlockError
    Blank national IDs are never considered duplicates
    """
    if not resident_id:
        return
    existing = PatientQuestionnaire.objects.filter(resident_id=resident_id).first()
    if existing:
        logger.info("duplicate national ID blocked (questionnaire #%s)", existing.id)
        raise BlockError(
            message="이미 등록된 주민등록번호입니다.",
            code="DUPLICATE_RESIDENT_ID",
            detail={"existing_id": existing.id},
        )


def is_unique_violation(error):
    text = str(error).lower()
    return any(marker in text for marker in _UNIQUE_VIOLATION_MARKERS)


def duplicate_resident_id_error():
    """BlockError for a uniqueness violation reported by the database itself"""
    return BlockError(
        message="이미 등록된 주민등록번호입니다.",
        code="DUPLICATE_RESIDENT_ID",
    )


def check_email_available(email):
    User = get_user_model()
    if User.objects.filter(username__iexact=email).exists():
        raise BlockError(
            message="이미 가입된 이메일입니다.",
            code="EMAIL_ALREADY_REGISTERED",
        )
