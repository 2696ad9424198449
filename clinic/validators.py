"""
Field validators shared by serializers, intake adapters and auth:
- national ID (resident registration number) weighted checksum
- mobile phone pattern
- sign-up password policy (Django AUTH_PASSWORD_VALIDATORS entry)
"""
import re

from django.core.exceptions import ValidationError as DjangoValidationError

# Multipliers for the first 12 digits of the national ID
RESIDENT_ID_WEIGHTS = (2, 3, 4, 5, 6, 7, 8, 9, 2, 3, 4, 5)

RESIDENT_ID_PATTERN = re.compile(r"^\d{6}-?\d{7}$")

PHONE_PATTERN = re.compile(r"^(010|011|016|017|018|019)-\d{3,4}-\d{4}$")

# >= 8 chars, at least one lowercase, one digit, one special (@$!%*?&#)
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$")


def resident_id_check_digit(digits):
    """Check digit for the first 12 digits: (11 - weighted sum mod 11) mod 10"""
    total = sum(int(d) * w for d, w in zip(digits[:12], RESIDENT_ID_WEIGHTS))
    return (11 - total % 11) % 10


def is_valid_resident_id(value):
    """13 digits (an optional '-' after the 6th) whose last digit matches the checksum"""
    if not value or not isinstance(value, str):
        return False
    s = value.strip()
    if not RESIDENT_ID_PATTERN.match(s):
        return False
    digits = s.replace("-", "")
    return resident_id_check_digit(digits) == int(digits[12])


def normalize_resident_id(value):
    """Store national IDs as YYMMDD-NNNNNNN"""
    digits = value.strip().replace("-", "")
    return f"{digits[:6]}-{digits[6:]}"


def is_valid_phone(value):
    if not value or not isinstance(value, str):
        return False
    return bool(PHONE_PATTERN.match(value.strip()))


def is_valid_password(value):
    return bool(value) and bool(PASSWORD_PATTERN.match(value))


class ClinicPasswordValidator:
    """Password policy for staff sign-up"""

    help_text_message = "비밀번호는 8자 이상이며, 소문자, 숫자, 특수문자(@$!%*?&#)를 각각 1개 이상 포함해야 합니다."

    def validate(self, password, user=None):
        if not is_valid_password(password):
            raise DjangoValidationError(self.help_text_message, code="password_policy")

    def get_help_text(self):
        return self.help_text_message


# 7th digit of the national ID -> century of birth
_CENTURY_BY_GENDER_DIGIT = {
    "9": 1800, "0": 1800,
    "1": 1900, "2": 1900, "5": 1900, "6": 1900,
    "3": 2000, "4": 2000, "7": 2000, "8": 2000,
}


def birth_date_from_resident_id(value):
    """'900101-1234567' -> '1990-01-01', '' when the ID is not usable"""
    if not value:
        return ""
    digits = value.strip().replace("-", "")
    if len(digits) != 13 or not digits.isdigit():
        return ""
    century = _CENTURY_BY_GENDER_DIGIT[digits[6]]
    return f"{century + int(digits[:2])}-{digits[2:4]}-{digits[4:6]}"
