"""
Unified error handling: BaseAppException and subclasses
Every error carries: type, code, message, detail, http_status
"""


class BaseAppException(Exception):
    """Base class: unified error format"""
    type = "error"
    code = "UNKNOWN"
    message = "Unknown error"
    http_status = 400

    def __init__(self, message=None, code=None, detail=None, http_status=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.code = code or self.code
        self.detail = detail if detail is not None else {}
        if http_status is not None:
            self.http_status = http_status

    def to_dict(self):
        return {
            "success": False,
            "type": self.type,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }


class ValidationError(BaseAppException):
    """Input is malformed (national ID, phone, required fields...)"""
    type = "validation"
    code = "VALIDATION_ERROR"
    message = "Validation failed"
    http_status = 400


class BlockError(BaseAppException):
    """Business rule forbids the operation (duplicate national ID, missing row...)"""
    type = "block"
    code = "BLOCK"
    message = "Operation blocked"
    http_status = 409


class WarningException(BaseAppException):
    """Possibly wrong, the user may confirm and continue"""
    type = "warning"
    code = "WARNING"
    message = "Please confirm to continue"
    http_status = 200


class AuthenticationRequired(BaseAppException):
    """No logged-in session"""
    type = "auth"
    code = "AUTHENTICATION_REQUIRED"
    message = "로그인이 필요합니다."
    http_status = 401
