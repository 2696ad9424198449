"""
Staff authentication on top of django.contrib.auth
The e-mail address is the username. Sessions are Django's database sessions.
"""
import logging
from functools import wraps

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model, login, logout
from django.contrib.auth.forms import PasswordResetForm, SetPasswordForm
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import send_mail
from django.core.validators import validate_email
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from clinic_dashboard.exceptions import AuthenticationRequired, BlockError, ValidationError

from .duplication_detection import check_email_available

logger = logging.getLogger(__name__)


def api_login_required(view):
    """Like login_required, but answers 401 JSON instead of redirecting"""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            raise AuthenticationRequired()
        return view(request, *args, **kwargs)
    return wrapper


def user_to_dict(user):
    return {
        "id": user.id,
        "email": user.email,
        "name": user.first_name,
        "last_login": user.last_login.isoformat() if user.last_login else None,
    }


def _field_errors(field, error):
    return [{"field": field, "message": message} for message in error.messages]


def _clean_email(email):
    email = (email or "").strip().lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError(
            message="입력값 검증에 실패했습니다.",
            code="VALIDATION_ERROR",
            detail={"errors": [{"field": "email", "message": "이메일 형식이 올바르지 않습니다."}]},
        )
    return email


def signup(data):
    email = _clean_email(data.get("email"))
    password = data.get("password") or ""
    errors = []
    if password != data.get("password_confirm", password):
        errors.append({"field": "password_confirm", "message": "비밀번호가 일치하지 않습니다."})
    try:
        validate_password(password)
    except DjangoValidationError as e:
        errors.extend(_field_errors("password", e))
    if errors:
        raise ValidationError(
            message="입력값 검증에 실패했습니다.",
            code="VALIDATION_ERROR",
            detail={"errors": errors},
        )

    check_email_available(email)
    user = get_user_model().objects.create_user(
        username=email,
        email=email,
        password=password,
        first_name=(data.get("name") or "").strip(),
    )
    logger.info("staff account #%s created", user.id)
    return {
        "success": True,
        "data": {"message": "회원가입이 완료되었습니다.", "user": user_to_dict(user)},
    }


def sign_in(request, data):
    email = (data.get("email") or "").strip().lower()
    user = authenticate(request, username=email, password=data.get("password") or "")
    if user is None:
        logger.info("failed sign-in attempt")
        raise BlockError(
            message="이메일 또는 비밀번호가 올바르지 않습니다.",
            code="INVALID_CREDENTIALS",
            http_status=401,
        )
    login(request, user)
    return {"success": True, "data": {"user": user_to_dict(user)}}


def sign_out(request):
    logout(request)
    return {"success": True, "data": {"message": "로그아웃되었습니다."}}


def session(request):
    user = request.user
    if not user.is_authenticated:
        return {"success": True, "data": {"authenticated": False, "user": None}}
    return {"success": True, "data": {"authenticated": True, "user": user_to_dict(user)}}


def send_password_reset(data):
    """
    Mail a reset link (PASSWORD_RESET_URL?uid=..&token=..) to every active
    account with that address. Unknown addresses get the same answer.
    """
    email = _clean_email(data.get("email"))
    for user in PasswordResetForm().get_users(email):
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        link = f"{settings.PASSWORD_RESET_URL}?uid={uid}&token={token}"
        send_mail(
            subject="[클리닉 대시보드] 비밀번호 재설정",
            message=f"아래 링크에서 새 비밀번호를 설정해 주세요.\n\n{link}\n",
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
        )
        logger.info("password reset mail sent to account #%s", user.id)
    return {
        "success": True,
        "data": {"message": "비밀번호 재설정 링크를 이메일로 보냈습니다."},
    }


def _invalid_reset_link():
    return BlockError(
        message="비밀번호 재설정 링크가 유효하지 않거나 만료되었습니다.",
        code="INVALID_RESET_LINK",
        http_status=400,
    )


def confirm_password_reset(data):
    User = get_user_model()
    try:
        user_id = force_str(urlsafe_base64_decode(data.get("uid") or ""))
        user = User.objects.get(pk=user_id)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        raise _invalid_reset_link()
    if not default_token_generator.check_token(user, data.get("token") or ""):
        raise _invalid_reset_link()

    password = data.get("password") or ""
    form = SetPasswordForm(user, {
        "new_password1": password,
        "new_password2": data.get("password_confirm", password),
    })
    if not form.is_valid():
        raise ValidationError(
            message="입력값 검증에 실패했습니다.",
            code="VALIDATION_ERROR",
            detail={"errors": [
                {"field": "password", "message": message}
                for messages in form.errors.values() for message in messages
            ]},
        )
    form.save()
    logger.info("password reset for account #%s", user.id)
    return {"success": True, "data": {"message": "비밀번호가 변경되었습니다."}}
