"""
Single entry point for patient message generation.
Callers use generate_patient_message and never a concrete LLM.
"""
import logging
import time

from .dates import format_date_text
from .llm_providers import get_llm_service
from .statsd_metrics import (
    llm_api_error,
    llm_api_latency_seconds,
    llm_provider_usage,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "당신은 치과 상담실장입니다. 상담을 마친 환자에게 보낼 짧고 정중한 안내 문자를 작성합니다. "
    "진료비 금액이나 주민등록번호 같은 민감한 정보는 절대 포함하지 마세요."
)


def _or_none(value):
    return value if value else "없음"


def build_user_prompt(request) -> str:
    """request: a MessageGeneration snapshot row"""
    next_visit = "미정"
    if request.next_visit_date:
        next_visit = format_date_text(request.next_visit_date)
        if request.next_visit_time:
            next_visit = f"{next_visit} {request.next_visit_time}"

    return f"""다음 상담 정보를 바탕으로 환자에게 보낼 문자 메시지를 작성해 주세요.

환자 정보:
- 이름: {request.patient_name}
- 성별: {_or_none(request.patient_gender)}
- 생년월일: {_or_none(request.patient_birth)}
- 기저질환: {_or_none(request.medical_conditions)}
- 복용 약물: {_or_none(request.medications)}

상담 정보:
- 상담일: {format_date_text(request.consultation_date) or '미정'}
- 담당 의사: {_or_none(request.doctor)}
- 상담 실장: {_or_none(request.consultant)}
- 상담 결과: {_or_none(request.consultation_result)}
- 치료 내용: {_or_none(request.treatments)}
- 다음 내원: {next_visit}

조건:
1. 3~5문장, 존댓말
2. 상담 결과에 맞춘 안내 (동의: 치료 일정 안내, 비동의/보류: 부담 없는 재상담 권유)
3. 기저질환이나 복용 약물이 있으면 내원 시 알려 달라는 문장 포함"""


def generate_patient_message(request, *, llm_provider: str | None = None) -> str:
    """
    Generate the message text for one request row.
    llm_provider: optional override (openai / claude), settings.LLM_PROVIDER otherwise
    """
    service = get_llm_service(provider=llm_provider)
    provider_id = getattr(service, "provider_id", "unknown")
    user_prompt = build_user_prompt(request)

    start = time.perf_counter()
    try:
        result = service.generate(
            system_message=SYSTEM_PROMPT,
            user_message=user_prompt,
            temperature=0.7,
            max_tokens=800,
        )
    except Exception:
        llm_api_error()
        logger.warning("LLM call failed (provider=%s, request #%s)", provider_id, request.id)
        raise
    llm_api_latency_seconds(time.perf_counter() - start)
    llm_provider_usage(provider_id)
    return result.strip()
