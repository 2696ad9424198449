"""
Prometheus metrics of the web process
"""
from prometheus_client import Counter, Histogram

# business
QUESTIONNAIRE_SUBMITTED = Counter(
    "questionnaire_submitted_total",
    "Questionnaires stored",
    ["source"],
)
CONSULTATION_SAVED = Counter(
    "consultation_saved_total",
    "Consultation inserts and edits",
    ["action"],
)
MESSAGE_REQUESTED = Counter(
    "message_requested_total",
    "Patient message generation requests",
)
MESSAGE_COMPLETED = Counter(
    "message_completed_total",
    "Messages generated",
)
MESSAGE_FAILED = Counter(
    "message_failed_total",
    "Message generations given up after retries",
)
DUPLICATION_BLOCK = Counter(
    "duplication_block_total",
    "Submissions blocked as duplicates",
    ["code"],
)
LLM_PROVIDER_USAGE = Counter(
    "llm_provider_usage_total",
    "LLM calls per provider",
    ["provider"],
)

# latency (Histogram exposes _count, _sum, _bucket)
API_QUESTIONNAIRE_DURATION = Histogram(
    "api_questionnaire_duration_seconds",
    "/api/questionnaires/ and /api/intake/ response time",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0),
)
API_CONSULTATION_DURATION = Histogram(
    "api_consultation_duration_seconds",
    "/api/consultations/ response time",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0),
)
API_DASHBOARD_DURATION = Histogram(
    "api_dashboard_duration_seconds",
    "/api/dashboard/ and /api/stats/ response time",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 3.0),
)
API_MESSAGE_STATUS_DURATION = Histogram(
    "api_message_status_duration_seconds",
    "GET /api/messages/status/ response time",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0),
)
CELERY_TASK_DURATION = Histogram(
    "celery_task_duration_seconds",
    "generate_message_task duration",
    buckets=(1, 5, 10, 30, 60, 120),
)

# errors
HTTP_5XX = Counter("http_5xx_total", "5xx responses")
HTTP_4XX = Counter("http_4xx_total", "4xx responses", ["code"])
VALIDATION_ERROR = Counter("validation_error_total", "Rejected payloads")
BLOCK_ERROR = Counter("block_error_total", "Blocked operations", ["code"])
CELERY_TASK_FAILURE = Counter("celery_task_failure_total", "Celery task failures")
CELERY_TASK_RETRY = Counter("celery_task_retry_total", "Celery task retries")
