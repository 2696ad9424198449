"""
JSON endpoints of the dashboard. Views only parse the request and call services;
errors are raised as BaseAppException and rendered by AppExceptionMiddleware.
"""
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from clinic_dashboard.exceptions import BlockError, ValidationError

from . import services
from .accounts import api_login_required
from .intake import get_adapter
from .serializers import parse_json_body


def require_method(request, *methods):
    if request.method not in methods:
        raise BlockError(
            message="Method not allowed",
            code="METHOD_NOT_ALLOWED",
            detail={"allowed": list(methods)},
            http_status=405,
        )


def json_response(result, status=200):
    return JsonResponse(result, status=status, json_dumps_params={"ensure_ascii": False})


def _query(request, *names):
    return {name: (request.GET.get(name) or "").strip() or None for name in names}


def health(request):
    """Database connection test, open to anonymous callers"""
    require_method(request, "GET")
    return json_response(services.check_database())


@csrf_exempt
@api_login_required
def questionnaires(request):
    """
    GET  ?q=&sort=&order=       list
    GET  ?export=1              CSV
    POST                        create
    """
    require_method(request, "GET", "POST")
    if request.method == "POST":
        result = services.create_questionnaire(parse_json_body(request.body))
        return json_response(result, status=201)

    params = _query(request, "q", "sort", "order")
    sort = params["sort"] or "created_at"
    order = params["order"] or "desc"
    if request.GET.get("export") == "1":
        return services.export_questionnaires_csv(params["q"], sort, order)
    return json_response(services.list_questionnaires(params["q"], sort, order))


@csrf_exempt
@api_login_required
def questionnaire_detail(request, questionnaire_id):
    require_method(request, "DELETE")
    return json_response(services.delete_questionnaire(questionnaire_id))


@csrf_exempt
def intake(request, source):
    """
    Questionnaire submitted from an intake source (web form, legacy export).
    Patients fill the form themselves, so no staff session is required.
    """
    require_method(request, "POST")
    adapter = get_adapter(source)
    questionnaire = adapter.process(request.body, source=source)
    result = services.create_questionnaire(questionnaire.to_create_dict(), source=questionnaire.source)
    return json_response(result, status=201)


@api_login_required
def patient_detail(request, resident_id):
    require_method(request, "GET")
    return json_response(services.get_patient_detail(resident_id))


@csrf_exempt
@api_login_required
def consultations(request):
    require_method(request, "GET", "POST")
    if request.method == "POST":
        result = services.create_consultation(parse_json_body(request.body))
        return json_response(result, status=201)
    filters = _query(request, "q", "date_from", "date_to", "consultant", "status", "sort", "order")
    return json_response(services.list_consultations(filters))


@csrf_exempt
@api_login_required
def consultation_detail(request, consultation_id):
    require_method(request, "PATCH", "DELETE")
    if request.method == "DELETE":
        return json_response(services.delete_consultation(consultation_id))
    return json_response(services.update_consultation(consultation_id, parse_json_body(request.body)))


@api_login_required
def recent_consultations(request):
    require_method(request, "GET")
    params = _query(request, "q", "consultant")
    return json_response(services.recent_consultations(params["q"], params["consultant"]))


@api_login_required
def dashboard(request):
    require_method(request, "GET")
    params = _query(request, "range", "start", "end", "consultant")
    return json_response(services.dashboard(
        params["range"] or "thisMonth",
        params["start"],
        params["end"],
        params["consultant"],
    ))


@api_login_required
def sales_stats(request):
    require_method(request, "GET")
    period = (request.GET.get("period") or "month").strip()
    return json_response(services.sales_statistics(period))


@csrf_exempt
@api_login_required
def messages(request):
    require_method(request, "POST")
    data = parse_json_body(request.body)
    result = services.request_message(
        data.get("patient_id"),
        data.get("consultation_id"),
        llm_provider=data.get("llm_provider") or "",
    )
    return json_response(result, status=202)


def _parse_ids(raw):
    try:
        ids = [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError(
            message="ids 는 쉼표로 구분된 숫자여야 합니다.",
            code="INVALID_IDS",
            detail={"ids": raw},
        )
    if not ids:
        raise ValidationError(message="ids 가 필요합니다.", code="INVALID_IDS")
    return ids


@api_login_required
def message_status(request):
    """GET ?ids=1,2,3, polled by the dashboard until pending_ids is empty"""
    require_method(request, "GET")
    return json_response(services.message_status(_parse_ids(request.GET.get("ids") or "")))
