"""
Business logic: database access, derived views, message requests
Every operation returns {"success": True, "data": ...} or raises a BaseAppException
"""
import csv
import logging
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, IntegrityError, connection, transaction
from django.http import HttpResponse
from django.utils import timezone

from clinic_dashboard.exceptions import BlockError, ValidationError

from .dates import local_today
from .duplication_detection import check_resident_id, duplicate_resident_id_error, is_unique_violation
from .listing import filter_records, sort_by_recent_activity, sort_records
from .llm_providers.factory import available_providers, resolve_provider
from .metrics import CONSULTATION_SAVED, MESSAGE_REQUESTED, QUESTIONNAIRE_SUBMITTED
from .models import Consultation, MessageGeneration, PatientQuestionnaire
from .serializers import (
    questionnaire_to_model_kwargs,
    remaining_payment,
    validate_consultation_data,
    validate_questionnaire_data,
)
from .stats import consultant_stats, date_range_bounds, follow_up, overview, sales_buckets
from .tasks import generate_message_task
from .text_fields import format_won, summarize_areas, summarize_text
from .validators import birth_date_from_resident_id, is_valid_resident_id, normalize_resident_id

logger = logging.getLogger(__name__)

QUESTIONNAIRE_CSV_COLUMNS = [
    'created_at', 'name', 'resident_id', 'gender', 'phone', 'address',
    'has_private_insurance', 'insurance_company',
    'emergency_contact_name', 'emergency_contact_relation', 'emergency_contact_phone',
    'visit_reason', 'treatment_area', 'referral_source',
    'referrer_name', 'referrer_phone', 'referrer_birth_year',
    'medical_conditions', 'medications', 'allergies', 'additional_info',
]

RECENT_SEARCH_FIELDS = ('patient_name', 'patient_id', 'consultant', 'consultation_content', 'treatment_status')

CONSULTATION_SEARCH_FIELDS = (
    'patient_name', 'patient_id', 'doctor', 'consultant', 'treatment_details',
    'consultation_content', 'consultation_memo', 'treatment_status',
)

RECENT_FOLLOW_UP_RESULTS = ('비동의', '부분동의', '보류')

_QUESTIONNAIRE_FIELDS = {f.name for f in PatientQuestionnaire._meta.get_fields()}
_CONSULTATION_FIELDS = {f.name for f in Consultation._meta.get_fields()} | {'patient_name', 'patient_phone'}


def _not_found(what, **detail):
    return BlockError(message=f"{what} not found", code="NOT_FOUND", detail=detail, http_status=404)


def _check_sort(sort, order, allowed):
    if sort not in allowed:
        raise ValidationError(
            message="정렬할 수 없는 항목입니다.",
            code="INVALID_SORT",
            detail={"sort": sort},
        )
    if order not in ("asc", "desc"):
        raise ValidationError(
            message="order 는 asc 또는 desc 입니다.",
            code="INVALID_SORT",
            detail={"order": order},
        )


# ---------------------------------------------------------------- questionnaires

def create_questionnaire(data, source="webform"):
    """
    Validate, block duplicate national IDs, insert.
    The unique constraint is the last line: a concurrent insert that passes
    check_resident_id still fails with the same BlockError.
    """
    validate_questionnaire_data(data)
    kwargs = questionnaire_to_model_kwargs(data)
    check_resident_id(kwargs.get('resident_id'))

    try:
        with transaction.atomic():
            questionnaire = PatientQuestionnaire.objects.create(**kwargs)
    except IntegrityError as e:
        if is_unique_violation(e):
            raise duplicate_resident_id_error()
        raise

    QUESTIONNAIRE_SUBMITTED.labels(source=source).inc()
    logger.info("questionnaire #%s stored (source=%s)", questionnaire.id, source)
    return {
        "success": True,
        "data": {
            "message": "문진표가 제출되었습니다.",
            "questionnaire_id": questionnaire.id,
        },
    }


def _questionnaire_rows(q=None, sort='created_at', order='desc'):
    _check_sort(sort, order, _QUESTIONNAIRE_FIELDS)
    records = list(PatientQuestionnaire.objects.values())
    return sort_records(filter_records(records, q), sort, order)


def list_questionnaires(q=None, sort='created_at', order='desc'):
    """Wholesale fetch, then text filter over every column and a single-field sort"""
    rows = _questionnaire_rows(q, sort, order)
    for row in rows:
        row['address_summary'] = summarize_text(row.get('address'), width=30)
        row['additional_info_summary'] = summarize_text(row.get('additional_info'), width=40)
        row['treatment_area_summary'] = summarize_areas(row.get('treatment_area'))
    return {"success": True, "data": {"results": rows, "count": len(rows)}}


def _csv_value(row, column):
    value = row.get(column)
    if value is None:
        return ''
    if column == 'created_at':
        return value.isoformat()
    return value


def export_questionnaires_csv(q=None, sort='created_at', order='desc'):
    """Same rows as list_questionnaires, as a CSV attachment"""
    rows = _questionnaire_rows(q, sort, order)
    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = 'attachment; filename="questionnaires.csv"'
    # BOM so spreadsheet programs pick UTF-8 for the Korean text
    response.write("\ufeff")
    writer = csv.writer(response)
    writer.writerow(QUESTIONNAIRE_CSV_COLUMNS)
    for row in rows:
        writer.writerow([_csv_value(row, column) for column in QUESTIONNAIRE_CSV_COLUMNS])
    return response


def delete_questionnaire(questionnaire_id):
    deleted, _ = PatientQuestionnaire.objects.filter(id=questionnaire_id).delete()
    if not deleted:
        raise _not_found("Questionnaire", id=questionnaire_id)
    logger.info("questionnaire #%s deleted", questionnaire_id)
    return {"success": True, "data": {"id": questionnaire_id}}


def _lookup_resident_id(resident_id):
    """Stored IDs are normalized, so accept the ID with or without '-'"""
    if is_valid_resident_id(resident_id):
        return normalize_resident_id(resident_id)
    return resident_id


def get_patient_detail(resident_id):
    """Questionnaire of the patient plus their consultations, newest first"""
    resident_id = _lookup_resident_id(resident_id)
    patient = PatientQuestionnaire.objects.filter(resident_id=resident_id).values().first()
    if patient is None:
        raise _not_found("Patient", resident_id=resident_id)

    consultations = sort_records(
        list(Consultation.objects.filter(patient_id=resident_id).values()),
        'consultation_date',
        'desc',
    )
    total_consultation = sum(c['consultation_amount'] for c in consultations)
    total_payment = sum(c['payment_amount'] for c in consultations)

    patient['address_summary'] = summarize_text(patient.get('address'), width=30)
    patient['additional_info_summary'] = summarize_text(patient.get('additional_info'), width=40)
    patient['treatment_area_summary'] = summarize_areas(patient.get('treatment_area'))
    return {
        "success": True,
        "data": {
            "patient": patient,
            "consultations": consultations,
            "totals": {
                "consultation_amount": total_consultation,
                "payment_amount": total_payment,
                "remaining_payment": remaining_payment(total_consultation, total_payment),
                "consultation_amount_text": format_won(total_consultation),
                "payment_amount_text": format_won(total_payment),
            },
        },
    }


# ---------------------------------------------------------------- consultations

def _consultation_row(consultation_id):
    return Consultation.objects.filter(id=consultation_id).values().first()


def _attach_patient_info(records):
    """Name / phone from the questionnaire, joined on the national ID with one IN query"""
    patient_ids = {r['patient_id'] for r in records if r.get('patient_id')}
    patients = {
        p['resident_id']: p
        for p in PatientQuestionnaire.objects
        .filter(resident_id__in=patient_ids)
        .values('resident_id', 'name', 'phone')
    }
    for record in records:
        patient = patients.get(record.get('patient_id'), {})
        record['patient_name'] = patient.get('name', '')
        record['patient_phone'] = patient.get('phone', '')
    return records


def create_consultation(data):
    kwargs = validate_consultation_data(data)
    kwargs['patient_id'] = _lookup_resident_id(kwargs['patient_id'])
    kwargs['remaining_payment'] = remaining_payment(
        kwargs.get('consultation_amount', 0),
        kwargs.get('payment_amount', 0),
    )
    consultation = Consultation.objects.create(**kwargs)
    CONSULTATION_SAVED.labels(action="create").inc()
    logger.info("consultation #%s stored for %s", consultation.id, consultation.patient_id)
    return {
        "success": True,
        "data": {
            "message": "상담 기록이 저장되었습니다.",
            "consultation": _consultation_row(consultation.id),
        },
    }


def update_consultation(consultation_id, data):
    """Partial edit, last write wins"""
    try:
        consultation = Consultation.objects.get(id=consultation_id)
    except Consultation.DoesNotExist:
        raise _not_found("Consultation", id=consultation_id)

    kwargs = validate_consultation_data(data, partial=True)
    if 'patient_id' in kwargs:
        kwargs['patient_id'] = _lookup_resident_id(kwargs['patient_id'])
    for field, value in kwargs.items():
        setattr(consultation, field, value)
    consultation.remaining_payment = remaining_payment(
        consultation.consultation_amount, consultation.payment_amount
    )
    consultation.last_modified_at = timezone.now()
    consultation.save()

    CONSULTATION_SAVED.labels(action="update").inc()
    logger.info("consultation #%s updated (%s)", consultation_id, ", ".join(sorted(kwargs)))
    return {
        "success": True,
        "data": {
            "message": "상담 기록이 수정되었습니다.",
            "consultation": _consultation_row(consultation_id),
        },
    }


def delete_consultation(consultation_id):
    deleted, _ = Consultation.objects.filter(id=consultation_id).delete()
    if not deleted:
        raise _not_found("Consultation", id=consultation_id)
    logger.info("consultation #%s deleted", consultation_id)
    return {"success": True, "data": {"id": consultation_id}}


def list_consultations(filters):
    """
    filters: q, date_from, date_to (consultation_date), consultant,
    status ('in_treatment' or an exact treatment_status), sort, order
    """
    sort = filters.get('sort') or 'consultation_date'
    order = filters.get('order') or 'desc'
    _check_sort(sort, order, _CONSULTATION_FIELDS)

    records = _attach_patient_info(list(Consultation.objects.values()))
    rows = filter_records(
        records,
        filters.get('q'),
        date_from=filters.get('date_from'),
        date_to=filters.get('date_to'),
        date_field='consultation_date',
        staff=filters.get('consultant'),
        status=filters.get('status'),
        search_fields=CONSULTATION_SEARCH_FIELDS,
    )
    rows = sort_records(rows, sort, order)
    return {"success": True, "data": {"results": rows, "count": len(rows)}}


def recent_consultations(q=None, consultant=None, today=None):
    """
    Consultations of the last RECENT_CONSULTATION_DAYS days, most recently
    touched first, plus the follow-up list and the consultant filter values
    """
    today = today or local_today()
    since = today - timedelta(days=settings.RECENT_CONSULTATION_DAYS)
    records = _attach_patient_info(
        list(Consultation.objects.filter(consultation_date__gte=since).values())
    )
    consultants = sorted({r['consultant'] for r in records if r.get('consultant')})

    rows = filter_records(records, q, staff=consultant, search_fields=RECENT_SEARCH_FIELDS)
    rows = sort_by_recent_activity(rows)[:settings.RECENT_CONSULTATION_LIMIT]
    return {
        "success": True,
        "data": {
            "since": since.isoformat(),
            "results": rows,
            "follow_up": follow_up(records, consultant, RECENT_FOLLOW_UP_RESULTS, limit=None),
            "consultants": consultants,
        },
    }


# ---------------------------------------------------------------- dashboard

def dashboard(date_range='thisMonth', start=None, end=None, consultant=None, today=None):
    """
    Per-consultant statistics over the selected period; overview and follow-up
    narrow to one consultant when given
    """
    today = today or local_today()
    date_from, date_to = date_range_bounds(date_range, today, start, end)

    queryset = Consultation.objects.order_by('-consultation_date')
    if date_from:
        queryset = queryset.filter(consultation_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(consultation_date__lte=date_to)
    records = list(queryset.values())

    selected = [r for r in records if not consultant or r.get('consultant') == consultant]
    return {
        "success": True,
        "data": {
            "range": date_range,
            "start": date_from.isoformat() if date_from else None,
            "end": date_to.isoformat() if date_to else None,
            "consultants": sorted({r['consultant'] for r in records if r.get('consultant')}),
            "consultant_stats": consultant_stats(records),
            "overview": overview(selected),
            "follow_up": follow_up(_attach_patient_info(selected), consultant),
        },
    }


def sales_statistics(period='month', today=None):
    today = today or local_today()
    # the widest window (12 months) bounds the query
    since = today.replace(day=1) - timedelta(days=366)
    records = list(
        Consultation.objects
        .filter(consultation_date__gte=since)
        .values('consultation_date', 'consultation_amount', 'payment_amount')
    )
    return {"success": True, "data": sales_buckets(records, period, today, settings.SALES_TARGETS)}


# ---------------------------------------------------------------- messages

def request_message(patient_id, consultation_id, llm_provider=''):
    """
    Insert a request row with a snapshot of the patient and the consultation,
    then enqueue the worker. The client polls message_status.
    """
    if llm_provider:
        try:
            llm_provider = resolve_provider(llm_provider)
        except ValueError:
            raise ValidationError(
                message="지원하지 않는 LLM 제공자입니다.",
                code="INVALID_LLM_PROVIDER",
                detail={"llm_provider": llm_provider, "allowed": available_providers()},
            )
    patient_id = _lookup_resident_id(str(patient_id or '').strip())
    try:
        consultation = Consultation.objects.get(id=consultation_id)
    except (Consultation.DoesNotExist, ValueError, TypeError):
        raise _not_found("Consultation", id=consultation_id)
    if consultation.patient_id != patient_id:
        raise ValidationError(
            message="상담 기록의 환자와 일치하지 않습니다.",
            code="PATIENT_MISMATCH",
            detail={"patient_id": patient_id, "consultation_id": consultation.id},
        )
    patient = PatientQuestionnaire.objects.filter(resident_id=patient_id).first()
    if patient is None:
        raise _not_found("Patient", resident_id=patient_id)

    request = MessageGeneration.objects.create(
        patient_id=patient_id,
        consultation_id=consultation.id,
        patient_name=patient.name,
        patient_phone=patient.phone,
        patient_gender=patient.gender,
        patient_birth=birth_date_from_resident_id(patient.resident_id),
        consultation_date=consultation.consultation_date,
        doctor=consultation.doctor,
        consultant=consultation.consultant,
        consultation_result=consultation.consultation_result,
        next_visit_date=consultation.appointment_date,
        next_visit_time=consultation.appointment_time,
        treatments=consultation.treatment_details,
        medical_conditions=", ".join(v for v in (patient.medical_conditions, patient.other_condition) if v),
        medications=", ".join(v for v in (patient.medications, patient.other_medication) if v),
        llm_provider=llm_provider or '',
        status='pending',
    )

    generate_message_task.delay(request.id)
    MESSAGE_REQUESTED.inc()
    logger.info("message request #%s queued (consultation #%s)", request.id, consultation.id)
    return {
        "success": True,
        "data": {
            "message": "메시지 생성을 요청했습니다.",
            "request_id": request.id,
            "status": request.status,
            "poll_interval": settings.MESSAGE_POLL_INTERVAL,
            "max_checks": settings.MESSAGE_POLL_MAX_CHECKS,
        },
    }


def _message_result(request):
    storage = getattr(request, 'storage', None)
    result = {
        "id": request.id,
        "patient_id": request.patient_id,
        "consultation_id": request.consultation_id,
        "status": request.status,
        "message_requested_at": request.message_requested_at.isoformat(),
        "custom_message": None,
        "message_generated_at": None,
    }
    if storage is not None:
        result["custom_message"] = storage.custom_message
        result["message_generated_at"] = storage.message_generated_at.isoformat()
    if request.status == 'failed':
        result["error"] = request.error_message or "Generation failed"
    return result


def message_status(ids):
    """
    Status of each request; a request is done once its storage row exists
    or it failed. pending_ids empty means the client can stop polling.
    """
    requests = MessageGeneration.objects.select_related('storage').filter(id__in=ids).order_by('id')
    results = [_message_result(r) for r in requests]
    found = {r["id"] for r in results}
    pending_ids = [
        r["id"] for r in results
        if r["custom_message"] is None and r["status"] != 'failed'
    ]
    return {
        "success": True,
        "data": {
            "results": results,
            "pending_ids": pending_ids,
            "missing_ids": [i for i in ids if i not in found],
        },
    }


# ---------------------------------------------------------------- health

def check_database():
    """One-row projection query against the questionnaire table"""
    try:
        PatientQuestionnaire.objects.values_list('id', flat=True).first()
    except DatabaseError as e:
        logger.error("database connection test failed: %s", e)
        raise BlockError(
            message="데이터베이스에 연결할 수 없습니다.",
            code="DATABASE_UNAVAILABLE",
            detail={"error": str(e)},
            http_status=503,
        )
    return {"success": True, "data": {"database": connection.vendor, "status": "ok"}}
