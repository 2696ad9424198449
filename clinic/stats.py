"""
Dashboard statistics over consultation rows (list of dicts)
- date range presets for the dashboard filter
- per-consultant consent statistics, result / patient-type / doctor breakdowns
- sales buckets (days of month, 4 weeks, 12 months) against the per-period target
"""
import calendar
from datetime import date, timedelta

from clinic_dashboard.exceptions import ValidationError

from .dates import first_day_of_month, first_day_of_week, last_day_of_previous_month
from .listing import date_key

RESULTS = ("전체동의", "부분동의", "비동의", "보류", "환불")
PATIENT_TYPES = ("신환", "구환")
# results that are not a decision yet (excluded from consent rates)
UNDECIDED_RESULTS = ("보류", "환불")
FOLLOW_UP_RESULTS = ("비동의", "부분동의")

DATE_RANGE_PRESETS = ("all", "today", "yesterday", "thisWeek", "lastWeek", "thisMonth", "lastMonth", "custom")

SALES_PERIODS = {
    # period -> bucket size used to pick the target
    "month": "day",
    "weeks": "week",
    "year": "month",
}


def _to_date(value):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def date_range_bounds(preset, today, start=None, end=None):
    """
    Dashboard date preset -> (start, end) dates, inclusive.
    (None, None) means no date filter.
    """
    if preset == "all":
        return None, None
    if preset == "today":
        return today, today
    if preset == "yesterday":
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if preset == "thisWeek":
        return first_day_of_week(today), today
    if preset == "lastWeek":
        last_sunday = first_day_of_week(today) - timedelta(days=1)
        return last_sunday - timedelta(days=6), last_sunday
    if preset == "thisMonth":
        return first_day_of_month(today), today
    if preset == "lastMonth":
        last_day = last_day_of_previous_month(today)
        return last_day.replace(day=1), last_day
    if preset == "custom":
        try:
            return _to_date(start), _to_date(end)
        except ValueError:
            raise ValidationError(
                message="날짜 형식은 YYYY-MM-DD 이어야 합니다.",
                code="INVALID_DATE_RANGE",
                detail={"start": start, "end": end},
            )
    raise ValidationError(
        message="알 수 없는 기간입니다.",
        code="INVALID_DATE_RANGE",
        detail={"range": preset, "allowed": list(DATE_RANGE_PRESETS)},
    )


def _percent(part, whole):
    return round(part / whole * 100, 1) if whole else 0.0


def _count_by(records, field, value):
    return sum(1 for r in records if r.get(field) == value)


def _distinct(records, field):
    """Non-blank values of field, in first-seen order"""
    seen = []
    for r in records:
        value = r.get(field)
        if value and value not in seen:
            seen.append(value)
    return seen


def consent_rate(records):
    """(full + partial) / decided * 100, refunds and pending excluded"""
    decided = [r for r in records if r.get("consultation_result") not in UNDECIDED_RESULTS]
    agreed = sum(1 for r in decided if r.get("consultation_result") in ("전체동의", "부분동의"))
    return _percent(agreed, len(decided))


def consultant_stats(records):
    stats = []
    for consultant in _distinct(records, "consultant"):
        own = [r for r in records if r.get("consultant") == consultant]
        full = _count_by(own, "consultation_result", "전체동의")
        partial = _count_by(own, "consultation_result", "부분동의")
        none = _count_by(own, "consultation_result", "비동의")
        stats.append({
            "consultant": consultant,
            "total_consultations": len(own),
            "new_patients": _count_by(own, "patient_type", "신환"),
            "existing_patients": _count_by(own, "patient_type", "구환"),
            "full_consent": full,
            "partial_consent": partial,
            "no_consent": none,
            "pending": _count_by(own, "consultation_result", "보류"),
            "refund": _count_by(own, "consultation_result", "환불"),
            "consent_rate": _percent(full + partial, full + partial + none),
        })
    stats.sort(key=lambda s: s["total_consultations"], reverse=True)
    return stats


def overview(records):
    total = len(records)
    decided = [r for r in records if r.get("consultation_result") not in UNDECIDED_RESULTS]
    return {
        "total_consultations": total,
        "consent_rate": consent_rate(records),
        "new_patient_rate": _percent(_count_by(records, "patient_type", "신환"), total),
        "full_consent_rate": _percent(_count_by(decided, "consultation_result", "전체동의"), len(decided)),
        "results": [
            {
                "result": result,
                "count": _count_by(records, "consultation_result", result),
                "percentage": _percent(_count_by(records, "consultation_result", result), total),
            }
            for result in RESULTS
        ],
        "patient_types": [
            {
                "patient_type": patient_type,
                "count": _count_by(records, "patient_type", patient_type),
                "percentage": _percent(_count_by(records, "patient_type", patient_type), total),
            }
            for patient_type in PATIENT_TYPES
        ],
        "doctors": [
            {
                "doctor": doctor,
                "count": _count_by(records, "doctor", doctor),
                "percentage": _percent(_count_by(records, "doctor", doctor), total),
            }
            for doctor in _distinct(records, "doctor")
        ],
    }


def follow_up(records, consultant=None, results=FOLLOW_UP_RESULTS, limit=10):
    """Undecided / refused consultations that need a call back"""
    rows = [
        r for r in records
        if r.get("consultation_result") in results
        and (not consultant or r.get("consultant") == consultant)
    ]
    return rows if limit is None else rows[:limit]


def _sales_windows(period, today):
    """[(start, end, label)] for the period, oldest first"""
    if period == "month":
        days = calendar.monthrange(today.year, today.month)[1]
        return [
            (today.replace(day=d), today.replace(day=d), f"{d}일")
            for d in range(1, days + 1)
        ]
    if period == "weeks":
        windows = []
        for i in range(4):
            start = today - timedelta(days=27 - 7 * i)
            end = start + timedelta(days=6)
            windows.append((start, end, f"{start:%m/%d}~{end:%m/%d}"))
        return windows
    if period == "year":
        windows = []
        year, month = today.year, today.month
        for _ in range(12):
            last = calendar.monthrange(year, month)[1]
            windows.append((date(year, month, 1), date(year, month, last), f"{year}-{month:02d}"))
            year, month = (year, month - 1) if month > 1 else (year - 1, 12)
        return list(reversed(windows))
    raise ValidationError(
        message="알 수 없는 통계 기간입니다.",
        code="INVALID_PERIOD",
        detail={"period": period, "allowed": list(SALES_PERIODS)},
    )


def sales_buckets(records, period, today, targets, date_field="consultation_date"):
    """
    Sum consultation_amount / payment_amount per bucket.
    Buckets are disjoint and cover the whole window; empty buckets report 0.
    Records outside the window are ignored.
    """
    windows = _sales_windows(period, today)
    target = targets[SALES_PERIODS[period]]
    buckets = [
        {
            "label": label,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "consultation_amount": 0,
            "payment_amount": 0,
            "count": 0,
            "target": target,
        }
        for start, end, label in windows
    ]

    for record in records:
        key = date_key(record.get(date_field))
        if key is None:
            continue
        for bucket in buckets:
            if bucket["start"] <= key <= bucket["end"]:
                bucket["consultation_amount"] += record.get("consultation_amount") or 0
                bucket["payment_amount"] += record.get("payment_amount") or 0
                bucket["count"] += 1
                break

    for bucket in buckets:
        bucket["achievement"] = _percent(bucket["payment_amount"], target)

    total_payment = sum(b["payment_amount"] for b in buckets)
    target_total = target * len(buckets)
    return {
        "period": period,
        "start": windows[0][0].isoformat(),
        "end": windows[-1][1].isoformat(),
        "buckets": buckets,
        "consultation_amount": sum(b["consultation_amount"] for b in buckets),
        "payment_amount": total_payment,
        "target": target_total,
        "achievement": _percent(total_payment, target_total),
    }
