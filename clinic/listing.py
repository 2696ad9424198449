"""
In-memory derived views over wholesale-fetched rows (list of dicts):
- filter_records: text query AND date range AND staff AND status, each optional
- sort_records: stable single-field sort, nulls first ascending / last descending
- sort_by_recent_activity: last_modified_at or created_at, newest first
The result is recomputed from scratch on every call.
"""
import unicodedata
from datetime import date, datetime

from .dates import to_local_date

# treatment_status values that end the treatment workflow
TERMINAL_TREATMENT_STATUSES = ("중단 중", "종결")

IN_TREATMENT = "in_treatment"


def date_key(value):
    """
    Local YYYY-MM-DD of a date / datetime / ISO string, None when missing.
    Timestamps (objects or strings with a time part) are read as UTC and
    converted to the clinic date; bare dates are taken as they are.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local_date(value)
    if isinstance(value, date):
        return value.isoformat()
    text = str(value)
    if len(text) > 10:
        try:
            return to_local_date(text)
        except ValueError:
            pass
    return text[:10]


def _as_date_string(value):
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def collation_key(value):
    return unicodedata.normalize("NFKC", value).casefold()


def _matches_text(record, query, search_fields):
    if not query:
        return True
    needle = query.strip().lower()
    if not needle:
        return True
    values = record.values() if search_fields is None else (record.get(f) for f in search_fields)
    return any(v is not None and needle in str(v).lower() for v in values)


def _matches_date(record, date_field, date_from, date_to):
    if date_from is None and date_to is None:
        return True
    value = date_key(record.get(date_field))
    if value is None:
        return False
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True


def _matches_status(record, status_field, status):
    if not status:
        return True
    value = record.get(status_field) or ""
    if status == IN_TREATMENT:
        return value not in TERMINAL_TREATMENT_STATUSES
    return value == status


def filter_records(
    records,
    query=None,
    *,
    date_from=None,
    date_to=None,
    date_field="created_at",
    staff=None,
    staff_field="consultant",
    status=None,
    status_field="treatment_status",
    search_fields=None,
):
    """
    Keep the records matching every active criterion, in their original order.
    search_fields=None searches every value of the record.
    """
    date_from = _as_date_string(date_from)
    date_to = _as_date_string(date_to)
    return [
        record for record in records
        if _matches_text(record, query, search_fields)
        and _matches_date(record, date_field, date_from, date_to)
        and (not staff or record.get(staff_field) == staff)
        and _matches_status(record, status_field, status)
    ]


def _sort_key(value):
    # None < bool < number < date < string, so mixed columns never compare across types
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, (date, datetime)):
        return (3, value.isoformat())
    return (4, collation_key(str(value)))


def sort_records(records, field, order="asc"):
    """Stable sort on one field; order is 'asc' or 'desc'"""
    return sorted(records, key=lambda r: _sort_key(r.get(field)), reverse=(order == "desc"))


def _activity_timestamp(record):
    return record.get("last_modified_at") or record.get("created_at")


def sort_by_recent_activity(records):
    """Newest edit/creation first, records with neither timestamp last"""
    dated = [r for r in records if _activity_timestamp(r)]
    undated = [r for r in records if not _activity_timestamp(r)]
    dated.sort(key=_activity_timestamp, reverse=True)
    return dated + undated
