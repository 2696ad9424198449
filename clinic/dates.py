"""
Clinic-local (settings.TIME_ZONE, Asia/Seoul) date helpers.
Timestamps are stored in UTC; everything shown or bucketed is a local date.
"""
from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.utils import timezone


def local_today():
    """Today's date in the clinic time zone"""
    return timezone.localdate()


def to_local_date(value):
    """UTC datetime / ISO timestamp -> local YYYY-MM-DD"""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt_timezone.utc)
        return timezone.localtime(value).date().isoformat()
    return value.isoformat()


def first_day_of_month(today=None):
    today = today or local_today()
    return today.replace(day=1)


def first_day_of_week(today=None):
    """Monday of the current week"""
    today = today or local_today()
    return today - timedelta(days=today.weekday())


def last_day_of_previous_month(today=None):
    return first_day_of_month(today) - timedelta(days=1)


def format_date_text(value):
    """YYYY년 MM월 DD일, for display"""
    if not value:
        return ""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.strftime("%Y년 %m월 %d일")
