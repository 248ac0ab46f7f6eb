"""Date helpers anchored to the user's time zone."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from kota.core.config import get_settings


def user_now() -> datetime:
    """Current time in the configured user time zone."""
    return datetime.now(ZoneInfo(get_settings().USER_TIMEZONE))


def user_today() -> date:
    return user_now().date()


def first_of_next_month(today: date) -> date:
    return today.replace(day=1) + relativedelta(months=1)


def readable_datetime(now: datetime) -> str:
    """e.g. 'Saturday, October 17, 2026 at 9:05 AM CDT'."""
    return now.strftime("%A, %B %-d, %Y at %-I:%M %p %Z")


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO-ish date or datetime string to a date; None when unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return dateutil_parser.isoparse(value).date()
    except (ValueError, OverflowError):
        return None
