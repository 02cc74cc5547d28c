from datetime import date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

JST = ZoneInfo("Asia/Tokyo")


def now_local(tz: ZoneInfo = JST) -> datetime:
    return datetime.now(tz)


def is_weekday(day: date) -> bool:
    return day.isoweekday() <= 5


def week_window(day: date) -> tuple[date, date]:
    """Return the Monday and Friday of the ISO week containing `day`."""
    monday = day - timedelta(days=day.isoweekday() - 1)
    return monday, monday + timedelta(days=4)


def start_of_day(day: date, tz: tzinfo | None) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)
