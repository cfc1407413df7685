"""
Calendar helpers shared by the derived-state computations.

Conventions:
- Weekday numbers are Sunday-based: 1 = Sunday .. 7 = Saturday
- Day differences are whole calendar days, taken in the time zone of the
  reference instant ("now"), so a same-day target yields 0
- Weeks start on Monday for "this week" checks
"""

from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

DATE_FORMAT = "%Y/%m/%d"
WEEKDAY_NAMES = {1: "Sun", 2: "Mon", 3: "Tue", 4: "Wed", 5: "Thu", 6: "Fri", 7: "Sat"}


def _local(moment: datetime, reference: datetime) -> datetime:
    return moment.astimezone(reference.tzinfo)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def at_time_of_day(day: date, time_of_day: time, reference: datetime) -> datetime:
    """Combine a calendar day with a time of day in the reference's time zone."""
    return datetime.combine(day, time_of_day.replace(tzinfo=None), tzinfo=reference.tzinfo)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start-of-day(start) to start-of-day(end), in start's time zone."""
    return (start_of_day(_local(end, start)) - start_of_day(start)).days


def days_remaining(target: datetime, now: datetime) -> int:
    """Days from today until the target's day. Negative once the day has passed."""
    return days_between(now, target)


def is_same_day(moment: datetime, now: datetime) -> bool:
    return days_remaining(moment, now) == 0


def is_past(moment: datetime, now: datetime) -> bool:
    return moment < now


def weekday_number(moment: datetime) -> int:
    """Sunday-based weekday number (1 = Sunday .. 7 = Saturday)."""
    return moment.isoweekday() % 7 + 1


def is_this_week(moment: datetime, now: datetime) -> bool:
    """True when the moment falls in the Monday-to-Sunday week containing now."""
    monday = now.date() - timedelta(days=now.weekday())
    next_monday = monday + timedelta(days=7)
    return monday <= _local(moment, now).date() < next_monday


def format_date(moment: datetime | date) -> str:
    return moment.strftime(DATE_FORMAT)


def relative_date_text(moment: datetime, now: datetime) -> str:
    """
    Short relative label for a past date.

    "today", "yesterday", "N days ago" up to a week back, otherwise the date
    itself (future dates included).
    """
    days_ago = days_between(_local(moment, now), now)

    if days_ago == 0:
        return "today"
    if days_ago == 1:
        return "yesterday"
    if 1 < days_ago <= 7:
        return f"{days_ago} days ago"
    return format_date(_local(moment, now))


def time_ago_text(moment: datetime, now: datetime) -> str:
    """Largest elapsed calendar unit since the moment, e.g. "3 hours ago"."""
    elapsed = relativedelta(now, _local(moment, now))

    for amount, unit in (
        (elapsed.years, "year"),
        (elapsed.months, "month"),
        (elapsed.days, "day"),
        (elapsed.hours, "hour"),
        (elapsed.minutes, "minute"),
    ):
        if amount > 0:
            return f"1 {unit} ago" if amount == 1 else f"{amount} {unit}s ago"

    return "just now"
