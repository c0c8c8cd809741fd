from datetime import date, datetime, timedelta
from typing import List, Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def start_of_day(value: DateLike) -> date:
    """Kalendertag ohne Uhrzeit."""
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_week_monday(value: DateLike) -> date:
    """Montag der ISO-Woche, in der `value` liegt."""
    day = start_of_day(value)
    return day - timedelta(days=day.weekday())


def end_of_week(value: DateLike) -> date:
    """Sonntag der ISO-Woche, in der `value` liegt."""
    return start_of_week_monday(value) + timedelta(days=6)


def start_of_month(value: DateLike) -> date:
    day = start_of_day(value)
    return day.replace(day=1)


def end_of_month(value: DateLike) -> date:
    # erster des Folgemonats minus ein Tag
    return start_of_month(value) + relativedelta(months=1, days=-1)


def days_in_month(value: DateLike) -> int:
    return end_of_month(value).day


def iso_week_number(value: DateLike) -> int:
    return start_of_day(value).isocalendar()[1]


def week_days(week_start: DateLike) -> List[date]:
    """Die sieben Tage (Mo-So) der Woche, die `week_start` enthält."""
    monday = start_of_week_monday(week_start)
    return [monday + timedelta(days=i) for i in range(7)]


def month_days(month_start: DateLike) -> List[date]:
    """Alle Tage des Monats, der `month_start` enthält."""
    first = start_of_month(month_start)
    return [first + timedelta(days=i) for i in range(days_in_month(first))]


def weeks_overlapping_month(month_start: DateLike) -> List[date]:
    """Montage aller ISO-Wochen, die mindestens einen Tag des Monats enthalten."""
    cursor = start_of_week_monday(start_of_month(month_start))
    last = end_of_month(month_start)
    mondays: List[date] = []
    while cursor <= last:
        mondays.append(cursor)
        cursor += timedelta(weeks=1)
    return mondays


# Schlüssel der Summary-Dokumente: Tag, ISO-Woche, Monat
def format_day_key(value: DateLike) -> str:
    return start_of_day(value).isoformat()


def format_week_key(value: DateLike) -> str:
    iso_year, iso_week, _ = start_of_day(value).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def format_month_key(value: DateLike) -> str:
    day = start_of_day(value)
    return f"{day.year:04d}-{day.month:02d}"


def floor_datetime(value: datetime, granularity: timedelta) -> datetime:
    """
    Rundet `value` auf ein Vielfaches von `granularity` ab (gezählt ab der Epoche).
    Funktioniert für naive und zeitzonenbehaftete Zeitpunkte.
    """
    if granularity <= timedelta(0):
        raise ValueError("granularity must be positive")
    epoch = datetime(1970, 1, 1, tzinfo=value.tzinfo)
    return value - (value - epoch) % granularity
