from datetime import date
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

from .buckets import build_day_bucket, build_monthly_treatment_buckets, empty_bucket
from .date_utils import (
    DateLike, month_days, start_of_day, start_of_month, week_days, weeks_overlapping_month,
)
from .models import DailySummary, DayDotStatus, MonthlySummary, Schedule, TreatmentDayBucket

if TYPE_CHECKING:
    from .memoization import WeekStatusCache


def status_for(
    bucket: TreatmentDayBucket,
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
) -> DayDotStatus:
    """
    Status-Punkt eines Tages. Reihenfolge der Regeln:
      1. Tag nach heute                       -> NONE
      2. Tag vor Beginn der Aufzeichnung      -> NONE
      3. kein Plan: heute -> TODAY, sonst     -> NONE
      4. heute: alles erfüllt -> COMPLETE, sonst TODAY (heute ist nie MISSED)
      5. Vergangenheit: alles erfüllt -> COMPLETE, sonst MISSED
    """
    today = start_of_day(now)
    day = start_of_day(bucket.date)

    if day > today:
        return DayDotStatus.NONE

    if tracking_start_date is not None and day < start_of_day(tracking_start_date):
        return DayDotStatus.NONE

    if not bucket.has_scheduled_treatments:
        return DayDotStatus.TODAY if day == today else DayDotStatus.NONE

    satisfied = bucket.is_fluid_complete and bucket.is_medication_complete

    if day == today:
        return DayDotStatus.COMPLETE if satisfied else DayDotStatus.TODAY

    return DayDotStatus.COMPLETE if satisfied else DayDotStatus.MISSED


def build_month_statuses_from_buckets(
    buckets: Optional[Iterable[TreatmentDayBucket]],
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
) -> Dict[date, DayDotStatus]:
    if not buckets:
        return {}
    return {
        start_of_day(b.date): status_for(b, now, tracking_start_date)
        for b in buckets
    }


def compute_week_statuses(
    week_start: DateLike,
    medication_schedules: Iterable[Schedule],
    fluid_schedule: Optional[Schedule],
    summaries: Mapping[DateLike, Optional[DailySummary]],
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
) -> Dict[date, DayDotStatus]:
    """
    Status für die sieben Tage (Mo-So) der Woche, die `week_start` enthält.
    `summaries` darf lückenhaft sein, fehlende Tage gelten als "keine Daten".
    """
    meds = list(medication_schedules)
    # Schlüssel können datetime oder date sein
    by_day = {start_of_day(k): v for k, v in summaries.items()}

    statuses: Dict[date, DayDotStatus] = {}
    for d in week_days(week_start):
        bucket = build_day_bucket(d, meds, fluid_schedule, by_day.get(d))
        statuses[d] = status_for(bucket, now, tracking_start_date)
    return statuses


def compute_month_statuses(
    month_start: DateLike,
    summary: Optional[MonthlySummary],
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
) -> Dict[date, DayDotStatus]:
    """Status für jeden Tag des Monats aus der Monatszusammenfassung."""
    buckets: Optional[List[TreatmentDayBucket]] = build_monthly_treatment_buckets(month_start, summary)
    if buckets is None:
        buckets = [empty_bucket(d) for d in month_days(month_start)]
    return build_month_statuses_from_buckets(buckets, now, tracking_start_date)


def compute_month_statuses_from_weeks(
    month_start: DateLike,
    medication_schedules: Iterable[Schedule],
    fluid_schedule: Optional[Schedule],
    summaries: Mapping[DateLike, Optional[DailySummary]],
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
    cache: Optional['WeekStatusCache'] = None,
) -> Dict[date, DayDotStatus]:
    """
    Monatsansicht aus den Wochen zusammensetzen, die den Monat überlappen.
    Mit `cache` läuft jede Woche über den Memo-Cache. Tage außerhalb des Monats
    werden verworfen.
    """
    meds = list(medication_schedules)
    first = start_of_month(month_start)
    by_day = {start_of_day(k): v for k, v in summaries.items()}
    merged: Dict[date, DayDotStatus] = {}
    for monday in weeks_overlapping_month(first):
        # nur die Tage der Woche, damit der Cache-Schlüssel pro Woche stabil bleibt
        week_summaries = {d: by_day[d] for d in week_days(monday) if d in by_day}
        if cache is not None:
            week = cache.compute(monday, meds, fluid_schedule, week_summaries, now, tracking_start_date)
        else:
            week = compute_week_statuses(monday, meds, fluid_schedule, week_summaries, now, tracking_start_date)
        merged.update(week)

    return {
        d: s for d, s in merged.items()
        if d.year == first.year and d.month == first.month
    }
