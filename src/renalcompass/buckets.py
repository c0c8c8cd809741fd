import logging
from datetime import timedelta
from typing import Iterable, List, Optional, Sequence

from .calendar_logic import scheduled_count
from .date_utils import DateLike, days_in_month, format_month_key, start_of_day, start_of_month
from .models import DailySummary, MonthlySummary, Schedule, TreatmentDayBucket


def empty_bucket(day: DateLike) -> TreatmentDayBucket:
    """Tag ohne Daten: alle Werte 0."""
    return TreatmentDayBucket(date=start_of_day(day))


def _value_at(values: Optional[Sequence[int]], index: int) -> int:
    if values is None:
        return 0
    return max(0, int(values[index]))


def build_monthly_treatment_buckets(
    month_start: DateLike,
    summary: Optional[MonthlySummary],
) -> Optional[List[TreatmentDayBucket]]:
    """
    Ein Bucket pro Kalendertag des Monats aus den parallelen Tages-Arrays der
    Monatszusammenfassung. Bucket i gehört zu Tag i+1.

    Gibt None zurück, wenn keine Zusammenfassung da ist oder ein vorhandenes Array
    nicht genau so viele Einträge hat wie der Monat Tage. Es wird nie gekürzt oder
    mit Nullen aufgefüllt, das würde falsche "verpasst"-Tage erzeugen.
    """
    if summary is None:
        return None

    first = start_of_month(month_start)
    n_days = days_in_month(first)

    arrays = summary.daily_arrays()
    for name, values in arrays.items():
        if values is not None and len(values) != n_days:
            logging.warning(
                f"[renalcompass] {format_month_key(first)}: {name} hat {len(values)} Einträge, "
                f"erwartet {n_days}. Monat wird verworfen."
            )
            return None

    buckets: List[TreatmentDayBucket] = []
    for i in range(n_days):
        buckets.append(TreatmentDayBucket(
            date=first + timedelta(days=i),
            fluid_volume_ml=_value_at(arrays['daily_volumes'], i),
            fluid_goal_ml=_value_at(arrays['daily_goals'], i),
            fluid_scheduled_sessions=_value_at(arrays['daily_scheduled_sessions'], i),
            fluid_session_count=_value_at(arrays['daily_session_counts'], i),
            medication_doses=_value_at(arrays['daily_medication_doses'], i),
            medication_scheduled_doses=_value_at(arrays['daily_medication_scheduled_doses'], i),
        ))
    return buckets


def build_day_bucket(
    day: DateLike,
    medication_schedules: Iterable[Schedule],
    fluid_schedule: Optional[Schedule],
    summary: Optional[DailySummary],
) -> TreatmentDayBucket:
    """
    Bucket für einen einzelnen Tag aus den Plänen und der Tageszusammenfassung.
    Ohne Zusammenfassung gibt es keine Daten für den Tag (leerer Bucket).
    """
    d = start_of_day(day)
    if summary is None:
        return empty_bucket(d)

    med_scheduled = scheduled_count(medication_schedules, d)
    fluid_scheduled = scheduled_count([fluid_schedule], d)

    if summary.fluid_daily_goal_ml is not None:
        goal = summary.fluid_daily_goal_ml
    elif fluid_schedule is not None and fluid_schedule.target_volume:
        goal = round(fluid_schedule.target_volume * fluid_scheduled)
    else:
        goal = 0

    return TreatmentDayBucket(
        date=d,
        fluid_volume_ml=max(0, round(summary.fluid_total_volume)),
        fluid_goal_ml=max(0, goal),
        fluid_scheduled_sessions=fluid_scheduled,
        fluid_session_count=max(0, summary.fluid_session_count),
        medication_doses=max(0, summary.medication_total_doses),
        medication_scheduled_doses=med_scheduled,
    )
