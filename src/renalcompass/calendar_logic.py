from datetime import datetime
from typing import Iterable, List, Optional

from .date_utils import DateLike, start_of_day
from .models import Schedule


def is_schedule_active_on(schedule: Schedule, day: DateLike) -> bool:
    """Plan aktiv und `day` liegt zwischen start_date und (optionalem) end_date."""
    d = start_of_day(day)
    if not schedule.is_active:
        return False
    if d < schedule.start_date:
        return False
    if schedule.end_date is not None and d > schedule.end_date:
        return False
    return True


def reminders_on_date(schedule: Schedule, day: DateLike) -> List[datetime]:
    """
    Alle Erinnerungszeitpunkte des Plans an `day`.
    Tägliche Frequenzen wiederholen die Uhrzeiten jeden Tag, Intervall-Frequenzen
    (jeden 2./3. Tag) zählen ab start_date.
    """
    d = start_of_day(day)
    if not is_schedule_active_on(schedule, d):
        return []

    interval = schedule.frequency.interval_days
    if (d - schedule.start_date).days % interval != 0:
        return []

    return sorted(datetime.combine(d, t) for t in schedule.reminder_times)


def scheduled_count(schedules: Iterable[Optional[Schedule]], day: DateLike) -> int:
    """Summe der erwarteten Gaben/Sitzungen aller Pläne an `day`."""
    return sum(len(reminders_on_date(s, day)) for s in schedules if s is not None)

