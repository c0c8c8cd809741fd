from collections import defaultdict
from datetime import date
from typing import Dict, List, Mapping

from renalcompass.date_utils import format_month_key, format_week_key
from renalcompass.models import DayDotStatus


def count_statuses(statuses: Mapping[date, DayDotStatus]) -> Dict[DayDotStatus, int]:
    counts = {s: 0 for s in DayDotStatus}
    for s in statuses.values():
        counts[s] += 1
    return counts


def summarize_adherence(statuses: Mapping[date, DayDotStatus]) -> Dict[str, float]:
    """
    Gesamt-Zusammenfassung für eine Status-Map:
      total          : ausgewertete Tage (erledigt + verpasst)
      complete       : Tage mit allen Behandlungen erledigt
      missed         : Tage mit mindestens einer verpassten Behandlung
      pending        : heute, noch offen
      adherence_pct  : complete / total in Prozent
    """
    counts = count_statuses(statuses)
    complete = counts[DayDotStatus.COMPLETE]
    missed = counts[DayDotStatus.MISSED]
    total = complete + missed
    return {
        'total': total,
        'complete': complete,
        'missed': missed,
        'pending': counts[DayDotStatus.TODAY],
        'adherence_pct': round(complete / total * 100, 1) if total else 0.0,
    }


def calculate_streaks(statuses: Mapping[date, DayDotStatus]) -> Dict[str, int]:
    """
    Serien erledigter Tage in Datumsreihenfolge.
    COMPLETE verlängert, MISSED bricht ab, NONE und TODAY sind neutral.
    """
    current = 0
    longest = 0
    for d in sorted(statuses):
        s = statuses[d]
        if s is DayDotStatus.COMPLETE:
            current += 1
            longest = max(longest, current)
        elif s is DayDotStatus.MISSED:
            current = 0
    return {'current': current, 'longest': longest}


def calculate_trends(statuses: Mapping[date, DayDotStatus], period: str = 'weekly') -> Dict[str, List]:
    """Erledigte/verpasste Tage pro Woche oder Monat."""
    if period == 'weekly':
        key_fn = format_week_key
    elif period == 'monthly':
        key_fn = format_month_key
    else:
        raise ValueError(f"unknown period: {period}")

    complete = defaultdict(int)
    missed = defaultdict(int)
    for d, s in statuses.items():
        key = key_fn(d)
        # Periode auch ohne auswertbare Tage aufführen
        complete[key] += 1 if s is DayDotStatus.COMPLETE else 0
        missed[key] += 1 if s is DayDotStatus.MISSED else 0

    periods = sorted(complete.keys())
    return {
        'periods': periods,
        'complete': [complete[p] for p in periods],
        'missed': [missed[p] for p in periods],
    }
