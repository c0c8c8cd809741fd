"""
Memo-Cache für compute_week_statuses.

Beim schnellen Blättern im Kalender wird dieselbe Woche oft mehrfach berechnet.
Der Cache hält die letzten MAX_CACHE_ENTRIES Ergebnisse (Verdrängung nach
Einfügereihenfolge) und rundet `now` auf NOW_GRANULARITY ab, sonst würde jeder
Aufruf mit datetime.now() einen neuen Schlüssel erzeugen.
"""
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .date_utils import DateLike, floor_datetime, start_of_day, start_of_week_monday
from .models import DailySummary, DayDotStatus, Schedule
from .status import compute_week_statuses

NOW_GRANULARITY = timedelta(minutes=1)
MAX_CACHE_ENTRIES = 10

WeekStatuses = Dict[date, DayDotStatus]
# Ergebnisse sind schreibgeschützte Sichten auf den Cache-Eintrag
CachedWeekStatuses = Mapping[date, DayDotStatus]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


@dataclass(frozen=True)
class WeekStatusMemoKey:
    """
    Wertgleicher Schlüssel. Reihenfolge der Medikamentenpläne zählt, die
    Reihenfolge der Tageszusammenfassungen nicht (frozenset).
    """
    week_start: date
    medication_schedules: Tuple[Schedule, ...]
    fluid_schedule: Optional[Schedule]
    summaries: FrozenSet[Tuple[date, Optional[DailySummary]]]
    tracking_start_date: Optional[date]
    now: datetime

    @classmethod
    def build(
        cls,
        week_start: DateLike,
        medication_schedules: Iterable[Schedule],
        fluid_schedule: Optional[Schedule],
        summaries: Mapping[DateLike, Optional[DailySummary]],
        now: DateLike,
        tracking_start_date: Optional[DateLike] = None,
        granularity: timedelta = NOW_GRANULARITY,
    ) -> 'WeekStatusMemoKey':
        return cls(
            week_start=start_of_week_monday(week_start),
            medication_schedules=tuple(medication_schedules),
            fluid_schedule=fluid_schedule,
            summaries=frozenset((start_of_day(k), v) for k, v in summaries.items()),
            tracking_start_date=None if tracking_start_date is None else start_of_day(tracking_start_date),
            now=floor_datetime(_as_datetime(now), granularity),
        )


class WeekStatusCache:
    """
    Begrenzter Cache vor compute_week_statuses. Eine Instanz pro Besitzer
    (z. B. pro Tier), kein globaler Zustand. Ein Lock schützt
    Prüfen/Berechnen/Einfügen.
    """

    def __init__(
        self,
        max_entries: int = MAX_CACHE_ENTRIES,
        granularity: timedelta = NOW_GRANULARITY,
        compute: Callable[..., WeekStatuses] = compute_week_statuses,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if granularity <= timedelta(0):
            raise ValueError("granularity must be positive")
        self.max_entries = max_entries
        self.granularity = granularity
        self._compute = compute
        self._entries: 'OrderedDict[WeekStatusMemoKey, CachedWeekStatuses]' = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_config(cls, cfg: Mapping) -> 'WeekStatusCache':
        cache_cfg = cfg.get('cache', {}) or {}
        return cls(
            max_entries=int(cache_cfg.get('max_entries', MAX_CACHE_ENTRIES)),
            granularity=timedelta(minutes=float(cache_cfg.get('now_granularity_minutes', 1))),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: WeekStatusMemoKey) -> bool:
        return key in self._entries

    def keys(self):
        """Schlüssel in Einfügereihenfolge (ältester zuerst)."""
        with self._lock:
            return list(self._entries.keys())

    def make_key(
        self,
        week_start: DateLike,
        medication_schedules: Iterable[Schedule],
        fluid_schedule: Optional[Schedule],
        summaries: Mapping[DateLike, Optional[DailySummary]],
        now: DateLike,
        tracking_start_date: Optional[DateLike] = None,
    ) -> WeekStatusMemoKey:
        return WeekStatusMemoKey.build(
            week_start, medication_schedules, fluid_schedule, summaries, now,
            tracking_start_date, granularity=self.granularity,
        )

    def compute(
        self,
        week_start: DateLike,
        medication_schedules: Iterable[Schedule],
        fluid_schedule: Optional[Schedule],
        summaries: Mapping[DateLike, Optional[DailySummary]],
        now: DateLike,
        tracking_start_date: Optional[DateLike] = None,
    ) -> CachedWeekStatuses:
        meds = tuple(medication_schedules)
        key = self.make_key(week_start, meds, fluid_schedule, summaries, now, tracking_start_date)

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                logging.debug(f"[renalcompass] Cache-Treffer für Woche {key.week_start}")
                return cached

            self.misses += 1
            result = MappingProxyType(self._compute(
                key.week_start, list(meds), fluid_schedule, summaries, now, tracking_start_date,
            ))
            self._entries[key] = result

            # älteste Einträge (nach Einfügereihenfolge) verdrängen
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logging.debug(f"[renalcompass] Cache-Eintrag für Woche {evicted.week_start} verdrängt")
            return result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def compute_week_statuses_memoized(
    cache: WeekStatusCache,
    week_start: DateLike,
    medication_schedules: Iterable[Schedule],
    fluid_schedule: Optional[Schedule],
    summaries: Mapping[DateLike, Optional[DailySummary]],
    now: DateLike,
    tracking_start_date: Optional[DateLike] = None,
) -> CachedWeekStatuses:
    """Wie compute_week_statuses, aber über `cache`."""
    return cache.compute(week_start, medication_schedules, fluid_schedule, summaries, now, tracking_start_date)
