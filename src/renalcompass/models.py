# src/renalcompass/models.py
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Mapping, Optional, Tuple


class TreatmentType(Enum):
    FLUID = "fluid"
    MEDICATION = "medication"


class TreatmentFrequency(Enum):
    ONCE_DAILY = "onceDaily"
    TWICE_DAILY = "twiceDaily"
    THRICE_DAILY = "thriceDaily"
    EVERY_OTHER_DAY = "everyOtherDay"
    EVERY_3_DAYS = "every3Days"

    @property
    def interval_days(self) -> int:
        """Abstand in Tagen zwischen zwei Behandlungstagen."""
        if self is TreatmentFrequency.EVERY_OTHER_DAY:
            return 2
        if self is TreatmentFrequency.EVERY_3_DAYS:
            return 3
        return 1


class DayDotStatus(Enum):
    """Status-Punkt eines Kalendertags."""
    NONE = "none"          # kein Plan, oder Zukunft
    TODAY = "today"        # heute, noch in Arbeit
    MISSED = "missed"      # vergangener Tag, mindestens eine Behandlung unvollständig
    COMPLETE = "complete"  # alle geplanten Behandlungen erledigt


# --- Hilfsfunktionen für JSON-Daten aus dem Summary-Speicher ---

def _pick(data: Mapping[str, Any], *names: str) -> Any:
    for n in names:
        if n in data and data[n] is not None:
            return data[n]
    return None


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _as_float(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1')
    return False


def _as_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            return None
    return None


def _as_time(value: Any) -> Optional[time]:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str) and value:
        try:
            # akzeptiert "09:00" ebenso wie "2025-10-20T09:00:00"
            if 'T' in value:
                return datetime.fromisoformat(value).time()
            return time.fromisoformat(value)
        except ValueError:
            return None
    return None


def _as_int_array(value: Any) -> Optional[Tuple[int, ...]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(_as_int(v) for v in value)
    return None


@dataclass(frozen=True)
class Schedule:
    """Wiederkehrender Behandlungsplan (Medikament oder Infusion)."""
    id: str
    treatment_type: TreatmentType
    frequency: TreatmentFrequency
    reminder_times: Tuple[time, ...]
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    target_volume: Optional[float] = None      # ml pro Infusion
    medication_name: Optional[str] = None
    target_dosage: Optional[float] = None
    medication_unit: Optional[str] = None

    def __post_init__(self):
        # Listen würden den Plan unhashbar machen (Cache-Schlüssel)
        if not isinstance(self.reminder_times, tuple):
            object.__setattr__(self, 'reminder_times', tuple(self.reminder_times))

    @property
    def is_fluid(self) -> bool:
        return self.treatment_type is TreatmentType.FLUID

    @property
    def is_medication(self) -> bool:
        return self.treatment_type is TreatmentType.MEDICATION

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Schedule':
        raw_times = _pick(data, 'reminderTimes', 'reminder_times') or []
        times = tuple(t for t in (_as_time(v) for v in raw_times) if t is not None)
        start = _as_date(_pick(data, 'startDate', 'start_date', 'createdAt', 'created_at'))
        if start is None:
            raise ValueError("schedule without startDate")
        target_volume = _pick(data, 'targetVolume', 'target_volume')
        target_dosage = _pick(data, 'targetDosage', 'target_dosage')
        active = _pick(data, 'isActive', 'is_active')
        return cls(
            id=str(_pick(data, 'id') or ''),
            treatment_type=TreatmentType(_pick(data, 'treatmentType', 'treatment_type')),
            frequency=TreatmentFrequency(_pick(data, 'frequency') or TreatmentFrequency.ONCE_DAILY.value),
            reminder_times=times,
            start_date=start,
            end_date=_as_date(_pick(data, 'endDate', 'end_date')),
            is_active=True if active is None else _as_bool(active),
            target_volume=None if target_volume is None else _as_float(target_volume),
            medication_name=_pick(data, 'medicationName', 'medication_name'),
            target_dosage=None if target_dosage is None else _as_float(target_dosage),
            medication_unit=_pick(data, 'medicationUnit', 'medication_unit'),
        )


@dataclass(frozen=True)
class DailySummary:
    """Tageszusammenfassung der geloggten Behandlungen."""
    day: date
    medication_total_doses: int = 0
    medication_scheduled_doses: int = 0
    medication_missed_count: int = 0
    fluid_total_volume: float = 0.0
    fluid_session_count: int = 0
    fluid_scheduled_sessions: int = 0
    fluid_daily_goal_ml: Optional[int] = None
    fluid_treatment_done: bool = False
    overall_treatment_done: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DailySummary':
        day = _as_date(_pick(data, 'date', 'day'))
        if day is None:
            raise ValueError("daily summary without date")
        goal = _pick(data, 'fluidDailyGoalMl', 'fluid_daily_goal_ml')
        return cls(
            day=day,
            medication_total_doses=_as_int(_pick(data, 'medicationTotalDoses', 'medication_total_doses')),
            medication_scheduled_doses=_as_int(_pick(data, 'medicationScheduledDoses', 'medication_scheduled_doses')),
            medication_missed_count=_as_int(_pick(data, 'medicationMissedCount', 'medication_missed_count')),
            fluid_total_volume=_as_float(_pick(data, 'fluidTotalVolume', 'fluid_total_volume')),
            fluid_session_count=_as_int(_pick(data, 'fluidSessionCount', 'fluid_session_count')),
            fluid_scheduled_sessions=_as_int(_pick(data, 'fluidScheduledSessions', 'fluid_scheduled_sessions')),
            fluid_daily_goal_ml=None if goal is None else _as_int(goal),
            fluid_treatment_done=_as_bool(_pick(data, 'fluidTreatmentDone', 'fluid_treatment_done')),
            overall_treatment_done=_as_bool(_pick(data, 'overallTreatmentDone', 'overall_treatment_done')),
        )


@dataclass
class MonthlySummary:
    """
    Monatszusammenfassung. Die daily_*-Arrays sind parallel, Element i gehört zu Tag i+1.
    None heißt: Array fehlt (wird als lauter Nullen gelesen).
    """
    start_date: date
    daily_volumes: Optional[Tuple[int, ...]] = None
    daily_goals: Optional[Tuple[int, ...]] = None
    daily_scheduled_sessions: Optional[Tuple[int, ...]] = None
    daily_session_counts: Optional[Tuple[int, ...]] = None
    daily_medication_doses: Optional[Tuple[int, ...]] = None
    daily_medication_scheduled_doses: Optional[Tuple[int, ...]] = None
    medication_total_doses: int = 0
    medication_scheduled_doses: int = 0
    fluid_total_volume: float = 0.0
    fluid_session_count: int = 0
    overall_treatment_days: int = 0
    overall_missed_days: int = 0

    def daily_arrays(self) -> dict:
        return {
            'daily_volumes': self.daily_volumes,
            'daily_goals': self.daily_goals,
            'daily_scheduled_sessions': self.daily_scheduled_sessions,
            'daily_session_counts': self.daily_session_counts,
            'daily_medication_doses': self.daily_medication_doses,
            'daily_medication_scheduled_doses': self.daily_medication_scheduled_doses,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MonthlySummary':
        start = _as_date(_pick(data, 'startDate', 'start_date'))
        if start is None:
            raise ValueError("monthly summary without startDate")
        return cls(
            start_date=start.replace(day=1),
            daily_volumes=_as_int_array(_pick(data, 'dailyVolumes', 'daily_volumes')),
            daily_goals=_as_int_array(_pick(data, 'dailyGoals', 'daily_goals')),
            daily_scheduled_sessions=_as_int_array(_pick(data, 'dailyScheduledSessions', 'daily_scheduled_sessions')),
            daily_session_counts=_as_int_array(_pick(data, 'dailySessionCounts', 'daily_session_counts')),
            daily_medication_doses=_as_int_array(_pick(data, 'dailyMedicationDoses', 'daily_medication_doses')),
            daily_medication_scheduled_doses=_as_int_array(
                _pick(data, 'dailyMedicationScheduledDoses', 'daily_medication_scheduled_doses')),
            medication_total_doses=_as_int(_pick(data, 'medicationTotalDoses', 'medication_total_doses')),
            medication_scheduled_doses=_as_int(_pick(data, 'medicationScheduledDoses', 'medication_scheduled_doses')),
            fluid_total_volume=_as_float(_pick(data, 'fluidTotalVolume', 'fluid_total_volume')),
            fluid_session_count=_as_int(_pick(data, 'fluidSessionCount', 'fluid_session_count')),
            overall_treatment_days=_as_int(_pick(data, 'overallTreatmentDays', 'overall_treatment_days')),
            overall_missed_days=_as_int(_pick(data, 'overallMissedDays', 'overall_missed_days')),
        )


@dataclass(frozen=True)
class TreatmentDayBucket:
    """Infusion + Medikation eines Kalendertags, Eingabe für die Status-Berechnung."""
    date: date
    fluid_volume_ml: int = 0
    fluid_goal_ml: int = 0
    fluid_scheduled_sessions: int = 0
    fluid_session_count: int = 0
    medication_doses: int = 0
    medication_scheduled_doses: int = 0

    @property
    def has_fluid_scheduled(self) -> bool:
        return self.fluid_scheduled_sessions > 0

    @property
    def has_medication_scheduled(self) -> bool:
        return self.medication_scheduled_doses > 0

    @property
    def has_scheduled_treatments(self) -> bool:
        # ein Infusionsziel ohne geplante Sitzung ist kein Plan
        return self.has_fluid_scheduled or self.has_medication_scheduled

    @property
    def is_fluid_complete(self) -> bool:
        # Zielvolumen erreicht oder überschritten zählt, auch mit weniger Sitzungen
        if not self.has_fluid_scheduled:
            return True
        if self.fluid_goal_ml <= 0:
            # ohne Zielvolumen entscheiden die Sitzungen
            return self.fluid_session_count >= self.fluid_scheduled_sessions
        return self.fluid_volume_ml >= self.fluid_goal_ml

    @property
    def is_medication_complete(self) -> bool:
        if not self.has_medication_scheduled:
            return True
        return self.medication_doses >= self.medication_scheduled_doses

    @property
    def is_complete(self) -> bool:
        return self.has_scheduled_treatments and self.is_fluid_complete and self.is_medication_complete
