import json
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from renalcompass.models import DailySummary, MonthlySummary, Schedule, _as_date
from renalcompass.date_utils import start_of_month


class SnapshotError(ValueError):
    """Snapshot-Datei fehlt, ist kein JSON oder kein JSON-Objekt."""


@dataclass
class TreatmentSnapshot:
    """Schon geladene Pläne und Zusammenfassungen eines Tiers."""
    schedules: List[Schedule] = field(default_factory=list)
    daily_summaries: Dict[date, DailySummary] = field(default_factory=dict)
    monthly_summaries: Dict[date, MonthlySummary] = field(default_factory=dict)
    tracking_start_date: Optional[date] = None

    @property
    def medication_schedules(self) -> List[Schedule]:
        return [s for s in self.schedules if s.is_medication]

    @property
    def fluid_schedule(self) -> Optional[Schedule]:
        """Der aktive Infusionsplan (höchstens einer pro Tier)."""
        for s in self.schedules:
            if s.is_fluid and s.is_active:
                return s
        return None

    def monthly_summary_for(self, day: date) -> Optional[MonthlySummary]:
        return self.monthly_summaries.get(start_of_month(day))


def parse_snapshot(raw: dict) -> TreatmentSnapshot:
    snap = TreatmentSnapshot(tracking_start_date=_as_date(raw.get('tracking_start_date')))

    for row in raw.get('schedules') or []:
        if not isinstance(row, dict):
            logging.warning(f"[renalcompass] Plan übersprungen: kein JSON-Objekt ({row!r})")
            continue
        try:
            snap.schedules.append(Schedule.from_dict(row))
        except (ValueError, TypeError) as e:
            logging.warning(f"[renalcompass] Plan übersprungen ({row.get('id')}): {e}")

    for row in raw.get('daily_summaries') or []:
        if not isinstance(row, dict):
            logging.warning(f"[renalcompass] Tageszusammenfassung übersprungen: kein JSON-Objekt ({row!r})")
            continue
        try:
            ds = DailySummary.from_dict(row)
        except (ValueError, TypeError) as e:
            logging.warning(f"[renalcompass] Tageszusammenfassung übersprungen: {e}")
            continue
        snap.daily_summaries[ds.day] = ds

    for row in raw.get('monthly_summaries') or []:
        if not isinstance(row, dict):
            logging.warning(f"[renalcompass] Monatszusammenfassung übersprungen: kein JSON-Objekt ({row!r})")
            continue
        try:
            ms = MonthlySummary.from_dict(row)
        except (ValueError, TypeError) as e:
            logging.warning(f"[renalcompass] Monatszusammenfassung übersprungen: {e}")
            continue
        snap.monthly_summaries[ms.start_date] = ms

    return snap


def load_snapshot(filename: str) -> TreatmentSnapshot:
    """JSON-Snapshot (Pläne + Zusammenfassungen) einlesen."""
    try:
        with open(filename, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        raise SnapshotError(f"Snapshot {filename} nicht lesbar: {e}") from e
    if not isinstance(raw, dict):
        raise SnapshotError(f"Snapshot {filename} ist kein JSON-Objekt")
    return parse_snapshot(raw)
