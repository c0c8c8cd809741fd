"""Adhärenz-Status für die Heimbehandlung (Medikamente, Infusionen) nierenkranker Katzen."""
from .buckets import build_day_bucket, build_monthly_treatment_buckets
from .memoization import WeekStatusCache, compute_week_statuses_memoized
from .models import (
    DailySummary, DayDotStatus, MonthlySummary, Schedule, TreatmentDayBucket,
    TreatmentFrequency, TreatmentType,
)
from .status import (
    compute_month_statuses, compute_month_statuses_from_weeks, compute_week_statuses, status_for,
)
