from datetime import date, datetime, time

import pytest

from renalcompass.memoization import WeekStatusCache
from renalcompass.models import (
    DailySummary, DayDotStatus, MonthlySummary, Schedule, TreatmentDayBucket,
    TreatmentFrequency, TreatmentType,
)
from renalcompass.status import (
    build_month_statuses_from_buckets, compute_month_statuses, compute_month_statuses_from_weeks,
    compute_week_statuses, status_for,
)

NOW = datetime(2025, 10, 15, 14, 0)
TODAY = date(2025, 10, 15)
PAST = date(2025, 10, 10)


def bucket(d, **kw):
    return TreatmentDayBucket(date=d, **kw)


# --- Regeln für einen einzelnen Tag ---

@pytest.mark.parametrize("kw", [
    {},
    {'medication_scheduled_doses': 2, 'medication_doses': 0},
    {'fluid_scheduled_sessions': 1, 'fluid_goal_ml': 100, 'fluid_volume_ml': 100},
])
def test_future_days_are_none(kw):
    assert status_for(bucket(date(2025, 10, 16), **kw), NOW) is DayDotStatus.NONE
    assert status_for(bucket(date(2025, 11, 1), **kw), NOW) is DayDotStatus.NONE


def test_days_before_tracking_start_are_none():
    b = bucket(PAST, medication_scheduled_doses=2, medication_doses=0)
    assert status_for(b, NOW, tracking_start_date=date(2025, 10, 11)) is DayDotStatus.NONE
    # am Starttag selbst wird ausgewertet
    assert status_for(b, NOW, tracking_start_date=PAST) is DayDotStatus.MISSED


def test_no_plan_days():
    assert status_for(bucket(PAST), NOW) is DayDotStatus.NONE
    assert status_for(bucket(TODAY), NOW) is DayDotStatus.TODAY


def test_fluid_goal_without_sessions_is_no_plan():
    b = bucket(PAST, fluid_goal_ml=200, fluid_volume_ml=0)
    assert status_for(b, NOW) is DayDotStatus.NONE


def test_exceeding_goal_counts_as_complete():
    b = bucket(PAST, fluid_scheduled_sessions=1, fluid_goal_ml=100, fluid_volume_ml=150)
    assert status_for(b, NOW) is DayDotStatus.COMPLETE


def test_goal_reached_with_fewer_sessions_counts_as_complete():
    b = bucket(PAST, fluid_scheduled_sessions=2, fluid_session_count=1,
               fluid_goal_ml=200, fluid_volume_ml=210)
    assert status_for(b, NOW) is DayDotStatus.COMPLETE


def test_partial_medication_is_missed():
    b = bucket(PAST, medication_scheduled_doses=2, medication_doses=1)
    assert status_for(b, NOW) is DayDotStatus.MISSED


def test_fluid_only_miss_is_missed():
    b = bucket(PAST, fluid_scheduled_sessions=1, fluid_goal_ml=200, fluid_volume_ml=100)
    assert status_for(b, NOW) is DayDotStatus.MISSED


def test_mixed_one_type_missed():
    b = bucket(PAST, fluid_scheduled_sessions=1, fluid_goal_ml=200, fluid_volume_ml=200,
               medication_scheduled_doses=2, medication_doses=1)
    assert status_for(b, NOW) is DayDotStatus.MISSED


def test_today_is_never_missed():
    b = bucket(TODAY, medication_scheduled_doses=2, medication_doses=0)
    assert status_for(b, NOW) is DayDotStatus.TODAY


def test_today_complete_flips_to_complete():
    b = bucket(TODAY, fluid_scheduled_sessions=1, fluid_goal_ml=100, fluid_volume_ml=120)
    assert status_for(b, NOW) is DayDotStatus.COMPLETE


def test_now_as_plain_date():
    b = bucket(TODAY, medication_scheduled_doses=1, medication_doses=0)
    assert status_for(b, TODAY) is DayDotStatus.TODAY


def test_month_statuses_from_buckets():
    assert build_month_statuses_from_buckets(None, NOW) == {}
    assert build_month_statuses_from_buckets([], NOW) == {}
    result = build_month_statuses_from_buckets(
        [bucket(PAST, medication_scheduled_doses=1, medication_doses=1), bucket(TODAY)], NOW)
    assert result == {PAST: DayDotStatus.COMPLETE, TODAY: DayDotStatus.TODAY}


# --- Woche ---

WEEK_START = date(2025, 10, 20)
WEEK_NOW = datetime(2025, 10, 21, 10, 30)


def meds():
    return [Schedule(id='med1', treatment_type=TreatmentType.MEDICATION,
                     frequency=TreatmentFrequency.TWICE_DAILY, reminder_times=(time(9), time(21)),
                     start_date=date(2025, 10, 1))]


def fluid():
    return Schedule(id='fluid1', treatment_type=TreatmentType.FLUID,
                    frequency=TreatmentFrequency.ONCE_DAILY, reminder_times=(time(10),),
                    start_date=date(2025, 10, 1), target_volume=100)


def test_week_realistic_scenario():
    summaries = {
        date(2025, 10, 20): DailySummary(day=date(2025, 10, 20), medication_total_doses=2,
                                         fluid_total_volume=100, fluid_session_count=1),
        date(2025, 10, 21): None,
    }
    result = compute_week_statuses(WEEK_START, meds(), fluid(), summaries, WEEK_NOW)
    assert len(result) == 7
    assert list(result) == [date(2025, 10, d) for d in range(20, 27)]
    assert result[date(2025, 10, 20)] is DayDotStatus.COMPLETE
    assert result[date(2025, 10, 21)] is DayDotStatus.TODAY
    for d in range(22, 27):
        assert result[date(2025, 10, d)] is DayDotStatus.NONE


def test_week_start_is_normalized_to_monday():
    result = compute_week_statuses(date(2025, 10, 23), meds(), fluid(), {}, WEEK_NOW)
    assert min(result) == date(2025, 10, 20)
    assert max(result) == date(2025, 10, 26)


def test_week_missing_summary_is_no_data():
    # geplant, aber keine Zusammenfassung: wie ein leerer Bucket
    result = compute_week_statuses(WEEK_START, meds(), fluid(), {}, WEEK_NOW)
    assert result[date(2025, 10, 20)] is DayDotStatus.NONE
    assert result[date(2025, 10, 21)] is DayDotStatus.TODAY


def test_week_partial_and_tracking_start():
    summaries = {
        datetime(2025, 10, 20, 0, 0): DailySummary(day=date(2025, 10, 20), medication_total_doses=1,
                                                   fluid_total_volume=100, fluid_session_count=1),
    }
    result = compute_week_statuses(WEEK_START, meds(), fluid(), summaries, WEEK_NOW)
    assert result[date(2025, 10, 20)] is DayDotStatus.MISSED

    result = compute_week_statuses(WEEK_START, meds(), fluid(), summaries, WEEK_NOW,
                                   tracking_start_date=date(2025, 10, 21))
    assert result[date(2025, 10, 20)] is DayDotStatus.NONE


def test_week_only_medication_scheduled():
    summaries = {date(2025, 10, 20): DailySummary(day=date(2025, 10, 20), medication_total_doses=2)}
    result = compute_week_statuses(WEEK_START, meds(), None, summaries, WEEK_NOW)
    assert result[date(2025, 10, 20)] is DayDotStatus.COMPLETE


# --- Monat ---

def test_month_without_summary_resolves_every_day():
    result = compute_month_statuses(date(2025, 10, 1), None, NOW)
    assert len(result) == 31
    assert result[TODAY] is DayDotStatus.TODAY
    assert all(s is DayDotStatus.NONE for d, s in result.items() if d != TODAY)


def test_month_with_misaligned_summary_resolves_like_no_data():
    summary = MonthlySummary(start_date=date(2025, 10, 1),
                             daily_medication_scheduled_doses=tuple([1] * 30))
    result = compute_month_statuses(date(2025, 10, 1), summary, NOW)
    assert len(result) == 31
    assert DayDotStatus.MISSED not in result.values()


def test_month_concrete_scenario():
    def arr(value_at_9):
        values = [0] * 31
        values[9] = value_at_9
        return tuple(values)

    summary = MonthlySummary(
        start_date=date(2025, 10, 1),
        daily_volumes=arr(220),
        daily_goals=arr(200),
        daily_scheduled_sessions=arr(1),
        daily_medication_doses=arr(1),
        daily_medication_scheduled_doses=arr(1),
    )
    result = compute_month_statuses(date(2025, 10, 1), summary, datetime(2025, 10, 15))
    assert result[date(2025, 10, 10)] is DayDotStatus.COMPLETE
    assert result[date(2025, 10, 9)] is DayDotStatus.NONE


def test_month_from_weeks_keeps_only_month_days():
    summaries = {
        date(2025, 10, d): DailySummary(day=date(2025, 10, d), medication_total_doses=2,
                                        fluid_total_volume=100, fluid_session_count=1)
        for d in range(1, 15)
    }
    summaries[date(2025, 9, 30)] = DailySummary(day=date(2025, 9, 30))
    result = compute_month_statuses_from_weeks(date(2025, 10, 1), meds(), fluid(), summaries, NOW)
    assert len(result) == 31
    assert all(d.month == 10 for d in result)
    assert all(result[date(2025, 10, d)] is DayDotStatus.COMPLETE for d in range(1, 15))
    assert result[TODAY] is DayDotStatus.TODAY
    assert result[date(2025, 10, 16)] is DayDotStatus.NONE


def test_month_from_weeks_uses_cache():
    cache = WeekStatusCache()
    first = compute_month_statuses_from_weeks(date(2025, 10, 1), meds(), fluid(), {}, NOW, cache=cache)
    assert len(cache) == 5
    assert cache.misses == 5
    second = compute_month_statuses_from_weeks(date(2025, 10, 1), meds(), fluid(), {}, NOW, cache=cache)
    assert cache.hits == 5
    assert first == second


# --- Infusion ohne Zielvolumen ---

def fluid_without_volume():
    return Schedule(id='fluid2', treatment_type=TreatmentType.FLUID,
                    frequency=TreatmentFrequency.ONCE_DAILY, reminder_times=(time(10),),
                    start_date=date(2025, 10, 1))


def test_week_fluid_without_goal_and_nothing_logged_is_missed():
    summaries = {date(2025, 10, 20): DailySummary(day=date(2025, 10, 20))}
    result = compute_week_statuses(WEEK_START, [], fluid_without_volume(), summaries,
                                   datetime(2025, 10, 22, 9, 0))
    assert result[date(2025, 10, 20)] is DayDotStatus.MISSED


def test_week_fluid_without_goal_counts_sessions():
    summaries = {date(2025, 10, 20): DailySummary(day=date(2025, 10, 20), fluid_total_volume=80,
                                                  fluid_session_count=1)}
    result = compute_week_statuses(WEEK_START, [], fluid_without_volume(), summaries,
                                   datetime(2025, 10, 22, 9, 0))
    assert result[date(2025, 10, 20)] is DayDotStatus.COMPLETE


@pytest.mark.parametrize("sessions,expected", [
    (0, DayDotStatus.MISSED),
    (1, DayDotStatus.MISSED),
    (2, DayDotStatus.COMPLETE),
])
def test_zero_goal_uses_session_count(sessions, expected):
    b = bucket(PAST, fluid_scheduled_sessions=2, fluid_goal_ml=0, fluid_session_count=sessions)
    assert status_for(b, NOW) is expected
