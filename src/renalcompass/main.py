# src/renalcompass/main.py

import logging
import sys
from datetime import date, datetime
from typing import List, Optional

from .config import load_config
from .data import SnapshotError, load_snapshot
from .date_utils import format_month_key, format_week_key, start_of_week_monday
from .memoization import WeekStatusCache
from .models import DayDotStatus
from .statistics import calculate_streaks, summarize_adherence
from .status import compute_month_statuses, compute_month_statuses_from_weeks

USAGE = "Aufruf: renalcompass SNAPSHOT.json [YYYY-MM-DD] [--month]"

STATUS_SYMBOLS = {
    DayDotStatus.NONE: "·",
    DayDotStatus.TODAY: "●",
    DayDotStatus.MISSED: "✗",
    DayDotStatus.COMPLETE: "✓",
}

WEEKDAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]


def print_statuses(title: str, statuses: dict):
    print(f"\n📅 {title}")
    for d in sorted(statuses):
        s = statuses[d]
        print(f"  {WEEKDAY_NAMES[d.weekday()]} {d.isoformat()}  {STATUS_SYMBOLS[s]} {s.value}")

    summary = summarize_adherence(statuses)
    streaks = calculate_streaks(statuses)
    print(
        f"\n✅ {summary['complete']} erledigt, ❌ {summary['missed']} verpasst "
        f"({summary['adherence_pct']}%), Serie: {streaks['current']} (max. {streaks['longest']})"
    )


def run_report(argv: Optional[List[str]] = None, now: Optional[datetime] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    month_mode = '--month' in args
    args = [a for a in args if a != '--month']
    if not args or len(args) > 2:
        print(USAGE)
        return 2

    cfg = load_config()
    logging.basicConfig(level=cfg.get('log_level', 'WARNING'))

    try:
        snap = load_snapshot(args[0])
    except SnapshotError as e:
        logging.error(str(e))
        return 1

    now = now or datetime.now()
    try:
        focus = date.fromisoformat(args[1]) if len(args) == 2 else now.date()
    except ValueError:
        print(USAGE)
        return 2
    cache = WeekStatusCache.from_config(cfg)

    if month_mode:
        monthly = snap.monthly_summary_for(focus)
        if monthly is not None:
            statuses = compute_month_statuses(focus, monthly, now, snap.tracking_start_date)
        else:
            # keine Monatsdaten: aus den Wochen zusammensetzen
            statuses = compute_month_statuses_from_weeks(
                focus, snap.medication_schedules, snap.fluid_schedule,
                snap.daily_summaries, now, snap.tracking_start_date, cache=cache,
            )
        print_statuses(f"Monat {format_month_key(focus)}", statuses)
    else:
        week_start = start_of_week_monday(focus)
        statuses = cache.compute(
            week_start, snap.medication_schedules, snap.fluid_schedule,
            snap.daily_summaries, now, snap.tracking_start_date,
        )
        print_statuses(f"Woche {format_week_key(week_start)}", statuses)
    return 0


def main():
    sys.exit(run_report())


if __name__ == "__main__":
    main()
