from collections import Counter
from datetime import date, timedelta, tzinfo
from typing import Dict, Iterable, List

from models import DailyChallenge, HeatmapDay, Interview, StreakData
from utils import format_date_key, to_local_date

ONE_DAY = timedelta(days=1)


def collect_activity_dates(interviews: Iterable[Interview], challenges: Iterable[DailyChallenge],
                           year: int, tz: tzinfo) -> List[date]:
    """One calendar date per activity event (completed interview or challenge) within year"""
    dates = []

    for interview in interviews:
        if interview.completedAt is not None:
            dates.append(to_local_date(interview.completedAt, tz))

    for challenge in challenges:
        if challenge.completed and challenge.completedAt is not None:
            dates.append(to_local_date(challenge.completedAt, tz))

    return [d for d in dates if d.year == year]


def count_back(active: Dict[date, int], start: date) -> int:
    """Length of the run of active days ending at start"""
    streak = 0
    day = start
    while active.get(day, 0) > 0:
        streak += 1
        day -= ONE_DAY
    return streak


def current_streak(active: Dict[date, int], today: date) -> int:
    # A streak stays alive through today until the day is over
    if active.get(today, 0) > 0:
        return count_back(active, today)
    return count_back(active, today - ONE_DAY)


def max_streak(active_dates: List[date]) -> int:
    """Longest run of consecutive days among ascending distinct dates"""
    if not active_dates:
        return 0

    longest = running = 1
    for prev, curr in zip(active_dates, active_dates[1:]):
        if curr - prev == ONE_DAY:
            running += 1
            longest = max(longest, running)
        else:
            running = 1
    return longest


def build_heatmap(active: Dict[date, int], today: date) -> List[HeatmapDay]:
    """Every day from Jan 1 of today's year through today, inactive days at 0"""
    heatmap = []
    day = date(today.year, 1, 1)
    while day <= today:
        heatmap.append(HeatmapDay(date=format_date_key(day), count=active.get(day, 0)))
        day += ONE_DAY
    return heatmap


def calculate_streak(activity_dates: Iterable[date], today: date) -> StreakData:
    """Build the contribution calendar and streak counters for one user's activity"""
    active = Counter(activity_dates)
    active_dates = sorted(d for d, count in active.items() if count > 0)

    return StreakData(
        currentStreak=current_streak(active, today),
        maxStreak=max_streak(active_dates),
        totalActiveDays=len(active_dates),
        totalSubmissions=sum(active.values()),
        year=today.year,
        heatmap=build_heatmap(active, today)
    )
