from datetime import datetime, timezone, tzinfo
from typing import Dict, List

import globals as config
from models import (
    DashboardSummary, DetailedStats, Interview, LevelStats, OverallStats,
    RecentInterview, ScorePoint, WeakTopic
)
from utils import ensure_aware, format_locale_date
from weak_topics import detect_weak_topics, qualifying_evaluations

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


def completed_interviews(interviews: List[Interview]) -> List[Interview]:
    """Scored interviews, most recently completed first"""
    scored = [i for i in interviews if i.averageScore is not None]
    return sorted(
        scored,
        key=lambda i: ensure_aware(i.completedAt) if i.completedAt else _NEVER,
        reverse=True
    )


def build_weak_topic_list(interviews: List[Interview], limit: int = None) -> List[WeakTopic]:
    if limit is None:
        limit = config.get_analytics_config()["dashboard_weak_topics"]
    return detect_weak_topics(qualifying_evaluations(interviews), limit=limit)


def build_dashboard_summary(interviews: List[Interview], tz: tzinfo) -> DashboardSummary:
    """Headline numbers, recent interviews, weak topics and score trend for one user"""
    settings = config.get_analytics_config()
    completed = completed_interviews(interviews)

    if not completed:
        return DashboardSummary(
            totalInterviews=len(interviews),
            completedInterviews=0,
            overallAverageScore=0,
            recentInterviews=[],
            weakTopics=build_weak_topic_list(interviews),
            scoreHistory=[]
        )

    overall_average = round(sum(i.averageScore for i in completed) / len(completed), 2)

    recent_interviews = [
        RecentInterview(
            id=i.id,
            role=i.role,
            level=i.level,
            averageScore=i.averageScore,
            completedAt=i.completedAt,
            questionCount=i.questionCount
        )
        for i in completed[:settings["recent_interviews"]]
    ]

    # Oldest first for charting
    score_history = [
        ScorePoint(
            date=format_locale_date(i.completedAt, tz) if i.completedAt else "",
            score=i.averageScore,
            role=i.role
        )
        for i in reversed(completed[:settings["score_history"]])
    ]

    return DashboardSummary(
        totalInterviews=len(interviews),
        completedInterviews=len(completed),
        overallAverageScore=overall_average,
        recentInterviews=recent_interviews,
        weakTopics=build_weak_topic_list(interviews),
        scoreHistory=score_history
    )


def build_detailed_stats(interviews: List[Interview]) -> DetailedStats:
    """Overall and per-level score statistics over scored interviews, in one pass"""
    total = 0
    score_sum = 0.0
    max_score = None
    min_score = None
    total_questions = 0
    levels: Dict[str, List[float]] = {}

    for interview in interviews:
        score = interview.averageScore
        if score is None:
            continue

        total += 1
        score_sum += score
        max_score = score if max_score is None else max(max_score, score)
        min_score = score if min_score is None else min(min_score, score)
        total_questions += interview.questionCount

        level = levels.setdefault(interview.level, [0, 0.0])
        level[0] += 1
        level[1] += score

    if total == 0:
        return DetailedStats(overall=OverallStats(), byLevel=[])

    overall = OverallStats(
        totalInterviews=total,
        avgScore=round(score_sum / total, 2),
        maxScore=round(max_score, 2),
        minScore=round(min_score, 2),
        totalQuestions=total_questions
    )

    by_level = [
        LevelStats(level=name, count=count, avgScore=round(level_sum / count, 2))
        for name, (count, level_sum) in levels.items()
    ]
    by_level.sort(key=lambda s: (-s.count, s.level))

    return DetailedStats(overall=overall, byLevel=by_level)
