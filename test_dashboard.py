#!/usr/bin/env python3
"""
Test script for dashboard summary and detailed statistics
"""

from datetime import datetime, timedelta, timezone

from dashboard import build_dashboard_summary, build_detailed_stats, build_weak_topic_list
from models import Interview, Question, ScoredEvaluation

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_interview(n, score=None, level="Intermediate", role="Backend Developer",
                   weaknesses="", question_count=3):
    questions = [Question(id=q, question=f"Question {q}", difficulty="medium") for q in range(question_count)]
    evaluations = [ScoredEvaluation(questionId=0, score=score, weaknesses=weaknesses)] if score is not None else []
    interview = Interview(
        id=f"int-{n}", userId="user-1", role=role, level=level,
        questions=questions, evaluations=evaluations,
        createdAt=BASE_TIME + timedelta(days=n)
    )
    if score is not None:
        interview.mark_as_completed(BASE_TIME + timedelta(days=n, hours=1))
    return interview


def test_empty_dashboard():
    print("🧪 Testing dashboard with no completed interviews...")
    summary = build_dashboard_summary([make_interview(1), make_interview(2)], timezone.utc)

    assert summary.totalInterviews == 2
    assert summary.completedInterviews == 0
    assert summary.overallAverageScore == 0
    assert summary.recentInterviews == []
    assert summary.scoreHistory == []
    assert len(summary.weakTopics) == 1
    assert summary.weakTopics[0].topic == "No patterns detected yet"
    assert summary.weakTopics[0].frequency == 0
    print("✅ Zero-state dashboard is well formed")


def test_summary_counts_and_average():
    interviews = [make_interview(1, 6), make_interview(2, 8), make_interview(3, 7.5), make_interview(4)]
    summary = build_dashboard_summary(interviews, timezone.utc)

    assert summary.totalInterviews == 4
    assert summary.completedInterviews == 3
    assert summary.overallAverageScore == 7.17


def test_recent_interviews_and_score_history():
    print("🧪 Testing recent interviews and score history slices...")
    interviews = [make_interview(n, score=n % 10, role=f"Role {n}") for n in range(12)]
    summary = build_dashboard_summary(interviews, timezone.utc)

    assert [r.id for r in summary.recentInterviews] == ["int-11", "int-10", "int-9", "int-8", "int-7"]
    assert summary.recentInterviews[0].questionCount == 3
    assert summary.recentInterviews[0].level == "Intermediate"

    # Ten most recent, oldest first
    assert len(summary.scoreHistory) == 10
    assert [p.role for p in summary.scoreHistory] == [f"Role {n}" for n in range(2, 12)]
    assert summary.scoreHistory[0].date == "3/3/2024"
    assert summary.scoreHistory[-1].date == "3/12/2024"
    assert summary.scoreHistory[-1].score == 1
    print("✅ Slices are correct")


def test_summary_includes_weak_topics():
    interviews = [
        make_interview(1, 4, weaknesses="React hooks are confusing"),
        make_interview(2, 5, weaknesses="react state handling"),
        make_interview(3, 9, weaknesses="security"),
    ]
    summary = build_dashboard_summary(interviews, timezone.utc)

    assert summary.weakTopics[0].topic == "React"
    assert summary.weakTopics[0].frequency == 2
    assert len(summary.weakTopics) == 3
    assert all(t.topic != "Security" for t in summary.weakTopics)

    assert build_weak_topic_list(interviews) == summary.weakTopics


def test_summary_is_stable():
    interviews = [make_interview(n, score=5 + n % 3, weaknesses="database testing") for n in range(6)]
    first = build_dashboard_summary(interviews, timezone.utc).model_dump_json()
    second = build_dashboard_summary(interviews, timezone.utc).model_dump_json()
    assert first == second


def test_detailed_stats():
    print("🧪 Testing detailed stats...")
    interviews = [
        make_interview(1, 6, level="Beginner", question_count=2),
        make_interview(2, 8, level="Advanced", question_count=5),
        make_interview(3, 7, level="Beginner", question_count=3),
        make_interview(4, 9, level="Intermediate", question_count=4),
        make_interview(5),
    ]
    stats = build_detailed_stats(interviews)

    assert stats.overall.totalInterviews == 4
    assert stats.overall.avgScore == 7.5
    assert stats.overall.maxScore == 9
    assert stats.overall.minScore == 6
    assert stats.overall.totalQuestions == 14

    assert [(s.level, s.count, s.avgScore) for s in stats.byLevel] == [
        ("Beginner", 2, 6.5), ("Advanced", 1, 8), ("Intermediate", 1, 9)
    ]
    print("✅ Detailed stats computed")


def test_detailed_stats_empty():
    stats = build_detailed_stats([make_interview(1)])

    assert stats.overall.totalInterviews == 0
    assert stats.overall.avgScore == 0
    assert stats.overall.totalQuestions == 0
    assert stats.byLevel == []


def test_interview_average_score():
    interview = Interview(
        id="x", userId="u", role="Dev", level="Beginner", createdAt=BASE_TIME,
        evaluations=[
            ScoredEvaluation(questionId=1, score=7),
            ScoredEvaluation(questionId=2, score=8),
            ScoredEvaluation(questionId=3, score=None),
        ]
    )
    interview.mark_as_completed(BASE_TIME)
    assert interview.averageScore == 5
    assert interview.status == "completed"

    try:
        interview.mark_as_completed(BASE_TIME + timedelta(hours=1))
        assert False, "completing twice should fail"
    except ValueError:
        pass
    assert interview.completedAt == BASE_TIME

    empty = Interview(id="y", userId="u", role="Dev", level="Beginner", createdAt=BASE_TIME)
    assert empty.mark_as_completed(BASE_TIME).averageScore is None


if __name__ == "__main__":
    test_empty_dashboard()
    test_summary_counts_and_average()
    test_recent_interviews_and_score_history()
    test_summary_includes_weak_topics()
    test_summary_is_stable()
    test_detailed_stats()
    test_detailed_stats_empty()
    test_interview_average_score()
    print("\n✅ All dashboard tests completed!")
