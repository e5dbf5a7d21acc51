import re
from collections import Counter
from typing import Iterable, List, Optional

import globals as config
from models import Interview, ScoredEvaluation, WeakTopic

_TOKEN_SPLIT = re.compile(r'\W+')
_KEYWORD_RANK = {keyword: rank for rank, keyword in enumerate(config.TECHNICAL_KEYWORDS)}


def no_patterns_topic() -> WeakTopic:
    return WeakTopic(**config.NO_PATTERNS_TOPIC)


def is_sentinel(weak_topics: List[WeakTopic]) -> bool:
    """True when detection found nothing real to report"""
    return all(t.frequency == 0 for t in weak_topics)


def get_recommendation(keyword: str) -> str:
    """Get study advice for a weak keyword"""
    return config.TOPIC_RECOMMENDATIONS.get(keyword, f"Review {keyword} concepts and practice")


def qualifying_evaluations(interviews: Iterable[Interview]) -> List[ScoredEvaluation]:
    """Evaluations from scored interviews; the score threshold is applied by the detector"""
    evaluations = []
    for interview in interviews:
        if interview.averageScore is not None:
            evaluations.extend(interview.evaluations)
    return evaluations


def extract_keywords(weaknesses: str) -> List[str]:
    """Technical keywords found in a free-text weakness note"""
    words = _TOKEN_SPLIT.split((weaknesses or "").lower())
    return [
        word for word in words
        if len(word) >= config.MIN_KEYWORD_LENGTH and word in _KEYWORD_RANK
    ]


def detect_weak_topics(evaluations: Iterable[ScoredEvaluation], limit: int = 3,
                       threshold: Optional[float] = None) -> List[WeakTopic]:
    """
    Rank recurring technical keywords in the weaknesses of low-scoring answers.

    Only evaluations scoring below the threshold contribute. Ties are broken by
    the keyword's position in the vocabulary. Never returns an empty list: when
    nothing matches, a single zero-frequency placeholder is returned instead.
    """
    if threshold is None:
        threshold = config.get_analytics_config()["weak_score_threshold"]

    counts = Counter()
    for evaluation in evaluations:
        if evaluation.score is None or evaluation.score >= threshold:
            continue
        counts.update(extract_keywords(evaluation.weaknesses))

    if not counts:
        return [no_patterns_topic()]

    ranked = sorted(counts.items(), key=lambda item: (-item[1], _KEYWORD_RANK[item[0]]))

    return [
        WeakTopic(
            topic=keyword.capitalize(),
            frequency=count,
            recommendation=get_recommendation(keyword)
        )
        for keyword, count in ranked[:limit]
    ]
