# adaptive_interview/scoring.py
"""
Rule-based scoring.

Per-answer: keyword coverage, length and structure signals blended into a
0-100 score with canned feedback. Per-session: roll the per-answer scores up
into topic scores and a readiness score.
No I/O here; every function is deterministic.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from adaptive_interview.models import EVAL_RULES, EvaluationResult, SessionFeedback

_SENTENCE_END_RE = re.compile(r"[.!?]+")

# Weights in tenths so that x.5 totals stay exact before rounding
KEYWORD_WEIGHT = 5
LENGTH_WEIGHT = 3
STRUCTURE_WEIGHT = 2

STRENGTH_TOPIC_SCORE = 70
WEAKNESS_TOPIC_SCORE = 50


def round_half_up(x: float) -> int:
    # round() sends halves to even; scores round halves up
    return int(math.floor(x + 0.5))


def aggregate_numeric(stats_list: Iterable[Mapping[str, Any]], key: str) -> Optional[float]:
    vals = []
    for s in stats_list:
        v = s.get(key)
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            vals.append(float(v))
    if not vals:
        return None
    return float(np.mean(vals))


def _length_score(word_count: int) -> int:
    if 30 <= word_count <= 500:
        return 100
    if word_count > 500:
        return 70
    if word_count >= 15:
        return 60
    if word_count >= 5:
        return 40
    return 0


def feedback_text(score: int, strengths: Sequence[str], weaknesses: Sequence[str]) -> str:
    if score >= 80:
        text = "Excellent answer! "
    elif score >= 60:
        text = "Good answer with room for improvement. "
    elif score >= 40:
        text = "Decent attempt, but needs more depth. "
    else:
        text = "This answer needs significant improvement. "

    if strengths:
        text += f"Strengths: {', '.join(strengths)}. "
    if weaknesses:
        text += f"Areas to improve: {', '.join(weaknesses)}."
    return text.strip()


def evaluate_answer(
    answer_text: Optional[str],
    expected_keywords: Iterable[str],
    ideal_answer: str = "",
) -> EvaluationResult:
    """
    Score one answer against the question's expected keywords.

    A keyword counts as covered when it appears (case-insensitively) anywhere
    in the answer, so "scope" is covered by "scoped".
    `ideal_answer` is accepted for parity with the question record; the
    heuristic does not compare against it.
    """
    text = (answer_text or "").lower().strip()
    keywords = [k.strip().lower() for k in expected_keywords if k and k.strip()]

    matched = [k for k in keywords if k in text]
    missed = [k for k in keywords if k not in text]
    keyword_score = round_half_up(100 * len(matched) / len(keywords)) if keywords else 0

    word_count = len(text.split())
    length_score = _length_score(word_count)

    has_structure = len(_SENTENCE_END_RE.findall(text)) >= 2
    structure_score = 100 if has_structure else 50

    score = round_half_up(
        (keyword_score * KEYWORD_WEIGHT + length_score * LENGTH_WEIGHT + structure_score * STRUCTURE_WEIGHT) / 10
    )
    score = max(0, min(100, score))

    strengths: List[str] = []
    weaknesses: List[str] = []

    if keyword_score >= 70:
        strengths.append("Good coverage of key concepts")
    elif keyword_score >= 40:
        weaknesses.append("Some important concepts were missing")
    else:
        weaknesses.append("Many key concepts were not addressed")

    if length_score >= 80:
        strengths.append("Answer has good depth and detail")
    elif word_count < 30:
        weaknesses.append("Answer could be more detailed")
    elif word_count > 500:
        weaknesses.append("Answer could be more concise")

    if has_structure:
        strengths.append("Well-structured response")
    else:
        weaknesses.append("Consider structuring your answer with multiple points")

    suggestions: List[str] = []
    if missed:
        suggestions.append(f"Consider discussing: {', '.join(missed[:3])}")
    if word_count < 30:
        suggestions.append("Provide more examples and explanations")
    elif word_count > 500:
        suggestions.append("Trim the answer to the most relevant points")
    if not has_structure:
        suggestions.append("Break your answer into clear points or steps")

    return EvaluationResult(
        score=score,
        feedback=feedback_text(score, strengths, weaknesses),
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        suggestions=tuple(suggestions),
        matched_keywords=tuple(matched),
        missed_keywords=tuple(missed),
        keyword_score=keyword_score,
        word_count=word_count,
        evaluation_method=EVAL_RULES,
    )


# -----------------------
# Session roll-up
# -----------------------
def readiness_level(score: float) -> str:
    if score >= 80:
        return "Interview Ready"
    if score >= 60:
        return "Almost Ready"
    if score >= 40:
        return "Needs Practice"
    return "Keep Learning"


def aggregate_session(answers: Sequence[Mapping[str, Any]]) -> SessionFeedback:
    """
    Roll per-answer scores into the end-of-session report.

    Each answer is a mapping with `score` (number or None) and `topic`.
    Unscored answers are left out of the overall mean but still count as 0
    inside their topic and towards the completion bonus.
    """
    if not answers:
        return SessionFeedback(readiness_level=readiness_level(0))

    overall_mean = aggregate_numeric(answers, "score")
    overall_score = round_half_up(overall_mean) if overall_mean is not None else 0

    by_topic: Dict[str, List[float]] = {}
    for a in answers:
        topic = a.get("topic")
        if not topic:
            continue
        by_topic.setdefault(topic, []).append(float(a.get("score") or 0))
    topic_scores = {t: round_half_up(float(np.mean(v))) for t, v in by_topic.items()}

    strengths = [t for t, s in topic_scores.items() if s >= STRENGTH_TOPIC_SCORE]
    weaknesses = [t for t, s in topic_scores.items() if s < WEAKNESS_TOPIC_SCORE]

    recommendations: List[str] = []
    if weaknesses:
        recommendations.append(f"Focus on improving: {', '.join(weaknesses)}")
    if overall_score < 50:
        recommendations.append("Review fundamental concepts and practice more")
    elif overall_score < 70:
        recommendations.append("Good foundation, now work on depth and examples")
    else:
        recommendations.append("Strong performance! Try harder difficulty questions")

    # Completing more questions earns up to 40 bonus points
    readiness = min(100, round_half_up((overall_score * 6 + min(len(answers), 10) * 40) / 10))

    return SessionFeedback(
        overall_score=overall_score,
        topic_scores=topic_scores,
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        readiness_score=readiness,
        readiness_level=readiness_level(readiness),
    )
