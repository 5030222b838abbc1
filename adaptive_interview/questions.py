# adaptive_interview/questions.py
from __future__ import annotations

import logging
import random
from typing import Any, List, Optional, Sequence

from adaptive_interview.errors import ModelParseError, ModelUnavailable, NoQuestionsAvailable
from adaptive_interview.models import (
    SELECT_AI,
    SELECT_FALLBACK,
    SELECT_RANDOM,
    QuestionDocument,
    SelectionResult,
    SessionContext,
)
from adaptive_interview.parsing import extract_question
from adaptive_interview.prompts import SELECTION_LINE, SELECTION_PROMPT
from adaptive_interview.scoring import round_half_up
from adaptive_interview.store import QuestionStore

logger = logging.getLogger(__name__)

SELECTION_TEMPERATURE = 0.2
SELECTION_MAX_TOKENS = 40
EXCERPT_CHARS = 100
TOP_CANDIDATES = 3


def _average(scores: Sequence[float]) -> Optional[float]:
    if not scores:
        return None
    return sum(scores) / len(scores)


def _performance_line(scores: Sequence[float]) -> str:
    avg = _average(scores)
    if avg is None:
        return "No answers yet"
    avg = round_half_up(avg)
    if avg >= 70:
        return f"Strong ({avg}% avg)"
    if avg >= 50:
        return f"Moderate ({avg}% avg)"
    return f"Needs improvement ({avg}% avg)"


def difficulty_order(scores: Sequence[float]) -> List[str]:
    # No history counts as middling
    avg = _average(scores)
    if avg is None:
        avg = 50
    if avg >= 70:
        return ["hard", "medium", "easy"]
    if avg >= 50:
        return ["medium", "easy", "hard"]
    return ["easy", "medium", "hard"]


def _build_selection_prompt(context: SessionContext, candidates: Sequence[QuestionDocument]) -> str:
    lines = [
        SELECTION_LINE.format(
            id=q.id,
            topic=q.topic,
            difficulty=q.difficulty,
            excerpt=q.content[:EXCERPT_CHARS],
        )
        for q in candidates
    ]
    return SELECTION_PROMPT.format(
        role=context.role,
        difficulty=context.difficulty or "mixed",
        performance=_performance_line(context.recent_scores),
        available_questions="\n".join(lines),
    )


# -----------------------
# Strategies
# -----------------------
class ModelSelection:
    """Ask the model to pick a question id from the candidate list."""

    def __init__(self, model: Any, fallback_to_rules: bool = True) -> None:
        self._model = model
        self._fallback_to_rules = fallback_to_rules

    def _ask(self, prompt: str) -> str:
        try:
            return self._model.complete(
                prompt, temperature=SELECTION_TEMPERATURE, max_tokens=SELECTION_MAX_TOKENS
            )
        except ModelUnavailable:
            raise
        except Exception as e:
            raise ModelUnavailable(f"{type(e).__name__}: {e}") from e

    def attempt(self, context: SessionContext, candidates: Sequence[QuestionDocument]) -> Optional[SelectionResult]:
        prompt = _build_selection_prompt(context, candidates)
        try:
            reply = self._ask(prompt)
        except ModelUnavailable as e:
            logger.warning("AI question selection failed: %s", e)
            if not self._fallback_to_rules:
                raise
            return None

        try:
            question = extract_question(reply, candidates)
        except ModelParseError:
            logger.warning("AI returned no valid question id, using fallback")
            return None

        return SelectionResult(question=question, reasoning="AI selected", selection_method=SELECT_AI)


class TopicDifficultySelection:
    """
    Prefer topics the candidate has not seen yet, then order by how well
    they have been doing, then pick randomly among the top few.
    """

    def __init__(self, store: QuestionStore, rng: random.Random) -> None:
        self._store = store
        self._rng = rng

    def attempt(self, context: SessionContext, candidates: Sequence[QuestionDocument]) -> Optional[SelectionResult]:
        if not candidates:
            return None

        covered = self._store.topics_covered(context.answered_question_ids)
        pool = [q for q in candidates if q.topic not in covered]
        if not pool:
            # every topic covered; diversity is only a preference
            pool = list(candidates)

        order = difficulty_order(context.recent_scores)
        rank = {d: i for i, d in enumerate(order)}
        pool = sorted(pool, key=lambda q: rank.get(q.difficulty, len(order)))

        selected = self._rng.choice(pool[:TOP_CANDIDATES])
        return SelectionResult(
            question=selected,
            reasoning="Selected based on topic diversity and difficulty appropriateness",
            selection_method=SELECT_FALLBACK,
        )


class RandomSelection:
    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def attempt(self, context: SessionContext, candidates: Sequence[QuestionDocument]) -> Optional[SelectionResult]:
        if not candidates:
            return None
        return SelectionResult(
            question=self._rng.choice(list(candidates)),
            reasoning="Randomly selected from available questions",
            selection_method=SELECT_RANDOM,
        )


# -----------------------
# Selector
# -----------------------
class QuestionSelector:
    """
    Picks the next interview question.

    Questions at the session's difficulty go through the strategy list
    (model, then topic/difficulty heuristic, then random). If that tier is
    used up, any remaining question for the role is drawn at random.
    """

    def __init__(
        self,
        store: QuestionStore,
        model: Any = None,
        fallback_to_rules: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        rng = rng or random.Random()
        self.strategies: List[Any] = []
        if model is not None:
            self.strategies.append(ModelSelection(model, fallback_to_rules=fallback_to_rules))
        self.strategies += [TopicDifficultySelection(store, rng), RandomSelection(rng)]
        self.relaxed_strategies: List[Any] = [RandomSelection(rng)]

    @staticmethod
    def _run(strategies, context: SessionContext, candidates) -> Optional[SelectionResult]:
        for strategy in strategies:
            result = strategy.attempt(context, candidates)
            if result is not None:
                logger.debug(
                    "selected question %s via %s", result.question.id, result.selection_method
                )
                return result
        return None

    def select_next(self, context: SessionContext) -> Optional[SelectionResult]:
        candidates = self.store.get_filtered(
            role=context.role,
            difficulty=context.difficulty,
            exclude_ids=context.answered_question_ids,
        )
        if candidates:
            return self._run(self.strategies, context, candidates)

        # Difficulty tier exhausted: anything left for the role
        relaxed = self.store.get_filtered(role=context.role, exclude_ids=context.answered_question_ids)
        if not relaxed:
            logger.info("no questions left for role %r", context.role)
            return None
        return self._run(self.relaxed_strategies, context, relaxed)

    def require_next(self, context: SessionContext) -> SelectionResult:
        result = self.select_next(context)
        if result is None:
            raise NoQuestionsAvailable(f"no questions left for role {context.role!r}")
        return result

    def select_for_session(self, context: SessionContext, count: int) -> List[SelectionResult]:
        """
        Pre-select up to `count` questions. Each pick is treated as answered
        for the next one; scores are unknown so `recent_scores` is unchanged.
        """
        picked: List[SelectionResult] = []
        for _ in range(count):
            result = self.select_next(context)
            if result is None:
                break
            picked.append(result)
            context = context.with_answered(result.question.id)
        return picked
