# adaptive_interview/engine.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Optional, Sequence

from openai import OpenAI, OpenAIError

from adaptive_interview.config import Settings, get_openai_client, settings
from adaptive_interview.errors import InterviewEngineError, ModelParseError, ModelUnavailable
from adaptive_interview.models import (
    EVAL_AI_BLENDED,
    EVAL_FALLBACK,
    EvaluationResult,
    QuestionDocument,
    SelectionResult,
    SessionContext,
    SessionFeedback,
)
from adaptive_interview.parsing import extract_score
from adaptive_interview.prompts import EVALUATION_PROMPT
from adaptive_interview.questions import QuestionSelector
from adaptive_interview.scoring import aggregate_session, evaluate_answer, round_half_up
from adaptive_interview.store import QuestionLoader, QuestionStore

logger = logging.getLogger(__name__)

EVALUATION_TEMPERATURE = 0.1
EVALUATION_MAX_TOKENS = 60


# -----------------------
# Model client
# -----------------------
class ModelClient:
    """
    Thin text-in/text-out wrapper around the chat completions API.
    Every SDK failure (timeout, connection, HTTP status) surfaces as
    ModelUnavailable, and so does a response without chat choices.
    """

    def __init__(self, client: OpenAI, model: str) -> None:
        self._client = client
        self.model = model

    def complete(self, prompt: str, temperature: float = 0.3, max_tokens: int = 20) -> str:
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ModelUnavailable(f"{type(e).__name__}: {e}") from e

        # a non-JSON 200 body comes back from the SDK as a bare string
        choices = getattr(resp, "choices", None)
        if choices is None:
            raise ModelUnavailable(f"unexpected completion payload: {type(resp).__name__}")
        if not choices:
            return ""
        content = getattr(getattr(choices[0], "message", None), "content", None)
        if content is not None and not isinstance(content, str):
            raise ModelUnavailable(f"unexpected completion content: {type(content).__name__}")
        return (content or "").strip()


def get_model_client(cfg: Settings = settings) -> Optional[ModelClient]:
    if not cfg.ai_enabled:
        return None
    return ModelClient(get_openai_client(cfg), cfg.model)


# -----------------------
# Answer evaluation
# -----------------------
def blend(model_score: int, rules: EvaluationResult) -> EvaluationResult:
    """
    50/50 average of the model's number and the rule score.
    The model contributes nothing else; feedback text and keyword breakdown
    come from the rules.
    """
    score = round_half_up(model_score * 0.5 + rules.score * 0.5)
    return replace(rules, score=max(0, min(100, score)), evaluation_method=EVAL_AI_BLENDED)


class AnswerEvaluator:
    def __init__(self, model: Any = None, fallback_to_rules: bool = True) -> None:
        self.model = model
        self.fallback_to_rules = fallback_to_rules

    def model_score(self, answer: str, question: QuestionDocument) -> int:
        prompt = EVALUATION_PROMPT.format(
            question_text=question.content,
            candidate_answer=answer or "(No answer provided)",
        )
        try:
            reply = self.model.complete(
                prompt, temperature=EVALUATION_TEMPERATURE, max_tokens=EVALUATION_MAX_TOKENS
            )
        except InterviewEngineError:
            raise
        except Exception as e:
            raise ModelUnavailable(f"{type(e).__name__}: {e}") from e
        return extract_score(reply)

    def evaluate_answer(
        self,
        answer: Optional[str],
        question: QuestionDocument,
        time_taken: Optional[float] = None,
    ) -> EvaluationResult:
        """
        Score one answer. `time_taken` is accepted so callers can pass it
        through; it does not change the score.
        """
        # Rules always run first: they are the baseline and the fallback
        rules = evaluate_answer(
            answer,
            question.metadata.expected_keywords,
            question.metadata.ideal_answer,
        )
        if self.model is None:
            return rules

        try:
            return blend(self.model_score(answer or "", question), rules)
        except (ModelUnavailable, ModelParseError) as e:
            logger.warning("AI evaluation failed for question %s: %s", question.id, e)
            if not self.fallback_to_rules:
                raise
            return replace(rules, evaluation_method=EVAL_FALLBACK)


# -----------------------
# Wiring
# -----------------------
@dataclass
class InterviewEngine:
    store: QuestionStore
    selector: QuestionSelector
    evaluator: AnswerEvaluator

    @classmethod
    def from_settings(
        cls,
        loader: QuestionLoader,
        cfg: Settings = settings,
        model: Any = None,
        rng: Optional[random.Random] = None,
    ) -> "InterviewEngine":
        if model is None:
            model = get_model_client(cfg)
        store = QuestionStore(loader, ttl_s=cfg.question_cache_ttl_s)
        return cls(
            store=store,
            selector=QuestionSelector(store, model=model, fallback_to_rules=cfg.fallback_to_rules, rng=rng),
            evaluator=AnswerEvaluator(model=model, fallback_to_rules=cfg.fallback_to_rules),
        )

    def next_question(self, context: SessionContext) -> Optional[SelectionResult]:
        return self.selector.select_next(context)

    def plan_session(self, context: SessionContext, count: int) -> List[SelectionResult]:
        return self.selector.select_for_session(context, count)

    def evaluate(self, answer: Optional[str], question: QuestionDocument, time_taken: Optional[float] = None) -> EvaluationResult:
        return self.evaluator.evaluate_answer(answer, question, time_taken)

    def finish_session(self, answers: Sequence[Mapping[str, Any]]) -> SessionFeedback:
        return aggregate_session(answers)
