# adaptive_interview/models.py
from __future__ import annotations

from dataclasses import dataclass, asdict, field, replace
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

QuestionId = Union[int, str]

DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard")

# Provenance tags
EVAL_RULES = "rules"
EVAL_AI_BLENDED = "ai-blended"
EVAL_FALLBACK = "fallback"

SELECT_AI = "ai"
SELECT_FALLBACK = "fallback"
SELECT_RANDOM = "random"


def split_keywords(raw: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    # Question banks store keywords as "a, b, c"
    if raw is None:
        return ()
    parts = raw.split(",") if isinstance(raw, str) else raw
    return tuple(k.strip() for k in parts if k and k.strip())


@dataclass(frozen=True)
class QuestionMetadata:
    category: str = ""
    role: str = "any"
    topic: str = ""
    difficulty: str = "medium"
    expected_keywords: Tuple[str, ...] = ()
    ideal_answer: str = ""
    time_limit: int = 0


@dataclass(frozen=True)
class QuestionDocument:
    """One question bank entry: prompt text plus metadata."""

    id: QuestionId
    content: str
    metadata: QuestionMetadata = field(default_factory=QuestionMetadata)

    @property
    def topic(self) -> str:
        return self.metadata.topic

    @property
    def difficulty(self) -> str:
        return self.metadata.difficulty

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "QuestionDocument":
        """
        Build a document from a question bank row.
        Accepts `question_text` or `content` for the prompt, and keywords as
        either a comma-separated string or a list.
        """
        content = record.get("question_text")
        if content is None:
            content = record.get("content", "")
        return cls(
            id=record["id"],
            content=str(content),
            metadata=QuestionMetadata(
                category=record.get("category") or "",
                role=record.get("role") or "any",
                topic=record.get("topic") or "",
                difficulty=(record.get("difficulty") or "medium").lower(),
                expected_keywords=split_keywords(record.get("expected_keywords")),
                ideal_answer=record.get("ideal_answer") or "",
                time_limit=int(record.get("time_limit") or 0),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionContext:
    """Snapshot of an in-progress interview, supplied by the session store."""

    role: str
    difficulty: Optional[str] = None
    answered_question_ids: FrozenSet[QuestionId] = frozenset()
    total_questions: int = 0
    recent_scores: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        # Callers pass lists; keep the snapshot immutable
        object.__setattr__(self, "answered_question_ids", frozenset(self.answered_question_ids))
        object.__setattr__(self, "recent_scores", tuple(self.recent_scores))
        if self.difficulty:
            # bank labels are stored lowercased
            object.__setattr__(self, "difficulty", self.difficulty.strip().lower())

    def with_answered(self, question_id: QuestionId) -> "SessionContext":
        return replace(self, answered_question_ids=self.answered_question_ids | {question_id})


@dataclass(frozen=True)
class EvaluationResult:
    score: int
    feedback: str
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    matched_keywords: Tuple[str, ...] = ()
    missed_keywords: Tuple[str, ...] = ()
    keyword_score: int = 0
    word_count: int = 0
    evaluation_method: str = EVAL_RULES

    def to_dict(self) -> Dict[str, Any]:
        base = asdict(self)
        for key in ("strengths", "weaknesses", "suggestions", "matched_keywords", "missed_keywords"):
            base[key] = list(base[key])
        return base


@dataclass(frozen=True)
class SelectionResult:
    question: QuestionDocument
    reasoning: str
    selection_method: str

    @property
    def suggested_difficulty(self) -> str:
        return self.question.difficulty

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question.to_dict(),
            "reasoning": self.reasoning,
            "selection_method": self.selection_method,
            "suggested_difficulty": self.suggested_difficulty,
        }


@dataclass(frozen=True)
class SessionFeedback:
    overall_score: int = 0
    topic_scores: Dict[str, int] = field(default_factory=dict)
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    readiness_score: int = 0
    readiness_level: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
