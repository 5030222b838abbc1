from __future__ import annotations

from typing import Any, Dict, List

import pytest

from adaptive_interview.errors import ModelUnavailable
from adaptive_interview.store import QuestionStore


QUESTION_BANK: List[Dict[str, Any]] = [
    {
        "id": 1, "category": "technical", "role": "frontend", "topic": "javascript",
        "difficulty": "easy", "question_text": "What is variable hoisting in JavaScript?",
        "expected_keywords": "scope, hoisting, block", "ideal_answer": "Declarations move to the top of their scope.",
        "time_limit": 120,
    },
    {
        "id": 2, "category": "technical", "role": "frontend", "topic": "css",
        "difficulty": "medium", "question_text": "Explain the CSS box model.",
        "expected_keywords": "margin,border,padding,content", "ideal_answer": "", "time_limit": 120,
    },
    {
        "id": 3, "category": "technical", "role": "frontend", "topic": "react",
        "difficulty": "hard", "question_text": "How does React reconciliation work?",
        "expected_keywords": "virtual dom,diff,keys", "ideal_answer": "", "time_limit": 180,
    },
    {
        "id": 4, "category": "behavioral", "role": "any", "topic": "teamwork",
        "difficulty": "easy", "question_text": "Tell me about a conflict on your team.",
        "expected_keywords": "situation,action,result", "ideal_answer": "", "time_limit": 180,
    },
    {
        "id": 5, "category": "technical", "role": "backend", "topic": "databases",
        "difficulty": "medium", "question_text": "When would you add an index?",
        "expected_keywords": "read,write,query plan", "ideal_answer": "", "time_limit": 120,
    },
    {
        "id": 6, "category": "technical", "role": "frontend", "topic": "javascript",
        "difficulty": "medium", "question_text": "What is a closure?",
        "expected_keywords": "function,scope,lexical", "ideal_answer": "", "time_limit": 120,
    },
]


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeModel:
    """Stands in for ModelClient: replays canned replies or raises."""

    def __init__(self, replies=None, error: Exception = None) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.prompts: List[str] = []
        self.calls: List[Dict[str, Any]] = []

    def complete(self, prompt: str, temperature: float = 0.3, max_tokens: int = 20) -> str:
        self.prompts.append(prompt)
        self.calls.append({"temperature": temperature, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture
def question_bank() -> List[Dict[str, Any]]:
    return [dict(r) for r in QUESTION_BANK]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(question_bank, clock) -> QuestionStore:
    return QuestionStore(lambda: question_bank, clock=clock)


@pytest.fixture
def timeout_model() -> FakeModel:
    return FakeModel(error=ModelUnavailable("APITimeoutError: Request timed out."))
