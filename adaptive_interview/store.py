# adaptive_interview/store.py
from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple, Union

from adaptive_interview.models import QuestionDocument, QuestionId

logger = logging.getLogger(__name__)

QuestionLoader = Callable[[], Iterable[Mapping[str, Any]]]

DEFAULT_TTL_S = 5 * 60


class _Snapshot(NamedTuple):
    documents: Tuple[QuestionDocument, ...]
    built_at: float


def json_question_loader(path: Union[str, Path]) -> QuestionLoader:
    """Loader that re-reads a JSON array of question records on every rebuild."""
    path = Path(path)

    def _load() -> List[Dict[str, Any]]:
        with path.open("r", encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"{path}: expected a JSON array of question records")
        return records

    return _load


class QuestionStore:
    """
    Time-boxed in-memory cache over the question bank.

    The cache is one immutable snapshot that is swapped in whole, so readers
    never see a half-built list. Rebuilds are serialized by a lock.
    """

    def __init__(
        self,
        loader: QuestionLoader,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_s = ttl_s
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[_Snapshot] = None

    def _is_fresh(self, snap: Optional[_Snapshot]) -> bool:
        return snap is not None and (self._clock() - snap.built_at) < self._ttl_s

    def _documents(self) -> Tuple[QuestionDocument, ...]:
        snap = self._snapshot
        if self._is_fresh(snap):
            return snap.documents
        with self._lock:
            # Another caller may have rebuilt while we waited
            snap = self._snapshot
            if self._is_fresh(snap):
                return snap.documents
            return self._rebuild_locked()

    def _rebuild_locked(self) -> Tuple[QuestionDocument, ...]:
        docs = tuple(QuestionDocument.from_record(r) for r in self._loader())
        self._snapshot = _Snapshot(documents=docs, built_at=self._clock())
        logger.debug("question cache rebuilt with %d documents", len(docs))
        return docs

    def rebuild(self) -> List[QuestionDocument]:
        with self._lock:
            return list(self._rebuild_locked())

    def clear_cache(self) -> None:
        with self._lock:
            self._snapshot = None

    def get_all(self) -> List[QuestionDocument]:
        return list(self._documents())

    def get_filtered(
        self,
        role: Optional[str] = None,
        difficulty: Optional[str] = None,
        category: Optional[str] = None,
        exclude_ids: Iterable[QuestionId] = (),
    ) -> List[QuestionDocument]:
        excluded = set(exclude_ids)
        if difficulty:
            difficulty = difficulty.strip().lower()
        out = []
        for q in self._documents():
            if q.id in excluded:
                continue
            # role "any" applies to every role
            if role and q.metadata.role != role and q.metadata.role != "any":
                continue
            if difficulty and q.metadata.difficulty != difficulty:
                continue
            if category and q.metadata.category != category:
                continue
            out.append(q)
        return out

    def get_by_id(self, question_id: QuestionId) -> Optional[QuestionDocument]:
        for q in self._documents():
            if q.id == question_id:
                return q
        return None

    def topics_covered(self, answered_ids: Iterable[QuestionId]) -> Set[str]:
        answered = set(answered_ids)
        return {q.topic for q in self._documents() if q.id in answered}

    def questions_by_topic(self, role: Optional[str] = None) -> Dict[str, List[QuestionDocument]]:
        grouped: Dict[str, List[QuestionDocument]] = {}
        for q in self.get_filtered(role=role):
            grouped.setdefault(q.topic, []).append(q)
        return grouped
