from __future__ import annotations

from abc import ABC, abstractmethod

from pubqa.utils.types import AnswerResult


class BasePipeline(ABC):
    """Abstract base class for question-answering pipelines."""

    @abstractmethod
    def answer(self, question: str) -> AnswerResult:
        """Answer a single question from saved articles."""
        pass
