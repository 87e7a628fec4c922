from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from pubqa.generation.prompts.builder import PromptBuilder
from pubqa.generation.prompts.types.language import Language
from pubqa.generation.providers.gemini_provider import (
    GeminiProvider,
    MalformedResponseError,
    ProviderHTTPError,
    ProviderOverloadedError,
    ProviderQuotaError,
    ProviderTransportError,
)
from pubqa.utils.errors import PubQAError
from pubqa.utils.settings import settings
from pubqa.utils.types import EvidenceItem

logger = logging.getLogger(__name__)


class GenerationError(PubQAError):
    """Non-retryable, non-quota failure from the generation backend."""

    code = "GENERATION_ERROR"


class GenerationState(str, Enum):
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    DEGRADED = "degraded"
    SUCCEEDED = "succeeded"
    FATAL_FAILED = "fatal_failed"


class DegradedReason(str, Enum):
    """Fallback template key used when generation gives up."""
    OVERLOADED = "overloaded"
    QUOTA_EXCEEDED = "quota_exceeded"
    SERVICE_ERROR = "service_error"


@dataclass
class GenerationOutcome:
    """Terminal state of one generation run."""
    state: GenerationState
    answer: str
    attempts: int
    degraded_reason: Optional[DegradedReason] = None
    transitions: List[GenerationState] = field(default_factory=list)


class AnswerGenerator:
    """
    Grounded answer generation with bounded retries.

    Each attempt either succeeds, backs off (overload), degrades to a fixed
    template naming the evidence count, or fails the request.

    Args:
        llm: Generation provider
        prompt_builder: Prompt and fallback text source
        max_attempts: Upper bound on generation calls per request
        backoff_base: Overload sleep is ``backoff_base ** attempt`` seconds
        sleep: Sleep function, injectable for tests
        temperature: Sampling temperature
        max_tokens: Output token cap
    """

    def __init__(
            self,
            llm: Optional[GeminiProvider] = None,
            prompt_builder: Optional[PromptBuilder] = None,
            max_attempts: Optional[int] = None,
            backoff_base: Optional[float] = None,
            sleep: Callable[[float], None] = time.sleep,
            temperature: Optional[float] = None,
            max_tokens: Optional[int] = None,
    ):
        self.llm = llm or GeminiProvider()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.max_attempts = max_attempts or settings.generation.max_attempts
        self.backoff_base = backoff_base or settings.generation.backoff_base
        self.sleep = sleep
        self.temperature = temperature if temperature is not None else settings.generation.temperature
        self.max_tokens = max_tokens or settings.generation.max_tokens

    def _degrade(
            self,
            reason: DegradedReason,
            question: str,
            evidence: Sequence[EvidenceItem],
            language: Language,
            attempts: int,
            transitions: List[GenerationState],
    ) -> GenerationOutcome:
        logger.warning(f"⚠️ Generation degraded ({reason.value}) after {attempts} attempt(s)")
        transitions.append(GenerationState.DEGRADED)
        answer = self.prompt_builder.fallback(
            reason.value,
            language,
            count=len(evidence),
            question=question,
        )
        return GenerationOutcome(
            state=GenerationState.DEGRADED,
            answer=answer,
            attempts=attempts,
            degraded_reason=reason,
            transitions=transitions,
        )

    def run(
            self,
            question: str,
            evidence: Sequence[EvidenceItem],
            language: Language,
    ) -> GenerationOutcome:
        """
        Drive the retry state machine to a terminal state.

        Raises:
            GenerationError: backend answered with a status that is neither
                overload nor quota
        """
        prompt = self.prompt_builder.build_answer_prompt(question, evidence, language)
        transitions: List[GenerationState] = []

        for attempt in range(1, self.max_attempts + 1):
            transitions.append(GenerationState.ATTEMPTING)
            logger.info(f"Generation attempt {attempt}/{self.max_attempts}")

            try:
                answer = self.llm.generate(
                    prompt=prompt,
                    temperature=self.temperature,
                    max_new_tokens=self.max_tokens,
                )
            except ProviderOverloadedError:
                if attempt == self.max_attempts:
                    return self._degrade(
                        DegradedReason.OVERLOADED, question, evidence, language, attempt, transitions
                    )
                delay = self.backoff_base ** attempt
                logger.info(f"Model overloaded, retrying in {delay:g}s...")
                transitions.append(GenerationState.BACKOFF)
                self.sleep(delay)
                continue
            except ProviderQuotaError:
                return self._degrade(
                    DegradedReason.QUOTA_EXCEEDED, question, evidence, language, attempt, transitions
                )
            except ProviderHTTPError as e:
                transitions.append(GenerationState.FATAL_FAILED)
                logger.error(f"❌ Generation failed with status {e.status_code}")
                raise GenerationError(str(e), details=e.body[:500] or None) from e
            except (MalformedResponseError, ProviderTransportError) as e:
                logger.error(f"❌ Attempt {attempt} failed: {e}")
                if attempt == self.max_attempts:
                    return self._degrade(
                        DegradedReason.SERVICE_ERROR, question, evidence, language, attempt, transitions
                    )
                continue

            transitions.append(GenerationState.SUCCEEDED)
            logger.info(f"✅ Answer generated on attempt {attempt}")
            return GenerationOutcome(
                state=GenerationState.SUCCEEDED,
                answer=answer,
                attempts=attempt,
                transitions=transitions,
            )

        # max_attempts < 1
        return self._degrade(DegradedReason.SERVICE_ERROR, question, evidence, language, 0, transitions)

    def generate(
            self,
            question: str,
            evidence: Sequence[EvidenceItem],
            language: Language,
    ) -> str:
        return self.run(question, evidence, language).answer
