"""
LangChain-backed text generation with an explicit timeout and a bounded retry.

Transient failures (timeouts, transport errors) are retried up to
GENERATION_MAX_ATTEMPTS; semantic failures (provider rejection, empty answer)
are not. Every failure leaves this module as a GenerationError.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from study_assistant.core.llm import get_llm
from study_assistant.core.settings import settings
from study_assistant.domain.exceptions import GenerationError
from study_assistant.domain.sourcing.request_builder import GenerationRequest

logger = structlog.get_logger(__name__)

_TRANSIENT_ERRORS = (asyncio.TimeoutError, httpx.TransportError, ConnectionError)


class TransientGenerationError(Exception):
    """Internal marker for failures worth another attempt."""


def _compact_error(err: BaseException, limit: int = 320) -> str:
    text = str(err or "").replace("\n", " ").strip() or type(err).__name__
    return text[:limit] + "..." if len(text) > limit else text


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text") or ""))
        return "".join(parts)
    return str(content or "")


def _source_policy(request: GenerationRequest) -> str:
    lines: list[str] = []
    if request.citations:
        lines.append("Ground the answer in these references: " + "; ".join(request.citations) + ".")
    if not request.allow_internet:
        lines.append("Do not search the web or rely on internet sources.")
    return "\n".join(lines)


def build_messages(request: GenerationRequest) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    system_text = "\n\n".join(part for part in (request.system_prompt, _source_policy(request)) if part)
    if system_text:
        messages.append(SystemMessage(content=system_text))
    if request.image_data:
        image_url = request.image_data
        if not image_url.startswith("data:"):
            image_url = f"data:image/jpeg;base64,{image_url}"
        messages.append(
            HumanMessage(
                content=[
                    {"type": "text", "text": request.prompt},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ]
            )
        )
    else:
        messages.append(HumanMessage(content=request.prompt))
    return messages


class LangChainTextGenerator:
    def __init__(
        self,
        llm: Optional[BaseChatModel] = None,
        capability: str = "CHAT",
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay_seconds: Optional[float] = None,
    ):
        self._llm = llm
        self._capability = capability
        self._timeout_seconds = float(timeout_seconds or settings.GENERATION_TIMEOUT_SECONDS)
        self._max_attempts = max(1, int(max_attempts or settings.GENERATION_MAX_ATTEMPTS))
        delay = settings.GENERATION_RETRY_BASE_DELAY_SECONDS
        self._retry_base_delay = float(delay if retry_base_delay_seconds is None else retry_base_delay_seconds)

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_llm(capability=self._capability, prefer_provider=settings.GENERATION_PROVIDER)
        return self._llm

    async def generate(self, request: GenerationRequest) -> str:
        try:
            llm = self.llm
        except ValueError as exc:
            raise GenerationError(str(exc), transient=False, attempts=0, cause=type(exc).__name__) from exc

        messages = build_messages(request)
        attempts = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._retry_base_delay, max=self._retry_base_delay * 8),
            retry=retry_if_exception_type(TransientGenerationError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    return await self._invoke_once(llm, messages, attempts)
        except TransientGenerationError as exc:
            logger.warning("generation_failed", capability=self._capability, attempts=attempts, error=str(exc))
            raise GenerationError(
                f"Text generation failed after {attempts} attempt(s): {exc}",
                transient=True,
                attempts=attempts,
                cause=type(exc.__cause__).__name__ if exc.__cause__ else None,
            ) from exc
        raise GenerationError("Text generation produced no result", attempts=attempts)

    async def _invoke_once(self, llm: BaseChatModel, messages: list[BaseMessage], attempt: int) -> str:
        try:
            response = await asyncio.wait_for(llm.ainvoke(messages), timeout=self._timeout_seconds)
        except _TRANSIENT_ERRORS as exc:
            if isinstance(exc, asyncio.TimeoutError):
                raise TransientGenerationError(f"timed out after {self._timeout_seconds:g}s") from exc
            raise TransientGenerationError(_compact_error(exc)) from exc
        except Exception as exc:
            logger.warning(
                "generation_rejected",
                capability=self._capability,
                attempt=attempt,
                error=_compact_error(exc),
            )
            raise GenerationError(
                f"Text generation was rejected: {_compact_error(exc)}",
                transient=False,
                attempts=attempt,
                cause=type(exc).__name__,
            ) from exc

        text = _content_to_text(getattr(response, "content", response)).strip()
        if not text:
            logger.warning("generation_empty_response", capability=self._capability, attempt=attempt)
            raise GenerationError("Text generation returned an empty answer", transient=False, attempts=attempt)
        return text

    def _log_retry(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        logger.warning(
            "generation_retry",
            capability=self._capability,
            attempt=retry_state.attempt_number,
            max_attempts=self._max_attempts,
            error=str(error) if error else None,
        )
