"""Report orchestration: one user action to a finished report.

A run moves through

    IDLE -> CONVERTING_IMAGE -> AWAITING_ANALYSIS -> AWAITING_VISUALIZATION -> READY

with ERRORED reachable from any in-progress state. Every transition and every
interim status (cache hit/miss, rate limiting, retries) is published as a
RunEvent to subscribed listeners; the orchestrator itself never renders.

The cache and rate limiter are injected and only used through their public
operations. Only one run may be active per orchestrator.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from infrareport.cache import ResultCache
from infrareport.config import RATE_LIMITS_DOC_URL
from infrareport.exceptions import (
    ConfigurationError,
    QuotaExceededError,
    RateLimitError,
    ReportError,
    RunInProgressError,
    ValidationError,
)
from infrareport.hashing import compute_content_hash
from infrareport.imaging import (
    PLACEHOLDER_IMAGE_URI,
    EncodedImage,
    ImageHandle,
    encode_for_upload,
)
from infrareport.llm.base import BaseVisionProvider
from infrareport.llm.parsing import parse_or_fallback
from infrareport.llm.prompts import build_analysis_prompt, build_visualization_prompt
from infrareport.ratelimit import RateLimiter
from infrareport.report.models import ReportData
from infrareport.retry import RetryConfig, RetryController, RetryNotice, is_retryable

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """States of a single report run."""

    IDLE = "idle"
    CONVERTING_IMAGE = "converting_image"
    AWAITING_ANALYSIS = "awaiting_analysis"
    AWAITING_VISUALIZATION = "awaiting_visualization"
    READY = "ready"
    ERRORED = "errored"


class EventKind(str, Enum):
    """What a RunEvent reports."""

    PROGRESS = "progress"
    CACHE = "cache"
    RATE_LIMIT = "rate_limit"
    RETRY = "retry"
    WARNING = "warning"
    ERROR = "error"
    READY = "ready"


PROGRESS_MESSAGES = {
    RunState.CONVERTING_IMAGE: "Converting image...",
    RunState.AWAITING_ANALYSIS: "Analyzing infrastructure with Gemini AI...",
    RunState.AWAITING_VISUALIZATION: "Generating completed infrastructure visualization...",
}


@dataclass(frozen=True)
class RunEvent:
    """A state transition or interim status published to listeners."""

    state: RunState
    kind: EventKind
    message: str = ""
    report: Optional[ReportData] = None


@dataclass(frozen=True)
class RunOutcome:
    """Terminal result of one run."""

    state: RunState
    report: Optional[ReportData] = None
    error_message: Optional[str] = None
    error: Optional[BaseException] = None
    cache_hit: bool = False
    used_fallback: bool = False
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.state == RunState.READY


RunListener = Callable[[RunEvent], None]


def describe_error(error: BaseException, attempts: int, max_retries: int) -> str:
    """Map an error to the plain-language message shown to the user.

    Args:
        error: The error that ended the run.
        attempts: Attempts made by the retry controller for the analysis call.
        max_retries: The configured attempt ceiling.

    Returns:
        The user-facing message.
    """
    if isinstance(error, (ValidationError, ConfigurationError)):
        return str(error)

    prefix = "Failed to generate report. "

    if isinstance(error, RateLimitError):
        wait = math.ceil(error.wait_seconds)
        return (
            f"{prefix}Rate limit reached. Please wait {wait} seconds before trying again.\n"
            f"Maximum retry attempts reached ({attempts}/{max_retries})."
        )

    if isinstance(error, QuotaExceededError) or is_retryable(error):
        if attempts >= max_retries:
            return (
                f"{prefix}\n\nMaximum retry attempts reached. API Quota Exceeded\n"
                "The application has reached its API usage limit. Please:\n"
                "1. Try again later\n"
                "2. Check your Google Cloud Console for quota status\n"
                "3. Consider upgrading your API quota if needed\n\n"
                f"For more information, visit: {RATE_LIMITS_DOC_URL}"
            )
        return (
            f"{prefix}API quota exceeded after {attempts} of {max_retries} attempts "
            f"({max_retries - attempts} remaining). Please try again shortly."
        )

    if isinstance(error, ReportError):
        return f"{prefix}{error}"

    return f"{prefix}An unexpected error occurred. Please try again."


class ReportOrchestrator:
    """Sequences conversion, cached analysis, visualization and assembly."""

    def __init__(
        self,
        provider: BaseVisionProvider,
        cache: ResultCache,
        rate_limiter: RateLimiter,
        retry_config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the orchestrator.

        Args:
            provider: Remote analysis / synthesis provider.
            cache: Result cache for analysis responses.
            rate_limiter: Sliding-window limiter shared by all analysis calls.
            retry_config: Retry policy for the analysis call.
            sleep: Coroutine used for backoff waits (injectable for tests).
        """
        self.provider = provider
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.retry = RetryController(
            rate_limiter, retry_config, sleep=sleep, on_retry=self._on_retry
        )
        self._listeners: list[RunListener] = []
        self._state = RunState.IDLE
        self._running = False
        self.report: Optional[ReportData] = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe(self, listener: RunListener) -> Callable[[], None]:
        """Register a listener for RunEvents.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def generate(self, image: Optional[ImageHandle], description: str) -> RunOutcome:
        """Run the full report pipeline once.

        Args:
            image: The uploaded image, or None if nothing was uploaded.
            description: The user's description of the infrastructure.

        Returns:
            The RunOutcome; errors are reported through it, not raised.

        Raises:
            RunInProgressError: If another run on this orchestrator is active.
        """
        if self._running:
            raise RunInProgressError("A report is already being generated. Please wait for it to finish.")

        self._running = True
        self.report = None
        self.retry.last_attempts = 0
        self.retry.last_dispatches = 0
        try:
            return await self._run(image, description)
        finally:
            self._running = False

    async def _run(self, image: Optional[ImageHandle], description: str) -> RunOutcome:
        try:
            self._validate(image, description)
        except ValidationError as e:
            return self._fail(e)

        if not self.provider.has_api_key():
            error = ConfigurationError(
                "API key required: add your Gemini API key as GEMINI_API_KEY "
                "(environment or .env file) or run 'infrareport config set-key'."
            )
            self._state = RunState.ERRORED
            self._emit(EventKind.WARNING, str(error))
            return RunOutcome(state=RunState.ERRORED, error_message=str(error), error=error)

        try:
            self._transition(RunState.CONVERTING_IMAGE)
            encoded = await asyncio.to_thread(encode_for_upload, image)

            self._transition(RunState.AWAITING_ANALYSIS)
            prompt = build_analysis_prompt(description)
            analysis, cache_hit = await self._analyze(image, prompt, encoded)

            payload, used_fallback = parse_or_fallback(analysis)

            self._transition(RunState.AWAITING_VISUALIZATION)
            repaired_image_url = await self._visualize(analysis)

            report = ReportData.assemble(payload, repaired_image_url)
        except Exception as e:
            if not isinstance(e, ReportError):
                logger.exception("Unexpected error while generating report")
            return self._fail(e)

        self.report = report
        self._state = RunState.READY
        self._emit(EventKind.READY, "", report=report)

        return RunOutcome(
            state=RunState.READY,
            report=report,
            cache_hit=cache_hit,
            used_fallback=used_fallback,
            attempts=0 if cache_hit else self.retry.last_attempts,
        )

    @staticmethod
    def _validate(image: Optional[ImageHandle], description: str) -> None:
        if image is None or not image.data:
            raise ValidationError("Please upload an image of the infrastructure.")
        if not description or not description.strip():
            raise ValidationError(
                "Please provide a description of the infrastructure and what needs to be completed."
            )

    async def _analyze(
        self, image: ImageHandle, prompt: str, encoded: EncodedImage
    ) -> tuple[str, bool]:
        """Return (analysis text, cache hit) for the image and prompt."""
        content_hash = await asyncio.to_thread(compute_content_hash, image.data)

        cached = self.cache.get(content_hash, prompt)
        if cached is not None:
            self._emit(EventKind.CACHE, "Using cached result")
            return cached, True

        self._emit(EventKind.CACHE, "Cache miss - calling API")
        analysis = await self.retry.execute(lambda: self.provider.analyze(prompt, encoded))
        self.cache.put(content_hash, prompt, analysis)
        return analysis, False

    async def _visualize(self, analysis: str) -> str:
        """Request the repaired image; any failure yields the placeholder."""
        try:
            return await self.provider.synthesize_image(build_visualization_prompt(analysis))
        except Exception as e:
            logger.warning("Visualization unavailable, using placeholder: %s", e)
            return PLACEHOLDER_IMAGE_URI

    def _on_retry(self, notice: RetryNotice) -> None:
        if isinstance(notice.error, RateLimitError):
            self._emit(EventKind.RATE_LIMIT, str(notice.error))
        self._emit(
            EventKind.RETRY,
            f"Retrying API request (Attempt {notice.attempt}/{notice.max_attempts}). "
            f"Waiting {notice.delay:g} seconds before next attempt...",
        )

    def _transition(self, state: RunState) -> None:
        self._state = state
        self._emit(EventKind.PROGRESS, PROGRESS_MESSAGES.get(state, ""))

    def _fail(self, error: BaseException) -> RunOutcome:
        attempts = self.retry.last_attempts
        message = describe_error(error, attempts, self.retry.config.max_retries)
        self._state = RunState.ERRORED
        self._emit(EventKind.ERROR, message)
        return RunOutcome(
            state=RunState.ERRORED,
            error_message=message,
            error=error,
            attempts=attempts,
        )

    def _emit(self, kind: EventKind, message: str, report: Optional[ReportData] = None) -> None:
        event = RunEvent(state=self._state, kind=kind, message=message, report=report)
        for listener in list(self._listeners):
            listener(event)
