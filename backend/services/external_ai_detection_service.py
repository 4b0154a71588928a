# services/external_ai_detection_service.py
import httpx
import logging
import time
from typing import Optional, Dict, Any, Callable

from pydantic import ValidationError

from core.config import (
    Settings,
    DEFAULT_REPLICATE_API_URL,
    DEFAULT_AI_DETECTOR_VERSION,
    DEFAULT_REPLICATE_TIMEOUT_SECONDS,
    is_replicate_configured,
)
from models.ai_detection import AIDetectionResult, PredictionOutput, resolve_prediction_output

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50
MAX_TEXT_LENGTH = 50000
DEFAULT_AI_PROBABILITY = 0.30
DEFAULT_HUMAN_PROBABILITY = 0.70
SUM_TOLERANCE = 0.1

ProgressCallback = Callable[[str], None]


class AIDetectionError(Exception):
    """Base class for conditions that stop the remote detection path."""


class MisconfiguredCredentialError(AIDetectionError):
    pass


class TextTooShortError(AIDetectionError):
    pass


class TextTooLongError(AIDetectionError):
    pass


class InvalidCredentialError(AIDetectionError):
    pass


class RateLimitedError(AIDetectionError):
    pass


class UpstreamError(AIDetectionError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(AIDetectionError):
    pass


def report_progress(on_progress: Optional[ProgressCallback], message: str) -> None:
    """Best-effort progress notification; callback failures never reach the caller."""
    if on_progress is None:
        return
    try:
        on_progress(message)
    except Exception as e:
        logger.warning(f"Progress callback raised and was ignored: {e}")


def normalize_prediction(output: PredictionOutput, processing_time_ms: Optional[float] = None) -> AIDetectionResult:
    """
    Turn a resolved prediction output into a detection result.

    Args:
        output: Structured or free-text output, already resolved at the response boundary.
        processing_time_ms: Measured duration of the remote call.

    Returns:
        AIDetectionResult with probabilities summing to one, rounded to 2 decimals.
    """
    ai_probability, human_probability, confidence, analysis = output.extract()

    total = ai_probability + human_probability
    if total == 0:
        ai_probability, human_probability = DEFAULT_AI_PROBABILITY, DEFAULT_HUMAN_PROBABILITY
    elif abs(total - 1) > SUM_TOLERANCE:
        logger.info(f"Rescaling upstream probabilities (ai={ai_probability}, human={human_probability})")
        ai_probability, human_probability = ai_probability / total, human_probability / total
    elif total != 1:
        # Within tolerance; still rescale so the pair sums to exactly one
        ai_probability, human_probability = ai_probability / total, human_probability / total

    ai_probability = max(0.0, min(1.0, ai_probability))
    if not confidence:
        confidence = abs(ai_probability - 0.5) * 2
    confidence = max(0.0, min(1.0, confidence))

    ai_rounded = round(ai_probability, 2)
    if not analysis:
        analysis = f"AI detection completed. {round(ai_probability * 100)}% probability of AI-generated content."

    return AIDetectionResult(
        ai_probability=ai_rounded,
        human_probability=round(1 - ai_rounded, 2),
        confidence=round(confidence, 2),
        analysis=analysis,
        status="completed",
        processing_time_ms=processing_time_ms,
        source="remote",
    )


class ReplicateAIDetector:
    """Client for the Replicate-hosted AI text detector.

    Raises an AIDetectionError subclass for every condition that prevents a
    model result; callers decide how to degrade.
    """

    def __init__(
            self,
            api_token: Optional[str],
            api_url: str = DEFAULT_REPLICATE_API_URL,
            model_version: str = DEFAULT_AI_DETECTOR_VERSION,
            timeout: float = DEFAULT_REPLICATE_TIMEOUT_SECONDS,
            http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_token = api_token
        self.api_url = api_url
        self.model_version = model_version
        self.timeout = timeout
        self.http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "ReplicateAIDetector":
        return cls(
            api_token=settings.replicate_api_token,
            api_url=settings.replicate_api_url,
            model_version=settings.ai_detector_version,
            timeout=settings.replicate_timeout_seconds,
            http_client=http_client,
        )

    @property
    def is_configured(self) -> bool:
        return is_replicate_configured(self.api_token)

    def _validate_text(self, text: str) -> None:
        if not text or len(text.strip()) < MIN_TEXT_LENGTH:
            raise TextTooShortError(
                f"Text content is too short for AI detection (minimum {MIN_TEXT_LENGTH} characters)")
        if len(text) > MAX_TEXT_LENGTH:
            raise TextTooLongError(
                f"Text content is too long for AI detection (maximum {MAX_TEXT_LENGTH:,} characters)")

    def _build_request(self, text: str) -> Dict[str, Any]:
        return {
            "headers": {
                "Authorization": f"Bearer {self.api_token.strip()}",
                "Content-Type": "application/json",
                "Prefer": "wait",
            },
            "json": {"version": self.model_version, "input": {"text": text}},
        }

    async def _post(self, text: str) -> httpx.Response:
        request_kwargs = self._build_request(text)
        if self.http_client is not None:
            return await self.http_client.post(self.api_url, **request_kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(self.api_url, **request_kwargs)

    async def detect_ai_content(self, text: str, on_progress: Optional[ProgressCallback] = None) -> AIDetectionResult:
        if not self.is_configured:
            raise MisconfiguredCredentialError("Replicate API token not configured")
        self._validate_text(text)

        logger.info(f"Sending {len(text)} characters to Replicate AI detector: {self.api_url}")
        report_progress(on_progress, "Analyzing text with AI detector...")

        start_time = time.monotonic()
        try:
            response = await self._post(text)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Replicate API error ({status_code}): {e.response.text[:500]}")
            if status_code == 401:
                raise InvalidCredentialError(
                    "Invalid Replicate API token. Please check your API token configuration.") from e
            if status_code == 429:
                raise RateLimitedError("Replicate API rate limit exceeded. Please try again later.") from e
            raise UpstreamError(
                f"Replicate API error: {status_code} {e.response.reason_phrase}", status_code=status_code) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"Request to Replicate AI detector failed: {e}") from e

        processing_time_ms = (time.monotonic() - start_time) * 1000
        output = self._parse_response(response)
        result = normalize_prediction(output, processing_time_ms)

        logger.info(
            f"Replicate AI detection completed: ai={result.ai_probability}, human={result.human_probability}, "
            f"confidence={result.confidence}, processing_time={processing_time_ms:.0f}ms")
        return result

    @staticmethod
    def _parse_response(response: httpx.Response) -> PredictionOutput:
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Replicate response is not JSON: {response.text[:200]}") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(f"Unexpected Replicate response type: {type(payload).__name__}")
        if payload.get("error"):
            raise UpstreamError(f"Replicate API error: {payload['error']}", status_code=response.status_code)

        try:
            output = resolve_prediction_output(payload.get("output"))
        except ValidationError as e:
            raise MalformedResponseError(f"Replicate output has unexpected field types: {e}") from e
        if output is None:
            raise MalformedResponseError(
                f"Replicate response has no usable output (status={payload.get('status')!r})")
        return output
