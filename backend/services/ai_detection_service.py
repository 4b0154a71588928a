# services/ai_detection_service.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from core.config import Settings
from models.ai_detection import AIDetectionResult, AIDetectionReport
from services.external_ai_detection_service import (
    AIDetectionError,
    MIN_TEXT_LENGTH,
    ProgressCallback,
    ReplicateAIDetector,
    report_progress,
)
from services.heuristic_detection_service import HeuristicAIDetector

logger = logging.getLogger(__name__)

REPORT_STATUS_BY_RESULT_STATUS = {"completed": "completed", "processing": "checking", "failed": "failed"}


class AIContentDetector:
    """Detects AI-generated text; always returns a result.

    Tries the remote detector when one is configured and falls back to the
    local heuristic for any failure on that path.
    """

    def __init__(self, remote: Optional[ReplicateAIDetector] = None, heuristic: Optional[HeuristicAIDetector] = None):
        self.remote = remote
        self.heuristic = heuristic if heuristic else HeuristicAIDetector()

    @classmethod
    def from_settings(cls, settings: Settings, heuristic: Optional[HeuristicAIDetector] = None) -> "AIContentDetector":
        return cls(remote=ReplicateAIDetector.from_settings(settings), heuristic=heuristic)

    @property
    def mode(self) -> str:
        return "remote" if self.remote is not None and self.remote.is_configured else "heuristic"

    async def detect(self, text: str, on_progress: Optional[ProgressCallback] = None) -> AIDetectionResult:
        logger.info(f"Starting AI content detection ({len(text or '')} characters, mode={self.mode})")

        if self.remote is not None:
            try:
                return await self.remote.detect_ai_content(text, on_progress)
            except AIDetectionError as e:
                logger.warning(f"{type(e).__name__}: {e}. Falling back to heuristic AI detection.")
            except Exception as e:
                logger.error(f"Unexpected error in remote AI detection: {e}. Falling back to heuristic.", exc_info=True)
        else:
            logger.info("No remote AI detector configured, using heuristic detection")

        return self.heuristic.detect(text or "")


def build_ai_detection_report(essay_id: str, result: AIDetectionResult,
                              now: Optional[datetime] = None) -> AIDetectionReport:
    timestamp = now or datetime.now(timezone.utc)
    return AIDetectionReport(
        id=f"ai-detection-{uuid.uuid4().hex}",
        essay_id=essay_id,
        ai_probability=result.ai_probability,
        human_probability=result.human_probability,
        confidence=result.confidence,
        analysis=result.analysis,
        status=REPORT_STATUS_BY_RESULT_STATUS[result.status],
        source=result.source,
        checked_at=timestamp,
        created_at=timestamp,
        updated_at=timestamp,
    )


class AIDetectionService:
    def __init__(self, detector: AIContentDetector):
        self.detector = detector

    async def check_essay(self, essay_id: str, content: str,
                          on_progress: Optional[ProgressCallback] = None) -> AIDetectionReport:
        """
        Run AI detection on an essay's content and build the report to attach to it.

        Raises:
            ValueError: If the content is too short to be worth checking.
        """
        if not content or len(content.strip()) < MIN_TEXT_LENGTH:
            raise ValueError(f"Essay content is too short for AI detection (minimum {MIN_TEXT_LENGTH} characters)")

        report_progress(on_progress, "Analyzing content for AI patterns...")
        result = await self.detector.detect(content, on_progress)

        report = build_ai_detection_report(essay_id, result)
        logger.info(
            f"AI detection report {report.id} for essay '{essay_id}': "
            f"ai={round(result.ai_probability * 100)}%, human={round(result.human_probability * 100)}%, "
            f"confidence={round(result.confidence * 100)}%, source={result.source}")
        return report
