from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, Union, Tuple, Any, Annotated
from datetime import datetime

from core.text_statistics import TextStatisticsProcessor

DetectionStatus = Literal["completed", "processing", "failed"]
ReportStatus = Literal["checking", "completed", "failed"]
DetectionSource = Literal["remote", "heuristic"]

DEFAULT_REMOTE_ANALYSIS = "AI detection analysis completed"


class AIDetectionResult(BaseModel):
    """Outcome of a single detection call. Never mutated after construction."""
    model_config = ConfigDict(frozen=True)

    ai_probability: float = Field(..., ge=0.0, le=1.0)
    human_probability: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    analysis: str
    status: DetectionStatus = "completed"
    processing_time_ms: Optional[float] = Field(None, ge=0.0)
    source: DetectionSource


class AIDetectionReport(BaseModel):
    """Detection outcome attached to an essay submission."""
    id: str
    essay_id: str
    ai_probability: float = Field(..., ge=0.0, le=1.0)
    human_probability: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    analysis: str
    status: ReportStatus = "checking"
    source: Optional[DetectionSource] = None
    checked_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "id": "ai-detection-3f2b9c0e8d4a4e1f9b6c2d7a5e1f0c3b",
            "essay_id": "essay-00000001",
            "ai_probability": 0.82,
            "human_probability": 0.18,
            "confidence": 0.64,
            "analysis": "AI detection analysis completed",
            "status": "completed",
            "source": "remote",
            "checked_at": "2024-03-01T10:30:00Z",
            "created_at": "2024-03-01T10:30:00Z",
            "updated_at": "2024-03-01T10:30:00Z"
        }
    })


class AIDetectionRequest(BaseModel):
    text: str


# (ai_probability, human_probability, confidence or None, analysis or None)
ExtractedScores = Tuple[float, float, Optional[float], Optional[str]]


def _first_present(*values: Optional[float], default: float) -> float:
    """First value that was actually supplied; an explicit 0 counts."""
    for value in values:
        if value is not None:
            return value
    return default


class StructuredPredictionOutput(BaseModel):
    """Object-shaped `output` from the prediction service."""
    kind: Literal["structured"] = "structured"
    ai_probability: Optional[float] = None
    ai_score: Optional[float] = None
    human_probability: Optional[float] = None
    human_score: Optional[float] = None
    confidence: Optional[float] = None
    analysis: Optional[str] = None
    explanation: Optional[str] = None

    def extract(self) -> ExtractedScores:
        ai = _first_present(self.ai_probability, self.ai_score, default=0.0)
        human = _first_present(self.human_probability, self.human_score, default=1 - ai)
        return ai, human, self.confidence or None, self.analysis or self.explanation or DEFAULT_REMOTE_ANALYSIS


class TextPredictionOutput(BaseModel):
    """Free-text `output`; probabilities are scraped from patterns like `AI: 85%`."""
    kind: Literal["text"] = "text"
    text: str

    def extract(self) -> ExtractedScores:
        ai = TextStatisticsProcessor.extract_labelled_probability(self.text, "ai")
        human = TextStatisticsProcessor.extract_labelled_probability(self.text, "human")
        return ai, human, None, self.text


PredictionOutput = Annotated[
    Union[StructuredPredictionOutput, TextPredictionOutput],
    Field(discriminator="kind"),
]


def resolve_prediction_output(raw_output: Any) -> Optional[PredictionOutput]:
    """Resolve the untyped `output` field once, at the response boundary.

    Returns None when the value has neither supported shape.
    """
    if isinstance(raw_output, dict):
        return StructuredPredictionOutput.model_validate({**raw_output, "kind": "structured"})
    if isinstance(raw_output, str):
        return TextPredictionOutput(text=raw_output)
    return None
