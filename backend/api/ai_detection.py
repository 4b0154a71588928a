from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Dict, Any
import logging

from models.ai_detection import AIDetectionRequest, AIDetectionResult, AIDetectionReport
from services.ai_detection_service import AIContentDetector, AIDetectionService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_ai_content_detector(request: Request) -> AIContentDetector:
    # Built once per app in create_app from the app's own Settings
    return request.app.state.ai_content_detector


def get_ai_detection_service(detector: AIContentDetector = Depends(get_ai_content_detector)) -> AIDetectionService:
    return AIDetectionService(detector)


@router.post("/detect", response_model=AIDetectionResult)
async def detect_ai_content(
    request: AIDetectionRequest,
    detector: AIContentDetector = Depends(get_ai_content_detector)
):
    """
    Estimate how likely a piece of text is to be AI-generated.
    """
    return await detector.detect(request.text)


@router.post("/essays/{essay_id}/check", response_model=AIDetectionReport)
async def check_essay_ai_content(
    essay_id: str,
    request: AIDetectionRequest,
    ai_detection_service: AIDetectionService = Depends(get_ai_detection_service)
):
    """
    Run AI content detection on an essay and return the report to attach to the submission.
    """
    try:
        return await ai_detection_service.check_essay(essay_id, request.text)
    except ValueError as ve:
        logger.error(f"Validation error in AI detection for essay '{essay_id}': {str(ve)}")
        raise HTTPException(status_code=422, detail=str(ve))
    except Exception as e:
        logger.error(f"Error in AI detection endpoint for essay '{essay_id}': {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error checking essay for AI content: {str(e)}")


@router.get("/status")
async def get_ai_detection_status(
    detector: AIContentDetector = Depends(get_ai_content_detector)
) -> Dict[str, Any]:
    return {"configured": detector.mode == "remote", "mode": detector.mode}
