import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import ai_detection
from core.config import Settings
from services.ai_detection_service import AIContentDetector

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Essay AI Detection API")
    app.state.settings = settings
    app.state.ai_content_detector = AIContentDetector.from_settings(settings)
    logger.info(f"AI content detector initialized in {app.state.ai_content_detector.mode} mode")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(ai_detection.router, prefix="/api/ai-detection", tags=["ai-detection"])

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()
