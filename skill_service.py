# skill_service.py
"""
Webhook server for the news search chatbot skill.

POST /api/searchNews receives the chat platform's skill payload, runs the
news search pipeline and answers with a simpleText reply envelope.
"""

import json
import logging
import time
from typing import Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import Settings, load_settings
from exceptions import MalformedRequest
from search_pipeline import NewsSearchPipeline, build_pipeline
from skill_responses import BAD_REQUEST_MESSAGE, error_reply, format_reply

logger = logging.getLogger(__name__)


class UserRequest(BaseModel):
    utterance: str


class SkillRequest(BaseModel):
    userRequest: UserRequest


router = APIRouter(prefix="/api")


@router.post("/searchNews")
def search_news(payload: SkillRequest, request: Request):
    logger.info(f"Received request: {json.dumps(payload.model_dump(), ensure_ascii=False)}")
    utterance = payload.userRequest.utterance
    logger.info(f"User utterance: {utterance}")

    pipeline: NewsSearchPipeline = request.app.state.pipeline
    try:
        result = pipeline.run(utterance)
        reply = format_reply(result.matches)
    except MalformedRequest:
        raise
    except Exception as e:
        logger.exception(f"Error processing request: {e}")
        return JSONResponse(status_code=500, content=error_reply())

    logger.info(f"Stored {result.stored_count} of {result.fetched_count} fetched articles "
                f"for keywords {result.keywords!r}")
    return JSONResponse(status_code=200, content=reply)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def create_app(
    pipeline: Optional[NewsSearchPipeline] = None,
    settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the FastAPI app.

    The pipeline is built from settings unless one is injected.
    """
    if pipeline is None:
        settings = settings or load_settings()
        pipeline = build_pipeline(settings)

    app = FastAPI(title="News Search Skill")
    app.state.pipeline = pipeline
    app.include_router(router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.3f} ms")
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(f"Malformed request: {exc.errors()}")
        return JSONResponse(status_code=400, content=error_reply(BAD_REQUEST_MESSAGE))

    @app.exception_handler(MalformedRequest)
    async def handle_malformed_request(request: Request, exc: MalformedRequest):
        logger.warning(f"Malformed request: {exc}")
        return JSONResponse(status_code=400, content=error_reply(BAD_REQUEST_MESSAGE))

    return app


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    app = create_app(settings=settings)
    logger.info(f"News search skill server listening on port {settings.port}!")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
