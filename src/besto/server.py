"""
HTTP endpoints for Besto.

POST /classify-intent   free text -> intent + entities
POST /text-to-speech    notes -> spoken summary text

Both answer 500 with a usable fallback body when anything fails.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from besto import __version__
from besto.classifier import ERROR_BODY, FALLBACK_TITLE, Classifier
from besto.config import load_config
from besto.llm import ChatClient
from besto.models import ClassifyRequest, SummarizeRequest, SummaryResponse
from besto.summarizer import APOLOGY, Summarizer

logger = logging.getLogger(__name__)

CORS_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def health_check() -> dict[str, str]:
    return {"status": "ok"}


def create_app(
    config: dict[str, Any] | None = None,
    client: ChatClient | None = None,
) -> FastAPI:
    """Build the API. A shared ChatClient can be injected for tests."""
    config = config or load_config()
    client = client or ChatClient(config)
    classifier = Classifier(client)
    summarizer = Summarizer(client)

    app = FastAPI(title="Besto API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_HEADERS,
    )

    @app.post("/classify-intent")
    async def classify_intent(request: Request) -> JSONResponse:
        try:
            body = ClassifyRequest.model_validate(await request.json())
            classification = await run_in_threadpool(classifier.classify, body.text)
            return JSONResponse(classification.model_dump(exclude_none=True))
        except Exception as e:
            logger.error("Error in classify-intent: %s", e)
            return JSONResponse(
                {
                    "error": str(e),
                    "intent": "CREATE_NOTE",
                    "entities": {
                        "title": FALLBACK_TITLE,
                        "body": ERROR_BODY,
                        "priority": "medium",
                    },
                },
                status_code=500,
            )

    @app.post("/text-to-speech")
    async def text_to_speech(request: Request) -> JSONResponse:
        try:
            body = SummarizeRequest.model_validate(await request.json())
            summary = await run_in_threadpool(summarizer.summarize, body.notes)
            return JSONResponse(SummaryResponse(summary=summary).model_dump())
        except Exception as e:
            logger.error("Error in text-to-speech: %s", e)
            return JSONResponse(
                {"error": str(e), "summary": APOLOGY},
                status_code=500,
            )

    app.add_api_route("/health", health_check, methods=["GET"], tags=["system"])
    return app


def serve(host: str | None = None, port: int | None = None) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    from besto.logging_config import configure_logging

    config = load_config()
    configure_logging(config.get("logging", {}).get("level", "INFO"))
    server_config = config.get("server", {})
    uvicorn.run(
        create_app(config),
        host=host or server_config.get("host", "127.0.0.1"),
        port=port or int(server_config.get("port", 8000)),
        log_config=None,
    )
