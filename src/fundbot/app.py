"""
fundbot/app.py

FastAPI application for the fundbot query router
Single chat endpoint in front of the TurnOrchestrator
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .agent.operations import OperationDispatcher
from .agent.orchestrator import TurnOrchestrator
from .config import Settings, load_settings
from .context.response_cache import ResponseCache
from .db.repository import get_repository
from .gemini_llm_client import GeminiLLMClient
from .logging_config import get_logger, setup_logging
from .nlu.intent_classifier import IntentClassifier
from .schemas.api_models import ChatRequest, ChatResponse, ErrorResponse

logger = get_logger("fundbot.app")

EXAMPLE_QUERIES = (
    "Find user with PAN ABGPA5303H",
    "What is SIP?",
    "Calculate AUM for client 11181",
    "Get last 5 transactions for client 11181",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(error=message, timestamp=_now())
    return JSONResponse(status_code=status_code, content=body.model_dump())


def build_orchestrator(settings: Settings) -> TurnOrchestrator:
    """
    Wire the pipeline from settings:
     - Gemini LLM client
     - record repository (memory or sql)
     - response cache, classifier and dispatcher
    """
    if not settings.gemini_api_key:
        logger.error("GEMINI_API_KEY not set. Every turn will use the fallback paths until a key is provided.")
    llm_client = GeminiLLMClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.llm_timeout_seconds,
    )
    repository = get_repository(settings)
    cache = ResponseCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    return TurnOrchestrator(
        llm_client=llm_client,
        cache=cache,
        classifier=IntentClassifier(llm_client, mode=settings.classifier_mode),
        dispatcher=OperationDispatcher(repository, default_limit=settings.transaction_default_limit),
    )


def log_banner(settings: Settings) -> None:
    logger.info("=" * 80)
    logger.info(
        "FUNDBOT STARTED | model=%s store=%s classifier=%s",
        settings.gemini_model,
        settings.store_backend,
        settings.classifier_mode,
    )
    logger.info("Try queries like:")
    for example in EXAMPLE_QUERIES:
        logger.info(" - %s", example)
    logger.info("=" * 80)


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[TurnOrchestrator] = None,
) -> FastAPI:
    app = FastAPI(title="Fundbot Query Router")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.on_event("startup")
    async def startup_event():
        setup_logging()
        if app.state.settings is None:
            app.state.settings = load_settings()
        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator(app.state.settings)
            # Start every process with an empty cache
            app.state.orchestrator.cache.clear()
        log_banner(app.state.settings)

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("=" * 80)
        logger.info("FUNDBOT SHUTDOWN")
        orch = app.state.orchestrator
        if orch is not None:
            llm = getattr(orch, "llm_client", None)
            if llm is not None and hasattr(llm, "close"):
                try:
                    await llm.close()
                except Exception as e:
                    logger.exception("Error closing LLM client: %s", e)
            repo = getattr(orch.dispatcher, "repository", None)
            if repo is not None and hasattr(repo, "close"):
                try:
                    await repo.close()
                except Exception as e:
                    logger.exception("Error closing record store: %s", e)
        logger.info("Shutdown complete.")
        logger.info("=" * 80)

    @app.get("/")
    async def root() -> Dict[str, Any]:
        return {"message": "Fundbot Query Router API", "status": "running", "examples": list(EXAMPLE_QUERIES)}

    @app.get("/api/health")
    async def health_check() -> Dict[str, str]:
        return {"status": "healthy"}

    @app.post("/api/chat")
    async def chat(request: Request):
        try:
            body = await request.json()
        except Exception:
            body = None

        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str) or not message.strip():
            logger.warning("Rejected chat request with invalid message: %r", message)
            return _error(400, "Message is required and must be a non-empty string")

        chat_request = ChatRequest(message=message)
        try:
            reply = await app.state.orchestrator.handle_turn(chat_request.message)
        except Exception as e:
            logger.exception("Chat turn failed: %s", e)
            return _error(500, "Internal server error")

        return ChatResponse(response=reply, timestamp=_now()).model_dump()

    return app


app = create_app()


def main() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
