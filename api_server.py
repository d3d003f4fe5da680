from __future__ import annotations  # FastAPI server for mock immigration interviews

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agents.answer_evaluator import AnswerEvaluator
from api.routes import router
from config import load_config, settings
from llm_gateway import ResilientGenerator
from observability import configure_logging
from question_bank import default_question_bank
from services.orchestrator import InterviewOrchestrator
from services.sessions import SessionStore
from storage.migrate import migrate
from storage.sessions import SqliteSessionRepository
from translation import default_translator


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def _config_path() -> Path:
    path = Path(settings.APP_CONFIG_PATH)
    return path if path.is_absolute() else ROOT / path


def build_generator() -> Optional[ResilientGenerator]:  # Model collaborator, or None to run rule-based only
    path = _config_path()
    if not path.exists():
        logger.warning("No model config at %s; AI scoring disabled", path)
        return None
    generator = ResilientGenerator.from_config(load_config(path))
    if not generator.configured:
        logger.warning("No API key for configured model routes; AI scoring disabled")
        return None
    return generator


def build_orchestrator(generator: Optional[ResilientGenerator] = None) -> InterviewOrchestrator:  # Wire collaborators
    translator = default_translator()
    return InterviewOrchestrator(
        bank=default_question_bank(),
        store=SessionStore(),
        evaluator=AnswerEvaluator(generator, translator=translator),
        repository=SqliteSessionRepository(),
        translator=translator,
    )


async def _sweep_forever(store: SessionStore, interval: float) -> None:  # Periodic idle-session expiry
    while True:
        await asyncio.sleep(interval)
        expired = store.sweep()
        if expired:
            logger.info("Swept %d idle sessions", len(expired))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    migrate(settings.DB_PATH)
    orchestrator = build_orchestrator(build_generator())
    app.state.orchestrator = orchestrator
    sweeper = asyncio.create_task(_sweep_forever(orchestrator.store, settings.SWEEP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        orchestrator.store.clear()


app = FastAPI(title="Immigration Interview Rehearsal API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/health")
def health() -> dict:
    orchestrator = getattr(app.state, "orchestrator", None)
    return {
        "status": "ok",
        "active_sessions": len(orchestrator.store) if orchestrator else 0,
        "ai_available": bool(orchestrator and orchestrator.evaluator.is_available()),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8000)
