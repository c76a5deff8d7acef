"""
TCM Consultation Service - FastAPI Application

Main application entry point with API endpoints for:
- Pattern insight (deterministic TCM pattern differentiation)
- Consultation workflow (intake structuring + agent consultation)
- Direct chat with the consultation agent
- Scorer registry
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional
import asyncio
import json

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from agent.agent_graph import TcmConsultationAgent
from agent.nodes import set_status_callback, set_token_callback
from agent.workflow import build_workflow, run_consultation_workflow
from app.core.cors import CorsOriginMiddleware
from app.core.llm import ChatClient
from app.core.settings import Settings
from app.core.tcm import analyze_presentation
from app.models import (
    ChatRequest,
    ChatResponse,
    ConsultationResponse,
    HealthResponse,
    InsightResponse,
    PatientIntakeRequest,
    ScorerInfo,
    TcmIntakeRequest,
)
from app.utils import ConsultationError, get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    agent: Optional[TcmConsultationAgent] = None,
) -> FastAPI:
    """
    Build the API.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        agent: Consultation agent; built around a fresh ChatClient when omitted.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)

    if agent is None:
        agent = TcmConsultationAgent(client=ChatClient())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"TCM consultation API ready (model={agent.client.model_name}, "
            f"origins={list(settings.allowed_origins) or ['*']})"
        )
        yield
        logger.info("TCM consultation API shut down.")

    app = FastAPI(
        title="TCM Consultation API",
        description="Traditional Chinese Medicine consultation agent with deterministic pattern insight",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.consultation_agent = agent
    app.state.consultation_workflow = build_workflow(agent)
    app.state.start_time = datetime.now(timezone.utc)

    app.add_middleware(CorsOriginMiddleware, allowed_origins=settings.allowed_origins)

    @app.exception_handler(ConsultationError)
    async def consultation_error_handler(request: Request, exc: ConsultationError):
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    _register_routes(app)
    return app


def _sse(event: dict) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


def _register_routes(app: FastAPI) -> None:

    # ---- Health ----

    @app.get("/", response_model=HealthResponse, tags=["Health"])
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Service status and LLM availability."""
        agent: TcmConsultationAgent = app.state.consultation_agent
        now = datetime.now(timezone.utc)
        return HealthResponse(
            status="healthy",
            version=app.state.settings.version,
            timestamp=now.isoformat(),
            uptime_seconds=(now - app.state.start_time).total_seconds(),
            llm_available=agent.client.is_available,
            model=agent.client.model_name,
        )

    # ---- Tools ----

    @app.post("/api/v1/tools/tcm-insight", response_model=InsightResponse, tags=["Tools"])
    async def tcm_insight(request: TcmIntakeRequest):
        """Deterministic pattern differentiation for one intake."""
        return analyze_presentation(request.to_intake()).to_dict()

    # ---- Workflow ----

    @app.post(
        "/api/v1/workflows/tcm-consultation",
        response_model=ConsultationResponse,
        tags=["Workflow"],
    )
    async def tcm_consultation(request: PatientIntakeRequest):
        """Structure the intake, then let the agent write the consultation."""
        result = await run_in_threadpool(
            run_consultation_workflow,
            request.to_intake(),
            app.state.consultation_agent,
            app.state.consultation_workflow,
        )
        return result.to_dict()

    @app.post("/api/v1/workflows/tcm-consultation/stream", tags=["Workflow"])
    async def tcm_consultation_stream(request: PatientIntakeRequest):
        """
        Same workflow as above, streamed as server-sent events:
        `status` per step, `token` per generated chunk, then `done` with the
        full result (or `error`).
        """
        intake = request.to_intake()

        async def stream_generator():
            queue: asyncio.Queue = asyncio.Queue()
            loop = asyncio.get_running_loop()

            def on_status(status_dict: dict):
                loop.call_soon_threadsafe(queue.put_nowait, {"type": "status", **status_dict})

            def on_token(token: str):
                loop.call_soon_threadsafe(queue.put_nowait, {"type": "token", "token": token})

            def run_workflow():
                set_status_callback(on_status)
                set_token_callback(on_token)
                try:
                    result = run_consultation_workflow(
                        intake,
                        app.state.consultation_agent,
                        app.state.consultation_workflow,
                    )
                    event = {"type": "done", **result.to_dict()}
                except ConsultationError as e:
                    logger.error(f"Streamed workflow failed: {e.message}")
                    event = {"type": "error", **e.to_dict()}
                except Exception as e:
                    logger.error(f"Streamed workflow crashed: {e}", exc_info=True)
                    event = {"type": "error", "error": "INTERNAL_ERROR", "message": str(e), "details": {}}
                finally:
                    set_status_callback(None)
                    set_token_callback(None)
                loop.call_soon_threadsafe(queue.put_nowait, event)

            task = asyncio.create_task(run_in_threadpool(run_workflow))

            while True:
                event = await queue.get()
                yield _sse(event)
                if event["type"] in ("done", "error"):
                    break

            await task

        return StreamingResponse(stream_generator(), media_type="text/event-stream")

    # ---- Agent ----

    @app.post(
        "/api/v1/agents/tcm-consultation/chat",
        response_model=ChatResponse,
        tags=["Agent"],
    )
    async def agent_chat(request: ChatRequest):
        """One turn with the consultation agent; memory is kept per threadId."""
        agent: TcmConsultationAgent = app.state.consultation_agent
        run = await run_in_threadpool(agent.generate, request.query, request.thread_id or "GUEST")
        return run.to_dict()

    # ---- Scorers ----

    @app.get("/api/v1/scorers", response_model=List[ScorerInfo], tags=["Scorers"])
    async def list_scorers():
        """Scorers attached to the consultation agent."""
        agent: TcmConsultationAgent = app.state.consultation_agent
        return [
            ScorerInfo(
                name=binding.scorer.name,
                description=binding.scorer.description,
                sampling_rate=binding.sampling_rate,
            )
            for binding in agent.scorers
        ]


app = create_app()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
