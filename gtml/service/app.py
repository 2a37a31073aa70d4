"""FastAPI application entrypoint for gtml service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..models import BuildReport
from ..orchestrator import Orchestrator, RenderOutcome


class CompileRequest(BaseModel):
    path: str


class CompileResponse(BaseModel):
    dist: str
    routes: List[str]
    stylesheet: str
    components: int
    static_files: int


class RenderRequest(BaseModel):
    html: str
    components: Dict[str, str] = Field(default_factory=dict)
    strict_props: bool = False


class RenderResponse(BaseModel):
    html: str
    css: str
    js: str


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


async def _run_blocking(func: Callable[[], Any]) -> Any:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing gtml compilation."""

    app = FastAPI(title="gtml Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/compile", response_model=CompileResponse)
    async def compile_project(
        payload: CompileRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> CompileResponse:
        report: BuildReport = await _run_blocking(lambda: orchestrator.run_compile(payload.path))
        return CompileResponse(
            dist=str(report.dist),
            routes=[str(path) for path in report.routes],
            stylesheet=str(report.stylesheet),
            components=report.components,
            static_files=report.static_files,
        )

    @app.post("/render", response_model=RenderResponse)
    async def render_snippet(
        payload: RenderRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> RenderResponse:
        outcome: RenderOutcome = await _run_blocking(
            lambda: orchestrator.render(
                payload.html, payload.components, strict_props=payload.strict_props
            )
        )
        return RenderResponse(html=outcome.html, css=outcome.css, js=outcome.js)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    """Serve the application with uvicorn."""
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
