"""FastAPI application entrypoint for folder-summary service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import FolderSummaryError
from ..pipeline import PipelineResult, SummaryPipeline

PipelineFactory = Callable[[Path], SummaryPipeline]


class PathRequest(BaseModel):
    path: str


class AnalyzeResponse(BaseModel):
    files: Dict[str, Dict[str, Any]]


class SummarizeResponse(BaseModel):
    report_path: str
    files_analyzed: int


class HealthResponse(BaseModel):
    status: str


def _default_pipeline(root: Path) -> SummaryPipeline:
    return SummaryPipeline(load_config(root))


def create_app(pipeline_factory: PipelineFactory = _default_pipeline) -> FastAPI:
    """Create the FastAPI application exposing analysis and summary generation."""

    app = FastAPI(title="Folder Summary Service", version="1.0.0")

    async def _run(payload: PathRequest, action: str) -> PipelineResult:
        root = Path(payload.path).expanduser()

        def _execute() -> PipelineResult:
            # Built per request so configuration edits are picked up.
            pipeline = pipeline_factory(root)
            if action == "summarize":
                return pipeline.run(root)
            return pipeline.analyze(root)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _execute)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(payload: PathRequest) -> AnalyzeResponse:
        result = await _run(payload, "analyze")
        return AnalyzeResponse(
            files={path: facts.to_dict() for path, facts in result.analysis.items()}
        )

    @app.post("/summarize", response_model=SummarizeResponse)
    async def summarize(payload: PathRequest) -> SummarizeResponse:
        result = await _run(payload, "summarize")
        return SummarizeResponse(
            report_path=str(result.report_path),
            files_analyzed=len(result.analysis),
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(FolderSummaryError)
    async def summary_error_handler(_: Any, exc: FolderSummaryError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
