"""FastAPI application entrypoint for blockgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import load_config
from ..coordinator import EventKind, GenerationCoordinator, RecordEvent
from ..errors import BlockgenError
from ..models import GenerationReport
from ..stores import InMemoryContentStore, JsonContentStore, record_from_payload

T = TypeVar("T")


class RecordPayload(BaseModel):
    id: int
    type: str
    title: str = ""
    slug: str
    status: str = "publish"
    fields: Dict[str, Any] = Field(default_factory=dict)


class EventRequest(BaseModel):
    kind: EventKind
    record: RecordPayload
    previous_slug: Optional[str] = None
    is_update: bool = True


class FileStatusRequest(BaseModel):
    record_ids: List[int]


class FileStatusResponse(BaseModel):
    records: List[Dict[str, Any]]


class ReportResponse(BaseModel):
    action: str
    succeeded: int
    failed: int
    files_written: int
    files_removed: int
    errors: List[str] = Field(default_factory=list)
    records: List[Dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: GenerationReport) -> "ReportResponse":
        return cls(**report.to_dict())


class HealthResponse(BaseModel):
    status: str


def _default_coordinator() -> GenerationCoordinator:
    config = load_config(Path.cwd())
    store_path = config.store_path
    store = JsonContentStore(store_path) if store_path is not None else InMemoryContentStore()
    return GenerationCoordinator.from_config(config, store)


async def _run_blocking(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _persist(coordinator: GenerationCoordinator) -> None:
    if isinstance(coordinator.store, JsonContentStore):
        coordinator.store.persist()


def create_app(
    coordinator_factory: Callable[[], GenerationCoordinator] = _default_coordinator,
) -> FastAPI:
    """Create the FastAPI application exposing blockgen operations."""

    app = FastAPI(title="Blockgen Service", version="1.0.0")

    async def get_coordinator() -> GenerationCoordinator:
        # Built per request so store snapshots never leak between calls.
        return coordinator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/regenerate", response_model=ReportResponse)
    async def regenerate_all(
        coordinator: GenerationCoordinator = Depends(get_coordinator),
    ) -> ReportResponse:
        def _run() -> GenerationReport:
            report = coordinator.regenerate_all_files()
            _persist(coordinator)
            return report

        return ReportResponse.from_report(await _run_blocking(_run))

    @app.post("/records/{record_id}/generate", response_model=ReportResponse)
    async def generate_record(
        record_id: int,
        coordinator: GenerationCoordinator = Depends(get_coordinator),
    ) -> ReportResponse:
        report = await _run_blocking(lambda: coordinator.regenerate_record(record_id))
        return ReportResponse.from_report(report)

    @app.post("/events", response_model=ReportResponse)
    async def dispatch_event(
        payload: EventRequest,
        coordinator: GenerationCoordinator = Depends(get_coordinator),
    ) -> ReportResponse:
        record = record_from_payload(payload.record.model_dump())
        if record is None:
            raise HTTPException(status_code=422, detail="Invalid record payload")
        event = RecordEvent(
            kind=payload.kind,
            record=record,
            previous_slug=payload.previous_slug,
            is_update=payload.is_update,
        )

        def _run() -> GenerationReport:
            report = coordinator.dispatch(event)
            _persist(coordinator)
            return report

        return ReportResponse.from_report(await _run_blocking(_run))

    @app.post("/files/status", response_model=FileStatusResponse)
    async def file_status(
        payload: FileStatusRequest,
        coordinator: GenerationCoordinator = Depends(get_coordinator),
    ) -> FileStatusResponse:
        return FileStatusResponse(records=coordinator.file_status(payload.record_ids))

    @app.get("/stats")
    async def stats(
        coordinator: GenerationCoordinator = Depends(get_coordinator),
    ) -> Dict[str, int]:
        return coordinator.global_impact_stats()

    @app.exception_handler(LookupError)
    async def not_found_handler(_: Any, exc: LookupError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc.args[0] if exc.args else exc)})

    @app.exception_handler(BlockgenError)
    async def blockgen_error_handler(_: Any, exc: BlockgenError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
