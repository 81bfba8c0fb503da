"""FastAPI application entrypoint for sandboxgen service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..assembler import SandboxAssembler
from ..config import load_config
from ..errors import (
    DependencyResolutionFailed,
    EntryNotFound,
    ManifestMissing,
    SandboxError,
)
from ..models import build_tree


class SandboxRequest(BaseModel):
    files: Dict[str, str]


class ModuleResponse(BaseModel):
    title: str
    path: str
    code: str
    shortid: str
    directoryShortid: Optional[str] = None
    isBinary: bool = False


class DirectoryResponse(BaseModel):
    title: str
    path: str
    shortid: str
    directoryShortid: Optional[str] = None


class SandboxResponse(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str]
    modules: List[ModuleResponse]
    directories: List[DirectoryResponse]
    npmDependencies: Dict[str, str]
    externalResources: List[str]
    template: str
    entry: str


class HealthResponse(BaseModel):
    status: str


def _default_assembler() -> SandboxAssembler:
    return SandboxAssembler.from_config(load_config(Path.cwd()))


def create_app(
    assembler_factory: Callable[[], SandboxAssembler] = _default_assembler,
) -> FastAPI:
    """Create the FastAPI application exposing sandbox assembly."""

    app = FastAPI(title="Sandboxgen Service", version="1.0.0")

    async def get_assembler() -> SandboxAssembler:
        # Fresh assembler per request; nothing is shared between invocations.
        return assembler_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/sandboxes", response_model=SandboxResponse)
    async def create_sandbox(
        payload: SandboxRequest,
        assembler: SandboxAssembler = Depends(get_assembler),
    ) -> SandboxResponse:
        descriptor = await assembler.assemble(build_tree(payload.files))
        return SandboxResponse(**descriptor.to_dict())

    @app.exception_handler(ManifestMissing)
    @app.exception_handler(EntryNotFound)
    async def not_found_handler(_: Any, exc: SandboxError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(DependencyResolutionFailed)
    async def resolution_failed_handler(
        _: Any, exc: DependencyResolutionFailed
    ) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "dependencies": list(exc.names)},
        )

    @app.exception_handler(SandboxError)
    async def sandbox_error_handler(_: Any, exc: SandboxError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
