"""FastAPI application serving the shared directory."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, List

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel
from starlette.background import BackgroundTask

from sharedrop import __version__
from sharedrop.archive import build_archive
from sharedrop.config import AppConfig
from sharedrop.errors import (
    ConflictError,
    InvalidInputError,
    IOFailureError,
    NotFoundError,
    PathUnsafeError,
    RateLimitedError,
    ShareError,
)
from sharedrop.models import AliasStatus
from sharedrop.search.textsearch import search_in_file
from sharedrop.security.auth import require_auth
from sharedrop.security.paths import decode_path, encode_path
from sharedrop.utils.files import list_directory, save_stream
from sharedrop.web.frontend import router as frontend_router
from sharedrop.web.state import AppState

LOGGER = logging.getLogger(__name__)

_ALIAS_ERRORS: dict[AliasStatus, tuple[type[ShareError], str]] = {
    AliasStatus.INVALID_ALIAS: (InvalidInputError, "Invalid custom path"),
    AliasStatus.ALIAS_TAKEN: (ConflictError, "Custom path already exists"),
    AliasStatus.PATH_UNSAFE: (PathUnsafeError, "Invalid file path"),
    AliasStatus.PATH_NOT_FOUND: (NotFoundError, "File not found"),
}


class SearchHit(BaseModel):
    lineNumber: int
    content: str


class AliasCreated(BaseModel):
    status: str = "ok"
    alias: str
    url: str


def _state(request: Request) -> AppState:
    return request.app.state.share


def _client_key(request: Request) -> str:
    # host:port on purpose: one limiter window per connection endpoint.
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


def _resolve_encoded(state: AppState, encoded: str) -> tuple[Path, str]:
    resolved = state.resolver.require(decode_path(encoded))
    return resolved, state.resolver.relative(resolved)


def _require_file(path: Path) -> None:
    if not path.is_file():
        raise NotFoundError("File not found")


def _ensure_writable(state: AppState, operation: str) -> None:
    if state.config.read_only:
        LOGGER.warning("%s attempt blocked (readonly mode)", operation)
        raise HTTPException(
            status_code=403,
            detail=f"{operation} operation is disabled in readonly mode",
        )


def _parent_of(relative: str) -> str:
    return relative.rpartition("/")[0]


async def share_error_handler(request: Request, exc: ShareError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the application and the shared state it owns."""
    config = config or AppConfig()
    config.validate()
    root = config.resolve_root(Path.cwd())
    root.mkdir(parents=True, exist_ok=True)
    state = AppState.from_config(config, root=str(root))

    app = FastAPI(
        title="sharedrop",
        version=__version__,
        dependencies=[Depends(require_auth)],
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.share = state
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ShareError, share_error_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        response = await call_next(request)
        if not config.quiet:
            LOGGER.info(
                "[%s - %s] %s %s",
                request.method,
                response.status_code,
                request.url.path,
                _client_key(request),
            )
        return response

    app.include_router(frontend_router)
    _register_file_routes(app)
    _register_shared_routes(app)
    return app


def _register_file_routes(app: FastAPI) -> None:
    @app.get("/api/files")
    async def list_files(request: Request, path: str = "") -> dict[str, Any]:
        state = _state(request)
        directory, relative = _resolve_encoded(state, path)
        if not directory.is_dir():
            raise NotFoundError("The path does not exist")

        entries = await asyncio.to_thread(
            list_directory,
            directory,
            relative,
            show_hidden=state.show_hidden,
            aliases=state.aliases.snapshot(),
        )
        return {
            "path": relative,
            "parent": encode_path(_parent_of(relative)) if relative else None,
            "entries": [asdict(entry) for entry in entries],
            "showHidden": state.show_hidden,
            "readOnly": state.config.read_only,
        }

    @app.post("/api/files")
    async def upload_file(
        request: Request,
        path: str = "",
        file: UploadFile = File(...),
    ) -> dict[str, Any]:
        state = _state(request)
        _ensure_writable(state, "Upload")
        directory, relative = _resolve_encoded(state, path)
        if not directory.is_dir():
            raise NotFoundError("The path does not exist")

        filename = os.path.basename((file.filename or "").replace("\\", "/"))
        if filename in ("", ".", ".."):
            raise InvalidInputError("Missing file name")
        child = f"{relative}/{filename}" if relative else filename
        target = state.resolver.require(child)
        try:
            written = await asyncio.to_thread(save_stream, file.file, target)
        except OSError as exc:
            raise IOFailureError(f"Unable to store {filename}: {exc.strerror or exc}") from exc
        finally:
            await file.close()

        LOGGER.info("File uploaded: %s (%d bytes)", child, written)
        return {"status": "ok", "path": encode_path(child), "size": written}

    @app.get("/download")
    async def download_file(request: Request, path: str = Query(...)) -> FileResponse:
        state = _state(request)
        target, _ = _resolve_encoded(state, path)
        _require_file(target)
        return FileResponse(target, filename=target.name)

    @app.get("/raw/{raw_path:path}")
    async def raw_file(request: Request, raw_path: str) -> FileResponse:
        state = _state(request)
        target = state.resolver.require(raw_path)
        _require_file(target)
        return FileResponse(target)

    @app.delete("/delete")
    async def delete_file(request: Request, path: str = Query(...)) -> dict[str, Any]:
        state = _state(request)
        _ensure_writable(state, "Delete")
        target, relative = _resolve_encoded(state, path)
        if not relative:
            raise HTTPException(status_code=403, detail="Cannot delete the shared root")
        if not target.exists():
            raise NotFoundError("File not found")
        if target.is_dir():
            LOGGER.warning("Attempt to delete directory blocked: %s", relative)
            raise HTTPException(status_code=403, detail="Cannot delete directories")
        try:
            target.unlink()
        except OSError as exc:
            raise IOFailureError(f"Unable to delete file: {exc.strerror or exc}") from exc

        LOGGER.info("File deleted: %s", relative)
        return {"status": "ok", "parent": encode_path(_parent_of(relative))}

    @app.get("/zip")
    async def zip_directory(request: Request, path: str = "") -> FileResponse:
        state = _state(request)
        directory, _ = _resolve_encoded(state, path)
        archive = await asyncio.to_thread(
            build_archive, directory, include_hidden=state.show_hidden
        )
        return FileResponse(
            archive,
            media_type="application/zip",
            filename="files.zip",
            background=BackgroundTask(archive.unlink, missing_ok=True),
        )

    @app.get("/search-file")
    async def search_file(
        request: Request,
        path: str = "",
        term: str = "",
        case_sensitive: bool = Query(False, alias="caseSensitive"),
        whole_word: bool = Query(False, alias="wholeWord"),
    ) -> List[SearchHit]:
        if not path or not term:
            raise InvalidInputError("Missing required parameters")
        state = _state(request)
        target, relative = _resolve_encoded(state, path)
        LOGGER.debug(
            "Search - path: %s, term: %r, case sensitive: %s, whole word: %s",
            relative,
            term,
            case_sensitive,
            whole_word,
        )
        results = await asyncio.to_thread(
            search_in_file,
            target,
            term,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
        )
        return [SearchHit(**result.to_dict()) for result in results]


def _register_shared_routes(app: FastAPI) -> None:
    @app.get("/clipboard", response_class=PlainTextResponse)
    async def read_clipboard(request: Request) -> str:
        return _state(request).clipboard.get()

    @app.post("/clipboard")
    async def write_clipboard(request: Request) -> dict[str, str]:
        state = _state(request)
        key = _client_key(request)
        if not state.limiter.allow(key):
            LOGGER.warning("Rate limit exceeded for %s", key)
            raise RateLimitedError(key, state.limiter.limit, state.limiter.window)

        limit = state.config.max_clipboard_bytes
        body = bytearray()
        async for chunk in request.stream():
            body.extend(chunk)
            if len(body) > limit:
                raise HTTPException(status_code=413, detail="Clipboard content too large")

        state.clipboard.set(body.decode("utf-8", errors="replace"))
        LOGGER.debug("Clipboard updated (%d bytes)", len(body))
        return {"status": "ok"}

    @app.post("/custom-path")
    async def create_custom_path(
        request: Request,
        current_path: str = Form(..., alias="currentPath"),
        custom_path: str = Form(..., alias="customPath"),
    ) -> AliasCreated:
        state = _state(request)
        canonical = decode_path(current_path)
        status = await asyncio.to_thread(state.aliases.create_alias, canonical, custom_path)
        if status is not AliasStatus.OK:
            error_cls, message = _ALIAS_ERRORS[status]
            raise error_cls(message)
        return AliasCreated(alias=custom_path, url=f"/s/{custom_path}")

    @app.get("/api/aliases")
    async def list_aliases(request: Request) -> dict[str, Any]:
        snapshot = _state(request).aliases.snapshot()
        return {
            "aliases": [
                {"alias": alias, "path": encode_path(canonical)}
                for canonical, alias in sorted(snapshot.items())
            ]
        }

    @app.get("/s/{alias}")
    async def download_alias(request: Request, alias: str) -> FileResponse:
        state = _state(request)
        canonical = state.aliases.resolve_alias(alias)
        if canonical is None:
            raise NotFoundError("File not found")
        target = state.resolver.require(canonical)
        _require_file(target)
        return FileResponse(target, filename=target.name)

    @app.get("/showhiddenfiles", response_class=PlainTextResponse)
    async def hidden_files_setting(request: Request) -> str:
        return "true" if _state(request).show_hidden else "false"

    @app.post("/showhiddenfiles", response_class=PlainTextResponse)
    async def toggle_hidden_files(request: Request) -> str:
        state = _state(request)
        if state.config.disable_hidden_files:
            raise HTTPException(status_code=403, detail="You can't change this setting")
        return "true" if state.toggle_hidden() else "false"
