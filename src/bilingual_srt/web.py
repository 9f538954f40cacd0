"""HTTP API for subtitle translation."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .cache import TranslationCache
from .client import TranslationClient, normalize_engine
from .config import TranslatorConfig
from .errors import (
    ConfigurationError,
    DocumentBusyError,
    RemoteError,
    SrtTranslateError,
    ValidationError,
)
from .models import OutputMode, SrtDocument
from .orchestrator import BatchOrchestrator
from .translators import available_engines

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}

ERROR_STATUS = {
    ValidationError: 400,
    DocumentBusyError: 409,
    ConfigurationError: 500,
    RemoteError: 500,
}


class TranslateRequest(BaseModel):
    text: Optional[str] = None


class BatchRequest(BaseModel):
    texts: Optional[List[str]] = None
    engine: str = "google"


def _status_for(error: SrtTranslateError) -> int:
    for cls, status in ERROR_STATUS.items():
        if isinstance(error, cls):
            return status
    return 500


async def _read_srt_upload(file: UploadFile, max_bytes: int) -> str:
    if not file.filename:
        raise ValidationError("No file selected")
    data = await file.read()
    if not data:
        raise ValidationError("File is empty")
    if len(data) > max_bytes:
        raise ValidationError(f"File too large (max {max_bytes // (1024 * 1024)} MB)")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("SRT file must be UTF-8 encoded", detail=str(e)) from e


def create_app(
    config: Optional[TranslatorConfig] = None,
    cache: Optional[TranslationCache] = None,
    client: Optional[TranslationClient] = None,
) -> FastAPI:
    """
    创建并配置 FastAPI 应用。

    The cache lives as long as the application; pass one in to share or
    inspect it.
    """
    config = config or TranslatorConfig.from_env()
    if client is None:
        if cache is None:
            cache = TranslationCache(config.cache_ttl)
        client = TranslationClient(cache, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(
        title="bilingual-srt",
        description="Translate SRT subtitles into bilingual or translated-only files.",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.client = client

    @app.exception_handler(SrtTranslateError)
    async def handle_translate_error(request: Request, exc: SrtTranslateError) -> JSONResponse:
        status = _status_for(exc)
        if status >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.url.path} rejected: {exc}")
        return JSONResponse(status_code=status, content={"message": exc.message})

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/translate"):
            response.headers.update(SECURITY_HEADERS)
        return response

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/api/engines")
    async def engines() -> list:
        return available_engines()

    @app.post("/api/translate/batch")
    async def translate_batch(body: BatchRequest) -> dict:
        if not body.texts:
            raise ValidationError("Texts array is required")
        translations = await client.translate_batch(body.texts, body.engine)
        return {
            "translations": [t.to_text() for t in translations],
            "engine": normalize_engine(body.engine),
        }

    @app.post("/api/translate/{engine}")
    async def translate_one(engine: str, body: TranslateRequest) -> dict:
        if not body.text:
            raise ValidationError("Text is required")
        engine = normalize_engine(engine)
        cached = client.cached(body.text, engine) is not None
        translation = await client.translate_one(body.text, engine)
        return {"translation": translation, "engine": engine, "cached": cached}

    @app.post("/api/srt/status")
    async def srt_status(file: UploadFile = File(...)) -> dict:
        content = await _read_srt_upload(file, config.max_upload_mb * 1024 * 1024)
        return SrtDocument.from_text(content).status().as_dict()

    @app.post("/api/srt/translate")
    async def srt_translate(
        file: UploadFile = File(...),
        engine: str = Form("google"),
        mode: str = Form("bilingual"),
        batch_size: int = Form(0),
    ) -> Response:
        try:
            output_mode = OutputMode.parse(mode)
        except ValueError as e:
            raise ValidationError(f"Unknown output mode: {mode}") from e

        size = batch_size or config.batch_size
        if size < 1 or size > 50:
            raise ValidationError(f"Batch size must be 1-50, got {size}")

        content = await _read_srt_upload(file, config.max_upload_mb * 1024 * 1024)
        document = SrtDocument.from_text(content)
        if not document.entries:
            raise ValidationError("No valid subtitle entries found")

        # 引擎不可用时直接报错，而不是整份文档都标记为失败
        client.translator(engine)
        orchestrator = BatchOrchestrator(client, batch_size=size, delay=config.batch_delay)
        summary = await orchestrator.run(document, engine)

        return Response(
            content=document.to_srt(output_mode),
            media_type="application/x-subrip; charset=utf-8",
            headers={
                "Content-Disposition": f'attachment; filename="{output_mode.filename}"',
                "X-Translation-Total": str(len(document)),
                "X-Translation-Failed": str(summary.failed),
            },
        )

    return app


def main(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """本地启动 Web 服务。"""
    import uvicorn

    host = host or os.getenv("SRT_WEB_HOST", "127.0.0.1")
    port = port or int(os.getenv("SRT_WEB_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)
