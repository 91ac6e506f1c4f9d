"""FastAPI application factory for the mod host control surface.

Endpoints: /health, /metrics, /mods*, /catalogue*.
One ModLoader + ContentCatalogue per app; injected for tests or embedding,
otherwise built lazily from config on first use (content folders from
`content.types`).
"""
from __future__ import annotations

import json
import logging
import time
from typing import Optional

from fastapi import FastAPI, Request

from modcore import metrics
from modcore.catalogue import ContentCatalogue, ContentTypeRegistry
from modcore.config import get_config
from modcore.config.schemas.observability import LoggingConfig
from modcore.modules import ModLoader
from modhost.api.routes.mods import router as mods_router

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(cfg: LoggingConfig) -> None:
    handler = logging.StreamHandler()
    if cfg.format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
    for name in ("modcore", "modhost"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.setLevel(_LEVELS.get(cfg.level, logging.INFO))
        logger.propagate = False


def create_app(
    loader: Optional[ModLoader] = None,
    catalogue: Optional[ContentCatalogue] = None,
    content_types: Optional[ContentTypeRegistry] = None,
) -> FastAPI:
    app = FastAPI(
        title="modhost API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
    )
    if catalogue is None and loader is not None:
        catalogue = loader.catalogue
    if catalogue is None:
        catalogue = ContentCatalogue()
    if content_types is None and loader is not None:
        content_types = ContentTypeRegistry()
    app.state.catalogue = catalogue
    # None: filled from config together with the lazily built loader
    app.state.content_types = content_types
    app.state.loader = loader

    @app.get("/health")
    def health():  # noqa: D401
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics_snapshot():  # noqa: D401
        return metrics.snapshot()

    app.include_router(mods_router)

    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):  # noqa: D401
        start = time.time()
        labels = {"route": request.url.path, "method": request.method}
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000.0
        metrics.inc("api_request_total", labels)
        metrics.observe("api_request_latency_ms", duration_ms, labels)
        if response.status_code >= 400:
            metrics.inc(
                "api_request_errors_total",
                labels | {"status": response.status_code},
            )
        return response

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    import uvicorn

    configure_logging(get_config().logging)
    uvicorn.run("modhost.api.app:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()
