"""FastAPI アプリケーションの組み立て。

起動例::

    six-degrees serve
    uvicorn six_degrees.api.app:create_app --factory --port 3000
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from six_degrees.bootstrap import SixDegreesServices, build_services
from six_degrees.shared.config import AppSettings
from six_degrees.shared.logging import get_logger

from .middleware import RequestContextMiddleware
from .routes import router

__all__ = ["create_app"]


def create_app(
    *,
    services: SixDegreesServices | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """アプリを生成する。`services` 未指定時は設定から構築し、終了時に閉じる。"""

    owned = services is None
    app_services = services or build_services(settings=settings)
    logger = get_logger(__name__, component="api")

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("api_started", slices=len(app_services.slices))
        try:
            yield
        finally:
            if owned:
                await app_services.aclose()
            logger.info("api_stopped")

    app = FastAPI(
        title="Six Degrees of Steam",
        description="タグ・近傍からゲーム候補を探索し、多様性優先で並べる API。",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = app_services
    app.add_middleware(RequestContextMiddleware)
    app.include_router(router)
    return app
