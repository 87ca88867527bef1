from __future__ import annotations

import logging
from collections.abc import Callable

import redis
from dotenv import load_dotenv
from fastapi import FastAPI

from omnicorp import __version__
from omnicorp.api.routes import router
from omnicorp.config import GameSettings
from omnicorp.infra.redis_client import create_redis
from omnicorp.runtime import GameRuntime

load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(
    *,
    redis_factory: Callable[[], redis.Redis] = create_redis,
    settings: GameSettings | None = None,
) -> FastAPI:
    app = FastAPI(title="omnicorp-idle", version=__version__)
    app.include_router(router)

    @app.on_event("startup")
    async def _startup() -> None:
        runtime = GameRuntime.build(r=redis_factory(), settings=settings or GameSettings.from_env())
        app.state.runtime = runtime
        await runtime.startup()
        logger.info("OmniCorp runtime ready (save key %s)", runtime.settings.save_key)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runtime: GameRuntime | None = getattr(app.state, "runtime", None)
        if runtime is not None:
            await runtime.shutdown()

    @app.get("/info")
    async def info() -> dict[str, str]:
        return {"name": "omnicorp-idle", "version": __version__}

    return app


app = create_app()
