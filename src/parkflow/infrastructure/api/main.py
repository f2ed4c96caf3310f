from contextlib import asynccontextmanager

from fastapi import FastAPI

from parkflow.infrastructure.api.routers import admin, parking
from parkflow.infrastructure.persistence.database import init_db
from parkflow.shared.utils import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Parkflow API started")
    yield


def create_app(initialize_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Parkflow API",
        version="0.1.0",
        lifespan=lifespan if initialize_database else None,
    )
    app.include_router(parking.router)
    app.include_router(admin.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from parkflow.config.settings_env import settings

    uvicorn.run(app, host=settings.FASTAPI_HOST, port=settings.FASTAPI_PORT)
