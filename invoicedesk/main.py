from contextlib import asynccontextmanager

from fastapi import FastAPI

from invoicedesk.api.routes import health_router
from invoicedesk.api.v1 import v1_router
from invoicedesk.core.config import settings
from invoicedesk.core.logging_config import setup_logging
from invoicedesk.infrastructure.cache.redis_client import close_redis_client

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis_client()


app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)

app.include_router(health_router)
app.include_router(v1_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("invoicedesk.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
