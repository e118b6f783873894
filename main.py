import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from shared.config import settings
from shared.db import AsyncSessionLocal, Base, engine
from shared.exceptions import PortalError
from shared.logging_config import setup_logging
from services.file_portal.core.bootstrap import ensure_default_admin, ensure_default_classes
from services.file_portal.core.file_store import get_file_store
from services.file_portal.controllers.account_service import router as account_router
from services.file_portal.controllers.class_service import router as class_router
from services.file_portal.controllers.file_service import router as file_router
import services.file_portal.models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    get_file_store().root.mkdir(parents=True, exist_ok=True)

    try:
        async with AsyncSessionLocal() as db:
            await ensure_default_classes(db, settings.DEFAULT_CLASSES)
            await ensure_default_admin(
                db,
                settings.DEFAULT_ADMIN_USERNAME,
                settings.DEFAULT_ADMIN_PASSWORD,
                settings.DEFAULT_CLASSES
            )
    except Exception as e:
        logger.error(f"Startup seeding failed: {e}", exc_info=True)

    logger.info(f"{settings.PROJECT_NAME} started")
    yield
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/")
def health_check():
    return {"status": f"{settings.PROJECT_NAME} is running ✅"}


app.include_router(account_router, prefix=settings.API_PREFIX)
app.include_router(file_router, prefix=settings.API_PREFIX)
app.include_router(class_router, prefix=settings.API_PREFIX)
