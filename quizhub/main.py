import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from quizhub.core.config import settings
from quizhub.core.exceptions import QuizHubError
from quizhub.core.logging_config import setup_logging
from quizhub.core.token_denylist import close_denylist
from quizhub.db.session import get_db, store_call

from quizhub.api.accounts.auth import router as auth_router
from quizhub.api.admin import router as admin_router
from quizhub.api.quizzes import router as quizzes_router
from quizhub.api.users import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.environment, settings.log_level, settings.log_dir)
    logger.info("Starting %s", settings.app_name)
    yield
    await close_denylist()
    logger.info("Shutting down %s", settings.app_name)


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuizHubError)
async def quizhub_error_handler(request: Request, exc: QuizHubError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_error",
            "detail": "Malformed request",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# admin first: /quizzes/admin/all must win over /quizzes/{quiz_id}
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(quizzes_router)
app.include_router(users_router)


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/db-check")
async def db_check(db: AsyncSession = Depends(get_db)):
    r = await store_call(db.execute(text("SELECT 1")))
    return {"db": r.scalar_one()}
