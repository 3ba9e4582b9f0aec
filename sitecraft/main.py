import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import HTTPException as FastAPIHTTPException, RequestValidationError
from fastapi.exception_handlers import (
    http_exception_handler as fastapi_http_exception_handler,
    request_validation_exception_handler as fastapi_validation_exception_handler,
)

from .database import init_db
from .routers.projects import router as project_router
from .routers.user import router as user_router
from .users import fastapi_users, auth_backend
from .schemas import UserCreate, UserRead, UserUpdate
from .settings.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="SiteCraft")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.trusted_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------
# Route Includes
# ----------------------
app.include_router(user_router)
app.include_router(project_router)

# Authentication Routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/api/auth/jwt",
    tags=["auth"]
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/api/auth",
    tags=["auth"]
)
app.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix="/api/users",
    tags=["users"]
)

# -----------------------------------------------------
# API errors are rendered as {"message": ...}
# -----------------------------------------------------
@app.exception_handler(FastAPIHTTPException)
async def _api_error_handler(request: Request, exc: FastAPIHTTPException):
    path = request.url.path or "/"
    if path.startswith("/api"):
        detail = exc.detail
        if not isinstance(detail, str):
            detail = str(detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": detail},
            headers=getattr(exc, "headers", None),
        )
    return await fastapi_http_exception_handler(request, exc)


# Malformed path params or bodies on /api are plain 400s with a message.
@app.exception_handler(RequestValidationError)
async def _api_validation_error_handler(request: Request, exc: RequestValidationError):
    path = request.url.path or "/"
    if path.startswith("/api"):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            loc = ".".join(str(part) for part in first.get("loc", ()))
            message = f"Invalid request: {loc}: {first.get('msg', 'invalid value')}"
        return JSONResponse(status_code=400, content={"message": message})
    return await fastapi_validation_exception_handler(request, exc)


@app.on_event("startup")
async def on_startup():
    from . import models  # Required for SQLAlchemy model detection
    await init_db()
    logger.info("SiteCraft started; CORS origins: %s", ", ".join(settings.trusted_origins))


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Server is Live!"
