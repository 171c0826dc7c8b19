import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse, JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette import status as starlette_status

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import settings
from routers import health, modle, puzzles
from db import database, models  # noqa: F401 (registra los modelos en Base.metadata)
from utils.limiter import limiter

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn.error")

database.Base.metadata.create_all(bind=database.engine)

app = FastAPI(title="Modle")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# === CORS estricto según entorno ===
# En dev añadimos orígenes locales comunes
_local_dev = [
    "http://127.0.0.1:5500", "http://localhost:5500",
    "http://localhost:5173", "http://localhost:3000"
]
allow_origins = (
    settings.ALLOWED_ORIGINS
    if settings.ENV == "production"
    else list({*settings.ALLOWED_ORIGINS, *_local_dev})
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["Content-Length", "Content-Type"],
    max_age=600,
)

app.include_router(health.router)
app.include_router(puzzles.router)
app.include_router(modle.router)


# === Handlers de error coherentes ===
@app.exception_handler(StarletteHTTPException)
async def http_exc_handler(request: Request, exc: StarletteHTTPException):
    content = {
        "error": exc.status_code,
        "message": exc.detail or "HTTP error",
        "path": str(request.url.path),
    }
    # detail estructurado: {"reason": ..., "message": ..., ...}
    if isinstance(exc.detail, dict) and "message" in exc.detail:
        content.update(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exc_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=starlette_status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": 422,
            "message": "Invalid parameters",
            "details": jsonable_errors(exc),
            "path": str(request.url.path),
        },
    )

@app.exception_handler(Exception)
async def unhandled_exc_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=starlette_status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": 500,
            "message": "Unexpected error",
            "path": str(request.url.path),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # Los errores de pydantic pueden traer objetos no serializables en "ctx"
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


@app.get("/", include_in_schema=False)
def root():
    return RedirectResponse("/docs")
