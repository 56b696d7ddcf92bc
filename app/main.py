"""
Mentor Connect - Main Application

FastAPI backend with:
- MongoDB for users, projects (applications embedded) and homepage content
- JWT authentication
- Project application lifecycle with conditional writes

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import AppError
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.schemas.schemas import ApiResponse

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("app")

# Create FastAPI app
app = FastAPI(
    title="Mentor Connect",
    description="""
    A marketplace connecting engineers who own projects with students who want to work on them.

    ## Features
    - **Authentication**: JWT-based auth for engineers and students
    - **Projects**: Post, search, filter and manage projects
    - **Applications**: Students apply, owners accept or reject
    - **Directories**: Mentor and student listings with skill search
    - **Dashboard**: Profile statistics and homepage highlights
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


def envelope(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ApiResponse(success=False, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Error handlers - every failure leaves as {success: false, message, errors?}
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return envelope(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"]
        }
        for err in exc.errors()
    ]
    return envelope(400, "Validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return envelope(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return envelope(500, "Server error")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Mentor Connect", "docs": "/docs"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
