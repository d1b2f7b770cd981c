"""
resource_service/main.py - Address and Cart Resource Service

PURPOSE:
    CRUD API over two MongoDB collections, shipping addresses and cart items,
    scoped per user by a caller-supplied userId.

API ENDPOINTS (owner scoped, the default):
    POST   /api/address              - Add an address for userId
    GET    /api/address/{userId}     - List the user's addresses
    PUT    /api/address/{id}         - Replace an address (body carries userId)
    DELETE /api/address/{id}         - Remove an address (body carries userId)
    POST   /api/cart                 - Add an item, or increase its quantity
    GET    /api/cart/{userId}        - List the user's cart items
    PUT    /api/cart/{id}            - Overwrite an item's quantity
    DELETE /api/cart/{id}            - Remove an item
    GET    /health                   - Health check endpoint

    With OWNER_SCOPED=false only the legacy address routes are mounted:
    GET /api/address lists every address and no userId is required.

DATA STORAGE:
    - MongoDB collections "addresses" and "cartitems"
    - Unique index on cartitems (productId, userId)

TESTING COMMANDS:
    1. Add two units of p1 to u1's cart (201):
        curl -X POST http://localhost:5000/api/cart \
          -H "Content-Type: application/json" \
          -d '{"productId": "p1", "title": "Mug", "price": 12.5, "quantity": 2, "userId": "u1"}'

    2. Add three more (200, quantity 5):
        curl -X POST http://localhost:5000/api/cart \
          -H "Content-Type: application/json" \
          -d '{"productId": "p1", "quantity": 3, "userId": "u1"}'

    3. View the cart:
        curl -X GET http://localhost:5000/api/cart/u1

    4. Remove the item:
        curl -X DELETE http://localhost:5000/api/cart/<id> \
          -H "Content-Type: application/json" -d '{"userId": "u1"}'

USAGE:
    python -m services.resource_service.main
    uvicorn services.resource_service.main:app --port 5000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.database import create_client, ping
from shared.logging_config import correlation_id_var, setup_logging

from .errors import ServiceError
from .origin_filter import OriginFilterMiddleware
from .repository import CartRepository
from .routes import build_address_router, build_cart_router
from .schemas import HealthResponse

SERVICE_NAME = "resource-service"
SERVICE_VERSION = "1.0.0"
CORRELATION_HEADER = "X-Correlation-ID"

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "shop"
    port: int = 5000
    allowed_origins: List[str] = [
        "http://localhost:5173",
        "https://navinraj2405.github.io",
        "https://ecommerce-front-end-project.netlify.app",
        "https://onlineshoping-project.netlify.app",
    ]
    owner_scoped: bool = True
    log_level: str = "INFO"
    log_timezone: str = "UTC"


# Two phases:
# 1. Before yield: connect to MongoDB (unless a database was injected) and create indexes
# 2. After yield: close the client this lifespan opened
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    settings: Settings = app.state.settings
    client = None

    logger.info("Starting Resource Service...")

    if app.state.database is None:
        client = create_client(settings.mongodb_uri)
        app.state.database = client[settings.mongodb_db]

    # A store that is down at startup is logged, not fatal; requests then fail one by one
    if await ping(app.state.database):
        logger.info("MongoDB connected")
        if settings.owner_scoped:
            try:
                await CartRepository(app.state.database).ensure_indexes()
            except PyMongoError as e:
                logger.error(f"Failed to create cart indexes: {e}")

    yield

    logger.info("Shutting down Resource Service...")
    if client is not None:
        await client.close()


def register_error_handlers(app: FastAPI) -> None:
    """Answer every error with a {"message": ...} body."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        message = "; ".join(problems) or "Invalid request"
        logger.info(f"Rejected request to {request.url.path}: {message}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def create_app(settings: Optional[Settings] = None, database: Any = None) -> FastAPI:
    """Build the application.

    ``database`` is a MongoDB database object. When it is given the lifespan does
    not open a client of its own.
    """
    settings = settings or Settings()
    setup_logging(SERVICE_NAME, level=settings.log_level, tz=settings.log_timezone)

    app = FastAPI(title="Resource Service", version=SERVICE_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    register_error_handlers(app)

    app.include_router(build_address_router(settings.owner_scoped), prefix="/api")
    if settings.owner_scoped:
        app.include_router(build_cart_router(), prefix="/api")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginFilterMiddleware, allowed_origins=settings.allowed_origins)

    # Registered last so it wraps the origin filter and its log records carry the id
    @app.middleware("http")
    async def correlation_id(request: Request, call_next):
        value = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        token = correlation_id_var.set(value)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        response.headers[CORRELATION_HEADER] = value
        return response

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        """Health check endpoint."""
        database = request.app.state.database
        connected = database is not None and await ping(database)
        return HealthResponse(
            status="ok" if connected else "degraded",
            service=SERVICE_NAME,
            version=SERVICE_VERSION,
            database="connected" if connected else "unavailable",
        )

    return app


settings = Settings()
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
