from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paytrack.core.config import settings
from paytrack.core.connections import ConnectionRegistry
from paytrack.core.database import init_db
from paytrack.core.errors import register_exception_handlers
from paytrack.core.logging import configure_logging
from paytrack.routers import auth, customers, notifications, payments, ws

OPENAPI_TAGS = [
    {"name": "Auth", "description": "Register staff users and issue session tokens."},
    {"name": "Customers", "description": "Search, create, update, delete and import customers."},
    {"name": "Payments", "description": "Process payments and manage payment status."},
    {"name": "Notifications", "description": "Read and acknowledge in-app notifications."},
    {"name": "Push", "description": "Live event stream for connected clients."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.LOG_LEVEL)
    init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Customer payment tracking API. Search and manage customer billing records, "
        "process payments and follow payment status changes live."
    ),
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
)
app.state.connection_registry = ConnectionRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(customers.router, prefix="/api/customers", tags=["Customers"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(ws.router, tags=["Push"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }
