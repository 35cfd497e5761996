import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles

from shipdesk import db
from shipdesk.api import auth_routes, customer_routes, order_routes, shipment_routes, upload_routes
from shipdesk.auth.routes import auth_backend, fastapi_users
from shipdesk.core.config import settings
from shipdesk.core.constants import UPLOADS_URL_PREFIX
from shipdesk.core.exceptions import register_error_handlers
from shipdesk.core.logging import setup_logging
from shipdesk.schemas.user import UserCreate, UserRead

log = logging.getLogger(__name__)


def _bearer_openapi(app: FastAPI):
    # Swagger "Authorize" button sends the JWT as a bearer token
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title="ShipDesk API",
            version="1.0.0",
            description="Customers, orders, shipments and media for logistics back-office users.",
            routes=app.routes,
        )
        schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        }
        for path in schema["paths"].values():
            for operation in path.values():
                operation["security"] = [{"BearerAuth": []}]
        app.openapi_schema = schema
        return app.openapi_schema

    return custom_openapi


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title="ShipDesk API")
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.storage_backend == "local":
        os.makedirs(settings.upload_root, exist_ok=True)
        app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=settings.upload_root), name="uploads")

    # Auth routes
    app.include_router(fastapi_users.get_auth_router(auth_backend), prefix="/api/auth/jwt", tags=["auth"])
    app.include_router(fastapi_users.get_register_router(UserRead, UserCreate), prefix="/api/auth", tags=["auth"])
    app.include_router(auth_routes.router)

    # Core app routers
    app.include_router(customer_routes.router)
    app.include_router(order_routes.router)
    app.include_router(shipment_routes.router)
    app.include_router(upload_routes.router)

    @app.get("/health")
    async def health():
        return {"status": True, "message": "OK"}

    @app.on_event("startup")
    async def on_startup():
        if settings.auto_create_tables:
            log.info("Creating database tables")
            await db.create_db_and_tables()
        log.info("ShipDesk API started (storage=%s)", settings.storage_backend)

    app.openapi = _bearer_openapi(app)
    return app


app = create_app()
