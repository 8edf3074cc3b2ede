"""FastAPI application factory for the shopping list API."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite
from aiosqlite import connect as aiosqlite_connect
from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shoplist.app.auth import AuthorizationEngine, Validate, configure_auth_router
from shoplist.app.cascade import CascadeManager
from shoplist.app.items import configure_item_router
from shoplist.app.roles import RoleResolver
from shoplist.app.roles.role_routes import configure_role_router
from shoplist.app.seed import configure_seed_router
from shoplist.app.shopping_lists import configure_shopping_list_router
from shoplist.app.store import EntityStore
from shoplist.app.users import configure_user_router
from shoplist.common import ShoplistError
from shoplist.config import configure_logging, load_config_from_env

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from shoplist.config import AppConfig

LOGGER = logging.getLogger(__name__)

API_PREFIX = "/api"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShoplistError)
    async def shoplist_error_handler(_: Request, exc: ShoplistError) -> Response:
        if exc.status_code == status.HTTP_204_NO_CONTENT:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": "Invalid request",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(aiosqlite.Error)
    async def store_error_handler(_: Request, exc: aiosqlite.Error) -> JSONResponse:
        LOGGER.error("Unhandled store error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Store operation failed"},
        )


def configure_fastapi_app(config: "AppConfig") -> FastAPI:
    """Configure and return the FastAPI application.

    :param config: Application configuration
    :return: Configured FastAPI application
    """
    security_manager = config.security_manager

    if not Path(config.database_path).parent.exists():
        Path(config.database_path).parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info(
            "Created directory for database at %s",
            Path(config.database_path).parent,
        )

    if not Path(config.database_path).exists():
        LOGGER.info("Database file does not exist at %s", config.database_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> "AsyncGenerator[Any, Any]":
        """Application lifespan manager.

        Opens the store connection and wires every router to it.
        """
        LOGGER.info("Shopping List API is starting")

        async with aiosqlite_connect(config.database_path) as db_connection:
            store = EntityStore(db_connection)
            await store.initialize_tables()

            roles = RoleResolver(store)
            engine = AuthorizationEngine(store, roles)
            validate = Validate(security_manager, engine)
            cascade = CascadeManager(store)

            auth_router = configure_auth_router(APIRouter(), store, security_manager)
            role_router = configure_role_router(APIRouter(), store, roles, validate)
            user_router = configure_user_router(
                APIRouter(),
                store,
                security_manager,
                roles,
                validate,
                cascade,
            )
            shopping_list_router = configure_shopping_list_router(
                APIRouter(),
                store,
                validate,
                cascade,
            )
            item_router = configure_item_router(APIRouter(), store, validate, cascade)
            seed_router = configure_seed_router(
                APIRouter(),
                store,
                security_manager,
                config.seeding_enabled,
            )

            app.include_router(auth_router, prefix=API_PREFIX, tags=["auth"])
            app.include_router(role_router, prefix=API_PREFIX, tags=["roles"])
            app.include_router(user_router, prefix=API_PREFIX, tags=["users"])
            app.include_router(
                shopping_list_router,
                prefix=API_PREFIX,
                tags=["shopping-lists"],
            )
            app.include_router(item_router, prefix=API_PREFIX, tags=["items"])
            app.include_router(seed_router, prefix=API_PREFIX, tags=["seed"])

            yield

            LOGGER.info("Shopping List API is shutting down")

    app = FastAPI(
        title="Shopping List API",
        version="0.0.1",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    @app.get("/")
    def read_root() -> str:
        return "Shopping List API"

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    configure_logging(config)
    return configure_fastapi_app(config)
