import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.api import router as api_router
from core import config
from core.auth import TokenCodec
from core.db import create_tables
from core.errors import ApiError, api_error_handler, validation_error_handler
from core.inventory_db import ExclusiveSession, SqlInventorySource
from services.inventory import InventoryGateway, InventoryQueryBuilder

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8800


class SinglePageStaticFiles(StaticFiles):
    """Serves the client bundle; unknown paths get index.html."""

    async def get_response(self, path, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


def build_inventory_gateway() -> InventoryGateway:
    source = SqlInventorySource(config.inventory_url(), query_timeout=config.inventory_query_timeout())
    session = ExclusiveSession(source, lock_timeout=config.inventory_lock_timeout())
    builder = InventoryQueryBuilder(config.inventory_view(), config.inventory_tenant_column())
    return InventoryGateway(session, builder)


def create_app(
    token_codec: Optional[TokenCodec] = None,
    inventory: Optional[InventoryGateway] = None,
    static_dir: Optional[str] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.inventory.session.close()

    app = FastAPI(
        lifespan=lifespan,
        title="Lamiere Inventory API",
        version="1.0",
        description="API autenticata per la consultazione della giacenza lamiere per cliente.",
    )
    app.state.token_codec = token_codec or TokenCodec(config.jwt_secret(), config.jwt_algorithm())
    app.state.inventory = inventory or build_inventory_gateway()

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Accept", "Content-Type"],
    )
    app.include_router(api_router)

    static_dir = static_dir or config.static_dir()
    if os.path.isdir(static_dir):
        app.mount("/", SinglePageStaticFiles(directory=static_dir, html=True), name="static")
    return app


app = create_app()


def main():
    import uvicorn
    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_tables()
    port = int(os.environ.get("PORT") or DEFAULT_PORT)
    logger.info("starting server on port %s", port)
    uvicorn.run("main:app", host="0.0.0.0", port=port, log_level=config.log_level().lower())


if __name__ == "__main__":
    main()
