"""ASGI application factory for consolenav."""

import hashlib
import logging
from typing import Any

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import (
    AsyncSessionConfig,
    SQLAlchemyAsyncConfig,
    SQLAlchemyPlugin,
)
from litestar import Litestar
from litestar.middleware.session.client_side import CookieBackendConfig

from consolenav.admin.navigation import NavigationAdminController
from consolenav.config import Settings, get_settings
from consolenav.db.base import Base
from consolenav.lib import observability
from consolenav.lib.exceptions import EXCEPTION_HANDLERS
from consolenav.lib.hooks import LOGFIRE_CONFIGURED, hooks
from consolenav.navigation.registry import registry

logger = logging.getLogger(__name__)


def create_session_config(
    secret_key: str,
    max_age: int = 86400,
    secure: bool = False,
    cookie_name: str = "session",
) -> CookieBackendConfig:
    """Create the encrypted cookie session shared with the console's login flow."""
    session_secret = hashlib.sha256(secret_key.encode()).digest()
    return CookieBackendConfig(
        secret=session_secret,
        key=cookie_name,
        max_age=max_age,
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def create_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    if "sqlite" in settings.db.url:
        engine_config = EngineConfig(echo=settings.db.echo)
    else:
        engine_kwargs: dict[str, Any] = dict(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.pool_overflow,
            pool_timeout=settings.db.pool_timeout,
            echo=settings.db.echo,
        )
        engine_config = EngineConfig(**engine_kwargs)

    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        metadata=Base.metadata,
        create_all=False,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=engine_config,
    )


def create_app(settings: Settings | None = None, db_config: SQLAlchemyAsyncConfig | None = None) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        settings: Settings to use (loaded from app.yaml and .env if omitted)
        db_config: Database configuration (built from ``settings.db`` if omitted)
    """
    settings = settings or get_settings()
    observability.configure(settings)

    db_config = db_config or create_db_config(settings)
    session_config = create_session_config(
        secret_key=settings.secret_key,
        max_age=settings.session.max_age,
        secure=not settings.debug,
        cookie_name=settings.session.cookie_name,
    )

    async def on_startup(_app: Litestar) -> None:
        """Warm the navigation cache."""
        try:
            async with db_config.get_session() as session:
                await registry.refresh(session)
        except Exception:
            logger.info("Navigation cache warm-up skipped (DB may not be migrated)", exc_info=True)

        observability.instrument_sqlalchemy(db_config.get_engine())
        await hooks.do_action(LOGFIRE_CONFIGURED)

    app = Litestar(
        on_startup=[on_startup],
        route_handlers=[NavigationAdminController],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        middleware=[session_config.middleware],
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    return app


def create_asgi_app():
    """Entry point for ASGI servers: the app, instrumented when logfire is on."""
    return observability.instrument_app(create_app())
