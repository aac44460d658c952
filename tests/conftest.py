"""Shared pytest fixtures."""

from unittest.mock import patch

import pytest
import yaml
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import consolenav.config as config_mod
from consolenav.config import clear_settings_cache
from consolenav.db.base import Base
from consolenav.db.models import PageEntry, Section
from consolenav.lib.hooks import hooks
from consolenav.navigation.registry import registry


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at an absent config file with a test secret key."""
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.delenv("CONSOLENAV_ENV", raising=False)
    config_mod._config_path_override = tmp_path / "absent.yaml"
    clear_settings_cache()
    yield
    config_mod._config_path_override = None
    clear_settings_cache()


@pytest.fixture(autouse=True)
def fresh_registry():
    """Each test starts with an empty navigation cache."""
    registry.invalidate()
    yield
    registry.invalidate()


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clean_hooks():
    """Save and restore hooks state around a test."""
    original_filters = {k: list(v) for k, v in hooks._filters.items()}
    original_actions = {k: list(v) for k, v in hooks._actions.items()}
    yield
    hooks._filters.clear()
    hooks._filters.update(original_filters)
    hooks._actions.clear()
    hooks._actions.update(original_actions)


@pytest.fixture
async def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_section(db_session):
    """Insert a section row directly, bypassing the services."""

    async def _make(key: str, sort_order: int, display_name: str | None = None, **fields):
        section = Section(
            key=key,
            display_name=display_name or key.title(),
            sort_order=sort_order,
            icon_name=fields.pop("icon_name", ""),
            collapsed_by_default=fields.pop("collapsed_by_default", False),
        )
        db_session.add(section)
        await db_session.commit()
        return section

    return _make


@pytest.fixture
def make_page(db_session):
    """Insert a page entry row directly, bypassing the services."""

    async def _make(key: str, section_key: str | None, sort_order: int, visible: bool = True, **fields):
        page = PageEntry(
            key=key,
            title=fields.pop("title", key.title()),
            route=fields.pop("route", f"/{key}"),
            icon_name=fields.pop("icon_name", ""),
            permission=fields.pop("permission", ""),
            section_key=section_key,
            sort_order=sort_order,
            visible=visible,
            **fields,
        )
        db_session.add(page)
        await db_session.commit()
        return page

    return _make


@pytest.fixture
def failing_commit(db_session):
    """Make the next commit fail like a dropped database connection."""
    from sqlalchemy.exc import OperationalError

    def _arm():
        return patch.object(
            db_session,
            "commit",
            side_effect=OperationalError("COMMIT", {}, Exception("database is locked")),
        )

    return _arm
