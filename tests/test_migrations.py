"""Verify the Alembic migration chain for the navigation tables."""

import importlib.util
from pathlib import Path

from consolenav.db.base import Base

VERSIONS_DIR = Path(__file__).resolve().parent.parent / "consolenav" / "alembic" / "versions"


def _load_migrations():
    """Return (filename, module) for every migration script."""
    migrations = []
    for path in sorted(VERSIONS_DIR.glob("*.py")):
        if path.name == "__init__.py":
            continue
        spec = importlib.util.spec_from_file_location(path.stem, path)
        mod = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(mod)
        migrations.append((path.name, mod))
    return migrations


def test_no_duplicate_revision_ids():
    revisions = [mod.revision for _, mod in _load_migrations()]

    assert len(revisions) == len(set(revisions)), f"Duplicate revision IDs: {revisions}"


def test_single_root_and_head():
    down_revs = {mod.revision: mod.down_revision for _, mod in _load_migrations()}

    referenced = {d for d in down_revs.values() if d is not None}
    heads = set(down_revs) - referenced
    roots = [rev for rev, down in down_revs.items() if down is None]

    assert len(heads) == 1, f"Expected 1 head, found {heads}"
    assert len(roots) == 1, f"Expected 1 root, found {roots}"


def test_migrations_define_upgrade_and_downgrade():
    for name, mod in _load_migrations():
        assert callable(getattr(mod, "upgrade", None)), name
        assert callable(getattr(mod, "downgrade", None)), name


def test_models_cover_navigation_tables():
    assert {"nav_sections", "nav_page_entries"} <= set(Base.metadata.tables)


def test_upgrade_and_downgrade_against_configured_database(tmp_path, temp_app_yaml):
    import sqlite3

    from alembic import command
    from alembic.config import Config

    from consolenav.config import clear_settings_cache, set_config_path

    db_path = tmp_path / "migrated.db"
    set_config_path(temp_app_yaml({"db": {"url": f"sqlite+aiosqlite:///{db_path}"}}))
    clear_settings_cache()

    cfg = Config()
    cfg.set_main_option("script_location", str(VERSIONS_DIR.parent))

    command.upgrade(cfg, "head")
    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"nav_sections", "nav_page_entries"} <= tables

    command.downgrade(cfg, "base")
    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert not {"nav_sections", "nav_page_entries"} & tables
