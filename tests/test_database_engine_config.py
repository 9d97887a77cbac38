from coallytasks.config import Settings


def test_get_engine_kwargs_sqlite_has_check_same_thread():
    from coallytasks.database import database as db

    kwargs = db.get_engine_kwargs(Settings(jwt_secret="s", database_url="sqlite:///./coallytasks.db"))
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_uses_configured_pooling():
    from coallytasks.database import database as db

    settings = Settings(
        jwt_secret="s",
        database_url="postgresql+psycopg://u:p@localhost:5432/db",
        db_pool_size=7,
        db_max_overflow=3,
        db_pool_timeout_sec=10,
    )
    kwargs = db.get_engine_kwargs(settings)
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 7
    assert kwargs["max_overflow"] == 3
    assert kwargs["pool_timeout"] == 10


def test_sqlite_url_detection():
    from coallytasks.database import database as db

    assert db._is_sqlite_url("sqlite:///./coallytasks.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_init_db_creates_tables_on_file_database(tmp_path):
    """A fresh SQLite file gets both tables and enforces foreign keys."""
    from sqlalchemy import inspect, text
    from coallytasks.database import database as db

    settings = Settings(jwt_secret="s", database_url=f"sqlite:///{tmp_path / 'app.db'}")
    engine = db.build_engine(settings)
    try:
        db.init_db(engine, settings)

        assert {"users", "tasks"} <= set(inspect(engine).get_table_names())
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    finally:
        engine.dispose()


def test_init_db_runs_migrations_from_configured_ini(tmp_path, monkeypatch):
    """Migrations use ALEMBIC_INI rather than whatever alembic.ini sits in the cwd."""
    from alembic import command
    from coallytasks.database import database as db

    ini = tmp_path / "migrations.ini"
    ini.write_text("[alembic]\nscript_location = alembic\n")
    calls = []
    monkeypatch.setattr(command, "upgrade", lambda cfg, rev: calls.append((cfg, rev)))

    settings = Settings(
        jwt_secret="s",
        database_url="postgresql://u:p@db/tasks",
        run_migrations=True,
        alembic_ini=str(ini),
    )
    db.init_db(None, settings)

    assert len(calls) == 1
    cfg, rev = calls[0]
    assert rev == "head"
    assert cfg.config_file_name == str(ini)
    assert cfg.get_main_option("sqlalchemy.url") == "postgresql://u:p@db/tasks"
