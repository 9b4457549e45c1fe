import json
import logging
import sys

import pytest
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from app.db.database import build_engine
from app.middleware.logging import JsonFormatter


def test_build_engine_sqlite_uses_single_connection():
    engine = build_engine("sqlite+aiosqlite://")

    assert isinstance(engine.sync_engine.pool, StaticPool)


def test_build_engine_postgres_uses_asyncpg():
    engine = build_engine("postgresql+asyncpg://u:p@db:5432/acq")

    assert engine.dialect.driver == "asyncpg"
    assert not isinstance(engine.sync_engine.pool, StaticPool)


@pytest.mark.asyncio
async def test_in_memory_sqlite_survives_reconnect():
    engine = build_engine("sqlite+aiosqlite://")
    try:
        async with engine.begin() as conn:
            await conn.execute(text("CREATE TABLE scratch_rows (id INTEGER)"))
            await conn.execute(text("INSERT INTO scratch_rows VALUES (1)"))
        async with engine.connect() as conn:
            count = await conn.scalar(text("SELECT COUNT(*) FROM scratch_rows"))
    finally:
        await engine.dispose()

    assert count == 1


def _record(msg, exc_info=None):
    return logging.LogRecord("acquisitions.requests", logging.INFO, __file__, 1, msg, None, exc_info)


def test_json_formatter_merges_dict_messages():
    line = json.loads(JsonFormatter().format(_record({"http_code": 200, "username": "bee@hive.io"})))

    assert line["level"] == "INFO"
    assert line["logger"] == "acquisitions.requests"
    assert line["http_code"] == 200
    assert line["username"] == "bee@hive.io"


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("db exploded")
    except RuntimeError:
        record = _record("request failed", exc_info=sys.exc_info())

    line = json.loads(JsonFormatter().format(record))

    assert line["message"] == "request failed"
    assert "RuntimeError: db exploded" in line["exception"]
