"""
Schema creation.

The tables are declared once as SQLAlchemy models; at startup their
PostgreSQL DDL is rendered and executed over asyncpg.
"""

import asyncpg
import structlog
from typing import List

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from catalog_api.src.models.auth import Base
# Registers the books table on Base.metadata
from catalog_api.src.models import book  # noqa: F401

logger = structlog.get_logger(__name__)


def render_create_statements() -> List[str]:
    """
    Render ``CREATE TABLE IF NOT EXISTS`` statements for every model.

    Returns:
        DDL statements in dependency order
    """
    dialect = postgresql.dialect()
    return [
        str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip()
        for table in Base.metadata.sorted_tables
    ]


async def create_tables(pool: asyncpg.Pool) -> None:
    """
    Create missing tables.

    Args:
        pool: asyncpg connection pool
    """
    statements = render_create_statements()

    async with pool.acquire() as conn:
        for statement in statements:
            await conn.execute(statement)

    logger.info("database_schema_ready", tables=[t.name for t in Base.metadata.sorted_tables])
