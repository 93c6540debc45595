"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable
from .base import Base


def schema_statements() -> list[str]:
    """
    Render idempotent PostgreSQL DDL for every table model.

    Returns:
        list[str]: CREATE TABLE / CREATE INDEX statements, tables first.
    """
    dialect = postgresql.dialect()
    statements: list[str] = []

    for table in Base.metadata.sorted_tables:
        statements.append(str(CreateTable(table, if_not_exists=True)
                              .compile(dialect=dialect)).strip())
        for index in sorted(table.indexes, key=lambda idx: idx.name):
            statements.append(str(CreateIndex(index, if_not_exists=True)
                                  .compile(dialect=dialect)).strip())

    return statements


async def create_schema(pool, logger: logging.Logger) -> None:
    """
    Create missing tables and indexes.

    Args:
        pool: asyncpg pool to run the statements on.
        logger (logging.Logger): Logger for progress messages.
    """
    async with pool.acquire() as connection:
        async with connection.transaction():
            for statement in schema_statements():
                logger.debug("Schema: %s", statement.splitlines()[0])
                await connection.execute(statement)

    logger.info("Database schema is up to date")
