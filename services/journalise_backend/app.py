"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import asyncio
from http import HTTPStatus
import os
import random
import asyncpg
from quart import g, jsonify, Quart, request
from journalise_common.route_decorators import is_route_using_db
from journalise_backend.application import Application
from journalise_backend.database import create_schema

# Seconds to wait for a pooled connection before answering 503.
CONNECTION_ACQUIRE_TIMEOUT = 2.0

# Quart application instance
app = Quart(__name__)

SERVICE_APP: Application = Application(app)


class DatabaseConfig:
    """
    Configuration container for database connection settings.

    The values are loaded from environment variables and provide
    fallbacks if the variables are not set.

    Attributes:
        DB_USER (str): Database username, `JOURNALISE_DB_USER`. Defaults to
            "__INVALID__".
        DB_PASSWORD (str): Database password, `JOURNALISE_DB_PASSWORD`.
            Defaults to "__INVALID__".
        DB_NAME (str): Database name, `JOURNALISE_DB_NAME`. Defaults to
            "__INVALID__".
        DB_HOST (str): Database host address, `JOURNALISE_DB_HOST`. Defaults
            to "127.0.0.1".
        DB_PORT (int): Database port number, `JOURNALISE_DB_PORT`. Defaults
            to 5432.
    """
    # pylint: disable=too-few-public-methods
    DB_USER = os.getenv("JOURNALISE_DB_USER", "__INVALID__")
    DB_PASSWORD = os.getenv("JOURNALISE_DB_PASSWORD", "__INVALID__")
    DB_NAME = os.getenv("JOURNALISE_DB_NAME", "__INVALID__")
    DB_HOST = os.getenv("JOURNALISE_DB_HOST", "127.0.0.1")
    DB_PORT = int(os.getenv("JOURNALISE_DB_PORT", "5432"))


async def cancel_background_tasks():
    """
    Cancel and await the application's background task, if it exists.

    The task is looked up on the global ``app`` object under the attribute
    ``background_task``; its ``asyncio.CancelledError`` is suppressed.
    """
    task = getattr(app, "background_task", None)
    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


@app.before_serving
async def startup() -> None:
    """
    Code executed before Quart has begun serving http requests.

    returns:
        None
    """
    if not await SERVICE_APP.initialise():
        os._exit(1)

    app.db_pool = await create_db_pool(DatabaseConfig)
    SERVICE_APP.db_pool = app.db_pool

    try:
        await create_schema(app.db_pool, SERVICE_APP.logger)

    except (asyncpg.PostgresError, OSError) as ex:
        SERVICE_APP.logger.critical("Unable to create database schema: %s",
                                    ex)
        await app.db_pool.close()
        os._exit(1)

    app.background_task = asyncio.create_task(SERVICE_APP.run())


@app.after_serving
async def shutdown() -> None:
    """
    Code executed after Quart has stopped serving http requests.

    returns:
        None
    """
    SERVICE_APP.shutdown_event.set()

    if app is not None:
        await cancel_background_tasks()

    pool = getattr(app, "db_pool", None)
    if pool is not None:
        await pool.close()


@app.before_request
async def acquire_connection():
    """
    Acquire a database connection from the pool before handling a request.

    The connection is stored in the request context (``g.db``). Views marked
    with ``route_not_using_db`` (and requests matching no route) skip this
    step, as do CORS preflight requests.

    Returns:
        tuple | None: A 503 JSON error response if acquiring a connection
            times out, otherwise None to continue request processing.
    """
    view_func = app.view_functions.get(request.endpoint)
    if request.method == "OPTIONS" or view_func is None \
            or not is_route_using_db(view_func):
        return None

    try:
        g.db = await app.db_pool.acquire(timeout=CONNECTION_ACQUIRE_TIMEOUT)

    except asyncio.TimeoutError:
        SERVICE_APP.logger.warning("Timed out acquiring a database "
                                   "connection")
        return jsonify({"success": False,
                        "message": "Service unavailable"}), \
            HTTPStatus.SERVICE_UNAVAILABLE

    return None


@app.after_request
async def release_connection(response):
    """
    Release the database connection back to the connection pool.

    Args:
        response (quart.wrappers.Response): The response object generated
            by the request handler.

    Returns:
        quart.wrappers.Response: The same response object, unchanged.
    """
    db = getattr(g, "db", None)
    if db is not None:
        await app.db_pool.release(db)
        g.db = None
    return response


async def create_db_pool(config,
                         retries: int = 5,
                         base_delay: float = 1.0
                         ) -> asyncpg.pool.Pool:
    """
    Create and return an asyncpg connection pool with retries and error
    handling.

    Retry-able errors are retried with exponential backoff and jitter.
    Authentication failures and a missing database are not retried. If no
    pool can be created, background tasks are cancelled and the process
    exits.

    Args:
        config (DatabaseConfig): Database connection parameters.
        retries (int, optional): Maximum number of attempts. Defaults to 5.
        base_delay (float, optional): Base delay (in seconds) for exponential
            backoff. Defaults to 1.0.

    Returns:
        asyncpg.pool.Pool: A connection pool instance if successfully created.
    """
    logger = SERVICE_APP.logger

    for attempt in range(1, retries + 1):
        try:
            pool = await asyncpg.create_pool(
                user=config.DB_USER,
                password=config.DB_PASSWORD,
                database=config.DB_NAME,
                host=config.DB_HOST,
                port=config.DB_PORT,
                min_size=1,
                max_size=10,
                timeout=5.0
            )

            logger.info("Connected to database %s on %s:%d (attempt %d)",
                        config.DB_NAME, config.DB_HOST, config.DB_PORT,
                        attempt)

            return pool

        except asyncpg.InvalidPasswordError:
            logger.critical("Database authentication failed (check user/"
                            "password).")
            break

        except asyncpg.InvalidCatalogNameError:
            logger.critical("Database '%s' does not exist.", config.DB_NAME)
            break

        except asyncpg.CannotConnectNowError:
            logger.error("Database is starting up or cannot accept "
                         "connections right now.")

        except asyncio.TimeoutError:
            logger.error("Database connection timed out.")

        except OSError as ex:
            logger.error("Database network/connection error: %s", ex)

        except asyncpg.PostgresError as ex:
            logger.error("Database general Postgres error: %s", ex)

        # Retry-able errors
        delay = base_delay * (2 ** (attempt - 1))
        wait_time = delay + random.uniform(0, 0.3 * delay)

        if attempt < retries:
            logger.info("Retrying database connection in %.1fs...",
                        wait_time)
            await asyncio.sleep(wait_time)
            continue

        logger.critical("All database retries exhausted. Could not connect!")
        break

    if app is not None:
        await cancel_background_tasks()

    os._exit(1)
