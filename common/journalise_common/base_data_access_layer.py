"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import abc
import contextlib
import logging
import asyncpg
from journalise_common.service_health_enums import ComponentDegradationLevel


class BaseDataAccessLayer(abc.ABC):
    """
    Base class for data access layers working on a single asyncpg
    connection.

    Subclasses wrap each query in ``_health_tracking`` so that database
    faults are logged and reflected in the service state object before the
    exception continues to the caller.
    """

    def __init__(self, db, logger: logging.Logger, state_object):
        self._db = db
        self._logger: logging.Logger = logger.getChild(__name__)
        self._state_object = state_object

    @contextlib.contextmanager
    def _health_tracking(self, operation: str):
        """
        Record the outcome of a database operation on the state object.

        Integrity errors (e.g. unique violations) are caller errors and leave
        the health untouched; all other database errors degrade it.

        Args:
            operation (str): Human readable name used in logs and health
                             details.
        """
        try:
            yield

        except asyncpg.IntegrityConstraintViolationError:
            self._mark_database_operational()
            raise

        except (asyncpg.PostgresConnectionError,
                asyncpg.InterfaceError,
                OSError) as ex:
            self._logger.exception("Database connection error during %s: %s",
                                   operation, ex)
            self._state_object.database_health = \
                ComponentDegradationLevel.FULLY_DEGRADED
            self._state_object.database_health_state_str = \
                "Database unreachable"
            raise

        except asyncpg.PostgresError as ex:
            self._logger.exception("Database error during %s: %s",
                                   operation, ex)
            self._state_object.database_health = \
                ComponentDegradationLevel.PART_DEGRADED
            self._state_object.database_health_state_str = \
                f"Database operation failed ({operation})"
            raise

        else:
            self._mark_database_operational()

    def _mark_database_operational(self) -> None:
        if self._state_object.database_health != \
                ComponentDegradationLevel.FULLY_DEGRADED:
            self._state_object.database_health = ComponentDegradationLevel.NONE
            self._state_object.database_health_state_str = \
                "Database operational"
