"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import asyncio
from datetime import timedelta
import logging
import os
import sys
import time
import typing
import asyncpg
from quart_cors import cors
from journalise_common import __version__
from journalise_common.configuration import Configuration
from journalise_common.base_microservice_application \
    import BaseMicroserviceApplication
from journalise_common.logging_consts import LOGGING_DATETIME_FORMAT_STRING, \
                                             LOGGING_DEFAULT_LOG_LEVEL, \
                                             LOGGING_LOG_FORMAT_STRING
from journalise_common.service_health_enums import ComponentDegradationLevel
from journalise_backend.api import create_routes
from journalise_backend.collaborators import Collaborators
from journalise_backend.configuration_layout import (CONFIGURATION_LAYOUT,
                                                     ENVIRONMENT_DEVELOPMENT)
from journalise_backend.error_handlers import register_error_handlers
from journalise_backend.mailer import Mailer, MailSettings
from journalise_backend.security import PasswordHasher, TokenIssuer
from journalise_backend.state_object import StateObject

# Seconds between background database probes.
DATABASE_PROBE_INTERVAL = 30.0

DATABASE_PROBE_TIMEOUT = 5.0

CORS_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Content-Type", "Authorization", "X-Requested-With",
                        "Accept", "Origin", "Cache-Control", "X-File-Name"]
CORS_EXPOSED_HEADERS = ["Content-Length", "X-JSON"]
CORS_MAX_AGE = 86400


class Application(BaseMicroserviceApplication):
    """ Journalise Backend Service """

    def __init__(self, quart_instance):
        super().__init__()
        self._quart_instance = quart_instance
        self._config: typing.Optional[Configuration] = None
        self._state_object: StateObject = StateObject()
        self._collaborators: typing.Optional[Collaborators] = None
        self._db_pool: typing.Optional[asyncpg.Pool] = None
        self._last_database_probe: float = 0.0

        self._logger = logging.getLogger(__name__)
        log_format = logging.Formatter(LOGGING_LOG_FORMAT_STRING,
                                       LOGGING_DATETIME_FORMAT_STRING)
        console_stream = logging.StreamHandler(sys.stdout)
        console_stream.setFormatter(log_format)
        self._logger.setLevel(LOGGING_DEFAULT_LOG_LEVEL)
        self._logger.propagate = True
        self._logger.addHandler(console_stream)

    @property
    def state_object(self) -> StateObject:
        return self._state_object

    @property
    def collaborators(self) -> typing.Optional[Collaborators]:
        return self._collaborators

    @property
    def db_pool(self) -> typing.Optional[asyncpg.Pool]:
        """ Connection pool probed by the background health check. """
        return self._db_pool

    @db_pool.setter
    def db_pool(self, pool: typing.Optional[asyncpg.Pool]) -> None:
        self._db_pool = pool

    async def _initialise(self) -> bool:
        self._logger.info("Journalise Backend Service %s", __version__)

        # Acceptable values
        truths: set = {"1", "true", "yes", "on"}
        falses: set = {"0", "false", "no", "off"}

        config_file = os.getenv("JOURNALISE_CONFIG_FILE", None)
        raw_required = os.getenv("JOURNALISE_CONFIG_FILE_REQUIRED",
                                 "false").strip().lower()

        if raw_required in truths:
            config_file_required: bool = True
        elif raw_required in falses:
            config_file_required: bool = False
        else:
            print(f"[FATAL ERROR] Invalid value for "
                  f"JOURNALISE_CONFIG_FILE_REQUIRED: '{raw_required}'",
                  flush=True)
            return False

        if not config_file and config_file_required:
            print("[FATAL ERROR] Configuration file missing!", flush=True)
            return False

        self._config = Configuration()
        self._config.configure(CONFIGURATION_LAYOUT,
                               config_file,
                               config_file_required)

        try:
            self._config.process_config()

        except ValueError as ex:
            self._logger.critical("Configuration error : %s", ex)
            return False

        self._logger.setLevel(self._config.get_entry("logging", "log_level"))

        self._display_configuration_details()

        self._state_object.version = __version__
        self._state_object.environment = \
            self._config.get_entry("server", "environment")

        try:
            self._collaborators = self._build_collaborators()

        except ValueError as ex:
            self._logger.critical("Configuration error : %s", ex)
            return False

        await self._collaborators.mailer.verify_connection()

        cors(self._quart_instance,
             allow_origin=self._collaborators.allowed_origins,
             allow_credentials=True,
             allow_methods=CORS_ALLOWED_METHODS,
             allow_headers=CORS_ALLOWED_HEADERS,
             expose_headers=CORS_EXPOSED_HEADERS,
             max_age=CORS_MAX_AGE)

        self._quart_instance.register_blueprint(
            create_routes(self._logger, self._state_object,
                          self._collaborators),
            url_prefix="/api")
        register_error_handlers(self._quart_instance, self._logger)

        return True

    async def _main_loop(self) -> None:
        """ Probe the database at a fixed interval. """
        if self._db_pool is None:
            return

        now = time.monotonic()
        if now - self._last_database_probe < DATABASE_PROBE_INTERVAL:
            return

        self._last_database_probe = now
        await self._probe_database()

    async def _shutdown(self):
        """ Shutdown logic. """

    async def _probe_database(self) -> None:
        try:
            async with self._db_pool.acquire(
                    timeout=DATABASE_PROBE_TIMEOUT) as connection:
                await connection.fetchval("SELECT 1")

        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError,
                asyncio.TimeoutError) as ex:
            self._logger.warning("Database probe failed: %s", ex)
            self._state_object.database_health = \
                ComponentDegradationLevel.FULLY_DEGRADED
            self._state_object.database_health_state_str = \
                f"Database probe failed: {ex}"
            return

        if self._state_object.database_health != \
                ComponentDegradationLevel.NONE:
            self._logger.info("Database connectivity restored")
            self._state_object.database_health = \
                ComponentDegradationLevel.NONE
            self._state_object.database_health_state_str = ""

    def _build_collaborators(self) -> Collaborators:
        config = self._config

        token_issuer = TokenIssuer(
            config.get_entry("auth", "jwt_secret"),
            timedelta(days=config.get_entry("auth", "token_expiry_days")))

        mail_settings = MailSettings(
            host=config.get_entry("email", "host"),
            port=config.get_entry("email", "port"),
            user=config.get_entry("email", "user"),
            password=config.get_entry("email", "password"),
            sender_name=config.get_entry("email", "sender_name"),
            use_starttls=config.get_entry("email", "use_starttls"),
            use_ssl=config.get_entry("email", "use_ssl"),
            timeout_seconds=config.get_entry("email", "timeout_seconds"))

        return Collaborators(
            token_issuer=token_issuer,
            password_hasher=PasswordHasher(
                config.get_entry("auth", "bcrypt_rounds")),
            mailer=Mailer(self._logger, mail_settings),
            frontend_url=config.get_entry("frontend", "base_url"),
            verification_token_lifetime=timedelta(
                hours=config.get_entry("auth", "verification_token_hours")),
            reset_token_lifetime=timedelta(
                minutes=config.get_entry("auth", "reset_token_minutes")),
            debug=self._state_object.environment == ENVIRONMENT_DEVELOPMENT,
            allowed_origins=config.get_entry("server", "allowed_origins"))

    def _display_configuration_details(self):
        self._logger.info("Configuration")
        self._logger.info("=============")

        current_section = None
        for section, item, value in self._config.describe():
            if section != current_section:
                self._logger.info("[%s]", section)
                current_section = section
            self._logger.info("=> %-28s : %s", item, value)
