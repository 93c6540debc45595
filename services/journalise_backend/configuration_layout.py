"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from journalise_common.configuration import configuration_setup
from journalise_common.logging_consts import LOGGING_VALID_LOG_LEVELS

ENVIRONMENT_DEVELOPMENT = "development"
ENVIRONMENT_PRODUCTION = "production"

DEFAULT_ALLOWED_ORIGINS = "http://localhost:5173,https://journalise.vercel.app"

CONFIGURATION_LAYOUT = configuration_setup.ConfigurationSetup(
    {
        "logging": [
            configuration_setup.ConfigurationSetupItem(
                "log_level", configuration_setup.ConfigItemDataType.STRING,
                valid_values=LOGGING_VALID_LOG_LEVELS, default_value="INFO")
        ],
        "server": [
            configuration_setup.ConfigurationSetupItem(
                "environment", configuration_setup.ConfigItemDataType.STRING,
                valid_values=[ENVIRONMENT_DEVELOPMENT, ENVIRONMENT_PRODUCTION],
                default_value=ENVIRONMENT_PRODUCTION),
            configuration_setup.ConfigurationSetupItem(
                "allowed_origins",
                configuration_setup.ConfigItemDataType.STRING_LIST,
                default_value=DEFAULT_ALLOWED_ORIGINS),
        ],
        "auth": [
            configuration_setup.ConfigurationSetupItem(
                "jwt_secret", configuration_setup.ConfigItemDataType.STRING,
                is_required=True, is_secret=True),
            configuration_setup.ConfigurationSetupItem(
                "token_expiry_days",
                configuration_setup.ConfigItemDataType.UNSIGNED_INT,
                default_value=7),
            configuration_setup.ConfigurationSetupItem(
                "verification_token_hours",
                configuration_setup.ConfigItemDataType.UNSIGNED_INT,
                default_value=24),
            configuration_setup.ConfigurationSetupItem(
                "reset_token_minutes",
                configuration_setup.ConfigItemDataType.UNSIGNED_INT,
                default_value=60),
            configuration_setup.ConfigurationSetupItem(
                "bcrypt_rounds",
                configuration_setup.ConfigItemDataType.UNSIGNED_INT,
                default_value=12),
        ],
        "email": [
            configuration_setup.ConfigurationSetupItem(
                "host", configuration_setup.ConfigItemDataType.STRING,
                default_value="smtp.gmail.com"),
            configuration_setup.ConfigurationSetupItem(
                "port", configuration_setup.ConfigItemDataType.UNSIGNED_INT,
                default_value=587),
            configuration_setup.ConfigurationSetupItem(
                "user", configuration_setup.ConfigItemDataType.STRING),
            configuration_setup.ConfigurationSetupItem(
                "password", configuration_setup.ConfigItemDataType.STRING,
                is_secret=True),
            configuration_setup.ConfigurationSetupItem(
                "sender_name", configuration_setup.ConfigItemDataType.STRING,
                default_value="Journal Platform"),
            configuration_setup.ConfigurationSetupItem(
                "use_starttls", configuration_setup.ConfigItemDataType.BOOLEAN,
                default_value=True),
            configuration_setup.ConfigurationSetupItem(
                "use_ssl", configuration_setup.ConfigItemDataType.BOOLEAN,
                default_value=False),
            configuration_setup.ConfigurationSetupItem(
                "timeout_seconds",
                configuration_setup.ConfigItemDataType.FLOAT,
                default_value=30.0),
        ],
        "frontend": [
            configuration_setup.ConfigurationSetupItem(
                "base_url", configuration_setup.ConfigItemDataType.STRING,
                default_value="http://localhost:3000")
        ],
    }
)
