"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from .configuration import Configuration
from .configuration_setup import (ConfigItemDataType,
                                  ConfigurationSetup,
                                  ConfigurationSetupItem)

__all__ = ["Configuration", "ConfigItemDataType", "ConfigurationSetup",
           "ConfigurationSetupItem"]
