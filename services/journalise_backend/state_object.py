"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import time
from dataclasses import dataclass, field
from journalise_common.service_health_enums import ComponentDegradationLevel


@dataclass
class StateObject:
    """
    Process wide service state shared by the views, data access layers and
    the background health probe.

    Attributes:
        service_health (ComponentDegradationLevel): Health of the service
                                                    itself.
        service_health_state_str (str): Description of the service health.
        database_health (ComponentDegradationLevel): Health of the database.
        database_health_state_str (str): Description of the database health.
        version (str): The version of the service.
        environment (str): Deployment environment (development/production).
        startup_time (int): Unix time the service was started.
    """
    service_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    service_health_state_str: str = ""
    database_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    database_health_state_str: str = ""
    version: str = ""
    environment: str = "production"
    startup_time: int = field(default_factory=lambda: int(time.time()))
