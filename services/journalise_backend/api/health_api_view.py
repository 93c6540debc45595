"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
import http
import json
import logging
import time
from quart import request, Response
from journalise_common.base_api_view import BaseApiView
from journalise_common.service_health_enums import (ServiceDegradationStatus,
                                                    ComponentDegradationLevel)
from journalise_backend.collaborators import Collaborators
from journalise_backend.state_object import StateObject


class HealthApiView(BaseApiView):
    """
    A view that provides health check information for the application.

    This includes the health status of core components like the database and
    the service itself, system uptime and application version, together with
    a liveness message and a CORS diagnostic echo of the request origin.

    Attributes:
        _logger (logging.Logger): Logger instance for recording events.
        _state_object (StateObject): Shared state object containing health and
                                     version info.
        _collaborators (Collaborators): Source of the CORS and front end
                                        settings echoed back.
    """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject,
                 collaborators: Collaborators) -> None:
        """
        Initializes the HealthApiView with logging and application state.

        Args:
            logger (logging.Logger): Logger for emitting health check logs.
            state_object (StateObject): Application-wide state for tracking
                                        health, startup time, etc.
            collaborators (Collaborators): Startup-built shared handles.
        """
        self._logger = logger.getChild(__name__)
        self._state_object = state_object
        self._collaborators = collaborators

    async def health(self):
        """
        Performs a health check and returns a JSON response with system status.

        The request never touches the database; the database status reported
        is the one recorded by the data access layer and the background probe.

        Returns:
            quart.Response: JSON response with the overall health, dependency
                            statuses, current issues (if any), uptime, version
                            and CORS diagnostics.
        """
        uptime: int = int(time.time()) - self._state_object.startup_time
        issues: list = []

        # Check database health
        if self._state_object.database_health != \
                ComponentDegradationLevel.NONE:
            issues.append(
                {"component": "database",
                 "status": self._state_object.database_health.value,
                 "details": self._state_object.database_health_state_str})

        # Check service health
        if (self._state_object.service_health !=
                ComponentDegradationLevel.NONE):
            issues.append(
                {"component": "service",
                 "status": self._state_object.service_health.value,
                 "details": self._state_object.service_health_state_str})

        if issues:
            status = ServiceDegradationStatus.CRITICAL.value \
                if any(issue["status"] ==
                       ComponentDegradationLevel.FULLY_DEGRADED.value
                       for issue in issues)\
                else ServiceDegradationStatus.DEGRADED.value
        else:
            status = ServiceDegradationStatus.HEALTHY.value

        origin = request.headers.get("Origin")
        allowed_origins = list(self._collaborators.allowed_origins)

        response: dict = {
            "message": "Server is running!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": self._state_object.environment,
            "status": status,
            "dependencies": {
                "database": self._state_object.database_health.value,
                "service": self._state_object.service_health.value
            },
            "issues": issues if issues else None,
            "uptime_seconds": uptime,
            "version": self._state_object.version,
            "cors": {
                "requestOrigin": origin or "No origin header",
                "allowedOrigins": allowed_origins,
                "isOriginAllowed": origin in allowed_origins,
                "frontendUrl": self._collaborators.frontend_url,
            },
        }

        return Response(json.dumps(response),
                        status=http.HTTPStatus.OK,
                        content_type="application/json")
