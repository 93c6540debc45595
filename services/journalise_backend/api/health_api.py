"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from journalise_common.route_decorators import route_not_using_db
from journalise_backend.api.health_api_view import HealthApiView
from journalise_backend.collaborators import Collaborators
from journalise_backend.state_object import StateObject


def create_blueprint(logger: logging.Logger,
                     state_object: StateObject,
                     collaborators: Collaborators) -> Blueprint:
    """
    Creates and returns a Quart Blueprint for the Health Status API.

    This function initializes a `HealthApiView` instance and registers an
    asynchronous route `/health` for handling health check requests. The
    route does not acquire a database connection.

    Args:
        logger (logging.Logger): The logger instance used for logging API
                                 registration.
        state_object (StateObject): The application state object passed to the
                                    view.
        collaborators (Collaborators): Startup-built shared handles.

    Returns:
        Blueprint: A Quart Blueprint instance with the registered health status
                   route.
    """
    view = HealthApiView(logger, state_object, collaborators)

    blueprint = Blueprint('health_api', __name__)

    logger.debug("Registering Health Status API:")
    logger.debug("=> /health [GET]")

    @blueprint.route('/health', methods=['GET'])
    @route_not_using_db
    async def health_request():
        return await view.health()

    return blueprint
