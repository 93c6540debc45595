"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from journalise_backend.api.user_api_view import UserApiView
from journalise_backend.auth_gate import AuthGate
from journalise_backend.collaborators import Collaborators
from journalise_backend.state_object import StateObject


def create_blueprint(logger: logging.Logger,
                     state_object: StateObject,
                     collaborators: Collaborators,
                     auth_gate: AuthGate) -> Blueprint:
    """
    Creates the blueprint for the user profile API. Every route requires an
    authenticated user.
    """
    view = UserApiView(logger, state_object, collaborators)

    blueprint = Blueprint('user_api', __name__)

    logger.debug("Registering User API routes:")

    logger.debug("=> /user/profile [GET]")

    @blueprint.route("/profile", methods=["GET"])
    @auth_gate.required
    async def user_profile_request():
        return await view.profile()

    logger.debug("=> /user/profile [PUT]")

    @blueprint.route("/profile", methods=["PUT"])
    @auth_gate.required
    async def user_update_profile_request():
        return await view.update_profile()

    logger.debug("=> /user/stats [GET]")

    @blueprint.route("/stats", methods=["GET"])
    @auth_gate.required
    async def user_stats_request():
        return await view.stats()

    return blueprint
