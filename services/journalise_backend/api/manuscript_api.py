"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from journalise_backend.api.manuscript_api_view import ManuscriptApiView
from journalise_backend.auth_gate import AuthGate


def create_blueprint(logger: logging.Logger,
                     auth_gate: AuthGate) -> Blueprint:
    """ Creates the blueprint for the manuscripts API. """
    view = ManuscriptApiView(logger)

    blueprint = Blueprint('manuscript_api', __name__)

    logger.debug("Registering Manuscript API routes:")

    logger.debug("=> /manuscripts [GET]")

    @blueprint.route("", methods=["GET"])
    @auth_gate.required
    async def manuscripts_list_request():
        return await view.list_manuscripts()

    logger.debug("=> /manuscripts [POST]")

    @blueprint.route("", methods=["POST"])
    @auth_gate.required
    async def manuscripts_submit_request():
        return await view.submit_manuscript()

    return blueprint
