"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
import quart
from journalise_backend.api.auth_api import \
    create_blueprint as create_auth_bp
from journalise_backend.api.diagnostics_api import \
    create_blueprint as create_diagnostics_bp
from journalise_backend.api.health_api import \
    create_blueprint as create_health_bp
from journalise_backend.api.manuscript_api import \
    create_blueprint as create_manuscript_bp
from journalise_backend.api.user_api import \
    create_blueprint as create_user_bp
from journalise_backend.auth_gate import AuthGate
from journalise_backend.collaborators import Collaborators
from journalise_backend.state_object import StateObject


def create_routes(logger: logging.Logger,
                  state_object: StateObject,
                  collaborators: Collaborators) -> quart.Blueprint:
    """
    Create and configure the API route blueprint for the application.

    This function initializes a Quart blueprint for the API routes and
    registers sub-blueprints. The diagnostics routes are only registered in
    development mode.

    Args:
        logger (logging.Logger): Logger instance for logging within the APIS.
        state_object (StateObject): Shared service state.
        collaborators (Collaborators): Startup-built shared handles.

    Returns:
        quart.Blueprint: The configured API blueprint with registered
                         sub-routes.
    """
    api_bp = quart.Blueprint("api_routes", __name__)

    auth_gate = AuthGate(logger, collaborators.token_issuer, state_object)

    api_bp.register_blueprint(create_auth_bp(logger, state_object,
                                             collaborators, auth_gate),
                              url_prefix="/auth")
    api_bp.register_blueprint(create_user_bp(logger, state_object,
                                             collaborators, auth_gate),
                              url_prefix="/user")
    api_bp.register_blueprint(create_manuscript_bp(logger, auth_gate),
                              url_prefix="/manuscripts")
    api_bp.register_blueprint(create_health_bp(logger, state_object,
                                               collaborators))

    if collaborators.debug:
        api_bp.register_blueprint(create_diagnostics_bp(logger,
                                                        collaborators.mailer))

    return api_bp
