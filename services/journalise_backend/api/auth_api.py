"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from journalise_backend.api.auth_api_view import AuthApiView
from journalise_backend.auth_gate import AuthGate
from journalise_backend.collaborators import Collaborators
from journalise_backend.state_object import StateObject


def create_blueprint(logger: logging.Logger,
                     state_object: StateObject,
                     collaborators: Collaborators,
                     auth_gate: AuthGate) -> Blueprint:
    """
    Creates and registers a Quart Blueprint for handling authentication.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        state_object (StateObject): Shared service state.
        collaborators (Collaborators): Startup-built shared handles.
        auth_gate (AuthGate): Guards the routes needing a logged in user.

    Returns:
        Blueprint: A Quart `Blueprint` object containing the registered routes.
    """
    view = AuthApiView(logger, state_object, collaborators)

    blueprint = Blueprint('auth_api', __name__)

    logger.debug("Registering Auth API routes:")

    logger.debug("=> /auth/register [POST]")

    @blueprint.route("/register", methods=["POST"])
    async def auth_register_request():
        return await view.register()

    logger.debug("=> /auth/verify-email/<token> [GET]")

    @blueprint.route("/verify-email/<token>", methods=["GET"])
    async def auth_verify_email_request(token: str):
        return await view.verify_email(token)

    logger.debug("=> /auth/resend-verification [POST]")

    @blueprint.route("/resend-verification", methods=["POST"])
    async def auth_resend_verification_request():
        return await view.resend_verification()

    logger.debug("=> /auth/login [POST]")

    @blueprint.route("/login", methods=["POST"])
    async def auth_login_request():
        return await view.login()

    logger.debug("=> /auth/forgot-password [POST]")

    @blueprint.route("/forgot-password", methods=["POST"])
    async def auth_forgot_password_request():
        return await view.forgot_password()

    logger.debug("=> /auth/reset-password/<token> [POST]")

    @blueprint.route("/reset-password/<token>", methods=["POST"])
    async def auth_reset_password_request(token: str):
        return await view.reset_password(token)

    logger.debug("=> /auth/me [GET]")

    @blueprint.route("/me", methods=["GET"])
    @auth_gate.required
    async def auth_me_request():
        return await view.me()

    logger.debug("=> /auth/logout [POST]")

    @blueprint.route("/logout", methods=["POST"])
    @auth_gate.required
    async def auth_logout_request():
        return await view.logout()

    return blueprint
