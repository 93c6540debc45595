"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
import quart
from quart import Blueprint
from journalise_common.base_api_view import BaseApiView
from journalise_common.route_decorators import route_not_using_db
from journalise_backend.exceptions import EmailDeliveryError
from journalise_backend.mailer import Mailer, TEMPLATE_PASSWORD_RESET


class DiagnosticsApiView(BaseApiView):
    """ Development-only helpers for checking the mail setup. """

    def __init__(self, logger: logging.Logger, mailer: Mailer) -> None:
        self._logger = logger.getChild(__name__)
        self._mailer = mailer

    async def test_email(self):
        """
        Send a sample password reset email to ``?email=`` (or to the
        configured SMTP user).
        """
        recipient = quart.request.args.get("email") or \
            self._mailer.settings.user
        if not recipient:
            return self._respond({
                "success": False,
                "message": ("Please provide email parameter: "
                            "/api/test-email?email=your@email.com"),
                "status": HTTPStatus.BAD_REQUEST,
            })

        try:
            await self._mailer.send(
                recipient, TEMPLATE_PASSWORD_RESET,
                {"fullName": "Test User",
                 "resetUrl": "https://example.com/test-reset-link"})

        except EmailDeliveryError as ex:
            self._logger.error("Test email failed: %s", ex)
            return self._respond({
                "success": False,
                "message": "Test email failed",
                "error": str(ex),
                "status": HTTPStatus.INTERNAL_SERVER_ERROR,
            })

        return self._respond({
            "success": True,
            "message": f"Test email sent successfully to {recipient}",
            "status": HTTPStatus.OK,
        })


def create_blueprint(logger: logging.Logger, mailer: Mailer) -> Blueprint:
    """ Creates the blueprint holding the development diagnostics routes. """
    view = DiagnosticsApiView(logger, mailer)

    blueprint = Blueprint('diagnostics_api', __name__)

    logger.debug("Registering Diagnostics API:")
    logger.debug("=> /test-email [GET]")

    @blueprint.route('/test-email', methods=['GET'])
    @route_not_using_db
    async def test_email_request():
        return await view.test_email()

    return blueprint
