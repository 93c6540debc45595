"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
from pydantic import ValidationError
import quart
from journalise_common.base_api_view import BaseApiView
from journalise_backend.api.request_models import (EmailRequest,
                                                   LoginRequest,
                                                   PasswordResetRequest,
                                                   RegisterRequest)
from journalise_backend.collaborators import Collaborators
from journalise_backend.data_access_layer.user_data_access_layer import \
    UserDataAccessLayer
from journalise_backend.data_services.account_data_service import \
    AccountDataService
from journalise_backend.state_object import StateObject


class AuthApiView(BaseApiView):
    """
    API view for registration, email verification, login and password
    recovery.

    Request bodies are validated in full before any account logic runs; a
    failure returns every field error at once.
    """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject,
                 collaborators: Collaborators) -> None:
        """
        Initialize the Auth API view with a child logger.

        Args:
            logger (logging.Logger): Base logger instance.
            state_object (StateObject): Shared service state.
            collaborators (Collaborators): Startup-built shared handles.
        """
        self._logger = logger.getChild(__name__)
        self._state_object = state_object
        self._collaborators = collaborators

    async def register(self):
        """
        Handle account registration.

        Returns:
            tuple: (JSON response, HTTP status code)
                - 201 Created: New unverified account, email sent.
                - 200 OK: Existing unverified account refreshed.
                - 400 Bad Request: Validation errors.
                - 409 Conflict: A verified account holds the email.
        """
        try:
            req = RegisterRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        outcome = await self._account_service().register(
            req.full_name, req.email, req.password, req.role, req.bio,
            req.expertise)
        return self._respond(outcome)

    async def verify_email(self, token: str):
        outcome = await self._account_service().verify_email(token)
        return self._respond(outcome)

    async def resend_verification(self):
        try:
            req = EmailRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        outcome = await self._account_service().resend_verification(req.email)
        return self._respond(outcome)

    async def login(self):
        """
        Handle login with email and password.

        Returns:
            tuple: (JSON response, HTTP status code)
                - 200 OK: Token and public user record.
                - 400 Bad Request: Validation errors.
                - 401 Unauthorized: Bad credentials, unverified or
                  deactivated account.
        """
        try:
            req = LoginRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        outcome = await self._account_service().login(req.email, req.password)
        return self._respond(outcome)

    async def forgot_password(self):
        try:
            req = EmailRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        outcome = await self._account_service().forgot_password(req.email)
        return self._respond(outcome)

    async def reset_password(self, token: str):
        try:
            req = PasswordResetRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        outcome = await self._account_service().reset_password(token,
                                                               req.password)
        return self._respond(outcome)

    async def me(self):
        """ Return the authenticated caller's public record. """
        return self._respond({
            "success": True,
            "user": quart.g.user.public_view(),
            "status": HTTPStatus.OK,
        })

    async def logout(self):
        """ Acknowledge a logout; tokens are discarded by the client. """
        return self._respond({
            "success": True,
            "message": "Logged out successfully!",
            "status": HTTPStatus.OK,
        })

    def _account_service(self) -> AccountDataService:
        user_dal = UserDataAccessLayer(quart.g.db, self._logger,
                                       self._state_object)
        return AccountDataService(user_dal, self._collaborators, self._logger)
