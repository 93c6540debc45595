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
from journalise_backend.api.request_models import UpdateProfileRequest
from journalise_backend.collaborators import Collaborators
from journalise_backend.data_access_layer.user_data_access_layer import \
    UserDataAccessLayer
from journalise_backend.data_services.account_data_service import \
    AccountDataService
from journalise_backend.data_services.manuscript_data_service import \
    ManuscriptDataService
from journalise_backend.state_object import StateObject


class UserApiView(BaseApiView):
    """ Profile and statistics endpoints for the logged in user. """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject,
                 collaborators: Collaborators) -> None:
        self._logger = logger.getChild(__name__)
        self._state_object = state_object
        self._collaborators = collaborators
        self._manuscript_service = ManuscriptDataService()

    async def profile(self):
        return self._respond({
            "success": True,
            "user": quart.g.user.public_view(),
            "status": HTTPStatus.OK,
        })

    async def update_profile(self):
        """
        Update the caller's full name, bio and expertise. Only the fields
        present in the body are changed.

        Returns:
            tuple: (JSON response, HTTP status code)
        """
        try:
            req = UpdateProfileRequest(**await self._get_json_body())

        except ValidationError as ex:
            return self._validation_failure(ex)

        user_dal = UserDataAccessLayer(quart.g.db, self._logger,
                                       self._state_object)
        account_service = AccountDataService(user_dal, self._collaborators,
                                             self._logger)

        outcome = await account_service.update_profile(quart.g.user,
                                                       **req.changes())
        return self._respond(outcome)

    async def stats(self):
        return self._respond(
            self._manuscript_service.user_stats(quart.g.user))
