"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import logging
import quart
from journalise_common.base_api_view import BaseApiView
from journalise_backend.data_services.manuscript_data_service import \
    ManuscriptDataService


class ManuscriptApiView(BaseApiView):
    """ Manuscript listing and submission (placeholder data). """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger.getChild(__name__)
        self._service = ManuscriptDataService()

    async def list_manuscripts(self):
        return self._respond(self._service.list_manuscripts(quart.g.user))

    async def submit_manuscript(self):
        body = await self._get_json_body()
        self._logger.info("Manuscript submitted by %s", quart.g.user.email)
        return self._respond(self._service.submit_manuscript(quart.g.user,
                                                             body))
