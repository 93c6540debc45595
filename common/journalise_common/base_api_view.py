"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import typing
import pydantic
import quart

# Key carrying the HTTP status in service outcome dictionaries.
OUTCOME_STATUS_KEY = "status"

VALIDATION_FAILED_MESSAGE = "Please fix the following validation errors:"


class BaseApiView:
    """
    Base class for API views.

    Views receive outcome dictionaries from the data services. Each outcome
    carries its HTTP status under ``status``; everything else is the JSON
    body returned to the caller.
    """
    # pylint: disable=too-few-public-methods

    @staticmethod
    async def _get_json_body() -> dict:
        """
        Return the request JSON body, or an empty dict when the body is
        missing or not a JSON object.
        """
        data = await quart.request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _respond(outcome: dict) -> tuple:
        """
        Convert a service outcome into a Quart response tuple.

        Args:
            outcome (dict): Outcome with a ``status`` entry.

        Returns:
            tuple: (JSON response, HTTP status code)
        """
        body = {k: v for k, v in outcome.items() if k != OUTCOME_STATUS_KEY}
        status = outcome.get(OUTCOME_STATUS_KEY, HTTPStatus.OK)
        return quart.jsonify(body), status

    @staticmethod
    def validation_errors(ex: pydantic.ValidationError) -> list[dict]:
        """
        Flatten a pydantic validation error into ``{field, message}`` pairs,
        keeping every error rather than only the first one.
        """
        errors: list[dict] = []
        for error in ex.errors():
            location: typing.Sequence = error.get("loc") or ()
            field = str(location[0]) if location else "body"
            errors.append({"field": field, "message": error["msg"]})
        return errors

    def _validation_failure(self, ex: pydantic.ValidationError) -> tuple:
        return self._respond({
            "success": False,
            "message": VALIDATION_FAILED_MESSAGE,
            "errors": self.validation_errors(ex),
            "action": "fix_input",
            OUTCOME_STATUS_KEY: HTTPStatus.BAD_REQUEST,
        })
