"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
import re
import asyncpg
import quart
from werkzeug.exceptions import HTTPException, NotFound
from journalise_backend.exceptions import EmailDeliveryError

# Unique indexes / constraints and the request field they protect.
UNIQUE_CONSTRAINT_FIELDS = {
    "ix_users_email_lower": "email",
    "users_pkey": "id",
}

AVAILABLE_ROUTES = [
    "GET /api/health",
    "POST /api/auth/register",
    "POST /api/auth/login",
    "GET /api/auth/me",
    "POST /api/auth/logout",
]

# "Key (lower(email::text))=(...) already exists."
_DETAIL_KEY_PATTERN = re.compile(r"Key \((?:\w+\()?(\w+)")


def unique_violation_field(ex: asyncpg.UniqueViolationError) -> str:
    """ Name the field behind a unique violation. """
    constraint = getattr(ex, "constraint_name", None)
    if constraint in UNIQUE_CONSTRAINT_FIELDS:
        return UNIQUE_CONSTRAINT_FIELDS[constraint]

    match = _DETAIL_KEY_PATTERN.search(getattr(ex, "detail", None) or "")
    return match.group(1) if match else "value"


def register_error_handlers(app: quart.Quart, logger: logging.Logger) -> None:
    """
    Register the application wide error handlers, turning uncaught errors
    into the standard ``{success: false, message}`` envelope.
    """
    logger = logger.getChild(__name__)

    @app.errorhandler(asyncpg.UniqueViolationError)
    async def handle_unique_violation(ex: asyncpg.UniqueViolationError):
        field = unique_violation_field(ex)
        logger.warning("Unique violation on '%s': %s", field, ex)
        return quart.jsonify({"success": False,
                              "message": f"{field} already exists"}), \
            HTTPStatus.BAD_REQUEST

    @app.errorhandler(EmailDeliveryError)
    async def handle_email_delivery_error(ex: EmailDeliveryError):
        logger.error("Email delivery failed (template '%s'): %s",
                     ex.template, ex)
        return quart.jsonify({
            "success": False,
            "message": ("We could not send the email right now. Please try "
                        "again."),
            "action": "retry"}), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(NotFound)
    async def handle_not_found(_ex: NotFound):
        return quart.jsonify({
            "success": False,
            "message": "Route not found",
            "requestedPath": quart.request.full_path.rstrip("?"),
            "availableRoutes": AVAILABLE_ROUTES}), HTTPStatus.NOT_FOUND

    @app.errorhandler(Exception)
    async def handle_exception(ex: Exception):
        # Other HTTP errors (405, 413, ...) keep their own status.
        if isinstance(ex, HTTPException):
            return quart.jsonify({"success": False,
                                  "message": ex.description}), ex.code

        logger.exception("Unhandled error: %s", ex)
        return quart.jsonify({"success": False,
                              "message": "Internal Server Error"}), \
            HTTPStatus.INTERNAL_SERVER_ERROR
