"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import functools
from http import HTTPStatus
import logging
import typing
import asyncpg
import quart
from journalise_backend.data_access_layer.user_data_access_layer import \
    UserDataAccessLayer
from journalise_backend.exceptions import TokenExpiredError, TokenError
from journalise_backend.security import TokenIssuer
from journalise_backend.state_object import StateObject
from journalise_backend.user_account import UserAccount, UserRole

BEARER_PREFIX = "Bearer "


class AuthenticationFailed(Exception):
    """ Carries the response body and status for a rejected request. """

    def __init__(self, body: dict,
                 status: HTTPStatus = HTTPStatus.UNAUTHORIZED):
        super().__init__(body["message"])
        self.body = body
        self.status = status


def _reject(body: dict, status: HTTPStatus) -> tuple:
    return quart.jsonify({"success": False, **body}), status


class AuthGate:
    """
    Route decorators guarding endpoints with bearer token authentication.

    ``required`` and ``optional`` resolve the caller into ``quart.g.user``;
    ``require_role`` and ``require_ownership_or_admin`` must be stacked
    beneath ``required`` so that the user is already resolved.
    """

    def __init__(self, logger: logging.Logger, token_issuer: TokenIssuer,
                 state_object: StateObject):
        self._logger = logger.getChild(__name__)
        self._token_issuer = token_issuer
        self._state_object = state_object

    def required(self, func):
        """
        Reject the request unless it carries a valid token for a verified
        and active user.
        """

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                quart.g.user = await self._authenticate()

            except AuthenticationFailed as ex:
                return _reject(ex.body, ex.status)

            except asyncpg.PostgresError as ex:
                self._logger.error("Authentication lookup failed: %s", ex)
                return _reject(
                    {"message": "Server error during authentication."},
                    HTTPStatus.INTERNAL_SERVER_ERROR)

            return await func(*args, **kwargs)

        return wrapper

    def optional(self, func):
        """ Resolve the caller when possible; otherwise ``g.user`` is None. """

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                quart.g.user = await self._authenticate()

            except (AuthenticationFailed, asyncpg.PostgresError) as ex:
                self._logger.debug("Optional authentication skipped: %s", ex)
                quart.g.user = None

            return await func(*args, **kwargs)

        return wrapper

    def require_role(self, *roles: typing.Union[str, UserRole]):
        """ Only let through users holding one of the given roles. """
        allowed = [UserRole(role).value for role in roles]

        def decorator(func):
            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                user: typing.Optional[UserAccount] = getattr(quart.g, "user",
                                                             None)
                if user is None:
                    return _reject({"message": "Authentication required.",
                                    "action": "login"},
                                   HTTPStatus.UNAUTHORIZED)

                if user.role.value not in allowed:
                    return _reject(
                        {"message": "Access denied. Required role: "
                                    f"{' or '.join(allowed)}"},
                        HTTPStatus.FORBIDDEN)

                return await func(*args, **kwargs)

            return wrapper

        return decorator

    def require_ownership_or_admin(self, field: str = "userId"):
        """
        Only let through admins or the user whose id is given by ``field``,
        taken from the path arguments first and then the JSON body.
        """

        def decorator(func):
            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                user: typing.Optional[UserAccount] = getattr(quart.g, "user",
                                                             None)
                if user is None:
                    return _reject({"message": "Authentication required.",
                                    "action": "login"},
                                   HTTPStatus.UNAUTHORIZED)

                resource_owner = kwargs.get(field)
                if not resource_owner:
                    body = await quart.request.get_json(silent=True)
                    if isinstance(body, dict):
                        resource_owner = body.get(field)

                if user.role is UserRole.ADMIN or \
                        str(user.id) == str(resource_owner):
                    return await func(*args, **kwargs)

                return _reject({"message": "Access denied. You can only "
                                           "access your own resources."},
                               HTTPStatus.FORBIDDEN)

            return wrapper

        return decorator

    async def _authenticate(self) -> UserAccount:
        """
        Resolve the bearer token of the current request into a user.

        Raises:
            AuthenticationFailed: No usable token or the user may not log in.
        """
        header = quart.request.headers.get("Authorization", "")
        token = header[len(BEARER_PREFIX):].strip() \
            if header.startswith(BEARER_PREFIX) else ""

        if not token:
            raise AuthenticationFailed(
                {"message": "Access denied. No token provided.",
                 "action": "login"})

        try:
            user_id = self._token_issuer.verify(token)

        except TokenExpiredError as ex:
            raise AuthenticationFailed(
                {"message": "Token has expired. Please login again.",
                 "action": "login"}) from ex

        except TokenError as ex:
            raise AuthenticationFailed({"message": "Invalid token.",
                                        "action": "login"}) from ex

        user_dal = UserDataAccessLayer(quart.g.db, self._logger,
                                       self._state_object)
        user = await user_dal.get_by_id(user_id)

        if not user:
            raise AuthenticationFailed(
                {"message": "Invalid token. User not found.",
                 "action": "login"})

        if not user.is_active:
            raise AuthenticationFailed(
                {"message": ("Account has been deactivated. Please contact "
                             "support."),
                 "action": "contact"})

        if not user.is_email_verified:
            raise AuthenticationFailed(
                {"message": ("Please verify your email before accessing this "
                             "resource."),
                 "action": "verify",
                 "email": user.email})

        return user
