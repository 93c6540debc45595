"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import asyncio
from datetime import datetime, timedelta, timezone
import secrets
import typing
import jwt
from passlib.hash import bcrypt
from journalise_backend.exceptions import TokenExpiredError, TokenInvalidError

JWT_ALGORITHM = "HS256"
JWT_USER_ID_CLAIM = "userId"
DEFAULT_BCRYPT_ROUNDS = 12


def generate_account_token() -> str:
    """ 256-bit random token used for email verification and resets. """
    return secrets.token_hex(32)


class PasswordHasher:
    """
    One-way password hashing with bcrypt.

    Hashing is CPU bound, so both operations run in a worker thread to keep
    the event loop responsive.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self._hasher = bcrypt.using(rounds=rounds)
        self._dummy_hash: typing.Optional[str] = None

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hasher.hash, password)

    async def verify(self, password: str,
                     password_hash: typing.Optional[str]) -> bool:
        """ Compare a plaintext password with a stored hash. """
        if not password_hash:
            return False

        try:
            return await asyncio.to_thread(self._hasher.verify, password,
                                           password_hash)
        except ValueError:
            # Stored value is not a bcrypt hash.
            return False

    async def verify_dummy(self, password: str) -> bool:
        """
        Spend the work of a real ``verify`` when there is no account to
        check against, so unknown emails answer in the same time. Always
        returns False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(
                self._hasher.hash, secrets.token_hex(16))

        await asyncio.to_thread(self._hasher.verify, password,
                                self._dummy_hash)
        return False


class TokenIssuer:
    """
    Signs and verifies the bearer tokens handed out on login.

    Tokens are HS256 JWTs carrying the user identifier under ``userId``
    together with ``iat`` and ``exp`` claims.
    """

    def __init__(self, secret: str, expiry: timedelta = timedelta(days=7)):
        if not secret:
            raise ValueError("Token signing secret cannot be empty")

        self._secret = secret
        self._expiry = expiry

    @property
    def expiry(self) -> timedelta:
        return self._expiry

    def issue(self, user_id: typing.Any) -> str:
        """
        Create a signed token for a user.

        Args:
            user_id: Identifier of the user, stored as a string claim.

        Returns:
            str: Encoded JWT.
        """
        now = datetime.now(timezone.utc)
        payload = {
            JWT_USER_ID_CLAIM: str(user_id),
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> str:
        """
        Verify a token and return the user identifier it carries.

        Raises:
            TokenExpiredError: Signature valid but the token has expired.
            TokenInvalidError: Token malformed, badly signed or missing the
                               user identifier claim.
        """
        try:
            payload = jwt.decode(token, self._secret,
                                 algorithms=[JWT_ALGORITHM],
                                 options={"require": ["exp"]})
        except jwt.ExpiredSignatureError as ex:
            raise TokenExpiredError("Token has expired") from ex
        except jwt.InvalidTokenError as ex:
            raise TokenInvalidError(f"Invalid token: {ex}") from ex

        user_id = payload.get(JWT_USER_ID_CLAIM)
        if not user_id:
            raise TokenInvalidError("Token does not carry a user identifier")

        return str(user_id)
