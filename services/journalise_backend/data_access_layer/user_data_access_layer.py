"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
import typing
import uuid
from journalise_common.base_data_access_layer import BaseDataAccessLayer
from journalise_backend.user_account import UserAccount

USER_COLUMNS = (
    "id, full_name, email, password_hash, role, bio, expertise, "
    "is_email_verified, email_verification_token, "
    "email_verification_expires, reset_password_token, "
    "reset_password_expires, is_active, last_login, created_at, updated_at"
)


class UserDataAccessLayer(BaseDataAccessLayer):
    """
    Reads and writes ``users`` rows on the request's pooled connection.

    Lookups return ``UserAccount`` instances (or None); writes raise the
    asyncpg error on failure, notably ``UniqueViolationError`` when an
    email is already taken.
    """

    async def get_by_email(self, email: str) -> typing.Optional[UserAccount]:
        """ Fetch a user by (already normalised) email address. """
        with self._health_tracking("user lookup by email"):
            record = await self._db.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE lower(email) = $1",
                email.lower())

        return self._to_account(record)

    async def get_by_id(self, user_id: typing.Union[str, uuid.UUID]
                        ) -> typing.Optional[UserAccount]:
        """ Fetch a user by identifier; malformed identifiers match none. """
        try:
            user_uuid = user_id if isinstance(user_id, uuid.UUID) \
                else uuid.UUID(str(user_id))
        except ValueError:
            self._logger.debug("Malformed user identifier '%s'", user_id)
            return None

        with self._health_tracking("user lookup by id"):
            record = await self._db.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_uuid)

        return self._to_account(record)

    async def get_by_verification_token(self, token: str, now: datetime
                                        ) -> typing.Optional[UserAccount]:
        """ Fetch the user holding a non-expired verification token. """
        with self._health_tracking("user lookup by verification token"):
            record = await self._db.fetchrow(
                f"""
                SELECT {USER_COLUMNS} FROM users
                WHERE email_verification_token = $1
                  AND email_verification_expires > $2
                """,
                token, now)

        return self._to_account(record)

    async def get_by_reset_token(self, token: str, now: datetime
                                 ) -> typing.Optional[UserAccount]:
        """ Fetch the user holding a non-expired password reset token. """
        with self._health_tracking("user lookup by reset token"):
            record = await self._db.fetchrow(
                f"""
                SELECT {USER_COLUMNS} FROM users
                WHERE reset_password_token = $1
                  AND reset_password_expires > $2
                """,
                token, now)

        return self._to_account(record)

    async def create_user(self, user: UserAccount) -> UserAccount:
        """
        Insert a new user row.

        Raises:
            asyncpg.UniqueViolationError: The email is already registered.
        """
        now = datetime.now(timezone.utc)
        user.created_at = now
        user.updated_at = now

        with self._health_tracking("user creation"):
            await self._db.execute(
                """
                INSERT INTO users(id, full_name, email, password_hash, role,
                                  bio, expertise, is_email_verified,
                                  email_verification_token,
                                  email_verification_expires,
                                  reset_password_token, reset_password_expires,
                                  is_active, last_login, created_at,
                                  updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12,
                        $13, $14, $15, $15)
                """,
                user.id, user.full_name, user.email, user.password_hash,
                user.role.value, user.bio, list(user.expertise),
                user.is_email_verified, user.email_verification_token,
                user.email_verification_expires, user.reset_password_token,
                user.reset_password_expires, user.is_active, user.last_login,
                now)

        self._logger.info("Created user %s (%s)", user.email, user.id)
        return user

    async def save_user(self, user: UserAccount) -> UserAccount:
        """
        Persist every mutable field of an existing user (last write wins).
        """
        user.updated_at = datetime.now(timezone.utc)

        with self._health_tracking("user update"):
            await self._db.execute(
                """
                UPDATE users
                SET full_name = $2, email = $3, password_hash = $4,
                    role = $5, bio = $6, expertise = $7,
                    is_email_verified = $8, email_verification_token = $9,
                    email_verification_expires = $10,
                    reset_password_token = $11, reset_password_expires = $12,
                    is_active = $13, last_login = $14, updated_at = $15
                WHERE id = $1
                """,
                user.id, user.full_name, user.email, user.password_hash,
                user.role.value, user.bio, list(user.expertise),
                user.is_email_verified, user.email_verification_token,
                user.email_verification_expires, user.reset_password_token,
                user.reset_password_expires, user.is_active, user.last_login,
                user.updated_at)

        return user

    @staticmethod
    def _to_account(record) -> typing.Optional[UserAccount]:
        return UserAccount.from_record(record) if record else None
