"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from sqlalchemy import (Boolean, CheckConstraint, Column, DateTime, Index,
                        String, func, text)
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from journalise_backend.user_account import (MAX_BIO_LENGTH,
                                             MAX_EXPERTISE_ITEM_LENGTH,
                                             MAX_FULL_NAME_LENGTH,
                                             UserRole)
from .base import Base
from .created_updated_timestamp_mixin import CreatedUpdatedTimestampMixin

_ROLE_LIST = ", ".join(f"'{role}'" for role in UserRole.values())


class User(CreatedUpdatedTimestampMixin, Base):
    """
    Table model of a journal user account.

    Only used to generate the schema; queries are issued through asyncpg
    by ``UserDataAccessLayer``.

    Attributes:
        id (UUID): Primary key.
        full_name (str): Display name, at most 50 characters.
        email (str): Lowercase email, unique regardless of case.
        password_hash (str): bcrypt hash of the password.
        role (str): publisher, reviewer or admin.
        bio (str): Free text biography, at most 500 characters.
        expertise (list[str]): Ordered expertise areas.
        is_email_verified (bool): Set once the verification link is used.
        email_verification_token (str): Pending verification token.
        email_verification_expires (datetime): Expiry of the above.
        reset_password_token (str): Pending password reset token.
        reset_password_expires (datetime): Expiry of the above.
        is_active (bool): False once the account is deactivated.
        last_login (datetime): Time of the most recent successful login.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True)
    full_name = Column(String(MAX_FULL_NAME_LENGTH), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(16), nullable=False, server_default="publisher")
    bio = Column(String(MAX_BIO_LENGTH), nullable=False, server_default="")
    expertise = Column(ARRAY(String(MAX_EXPERTISE_ITEM_LENGTH)),
                       nullable=False, server_default=text("'{}'"))
    is_email_verified = Column(Boolean, nullable=False,
                               server_default=text("false"))
    email_verification_token = Column(String(64))
    email_verification_expires = Column(DateTime(timezone=True))
    reset_password_token = Column(String(64))
    reset_password_expires = Column(DateTime(timezone=True))
    is_active = Column(Boolean, nullable=False, server_default=text("true"))
    last_login = Column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint(f"role IN ({_ROLE_LIST})", name="ck_users_role"),
    )


Index("ix_users_email_lower", func.lower(User.email), unique=True)
Index("ix_users_email_verification_token", User.email_verification_token)
Index("ix_users_reset_password_token", User.reset_password_token)
Index("ix_users_created_at", User.created_at.desc())
