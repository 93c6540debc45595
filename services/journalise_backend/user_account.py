"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime
import enum
import typing
import uuid
from pydantic import BaseModel, ConfigDict, Field

MAX_EXPERTISE_ITEMS = 10
MAX_EXPERTISE_ITEM_LENGTH = 50
MAX_FULL_NAME_LENGTH = 50
MAX_BIO_LENGTH = 500

# Fields that never leave the service.
HIDDEN_FIELDS = frozenset({
    "password_hash",
    "email_verification_token",
    "email_verification_expires",
    "reset_password_token",
    "reset_password_expires",
})


class UserRole(str, enum.Enum):
    """ Roles a journal user can hold. """
    PUBLISHER = "publisher"
    REVIEWER = "reviewer"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        """ Role names in declaration order. """
        return [role.value for role in cls]


def normalise_email(email: str) -> str:
    """ Trim and lowercase an email address. """
    return email.strip().lower()


def normalise_expertise(expertise: typing.Union[str, list, None]) -> list:
    """
    Turn expertise input into the stored list.

    A string is split on commas; entries are trimmed and empty ones dropped.
    Order and duplicates are preserved, so ``"ml, nlp, nlp, "`` becomes
    ``["ml", "nlp", "nlp"]``. ``None`` or an empty value gives ``[]``.
    """
    if not expertise:
        return []

    if isinstance(expertise, str):
        entries = expertise.split(",")
    else:
        entries = expertise

    return [str(entry).strip() for entry in entries if str(entry).strip()]


class UserAccount(BaseModel):
    """
    A journal user as held by the service.

    The model carries the hidden credential fields so the account services
    can work with them; ``public_view`` is the only representation handed to
    callers.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    full_name: str = Field(alias="fullName")
    email: str
    password_hash: typing.Optional[str] = None
    role: UserRole = UserRole.PUBLISHER
    bio: str = ""
    expertise: list[str] = Field(default_factory=list)
    is_email_verified: bool = Field(default=False, alias="isEmailVerified")
    email_verification_token: typing.Optional[str] = None
    email_verification_expires: typing.Optional[datetime] = None
    reset_password_token: typing.Optional[str] = None
    reset_password_expires: typing.Optional[datetime] = None
    is_active: bool = Field(default=True, alias="isActive")
    last_login: typing.Optional[datetime] = Field(default=None,
                                                  alias="lastLogin")
    created_at: typing.Optional[datetime] = Field(default=None,
                                                  alias="createdAt")
    updated_at: typing.Optional[datetime] = Field(default=None,
                                                  alias="updatedAt")

    @classmethod
    def from_record(cls, record) -> "UserAccount":
        """ Build an account from a database row (mapping of columns). """
        values = dict(record)
        values["expertise"] = list(values.get("expertise") or [])
        values["bio"] = values.get("bio") or ""
        return cls.model_validate(values)

    def public_view(self) -> dict:
        """ JSON-ready representation with all hidden fields removed. """
        return self.model_dump(mode="json", by_alias=True,
                               exclude=set(HIDDEN_FIELDS))

    def clear_verification_token(self) -> None:
        self.email_verification_token = None
        self.email_verification_expires = None

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expires = None
