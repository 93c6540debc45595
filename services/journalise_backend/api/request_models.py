"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
import re
import typing
import email_validator
from pydantic import (BaseModel, ConfigDict, Field, ValidationInfo,
                      field_validator, model_validator)
from pydantic_core import PydanticCustomError
from journalise_backend.user_account import (MAX_BIO_LENGTH,
                                             MAX_EXPERTISE_ITEM_LENGTH,
                                             MAX_EXPERTISE_ITEMS,
                                             MAX_FULL_NAME_LENGTH,
                                             UserRole)

MIN_FULL_NAME_LENGTH = 2
FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")

MAX_EMAIL_LENGTH = 100

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MIN_LOGIN_PASSWORD_LENGTH = 6

# Model field holding the password exactly as submitted.
SUBMITTED_PASSWORD_FIELD = "submitted_password"

STRONG_PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
WEAK_PASSWORD_MESSAGE = \
    ("Password must contain at least one uppercase letter, one lowercase "
     "letter, one number, and one special character (@$!%*?&)")


def _invalid(message: str) -> PydanticCustomError:
    return PydanticCustomError("value_error", message)


def check_full_name(value: typing.Any, missing_message: str) -> str:
    """ Validate and trim a full name. """
    if not isinstance(value, str) or not value.strip():
        raise _invalid(missing_message)

    value = value.strip()
    if len(value) < MIN_FULL_NAME_LENGTH:
        raise _invalid("Full name must be at least 2 characters long")
    if len(value) > MAX_FULL_NAME_LENGTH:
        raise _invalid("Full name cannot exceed 50 characters")
    if not FULL_NAME_PATTERN.match(value):
        raise _invalid("Full name can only contain letters, spaces, "
                       "hyphens, and apostrophes")
    return value


def check_email(value: typing.Any, check_length: bool = False) -> str:
    """ Validate an email address and return it trimmed and lower-cased. """
    if not isinstance(value, str) or not value.strip():
        raise _invalid("Email address is required")

    value = value.strip()
    try:
        email_validator.validate_email(value, check_deliverability=False)

    except email_validator.EmailNotValidError as ex:
        raise _invalid("Please provide a valid email address") from ex

    if check_length and len(value) > MAX_EMAIL_LENGTH:
        raise _invalid("Email address is too long")

    return value.lower()


def check_new_password(value: typing.Any, missing_message: str) -> str:
    """ Enforce the password strength rules for a password being set. """
    if not isinstance(value, str) or not value:
        raise _invalid(missing_message)
    if len(value) < MIN_PASSWORD_LENGTH:
        raise _invalid("Password must be at least 8 characters long")
    if len(value) > MAX_PASSWORD_LENGTH:
        raise _invalid("Password is too long (max 128 characters)")
    if not STRONG_PASSWORD_PATTERN.match(value):
        raise _invalid(WEAK_PASSWORD_MESSAGE)
    return value


def check_password_confirmation(value: typing.Any, info: ValidationInfo,
                                missing_message: str) -> str:
    """
    Check a confirmation against the password as it was submitted, so a
    mismatch is reported even when the password itself failed validation.
    """
    if not isinstance(value, str) or not value:
        raise _invalid(missing_message)
    if info.data.get(SUBMITTED_PASSWORD_FIELD) != value:
        raise _invalid("Passwords do not match")
    return value


def check_bio(value: typing.Any) -> typing.Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _invalid("Bio must be a string")
    if len(value) > MAX_BIO_LENGTH:
        raise _invalid("Bio cannot exceed 500 characters")
    return value.strip()


def check_expertise(value: typing.Any) -> typing.Union[str, list, None]:
    """
    Validate expertise given either as a comma separated string or a list of
    strings. The value is returned as supplied; normalisation happens when it
    is stored.
    """
    if value is None:
        return None

    if isinstance(value, str):
        items = [item.strip() for item in value.split(",") if item.strip()]
        if len(items) > MAX_EXPERTISE_ITEMS:
            raise _invalid("Cannot have more than 10 expertise areas")
        for index, item in enumerate(items, start=1):
            if len(item) > MAX_EXPERTISE_ITEM_LENGTH:
                raise _invalid(f"Expertise item {index} is too long "
                               "(max 50 characters)")
        return value

    if isinstance(value, list):
        if len(value) > MAX_EXPERTISE_ITEMS:
            raise _invalid("Cannot have more than 10 expertise areas")
        for index, item in enumerate(value, start=1):
            if not isinstance(item, str) or not item.strip():
                raise _invalid(f"Expertise item {index} is invalid")
            if len(item.strip()) > MAX_EXPERTISE_ITEM_LENGTH:
                raise _invalid(f"Expertise item {index} is too long "
                               "(max 50 characters)")
        return value

    raise _invalid("Expertise must be a string or array")


class RequestModel(BaseModel):
    """
    Base for request bodies. Fields are typed loosely so that every rule,
    including type checks, is reported with a readable message.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PasswordConfirmationRequest(RequestModel):
    """
    Base for bodies carrying ``password`` and ``confirmPassword``. The raw
    password is kept aside ahead of field validation for the confirmation
    check.
    """
    submitted_password: typing.Any = Field(default=None, exclude=True,
                                           repr=False)

    @model_validator(mode="before")
    @classmethod
    def _keep_submitted_password(cls, data):
        if isinstance(data, dict):
            data = {**data, SUBMITTED_PASSWORD_FIELD: data.get("password")}
        return data


class RegisterRequest(PasswordConfirmationRequest):
    """ Body of ``POST /auth/register``. """
    full_name: typing.Any = Field(default=None, alias="fullName",
                                  validate_default=True)
    email: typing.Any = Field(default=None, validate_default=True)
    password: typing.Any = Field(default=None, validate_default=True)
    confirm_password: typing.Any = Field(default=None,
                                         alias="confirmPassword",
                                         validate_default=True)
    role: typing.Any = None
    bio: typing.Any = None
    expertise: typing.Any = None

    @field_validator("full_name")
    @classmethod
    def _check_full_name(cls, value):
        return check_full_name(value, "Full name is required")

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        return check_email(value, check_length=True)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        return check_new_password(value, "Password is required")

    @field_validator("confirm_password")
    @classmethod
    def _check_confirm_password(cls, value, info: ValidationInfo):
        return check_password_confirmation(value, info,
                                           "Please confirm your password")

    @field_validator("role")
    @classmethod
    def _check_role(cls, value):
        if value and value not in UserRole.values():
            raise _invalid("Invalid role. Must be publisher, reviewer, "
                           "or admin")
        return value or None

    @field_validator("bio")
    @classmethod
    def _check_bio(cls, value):
        return check_bio(value)

    @field_validator("expertise")
    @classmethod
    def _check_expertise(cls, value):
        return check_expertise(value)


class LoginRequest(RequestModel):
    """ Body of ``POST /auth/login``. """
    email: typing.Any = Field(default=None, validate_default=True)
    password: typing.Any = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        return check_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        if not isinstance(value, str) or not value:
            raise _invalid("Password is required")
        if len(value) < MIN_LOGIN_PASSWORD_LENGTH:
            raise _invalid("Password is too short")
        return value


class EmailRequest(RequestModel):
    """ Body of the forgot-password and resend-verification requests. """
    email: typing.Any = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value):
        return check_email(value)


class PasswordResetRequest(PasswordConfirmationRequest):
    """ Body of ``POST /auth/reset-password/<token>``. """
    password: typing.Any = Field(default=None, validate_default=True)
    confirm_password: typing.Any = Field(default=None,
                                         alias="confirmPassword",
                                         validate_default=True)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        return check_new_password(value, "New password is required")

    @field_validator("confirm_password")
    @classmethod
    def _check_confirm_password(cls, value, info: ValidationInfo):
        return check_password_confirmation(
            value, info, "Please confirm your new password")


class UpdateProfileRequest(RequestModel):
    """
    Body of ``PUT /user/profile``. Fields left out of the body are not
    validated and are not changed.
    """
    full_name: typing.Any = Field(default=None, alias="fullName")
    bio: typing.Any = None
    expertise: typing.Any = None

    @field_validator("full_name")
    @classmethod
    def _check_full_name(cls, value):
        return check_full_name(value, "Full name cannot be empty")

    @field_validator("bio")
    @classmethod
    def _check_bio(cls, value):
        return check_bio(value)

    @field_validator("expertise")
    @classmethod
    def _check_expertise(cls, value):
        return check_expertise(value)

    def changes(self) -> dict:
        """ The supplied fields, keyed by attribute name. """
        return {name: getattr(self, name) for name in self.model_fields_set}
