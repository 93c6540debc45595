"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
import enum
from http import HTTPStatus
import logging
import typing
from urllib.parse import urlencode
from journalise_backend.collaborators import Collaborators
from journalise_backend.data_access_layer.user_data_access_layer import \
    UserDataAccessLayer
from journalise_backend.exceptions import EmailDeliveryError
from journalise_backend.mailer import (TEMPLATE_EMAIL_VERIFICATION,
                                       TEMPLATE_LOGIN_WELCOME,
                                       TEMPLATE_PASSWORD_CHANGED,
                                       TEMPLATE_PASSWORD_RESET,
                                       TEMPLATE_WELCOME)
from journalise_backend.security import generate_account_token
from journalise_backend.user_account import (UserAccount, UserRole,
                                             normalise_email,
                                             normalise_expertise)

INVALID_CREDENTIALS_MESSAGE = \
    "Invalid credentials. Please check your email and password."
FORGOT_PASSWORD_MESSAGE = \
    ("If an account with that email exists, you will receive a password "
     "reset email shortly.")

NEW_ACCOUNT_SUBJECT = "Welcome to Journal Platform - Verify Your Email"
UPDATED_ACCOUNT_SUBJECT = "Complete Your Account Setup - Journal Platform"
RESEND_SUBJECT = "Verify Your Email - Journal Platform"


class EmailPolicy(enum.Enum):
    """ What an email failure means for the operation sending it. """

    # Failure aborts the operation (the exception propagates).
    FATAL = "fatal"

    # Failure is logged and the operation carries on.
    BEST_EFFORT = "best_effort"


class AccountDataService:
    """
    Account lifecycle: registration, email verification, login, password
    reset and profile updates.

    Every operation returns an outcome dictionary holding the JSON body
    for the caller plus the HTTP ``status``.
    """

    def __init__(self, user_dal: UserDataAccessLayer,
                 collaborators: Collaborators,
                 logger: logging.Logger):
        self._user_dal = user_dal
        self._collaborators = collaborators
        self._logger = logger.getChild(__name__)

    async def register(self,
                       full_name: str,
                       email: str,
                       password: str,
                       role: typing.Optional[str] = None,
                       bio: typing.Optional[str] = None,
                       expertise: typing.Union[str, list, None] = None
                       ) -> dict:
        """
        Create an unverified account, or refresh an existing unverified
        one, and send the verification email.

        A verified account with the same email is never touched; the caller
        is sent to the login page instead.

        Raises:
            EmailDeliveryError: The verification email could not be sent.
            asyncpg.UniqueViolationError: A concurrent registration created
                                          the same email first.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        email = normalise_email(email)
        existing = await self._user_dal.get_by_email(email)

        if existing and existing.is_email_verified:
            return {
                "success": False,
                "message": "An account with this email already exists.",
                "action": "login",
                "details": {
                    "email": existing.email,
                    "accountStatus": "verified",
                    "suggestion": ("Please sign in with your existing "
                                   "account. If you forgot your password, "
                                   "use the \"Forgot Password\" option."),
                },
                "status": HTTPStatus.CONFLICT,
            }

        if existing:
            existing.full_name = full_name
            existing.role = UserRole(role) if role else UserRole.PUBLISHER
            existing.bio = bio or ""
            existing.expertise = normalise_expertise(expertise)
            await self._set_password(existing, password)
            token = self._issue_verification_token(existing)
            await self._user_dal.save_user(existing)

            self._logger.info("Refreshed unverified account %s",
                              existing.email)
            await self._send_verification_email(existing, token,
                                                UPDATED_ACCOUNT_SUBJECT)

            return {
                "success": True,
                "message": ("Account details updated! Please verify your "
                            "email to complete the setup."),
                "action": "verify",
                "details": {
                    "email": existing.email,
                    "accountStatus": "unverified",
                    "suggestion": ("We've updated your account information "
                                   "and sent a new verification email. "
                                   "Please check your inbox."),
                },
                "status": HTTPStatus.OK,
            }

        user = UserAccount(full_name=full_name,
                           email=email,
                           role=UserRole(role) if role else UserRole.PUBLISHER,
                           bio=bio or "",
                           expertise=normalise_expertise(expertise))
        await self._set_password(user, password)
        token = self._issue_verification_token(user)
        await self._user_dal.create_user(user)

        await self._send_verification_email(user, token, NEW_ACCOUNT_SUBJECT)

        return {
            "success": True,
            "message": ("Account created successfully! Please check your "
                        "email to verify your account."),
            "action": "verify",
            "details": {
                "email": user.email,
                "accountStatus": "created",
                "suggestion": ("Check your email inbox (and spam folder) for "
                               "the verification link."),
            },
            "status": HTTPStatus.CREATED,
        }

    async def verify_email(self, token: str) -> dict:
        """
        Consume a verification token. The account stays verified even if
        the welcome email that follows cannot be sent.
        """
        user = await self._user_dal.get_by_verification_token(token,
                                                               self._now())
        if not user:
            return {
                "success": False,
                "message": ("Email verification token is invalid or has "
                            "expired."),
                "action": "resend",
                "status": HTTPStatus.BAD_REQUEST,
            }

        user.is_email_verified = True
        user.clear_verification_token()
        await self._user_dal.save_user(user)
        self._logger.info("Email verified for %s", user.email)

        await self._dispatch_email(
            user, TEMPLATE_WELCOME,
            {"loginUrl": self._collaborators.frontend_link("/login")},
            EmailPolicy.BEST_EFFORT)

        return {
            "success": True,
            "message": ("Email verified successfully! You can now login to "
                        "your account."),
            "status": HTTPStatus.OK,
        }

    async def resend_verification(self, email: str) -> dict:
        """
        Issue a fresh verification token for an unverified account.

        Raises:
            EmailDeliveryError: The verification email could not be sent.
        """
        user = await self._user_dal.get_by_email(normalise_email(email))
        if not user:
            return {
                "success": False,
                "message": "No account found with that email address.",
                "status": HTTPStatus.NOT_FOUND,
            }

        if user.is_email_verified:
            return {
                "success": False,
                "message": ("This email is already verified. You can login "
                            "to your account."),
                "action": "login",
                "status": HTTPStatus.BAD_REQUEST,
            }

        token = self._issue_verification_token(user)
        await self._user_dal.save_user(user)
        await self._send_verification_email(user, token, RESEND_SUBJECT)

        return {
            "success": True,
            "message": ("Verification email sent! Please check your email to "
                        "verify your account."),
            "status": HTTPStatus.OK,
        }

    async def login(self, email: str, password: str) -> dict:
        """
        Authenticate with email and password and issue a bearer token.

        The password is checked before the verification and active flags,
        so a wrong password never reveals the state of an account.
        """
        user = await self._user_dal.get_by_email(normalise_email(email))
        hasher = self._collaborators.password_hasher

        # Unknown emails still pay for a bcrypt compare.
        if user is None:
            password_ok = await hasher.verify_dummy(password)
        else:
            password_ok = await hasher.verify(password, user.password_hash)

        if not password_ok:
            return {
                "success": False,
                "message": INVALID_CREDENTIALS_MESSAGE,
                "action": "retry",
                "status": HTTPStatus.UNAUTHORIZED,
            }

        if not user.is_email_verified:
            return {
                "success": False,
                "message": ("Please verify your email before logging in. "
                            "Check your inbox for verification link."),
                "action": "verify",
                "email": user.email,
                "status": HTTPStatus.UNAUTHORIZED,
            }

        if not user.is_active:
            return {
                "success": False,
                "message": ("Your account has been deactivated. Please "
                            "contact support."),
                "action": "contact",
                "status": HTTPStatus.UNAUTHORIZED,
            }

        now = self._now()
        user.last_login = now
        await self._user_dal.save_user(user)

        token = self._collaborators.token_issuer.issue(user.id)
        self._logger.info("Login: %s (%s)", user.email, user.id)

        await self._dispatch_email(
            user, TEMPLATE_LOGIN_WELCOME,
            {"loginTime": now.strftime("%d %B %Y, %H:%M UTC"),
             "dashboardUrl": self._collaborators.frontend_link("/dashboard")},
            EmailPolicy.BEST_EFFORT)

        return {
            "success": True,
            "message": "Login successful! Welcome back.",
            "token": token,
            "user": user.public_view(),
            "status": HTTPStatus.OK,
        }

    async def forgot_password(self, email: str) -> dict:
        """
        Start a password reset.

        The response is identical whether or not the account exists, is
        verified, or the reset email could be sent; no exception escapes.
        In debug mode a ``debug`` entry describes what happened.
        """
        try:
            debug = await self._issue_password_reset(normalise_email(email))

        except Exception as ex:  # pylint: disable=broad-exception-caught
            self._logger.exception("Forgot password processing failed: %s",
                                   ex)
            debug = {"error": "SERVER_ERROR", "details": str(ex)}

        outcome = {
            "success": True,
            "message": FORGOT_PASSWORD_MESSAGE,
            "status": HTTPStatus.OK,
        }
        if self._collaborators.debug and debug:
            outcome["debug"] = debug
        return outcome

    async def reset_password(self, token: str, password: str) -> dict:
        """ Consume a reset token and set a new password. """
        user = await self._user_dal.get_by_reset_token(token, self._now())
        if not user:
            return {
                "success": False,
                "message": ("Password reset token is invalid or has expired. "
                            "Please request a new one."),
                "action": "forgot",
                "status": HTTPStatus.BAD_REQUEST,
            }

        await self._set_password(user, password)
        user.clear_reset_token()
        await self._user_dal.save_user(user)
        self._logger.info("Password reset for %s", user.email)

        await self._dispatch_email(
            user, TEMPLATE_PASSWORD_CHANGED,
            {"loginUrl": self._collaborators.frontend_link("/login")},
            EmailPolicy.BEST_EFFORT)

        return {
            "success": True,
            "message": ("Password reset successfully! You can now login with "
                        "your new password."),
            "status": HTTPStatus.OK,
        }

    async def update_profile(self, user: UserAccount, **changes) -> dict:
        """
        Update the supplied profile fields of a user.

        Keyword Args:
            full_name (str): New display name.
            bio (str | None): New biography, None clears it.
            expertise (str | list | None): New expertise, normalised as on
                registration; None clears it.
        """
        if "full_name" in changes:
            user.full_name = changes["full_name"]
        if "bio" in changes:
            user.bio = changes["bio"] or ""
        if "expertise" in changes:
            user.expertise = normalise_expertise(changes["expertise"])

        await self._user_dal.save_user(user)

        return {
            "success": True,
            "message": "Profile updated successfully!",
            "user": user.public_view(),
            "status": HTTPStatus.OK,
        }

    async def _issue_password_reset(self, email: str
                                    ) -> typing.Optional[dict]:
        user = await self._user_dal.get_by_email(email)

        if not user:
            self._logger.info("Password reset requested for unknown email")
            return None

        if not user.is_email_verified:
            self._logger.info("Password reset requested for unverified "
                              "account %s", user.email)
            return None

        token = generate_account_token()
        user.reset_password_token = token
        user.reset_password_expires = \
            self._now() + self._collaborators.reset_token_lifetime
        await self._user_dal.save_user(user)

        reset_url = self._collaborators.frontend_link(
            f"/reset-password?{urlencode({'token': token})}")

        try:
            await self._dispatch_email(user, TEMPLATE_PASSWORD_RESET,
                                       {"resetUrl": reset_url},
                                       EmailPolicy.FATAL)

        except EmailDeliveryError as ex:
            user.clear_reset_token()
            await self._user_dal.save_user(user)
            return {"error": "EMAIL_SEND_ERROR", "details": str(ex)}

        return {
            "emailSentTo": user.email,
            "resetToken": token,
            "resetUrl": reset_url,
            "expiresAt": user.reset_password_expires.isoformat(),
        }

    async def _set_password(self, user: UserAccount, password: str) -> None:
        user.password_hash = \
            await self._collaborators.password_hasher.hash(password)

    def _issue_verification_token(self, user: UserAccount) -> str:
        token = generate_account_token()
        user.email_verification_token = token
        user.email_verification_expires = \
            self._now() + self._collaborators.verification_token_lifetime
        return token

    async def _send_verification_email(self, user: UserAccount, token: str,
                                       subject: str) -> None:
        verification_url = self._collaborators.frontend_link(
            f"/verify-email?{urlencode({'token': token})}")
        await self._dispatch_email(user, TEMPLATE_EMAIL_VERIFICATION,
                                   {"verificationUrl": verification_url},
                                   EmailPolicy.FATAL, subject)

    async def _dispatch_email(self,
                              user: UserAccount,
                              template: str,
                              data: dict,
                              policy: EmailPolicy,
                              subject: typing.Optional[str] = None) -> bool:
        """
        Send a templated email to a user under an explicit failure policy.

        Returns:
            bool: True if sent, False if a best-effort send failed.

        Raises:
            EmailDeliveryError: Send failed under ``EmailPolicy.FATAL``.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        try:
            await self._collaborators.mailer.send(
                user.email, template, {"fullName": user.full_name, **data},
                subject)

        except EmailDeliveryError as ex:
            if policy is EmailPolicy.FATAL:
                raise
            self._logger.warning("Best-effort '%s' email to %s failed: %s",
                                 template, user.email, ex)
            return False

        return True

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
