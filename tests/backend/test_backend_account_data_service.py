from datetime import datetime, timedelta, timezone
from http import HTTPStatus
import logging
import unittest
from unittest.mock import AsyncMock, MagicMock
import asyncpg
from journalise_backend.collaborators import Collaborators
from journalise_backend.data_services.account_data_service import (
    AccountDataService, EmailPolicy, FORGOT_PASSWORD_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE, NEW_ACCOUNT_SUBJECT, RESEND_SUBJECT,
    UPDATED_ACCOUNT_SUBJECT)
from journalise_backend.exceptions import EmailDeliveryError
from journalise_backend.mailer import (TEMPLATE_EMAIL_VERIFICATION,
                                       TEMPLATE_LOGIN_WELCOME,
                                       TEMPLATE_PASSWORD_CHANGED,
                                       TEMPLATE_PASSWORD_RESET,
                                       TEMPLATE_WELCOME)
from journalise_backend.user_account import UserAccount, UserRole


def make_user(**overrides) -> UserAccount:
    values = {
        "full_name": "Ada Lovelace",
        "email": "ada@example.com",
        "password_hash": "stored-hash",
        "is_email_verified": True,
    }
    values.update(overrides)
    return UserAccount(**values)


class AccountDataServiceTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = logging.getLogger("test_account_data_service")
        self.logger.addHandler(logging.NullHandler())

        self.user_dal = MagicMock()
        self.user_dal.get_by_email = AsyncMock(return_value=None)
        self.user_dal.get_by_verification_token = AsyncMock(return_value=None)
        self.user_dal.get_by_reset_token = AsyncMock(return_value=None)
        self.user_dal.create_user = AsyncMock(side_effect=lambda user: user)
        self.user_dal.save_user = AsyncMock(side_effect=lambda user: user)

        self.mailer = MagicMock()
        self.mailer.send = AsyncMock(return_value="<1@journalise>")

        self.password_hasher = MagicMock()
        self.password_hasher.hash = AsyncMock(return_value="new-hash")
        self.password_hasher.verify = AsyncMock(return_value=True)
        self.password_hasher.verify_dummy = AsyncMock(return_value=False)

        self.token_issuer = MagicMock()
        self.token_issuer.issue.return_value = "signed-jwt"

        self.collaborators = Collaborators(
            token_issuer=self.token_issuer,
            password_hasher=self.password_hasher,
            mailer=self.mailer,
            frontend_url="https://journal.example/")

        self.service = AccountDataService(self.user_dal, self.collaborators,
                                          self.logger)


class TestRegister(AccountDataServiceTestCase):

    async def test_new_account_is_created_unverified_with_one_email(self):
        before = datetime.now(timezone.utc)
        outcome = await self.service.register(
            "Ada Lovelace", "  Ada@Example.COM ", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.CREATED)
        self.assertTrue(outcome["success"])
        self.assertEqual(outcome["action"], "verify")
        self.assertEqual(outcome["details"]["accountStatus"], "created")
        self.user_dal.get_by_email.assert_awaited_once_with("ada@example.com")

        self.user_dal.create_user.assert_awaited_once()
        user: UserAccount = self.user_dal.create_user.await_args.args[0]
        self.assertEqual(user.email, "ada@example.com")
        self.assertFalse(user.is_email_verified)
        self.assertEqual(user.password_hash, "new-hash")
        self.assertEqual(user.role, UserRole.PUBLISHER)
        self.assertEqual(user.bio, "")
        self.assertEqual(len(user.email_verification_token), 64)
        self.assertGreaterEqual(user.email_verification_expires,
                                before + timedelta(hours=24))
        self.password_hasher.hash.assert_awaited_once_with("Secr3t!pass")

        self.mailer.send.assert_awaited_once()
        to, template, data, subject = self.mailer.send.await_args.args
        self.assertEqual(to, "ada@example.com")
        self.assertEqual(template, TEMPLATE_EMAIL_VERIFICATION)
        self.assertEqual(subject, NEW_ACCOUNT_SUBJECT)
        self.assertEqual(data["fullName"], "Ada Lovelace")
        self.assertEqual(
            data["verificationUrl"],
            "https://journal.example/verify-email?token="
            f"{user.email_verification_token}")

    async def test_expertise_string_is_split_keeping_duplicates(self):
        await self.service.register("Ada Lovelace", "ada@example.com",
                                    "Secr3t!pass", "reviewer", "Bio",
                                    "ml, nlp, nlp, ")

        user = self.user_dal.create_user.await_args.args[0]
        self.assertEqual(user.expertise, ["ml", "nlp", "nlp"])
        self.assertEqual(user.role, UserRole.REVIEWER)
        self.assertEqual(user.bio, "Bio")

    async def test_verified_account_conflicts_without_changes(self):
        existing = make_user()
        self.user_dal.get_by_email.return_value = existing

        outcome = await self.service.register(
            "Someone Else", "ada@example.com", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.CONFLICT)
        self.assertFalse(outcome["success"])
        self.assertEqual(outcome["action"], "login")
        self.assertEqual(outcome["details"]["accountStatus"], "verified")
        self.assertEqual(existing.full_name, "Ada Lovelace")
        self.assertEqual(existing.password_hash, "stored-hash")
        self.user_dal.save_user.assert_not_awaited()
        self.user_dal.create_user.assert_not_awaited()
        self.mailer.send.assert_not_awaited()

    async def test_unverified_account_is_overwritten_in_place(self):
        existing = make_user(is_email_verified=False,
                             role=UserRole.ADMIN,
                             bio="old bio",
                             expertise=["old"],
                             email_verification_token="old-token")
        self.user_dal.get_by_email.return_value = existing

        outcome = await self.service.register(
            "Ada King", "ada@example.com", "N3w!password", expertise="ai")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertEqual(outcome["details"]["accountStatus"], "unverified")
        self.assertEqual(outcome["action"], "verify")
        self.user_dal.create_user.assert_not_awaited()
        self.user_dal.save_user.assert_awaited_once_with(existing)

        self.assertEqual(existing.full_name, "Ada King")
        self.assertEqual(existing.password_hash, "new-hash")
        self.assertEqual(existing.role, UserRole.PUBLISHER)
        self.assertEqual(existing.bio, "")
        self.assertEqual(existing.expertise, ["ai"])
        self.assertNotEqual(existing.email_verification_token, "old-token")

        self.mailer.send.assert_awaited_once()
        self.assertEqual(self.mailer.send.await_args.args[3],
                         UPDATED_ACCOUNT_SUBJECT)

    async def test_verification_email_failure_is_fatal(self):
        self.mailer.send.side_effect = EmailDeliveryError(
            "smtp down", TEMPLATE_EMAIL_VERIFICATION)

        with self.assertRaises(EmailDeliveryError):
            await self.service.register("Ada Lovelace", "ada@example.com",
                                        "Secr3t!pass")

    async def test_concurrent_duplicate_insert_propagates(self):
        self.user_dal.create_user.side_effect = \
            asyncpg.UniqueViolationError("duplicate key")

        with self.assertRaises(asyncpg.UniqueViolationError):
            await self.service.register("Ada Lovelace", "ada@example.com",
                                        "Secr3t!pass")
        self.mailer.send.assert_not_awaited()


class TestVerifyEmail(AccountDataServiceTestCase):

    async def test_unknown_or_expired_token(self):
        outcome = await self.service.verify_email("nope")

        self.assertEqual(outcome["status"], HTTPStatus.BAD_REQUEST)
        self.assertEqual(outcome["action"], "resend")
        self.user_dal.save_user.assert_not_awaited()

    async def test_token_is_consumed(self):
        user = make_user(is_email_verified=False,
                         email_verification_token="tok",
                         email_verification_expires=datetime.now(
                             timezone.utc) + timedelta(hours=1))
        self.user_dal.get_by_verification_token.return_value = user

        outcome = await self.service.verify_email("tok")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertTrue(user.is_email_verified)
        self.assertIsNone(user.email_verification_token)
        self.assertIsNone(user.email_verification_expires)
        self.user_dal.save_user.assert_awaited_once_with(user)
        self.assertEqual(self.mailer.send.await_args.args[1],
                         TEMPLATE_WELCOME)
        self.assertEqual(self.mailer.send.await_args.args[2]["loginUrl"],
                         "https://journal.example/login")

    async def test_lookup_uses_current_time(self):
        await self.service.verify_email("tok")

        token, now = self.user_dal.get_by_verification_token.await_args.args
        self.assertEqual(token, "tok")
        self.assertLess(abs(datetime.now(timezone.utc) - now),
                        timedelta(seconds=5))

    async def test_welcome_failure_keeps_verification(self):
        user = make_user(is_email_verified=False,
                         email_verification_token="tok")
        self.user_dal.get_by_verification_token.return_value = user
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        outcome = await self.service.verify_email("tok")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertTrue(user.is_email_verified)
        self.user_dal.save_user.assert_awaited_once()


class TestResendVerification(AccountDataServiceTestCase):

    async def test_unknown_email(self):
        outcome = await self.service.resend_verification("who@example.com")

        self.assertEqual(outcome["status"], HTTPStatus.NOT_FOUND)
        self.mailer.send.assert_not_awaited()

    async def test_already_verified(self):
        self.user_dal.get_by_email.return_value = make_user()

        outcome = await self.service.resend_verification("ada@example.com")

        self.assertEqual(outcome["status"], HTTPStatus.BAD_REQUEST)
        self.assertEqual(outcome["action"], "login")
        self.mailer.send.assert_not_awaited()

    async def test_new_token_is_issued_and_sent(self):
        user = make_user(is_email_verified=False,
                         email_verification_token="old-token")
        self.user_dal.get_by_email.return_value = user

        outcome = await self.service.resend_verification("ada@example.com")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertNotEqual(user.email_verification_token, "old-token")
        self.user_dal.save_user.assert_awaited_once_with(user)
        self.assertEqual(self.mailer.send.await_args.args[3], RESEND_SUBJECT)

    async def test_send_failure_is_fatal(self):
        self.user_dal.get_by_email.return_value = make_user(
            is_email_verified=False)
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        with self.assertRaises(EmailDeliveryError):
            await self.service.resend_verification("ada@example.com")


class TestLogin(AccountDataServiceTestCase):

    async def test_unknown_email_and_wrong_password_look_the_same(self):
        unknown = await self.service.login("who@example.com", "whatever")

        self.user_dal.get_by_email.return_value = make_user()
        self.password_hasher.verify.return_value = False
        wrong = await self.service.login("ada@example.com", "whatever")

        self.assertEqual(unknown, wrong)
        self.assertEqual(unknown["status"], HTTPStatus.UNAUTHORIZED)
        self.assertEqual(unknown["message"], INVALID_CREDENTIALS_MESSAGE)
        self.assertEqual(unknown["action"], "retry")
        self.token_issuer.issue.assert_not_called()

    async def test_unknown_email_still_runs_a_password_compare(self):
        await self.service.login("who@example.com", "whatever")

        self.password_hasher.verify_dummy.assert_awaited_once_with("whatever")
        self.password_hasher.verify.assert_not_awaited()

    async def test_known_email_skips_dummy_compare(self):
        self.user_dal.get_by_email.return_value = make_user()

        await self.service.login("ada@example.com", "Secr3t!pass")

        self.password_hasher.verify_dummy.assert_not_awaited()

    async def test_unverified_account(self):
        self.user_dal.get_by_email.return_value = make_user(
            is_email_verified=False)

        outcome = await self.service.login("ada@example.com", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.UNAUTHORIZED)
        self.assertEqual(outcome["action"], "verify")
        self.assertEqual(outcome["email"], "ada@example.com")

    async def test_unverified_account_with_wrong_password(self):
        self.user_dal.get_by_email.return_value = make_user(
            is_email_verified=False)
        self.password_hasher.verify.return_value = False

        outcome = await self.service.login("ada@example.com", "wrong-pass")

        self.assertEqual(outcome["action"], "retry")
        self.assertNotIn("email", outcome)

    async def test_inactive_account(self):
        self.user_dal.get_by_email.return_value = make_user(is_active=False)

        outcome = await self.service.login("ada@example.com", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.UNAUTHORIZED)
        self.assertEqual(outcome["action"], "contact")

    async def test_success_returns_token_and_public_user(self):
        user = make_user()
        self.user_dal.get_by_email.return_value = user

        outcome = await self.service.login(" ADA@example.com", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertEqual(outcome["token"], "signed-jwt")
        self.token_issuer.issue.assert_called_once_with(user.id)
        self.password_hasher.verify.assert_awaited_once_with("Secr3t!pass",
                                                             "stored-hash")
        self.assertIsNotNone(user.last_login)
        self.user_dal.save_user.assert_awaited_once_with(user)

        self.assertEqual(outcome["user"]["email"], "ada@example.com")
        self.assertNotIn("password_hash", outcome["user"])
        self.assertNotIn("passwordHash", outcome["user"])
        self.assertEqual(self.mailer.send.await_args.args[1],
                         TEMPLATE_LOGIN_WELCOME)

    async def test_login_email_failure_does_not_block_login(self):
        self.user_dal.get_by_email.return_value = make_user()
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        outcome = await self.service.login("ada@example.com", "Secr3t!pass")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertEqual(outcome["token"], "signed-jwt")


class TestForgotPassword(AccountDataServiceTestCase):

    async def _forgot(self, user, send_error=None) -> dict:
        self.user_dal.get_by_email.return_value = user
        self.mailer.send.side_effect = send_error
        return await self.service.forgot_password("ada@example.com")

    async def test_response_is_uniform(self):
        outcomes = [
            await self._forgot(None),
            await self._forgot(make_user(is_email_verified=False)),
            await self._forgot(make_user()),
            await self._forgot(make_user(),
                               EmailDeliveryError("smtp down")),
        ]

        expected = {"success": True, "message": FORGOT_PASSWORD_MESSAGE,
                    "status": HTTPStatus.OK}
        for outcome in outcomes:
            self.assertEqual(outcome, expected)

    async def test_verified_account_receives_reset_link(self):
        user = make_user()
        before = datetime.now(timezone.utc)

        await self._forgot(user)

        self.assertEqual(len(user.reset_password_token), 64)
        self.assertGreaterEqual(user.reset_password_expires,
                                before + timedelta(hours=1))
        to, template, data, _ = self.mailer.send.await_args.args
        self.assertEqual(to, "ada@example.com")
        self.assertEqual(template, TEMPLATE_PASSWORD_RESET)
        self.assertEqual(
            data["resetUrl"],
            "https://journal.example/reset-password?token="
            f"{user.reset_password_token}")

    async def test_unverified_account_gets_no_email(self):
        await self._forgot(make_user(is_email_verified=False))

        self.mailer.send.assert_not_awaited()
        self.user_dal.save_user.assert_not_awaited()

    async def test_send_failure_clears_reset_token(self):
        user = make_user()

        await self._forgot(user, EmailDeliveryError("smtp down"))

        self.assertIsNone(user.reset_password_token)
        self.assertIsNone(user.reset_password_expires)
        self.assertEqual(self.user_dal.save_user.await_count, 2)

    async def test_internal_errors_are_not_surfaced(self):
        self.user_dal.get_by_email.side_effect = \
            asyncpg.PostgresError("boom")

        outcome = await self.service.forgot_password("ada@example.com")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertEqual(outcome["message"], FORGOT_PASSWORD_MESSAGE)
        self.assertNotIn("debug", outcome)

    async def test_debug_details_in_development(self):
        self.collaborators.debug = True
        user = make_user()

        outcome = await self._forgot(user)

        self.assertEqual(outcome["debug"]["emailSentTo"], "ada@example.com")
        self.assertEqual(outcome["debug"]["resetToken"],
                         user.reset_password_token)

    async def test_debug_details_report_send_failure(self):
        self.collaborators.debug = True

        outcome = await self._forgot(make_user(),
                                     EmailDeliveryError("smtp down"))

        self.assertEqual(outcome["debug"]["error"], "EMAIL_SEND_ERROR")
        self.assertEqual(outcome["message"], FORGOT_PASSWORD_MESSAGE)

    async def test_debug_details_report_server_error(self):
        self.collaborators.debug = True
        self.user_dal.get_by_email.side_effect = \
            asyncpg.PostgresError("boom")

        outcome = await self.service.forgot_password("ada@example.com")

        self.assertEqual(outcome["debug"]["error"], "SERVER_ERROR")


class TestResetPassword(AccountDataServiceTestCase):

    async def test_invalid_token(self):
        outcome = await self.service.reset_password("nope", "N3w!password")

        self.assertEqual(outcome["status"], HTTPStatus.BAD_REQUEST)
        self.assertEqual(outcome["action"], "forgot")
        self.password_hasher.hash.assert_not_awaited()

    async def test_lookup_uses_current_time(self):
        await self.service.reset_password("tok", "N3w!password")

        token, now = self.user_dal.get_by_reset_token.await_args.args
        self.assertEqual(token, "tok")
        self.assertLess(abs(datetime.now(timezone.utc) - now),
                        timedelta(seconds=5))

    async def test_password_is_rehashed_and_token_consumed(self):
        user = make_user(reset_password_token="tok",
                         reset_password_expires=datetime.now(timezone.utc))
        self.user_dal.get_by_reset_token.return_value = user

        outcome = await self.service.reset_password("tok", "N3w!password")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.password_hasher.hash.assert_awaited_once_with("N3w!password")
        self.assertEqual(user.password_hash, "new-hash")
        self.assertIsNone(user.reset_password_token)
        self.assertIsNone(user.reset_password_expires)
        self.user_dal.save_user.assert_awaited_once_with(user)
        self.assertEqual(self.mailer.send.await_args.args[1],
                         TEMPLATE_PASSWORD_CHANGED)

    async def test_confirmation_email_is_best_effort(self):
        self.user_dal.get_by_reset_token.return_value = make_user()
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        outcome = await self.service.reset_password("tok", "N3w!password")

        self.assertEqual(outcome["status"], HTTPStatus.OK)


class TestUpdateProfile(AccountDataServiceTestCase):

    async def test_only_supplied_fields_change(self):
        user = make_user(bio="Mathematician", expertise=["engines"])

        outcome = await self.service.update_profile(user,
                                                    full_name="Ada King")

        self.assertEqual(outcome["status"], HTTPStatus.OK)
        self.assertEqual(user.full_name, "Ada King")
        self.assertEqual(user.bio, "Mathematician")
        self.assertEqual(user.expertise, ["engines"])
        self.assertEqual(outcome["user"]["fullName"], "Ada King")
        self.user_dal.save_user.assert_awaited_once_with(user)
        self.password_hasher.hash.assert_not_awaited()

    async def test_explicit_nulls_clear_fields(self):
        user = make_user(bio="Mathematician", expertise=["engines"])

        await self.service.update_profile(user, bio=None, expertise=None)

        self.assertEqual(user.bio, "")
        self.assertEqual(user.expertise, [])

    async def test_expertise_is_normalised(self):
        user = make_user()

        await self.service.update_profile(user, expertise=" a ,, b ")

        self.assertEqual(user.expertise, ["a", "b"])


class TestDispatchEmail(AccountDataServiceTestCase):

    async def test_best_effort_failure_returns_false(self):
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        sent = await self.service._dispatch_email(
            make_user(), TEMPLATE_WELCOME, {}, EmailPolicy.BEST_EFFORT)

        self.assertFalse(sent)

    async def test_fatal_failure_raises(self):
        self.mailer.send.side_effect = EmailDeliveryError("smtp down")

        with self.assertRaises(EmailDeliveryError):
            await self.service._dispatch_email(
                make_user(), TEMPLATE_WELCOME, {}, EmailPolicy.FATAL)

    async def test_full_name_is_always_passed(self):
        sent = await self.service._dispatch_email(
            make_user(), TEMPLATE_WELCOME, {"loginUrl": "x"},
            EmailPolicy.FATAL)

        self.assertTrue(sent)
        self.mailer.send.assert_awaited_once_with(
            "ada@example.com", TEMPLATE_WELCOME,
            {"fullName": "Ada Lovelace", "loginUrl": "x"}, None)


if __name__ == "__main__":
    unittest.main()
