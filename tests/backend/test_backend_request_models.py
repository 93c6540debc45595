import unittest
from pydantic import ValidationError
from journalise_common.base_api_view import BaseApiView
from journalise_backend.api.request_models import (EmailRequest,
                                                   LoginRequest,
                                                   PasswordResetRequest,
                                                   RegisterRequest,
                                                   UpdateProfileRequest,
                                                   WEAK_PASSWORD_MESSAGE)

VALID_REGISTRATION = {
    "fullName": "  Ada Lovelace ",
    "email": " Ada@Example.com ",
    "password": "Secr3t!pass",
    "confirmPassword": "Secr3t!pass",
}


def field_errors(model, body: dict) -> list[dict]:
    try:
        model(**body)
    except ValidationError as ex:
        return BaseApiView.validation_errors(ex)
    raise AssertionError(f"{model.__name__} accepted {body}")


class TestRegisterRequest(unittest.TestCase):

    def test_valid_body_is_normalised(self):
        req = RegisterRequest(**VALID_REGISTRATION)

        self.assertEqual(req.full_name, "Ada Lovelace")
        self.assertEqual(req.email, "ada@example.com")
        self.assertIsNone(req.role)
        self.assertIsNone(req.bio)

    def test_empty_body_reports_every_required_field(self):
        errors = field_errors(RegisterRequest, {})

        self.assertEqual(errors, [
            {"field": "fullName", "message": "Full name is required"},
            {"field": "email", "message": "Email address is required"},
            {"field": "password", "message": "Password is required"},
            {"field": "confirmPassword",
             "message": "Please confirm your password"},
        ])

    def test_full_name_rules(self):
        cases = {
            "A": "Full name must be at least 2 characters long",
            "A" * 51: "Full name cannot exceed 50 characters",
            "Ada 2nd": ("Full name can only contain letters, spaces, "
                        "hyphens, and apostrophes"),
        }
        for name, message in cases.items():
            errors = field_errors(RegisterRequest,
                                  {**VALID_REGISTRATION, "fullName": name})
            self.assertEqual(errors, [{"field": "fullName",
                                       "message": message}], name)

    def test_hyphens_and_apostrophes_are_allowed(self):
        req = RegisterRequest(**{**VALID_REGISTRATION,
                                 "fullName": "Mary-Jane O'Neil"})
        self.assertEqual(req.full_name, "Mary-Jane O'Neil")

    def test_invalid_and_overlong_email(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "email": "not-an-email"})
        self.assertEqual(errors[0]["message"],
                         "Please provide a valid email address")

        long_email = f"{'a' * 64}@{'b' * 40}.example.com"
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "email": long_email})
        self.assertEqual(errors[0]["message"], "Email address is too long")

    def test_password_strength(self):
        cases = {
            "Sh0rt!": "Password must be at least 8 characters long",
            "alllowercase1!": WEAK_PASSWORD_MESSAGE,
            "NoDigits!!": WEAK_PASSWORD_MESSAGE,
            "NoSpecial123": WEAK_PASSWORD_MESSAGE,
            "Aa1!" + "x" * 125: "Password is too long (max 128 characters)",
        }
        for password, message in cases.items():
            errors = field_errors(RegisterRequest,
                                  {**VALID_REGISTRATION,
                                   "password": password,
                                   "confirmPassword": password})
            self.assertEqual(errors, [{"field": "password",
                                       "message": message}], password)

    def test_password_mismatch(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION,
                               "confirmPassword": "Other!pass1"})
        self.assertEqual(errors, [{"field": "confirmPassword",
                                   "message": "Passwords do not match"}])

    def test_mismatch_reported_alongside_weak_password(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION,
                               "password": "weak",
                               "confirmPassword": "other"})
        self.assertEqual(errors, [
            {"field": "password",
             "message": "Password must be at least 8 characters long"},
            {"field": "confirmPassword",
             "message": "Passwords do not match"},
        ])

    def test_submitted_password_is_not_client_settable(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION,
                               "submitted_password": "Other!pass1",
                               "confirmPassword": "Other!pass1"})
        self.assertEqual(errors, [{"field": "confirmPassword",
                                   "message": "Passwords do not match"}])

    def test_role_must_be_known(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "role": "editor"})
        self.assertEqual(errors[0]["field"], "role")

        req = RegisterRequest(**{**VALID_REGISTRATION, "role": "reviewer"})
        self.assertEqual(req.role, "reviewer")

    def test_bio_length(self):
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "bio": "x" * 501})
        self.assertEqual(errors, [{"field": "bio",
                                   "message": "Bio cannot exceed 500 "
                                              "characters"}])

    def test_expertise_limits(self):
        too_many = ",".join(f"topic{i}" for i in range(11))
        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "expertise": too_many})
        self.assertEqual(errors[0]["message"],
                         "Cannot have more than 10 expertise areas")

        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION,
                               "expertise": ["ok", "x" * 51]})
        self.assertEqual(errors[0]["message"],
                         "Expertise item 2 is too long (max 50 characters)")

        errors = field_errors(RegisterRequest,
                              {**VALID_REGISTRATION, "expertise": ["ok", " "]})
        self.assertEqual(errors[0]["message"], "Expertise item 2 is invalid")

    def test_expertise_string_keeps_raw_value(self):
        req = RegisterRequest(**{**VALID_REGISTRATION,
                                 "expertise": "ml, nlp, nlp, "})
        self.assertEqual(req.expertise, "ml, nlp, nlp, ")

    def test_all_errors_are_collected(self):
        errors = field_errors(RegisterRequest, {
            "fullName": "A",
            "email": "bad",
            "password": "weak",
            "confirmPassword": "weak",
            "bio": "x" * 600,
        })
        self.assertEqual([error["field"] for error in errors],
                         ["fullName", "email", "password", "bio"])


class TestLoginRequest(unittest.TestCase):

    def test_valid(self):
        req = LoginRequest(email="ADA@example.com", password="secret")
        self.assertEqual(req.email, "ada@example.com")

    def test_password_minimum(self):
        errors = field_errors(LoginRequest, {"email": "ada@example.com",
                                             "password": "12345"})
        self.assertEqual(errors, [{"field": "password",
                                   "message": "Password is too short"}])

    def test_missing_fields(self):
        errors = field_errors(LoginRequest, {})
        self.assertEqual([error["field"] for error in errors],
                         ["email", "password"])


class TestEmailRequest(unittest.TestCase):

    def test_non_string_email(self):
        errors = field_errors(EmailRequest, {"email": 42})
        self.assertEqual(errors, [{"field": "email",
                                   "message": "Email address is required"}])


class TestPasswordResetRequest(unittest.TestCase):

    def test_messages(self):
        errors = field_errors(PasswordResetRequest, {})
        self.assertEqual(errors, [
            {"field": "password", "message": "New password is required"},
            {"field": "confirmPassword",
             "message": "Please confirm your new password"},
        ])

    def test_mismatch_with_invalid_password(self):
        errors = field_errors(PasswordResetRequest,
                              {"password": "nouppercase1!",
                               "confirmPassword": "N3w!password"})
        self.assertEqual(errors, [
            {"field": "password", "message": WEAK_PASSWORD_MESSAGE},
            {"field": "confirmPassword",
             "message": "Passwords do not match"},
        ])

    def test_valid(self):
        req = PasswordResetRequest(password="N3w!password",
                                   confirmPassword="N3w!password")
        self.assertEqual(req.password, "N3w!password")


class TestUpdateProfileRequest(unittest.TestCase):

    def test_only_supplied_fields_are_changes(self):
        req = UpdateProfileRequest(**{"bio": " New bio "})
        self.assertEqual(req.changes(), {"bio": "New bio"})

    def test_explicit_nulls_are_changes(self):
        req = UpdateProfileRequest(**{"bio": None, "expertise": None})
        self.assertEqual(req.changes(), {"bio": None, "expertise": None})

    def test_empty_full_name_rejected(self):
        errors = field_errors(UpdateProfileRequest, {"fullName": "  "})
        self.assertEqual(errors, [{"field": "fullName",
                                   "message": "Full name cannot be empty"}])

    def test_expertise_type(self):
        errors = field_errors(UpdateProfileRequest, {"expertise": 12})
        self.assertEqual(errors[0]["message"],
                         "Expertise must be a string or array")


if __name__ == "__main__":
    unittest.main()
