from http import HTTPStatus
import logging
import unittest
import asyncpg
from quart import Quart
from werkzeug.exceptions import MethodNotAllowed
from journalise_backend.error_handlers import (AVAILABLE_ROUTES,
                                               register_error_handlers,
                                               unique_violation_field)
from journalise_backend.exceptions import EmailDeliveryError


def _unique_violation(constraint=None, detail=None):
    error = asyncpg.UniqueViolationError("duplicate key value")
    error.constraint_name = constraint
    error.detail = detail
    return error


class TestUniqueViolationField(unittest.TestCase):

    def test_known_constraint(self):
        self.assertEqual(
            unique_violation_field(_unique_violation("ix_users_email_lower")),
            "email")

    def test_field_from_detail(self):
        error = _unique_violation(
            "ix_other", "Key (lower(email::text))=(a@b.c) already exists.")
        self.assertEqual(unique_violation_field(error), "email")

    def test_plain_column_detail(self):
        error = _unique_violation(None, "Key (id)=(42) already exists.")
        self.assertEqual(unique_violation_field(error), "id")

    def test_unknown(self):
        self.assertEqual(unique_violation_field(_unique_violation()), "value")


class TestErrorHandlers(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.app = Quart(__name__)
        logger = logging.getLogger("test_error_handlers")
        logger.addHandler(logging.NullHandler())
        register_error_handlers(self.app, logger)

        @self.app.route("/duplicate")
        async def duplicate():
            raise _unique_violation("ix_users_email_lower")

        @self.app.route("/email")
        async def email():
            raise EmailDeliveryError("smtp down", "welcome")

        @self.app.route("/boom")
        async def boom():
            raise RuntimeError("boom")

        @self.app.route("/method")
        async def method():
            raise MethodNotAllowed()

        self.client = self.app.test_client()

    async def test_unique_violation(self):
        response = await self.client.get("/duplicate")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertEqual(await response.get_json(),
                         {"success": False, "message": "email already exists"})

    async def test_email_delivery_error(self):
        response = await self.client.get("/email")

        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)
        body = await response.get_json()
        self.assertFalse(body["success"])
        self.assertEqual(body["action"], "retry")

    async def test_not_found(self):
        response = await self.client.get("/api/missing?x=1")

        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(await response.get_json(), {
            "success": False,
            "message": "Route not found",
            "requestedPath": "/api/missing?x=1",
            "availableRoutes": AVAILABLE_ROUTES})

    async def test_unhandled_error_is_generic(self):
        response = await self.client.get("/boom")

        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)
        self.assertEqual(await response.get_json(),
                         {"success": False,
                          "message": "Internal Server Error"})

    async def test_http_errors_keep_status(self):
        response = await self.client.get("/method")

        self.assertEqual(response.status_code, HTTPStatus.METHOD_NOT_ALLOWED)
        self.assertFalse((await response.get_json())["success"])


if __name__ == "__main__":
    unittest.main()
