"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""


class JournaliseError(Exception):
    """ Base class for errors raised by the backend. """


class EmailDeliveryError(JournaliseError):
    """ Raised when an email could not be rendered or delivered. """

    def __init__(self, message: str, template: str = ""):
        super().__init__(message)
        self.template = template


class EmailTemplateNotFoundError(EmailDeliveryError):
    """ Raised when a mail is requested for an unknown template name. """

    def __init__(self, template: str):
        super().__init__(f"Email template '{template}' not found", template)


class TokenError(JournaliseError):
    """ Base class for bearer token verification failures. """


class TokenExpiredError(TokenError):
    """ The token signature is valid but its expiry has passed. """


class TokenInvalidError(TokenError):
    """ The token is malformed, has a bad signature or lacks claims. """
