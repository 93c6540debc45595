"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from journalise_backend.mailer import Mailer
from journalise_backend.security import PasswordHasher, TokenIssuer


@dataclass
class Collaborators:
    """
    Long lived handles built once at startup and shared by every request.

    Attributes:
        token_issuer (TokenIssuer): Signs and verifies bearer tokens.
        password_hasher (PasswordHasher): bcrypt hashing.
        mailer (Mailer): Template rendering and SMTP delivery.
        frontend_url (str): Base URL of the web front end, used in links.
        verification_token_lifetime (timedelta): Validity of a verification
                                                 token.
        reset_token_lifetime (timedelta): Validity of a reset token.
        debug (bool): Development mode, enables debug-only response fields.
        allowed_origins (list): Origins permitted by the CORS policy.
    """
    token_issuer: TokenIssuer
    password_hasher: PasswordHasher
    mailer: Mailer
    frontend_url: str
    verification_token_lifetime: timedelta = timedelta(hours=24)
    reset_token_lifetime: timedelta = timedelta(hours=1)
    debug: bool = False
    allowed_origins: list = field(default_factory=list)

    def frontend_link(self, path: str) -> str:
        """ Absolute front end URL for a path such as ``/login``. """
        return f"{self.frontend_url.rstrip('/')}/{path.lstrip('/')}"
