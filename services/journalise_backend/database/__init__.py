"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from .base import Base
from .user import User
from .schema import create_schema, schema_statements

__all__ = ["Base", "User", "create_schema", "schema_statements"]
