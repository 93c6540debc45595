"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from sqlalchemy import Column, DateTime, func


class CreatedUpdatedTimestampMixin:
    """
    SQLAlchemy mixin adding ``created_at`` / ``updated_at`` columns.

    Both are timezone aware and default to the database clock; the data
    access layer also sets them explicitly on insert and update.
    """
    # pylint: disable=too-few-public-methods
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(),
                        nullable=False)
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(),
                        nullable=False)
