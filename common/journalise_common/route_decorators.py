"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""

# Attribute checked by the connection-acquire hook of the application.
NOT_USING_DB_ATTRIBUTE = "_not_using_db"


def route_not_using_db(func):
    """
    Mark a route handler as not needing a database connection.

    The ``before_request`` hook of the service looks for the attribute set
    here and skips acquiring a pooled connection for the request, so routes
    such as the health check keep answering while the database is down.

    Args:
        func (Callable): The route handler function to decorate.

    Returns:
        Callable: The same function with the marker attribute set.
    """
    setattr(func, NOT_USING_DB_ATTRIBUTE, True)
    return func


def is_route_using_db(func) -> bool:
    """
    Check whether a view function needs a database connection.

    Args:
        func (Callable | None): View function resolved for the request.

    Returns:
        bool: False only when the function was marked with
              ``route_not_using_db``.
    """
    return not getattr(func, NOT_USING_DB_ATTRIBUTE, False)
