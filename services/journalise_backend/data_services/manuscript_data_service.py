"""
Copyright (C) 2025  Journalise Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Journalise. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import time
from journalise_backend.user_account import UserAccount, UserRole


class ManuscriptDataService:
    """
    Placeholder manuscript service.

    Nothing is persisted: listings are fixed sample records whose status
    depends on the caller's role, and submissions are acknowledged with a
    timestamp based identifier.
    """

    def list_manuscripts(self, user: UserAccount) -> dict:
        is_publisher = user.role is UserRole.PUBLISHER

        manuscripts = [
            {
                "id": 1,
                "title": "Advanced React Patterns in Modern Web Development",
                "abstract": "This paper explores advanced React patterns...",
                "status": "published" if is_publisher else "pending_review",
                "submittedDate": "2024-01-15",
                "authors": ["John Doe", "Jane Smith"],
                "keywords": ["React", "Web Development", "JavaScript"],
                "category": "Computer Science",
            },
            {
                "id": 2,
                "title": "Machine Learning Applications in Healthcare",
                "abstract": "A comprehensive study on ML applications...",
                "status": "under_review" if is_publisher else "assigned",
                "submittedDate": "2024-01-20",
                "authors": ["Alice Johnson"],
                "keywords": ["Machine Learning", "Healthcare", "AI"],
                "category": "Medical Sciences",
            },
        ]

        return {
            "success": True,
            "manuscripts": manuscripts,
            "status": HTTPStatus.OK,
        }

    def submit_manuscript(self, user: UserAccount, manuscript: dict) -> dict:
        # pylint: disable=unused-argument
        return {
            "success": True,
            "manuscriptId": int(time.time() * 1000),
            "message": "Manuscript submitted successfully!",
            "status": HTTPStatus.CREATED,
        }

    def user_stats(self, user: UserAccount) -> dict:
        """ Aggregate counters for a user, all zero for now. """
        # pylint: disable=unused-argument
        return {
            "success": True,
            "stats": {
                "totalManuscripts": 0,
                "publishedManuscripts": 0,
                "underReview": 0,
                "totalReviews": 0,
                "completedReviews": 0,
                "pendingReviews": 0,
            },
            "status": HTTPStatus.OK,
        }
