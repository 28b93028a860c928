"""
Issues Domain Layer
===================

Entities for the issues module. No infrastructure dependencies.
"""

from buganizer.issues.domain.entities import Attachment, Comment, Issue

__all__ = [
    "Issue",
    "Comment",
    "Attachment",
]
