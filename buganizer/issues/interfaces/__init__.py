"""
Issue Interfaces Layer
======================

FastAPI route handlers for the issues module.
"""

from buganizer.issues.interfaces.controllers import router as issues_router

__all__ = ["issues_router"]
