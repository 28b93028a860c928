"""
Search Interfaces Layer
=======================

FastAPI route handlers for search and saved views.
"""

from buganizer.search.interfaces.controllers import router as search_router

__all__ = ["search_router"]
