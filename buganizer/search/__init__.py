"""
Search Module
=============

Bounded context for the issue filter language.

Responsibilities:
- Parse filter strings such as ``is:open priority:P1 label:regression crash``
- Compile them into backend-neutral predicates with positional parameters
- Render predicates for SQLAlchemy, raw PostgreSQL and in-memory storage
- Issue search and saved views
"""

__version__ = "1.0.0"
