"""
Infrastructure Package
======================

Technical building blocks shared by the bounded contexts:
- database: async SQLAlchemy engine and session lifecycle
"""
