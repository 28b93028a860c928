"""
Issues Module
=============

Bounded context for issue tracking.

Responsibilities:
- Create, read, update and list issues
- Comments and attachment metadata
- Stamp new issues with an SLA due date
- Execute compiled filters against issue storage
- Notify Slack about issue lifecycle events
"""

__version__ = "1.0.0"
