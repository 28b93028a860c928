"""
Infrastructure Layer
=====================

Low-level technical concerns shared by every module:
- Logging setup
- Slack webhook client
"""
